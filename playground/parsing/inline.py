"""
Combined parse of an assistant message.

Runs the three grammars independently over the same text; none of them
knows about the others, so a tool_elicit block inside a reasoning block is
still extracted.
"""
from playground.models.parsed import ParsedMessage

from .artifacts import detect_artifact
from .thinking import parse_thinking
from .tool_elicit import extract_tool_requests


def parse_message(text: str, streaming: bool = False) -> ParsedMessage:
    return ParsedMessage(
        segments=parse_thinking(text, streaming=streaming),
        tool_requests=extract_tool_requests(text),
        artifact=detect_artifact(text),
    )
