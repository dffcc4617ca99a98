"""
Extraction of embedded sub-protocols from assistant text.
"""
from .inline import parse_message
from .thinking import parse_thinking
from .tool_elicit import extract_tool_requests
from .artifacts import detect_artifact

__all__ = ['parse_message', 'parse_thinking', 'extract_tool_requests', 'detect_artifact']
