"""
Reasoning block scanner.

Splits text into alternating prose and reasoning segments delimited by
<thinking>...</thinking> or <think>...</think>. Tag names are matched
case-insensitively and each opener only closes on its own closer.

The scanner is stateless and is re-run over the whole buffer on every
delta, so tags split across deltas are handled without special casing.
"""
import re
from typing import List

from playground.models.parsed import Segment

_OPEN_TAG = re.compile(r"<(thinking|think)>", re.IGNORECASE)
_OPENERS = ("<thinking>", "<think>")


def _close_tag(name: str) -> re.Pattern:
    return re.compile(rf"</{name}>", re.IGNORECASE)


def _partial_suffix(text: str, candidates) -> int:
    """Length of the longest proper prefix of any candidate that ends text."""
    lowered = text.lower()
    best = 0
    for candidate in candidates:
        for size in range(min(len(candidate) - 1, len(lowered)), best, -1):
            if lowered.endswith(candidate[:size]):
                best = size
                break
    return best


def parse_thinking(text: str, streaming: bool = False, strip: bool = True) -> List[Segment]:
    """
    Split text into text/thinking segments in document order.

    Args:
        text: The full accumulated text.
        streaming: True while deltas are still arriving. An unclosed block
            is then reported as incomplete and a partial tag at the very end
            is held back instead of leaking into visible text.
        strip: Trim segment content and drop empty segments. With
            strip=False, joining the segment contents reproduces the text
            with the tags removed.
    """
    raw: List[Segment] = []
    pos = 0

    while pos <= len(text):
        opening = _OPEN_TAG.search(text, pos)
        if opening is None:
            tail = text[pos:]
            if streaming:
                held = _partial_suffix(tail, _OPENERS)
                if held:
                    tail = tail[:-held]
            raw.append(Segment(kind="text", content=tail))
            break

        raw.append(Segment(kind="text", content=text[pos:opening.start()]))
        name = opening.group(1).lower()
        closing = _close_tag(name).search(text, opening.end())

        if closing is None:
            body = text[opening.end():]
            if streaming:
                held = _partial_suffix(body, (f"</{name}>",))
                if held:
                    body = body[:-held]
            raw.append(Segment(kind="thinking", content=body, complete=not streaming))
            break

        raw.append(Segment(kind="thinking", content=text[opening.end():closing.start()]))
        pos = closing.end()

    segments = []
    for segment in raw:
        content = segment.content.strip() if strip else segment.content
        if content or (segment.kind == "thinking" and not segment.complete):
            segments.append(segment.model_copy(update={"content": content}))
    return segments


def strip_thinking(text: str) -> str:
    """Visible text only, reasoning removed."""
    return "\n\n".join(s.content for s in parse_thinking(text) if s.kind == "text")
