"""
Artifact detection.

An explicit <artifact type="..." title="..."> span wins outright. Otherwise
fenced code blocks in allow-listed languages compete by priority and the
highest priority block is surfaced.
"""
import re
from typing import Optional

from playground.models.parsed import Artifact

ARTIFACT_TAG_PATTERN = re.compile(
    r'<artifact\s+type="([^"]+)"(?:\s+title="([^"]+)")?[^>]*>([\s\S]*?)</artifact>'
)
FENCE_PATTERN = re.compile(r"```(\w+)\r?\n([\s\S]*?)```")

FENCE_TYPES = {
    "html": "html",
    "jsx": "react",
    "tsx": "react",
    "svg": "svg",
    "mermaid": "mermaid",
    "python": "python",
    "csv": "csv",
    "json": "json",
}

ARTIFACT_PRIORITY = {
    "react": 10,
    "html": 9,
    "svg": 8,
    "mermaid": 7,
    "python": 6,
    "csv": 5,
    "json": 4,
}


def detect_artifact(text: str) -> Optional[Artifact]:
    if not text:
        return None

    tagged = ARTIFACT_TAG_PATTERN.search(text)
    if tagged:
        declared = tagged.group(1)
        return Artifact(
            type=declared if declared in ARTIFACT_PRIORITY else None,
            code=tagged.group(3).strip(),
            language=declared,
            title=tagged.group(2),
        )

    best: Optional[Artifact] = None
    for match in FENCE_PATTERN.finditer(text):
        language = match.group(1).lower()
        artifact_type = FENCE_TYPES.get(language)
        if artifact_type is None:
            continue
        # Strictly greater, so equal types keep the earlier block
        if best is None or ARTIFACT_PRIORITY[artifact_type] > ARTIFACT_PRIORITY[best.type]:
            best = Artifact(type=artifact_type, code=match.group(2).strip(), language=language)
    return best
