"""
Structured views extracted from assistant text.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional

ArtifactType = Literal["html", "react", "svg", "mermaid", "python", "csv", "json"]


class Segment(BaseModel):
    kind: Literal["text", "thinking"]
    content: str
    # False while a reasoning block is still open in a live stream
    complete: bool = True


class ToolElicitRequest(BaseModel):
    tool: str
    params: Dict[str, Any] = {}
    reason: Optional[str] = None


class Artifact(BaseModel):
    type: Optional[ArtifactType] = None
    code: str
    language: str
    title: Optional[str] = None


class ParsedMessage(BaseModel):
    segments: List[Segment] = []
    tool_requests: List[ToolElicitRequest] = []
    artifact: Optional[Artifact] = None
