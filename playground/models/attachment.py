"""
Attached file model.
"""
from pydantic import BaseModel
from typing import Literal, Optional

AttachmentKind = Literal["image", "text", "pdf", "audio", "unknown"]


class AttachedFile(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: str
    mimeType: str
    kind: AttachmentKind
    content: Optional[str] = None  # inline text or placeholder
    base64: Optional[str] = None  # images only
    size: int
