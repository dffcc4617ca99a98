"""
Attachment classification and message content assembly.
"""
import base64
import mimetypes
import re
import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Union

from playground.models.attachment import AttachedFile, AttachmentKind
from playground.models.chat import ContentPart, ImageRef, MessageContent
from playground.utils.logging_utils import logger

TEXT_MIME_TYPES = {
    "application/json",
    "application/javascript",
    "application/typescript",
    "application/xml",
}

TEXT_EXTENSION_PATTERN = re.compile(
    r"\.(js|ts|tsx|jsx|py|md|csv|txt|yaml|yml|html|css|rs|go|java|cpp|c|sh|bash|sql)$"
)


def classify(name: str, mime_type: str) -> AttachmentKind:
    if mime_type.startswith("image/"):
        return "image"
    if mime_type == "application/pdf":
        return "pdf"
    if mime_type.startswith("audio/") or mime_type.startswith("video/"):
        return "audio"
    if mime_type.startswith("text/") or mime_type in TEXT_MIME_TYPES or TEXT_EXTENSION_PATTERN.search(name):
        return "text"
    return "unknown"


def placeholder_for(name: str, kind: AttachmentKind) -> str:
    if kind == "pdf":
        return f"[PDF: {name}] PDF text extraction is not available. Paste the text content instead."
    if kind == "audio":
        return f"[Audio file: {name}] Audio transcription is not available."
    return f"[File: {name}]"


def make_attachment(name: str, data: bytes, mime_type: Optional[str] = None) -> AttachedFile:
    """Build an AttachedFile from raw bytes."""
    if mime_type is None:
        mime_type = mimetypes.guess_type(name)[0] or "application/octet-stream"
    kind = classify(name, mime_type)

    content = None
    encoded = None
    if kind == "image":
        encoded = base64.b64encode(data).decode("ascii")
    elif kind == "text":
        content = data.decode("utf-8", errors="replace")
    else:
        content = placeholder_for(name, kind)

    return AttachedFile(
        id=uuid.uuid4().hex[:12],
        name=name,
        mimeType=mime_type,
        kind=kind,
        content=content,
        base64=encoded,
        size=len(data),
    )


def read_attachment(path: Union[str, Path]) -> AttachedFile:
    path = Path(path)
    data = path.read_bytes()
    attachment = make_attachment(path.name, data)
    logger.debug(f"Attached {path.name} as {attachment.kind} ({attachment.size} bytes)")
    return attachment


def build_message_content(text: str, attachments: Sequence[AttachedFile]) -> MessageContent:
    """
    Combine user text and attachments into message content.

    Plain string when nothing needs a separate part, otherwise ordered parts:
    the text first, then each attachment in attach order.
    """
    if not attachments:
        return text

    parts: List[ContentPart] = []
    if text:
        parts.append(ContentPart(type="text", text=text))

    for attachment in attachments:
        if attachment.kind == "image" and attachment.base64:
            url = f"data:{attachment.mimeType};base64,{attachment.base64}"
            parts.append(ContentPart(type="image_url", image_url=ImageRef(url=url)))
        elif attachment.kind == "text" and attachment.content is not None:
            block = (
                f"\n\n--- Attached: {attachment.name} ---\n"
                f"{attachment.content}\n"
                f"--- End of {attachment.name} ---"
            )
            parts.append(ContentPart(type="text", text=block))
        else:
            placeholder = attachment.content or placeholder_for(attachment.name, attachment.kind)
            parts.append(ContentPart(type="text", text=f"\n\n{placeholder}"))

    if len(parts) == 1 and parts[0].type == "text":
        return parts[0].text or text
    return parts
