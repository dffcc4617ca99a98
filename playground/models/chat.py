"""
Chat data models.
"""
from pydantic import BaseModel
from typing import List, Optional, Literal, Union

MessageRole = Literal["user", "assistant", "tool", "system"]


class ImageRef(BaseModel):
    url: str


class ContentPart(BaseModel):
    type: Literal["text", "image_url"]
    text: Optional[str] = None
    image_url: Optional[ImageRef] = None


MessageContent = Union[str, List[ContentPart]]


class Message(BaseModel):
    model_config = {"extra": "allow"}

    id: str
    role: MessageRole
    content: MessageContent
    timestamp: int
    # Set when the turn that produced this message failed mid-stream
    error: Optional[str] = None
    toolName: Optional[str] = None

    def text(self) -> str:
        """Plain-text view of the content, image parts dropped."""
        if isinstance(self.content, str):
            return self.content
        return "".join(part.text or "" for part in self.content if part.type == "text")


class Conversation(BaseModel):
    model_config = {"extra": "allow"}

    id: str
    title: str
    messages: List[Message] = []
    createdAt: int
    updatedAt: int
    providerId: Optional[str] = None
    modelId: Optional[str] = None
    systemPrompt: Optional[str] = None


class ConversationSummary(BaseModel):
    """Conversation without messages, for list views."""
    id: str
    title: str
    messageCount: int
    createdAt: int
    updatedAt: int
