"""
In-memory conversation store.

Message order is conversation order and is what gets re-sent to the
provider, so messages are only ever appended, except for the in-flight
assistant message whose content the pipeline grows in place.
"""
import time
import uuid
from typing import Dict, List, Optional

from playground.config.app_config import DEFAULT_CONVERSATION_TITLE, TITLE_MAX_LENGTH
from playground.models.chat import Conversation, ConversationSummary, Message, MessageContent, MessageRole
from playground.storage.starred import StarredStorage


def _now() -> int:
    return int(time.time() * 1000)


def new_message(role: MessageRole, content: MessageContent, **extra) -> Message:
    return Message(id=str(uuid.uuid4()), role=role, content=content, timestamp=_now(), **extra)


class ConversationStore:

    def __init__(self, starred: Optional[StarredStorage] = None):
        self._conversations: Dict[str, Conversation] = {}
        self.starred = starred

    def create(self, title: Optional[str] = None, providerId: Optional[str] = None,
               modelId: Optional[str] = None, systemPrompt: Optional[str] = None) -> Conversation:
        now = _now()
        conversation = Conversation(
            id=str(uuid.uuid4()),
            title=title or DEFAULT_CONVERSATION_TITLE,
            messages=[],
            createdAt=now,
            updatedAt=now,
            providerId=providerId,
            modelId=modelId,
            systemPrompt=systemPrompt,
        )
        self._conversations[conversation.id] = conversation
        return conversation

    def get(self, conversation_id: str) -> Optional[Conversation]:
        return self._conversations.get(conversation_id)

    def list(self) -> List[Conversation]:
        return sorted(self._conversations.values(), key=lambda c: c.updatedAt, reverse=True)

    def summaries(self) -> List[ConversationSummary]:
        return [
            ConversationSummary(
                id=c.id,
                title=c.title,
                messageCount=len(c.messages),
                createdAt=c.createdAt,
                updatedAt=c.updatedAt,
            )
            for c in self.list()
        ]

    def delete(self, conversation_id: str) -> bool:
        if self._conversations.pop(conversation_id, None) is None:
            return False
        if self.starred is not None:
            self.starred.forget_conversation(conversation_id)
        return True

    def rename(self, conversation_id: str, title: str) -> Optional[Conversation]:
        conversation = self.get(conversation_id)
        if conversation is None:
            return None
        conversation.title = title
        return conversation

    def append_message(self, conversation_id: str, message: Message) -> Optional[Message]:
        conversation = self.get(conversation_id)
        if conversation is None:
            return None
        # Auto-title from the first user message
        if not conversation.messages and message.role == "user" and conversation.title == DEFAULT_CONVERSATION_TITLE:
            text = message.content if isinstance(message.content, str) else ""
            conversation.title = text[:TITLE_MAX_LENGTH] or DEFAULT_CONVERSATION_TITLE
        conversation.messages.append(message)
        conversation.updatedAt = _now()
        return message

    def find_message(self, conversation_id: str, message_id: str) -> Optional[Message]:
        conversation = self.get(conversation_id)
        if conversation is None:
            return None
        for message in conversation.messages:
            if message.id == message_id:
                return message
        return None

    def update_message(self, conversation_id: str, message_id: str,
                       content: Optional[MessageContent] = None, error: Optional[str] = None) -> Optional[Message]:
        message = self.find_message(conversation_id, message_id)
        if message is None:
            return None
        if content is not None:
            message.content = content
        if error is not None:
            message.error = error
        self._conversations[conversation_id].updatedAt = _now()
        return message

    def delete_message(self, conversation_id: str, message_id: str) -> bool:
        conversation = self.get(conversation_id)
        if conversation is None:
            return False
        remaining = [m for m in conversation.messages if m.id != message_id]
        if len(remaining) == len(conversation.messages):
            return False
        conversation.messages = remaining
        conversation.updatedAt = _now()
        return True

    def delete_messages_after(self, conversation_id: str, message_id: str) -> int:
        """Drop every message after message_id. Returns how many were removed."""
        conversation = self.get(conversation_id)
        if conversation is None:
            return 0
        for index, message in enumerate(conversation.messages):
            if message.id == message_id:
                removed = len(conversation.messages) - index - 1
                conversation.messages = conversation.messages[:index + 1]
                conversation.updatedAt = _now()
                return removed
        return 0

    def clear(self, conversation_id: str) -> bool:
        conversation = self.get(conversation_id)
        if conversation is None:
            return False
        conversation.messages = []
        conversation.updatedAt = _now()
        return True

    def fork(self, conversation_id: str, from_message_id: Optional[str] = None) -> Optional[Conversation]:
        """
        Copy a conversation up to and including from_message_id.

        Unknown or missing from_message_id copies the whole conversation.
        Forked messages get fresh ids.
        """
        source = self.get(conversation_id)
        if source is None:
            return None
        messages = list(source.messages)
        for index, message in enumerate(messages):
            if message.id == from_message_id:
                messages = messages[:index + 1]
                break

        now = _now()
        forked = source.model_copy(update={
            "id": str(uuid.uuid4()),
            "title": f"Fork: {source.title}",
            "createdAt": now,
            "updatedAt": now,
            "messages": [m.model_copy(update={"id": str(uuid.uuid4())}, deep=True) for m in messages],
        })
        self._conversations[forked.id] = forked
        return forked

    def starred_messages(self, conversation_id: str) -> List[Message]:
        conversation = self.get(conversation_id)
        if conversation is None or self.starred is None:
            return []
        ids = set(self.starred.starred(conversation_id, (m.id for m in conversation.messages)))
        return [m for m in conversation.messages if m.id in ids]
