"""
Conversation API endpoints.
"""
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from typing import List, Optional

from ..context import PlaygroundContext
from ..models.chat import Conversation, ConversationSummary, Message
from .dependencies import get_context, require_conversation

router = APIRouter(tags=["conversations"])


class ConversationCreate(BaseModel):
    title: Optional[str] = None


class ConversationRename(BaseModel):
    title: str


class ForkRequest(BaseModel):
    fromMessageId: Optional[str] = None


@router.get("/api/conversations", response_model=List[ConversationSummary])
async def list_conversations(context: PlaygroundContext = Depends(get_context)):
    return context.conversations.summaries()


@router.post("/api/conversations", response_model=Conversation)
async def create_conversation(data: ConversationCreate, context: PlaygroundContext = Depends(get_context)):
    settings = context.settings
    return context.conversations.create(
        title=data.title,
        providerId=settings.selectedProviderId,
        modelId=settings.selectedModelId,
        systemPrompt=settings.systemPrompt or None,
    )


@router.get("/api/conversations/{conversation_id}", response_model=Conversation)
async def get_conversation(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    return require_conversation(context, conversation_id)


@router.patch("/api/conversations/{conversation_id}", response_model=Conversation)
async def rename_conversation(conversation_id: str, data: ConversationRename,
                              context: PlaygroundContext = Depends(get_context)):
    conversation = context.conversations.rename(conversation_id, data.title)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


@router.delete("/api/conversations/{conversation_id}")
async def delete_conversation(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    context.drop_session(conversation_id)
    if not context.conversations.delete(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"deleted": True}


@router.post("/api/conversations/{conversation_id}/fork", response_model=Conversation)
async def fork_conversation(conversation_id: str, data: ForkRequest,
                            context: PlaygroundContext = Depends(get_context)):
    forked = context.conversations.fork(conversation_id, data.fromMessageId)
    if forked is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return forked


@router.post("/api/conversations/{conversation_id}/clear")
async def clear_conversation(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    if not context.conversations.clear(conversation_id):
        raise HTTPException(status_code=404, detail="Conversation not found")
    return {"cleared": True}


@router.delete("/api/conversations/{conversation_id}/messages/{message_id}")
async def delete_message(conversation_id: str, message_id: str,
                         context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    if not context.conversations.delete_message(conversation_id, message_id):
        raise HTTPException(status_code=404, detail="Message not found")
    return {"deleted": True}


@router.post("/api/conversations/{conversation_id}/messages/{message_id}/truncate")
async def delete_messages_after(conversation_id: str, message_id: str,
                                context: PlaygroundContext = Depends(get_context)):
    """Remove every message after the given one."""
    require_conversation(context, conversation_id)
    return {"removed": context.conversations.delete_messages_after(conversation_id, message_id)}


# Starred messages

@router.get("/api/conversations/{conversation_id}/starred", response_model=List[Message])
async def list_starred(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    return context.conversations.starred_messages(conversation_id)


@router.put("/api/conversations/{conversation_id}/messages/{message_id}/star")
async def star_message(conversation_id: str, message_id: str, context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    if context.conversations.find_message(conversation_id, message_id) is None:
        raise HTTPException(status_code=404, detail="Message not found")
    context.starred.star(conversation_id, message_id)
    return {"starred": True}


@router.delete("/api/conversations/{conversation_id}/messages/{message_id}/star")
async def unstar_message(conversation_id: str, message_id: str, context: PlaygroundContext = Depends(get_context)):
    context.starred.unstar(conversation_id, message_id)
    return {"starred": False}
