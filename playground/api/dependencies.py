"""
Request-scoped access to the application root scope.
"""
import json
from typing import Any

from fastapi import HTTPException, Request

from ..context import PlaygroundContext
from ..models.chat import Conversation


def get_context(request: Request) -> PlaygroundContext:
    return request.app.state.context


def require_conversation(context: PlaygroundContext, conversation_id: str) -> Conversation:
    conversation = context.conversations.get(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=404, detail="Conversation not found")
    return conversation


def sse_line(payload: Any) -> str:
    return f"data: {json.dumps(payload)}\n\n"


SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}
