"""
Turn endpoints.

A turn is streamed back as server-sent events, one `data: {json}` line per
pipeline event, ending with the `done` event.
"""
import asyncio
import base64
import binascii
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from starlette.responses import StreamingResponse

from ..context import PlaygroundContext
from ..models.attachment import AttachedFile
from ..models.events import TurnEvent, TurnResult
from ..models.tool import ToolResult
from ..services.attachments import make_attachment
from ..streaming.dispatch import submit_turn
from ..utils.logging_utils import logger
from .dependencies import SSE_HEADERS, get_context, require_conversation, sse_line

router = APIRouter(tags=["turns"])


class AttachmentUpload(BaseModel):
    name: str
    mimeType: Optional[str] = None
    data: str  # base64


class TurnRequest(BaseModel):
    text: str = ""
    attachments: List[AttachmentUpload] = []


class ToolRunRequest(BaseModel):
    params: Dict[str, Any] = {}


def _decode_attachments(uploads: List[AttachmentUpload]) -> List[AttachedFile]:
    attachments = []
    for upload in uploads:
        try:
            data = base64.b64decode(upload.data, validate=True)
        except binascii.Error:
            raise HTTPException(status_code=400, detail=f"Attachment {upload.name} is not valid base64")
        attachments.append(make_attachment(upload.name, data, upload.mimeType))
    return attachments


def start_turn_task(context: PlaygroundContext, conversation_id: str,
                    run: Callable[[Callable[[TurnEvent], None]], Awaitable[TurnResult]]):
    """
    Reserve the conversation's session and start the turn right away.

    The reservation is taken before the response is returned, so a second
    request for the same conversation gets a 409 even if this turn has not
    left IDLE yet.
    """
    session = context.session_for(conversation_id)
    if not session.reserve():
        raise HTTPException(status_code=409, detail="A turn is already running for this conversation")
    queue: asyncio.Queue = asyncio.Queue()

    async def guarded() -> TurnResult:
        try:
            return await run(queue.put_nowait)
        finally:
            session.release()

    return queue, asyncio.ensure_future(guarded())


async def stream_turn(context: PlaygroundContext, conversation_id: str,
                      queue: asyncio.Queue, task: asyncio.Future) -> AsyncIterator[str]:
    """Relay the events of a running turn as SSE lines."""
    getter = None
    try:
        while True:
            getter = asyncio.ensure_future(queue.get())
            done, _ = await asyncio.wait({getter, task}, return_when=asyncio.FIRST_COMPLETED)
            if getter in done:
                event: TurnEvent = getter.result()
                yield sse_line(event.model_dump())
                if event.type == "done":
                    break
                continue
            getter.cancel()
            getter = None
            finished = False
            while not queue.empty():
                event = queue.get_nowait()
                yield sse_line(event.model_dump())
                finished = finished or event.type == "done"
            # The turn ended without a done event; surface its failure
            error = None if task.cancelled() else task.exception()
            if not finished and error is not None:
                logger.error(f"Turn for {conversation_id} failed: {error}")
                yield sse_line({"type": "error", "data": {"message": str(error)}})
            break
    finally:
        if getter is not None:
            getter.cancel()
        if not task.done():
            # Client went away mid-turn
            context.session_for(conversation_id).cancel()
            await asyncio.gather(task, return_exceptions=True)


@router.post("/api/conversations/{conversation_id}/turns")
async def start_turn(conversation_id: str, data: TurnRequest, context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    attachments = _decode_attachments(data.attachments)
    if not data.text.strip() and not attachments:
        raise HTTPException(status_code=400, detail="Message is empty")

    session = context.session_for(conversation_id)
    settings = context.settings

    async def run(listener):
        return await submit_turn(session, context.commands, conversation_id, data.text, settings,
                                 attachments=attachments, listener=listener)

    queue, task = start_turn_task(context, conversation_id, run)
    return StreamingResponse(stream_turn(context, conversation_id, queue, task),
                             media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/api/conversations/{conversation_id}/retry")
async def retry_turn(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    session = context.session_for(conversation_id)
    settings = context.settings

    async def run(listener):
        return await session.retry(conversation_id, settings, listener=listener)

    queue, task = start_turn_task(context, conversation_id, run)
    return StreamingResponse(stream_turn(context, conversation_id, queue, task),
                             media_type="text/event-stream", headers=SSE_HEADERS)


@router.post("/api/conversations/{conversation_id}/cancel")
async def cancel_turn(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    return {"cancelled": context.session_for(conversation_id).cancel()}


@router.get("/api/conversations/{conversation_id}/state")
async def get_turn_state(conversation_id: str, context: PlaygroundContext = Depends(get_context)):
    require_conversation(context, conversation_id)
    return {"state": context.session_for(conversation_id).state.value}


# Client tools

@router.get("/api/tools")
async def list_tools(context: PlaygroundContext = Depends(get_context)):
    return [
        {
            "name": tool.name,
            "description": tool.description,
            "requiresConfirmation": tool.requires_confirmation,
            "parameters": tool.InputSchema.model_json_schema(by_alias=True),
        }
        for tool in context.tools.all()
    ]


@router.post("/api/tools/{tool_name}/run", response_model=ToolResult)
async def run_tool(tool_name: str, data: ToolRunRequest, context: PlaygroundContext = Depends(get_context)):
    """Run a tool on explicit user request. Unknown names yield an error result."""
    return await context.tools.execute(tool_name, data.params)
