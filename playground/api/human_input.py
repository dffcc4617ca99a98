"""
Human input surface.

Exposes the broker's single outstanding request over HTTP so a UI can
show it, answer it or dismiss it.
"""
import asyncio
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from starlette.responses import StreamingResponse

from ..context import PlaygroundContext
from ..models.human_input import HumanInputSubmission, HumanInputView
from .dependencies import SSE_HEADERS, get_context, sse_line

router = APIRouter(tags=["human-input"])


@router.get("/api/human-input", response_model=Optional[HumanInputView])
async def get_current_request(context: PlaygroundContext = Depends(get_context)):
    active = context.broker.active
    return active.view() if active else None


@router.post("/api/human-input/{request_id}/resolve")
async def resolve_request(request_id: str, data: HumanInputSubmission,
                          context: PlaygroundContext = Depends(get_context)):
    active = context.broker.active
    if active is not None and active.id == request_id:
        missing = [f.key for f in active.fields if f.required and not data.answers.get(f.key)]
        if missing:
            raise HTTPException(status_code=400, detail=f"Missing required fields: {', '.join(missing)}")
    if not context.broker.resolve(data.answers, request_id=request_id):
        raise HTTPException(status_code=409, detail="Request is no longer pending")
    return {"resolved": True}


@router.post("/api/human-input/{request_id}/cancel")
async def cancel_request(request_id: str, context: PlaygroundContext = Depends(get_context)):
    if not context.broker.cancel(request_id):
        raise HTTPException(status_code=409, detail="Request is no longer pending")
    return {"cancelled": True}


@router.get("/api/human-input/stream")
async def stream_requests(context: PlaygroundContext = Depends(get_context)):
    """SSE feed of the outstanding request; null when there is none."""
    queue: asyncio.Queue = asyncio.Queue()

    def on_change(request):
        queue.put_nowait(request.view().model_dump() if request else None)

    async def events():
        unsubscribe = context.broker.subscribe(on_change)
        try:
            while True:
                yield sse_line(await queue.get())
        finally:
            unsubscribe()

    return StreamingResponse(events(), media_type="text/event-stream", headers=SSE_HEADERS)
