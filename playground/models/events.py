"""
Events published by the streaming pipeline.
"""
from pydantic import BaseModel
from typing import Any, Dict, List, Literal, Optional

TurnEventType = Literal[
    "state",
    "message",
    "delta",
    "segments",
    "tool_request",
    "tool_result",
    "human_input",
    "error",
    "stopped",
    "done",
]

TurnOutcome = Literal["completed", "local", "cancelled", "dismissed", "errored", "hop_limit"]


class TurnEvent(BaseModel):
    type: TurnEventType
    data: Dict[str, Any] = {}


class TurnResult(BaseModel):
    conversationId: str
    outcome: TurnOutcome
    messageIds: List[str] = []
    hops: int = 0
    error: Optional[str] = None
