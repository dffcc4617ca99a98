"""
Pipeline states.
"""
from enum import Enum


class SessionState(str, Enum):
    IDLE = "idle"
    BUILDING = "building"
    STREAMING = "streaming"
    PARSING_TAIL = "parsing_tail"
    AWAITING_HUMAN = "awaiting_human"
    ERRORED = "errored"
    CANCELLED = "cancelled"
