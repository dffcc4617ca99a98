"""
Client tool result model.
"""
from pydantic import BaseModel
from typing import Any, Dict


class ToolResult(BaseModel):
    type: str
    data: Dict[str, Any] = {}
    # Textual summary folded back into the conversation
    text: str
    error: bool = False
