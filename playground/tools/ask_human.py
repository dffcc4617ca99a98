"""
ask_human tool.

Lets the model put a question to the person at the keyboard. Execution
suspends on the HumanInputBroker until the question is answered or
cancelled; cancellation propagates as HumanInputCancelled.
"""
import json
from typing import List

from pydantic import BaseModel, Field

from playground.models.human_input import HumanInputField
from playground.models.tool import ToolResult
from playground.services.human_input import HumanInputBroker
from playground.tools.base import BaseClientTool


class AskHumanInput(BaseModel):
    """Input schema for ask_human."""
    question: str = Field(..., description="The question to ask the user")
    fields: List[HumanInputField] = Field(
        default_factory=list,
        description="Optional structured fields. Omit for a single free-text answer.",
    )


class AskHumanTool(BaseClientTool):
    name: str = "ask_human"
    description: str = (
        "Ask the user a question and wait for their answer. Use this when you "
        "need a decision, a preference or information only the user has."
    )
    InputSchema = AskHumanInput
    result_type = "human_input"
    requires_confirmation = False
    awaits_human = True

    def __init__(self, broker: HumanInputBroker):
        self.broker = broker

    async def run(self, params: AskHumanInput) -> ToolResult:
        fields = params.fields or [HumanInputField(key="answer", type="text", label=params.question, required=True)]
        answer = await self.broker.ask(params.question, fields)
        return ToolResult(
            type=self.result_type,
            data={"question": params.question, "answer": answer},
            text=f"The user answered: {json.dumps(answer, ensure_ascii=False)}",
        )
