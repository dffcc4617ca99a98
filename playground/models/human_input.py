"""
Human input request shapes shared by the broker, the API and the CLI.
"""
from pydantic import BaseModel
from typing import Dict, List, Literal, Optional, Union

HumanInputFieldType = Literal["text", "select", "radio", "checkbox"]

HumanInputAnswer = Dict[str, Union[str, List[str]]]


class HumanInputField(BaseModel):
    key: str
    type: HumanInputFieldType = "text"
    label: str = ""
    options: List[str] = []
    required: bool = False
    placeholder: Optional[str] = None


class HumanInputView(BaseModel):
    """What observers see of the outstanding request."""
    id: str
    question: str
    fields: List[HumanInputField]


class HumanInputSubmission(BaseModel):
    answers: HumanInputAnswer = {}
