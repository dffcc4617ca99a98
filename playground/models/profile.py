"""
Model profile and settings models.
"""
from pydantic import BaseModel
from typing import List, Literal, Optional

AgenticMode = Literal["none", "react", "plan_execute", "chain_of_thought", "tree_of_thought"]


class ModelParams(BaseModel):
    temperature: float = 0.7
    maxTokens: int = 2048
    topP: float = 1.0
    frequencyPenalty: float = 0.0
    presencePenalty: float = 0.0
    reasoningEffort: Optional[Literal["low", "medium", "high"]] = None


class Profile(BaseModel):
    id: str
    name: str
    providerId: str
    modelId: str
    systemPrompt: str = ""
    params: ModelParams = ModelParams()
    createdAt: int


class ProfileCreate(BaseModel):
    name: str


class PlaygroundSettings(BaseModel):
    model_config = {"extra": "allow"}

    selectedProviderId: str
    selectedModelId: str
    systemPrompt: str = ""
    params: ModelParams = ModelParams()
    enabledToolNames: List[str] = []
    agenticMode: AgenticMode = "none"
    maxToolHops: int = 8
    confirmToolRuns: bool = True
