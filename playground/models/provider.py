"""
Provider and model catalog entries.
"""
from typing import Dict, Literal, Optional, Tuple

from pydantic import BaseModel

ModelTag = Literal[
    "reasoning",
    "vision",
    "long-context",
    "fast",
    "image-generation",
    "web-search",
    "code",
]


class Model(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: str
    tags: Tuple[ModelTag, ...] = ()
    context_window: Optional[int] = None
    # Capability exclusions
    no_system_prompt: bool = False
    no_streaming: bool = False


class Provider(BaseModel):
    model_config = {"frozen": True}

    id: str
    name: str
    base_url: str
    requires_key: bool
    extra_headers: Dict[str, str] = {}
    models: Tuple[Model, ...] = ()
    supports_models_endpoint: bool = False
    docs_url: str = ""
    key_label: str = ""
    auth_header: str = "Authorization"
    auth_prefix: str = "Bearer"

    def get_model(self, model_id: str) -> Optional[Model]:
        for model in self.models:
            if model.id == model_id:
                return model
        return None
