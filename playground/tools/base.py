"""Base class for client tools."""
from abc import ABC, abstractmethod
from typing import Any, Dict, Type

from pydantic import BaseModel
from pydantic import ValidationError as SchemaValidationError

from playground.models.tool import ToolResult
from playground.utils.custom_exceptions import ToolExecutionError


class BaseClientTool(ABC):
    """Base class for all client tools."""

    name: str
    description: str
    InputSchema: Type[BaseModel]
    result_type: str = "text"

    # Whether a run must be confirmed by the human before it happens
    requires_confirmation: bool = True

    # Whether the tool itself suspends on the human input broker
    awaits_human: bool = False

    async def execute(self, **kwargs) -> ToolResult:
        """Validate parameters against InputSchema, then run the tool."""
        try:
            params = self.InputSchema(**kwargs)
        except SchemaValidationError as e:
            raise ToolExecutionError(f"Invalid parameters for {self.name}: {e.errors()[0]['msg']}")
        return await self.run(params)

    @abstractmethod
    async def run(self, params: Any) -> ToolResult:
        """Execute the tool with validated parameters."""
        pass

    def openai_schema(self) -> Dict[str, Any]:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.InputSchema.model_json_schema(),
            },
        }
