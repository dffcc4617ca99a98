"""
Client tool registry.

Known tools are the members of ToolName. A name that is not a member
parses to ToolName.UNKNOWN, which has no handler: executing it reports
an unknown tool without touching any implementation.
"""
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from playground.models.tool import ToolResult
from playground.services.human_input import HumanInputBroker
from playground.tools.ask_human import AskHumanTool
from playground.tools.base import BaseClientTool
from playground.tools.calculator import CalculatorTool
from playground.tools.generators import ColorPaletteTool, PasswordTool
from playground.tools.text_tools import Base64Tool, FormatJsonTool, RegexTesterTool
from playground.utils.custom_exceptions import HumanInputCancelled, ToolExecutionError
from playground.utils.logging_utils import logger


class ToolName(str, Enum):
    CALCULATOR = "calculator"
    FORMAT_JSON = "format_json"
    GENERATE_PASSWORD = "generate_password"
    GENERATE_COLOR_PALETTE = "generate_color_palette"
    TEST_REGEX = "test_regex"
    BASE64 = "base64"
    ASK_HUMAN = "ask_human"
    UNKNOWN = "unknown"

    @classmethod
    def parse(cls, name: str) -> "ToolName":
        try:
            variant = cls(name)
        except ValueError:
            return cls.UNKNOWN
        return variant


def unknown_tool_result(name: str) -> ToolResult:
    return ToolResult(type="unknown", data={"tool": name}, text=f"Unknown tool: {name}", error=True)


class ToolRegistry:

    def __init__(self, broker: HumanInputBroker):
        self._handlers: Dict[ToolName, BaseClientTool] = {
            ToolName.CALCULATOR: CalculatorTool(),
            ToolName.FORMAT_JSON: FormatJsonTool(),
            ToolName.GENERATE_PASSWORD: PasswordTool(),
            ToolName.GENERATE_COLOR_PALETTE: ColorPaletteTool(),
            ToolName.TEST_REGEX: RegexTesterTool(),
            ToolName.BASE64: Base64Tool(),
            ToolName.ASK_HUMAN: AskHumanTool(broker),
        }

    def get(self, name: str) -> Optional[BaseClientTool]:
        return self._handlers.get(ToolName.parse(name))

    def all(self) -> List[BaseClientTool]:
        return list(self._handlers.values())

    def names(self) -> List[str]:
        return [variant.value for variant in self._handlers]

    def select(self, names: Optional[Iterable[str]] = None) -> List[BaseClientTool]:
        """Registered tools restricted to names, in registry order. None means all."""
        if names is None:
            return self.all()
        wanted = set(names)
        return [tool for tool in self._handlers.values() if tool.name in wanted]

    def requires_confirmation(self, name: str) -> bool:
        tool = self.get(name)
        return tool is not None and tool.requires_confirmation

    async def execute(self, name: str, params: Optional[Dict[str, Any]] = None) -> ToolResult:
        """
        Run a tool and always return a ToolResult.

        Tool failures become error results. HumanInputCancelled is not a
        failure and is re-raised so the caller can abandon the turn.
        """
        variant = ToolName.parse(name)
        handler = self._handlers.get(variant)
        if handler is None:
            logger.warning(f"Model requested unknown tool {name!r}")
            return unknown_tool_result(name)

        try:
            return await handler.execute(**(params or {}))
        except HumanInputCancelled:
            raise
        except ToolExecutionError as e:
            logger.warning(f"Tool {name} failed: {e}")
            message = str(e)
        except Exception as e:
            logger.warning(f"Tool {name} raised {type(e).__name__}: {e}")
            message = f"{type(e).__name__}: {e}"

        return ToolResult(
            type=handler.result_type,
            data={"params": params or {}, "error": message},
            text=f"Error: {message}",
            error=True,
        )

    def to_openai_tools(self, names: Optional[Iterable[str]] = None) -> List[Dict[str, Any]]:
        return [tool.openai_schema() for tool in self.select(names)]
