"""
Text transformation tools: JSON formatting, regex testing and base64.
"""
import base64
import binascii
import json
import re
from typing import Literal

from pydantic import BaseModel, Field

from playground.models.tool import ToolResult
from playground.tools.base import BaseClientTool
from playground.utils.custom_exceptions import ToolExecutionError


# ---------------------------------------------------------------------------
# Tool: format_json
# ---------------------------------------------------------------------------

class FormatJsonInput(BaseModel):
    """Input schema for format_json."""
    json_text: str = Field(..., alias="json", description="The JSON string to format and validate")
    indent: int = Field(2, ge=0, le=8, description="Number of spaces for indentation (default: 2)")


class FormatJsonTool(BaseClientTool):
    name: str = "format_json"
    description: str = (
        "Format, validate, and pretty-print a JSON string. Also reports if the "
        "JSON is valid and how many keys/items it contains."
    )
    InputSchema = FormatJsonInput
    result_type = "json_formatter"
    requires_confirmation = False

    async def run(self, params: FormatJsonInput) -> ToolResult:
        try:
            parsed = json.loads(params.json_text)
        except json.JSONDecodeError as e:
            raise ToolExecutionError(f"Invalid JSON: {e.msg}")

        formatted = json.dumps(parsed, indent=params.indent, ensure_ascii=False)
        if isinstance(parsed, list):
            summary = f"{len(parsed)} items"
        elif isinstance(parsed, dict):
            summary = f"{len(parsed)} keys"
        else:
            summary = type(parsed).__name__
        return ToolResult(
            type=self.result_type,
            data={"formatted": formatted, "valid": True, "summary": summary},
            text=f"Valid JSON ({summary})\n```json\n{formatted}\n```",
        )


# ---------------------------------------------------------------------------
# Tool: test_regex
# ---------------------------------------------------------------------------

REGEX_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "s": re.DOTALL,
    "x": re.VERBOSE,
}

MAX_REGEX_MATCHES = 1000


class RegexTesterInput(BaseModel):
    """Input schema for test_regex."""
    pattern: str = Field(..., description="The regular expression pattern")
    text: str = Field(..., description="Text to run the pattern against")
    flags: str = Field("g", description="Flags: g (all matches), i, m, s, x")


class RegexTesterTool(BaseClientTool):
    name: str = "test_regex"
    description: str = "Test a regular expression against some text and list the matches."
    InputSchema = RegexTesterInput
    result_type = "regex_tester"
    requires_confirmation = False

    async def run(self, params: RegexTesterInput) -> ToolResult:
        compiled_flags = 0
        for flag in params.flags:
            if flag == "g":
                continue
            if flag not in REGEX_FLAGS:
                raise ToolExecutionError(f"Invalid regex: unsupported flag '{flag}'")
            compiled_flags |= REGEX_FLAGS[flag]

        try:
            compiled = re.compile(params.pattern, compiled_flags)
        except re.error as e:
            raise ToolExecutionError(f"Invalid regex: {e}")

        matches = []
        for match in compiled.finditer(params.text):
            matches.append({
                "match": match.group(0),
                "index": match.start(),
                "groups": match.groupdict() or None,
            })
            if "g" not in params.flags or len(matches) >= MAX_REGEX_MATCHES:
                break

        count = len(matches)
        return ToolResult(
            type=self.result_type,
            data={"pattern": params.pattern, "flags": params.flags, "matches": matches, "count": count, "valid": True},
            text=f"Found {count} match{'' if count == 1 else 'es'} for /{params.pattern}/{params.flags}",
        )


# ---------------------------------------------------------------------------
# Tool: base64
# ---------------------------------------------------------------------------

class Base64Input(BaseModel):
    """Input schema for base64."""
    input: str = Field(..., description="Text to encode, or base64 to decode")
    operation: Literal["encode", "decode"] = Field("encode", description="encode or decode")


class Base64Tool(BaseClientTool):
    name: str = "base64"
    description: str = "Encode text to base64 or decode base64 back to text."
    InputSchema = Base64Input
    result_type = "base64"
    requires_confirmation = False

    async def run(self, params: Base64Input) -> ToolResult:
        try:
            if params.operation == "decode":
                output = base64.b64decode(params.input, validate=True).decode("utf-8")
            else:
                output = base64.b64encode(params.input.encode("utf-8")).decode("ascii")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ToolExecutionError(f"Base64 {params.operation} failed: {e}")

        preview = output[:100] + ("…" if len(output) > 100 else "")
        return ToolResult(
            type=self.result_type,
            data={"operation": params.operation, "input": params.input, "output": output},
            text=f"Base64 {params.operation}: {preview}",
        )
