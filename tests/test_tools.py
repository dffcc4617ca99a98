"""
Tests for the client tools and the tool registry.
"""

import asyncio
import base64

import pytest

from playground.services.human_input import HumanInputBroker
from playground.tools.calculator import CalculatorTool, evaluate, format_number
from playground.tools.generators import ColorPaletteTool, PasswordTool, hex_to_hsl, hsl_to_hex
from playground.tools.registry import ToolName, ToolRegistry
from playground.tools.text_tools import Base64Tool, FormatJsonTool, RegexTesterTool
from playground.utils.custom_exceptions import HumanInputCancelled, ToolExecutionError


@pytest.fixture
def broker():
    return HumanInputBroker()


@pytest.fixture
def registry(broker):
    return ToolRegistry(broker)


# ── Calculator ─────────────────────────────────────────────────────

class TestCalculator:

    @pytest.mark.parametrize("expression,expected", [
        ("2 + 2", 4),
        ("2 * (3 + 4)", 14),
        ("2 ^ 10", 1024),
        ("-3 + 1", -2),
        ("sqrt(16)", 4.0),
        ("max(1, 5, 3)", 5),
        ("7 // 2", 3),
    ])
    def test_evaluate(self, expression, expected):
        assert evaluate(expression) == expected

    def test_constants(self):
        assert evaluate("pi") == pytest.approx(3.14159, rel=1e-5)

    @pytest.mark.parametrize("expression", [
        "__import__('os')",
        "open('x')",
        "x + 1",
        "'a' * 3",
        "9 ** 99999",
    ])
    def test_rejects_unsafe_expressions(self, expression):
        with pytest.raises(ValueError):
            evaluate(expression)

    def test_format_number(self):
        assert format_number(4.0) == "4"
        assert format_number(2.5) == "2.5"
        assert format_number(7) == "7"

    async def test_tool_result(self):
        result = await CalculatorTool().execute(expression="6 * 7")
        assert result.text == "6 * 7 = 42"
        assert result.data["result"] == "42"
        assert not result.error

    async def test_division_by_zero_is_tool_error(self):
        with pytest.raises(ToolExecutionError):
            await CalculatorTool().execute(expression="1 / 0")

    async def test_missing_parameter(self):
        with pytest.raises(ToolExecutionError, match="Invalid parameters for calculator"):
            await CalculatorTool().execute()


# ── Text tools ─────────────────────────────────────────────────────

class TestTextTools:

    async def test_format_json(self):
        result = await FormatJsonTool().execute(json='{"b": 1, "a": [1, 2]}')
        assert result.data["summary"] == "2 keys"
        assert '"a": [\n' in result.data["formatted"]

    async def test_format_json_invalid(self):
        with pytest.raises(ToolExecutionError, match="Invalid JSON"):
            await FormatJsonTool().execute(json="{nope")

    async def test_regex_all_matches(self):
        result = await RegexTesterTool().execute(pattern=r"\d+", text="a1 b22 c333")
        assert result.data["count"] == 3
        assert [m["match"] for m in result.data["matches"]] == ["1", "22", "333"]
        assert result.data["matches"][1]["index"] == 4

    async def test_regex_first_match_without_g(self):
        result = await RegexTesterTool().execute(pattern="A", text="a A", flags="i")
        assert result.data["count"] == 1
        assert result.text == "Found 1 match for /A/i"

    async def test_regex_named_groups(self):
        result = await RegexTesterTool().execute(pattern=r"(?P<word>\w+)", text="hi")
        assert result.data["matches"][0]["groups"] == {"word": "hi"}

    async def test_regex_invalid_pattern(self):
        with pytest.raises(ToolExecutionError, match="Invalid regex"):
            await RegexTesterTool().execute(pattern="(", text="x")

    async def test_regex_unknown_flag(self):
        with pytest.raises(ToolExecutionError):
            await RegexTesterTool().execute(pattern="a", text="a", flags="q")

    async def test_base64_encode_and_decode(self):
        encoded = await Base64Tool().execute(input="héllo")
        assert encoded.data["output"] == base64.b64encode("héllo".encode()).decode()
        decoded = await Base64Tool().execute(input=encoded.data["output"], operation="decode")
        assert decoded.data["output"] == "héllo"

    async def test_base64_decode_garbage(self):
        with pytest.raises(ToolExecutionError):
            await Base64Tool().execute(input="***", operation="decode")


# ── Generators ─────────────────────────────────────────────────────

class TestGenerators:

    async def test_password_length_is_clamped(self):
        short = await PasswordTool().execute(length=1)
        long = await PasswordTool().execute(length=500)
        assert len(short.data["password"]) == 4
        assert len(long.data["password"]) == 128

    async def test_password_alphabet(self):
        result = await PasswordTool().execute(length=64, uppercase=False, numbers=False)
        assert result.data["password"].islower()

    async def test_password_empty_alphabet_falls_back_to_lowercase(self):
        result = await PasswordTool().execute(uppercase=False, lowercase=False, numbers=False)
        assert result.data["password"].isalpha()

    def test_hsl_round_trip_primary(self):
        assert hex_to_hsl("#ff0000") == (0, 100, 50)
        assert hsl_to_hex(0, 100, 50) == "#ff0000"

    async def test_complementary_palette(self):
        result = await ColorPaletteTool().execute(base_color="#ff0000", count=2, scheme="complementary")
        assert result.data["colors"] == ["#ff0000", "#00ffff"]

    async def test_palette_count_clamped_and_bad_base_replaced(self):
        result = await ColorPaletteTool().execute(base_color="red", count=50)
        assert result.data["count"] == 10
        assert result.data["baseColor"] == "#3b82f6"
        assert len(result.data["colors"]) == 10

    async def test_monochromatic_steps_lightness(self):
        result = await ColorPaletteTool().execute(base_color="#3b82f6", count=3, scheme="monochromatic")
        lightness = [hex_to_hsl(color)[2] for color in result.data["colors"]]
        assert lightness == sorted(lightness)
        assert lightness[0] < lightness[-1]


# ── Registry ───────────────────────────────────────────────────────

class TestToolName:

    def test_parse_known(self):
        assert ToolName.parse("calculator") is ToolName.CALCULATOR

    def test_parse_unknown(self):
        assert ToolName.parse("rm_rf") is ToolName.UNKNOWN


class TestToolRegistry:

    def test_names_exclude_unknown(self, registry):
        assert "unknown" not in registry.names()
        assert "ask_human" in registry.names()

    def test_select_keeps_registry_order(self, registry):
        tools = registry.select(["base64", "calculator", "nope"])
        assert [t.name for t in tools] == ["calculator", "base64"]

    def test_select_none_means_all(self, registry):
        assert len(registry.select(None)) == len(registry.all())

    def test_requires_confirmation(self, registry):
        assert registry.requires_confirmation("generate_password")
        assert not registry.requires_confirmation("calculator")
        assert not registry.requires_confirmation("no_such_tool")

    async def test_unknown_tool_never_runs_a_handler(self, registry):
        result = await registry.execute("unknown", {"x": 1})
        assert result.error
        assert result.text == "Unknown tool: unknown"

    async def test_unregistered_name_reports_unknown(self, registry):
        result = await registry.execute("delete_everything")
        assert result.type == "unknown"
        assert result.text == "Unknown tool: delete_everything"

    async def test_tool_error_becomes_error_result(self, registry):
        result = await registry.execute("calculator", {"expression": "1/0"})
        assert result.error
        assert result.text.startswith("Error: ")
        assert result.type == "calculator"

    async def test_invalid_params_become_error_result(self, registry):
        result = await registry.execute("calculator", {})
        assert result.error

    async def test_ask_human_resolved(self, registry, broker):
        task = asyncio.ensure_future(registry.execute("ask_human", {"question": "Favourite colour?"}))
        await asyncio.sleep(0)
        request = broker.active
        assert request.fields[0].key == "answer"
        broker.resolve({"answer": "green"})
        result = await task
        assert result.text == 'The user answered: {"answer": "green"}'

    async def test_ask_human_cancel_propagates(self, registry, broker):
        task = asyncio.ensure_future(registry.execute("ask_human", {"question": "Q?"}))
        await asyncio.sleep(0)
        broker.cancel()
        with pytest.raises(HumanInputCancelled):
            await task

    def test_openai_schema(self, registry):
        tools = registry.to_openai_tools(["calculator"])
        assert tools[0]["function"]["name"] == "calculator"
        assert "expression" in tools[0]["function"]["parameters"]["properties"]
