"""
Tests for the local slash command interpreter.
"""

import random
import uuid
from datetime import datetime

import pytest

from playground.commands.slash import SLASH_COMMANDS, SlashCommandInterpreter, slugify

FIXED_NOW = datetime(2024, 3, 5, 14, 7, 9)
FIXED_UUID = uuid.UUID("12345678-1234-4234-8234-123456789abc")


@pytest.fixture
def interpreter():
    return SlashCommandInterpreter(
        rng=random.Random(42),
        clock=lambda: FIXED_NOW,
        uuid_factory=lambda: FIXED_UUID,
    )


class TestDispatch:

    def test_unknown_command_is_not_handled(self, interpreter):
        assert interpreter.execute("/frobnicate now") is None
        assert not interpreter.is_command("/frobnicate")

    def test_plain_text_is_not_a_command(self, interpreter):
        assert interpreter.execute("hello /uuid") is None
        assert not interpreter.is_command("hello")

    def test_command_name_is_case_insensitive(self, interpreter):
        assert interpreter.is_command("/UUID")
        assert interpreter.is_command("  /uuid  ")

    def test_complete_by_prefix(self, interpreter):
        names = [c.command for c in interpreter.complete("/r")]
        assert names == ["/roll", "/random", "/reverse", "/repeat"]

    def test_every_listed_command_has_a_handler(self, interpreter):
        for command in SLASH_COMMANDS:
            assert interpreter.is_command(command.command)


class TestInstantCommands:

    def test_uuid(self, interpreter):
        assert str(FIXED_UUID) in interpreter.execute("/uuid")

    def test_date(self, interpreter):
        assert interpreter.execute("/date").endswith("Tuesday, March 5, 2024")

    def test_time(self, interpreter):
        assert interpreter.execute("/time").endswith("02:07:09 PM")

    def test_datetime(self, interpreter):
        assert interpreter.execute("/datetime").endswith("03/05/2024, 02:07:09 PM")

    def test_timestamp(self, interpreter):
        expected = int(FIXED_NOW.timestamp() * 1000)
        assert f"`{expected}`" in interpreter.execute("/timestamp")

    def test_flip(self, interpreter):
        result = interpreter.execute("/flip")
        assert "Heads" in result or "Tails" in result


class TestRandomness:

    def test_roll_sum_matches_rolls(self, interpreter):
        result = interpreter.execute("/roll 3d6")
        assert "**3d6:**" in result
        rolls_part, total_part = result.split(":** ")[1].split(" = ")
        rolls = [int(r) for r in rolls_part.split(" + ")]
        assert len(rolls) == 3
        assert all(1 <= r <= 6 for r in rolls)
        assert total_part == f"**{sum(rolls)}**"

    def test_roll_count_is_clamped(self, interpreter):
        assert "**20d6:**" in interpreter.execute("/roll 200d6")

    def test_roll_defaults_to_one_die(self, interpreter):
        assert "**1d20:**" in interpreter.execute("/roll d20")

    def test_roll_without_notation(self, interpreter):
        assert "usage: /roll 2d6" in interpreter.execute("/roll")

    def test_random_range_order_does_not_matter(self, interpreter):
        result = interpreter.execute("/random 10 1")
        assert "Random (1–10)" in result

    def test_random_default_range(self, interpreter):
        assert "Random (0–100)" in interpreter.execute("/random")

    def test_random_single_negative_bound(self, interpreter):
        assert "Random (-5–0)" in interpreter.execute("/random -5")


class TestTextCommands:

    def test_upper_lower(self, interpreter):
        assert interpreter.execute("/upper Hello").endswith("`HELLO`")
        assert interpreter.execute("/lower Hello").endswith("`hello`")

    def test_usage_when_argument_missing(self, interpreter):
        assert "Usage" in interpreter.execute("/upper")
        assert "Usage" in interpreter.execute("/repeat")

    def test_slug(self, interpreter):
        assert interpreter.execute("/slug Héllo, World  Again!").endswith("`hello-world-again`")

    def test_slugify(self):
        assert slugify("  Crème Brûlée -- Recipe ") == "creme-brulee----recipe"

    def test_wordcount(self, interpreter):
        assert "**3** words · **13** characters" in interpreter.execute("/wordcount one two three")

    def test_base64_and_decode(self, interpreter):
        assert interpreter.execute("/base64 hi").endswith("`aGk=`")
        assert interpreter.execute("/decode aGk=").endswith("`hi`")

    def test_decode_invalid(self, interpreter):
        assert interpreter.execute("/decode !!!") == "❌ Not valid base64."

    def test_reverse(self, interpreter):
        assert interpreter.execute("/reverse abc").endswith("`cba`")

    def test_repeat(self, interpreter):
        assert interpreter.execute("/repeat 3 ha").endswith("ha ha ha")

    def test_repeat_is_clamped(self, interpreter):
        result = interpreter.execute("/repeat 500 x")
        assert "Repeated 50×" in result

    def test_help_lists_commands(self, interpreter):
        result = interpreter.execute("/help")
        assert "`/roll NdS`" in result
        assert "`/help`" not in result
