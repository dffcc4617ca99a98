"""
Slash commands.

Local utilities that run instantly without calling a provider. Input that
starts with "/" but names no registered command is left for the model.
"""
import base64
import binascii
import random
import re
import unicodedata
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Dict, List, Optional

from playground.utils.logging_utils import logger

DICE_PATTERN = re.compile(r"^(\d+)?d(\d+)$", re.IGNORECASE)
MAX_DICE = 20
MAX_SIDES = 10000
MAX_REPEAT = 50


@dataclass(frozen=True)
class SlashCommand:
    command: str
    description: str
    arg_hint: str = ""

    @property
    def has_args(self) -> bool:
        return bool(self.arg_hint)


SLASH_COMMANDS: List[SlashCommand] = [
    SlashCommand("/uuid", "Generate a random UUID v4"),
    SlashCommand("/date", "Current date (long format)"),
    SlashCommand("/time", "Current local time"),
    SlashCommand("/datetime", "Full date + time"),
    SlashCommand("/timestamp", "Unix timestamp in milliseconds"),
    SlashCommand("/flip", "Flip a coin (heads or tails)"),
    SlashCommand("/roll", "Roll dice, e.g. /roll 2d6", "NdS"),
    SlashCommand("/random", "Random integer, e.g. /random 1 100", "min max"),
    SlashCommand("/upper", "Convert text to UPPERCASE", "text"),
    SlashCommand("/lower", "Convert text to lowercase", "text"),
    SlashCommand("/slug", "Convert to URL-friendly slug", "My Page Title"),
    SlashCommand("/wordcount", "Count words and characters", "your text…"),
    SlashCommand("/base64", "Encode text to base64", "text to encode"),
    SlashCommand("/decode", "Decode a base64 string", "base64string"),
    SlashCommand("/reverse", "Reverse a string", "text"),
    SlashCommand("/repeat", "Repeat text N times, e.g. /repeat 3 ha", "N text"),
    SlashCommand("/help", "List all slash commands"),
]


def slugify(text: str) -> str:
    normalized = unicodedata.normalize("NFD", text.lower())
    stripped = "".join(ch for ch in normalized if not unicodedata.combining(ch))
    cleaned = re.sub(r"[^a-z0-9\s-]", "", stripped).strip()
    return re.sub(r"\s+", "-", cleaned)


class SlashCommandInterpreter:
    """
    Runs slash commands. Randomness, the clock and uuid generation are
    injectable so results can be pinned down in tests.
    """

    def __init__(self, rng: Optional[random.Random] = None,
                 clock: Optional[Callable[[], datetime]] = None,
                 uuid_factory: Optional[Callable[[], uuid.UUID]] = None):
        self.rng = rng or random.Random()
        self.clock = clock or datetime.now
        self.uuid_factory = uuid_factory or uuid.uuid4
        self._handlers: Dict[str, Callable[[str], str]] = {
            "/uuid": self._uuid,
            "/date": self._date,
            "/time": self._time,
            "/datetime": self._datetime,
            "/timestamp": self._timestamp,
            "/flip": self._flip,
            "/roll": self._roll,
            "/random": self._random,
            "/upper": self._upper,
            "/lower": self._lower,
            "/slug": self._slug,
            "/wordcount": self._wordcount,
            "/base64": self._base64,
            "/decode": self._decode,
            "/reverse": self._reverse,
            "/repeat": self._repeat,
            "/help": self._help,
        }

    def is_command(self, raw: str) -> bool:
        return self._split(raw)[0] in self._handlers

    def execute(self, raw: str) -> Optional[str]:
        """Result text, or None when the input is not a known command."""
        command, args = self._split(raw)
        handler = self._handlers.get(command)
        if handler is None:
            return None
        logger.debug(f"Running slash command {command}")
        return handler(args)

    def complete(self, prefix: str) -> List[SlashCommand]:
        prefix = prefix.lower()
        return [c for c in SLASH_COMMANDS if c.command.startswith(prefix)]

    @staticmethod
    def _split(raw: str):
        trimmed = raw.strip()
        if not trimmed.startswith("/"):
            return "", ""
        command, _, args = trimmed.partition(" ")
        return command.lower(), args.strip()

    # -----------------------------------------------------------------------
    # Handlers
    # -----------------------------------------------------------------------

    def _uuid(self, args: str) -> str:
        return f"🔑 **UUID:** `{self.uuid_factory()}`"

    def _date(self, args: str) -> str:
        now = self.clock()
        return f"📅 **Date:** {now:%A, %B} {now.day}, {now.year}"

    def _time(self, args: str) -> str:
        return f"🕐 **Time:** {self.clock():%I:%M:%S %p}"

    def _datetime(self, args: str) -> str:
        return f"🗓️ **Date & time:** {self.clock():%m/%d/%Y, %I:%M:%S %p}"

    def _timestamp(self, args: str) -> str:
        return f"⏱️ **Unix timestamp (ms):** `{int(self.clock().timestamp() * 1000)}`"

    def _flip(self, args: str) -> str:
        side = "Heads 🟡" if self.rng.random() < 0.5 else "Tails 🔵"
        return f"🪙 **Coin flip:** **{side}**"

    def _roll(self, args: str) -> str:
        match = DICE_PATTERN.match(args)
        if not match:
            return f"🎲 **d6 roll:** **{self.rng.randint(1, 6)}**  *(usage: /roll 2d6)*"
        count = min(max(int(match.group(1) or "1"), 1), MAX_DICE)
        sides = min(max(int(match.group(2)), 1), MAX_SIDES)
        rolls = [self.rng.randint(1, sides) for _ in range(count)]
        return f"🎲 **{count}d{sides}:** {' + '.join(str(r) for r in rolls)} = **{sum(rolls)}**"

    def _random(self, args: str) -> str:
        numbers = []
        for part in args.split():
            try:
                numbers.append(int(part))
            except ValueError:
                continue
        if len(numbers) >= 2:
            low, high = min(numbers[0], numbers[1]), max(numbers[0], numbers[1])
        else:
            low, high = 0, numbers[0] if numbers else 100
            if high < low:
                low, high = high, low
        return f"🎲 **Random ({low}–{high}):** **{self.rng.randint(low, high)}**"

    def _upper(self, args: str) -> str:
        if not args:
            return "⬆️ Usage: `/upper <text>`"
        return f"⬆️ **UPPERCASE:**\n`{args.upper()}`"

    def _lower(self, args: str) -> str:
        if not args:
            return "⬇️ Usage: `/lower <text>`"
        return f"⬇️ **lowercase:**\n`{args.lower()}`"

    def _slug(self, args: str) -> str:
        if not args:
            return "🔗 Usage: `/slug <text>`"
        return f"🔗 **Slug:**\n`{slugify(args)}`"

    def _wordcount(self, args: str) -> str:
        if not args:
            return "📝 Usage: `/wordcount <text>`"
        return f"📝 **Word count:** **{len(args.split())}** words · **{len(args)}** characters"

    def _base64(self, args: str) -> str:
        if not args:
            return "🔒 Usage: `/base64 <text>`"
        return f"🔒 **Base64 encoded:**\n`{base64.b64encode(args.encode('utf-8')).decode('ascii')}`"

    def _decode(self, args: str) -> str:
        if not args:
            return "🔓 Usage: `/decode <base64>`"
        try:
            decoded = base64.b64decode(args.strip(), validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError):
            return "❌ Not valid base64."
        return f"🔓 **Decoded:**\n`{decoded}`"

    def _reverse(self, args: str) -> str:
        if not args:
            return "↩️ Usage: `/reverse <text>`"
        return f"↩️ **Reversed:**\n`{args[::-1]}`"

    def _repeat(self, args: str) -> str:
        count_text, sep, what = args.partition(" ")
        if not sep:
            return "🔁 Usage: `/repeat <N> <text>`"
        try:
            count = int(count_text)
        except ValueError:
            count = 1
        count = min(max(count, 1), MAX_REPEAT)
        return f"🔁 **Repeated {count}×:**\n{' '.join([what] * count)}"

    def _help(self, args: str) -> str:
        lines = []
        for command in SLASH_COMMANDS:
            if command.command == "/help":
                continue
            hint = f" {command.arg_hint}" if command.arg_hint else ""
            lines.append(f"`{command.command}{hint}` - {command.description}")
        return "**Slash commands** run instantly without calling the AI:\n\n" + "\n".join(lines)
