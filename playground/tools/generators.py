"""
Generator tools: passwords and colour palettes.
"""
import math
import re
import secrets
from typing import List, Literal, Tuple

from pydantic import BaseModel, Field

from playground.models.tool import ToolResult
from playground.tools.base import BaseClientTool

UPPERCASE = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
LOWERCASE = "abcdefghijklmnopqrstuvwxyz"
DIGITS = "0123456789"
SYMBOLS = "!@#$%^&*()-_=+[]{}|;:,.<>?"

DEFAULT_BASE_COLOR = "#3b82f6"
HEX_COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{6}$")


def _half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Tool: generate_password
# ---------------------------------------------------------------------------

class PasswordInput(BaseModel):
    """Input schema for generate_password."""
    length: int = Field(16, description="Password length (4-128, default: 16)")
    uppercase: bool = Field(True, description="Include uppercase letters")
    lowercase: bool = Field(True, description="Include lowercase letters")
    numbers: bool = Field(True, description="Include numbers")
    symbols: bool = Field(False, description="Include special symbols")


class PasswordTool(BaseClientTool):
    name: str = "generate_password"
    description: str = "Generate a cryptographically secure random password with configurable options."
    InputSchema = PasswordInput
    result_type = "password_generator"

    async def run(self, params: PasswordInput) -> ToolResult:
        length = min(128, max(4, params.length))
        alphabet = ""
        if params.uppercase:
            alphabet += UPPERCASE
        if params.lowercase:
            alphabet += LOWERCASE
        if params.numbers:
            alphabet += DIGITS
        if params.symbols:
            alphabet += SYMBOLS
        if not alphabet:
            alphabet = LOWERCASE

        password = "".join(secrets.choice(alphabet) for _ in range(length))
        entropy = math.floor(length * math.log2(len(alphabet)))
        return ToolResult(
            type=self.result_type,
            data={
                "password": password,
                "length": length,
                "entropy": entropy,
                "uppercase": params.uppercase,
                "lowercase": params.lowercase,
                "numbers": params.numbers,
                "symbols": params.symbols,
            },
            text=f"Password: {password}\nEntropy: ~{entropy} bits",
        )


# ---------------------------------------------------------------------------
# Tool: generate_color_palette
# ---------------------------------------------------------------------------

def hex_to_hsl(hex_color: str) -> Tuple[int, int, int]:
    r = int(hex_color[1:3], 16) / 255
    g = int(hex_color[3:5], 16) / 255
    b = int(hex_color[5:7], 16) / 255
    high, low = max(r, g, b), min(r, g, b)
    h = s = 0.0
    l = (high + low) / 2
    if high != low:
        d = high - low
        s = d / (2 - high - low) if l > 0.5 else d / (high + low)
        if high == r:
            h = (g - b) / d + (6 if g < b else 0)
        elif high == g:
            h = (b - r) / d + 2
        else:
            h = (r - g) / d + 4
        h /= 6
    return _half_up(h * 360), _half_up(s * 100), _half_up(l * 100)


def hsl_to_hex(h: float, s: float, l: float) -> str:
    s /= 100
    l /= 100
    a = s * min(l, 1 - l)

    def channel(n: int) -> str:
        k = (n + h / 30) % 12
        color = l - a * max(min(k - 3, 9 - k, 1), -1)
        return f"{_half_up(255 * color):02x}"

    return f"#{channel(0)}{channel(8)}{channel(4)}"


def build_palette(base_color: str, count: int, scheme: str) -> List[str]:
    h, s, l = hex_to_hsl(base_color)
    colors = []
    if scheme == "monochromatic":
        for i in range(count):
            lightness = max(10, min(90, l - 30 + (60 / (count - 1)) * i))
            colors.append(hsl_to_hex(h, s, lightness))
    elif scheme == "complementary":
        colors.append(base_color)
        colors.append(hsl_to_hex((h + 180) % 360, s, l))
        for i in range(2, count):
            colors.append(hsl_to_hex((h + (180 * i) / count) % 360, s, l))
    else:
        spread = 30
        for i in range(count):
            hue = (h - spread + (2 * spread / (count - 1)) * i + 360) % 360
            colors.append(hsl_to_hex(hue, s, l))
    return colors


class ColorPaletteInput(BaseModel):
    """Input schema for generate_color_palette."""
    base_color: str = Field(DEFAULT_BASE_COLOR, description="Base color as hex code (e.g. '#3b82f6')")
    count: int = Field(5, description="Number of colors in the palette (2-10, default: 5)")
    scheme: Literal["analogous", "complementary", "monochromatic"] = Field(
        "analogous", description="Color scheme type (default: analogous)"
    )


class ColorPaletteTool(BaseClientTool):
    name: str = "generate_color_palette"
    description: str = "Generate a harmonious color palette from a base color."
    InputSchema = ColorPaletteInput
    result_type = "color_palette"
    requires_confirmation = False

    async def run(self, params: ColorPaletteInput) -> ToolResult:
        base = params.base_color.strip().lower()
        if not HEX_COLOR_PATTERN.match(base):
            base = DEFAULT_BASE_COLOR
        count = min(10, max(2, params.count))
        colors = build_palette(base, count, params.scheme)
        return ToolResult(
            type=self.result_type,
            data={"colors": colors, "baseColor": base, "scheme": params.scheme, "count": count},
            text=f"Color palette ({params.scheme}): {', '.join(colors)}",
        )
