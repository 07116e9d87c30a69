"""
Layout Fitter
Font size and line height heuristics so text fits its element box
"""

import html
import math
import re
from dataclasses import dataclass
from typing import Optional, Union

BASE_FONT_SIZE = 16.0
LONG_TEXT_THRESHOLD = 100

NAMED_FONT_SIZES = {
    "xx-small": 10,
    "x-small": 12,
    "small": 14,
    "medium": 16,
    "large": 20,
    "x-large": 26,
    "xx-large": 32,
    "larger": 20,
    "smaller": 14,
}

TAG_PATTERN = re.compile(r"<[^>]*>")
SIZE_PATTERN = re.compile(r"^(-?\d+(?:\.\d+)?)\s*(px|em|rem|%)?$")


@dataclass(frozen=True)
class FitResult:
    font_size: int
    line_height: str
    is_long: bool

    @property
    def align_items(self) -> str:
        return "flex-start" if self.is_long else "center"


def normalize_font_size(value: Optional[Union[float, int, str]]) -> float:
    """Convert a CSS font size to pixels"""
    if value is None or value == "":
        return BASE_FONT_SIZE
    if isinstance(value, (int, float)):
        return float(value)

    text = value.strip().lower()
    if text in NAMED_FONT_SIZES:
        return float(NAMED_FONT_SIZES[text])

    match = SIZE_PATTERN.match(text)
    if not match:
        return BASE_FONT_SIZE
    number = float(match.group(1))
    unit = match.group(2) or "px"
    if unit in ("em", "rem"):
        return number * BASE_FONT_SIZE
    if unit == "%":
        return number / 100 * BASE_FONT_SIZE
    return number


def plain_text(content: str) -> str:
    return html.unescape(TAG_PATTERN.sub("", content or ""))


def fit_text(
    font_size: Optional[Union[float, int, str]],
    width: float,
    height: float,
    text: str,
    line_height: Optional[Union[float, str]] = None,
) -> FitResult:
    """
    Pick a font size that fits text into a width x height box

    Long text (more than 100 visible characters) may overflow a little and is
    only shrunk when far too tall. Short text is shrunk to fit on one line and
    capped by the box height.
    """
    size = normalize_font_size(font_size)
    visible = plain_text(text)
    is_long = len(visible) > LONG_TEXT_THRESHOLD

    if width > 0 and height > 0 and visible:
        estimated_width = len(visible) * size * 0.6
        lines = max(1, math.ceil(estimated_width / (width * 0.9)))
        estimated_height = lines * size * 1.2

        if is_long:
            if estimated_height > height * 1.5:
                size *= max((height * 1.3) / estimated_height, 0.8)
        else:
            if estimated_width > width * 0.9:
                size *= (width * 0.9) / estimated_width
            size = min(size, height * 0.8)

    size = max(size, 12 if is_long else 10)
    size *= 1.01 if is_long else 1.02

    if line_height is None or line_height == "":
        line_height = "1.4" if is_long else "1.2"

    return FitResult(font_size=round(size), line_height=str(line_height), is_long=is_long)
