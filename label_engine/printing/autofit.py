"""
Text auto-fit.

Picks the largest font height, in printer dots, at which a text block fits
its box, estimating the layout with a fixed-pitch heuristic:

- glyph width   = round(height * avg_char_width_ratio), at least 1 dot
- chars / line  = floor(box_width / glyph width), at least 1
- lines         = sum over paragraphs of ceil(len(paragraph) / chars per line)
- line pitch    = round(height * line_height_ratio)

The text fits when lines * line pitch <= box height. The search starts at
the declared size and shrinks one dot at a time, never going below the
floor; at the floor the text is allowed to overflow.

This is an approximation of the printer's scalable font, not a
measurement.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from ..models import TextElement
from ..options import LabelOptions
from .units import mm_to_dots, px_to_dots, round_half_away

DEFAULT_CHAR_WIDTH_RATIO = 0.6
DEFAULT_LINE_HEIGHT_RATIO = 1.2


@dataclass(frozen=True)
class FitResult:
    """
    Attributes:
        font_dots: Chosen font height in dots
        lines: Estimated line count at that height
        overflows: True if the text still exceeds the box at the floor
    """
    font_dots: int
    lines: int
    overflows: bool = False


def estimate_lines(text: str, font_dots: int, box_width: int,
                   char_width_ratio: float = DEFAULT_CHAR_WIDTH_RATIO) -> int:
    char_width = max(round_half_away(font_dots * char_width_ratio), 1)
    per_line = max(box_width // char_width, 1)
    return sum(
        max(math.ceil(len(paragraph) / per_line), 1)
        for paragraph in text.splitlines() or [""]
    )


def text_fits(text: str, font_dots: int, box_width: int, box_height: int,
              char_width_ratio: float = DEFAULT_CHAR_WIDTH_RATIO,
              line_height_ratio: float = DEFAULT_LINE_HEIGHT_RATIO) -> bool:
    lines = estimate_lines(text, font_dots, box_width, char_width_ratio)
    return lines * round_half_away(font_dots * line_height_ratio) <= box_height


def fit_font_dots(
    text: str,
    box_width: int,
    box_height: int,
    font_dots: int,
    min_font_dots: int,
    *,
    enabled: bool = True,
    char_width_ratio: float = DEFAULT_CHAR_WIDTH_RATIO,
    line_height_ratio: float = DEFAULT_LINE_HEIGHT_RATIO,
) -> FitResult:
    """
    Choose the font height for ``text`` in a box, all sizes in dots.

    Disabled, empty text or a degenerate box return the declared size
    unchanged. A declared size below the floor returns the floor.
    """
    if not enabled or not text or box_width <= 0 or box_height <= 0:
        lines = estimate_lines(text, font_dots, box_width, char_width_ratio) if text and box_width > 0 else 1
        return FitResult(font_dots, lines)

    floor = max(min_font_dots, 1)
    size = max(font_dots, floor)

    while size > floor and not text_fits(text, size, box_width, box_height,
                                         char_width_ratio, line_height_ratio):
        size -= 1

    return FitResult(
        font_dots=size,
        lines=estimate_lines(text, size, box_width, char_width_ratio),
        overflows=not text_fits(text, size, box_width, box_height,
                                char_width_ratio, line_height_ratio),
    )


def fit_text_element(element: TextElement, text: str, options: Optional[LabelOptions] = None) -> FitResult:
    """Auto-fit a text element at the configured printer resolution."""
    options = options or LabelOptions()
    dpmm = options.dots_per_mm
    min_size = element.text_min_font_size or options.default_min_font_size

    return fit_font_dots(
        text,
        mm_to_dots(element.width, dpmm),
        mm_to_dots(element.height, dpmm),
        px_to_dots(element.font_size, dpmm),
        max(px_to_dots(min_size, dpmm), 1),
        enabled=element.text_auto_fit,
        char_width_ratio=options.avg_char_width_ratio,
        line_height_ratio=options.line_height_ratio,
    )
