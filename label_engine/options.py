"""
Engine configuration.

All tunables of the print and preview paths live in ``LabelOptions``;
defaults keep generated output byte-stable across releases.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional


# Printer resolutions with their exact dots-per-millimetre values
DPI_TO_DOTS_PER_MM: Dict[int, int] = {
    203: 8,
    300: 12,
    600: 24,
}

DEFAULT_DPI = 203

# Design font sizes are canvas pixels at 6 px per millimetre
CANVAS_PX_PER_MM = 6.0


class Gs1Mode(str, Enum):
    """
    How check digits in GS1 keys are treated.

    OFF: payload passes through untouched
    VALIDATE: complete keys are verified, short keys are an error
    COMPLETE: short keys get their check digit appended, complete keys
        are verified
    """
    OFF = "off"
    VALIDATE = "validate"
    COMPLETE = "complete"


@dataclass
class LabelOptions:
    """
    Configuration options for label generation.

    Attributes:
        dpi: Printer resolution (203, 300 or 600; others use dpi / 25.4)
        gs1_mode: Check digit policy for GS1 formats
        default_min_font_size: Auto-fit floor in canvas px when an element has none
        avg_char_width_ratio: Average glyph width as a fraction of font height
        line_height_ratio: Line pitch as a multiple of font height
        utf8: Emit ^CI28 so field data is read as UTF-8
        image_threshold: Grey level (0-255) at or below which a pixel prints
        max_qr_magnification: Upper bound for the ^BQ magnification factor
        default_border_mm: Shape border used when an element declares none
    """
    dpi: int = DEFAULT_DPI
    gs1_mode: Gs1Mode = Gs1Mode.COMPLETE
    default_min_font_size: float = 6.0
    avg_char_width_ratio: float = 0.6
    line_height_ratio: float = 1.2
    utf8: bool = True
    image_threshold: int = 128
    max_qr_magnification: int = 10
    default_border_mm: float = 0.5

    def __post_init__(self):
        if self.dpi <= 0:
            raise ValueError(f"dpi must be positive, got {self.dpi}")
        if not isinstance(self.gs1_mode, Gs1Mode):
            self.gs1_mode = Gs1Mode(self.gs1_mode)
        if self.avg_char_width_ratio <= 0 or self.line_height_ratio <= 0:
            raise ValueError("Auto-fit ratios must be positive")
        if not 0 <= self.image_threshold <= 255:
            raise ValueError("image_threshold must be within 0-255")

    @property
    def dots_per_mm(self) -> int:
        return DPI_TO_DOTS_PER_MM.get(self.dpi, max(round(self.dpi / 25.4), 1))

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "LabelOptions":
        """Build options from a settings mapping, ignoring unknown keys."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> Dict[str, Any]:
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["gs1_mode"] = self.gs1_mode.value
        return data
