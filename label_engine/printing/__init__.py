"""Printer output: dot geometry, text auto-fit and ZPL generation."""

from .autofit import FitResult, fit_font_dots, fit_text_element, estimate_lines
from .units import mm_to_dots, px_to_dots, round_half_away
from .zpl import (
    BatchResult,
    LabelResult,
    SkippedElement,
    SkipReason,
    generate_label,
    generate_zpl,
    generate_batch,
    ordered_elements,
    zpl_orientation,
    escape_field,
)

__all__ = [
    "FitResult",
    "fit_font_dots",
    "fit_text_element",
    "estimate_lines",
    "mm_to_dots",
    "px_to_dots",
    "round_half_away",
    "BatchResult",
    "LabelResult",
    "SkippedElement",
    "SkipReason",
    "generate_label",
    "generate_zpl",
    "generate_batch",
    "ordered_elements",
    "zpl_orientation",
    "escape_field",
]
