"""
Label Code Engine

Turns label designs and data rows into barcode payloads and ZPL print
commands: GS1 check digits and Application Identifier parsing, template
expressions, code value validation, text auto-fit, printer command
generation and regulatory compliance checks.
"""

from .models import (
    Design,
    DesignError,
    EvaluationContext,
    TextElement,
    BarcodeElement,
    QrElement,
    LineElement,
    RectangleElement,
    CircleElement,
    ImageElement,
    design_from_dict,
    element_from_dict,
)
from .options import Gs1Mode, LabelOptions
from .gs1 import (
    calculate_check_digit,
    verify_check_digit,
    parse_gs1,
    parse_gs1_128,
    compose_gs1_128,
)
from .expressions import evaluate
from .resolver import resolve_value
from .codes import CodeValue, build_code_value, generate_codes
from .printing import fit_font_dots, fit_text_element, generate_label, generate_batch, generate_zpl
from .compliance import validate_design, validate_rows
from .formatters import parse_gs1_to_dict, parse_gs1_to_json

__version__ = "1.0.0"
__all__ = [
    "Design",
    "DesignError",
    "EvaluationContext",
    "TextElement",
    "BarcodeElement",
    "QrElement",
    "LineElement",
    "RectangleElement",
    "CircleElement",
    "ImageElement",
    "design_from_dict",
    "element_from_dict",
    "Gs1Mode",
    "LabelOptions",
    "calculate_check_digit",
    "verify_check_digit",
    "parse_gs1",
    "parse_gs1_128",
    "compose_gs1_128",
    "evaluate",
    "resolve_value",
    "CodeValue",
    "build_code_value",
    "generate_codes",
    "fit_font_dots",
    "fit_text_element",
    "generate_label",
    "generate_batch",
    "generate_zpl",
    "validate_design",
    "validate_rows",
    "parse_gs1_to_dict",
    "parse_gs1_to_json",
]
