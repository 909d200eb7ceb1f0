"""
ZPL II Label Generator

Translates a design plus one data row into a ZPL label:

    ^XA
    ^CI28
    ^PW{width dots}
    ^LL{height dots}
    ... one command per visible element, lowest z_index first ...
    ^XZ

- Millimetres become dots with round-half-away-from-zero
- Rotation maps to the ZPL orientations N / R / I / B in 90 degree bands
- Field data has ``^`` and ``~`` replaced by spaces
- An element that cannot be translated is skipped and reported in the
  result; the rest of the label is still produced

Batches are single labels joined with newlines.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence

import qrcode
from qrcode.exceptions import DataOverflowError

from ..codes.builder import CodeValue, build_code_value, normalize_error_level
from ..codes.encoders import QR_ERROR_CORRECTION
from ..gs1 import GS
from ..models import (
    BarcodeElement,
    CircleElement,
    Design,
    Element,
    EvaluationContext,
    ImageElement,
    LineElement,
    QrElement,
    RectangleElement,
    TextElement,
)
from ..options import LabelOptions
from ..resolver import resolve_value
from .autofit import fit_text_element
from .images import ImageDecodeError, image_to_gfa
from .units import mm_to_dots, round_half_away

logger = logging.getLogger(__name__)

TEXT_ALIGN = {"left": "L", "center": "C", "right": "R", "justify": "J"}

WHITE_COLORS = {"#fff", "#ffffff", "white"}
TRANSPARENT_COLORS = {"", "none", "transparent"}

DEFAULT_ELEMENT_MM = 10.0
MAX_MODULE_WIDTH = 10


class SkipReason(str, Enum):
    """Why an element produced no ZPL."""
    NO_VALUE = "NO_VALUE"
    INVALID_CODE = "INVALID_CODE"
    NOTHING_TO_DRAW = "NOTHING_TO_DRAW"
    NO_IMAGE = "NO_IMAGE"
    IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
    QR_OVERFLOW = "QR_OVERFLOW"
    UNSUPPORTED_ELEMENT = "UNSUPPORTED_ELEMENT"


class ElementSkipped(Exception):
    """Raised by an element translator when the element cannot be printed."""

    def __init__(self, reason: SkipReason, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.reason = reason
        self.code = code


@dataclass
class SkippedElement:
    element_id: str
    reason: SkipReason
    message: str
    code: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"element_id": self.element_id, "reason": self.reason.value, "message": self.message}
        if self.code:
            data["code"] = self.code
        return data


@dataclass
class LabelResult:
    """One generated label and the elements left out of it."""
    zpl: str
    row_index: int = 0
    rendered: List[str] = field(default_factory=list)
    skipped: List[SkippedElement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row_index": self.row_index,
            "zpl": self.zpl,
            "rendered": list(self.rendered),
            "skipped": [s.to_dict() for s in self.skipped],
        }


@dataclass
class BatchResult:
    labels: List[LabelResult] = field(default_factory=list)

    @property
    def zpl(self) -> str:
        return "\n".join(label.zpl for label in self.labels)

    @property
    def skipped(self) -> List[SkippedElement]:
        return [s for label in self.labels for s in label.skipped]

    def to_dict(self) -> Dict[str, Any]:
        return {"labels": [label.to_dict() for label in self.labels]}


def zpl_orientation(degrees: Optional[float]) -> str:
    """0 -> N, 90 -> R, 180 -> I, 270 -> B, each covering a 90 degree band."""
    if degrees is None:
        return "N"
    normalized = round_half_away(degrees) % 360
    if normalized >= 315 or normalized < 45:
        return "N"
    if normalized < 135:
        return "R"
    if normalized < 225:
        return "I"
    return "B"


def escape_field(text: Optional[str], block: bool = False) -> str:
    """Make text safe inside ^FD; newlines become ``\\&`` in a field block."""
    if text is None:
        return ""
    text = str(text).replace("^", " ").replace("~", " ")
    newline = "\\&" if block else " "
    return re.sub(r"\r\n|\r|\n", newline, text)


def ordered_elements(design: Design) -> List[Element]:
    """Visible elements, stable-sorted by z_index."""
    return sorted((e for e in design.elements if e.visible), key=lambda e: e.z_index)


def _color_letter(color: Optional[str]) -> str:
    return "W" if (color or "").strip().lower() in WHITE_COLORS else "B"


def _is_filled(color: Optional[str]) -> bool:
    return (color or "").strip().lower() not in TRANSPARENT_COLORS


def _rounding(percent: float) -> int:
    """Element corner roundness 0-100 % to the ^GB rounding index 0-8."""
    return max(0, min(8, round_half_away((percent or 0) / 100 * 8)))


# Text


def text_command(element: TextElement, text: str, x: int, y: int, options: LabelOptions) -> str:
    dpmm = options.dots_per_mm
    fit = fit_text_element(element, text, options)
    rot = zpl_orientation(element.rotation)
    box_width = mm_to_dots(element.width, dpmm)
    align = TEXT_ALIGN.get((element.text_align or "left").lower(), "L")
    block = box_width > 0 and (element.text_auto_fit or align != "L")

    command = f"^FO{x},{y}^A0{rot},{fit.font_dots},{fit.font_dots}"
    if block:
        command += f"^FB{box_width},{max(fit.lines, 1)},0,{align},0"
    return f"{command}^FD{escape_field(text, block)}^FS"


# Barcodes


def _code128_symbols(data: str) -> int:
    symbols = 0
    for run in re.findall(r"\d{4,}|.", data, flags=re.DOTALL):
        symbols += (len(run) + 1) // 2 if len(run) >= 4 else 1
    return symbols


def linear_modules(fmt: str, code: CodeValue) -> Optional[int]:
    """Approximate symbol width in modules at the default 3:1 wide ratio."""
    data = code.payload or ""
    if fmt in ("EAN13", "UPC"):
        return 95
    if fmt == "EAN8":
        return 67
    if fmt == "ITF14":
        return (len(data) // 2) * 18 + 9
    if fmt == "CODE39":
        return (len(data) + 2) * 16
    if fmt == "CODE93":
        return (len(data) + 4) * 9 + 1
    if fmt == "CODABAR":
        return len(data) * 13
    if fmt == "MSI":
        return len(data) * 12 + 7
    if fmt in ("CODE128", "PHARMACODE", "ROYALMAIL") or code.gs1 or fmt.startswith("GS1_"):
        extra = 1 if code.gs1 else 0
        return 11 * (_code128_symbols(data) + extra + 2) + 2
    return None


def module_width(fmt: str, code: CodeValue, length_dots: int) -> Optional[int]:
    """Narrow bar width in dots so the symbol spans at most ``length_dots``."""
    modules = linear_modules(fmt, code)
    if not modules or length_dots <= 0:
        return None
    return max(1, min(MAX_MODULE_WIDTH, length_dots // modules))


def _gs1_datamatrix_data(payload: str) -> str:
    # ^BX escape sequences: _1 is FNC1, _dNNN a character by decimal code
    escaped = payload.replace("_", "_d095").replace("^", "_d094").replace("~", "_d126")
    return "_1" + escaped.replace(GS, "_1")


def barcode_directive(code: CodeValue, rot: str, height: int, show_text: bool,
                      box_height: int) -> tuple:
    """Return (ZPL barcode command, field data) for a validated code."""
    t = "Y" if show_text else "N"
    fmt = code.format
    data = escape_field(code.payload)

    if code.gs1 and fmt != "DATAMATRIX":
        # UCC/EAN mode D: bracketed AIs, FNC1 and check digits by the printer
        return f"^BC{rot},{height},{t},N,N,D", escape_field(code.hri)
    if fmt == "CODE39":
        return f"^B3{rot},N,{height},{t},N", data
    if fmt == "CODE93":
        return f"^BA{rot},{height},{t},N,N", data
    if fmt == "EAN13":
        return f"^BE{rot},{height},{t},N", data
    if fmt == "EAN8":
        return f"^B8{rot},{height},{t},N", data
    if fmt == "UPC":
        return f"^BU{rot},{height},{t},N,Y", data
    if fmt == "ITF14":
        return f"^B2{rot},{height},{t},N,N", data
    if fmt == "CODABAR":
        return f"^BK{rot},N,{height},{t},N,{data[:1].upper()},{data[-1:].upper()}", data[1:-1]
    if fmt == "MSI":
        return f"^BM{rot},A,{height},{t},N,N", data
    if fmt == "POSTNET":
        return f"^BZ{rot},{height},{t},N", data
    if fmt == "PLANET":
        return f"^B5{rot},{height},{t},N", data
    if fmt == "DATAMATRIX":
        mag = max(box_height // 20, 1)
        if code.gs1:
            return f"^BXN,{mag},200,,,6,_", _gs1_datamatrix_data(code.payload)
        return f"^BXN,{mag},200", data
    if fmt == "PDF417":
        return f"^B7{rot},{max(box_height // 10, 1)},0,0,0,N", data
    if fmt == "AZTEC":
        return f"^BO{rot},{max(box_height // 20, 1)},N", data
    if fmt == "MAXICODE":
        return f"^BD{rot},1,Y", data
    return f"^BC{rot},{height},{t},N,N", data


def barcode_command(element: BarcodeElement, code: CodeValue, x: int, y: int, options: LabelOptions) -> str:
    dpmm = options.dots_per_mm
    rot = zpl_orientation(element.rotation)
    width = mm_to_dots(element.width, dpmm)
    height = mm_to_dots(element.height or DEFAULT_ELEMENT_MM, dpmm)
    vertical = rot in ("R", "B")
    bar_length = height if vertical else width
    bar_height = max(width if vertical else height, 1)

    directive, data = barcode_directive(code, rot, bar_height, element.barcode_show_text, height)

    command = f"^FO{x},{y}"
    narrow = module_width(code.format, code, bar_length)
    if narrow is not None and not directive.startswith(("^BX", "^B7", "^BO", "^BD")):
        command += f"^BY{narrow}"
    return f"{command}{directive}^FD{data}^FS"


# QR


def qr_module_count(data: str, level: str) -> int:
    qr = qrcode.QRCode(error_correction=QR_ERROR_CORRECTION[level], border=0)
    qr.add_data(data)
    qr.make(fit=True)
    return qr.modules_count


def qr_command(element: QrElement, value: str, x: int, y: int, options: LabelOptions) -> str:
    dpmm = options.dots_per_mm
    level = normalize_error_level(element.qr_error_level)
    data = escape_field(value)
    size = min(
        mm_to_dots(element.width or DEFAULT_ELEMENT_MM, dpmm),
        mm_to_dots(element.height or element.width or DEFAULT_ELEMENT_MM, dpmm),
    )

    # newer qrcode releases report an oversized payload as ValueError("Invalid version ...")
    try:
        modules = qr_module_count(data, level)
    except (DataOverflowError, ValueError) as e:
        raise ElementSkipped(SkipReason.QR_OVERFLOW, "Data too long for a QR Code") from e

    mag = max(1, min(options.max_qr_magnification, size // modules))
    return f"^FO{x},{y}^BQN,2,{mag},{level}^FD{level}A,{data}^FS"


# Shapes


def _border_dots(element, options: LabelOptions) -> int:
    width_mm = options.default_border_mm if element.border_width is None else max(element.border_width, 0.0)
    if width_mm == 0:
        return 0
    return max(mm_to_dots(width_mm, options.dots_per_mm), 1)


def rectangle_command(element: RectangleElement, x: int, y: int, options: LabelOptions) -> str:
    dpmm = options.dots_per_mm
    w = max(mm_to_dots(element.width or DEFAULT_ELEMENT_MM, dpmm), 1)
    h = max(mm_to_dots(element.height or DEFAULT_ELEMENT_MM, dpmm), 1)
    rounding = _rounding(element.border_radius)
    commands = []

    if _is_filled(element.background_color):
        fill = _color_letter(element.background_color)
        commands.append(f"^FO{x},{y}^GB{w},{h},{min(w, h)},{fill},{rounding}^FS")

    border = _border_dots(element, options)
    if border:
        color = _color_letter(element.border_color)
        commands.append(f"^FO{x},{y}^GB{w},{h},{min(border, w, h)},{color},{rounding}^FS")

    if not commands:
        raise ElementSkipped(SkipReason.NOTHING_TO_DRAW, "Rectangle has no border and no fill")
    return "\n".join(commands)


def circle_command(element: CircleElement, x: int, y: int, options: LabelOptions) -> str:
    dpmm = options.dots_per_mm
    w = max(mm_to_dots(element.width or DEFAULT_ELEMENT_MM, dpmm), 1)
    h = max(mm_to_dots(element.height or DEFAULT_ELEMENT_MM, dpmm), 1)
    roundness = element.border_radius
    commands = []

    def shape(thickness: int, color: str) -> str:
        if roundness < 100:
            return f"^FO{x},{y}^GB{w},{h},{thickness},{color},{_rounding(roundness)}^FS"
        if w == h:
            return f"^FO{x},{y}^GC{w},{thickness},{color}^FS"
        return f"^FO{x},{y}^GE{w},{h},{thickness},{color}^FS"

    if _is_filled(element.background_color):
        commands.append(shape(max(min(w, h) // 2, 1), _color_letter(element.background_color)))

    border = _border_dots(element, options)
    if border:
        commands.append(shape(min(border, max(min(w, h) // 2, 1)), _color_letter(element.border_color)))

    if not commands:
        raise ElementSkipped(SkipReason.NOTHING_TO_DRAW, "Circle has no border and no fill")
    return "\n".join(commands)


def line_command(element: LineElement, x: int, y: int, options: LabelOptions) -> str:
    dpmm = options.dots_per_mm
    length = max(mm_to_dots(element.width or DEFAULT_ELEMENT_MM, dpmm), 1)
    thickness_mm = element.border_width if element.border_width else (element.height or options.default_border_mm)
    thickness = max(mm_to_dots(max(thickness_mm, 0.0), dpmm), 1)
    color = _color_letter(element.color)

    if zpl_orientation(element.rotation) in ("R", "B"):
        return f"^FO{x},{y}^GB{thickness},{length},{thickness},{color}^FS"
    return f"^FO{x},{y}^GB{length},{thickness},{thickness},{color}^FS"


# Images


def image_command(element: ImageElement, x: int, y: int, options: LabelOptions) -> str:
    if not element.image_data:
        raise ElementSkipped(SkipReason.NO_IMAGE, "Image element has no embedded image data")
    dpmm = options.dots_per_mm
    w = max(mm_to_dots(element.width or DEFAULT_ELEMENT_MM, dpmm), 1)
    h = max(mm_to_dots(element.height or DEFAULT_ELEMENT_MM, dpmm), 1)
    try:
        graphic = image_to_gfa(element.image_data, w, h, options.image_threshold)
    except ImageDecodeError as e:
        raise ElementSkipped(SkipReason.IMAGE_DECODE_FAILED, str(e)) from e
    return f"^FO{x},{y}{graphic}^FS"


# Labels


def element_command(
    element: Element,
    row: Mapping[str, Any],
    mapping: Optional[Mapping[str, str]],
    context: EvaluationContext,
    options: LabelOptions,
) -> str:
    """
    ZPL for a single element.

    Raises:
        ElementSkipped: if the element produces nothing printable
    """
    dpmm = options.dots_per_mm
    x = mm_to_dots(element.x, dpmm)
    y = mm_to_dots(element.y, dpmm)

    if isinstance(element, (TextElement, BarcodeElement, QrElement)):
        value = resolve_value(element, row, mapping, context)
        if value is None:
            raise ElementSkipped(SkipReason.NO_VALUE, "Element has no value for this row")

        if isinstance(element, TextElement):
            return text_command(element, value, x, y, options)

        code = build_code_value(element, value, options.gs1_mode)
        if not code.ok:
            raise ElementSkipped(SkipReason.INVALID_CODE, code.error.message, code.error.code.value)

        if isinstance(element, QrElement):
            return qr_command(element, code.payload, x, y, options)
        return barcode_command(element, code, x, y, options)

    if isinstance(element, RectangleElement):
        return rectangle_command(element, x, y, options)
    if isinstance(element, CircleElement):
        return circle_command(element, x, y, options)
    if isinstance(element, LineElement):
        return line_command(element, x, y, options)
    if isinstance(element, ImageElement):
        return image_command(element, x, y, options)

    raise ElementSkipped(SkipReason.UNSUPPORTED_ELEMENT, f"Unsupported element kind: {type(element).__name__}")


def frame_command(design: Design, width: int, height: int, options: LabelOptions) -> Optional[str]:
    """Label outline from the design border, if it has one."""
    if not design.border_width or design.border_width <= 0:
        return None
    dpmm = options.dots_per_mm
    border = max(mm_to_dots(design.border_width, dpmm), 1)
    radius = mm_to_dots(design.border_radius, dpmm)
    rounding = max(0, min(8, round_half_away(radius / (min(width, height) / 2) * 8))) if radius else 0
    return f"^FO0,0^GB{width},{height},{border},{_color_letter(design.border_color)},{rounding}^FS"


def generate_label(
    design: Design,
    row: Optional[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]],
    context: EvaluationContext,
    options: Optional[LabelOptions] = None,
) -> LabelResult:
    """Generate one ZPL label for ``row``."""
    options = options or LabelOptions()
    row = row or {}
    dpmm = options.dots_per_mm
    width = mm_to_dots(design.width_mm, dpmm)
    height = mm_to_dots(design.height_mm, dpmm)

    lines = ["^XA"]
    if options.utf8:
        lines.append("^CI28")
    lines.append(f"^PW{width}")
    lines.append(f"^LL{height}")

    frame = frame_command(design, width, height, options)
    if frame:
        lines.append(frame)

    result = LabelResult(zpl="", row_index=context.row_index)

    for element in ordered_elements(design):
        try:
            lines.append(element_command(element, row, mapping, context, options))
        except ElementSkipped as e:
            logger.debug("Row %d: skipped element %s (%s): %s",
                         context.row_index, element.id, e.reason.value, e)
            result.skipped.append(SkippedElement(element.id, e.reason, str(e), e.code))
            continue
        result.rendered.append(element.id)

    lines.append("^XZ")
    result.zpl = "\n".join(lines)
    return result


def generate_zpl(
    design: Design,
    row: Optional[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]],
    context: EvaluationContext,
    options: Optional[LabelOptions] = None,
) -> str:
    return generate_label(design, row, mapping, context, options).zpl


def generate_batch(
    design: Design,
    rows: Sequence[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]],
    now: datetime,
    options: Optional[LabelOptions] = None,
) -> BatchResult:
    """
    One label per row; each row sees its own index and the batch size.

    An empty ``rows`` produces a single label with no row data.
    """
    options = options or LabelOptions()
    rows = list(rows) or [{}]
    batch = BatchResult()

    for index, row in enumerate(rows):
        context = EvaluationContext(now=now, row_index=index, batch_size=len(rows))
        batch.labels.append(generate_label(design, row, mapping, context, options))

    return batch
