"""
Preview code images.

Encodes every barcode and QR element of a design for one data row and
returns PNG data URLs keyed by element id.

Encoders:
- QR Code            -> qrcode
- Code 128, Code 39, EAN-13, EAN-8, UPC-A, ITF-14, GS1-128
                     -> python-barcode with the Pillow ImageWriter

Symbologies without a Python encoder are reported per element as
UNSUPPORTED_FORMAT; the printer path still handles them natively.
"""

from __future__ import annotations

import base64
import io
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import barcode
import qrcode
from barcode.errors import BarcodeError
from barcode.writer import ImageWriter
from qrcode.exceptions import DataOverflowError
from PIL import Image

from ..gs1 import GS, ErrorCode
from ..models import BarcodeElement, Design, EvaluationContext, QrElement
from ..options import LabelOptions
from ..resolver import resolve_value
from .builder import CodeError, CodeValue, build_code_value, normalize_error_level

logger = logging.getLogger(__name__)

# python-barcode class name and constructor options per symbology
PYTHON_BARCODE_CLASSES: Dict[str, tuple] = {
    "CODE128": ("code128", {}),
    "CODE39": ("code39", {"add_checksum": False}),
    "EAN13": ("ean13", {}),
    "EAN8": ("ean8", {}),
    "UPC": ("upca", {}),
    "ITF14": ("itf", {}),
    "GS1_128": ("gs1_128", {}),
}

QR_ERROR_CORRECTION = {
    "L": qrcode.constants.ERROR_CORRECT_L,
    "M": qrcode.constants.ERROR_CORRECT_M,
    "Q": qrcode.constants.ERROR_CORRECT_Q,
    "H": qrcode.constants.ERROR_CORRECT_H,
}

# python-barcode marks FNC1 with this character inside Code 128 data
PYTHON_BARCODE_FNC1 = "\xf1"


class EncodingError(Exception):
    """Raised when a valid payload still cannot be drawn."""

    def __init__(self, code: ErrorCode, message: str):
        super().__init__(message)
        self.code = code


@dataclass
class PreviewResult:
    """Encoded preview images and per-element problems."""
    images: Dict[str, str] = field(default_factory=dict)
    values: Dict[str, CodeValue] = field(default_factory=dict)
    errors: Dict[str, CodeError] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "images": dict(self.images),
            "errors": {k: v.to_dict() for k, v in self.errors.items()},
        }


def to_data_url(image: Image.Image) -> str:
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def render_qr(payload: str, error_level: str = "M", color: str = "#000000",
              background: Optional[str] = None) -> Image.Image:
    qr = qrcode.QRCode(
        version=None,
        error_correction=QR_ERROR_CORRECTION[normalize_error_level(error_level)],
        box_size=10,
        border=0,
    )
    qr.add_data(payload)
    try:
        qr.make(fit=True)
    except (DataOverflowError, ValueError) as e:
        raise EncodingError(ErrorCode.WRONG_LENGTH, "Data too long for a QR Code") from e
    return qr.make_image(fill_color=color, back_color=background or "white").convert("RGB")


def render_barcode(code: CodeValue, height_mm: float = 15.0, show_text: bool = False,
                   color: str = "#000000", background: Optional[str] = None) -> Image.Image:
    spec = PYTHON_BARCODE_CLASSES.get(code.format)
    if spec is None:
        raise EncodingError(ErrorCode.UNSUPPORTED_FORMAT, f"No preview encoder for {code.format}")

    name, kwargs = spec
    data = code.payload
    if code.format == "GS1_128":
        data = data.replace(GS, PYTHON_BARCODE_FNC1)

    writer_options = {
        "module_width": 0.2,
        "module_height": height_mm or 15.0,
        "quiet_zone": 1.0,
        "write_text": show_text,
        "font_size": 10 if show_text else 0,
        "text_distance": 3.0,
        "foreground": color,
        "background": background or "white",
    }

    try:
        bc_class = barcode.get_barcode_class(name)
        bc = bc_class(data, writer=ImageWriter(), **kwargs)
        return bc.render(writer_options)
    except (BarcodeError, ValueError) as e:
        raise EncodingError(ErrorCode.INVALID_CHARACTERS, str(e)) from e


def encode_element(element, code: CodeValue) -> Image.Image:
    if isinstance(element, QrElement):
        return render_qr(code.payload, element.qr_error_level, element.color, element.background_color)
    return render_barcode(
        code,
        height_mm=element.height,
        show_text=element.barcode_show_text,
        color=element.color,
        background=element.background_color,
    )


def generate_codes(
    design: Design,
    row: Optional[Mapping[str, Any]],
    mapping: Optional[Mapping[str, str]],
    context: EvaluationContext,
    options: Optional[LabelOptions] = None,
) -> PreviewResult:
    """
    Encode every visible barcode and QR element for one row.

    Elements without a value are left out; elements whose value fails
    validation or encoding are reported in ``errors``.
    """
    options = options or LabelOptions()
    result = PreviewResult()

    for element in design.elements:
        if not element.visible or not isinstance(element, (BarcodeElement, QrElement)):
            continue

        value = resolve_value(element, row, mapping, context)
        if value is None:
            continue

        code = build_code_value(element, value, options.gs1_mode)
        result.values[element.id] = code
        if not code.ok:
            result.errors[element.id] = code.error
            continue

        try:
            image = encode_element(element, code)
        except EncodingError as e:
            logger.debug("Preview of %s skipped: %s", element.id, e)
            result.errors[element.id] = CodeError(e.code, str(e))
            continue

        result.images[element.id] = to_data_url(image)

    return result
