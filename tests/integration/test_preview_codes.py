"""
Preview images for barcode and QR elements.
"""

import base64
import io
from datetime import datetime

import pytest
from PIL import Image

from label_engine.codes import generate_codes
from label_engine.gs1 import ErrorCode
from label_engine.models import BarcodeElement, Design, EvaluationContext, QrElement, TextElement
from label_engine.options import Gs1Mode, LabelOptions

PREFIX = "data:image/png;base64,"

CTX = EvaluationContext(now=datetime(2026, 1, 31))


def decode(url):
    assert url.startswith(PREFIX)
    return Image.open(io.BytesIO(base64.b64decode(url[len(PREFIX):])))


def preview(*elements, row=None, options=None):
    design = Design(width_mm=60, height_mm=40, elements=tuple(elements))
    return generate_codes(design, row or {}, None, CTX, options)


class TestPreview:

    @pytest.mark.parametrize("fmt,value", [
        ("EAN13", "400638133393"),
        ("EAN8", "9638507"),
        ("CODE128", "ABC-123"),
        ("CODE39", "ABC123"),
        ("ITF14", "1234567890123"),
        ("GS1_128", "(01)09501101530003(10)ABC"),
    ])
    def test_linear_formats(self, fmt, value):
        result = preview(BarcodeElement(id="b", barcode_format=fmt, text_content=value))
        assert result.errors == {}
        image = decode(result.images["b"])
        assert image.format == "PNG"
        assert image.width > 0

    def test_qr(self):
        result = preview(QrElement(id="q", binding="url"), row={"url": "https://example.com/p/1"})
        assert set(result.images) == {"q"}
        image = decode(result.images["q"])
        assert image.width == image.height

    def test_completed_value_reported(self):
        result = preview(BarcodeElement(id="b", barcode_format="EAN13", text_content="400638133393"))
        assert result.values["b"].payload == "4006381333931"

    def test_invalid_value(self):
        result = preview(BarcodeElement(id="b", barcode_format="EAN13", text_content="4006381333932"))
        assert result.images == {}
        assert result.errors["b"].code == ErrorCode.CHECKSUM_MISMATCH

    def test_no_preview_encoder(self):
        result = preview(BarcodeElement(id="b", barcode_format="DATAMATRIX", text_content="hello"))
        assert result.errors["b"].code == ErrorCode.UNSUPPORTED_FORMAT

    def test_qr_overflow(self):
        result = preview(QrElement(id="q", qr_error_level="H", text_content="x" * 5000))
        assert "q" in result.errors
        assert result.images == {}

    def test_elements_without_value_omitted(self):
        result = preview(
            BarcodeElement(id="b", barcode_format="EAN13", binding="ean"),
            TextElement(id="t", text_content="not a code"),
        )
        assert result.images == {}
        assert result.errors == {}

    def test_hidden_elements_omitted(self):
        result = preview(BarcodeElement(id="b", visible=False, text_content="ABC"))
        assert result.images == {}

    def test_off_mode_skips_validation(self):
        options = LabelOptions(gs1_mode=Gs1Mode.OFF)
        result = preview(
            BarcodeElement(id="b", barcode_format="CODE128", text_content="4006381333932"),
            options=options,
        )
        assert "b" in result.images

    def test_to_dict(self):
        result = preview(
            BarcodeElement(id="ok", barcode_format="CODE128", text_content="A"),
            BarcodeElement(id="bad", barcode_format="EAN13", text_content="1"),
        )
        data = result.to_dict()
        assert list(data["images"]) == ["ok"]
        assert data["errors"]["bad"]["code"] == "WRONG_LENGTH"
