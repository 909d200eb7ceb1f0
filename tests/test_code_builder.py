"""
Tests for the code value builder.
"""

import pytest

from label_engine.codes import build_code_value, build_format_value, normalize_format
from label_engine.codes.builder import element_format, normalize_error_level
from label_engine.gs1 import GS, ErrorCode
from label_engine.models import BarcodeElement, QrElement
from label_engine.options import Gs1Mode


class TestRetailKeys:

    def test_complete_mode_appends_check_digit(self):
        code = build_format_value("EAN13", "400638133393")
        assert code.ok
        assert code.payload == "4006381333931"
        assert code.check_digit_added

    def test_full_key_is_verified(self):
        code = build_format_value("EAN13", "4006381333931")
        assert code.payload == "4006381333931"
        assert not code.check_digit_added

    def test_wrong_check_digit(self):
        code = build_format_value("EAN13", "4006381333932")
        assert not code.ok
        assert code.payload is None
        assert code.error.code == ErrorCode.CHECKSUM_MISMATCH
        assert code.error.meta["expected_check_digit"] == 1

    def test_validate_mode_does_not_complete(self):
        code = build_format_value("EAN13", "400638133393", Gs1Mode.VALIDATE)
        assert code.error.code == ErrorCode.WRONG_LENGTH

    def test_off_mode_passes_through(self):
        code = build_format_value("EAN13", "4006381333932", Gs1Mode.OFF)
        assert code.ok
        assert code.payload == "4006381333932"

    def test_letters(self):
        code = build_format_value("EAN8", "12AB567")
        assert code.error.code == ErrorCode.NOT_DIGITS

    def test_wrong_length(self):
        assert build_format_value("UPC", "12345").error.code == ErrorCode.WRONG_LENGTH

    @pytest.mark.parametrize("fmt,value,payload", [
        ("EAN8", "9638507", "96385074"),
        ("UPC", "03600029145", "036000291452"),
        ("ITF14", "1234567890123", "12345678901231"),
    ])
    def test_completion_per_format(self, fmt, value, payload):
        assert build_format_value(fmt, value).payload == payload

    def test_mode_accepts_string(self):
        assert build_format_value("EAN13", "400638133393", "validate").error is not None


class TestGs1AIData:

    def test_raw_element_string(self):
        code = build_format_value("GS1_128", "0109501101530003" "10ABC" f"{GS}" "17280131")
        assert code.ok
        assert code.gs1
        assert code.ais == [("01", "09501101530003"), ("10", "ABC"), ("17", "280131")]
        assert code.hri == "(01)09501101530003(10)ABC(17)280131"
        assert code.payload == f"0109501101530003" f"10ABC{GS}" "17280131"

    def test_bracketed_input(self):
        code = build_format_value("GS1_128", "(01)09501101530003(10)ABC")
        assert code.payload == "010950110153000310ABC"
        assert code.hri == "(01)09501101530003(10)ABC"

    def test_bracketed_gtin_completed(self):
        code = build_format_value("GS1_128", "(01)0950110153000(10)ABC")
        assert code.ais[0] == ("01", "09501101530003")
        assert code.check_digit_added

    def test_invalid_gtin_check_digit(self):
        code = build_format_value("GS1_128", "(01)09501101530004")
        assert code.error.code == ErrorCode.CHECKSUM_MISMATCH
        assert code.error.meta["ai"] == "01"

    def test_unknown_ai(self):
        code = build_format_value("GS1_128", "5512345")
        assert code.error.code == ErrorCode.UNKNOWN_AI

    def test_invalid_date(self):
        code = build_format_value("GS1_128", "(17)281331")
        assert code.error.code == ErrorCode.INVALID_AI_VALUE

    def test_off_mode_keeps_raw_payload(self):
        code = build_format_value("GS1_128", "(01)09501101530004", Gs1Mode.OFF)
        assert code.ok
        assert code.payload == "(01)09501101530004"

    def test_datamatrix_flagged_as_gs1(self):
        code = build_format_value("DATAMATRIX", "(01)09501101530003(21)SN1")
        assert code.gs1
        assert code.payload == "010950110153000321SN1"

    def test_plain_datamatrix_passes_through(self):
        code = build_format_value("DATAMATRIX", "hello world")
        assert not code.gs1
        assert code.payload == "hello world"

    def test_databar_gtin(self):
        code = build_format_value("GS1_DATABAR", "0950110153000")
        assert code.payload == "09501101530003"
        assert code.hri == "(01)09501101530003"
        assert code.gs1

    def test_databar_bracketed_must_be_single_gtin(self):
        code = build_format_value("GS1_DATABAR", "(01)09501101530003(10)A")
        assert code.error.code == ErrorCode.INVALID_AI_VALUE


class TestOtherSymbologies:

    def test_code128_passes_anything(self):
        assert build_format_value("CODE128", "Any text 123").payload == "Any text 123"

    def test_code39_charset(self):
        assert build_format_value("CODE39", "ABC-123").ok
        assert build_format_value("CODE39", "abc_123").error.code == ErrorCode.INVALID_CHARACTERS

    def test_codabar(self):
        assert build_format_value("CODABAR", "A12345B").ok
        assert not build_format_value("CODABAR", "12345").ok

    def test_postnet_lengths(self):
        assert build_format_value("POSTNET", "12345").ok
        assert build_format_value("POSTNET", "1234").error.code == ErrorCode.WRONG_LENGTH

    def test_msi_digits(self):
        assert build_format_value("MSI", "12A").error.code == ErrorCode.NOT_DIGITS

    def test_qr_passes_through(self):
        assert build_format_value("QR", "https://example.com/?a=1").payload == "https://example.com/?a=1"

    def test_empty_value(self):
        assert build_format_value("CODE128", "").error.code == ErrorCode.EMPTY_INPUT
        assert build_format_value("CODE128", None).error.code == ErrorCode.EMPTY_INPUT

    def test_unsupported(self):
        assert build_format_value("SNOWFLAKE", "1").error.code == ErrorCode.UNSUPPORTED_FORMAT


class TestFormatNames:

    @pytest.mark.parametrize("name,expected", [
        ("ean-13", "EAN13"),
        ("UPC_A", "UPC"),
        ("gs1-128", "GS1_128"),
        ("Data Matrix", "DATAMATRIX"),
        (None, "CODE128"),
    ])
    def test_normalize(self, name, expected):
        assert normalize_format(name) == expected

    def test_error_level(self):
        assert normalize_error_level("h") == "H"
        assert normalize_error_level("Z") == "M"
        assert normalize_error_level(None) == "M"

    def test_element_format(self):
        assert element_format(QrElement(id="q")) == "QR"
        assert element_format(BarcodeElement(id="b", barcode_format="ean13")) == "EAN13"

    def test_build_code_value_uses_element_format(self):
        element = BarcodeElement(id="b", barcode_format="EAN13")
        assert build_code_value(element, "400638133393").payload == "4006381333931"

    def test_to_dict(self):
        data = build_format_value("EAN13", "4006381333932").to_dict()
        assert data["payload"] is None
        assert data["error"]["code"] == "CHECKSUM_MISMATCH"
