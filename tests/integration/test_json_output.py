"""
Tests for JSON formatter output.

Ensures clean JSON output with:
- Human-readable field names
- Proper date formatting (dd/mm/yyyy)
- Engine results (reports, batches) serialised as plain objects
"""

import json
from datetime import datetime

from label_engine.compliance import validate_design
from label_engine.formatters import (
    format_date_ddmmyyyy,
    parse_gs1_to_dict,
    parse_gs1_to_json,
    to_json,
)
from label_engine.gs1 import GS
from label_engine.models import Design, TextElement
from label_engine.printing import generate_batch


class TestJSONOutput:
    """Test JSON output formatting."""

    def test_basic_json_output(self):
        """Raw element string with a separator after the lot."""
        barcode = f"01062867400002491728043010GB2C{GS}2171490437969853"

        data = json.loads(parse_gs1_to_json(barcode))

        assert data == {
            "GTIN Code": "06286740000249",
            "Expiry Date": "30/04/2028",
            "Batch/Lot Number": "GB2C",
            "Serial Number": "71490437969853",
        }

    def test_bracketed_input(self):
        data = parse_gs1_to_dict("(01)06285096000842(17)290131")
        assert data["GTIN Code"] == "06285096000842"
        assert data["Expiry Date"] == "31/01/2029"

    def test_key_order_follows_input(self):
        data = parse_gs1_to_dict("(10)LOT1(01)06285096000842")
        assert list(data) == ["Batch/Lot Number", "GTIN Code"]

    def test_raw_date_values(self):
        data = parse_gs1_to_dict("(17)290131", include_raw_values=True)
        assert data["Expiry Date"] == {"formatted": "31/01/2029", "raw": "290131"}

    def test_unnamed_ai_uses_table_title(self):
        data = parse_gs1_to_dict("(3103)000500")
        assert list(data.values()) == ["000500"]
        assert "(3103)" not in list(data)[0]

    def test_error_is_reported(self):
        data = parse_gs1_to_dict("0106285096000842" "5512")
        assert data["GTIN Code"] == "06285096000842"
        assert data["_error"]["code"] == "UNKNOWN_AI"
        assert data["_error"]["at_index"] == 16

    def test_non_ascii_kept(self):
        output = parse_gs1_to_json("(10)LOTE-Ñ1")
        assert "LOTE-Ñ1" in output

    def test_compact_output(self):
        assert "\n" not in parse_gs1_to_json("(10)ABC", indent=None)


class TestDateFormatting:
    """Test date formatting edge cases."""

    def test_normal_date(self):
        assert format_date_ddmmyyyy("280430") == "30/04/2028"

    def test_day_zero(self):
        """Day 00 means the last day of the month; shown as XX."""
        assert format_date_ddmmyyyy("280400") == "XX/04/2028"

    def test_previous_century(self):
        assert format_date_ddmmyyyy("991231") == "31/12/1999"

    def test_not_a_date(self):
        assert format_date_ddmmyyyy("12AB") == "12AB"


class TestResultSerialisation:

    def test_report(self):
        design = Design(width_mm=50, height_mm=30)
        data = json.loads(to_json(validate_design(design, "gs1")))
        assert data["standard"] == "gs1"
        assert data["issues"][0]["code"] == "GS1_NO_BARCODE"

    def test_batch(self):
        design = Design(width_mm=50, height_mm=30, elements=(TextElement(id="t", binding="name"),))
        batch = generate_batch(design, [{"name": "A"}, {}], None, datetime(2026, 1, 1))
        data = json.loads(to_json(batch))
        assert [label["rendered"] for label in data["labels"]] == [["t"], []]
        assert data["labels"][1]["skipped"][0]["reason"] == "NO_VALUE"

    def test_plain_data(self):
        assert to_json({"a": 1}, indent=None) == '{"a": 1}'
