"""
Tests for element value resolution order.
"""

from datetime import datetime

import pytest

from label_engine.models import BarcodeElement, EvaluationContext, TextElement
from label_engine.resolver import resolve_value


@pytest.fixture
def ctx():
    return EvaluationContext(now=datetime(2026, 3, 1), row_index=0, batch_size=1)


class TestResolutionOrder:

    def test_expression_binding_wins(self, ctx):
        element = TextElement(id="t1", binding="{{MAYUS(name)}}", text_content="static")
        row = {"name": "ibuprofen"}
        assert resolve_value(element, row, {"t1": "other"}, ctx) == "IBUPROFEN"

    def test_mapping_column(self, ctx):
        element = TextElement(id="t1", binding="name", text_content="static")
        row = {"name": "from binding", "col_a": "from mapping"}
        assert resolve_value(element, row, {"t1": "col_a"}, ctx) == "from mapping"

    def test_binding_as_column(self, ctx):
        element = TextElement(id="t1", binding="name", text_content="static")
        assert resolve_value(element, {"name": "bound"}, {}, ctx) == "bound"

    def test_mapping_to_missing_column_falls_through(self, ctx):
        element = TextElement(id="t1", binding="name")
        row = {"name": "bound"}
        assert resolve_value(element, row, {"t1": "absent"}, ctx) == "bound"

    def test_text_content_last(self, ctx):
        element = TextElement(id="t1", binding="name", text_content="static")
        assert resolve_value(element, {}, None, ctx) == "static"

    def test_no_value(self, ctx):
        element = BarcodeElement(id="b1")
        assert resolve_value(element, {"x": "1"}, None, ctx) is None

    def test_empty_expression_is_no_value(self, ctx):
        """An expression evaluating to "" is absent, not empty text."""
        element = TextElement(id="t1", binding="{{missing}}", text_content="static")
        assert resolve_value(element, {}, None, ctx) is None

    def test_blank_cell_falls_through(self, ctx):
        element = TextElement(id="t1", binding="name", text_content="static")
        assert resolve_value(element, {"name": ""}, None, ctx) == "static"

    def test_numeric_cell_is_text(self, ctx):
        element = BarcodeElement(id="b1", binding="ean")
        assert resolve_value(element, {"ean": 4006381333931.0}, None, ctx) == "4006381333931"

    def test_none_row(self, ctx):
        element = TextElement(id="t1", text_content="static")
        assert resolve_value(element, None, None, ctx) == "static"
