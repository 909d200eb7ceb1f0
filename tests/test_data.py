"""
Tests for loading designs, mappings and data rows from files.
"""

import json

import pandas as pd
import pytest

from label_engine.data import load_design, load_mapping, load_rows, to_rows
from label_engine.models import DesignError


class TestRows:

    def test_csv_keeps_text(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_text("EAN, Producto\n0012345678905,Ibuprofeno\n", encoding="utf-8")
        assert load_rows(path) == [{"EAN": "0012345678905", "Producto": "Ibuprofeno"}]

    def test_csv_with_bom(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_bytes(b"\xef\xbb\xbfLote\nL1\n")
        assert load_rows(path) == [{"Lote": "L1"}]

    def test_blank_cells_dropped(self, tmp_path):
        path = tmp_path / "rows.csv"
        path.write_text("a,b\n1,\n,2\n", encoding="utf-8")
        assert load_rows(path) == [{"a": "1"}, {"b": "2"}]

    def test_excel(self, tmp_path):
        path = tmp_path / "rows.xlsx"
        pd.DataFrame({"EAN": ["0012345678905"], "Producto": ["Paracetamol"]}).to_excel(path, index=False)
        assert load_rows(path) == [{"EAN": "0012345678905", "Producto": "Paracetamol"}]

    def test_to_rows(self):
        df = pd.DataFrame({"x": ["1", None], " y ": ["a", "b"]})
        assert to_rows(df) == [{"x": "1", "y": "a"}, {"y": "b"}]


class TestDesignFiles:

    def test_load_design(self, tmp_path):
        path = tmp_path / "design.json"
        path.write_text(json.dumps({
            "width_mm": 40, "height_mm": 20,
            "elements": [{"id": "t", "type": "text", "textContent": "Hola"}],
        }), encoding="utf-8")
        design = load_design(path)
        assert design.width_mm == 40.0
        assert design.get_element("t").text_content == "Hola"

    def test_design_must_be_object(self, tmp_path):
        path = tmp_path / "design.json"
        path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(DesignError):
            load_design(path)

    def test_load_mapping(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text(json.dumps({"ean": "EAN", "n": 3}), encoding="utf-8")
        assert load_mapping(path) == {"ean": "EAN", "n": "3"}

    def test_mapping_must_be_object(self, tmp_path):
        path = tmp_path / "mapping.json"
        path.write_text('"EAN"', encoding="utf-8")
        with pytest.raises(ValueError):
            load_mapping(path)
