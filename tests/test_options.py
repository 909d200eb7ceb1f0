"""
Tests for engine configuration.
"""

import pytest

from label_engine.models import EvaluationContext
from label_engine.options import Gs1Mode, LabelOptions


class TestLabelOptions:

    @pytest.mark.parametrize("dpi,dots", [(203, 8), (300, 12), (600, 24), (152, 6)])
    def test_dots_per_mm(self, dpi, dots):
        assert LabelOptions(dpi=dpi).dots_per_mm == dots

    def test_from_dict(self):
        options = LabelOptions.from_dict({"dpi": 300, "gs1_mode": "validate", "theme": "dark"})
        assert options.dpi == 300
        assert options.gs1_mode == Gs1Mode.VALIDATE

    def test_from_empty(self):
        assert LabelOptions.from_dict(None) == LabelOptions()

    def test_to_dict(self):
        data = LabelOptions().to_dict()
        assert data["gs1_mode"] == "complete"
        assert data["dpi"] == 203

    @pytest.mark.parametrize("kwargs", [
        {"dpi": 0},
        {"gs1_mode": "sometimes"},
        {"line_height_ratio": 0},
        {"image_threshold": 300},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            LabelOptions(**kwargs)


class TestEvaluationContext:

    def test_negative_row_index(self):
        with pytest.raises(ValueError):
            EvaluationContext(now=None, row_index=-1)

    def test_empty_batch(self):
        with pytest.raises(ValueError):
            EvaluationContext(now=None, batch_size=0)
