"""
Tests for the text auto-fit heuristic.
"""

import pytest

from label_engine.models import TextElement
from label_engine.options import LabelOptions
from label_engine.printing import estimate_lines, fit_font_dots, fit_text_element
from label_engine.printing.autofit import text_fits


class TestEstimateLines:

    def test_single_line(self):
        # 10 dots -> 6 dot glyphs -> 40 chars per 240 dot line
        assert estimate_lines("x" * 40, 10, 240) == 1

    def test_wraps(self):
        assert estimate_lines("x" * 41, 10, 240) == 2

    def test_paragraphs_counted_separately(self):
        assert estimate_lines("a\nb\nc", 10, 240) == 3

    def test_empty_paragraph_takes_a_line(self):
        assert estimate_lines("a\n\nb", 10, 240) == 3

    def test_narrow_box_keeps_one_char_per_line(self):
        assert estimate_lines("abc", 100, 5) == 3


class TestFitFontDots:

    def test_reference_case(self):
        """200 chars in a 240x64 dot box shrink from 32 to 10 dots."""
        result = fit_font_dots("x" * 200, 240, 64, 32, 8)
        assert result.font_dots == 10
        assert result.lines == 5
        assert not result.overflows

    def test_fitting_text_keeps_declared_size(self):
        result = fit_font_dots("short", 240, 64, 32, 8)
        assert result.font_dots == 32

    def test_disabled_returns_declared_size(self):
        result = fit_font_dots("x" * 200, 240, 64, 32, 8, enabled=False)
        assert result.font_dots == 32

    def test_floor_reached_overflows(self):
        result = fit_font_dots("x" * 5000, 240, 64, 32, 8)
        assert result.font_dots == 8
        assert result.overflows

    def test_declared_below_floor_returns_floor(self):
        result = fit_font_dots("x", 240, 64, 4, 8)
        assert result.font_dots == 8

    def test_empty_text(self):
        assert fit_font_dots("", 240, 64, 32, 8).font_dots == 32

    def test_degenerate_box(self):
        assert fit_font_dots("abc", 0, 0, 32, 8).font_dots == 32

    @pytest.mark.parametrize("length", [1, 30, 120, 400])
    def test_result_is_largest_fitting_size(self, length):
        text = "x" * length
        result = fit_font_dots(text, 240, 64, 40, 6)
        assert text_fits(text, result.font_dots, 240, 64) or result.font_dots == 6
        if result.font_dots < 40:
            assert not text_fits(text, result.font_dots + 1, 240, 64)

    def test_idempotent(self):
        """Refitting at the chosen size changes nothing."""
        first = fit_font_dots("x" * 200, 240, 64, 32, 8)
        second = fit_font_dots("x" * 200, 240, 64, first.font_dots, 8)
        assert second == first

    def test_monotonic_in_length(self):
        sizes = [fit_font_dots("x" * n, 240, 64, 32, 8).font_dots for n in (10, 50, 100, 200, 400)]
        assert sizes == sorted(sizes, reverse=True)


class TestFitTextElement:

    def test_element_units(self):
        """font_size 24 canvas px at 8 dots/mm is 32 dots."""
        element = TextElement(id="t", width=30, height=8, font_size=24, text_auto_fit=True)
        assert fit_text_element(element, "x" * 200, LabelOptions(dpi=203)).font_dots == 10

    def test_auto_fit_off(self):
        element = TextElement(id="t", width=30, height=8, font_size=24)
        assert fit_text_element(element, "x" * 200, LabelOptions(dpi=203)).font_dots == 32

    def test_element_floor(self):
        element = TextElement(
            id="t", width=30, height=8, font_size=24,
            text_auto_fit=True, text_min_font_size=12,
        )
        # 12 px = 2 mm = 16 dots
        assert fit_text_element(element, "x" * 5000, LabelOptions(dpi=203)).font_dots == 16

    def test_higher_resolution(self):
        element = TextElement(id="t", width=30, height=8, font_size=24)
        assert fit_text_element(element, "abc", LabelOptions(dpi=300)).font_dots == 48
