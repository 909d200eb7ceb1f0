"""
Tests for the template expression evaluator.
"""

from datetime import datetime

import pytest

from label_engine.expressions import (
    ERROR_VALUE,
    FUNCTIONS,
    evaluate,
    format_date,
    is_expression,
    lookup_column,
    stringify,
)
from label_engine.models import EvaluationContext

NOW = datetime(2026, 1, 31, 14, 5, 9)


@pytest.fixture
def ctx():
    return EvaluationContext(now=NOW, row_index=4, batch_size=20)


ROW = {
    "nombre": "Paracetamol",
    "Lote": "L-2301",
    "qty": 12,
    "price": 3.5,
    "empty": "",
    "gtin": "950110153000",
    "fecha": "2026-02-15",
}


class TestBasics:

    def test_plain_text_passes_through(self, ctx):
        assert evaluate("no placeholders", ROW, ctx) == "no placeholders"

    def test_none_template(self, ctx):
        assert evaluate(None, ROW, ctx) == ""

    def test_column_reference(self, ctx):
        assert evaluate("{{nombre}}", ROW, ctx) == "Paracetamol"

    def test_case_insensitive_column(self, ctx):
        assert evaluate("{{lote}}", ROW, ctx) == "L-2301"

    def test_missing_column_is_empty(self, ctx):
        assert evaluate("[{{missing}}]", ROW, ctx) == "[]"

    def test_mixed_template(self, ctx):
        assert evaluate("Lot {{Lote}} x{{qty}}", ROW, ctx) == "Lot L-2301 x12"

    def test_is_expression(self):
        assert is_expression("{{a}}")
        assert not is_expression("a")
        assert not is_expression(None)


class TestDefaultOperator:

    def test_primary_used_when_present(self, ctx):
        assert evaluate("{{nombre || 'N/A'}}", ROW, ctx) == "Paracetamol"

    def test_literal_fallback(self, ctx):
        assert evaluate("{{missing || 'N/A'}}", ROW, ctx) == "N/A"

    def test_column_fallback(self, ctx):
        assert evaluate("{{empty || Lote}}", ROW, ctx) == "L-2301"

    def test_error_falls_back(self, ctx):
        assert evaluate("{{NOPE(1) || 'x'}}", ROW, ctx) == "x"


class TestTextFunctions:

    @pytest.mark.parametrize("template,expected", [
        ("{{MAYUS(nombre)}}", "PARACETAMOL"),
        ("{{UPPER(nombre)}}", "PARACETAMOL"),
        ("{{MINUS(Lote)}}", "l-2301"),
        ("{{RECORTAR(nombre, 4)}}", "Para"),
        ("{{CONCAT(nombre, \" - \", Lote)}}", "Paracetamol - L-2301"),
        ("{{REEMPLAZAR(Lote, \"-\", \"/\")}}", "L/2301"),
        ("{{LARGO(nombre)}}", "11"),
        ("{{MAYUS(RECORTAR(nombre, 3))}}", "PAR"),
    ])
    def test_functions(self, ctx, template, expected):
        assert evaluate(template, ROW, ctx) == expected

    def test_quoted_argument_is_literal(self, ctx):
        """A quoted column name is not looked up."""
        assert evaluate('{{MAYUS("nombre")}}', ROW, ctx) == "NOMBRE"

    def test_function_names_case_insensitive(self, ctx):
        assert evaluate("{{mayus(nombre)}}", ROW, ctx) == "PARACETAMOL"

    def test_unknown_function(self, ctx):
        assert evaluate("a{{EVAL(nombre)}}b", ROW, ctx) == f"a{ERROR_VALUE}b"


class TestDateFunctions:

    def test_today_default_format(self, ctx):
        assert evaluate("{{HOY()}}", ROW, ctx) == "31/01/2026"

    def test_today_custom_format(self, ctx):
        assert evaluate('{{HOY("AAAA-MM-DD")}}', ROW, ctx) == "2026-01-31"

    def test_now(self, ctx):
        assert evaluate("{{AHORA()}}", ROW, ctx) == "31/01/2026 14:05"

    def test_add_days(self, ctx):
        assert evaluate("{{SUMAR_DIAS(HOY(), 30)}}", ROW, ctx) == "02/03/2026"

    def test_add_days_to_column(self, ctx):
        assert evaluate('{{SUMAR_DIAS(fecha, 1, "AAMMDD")}}', ROW, ctx) == "260216"

    def test_add_months_is_calendar_aware(self, ctx):
        """Jan 31 + 1 month clamps to the end of February."""
        assert evaluate("{{SUMAR_MESES(HOY(), 1)}}", ROW, ctx) == "28/02/2026"

    def test_add_months_nested_format(self, ctx):
        assert evaluate('{{SUMAR_MESES(HOY(), 24, "AAMMDD")}}', ROW, ctx) == "280131"

    def test_format_date(self, ctx):
        assert evaluate('{{FORMATO_FECHA(fecha, "DD.MM.AA")}}', ROW, ctx) == "15.02.26"

    def test_format_date_dmy_input(self, ctx):
        assert evaluate('{{FORMATO_FECHA("15/02/2026", "AAAA")}}', ROW, ctx) == "2026"

    def test_timestamp(self, ctx):
        assert evaluate("{{FECHA_ISO()}}", ROW, ctx) == "2026-01-31T14:05:09"

    def test_format_date_tokens(self):
        assert format_date(NOW, "YYYY/MM/DD hh:mm:ss") == "2026/01/31 14:05:09"


class TestCounters:

    def test_counter_uses_row_index(self, ctx):
        assert evaluate("{{CONTADOR()}}", ROW, ctx) == "5"

    def test_counter_start_step_padding(self, ctx):
        assert evaluate("{{CONTADOR(100, 10, 6)}}", ROW, ctx) == "000140"

    def test_batch_code(self, ctx):
        assert evaluate("{{LOTE()}}", ROW, ctx) == "2601-0005"

    def test_row_and_total(self, ctx):
        assert evaluate("{{FILA()}}/{{TOTAL()}}", ROW, ctx) == "5/20"


class TestNumbers:

    @pytest.mark.parametrize("template,expected", [
        ("{{REDONDEAR(2.345, 2)}}", "2.35"),
        ("{{REDONDEAR(2.5)}}", "3"),
        ("{{REDONDEAR(price, 0)}}", "4"),
        ("{{FORMATO_NUM(price, 2)}}", "3.50"),
        ('{{FORMATO_NUM(price, 2, ",")}}', "3,50"),
    ])
    def test_rounding(self, ctx, template, expected):
        assert evaluate(template, ROW, ctx) == expected

    def test_check_digit(self, ctx):
        assert evaluate("{{DIGITO_CONTROL(\"400638133393\")}}", ROW, ctx) == "4006381333931"

    def test_check_digit_of_column(self, ctx):
        assert evaluate("{{DIGITO_CONTROL(gtin)}}", ROW, ctx) == "9501101530003"

    def test_check_digit_of_text_is_error(self, ctx):
        assert evaluate("{{DIGITO_CONTROL(nombre)}}", ROW, ctx) == ERROR_VALUE


class TestConditionals:

    def test_numeric_comparison(self, ctx):
        assert evaluate('{{SI(qty > 10, "many", "few")}}', ROW, ctx) == "many"
        assert evaluate('{{SI(qty < 10, "many", "few")}}', ROW, ctx) == "few"

    def test_string_comparison(self, ctx):
        assert evaluate('{{SI(Lote == "L-2301", "match", "no")}}', ROW, ctx) == "match"

    def test_truthiness(self, ctx):
        assert evaluate('{{SI(nombre, "yes", "no")}}', ROW, ctx) == "yes"
        assert evaluate('{{SI(empty, "yes", "no")}}', ROW, ctx) == "no"

    def test_is_empty(self, ctx):
        assert evaluate("{{VACIO(empty)}}", ROW, ctx) == "true"
        assert evaluate("{{VACIO(nombre)}}", ROW, ctx) == "false"

    def test_default(self, ctx):
        assert evaluate('{{POR_DEFECTO(empty, "none")}}', ROW, ctx) == "none"


class TestStringify:

    @pytest.mark.parametrize("value,expected", [
        (None, None),
        (float("nan"), None),
        (12.0, "12"),
        (3.25, "3.25"),
        (True, "true"),
        (datetime(2026, 2, 1), "2026-02-01"),
        (datetime(2026, 2, 1, 8, 30), "2026-02-01T08:30:00"),
        ("x", "x"),
    ])
    def test_values(self, value, expected):
        assert stringify(value) == expected

    def test_lookup_prefers_exact_case(self):
        assert lookup_column("a", {"A": "upper", "a": "lower"}) == "lower"


def test_spanish_and_english_names_share_functions():
    assert FUNCTIONS["MAYUS"] is FUNCTIONS["UPPER"]
    assert FUNCTIONS["SUMAR_MESES"] is FUNCTIONS["ADD_MONTHS"]
