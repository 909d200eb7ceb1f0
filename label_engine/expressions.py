"""
Template Expression Evaluator

Evaluates ``{{...}}`` placeholders in element bindings against a data row
and an evaluation context.

Grammar inside a placeholder:
- ``column``              value of a row column (case-insensitive fallback)
- ``FUNC(arg, ...)``      whitelisted function; args may be nested calls,
                          quoted literals, numbers or column names
- ``a || b``              ``a`` unless it is empty or an error, else ``b``

Function names are the Spanish names stored in existing designs; English
aliases are accepted too. Unknown functions and failing calls evaluate
to ``#ERR#`` without affecting the rest of the template.

No dynamic code evaluation is ever performed.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, datetime, timedelta
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Callable, Dict, List, Mapping, Optional

from dateutil.parser import isoparse
from dateutil.relativedelta import relativedelta

from .gs1.checksum import append_check_digit
from .models import EvaluationContext

logger = logging.getLogger(__name__)

ERROR_VALUE = "#ERR#"

DEFAULT_DATE_FORMAT = "DD/MM/AAAA"
DEFAULT_DATETIME_FORMAT = "DD/MM/AAAA hh:mm"
DEFAULT_BATCH_FORMAT = "AAMM-####"

PLACEHOLDER = re.compile(r"\{\{(.+?)\}\}")
DATE_TOKENS = re.compile(r"AAAA|YYYY|AA|YY|DD|MM|hh|mm|ss")
INT_PREFIX = re.compile(r"^\s*([-+]?\d+)")
COMPARISON_OPERATORS = ("==", "!=", ">=", "<=", ">", "<")

Function = Callable[[List["Arg"], Mapping[str, Any], EvaluationContext], str]

FUNCTIONS: Dict[str, Function] = {}


class Arg(str):
    """Resolved function argument; ``quoted`` marks a string literal."""
    quoted = False


def _literal(text: str) -> Arg:
    arg = Arg(text)
    arg.quoted = True
    return arg


def register(*names: str):
    """Register a function under one or more names."""
    def decorator(func: Function) -> Function:
        for name in names:
            FUNCTIONS[name] = func
        return func
    return decorator


def is_expression(binding: Optional[str]) -> bool:
    return isinstance(binding, str) and "{{" in binding


def stringify(value: Any) -> Optional[str]:
    """
    Render a row scalar as text.

    None and NaN are absent (None); integral floats drop the ".0";
    booleans are "true"/"false"; dates use ISO-8601.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
        return repr(value)
    if isinstance(value, datetime):
        if value.time() == datetime.min.time():
            return value.date().isoformat()
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def lookup_column(name: str, row: Mapping[str, Any]) -> Optional[str]:
    """Exact column match first, then case-insensitive."""
    if not row:
        return None
    if name in row:
        return stringify(row[name])
    lowered = name.lower()
    for key in row:
        if isinstance(key, str) and key.lower() == lowered:
            return stringify(row[key])
    return None


def evaluate(template: Optional[str], row: Mapping[str, Any], context: EvaluationContext) -> str:
    """Replace every ``{{...}}`` in ``template`` with its evaluated value."""
    if template is None:
        return ""
    if "{{" not in template:
        return template

    def replace(match: re.Match) -> str:
        expr = match.group(1).strip()
        try:
            return resolve_expression(expr, row, context)
        except (ValueError, TypeError, ArithmeticError, IndexError, KeyError) as e:
            logger.debug("Expression %r failed: %s", expr, e)
            return ERROR_VALUE

    return PLACEHOLDER.sub(replace, template)


def resolve_expression(expr: str, row: Mapping[str, Any], context: EvaluationContext) -> str:
    if "||" in expr:
        primary, alternative = expr.split("||", 1)
        result = resolve_expression(primary.strip(), row, context)
        if result and result != ERROR_VALUE:
            return result
        alternative = alternative.strip()
        alt_result = resolve_expression(alternative, row, context)
        if not alt_result and alternative and "(" not in alternative:
            return _unquote(alternative)
        return alt_result

    if "(" in expr:
        return resolve_function(expr, row, context)

    return lookup_column(expr, row) or ""


def _unquote(text: str) -> str:
    if len(text) >= 2 and text[0] == text[-1] and text[0] in "\"'":
        return text[1:-1]
    return text


def resolve_function(expr: str, row: Mapping[str, Any], context: EvaluationContext) -> str:
    paren = expr.index("(")
    name = expr[:paren].strip().upper()
    inner = expr[paren + 1:]
    if inner.endswith(")"):
        inner = inner[:-1]
    args = parse_args(inner.strip(), row, context)

    func = FUNCTIONS.get(name)
    if func is None:
        logger.debug("Unknown expression function %s", name)
        return ERROR_VALUE
    return func(args, row, context)


def parse_args(text: str, row: Mapping[str, Any], context: EvaluationContext) -> List[Arg]:
    """Split an argument list on top-level commas and resolve each argument."""
    args: List[Arg] = []
    if not text:
        return args

    current = ""
    quoted = False
    quote_char = None
    depth = 0

    for char in text:
        if quote_char:
            if char != quote_char or depth > 0:
                current += char
            if char == quote_char:
                quote_char = None
        elif char in "\"'":
            quote_char = char
            if depth > 0:
                current += char
            else:
                quoted = True
        elif char == "(":
            depth += 1
            current += char
        elif char == ")":
            depth -= 1
            current += char
        elif char == "," and depth == 0:
            args.append(_resolve_arg(current, quoted, row, context))
            current, quoted = "", False
        elif char.isspace() and depth == 0 and (quoted or not current):
            continue
        else:
            current += char

    if current.strip() or quoted:
        args.append(_resolve_arg(current, quoted, row, context))

    return args


def _resolve_arg(raw: str, quoted: bool, row: Mapping[str, Any], context: EvaluationContext) -> Arg:
    if quoted:
        return _literal(raw)
    arg = raw.strip()
    if not arg:
        return Arg("")
    if "(" in arg:
        return Arg(resolve_function(arg, row, context))
    if _parse_number(arg) is not None:
        return Arg(arg)
    value = lookup_column(arg, row)
    return Arg(arg if value is None else value)


def _arg(args: List[Arg], index: int) -> str:
    return str(args[index]) if index < len(args) else ""


def _parse_number(value: str) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if math.isnan(number) else number


def _to_int(value: str, default: int) -> int:
    match = INT_PREFIX.match(value or "")
    return int(match.group(1)) if match else default


def _to_decimal(value: str) -> Decimal:
    try:
        return Decimal(value.strip())
    except (InvalidOperation, AttributeError):
        return Decimal(0)


def format_date(value: datetime, fmt: str) -> str:
    """
    Format with tokens AAAA/YYYY (year), AA/YY (2-digit year), MM (month),
    DD (day), hh (hour), mm (minute), ss (second).
    """
    parts = {
        "AAAA": f"{value.year:04d}",
        "YYYY": f"{value.year:04d}",
        "AA": f"{value.year:04d}"[-2:],
        "YY": f"{value.year:04d}"[-2:],
        "MM": f"{value.month:02d}",
        "DD": f"{value.day:02d}",
        "hh": f"{value.hour:02d}",
        "mm": f"{value.minute:02d}",
        "ss": f"{value.second:02d}",
    }
    return DATE_TOKENS.sub(lambda m: parts[m.group(0)], fmt)


def parse_date(value: str, context: EvaluationContext) -> datetime:
    """ISO-8601 or DD/MM/YYYY; anything else falls back to ``context.now``."""
    text = (value or "").strip()
    if not text:
        return context.now
    try:
        return isoparse(text)
    except (ValueError, OverflowError):
        pass
    try:
        return datetime.strptime(text, "%d/%m/%Y")
    except ValueError:
        logger.debug("Unparseable date %r, using reference time", text)
        return context.now


# Text


@register("MAYUS", "UPPER")
def _upper(args, row, context):
    return _arg(args, 0).upper()


@register("MINUS", "LOWER")
def _lower(args, row, context):
    return _arg(args, 0).lower()


@register("RECORTAR", "TRUNCATE")
def _truncate(args, row, context):
    value = _arg(args, 0)
    return value[:max(_to_int(_arg(args, 1), len(value)), 0)]


@register("CONCAT")
def _concat(args, row, context):
    return "".join(str(a) for a in args)


@register("REEMPLAZAR", "REPLACE")
def _replace(args, row, context):
    value, search = _arg(args, 0), _arg(args, 1)
    if not search:
        return value
    return value.replace(search, _arg(args, 2))


@register("LARGO", "LEN")
def _length(args, row, context):
    return str(len(_arg(args, 0)))


# Dates


@register("HOY", "TODAY")
def _today(args, row, context):
    return format_date(context.now, _arg(args, 0) or DEFAULT_DATE_FORMAT)


@register("AHORA", "NOW")
def _now(args, row, context):
    return format_date(context.now, _arg(args, 0) or DEFAULT_DATETIME_FORMAT)


@register("SUMAR_DIAS", "ADD_DAYS")
def _add_days(args, row, context):
    base = parse_date(_arg(args, 0), context)
    result = base + timedelta(days=_to_int(_arg(args, 1), 0))
    return format_date(result, _arg(args, 2) or DEFAULT_DATE_FORMAT)


@register("SUMAR_MESES", "ADD_MONTHS")
def _add_months(args, row, context):
    base = parse_date(_arg(args, 0), context)
    result = base + relativedelta(months=_to_int(_arg(args, 1), 0))
    return format_date(result, _arg(args, 2) or DEFAULT_DATE_FORMAT)


@register("FORMATO_FECHA", "FORMAT_DATE")
def _format_date(args, row, context):
    return format_date(parse_date(_arg(args, 0), context), _arg(args, 1) or DEFAULT_DATE_FORMAT)


@register("FECHA_ISO", "TIMESTAMP")
def _timestamp(args, row, context):
    return context.now.isoformat(timespec="seconds")


# Counters and numbers


@register("CONTADOR", "COUNTER")
def _counter(args, row, context):
    start = _to_int(_arg(args, 0), 1)
    step = _to_int(_arg(args, 1), 1)
    padding = _to_int(_arg(args, 2), 0)
    value = start + context.row_index * step
    return str(value).zfill(padding) if padding > 0 else str(value)


@register("LOTE", "BATCH_CODE")
def _batch_code(args, row, context):
    fmt = _arg(args, 0) or DEFAULT_BATCH_FORMAT
    sequence = str(context.row_index + 1)
    result = format_date(context.now, fmt)
    return re.sub(r"#+", lambda m: sequence.zfill(len(m.group(0))), result)


@register("FILA", "ROW")
def _row_number(args, row, context):
    return str(context.row_index + 1)


@register("TOTAL", "BATCH_SIZE")
def _batch_size(args, row, context):
    return str(context.batch_size)


def _round(value: Decimal, decimals: int) -> str:
    exponent = Decimal(1).scaleb(-max(decimals, 0))
    return str(value.quantize(exponent, rounding=ROUND_HALF_UP))


@register("REDONDEAR", "ROUND")
def _round_number(args, row, context):
    return _round(_to_decimal(_arg(args, 0)), _to_int(_arg(args, 1), 0))


@register("FORMATO_NUM", "FORMAT_NUMBER")
def _format_number(args, row, context):
    formatted = _round(_to_decimal(_arg(args, 0)), _to_int(_arg(args, 1), 0))
    if _arg(args, 2) == ",":
        return formatted.replace(".", ",")
    return formatted


# GS1


@register("DIGITO_CONTROL", "CHECK_DIGIT")
def _check_digit(args, row, context):
    return append_check_digit(_arg(args, 0).strip())


# Conditionals


def _operand(text: str, row: Mapping[str, Any]) -> str:
    text = text.strip()
    unquoted = _unquote(text)
    if unquoted != text:
        return unquoted
    if _parse_number(text) is not None:
        return text
    value = lookup_column(text, row)
    return text if value is None else value


def _compare(left: str, op: str, right: str) -> bool:
    num_l, num_r = _parse_number(left), _parse_number(right)
    if num_l is not None and num_r is not None:
        a, b = num_l, num_r
    else:
        a, b = left, right
    if op == "==":
        return a == b
    if op == "!=":
        return a != b
    if op == ">=":
        return a >= b
    if op == "<=":
        return a <= b
    if op == ">":
        return a > b
    return a < b


def evaluate_condition(condition: str, row: Mapping[str, Any]) -> bool:
    for op in COMPARISON_OPERATORS:
        if op in condition:
            left, right = condition.split(op, 1)
            return _compare(_operand(left, row), op, _operand(right, row))
    return condition not in ("", "0", "false")


@register("SI", "IF")
def _if(args, row, context):
    condition = args[0] if args else Arg("")
    if condition.quoted and not any(op in condition for op in COMPARISON_OPERATORS):
        truthy = str(condition) not in ("", "0", "false")
    else:
        truthy = evaluate_condition(str(condition), row)
    return _arg(args, 1) if truthy else _arg(args, 2)


@register("VACIO", "IS_EMPTY")
def _is_empty(args, row, context):
    return "true" if _arg(args, 0) == "" else "false"


@register("POR_DEFECTO", "DEFAULT")
def _default(args, row, context):
    return _arg(args, 0) or _arg(args, 1)
