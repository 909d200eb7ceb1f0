"""
Output formatters.
"""

from .json_formatter import (
    AI_FIELD_NAMES,
    format_date_ddmmyyyy,
    format_parse_result,
    parse_gs1_to_dict,
    parse_gs1_to_json,
    to_json,
)

__all__ = [
    "AI_FIELD_NAMES",
    "format_date_ddmmyyyy",
    "format_parse_result",
    "parse_gs1_to_dict",
    "parse_gs1_to_json",
    "to_json",
]
