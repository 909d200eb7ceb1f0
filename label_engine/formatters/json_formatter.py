"""
JSON Formatter

Clean JSON output for parsed GS1 data and engine results:
- Human-readable field names for common AIs
- Dates formatted as dd/mm/yyyy (unknown day as XX/mm/yyyy)
- Compliance reports and ZPL batch results as plain JSON objects
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from ..gs1 import DEFAULT_AI_TABLE, Gs1ParseResult, parse_gs1
from ..gs1.parser import CENTURY_PIVOT

AI_FIELD_NAMES = {
    "00": "SSCC",
    "01": "GTIN Code",
    "02": "Contained GTIN",
    "10": "Batch/Lot Number",
    "11": "Production Date",
    "13": "Packaging Date",
    "15": "Best Before Date",
    "16": "Sell By Date",
    "17": "Expiry Date",
    "20": "Variant",
    "21": "Serial Number",
    "22": "Consumer Product Variant",
    "240": "Additional Product Identification",
    "241": "Customer Part Number",
    "30": "Variable Count",
    "37": "Count of Trade Items",
    "400": "Customer Purchase Order",
    "410": "Ship To GLN",
    "414": "Location GLN",
    "710": "NHRN Germany (PZN)",
    "711": "NHRN France (CIP)",
    "712": "NHRN Spain (CN)",
    "713": "NHRN Brazil (DRN)",
    "714": "NHRN Portugal (AIM)",
}


def field_name(ai: str) -> str:
    if ai in AI_FIELD_NAMES:
        return AI_FIELD_NAMES[ai]
    entry = DEFAULT_AI_TABLE.get(ai)
    return entry.title.title() if entry and entry.title else f"AI({ai})"


def format_date_ddmmyyyy(value: str) -> str:
    """
    Format a YYMMDD date as dd/mm/yyyy.

    Handles:
    - Normal dates: YYMMDD -> dd/mm/yyyy
    - Unknown day (DD=00): -> XX/mm/yyyy
    """
    if len(value) < 6 or not value[:6].isdigit():
        return value

    yy, mm, dd = int(value[0:2]), int(value[2:4]), int(value[4:6])
    year = 1900 + yy if yy >= CENTURY_PIVOT else 2000 + yy

    if dd == 0:
        return f"XX/{mm:02d}/{year:04d}"
    return f"{dd:02d}/{mm:02d}/{year:04d}"


def format_parse_result(result: Gs1ParseResult, include_raw_values: bool = False) -> Dict[str, Any]:
    """
    Turn a parse result into a field-name keyed dictionary.

    A failed parse keeps what was parsed before the failure and adds an
    ``_error`` entry.
    """
    output: Dict[str, Any] = {}

    for element in result.elements:
        entry = DEFAULT_AI_TABLE.get(element.ai)
        if entry is not None and entry.date_format is not None:
            formatted = format_date_ddmmyyyy(element.value)
            output[field_name(element.ai)] = (
                {"formatted": formatted, "raw": element.value} if include_raw_values else formatted
            )
        else:
            output[field_name(element.ai)] = element.value

    if result.error is not None:
        output["_error"] = result.error.to_dict()

    return output


def parse_gs1_to_dict(barcode_data: str, include_raw_values: bool = False) -> Dict[str, Any]:
    """
    Parse GS1 data (raw or bracketed) and return a dictionary.

    Example:
        >>> parse_gs1_to_dict("(01)09501101530003(17)280430(10)GB2C")
        {'GTIN Code': '09501101530003', 'Expiry Date': '30/04/2028', 'Batch/Lot Number': 'GB2C'}
    """
    return format_parse_result(parse_gs1(barcode_data), include_raw_values=include_raw_values)


def parse_gs1_to_json(barcode_data: str, include_raw_values: bool = False,
                      indent: Optional[int] = 2) -> str:
    """
    Parse GS1 data and return clean JSON output.

    Example:
        >>> print(parse_gs1_to_json("(01)06286740000249(17)280430(10)GB2C(21)71490437969853"))
        {
          "GTIN Code": "06286740000249",
          "Expiry Date": "30/04/2028",
          "Batch/Lot Number": "GB2C",
          "Serial Number": "71490437969853"
        }
    """
    return to_json(parse_gs1_to_dict(barcode_data, include_raw_values), indent=indent)


def to_json(data: Any, indent: Optional[int] = 2) -> str:
    """
    Serialize a result object or plain data as JSON.

    Objects with a ``to_dict`` method (reports, batch results, parse
    results) are converted first.
    """
    if hasattr(data, "to_dict"):
        data = data.to_dict()
    return json.dumps(data, ensure_ascii=False, indent=indent)
