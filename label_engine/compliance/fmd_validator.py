"""
EU Falsified Medicines Directive (2011/62/EU) checks.

Mandatory label fields are detected heuristically: a field counts as
present when some text element's name, binding or static text matches
its pattern. The DataMatrix must carry the unique identifier, i.e. the
AIs 01 (GTIN), 17 (expiry), 10 (lot) and 21 (serial).
"""

from __future__ import annotations

import re
from typing import Dict, List, Mapping, Pattern

from ..gs1 import DEFAULT_AI_TABLE, is_bracketed, looks_like_gs1, parse_gs1
from ..codes.builder import normalize_format
from ..models import BarcodeElement, Design, TextElement
from .gs1_validator import is_dynamic, static_value
from .issue import Issue

FIELD_PATTERNS: Dict[str, Pattern] = {
    "product_name": re.compile(
        r"nombre|denominaci[oó]n|medicamento|drug.?name|product.?name|specialit", re.I),
    "active_ingredient": re.compile(
        r"principio.?activo|active.?ingredient|sustancia|substance|\b(?:DCI|INN)\b", re.I),
    "lot": re.compile(r"lote|lot\b|batch", re.I),
    "expiry": re.compile(r"caducidad|expir|vencimiento|best.?before|use.?by", re.I),
    "national_code": re.compile(
        r"c[oó]digo.?nacional|\bCN\b|\bPZN\b|\bCIP\b|national.?code|\bNDC\b", re.I),
    "serial": re.compile(r"serial|serie|n[uú]mero.?(?:de\s+)?serie|\bSN\b", re.I),
    "dosage": re.compile(
        r"dosis|dosage|forma.?farmac[eé]|pharmaceutical.?form|posolog|\b\d+\s*mg\b|\b\d+\s*ml\b"
        r"|comprimido|tablet|c[aá]psula|capsule|jarabe|syrup|inyectable|injectable", re.I),
    "manufacturer": re.compile(
        r"fabricant|manufactur|laboratorio|titular|marketing.?auth|\bMAH\b", re.I),
}

MANDATORY_FIELDS = [
    ("product_name", "FMD_MISSING_PRODUCT_NAME", "Missing medicinal product name",
     "Add the trade name of the medicinal product"),
    ("active_ingredient", "FMD_MISSING_ACTIVE_INGREDIENT", "Missing active ingredient (INN)",
     "Add the international non-proprietary name of the active substance"),
    ("lot", "FMD_MISSING_LOT", "Missing batch number",
     "Add the batch number"),
    ("expiry", "FMD_MISSING_EXPIRY", "Missing expiry date",
     "Add the expiry date of the product"),
    ("national_code", "FMD_MISSING_NATIONAL_CODE", "Missing national code (CN/PZN/CIP)",
     "Add the national reimbursement code"),
    ("serial", "FMD_MISSING_SERIAL", "Missing unique serial number",
     "Add a unique serial number (Delegated Regulation (EU) 2016/161)"),
]

RECOMMENDED_FIELDS = [
    ("dosage", "FMD_MISSING_DOSAGE", "Missing pharmaceutical form or strength",
     "Add the pharmaceutical form and dosage"),
    ("manufacturer", "FMD_MISSING_MANUFACTURER", "Missing marketing authorisation holder",
     "Add the name of the marketing authorisation holder"),
]

FMD_MANDATORY_AIS = ("01", "17", "10", "21")

DATAMATRIX_HINT = "Use GS1 format with AIs 01 (GTIN) + 17 (expiry) + 10 (lot) + 21 (serial)"


def searchable_text(element: TextElement) -> str:
    return " ".join(filter(None, (element.name, element.binding, element.text_content)))


def detect_fields(
    elements: List[TextElement],
    patterns: Mapping[str, Pattern] = FIELD_PATTERNS,
) -> Dict[str, List[str]]:
    """Map each detected field to the ids of the text elements that carry it."""
    detected: Dict[str, List[str]] = {}
    for field_name, pattern in patterns.items():
        matched = [e.id for e in elements if pattern.search(searchable_text(e))]
        if matched:
            detected[field_name] = matched
    return detected


class FmdValidator:
    """Falsified Medicines Directive: serialisation and traceability of medicines."""

    code = "fmd"
    name = "FMD (Directive 2011/62/EU)"

    def validate(self, design: Design) -> List[Issue]:
        texts = [e for e in design.elements if isinstance(e, TextElement)]
        datamatrices = [
            e for e in design.elements
            if isinstance(e, BarcodeElement) and normalize_format(e.barcode_format) == "DATAMATRIX"
        ]

        detected = detect_fields(texts)
        issues = [
            Issue.error(code, message, fix_hint=hint)
            for field_name, code, message, hint in MANDATORY_FIELDS
            if field_name not in detected
        ]
        issues.extend(
            Issue.warning(code, message, fix_hint=hint)
            for field_name, code, message, hint in RECOMMENDED_FIELDS
            if field_name not in detected
        )

        if not datamatrices:
            issues.append(Issue.error(
                "FMD_MISSING_DATAMATRIX",
                "Missing DataMatrix code (mandatory under FMD)",
                fix_hint="Add a DataMatrix with GS1 data (GTIN + serial + lot + expiry)",
            ))
        for element in datamatrices:
            issues.extend(self.validate_datamatrix(element))
        return issues

    def validate_datamatrix(self, element: BarcodeElement) -> List[Issue]:
        value = static_value(element)
        if not value or is_dynamic(value):
            return []

        parsed = parse_gs1(value) if looks_like_gs1(value) or is_bracketed(value) else None
        if parsed is None or not parsed.ok:
            return [Issue.warning(
                "FMD_DATAMATRIX_NO_GS1",
                "The DataMatrix should encode GS1 data (GTIN + SN + LOT + EXP)",
                element_id=element.id,
                fix_hint=DATAMATRIX_HINT,
            )]

        present = {ai for ai, _ in parsed.pairs()}
        missing = [ai for ai in FMD_MANDATORY_AIS if ai not in present]
        if not missing:
            return []

        names = ", ".join(f"{DEFAULT_AI_TABLE.get(ai).title} ({ai})" for ai in missing)
        return [Issue.warning(
            "FMD_DATAMATRIX_NO_GS1",
            f"The DataMatrix lacks mandatory FMD AIs. Missing: {names}",
            element_id=element.id,
            fix_hint=DATAMATRIX_HINT,
        )]
