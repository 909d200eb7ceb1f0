"""
EU Regulation 1169/2011 checks for food labels.

Uses the same heuristic field detection as the FMD checks, with food
label fields: a field counts as present when some text element's name,
binding or static text matches its pattern.
"""

from __future__ import annotations

import re
from typing import Dict, List, Pattern

from ..models import BarcodeElement, Design, TextElement
from .fmd_validator import detect_fields
from .issue import Issue

FIELD_PATTERNS: Dict[str, Pattern] = {
    "product_name": re.compile(r"nombre|denominaci[oó]n|product.?name|product.?title", re.I),
    "ingredients": re.compile(r"ingrediente|ingredient", re.I),
    "allergens": re.compile(r"al[eé]rgeno|allergen", re.I),
    "net_quantity": re.compile(
        r"peso|weight|cantidad.?neta|net.?(?:quantity|weight|content)|volumen|volume"
        r"|(?:^|\s)(?:g|ml|kg|l)(?:\s|$)", re.I),
    "best_before": re.compile(
        r"caducidad|consumir.?antes|expir|best.?before|use.?by"
        r"|fecha.?(?:de\s+)?(?:consumo|vencimiento)", re.I),
    "manufacturer": re.compile(r"fabricant|manufactur|elaborad|produc(?:id|tor)|envasad|empresa", re.I),
    "origin": re.compile(r"origen|origin|pa[ií]s|country|procedencia|hecho.?en|made.?in", re.I),
    "nutrition": re.compile(
        r"nutric|nutrition|calor[ií]|energ|prote[ií]n|grasa|fat|carbohidrato|carbohydrate"
        r"|fibra|fiber|sodio|sodium|sal(?:\s|$)|salt(?:\s|$)", re.I),
    "lot": re.compile(r"lote|lot|batch", re.I),
}

MANDATORY_FIELDS = [
    ("product_name", "EU_MISSING_NAME", "Missing name of the food",
     "Add a text field with the product name"),
    ("ingredients", "EU_MISSING_INGREDIENTS", "Missing list of ingredients",
     "Add a text field with the list of ingredients"),
    ("allergens", "EU_MISSING_ALLERGENS", "Missing allergen information",
     "Add a field identifying the allergens (Reg. EU 1169/2011 Art. 21)"),
    ("net_quantity", "EU_MISSING_NET_QUANTITY", "Missing net quantity (weight/volume)",
     "Add a field with the net weight or volume of the product"),
    ("best_before", "EU_MISSING_BEST_BEFORE", "Missing use-by or best-before date",
     "Add a field with the use-by or best-before date"),
]

RECOMMENDED_FIELDS = [
    ("manufacturer", "EU_MISSING_MANUFACTURER", "Missing name/address of the manufacturer or packer",
     "Add the name of the food business operator"),
    ("origin", "EU_MISSING_ORIGIN", "Missing country of origin",
     "Add the country of origin where it is mandatory (meat, fruit, vegetables, ...)"),
    ("nutrition", "EU_MISSING_NUTRITION", "Missing nutrition declaration",
     "Add the nutrition information (Reg. EU 1169/2011 Art. 30)"),
    ("lot", "EU_MISSING_LOT", "Missing lot number",
     "Add the lot number for traceability"),
]

BOLD_WEIGHTS = ("bold", "700", "800", "900")

# labels under 80 cm2 may use a 0.9 mm x-height instead of 1.2 mm
SMALL_LABEL_AREA_MM2 = 8000
SMALL_LABEL_MIN_PT = 6.0
MIN_PT = 8.0


def minimum_font_size(design: Design) -> float:
    area = (design.width_mm or 0) * (design.height_mm or 0)
    return SMALL_LABEL_MIN_PT if area < SMALL_LABEL_AREA_MM2 else MIN_PT


class Eu1169Validator:
    """Regulation (EU) 1169/2011 on the provision of food information to consumers."""

    code = "eu1169"
    name = "EU 1169/2011"

    def validate(self, design: Design) -> List[Issue]:
        texts = [e for e in design.elements if isinstance(e, TextElement)]
        has_barcode = any(isinstance(e, BarcodeElement) for e in design.elements)

        detected = detect_fields(texts, FIELD_PATTERNS)
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

        if not has_barcode:
            issues.append(Issue.info(
                "EU_MISSING_BARCODE",
                "Consider adding an EAN-13 code for retail distribution",
                fix_hint="An EAN-13 code makes the product sellable in supermarkets and shops",
            ))

        issues.extend(self.validate_font_sizes(texts, minimum_font_size(design)))
        issues.extend(self.validate_allergen_highlighting(texts, detected.get("allergens", [])))
        return issues

    def validate_font_sizes(self, texts: List[TextElement], min_pt: float) -> List[Issue]:
        return [
            Issue.error(
                "EU_FONT_SIZE_MIN",
                f"Font size ({e.font_size:g}pt) below the legal minimum ({min_pt:g}pt)",
                element_id=e.id,
                fix_hint=f"Increase the font size to at least {min_pt:g}pt",
            )
            for e in texts
            if e.font_size < min_pt
        ]

    def validate_allergen_highlighting(self, texts: List[TextElement], allergen_ids: List[str]) -> List[Issue]:
        """Allergens must stand out typographically (Art. 21)."""
        return [
            Issue.warning(
                "EU_ALLERGEN_HIGHLIGHT",
                "Allergens must be emphasised typographically (Art. 21 EU 1169/2011)",
                element_id=e.id,
                fix_hint="Use bold or another typographic device to highlight the allergens",
            )
            for e in texts
            if e.id in allergen_ids and str(e.font_weight or "normal").lower() not in BOLD_WEIGHTS
        ]
