"""
Demo: Batch ZPL

Prints a small pharmacy label for every row of a product list and runs
the FMD compliance check on the design.

Send the output to a printer with, for example:
    python examples/batch_zpl.py | nc printer.local 9100
"""

import logging
import sys
from datetime import datetime

from label_engine import design_from_dict, generate_batch
from label_engine.compliance import validate_design, validate_rows
from label_engine.options import LabelOptions

logger = logging.getLogger(__name__)

DESIGN = {
    "name": "Pharmacy box 60x40",
    "width_mm": 60,
    "height_mm": 40,
    "border_width": 0.3,
    "compliance_standard": "fmd",
    "elements": [
        {"id": "product", "type": "text", "name": "Product name", "x": 2, "y": 2,
         "width": 56, "height": 7, "fontSize": 22, "text_auto_fit": True, "binding": "Producto"},
        {"id": "inn", "type": "text", "name": "Active ingredient", "x": 2, "y": 9,
         "width": 36, "height": 4, "binding": "Principio"},
        {"id": "cn", "type": "text", "name": "National code", "x": 2, "y": 13,
         "width": 36, "height": 4, "binding": "CN {{CN}}"},
        {"id": "lot", "type": "text", "name": "Lot", "x": 2, "y": 17,
         "width": 36, "height": 4, "binding": "Lote {{LOTE()}}"},
        {"id": "exp", "type": "text", "name": "Expiry", "x": 2, "y": 21,
         "width": 36, "height": 4, "binding": "Cad. {{FORMATO_FECHA(SUMAR_MESES(HOY(), 24), \"MM/AAAA\")}}"},
        {"id": "sn", "type": "text", "name": "Serial", "x": 2, "y": 25,
         "width": 36, "height": 4, "binding": "SN {{CONTADOR(1000, 1, 8)}}"},
        {"id": "mah", "type": "text", "x": 2, "y": 35, "width": 36, "height": 4,
         "fontSize": 8, "textContent": "Laboratorio Ejemplo S.A."},
        {"id": "dm", "type": "barcode", "x": 42, "y": 12, "width": 16, "height": 16,
         "barcodeFormat": "DATAMATRIX",
         "binding": "(01){{DIGITO_CONTROL(GTIN)}}(17){{FORMATO_FECHA(SUMAR_MESES(HOY(), 24), \"AAMMDD\")}}"
                    "(10){{LOTE()}}(21){{CONTADOR(1000, 1, 8)}}"},
        {"id": "ean", "type": "barcode", "x": 2, "y": 29, "width": 36, "height": 6,
         "barcodeFormat": "EAN13", "binding": "EAN"},
    ],
}

ROWS = [
    {"Producto": "Ibuprofeno 600 mg 40 comprimidos", "Principio": "Ibuprofeno",
     "CN": "712345.6", "GTIN": "0847000123456", "EAN": "847000123456"},
    {"Producto": "Paracetamol 1 g 20 comprimidos", "Principio": "Paracetamol",
     "CN": "654321.0", "GTIN": "0847000654321", "EAN": "847000654321"},
    {"Producto": "Amoxicilina 500 mg 30 capsulas", "Principio": "Amoxicilina",
     "CN": "998877.1", "GTIN": "0847000998877", "EAN": "8470009988779"},
]


def main():
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    design = design_from_dict(DESIGN)
    now = datetime.now()

    report = validate_design(design)
    issues = report.issues + validate_rows(design, ROWS, None, now)
    for issue in issues:
        logger.info("%s %s: %s", issue.severity.value.upper(), issue.code, issue.message)

    batch = generate_batch(design, ROWS, None, now, LabelOptions(dpi=203))
    for skipped in batch.skipped:
        logger.warning("Skipped %s: %s", skipped.element_id, skipped.message)

    print(batch.zpl)


if __name__ == "__main__":
    main()
