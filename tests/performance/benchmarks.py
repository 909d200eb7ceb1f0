"""
Performance benchmarks for the label engine.
"""

import time
import statistics
from datetime import datetime
from typing import Tuple

from label_engine import design_from_dict, generate_batch
from label_engine.codes import build_format_value
from label_engine.gs1 import compose_gs1_128, parse_gs1
from label_engine.printing import fit_font_dots


def benchmark(func, iterations: int = 1000) -> Tuple[float, float, float]:
    """
    Run a benchmark and return timing statistics.

    Returns:
        (mean_ms, min_ms, max_ms)
    """
    times = []

    for _ in range(iterations):
        start = time.perf_counter()
        func()
        elapsed = time.perf_counter() - start
        times.append(elapsed * 1000)

    return (
        statistics.mean(times),
        min(times),
        max(times)
    )


DESIGN = {
    "width_mm": 60,
    "height_mm": 40,
    "elements": [
        {"id": "name", "type": "text", "width": 56, "height": 8, "fontSize": 20,
         "text_auto_fit": True, "binding": "Producto"},
        {"id": "lot", "type": "text", "y": 9, "binding": "Lote {{LOTE()}} Cad. {{SUMAR_MESES(HOY(), 24)}}"},
        {"id": "ean", "type": "barcode", "y": 14, "width": 50, "height": 12,
         "barcodeFormat": "EAN13", "binding": "EAN"},
        {"id": "dm", "type": "barcode", "x": 40, "y": 28, "width": 10, "height": 10,
         "barcodeFormat": "DATAMATRIX",
         "binding": "(01){{DIGITO_CONTROL(GTIN)}}(17)291231(10){{LOTE()}}(21)SN{{FILA()}}"},
        {"id": "frame", "type": "rectangle", "width": 60, "height": 40},
    ],
}


def run_benchmarks():
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("Label Engine Benchmarks")
    print("=" * 60)
    print()

    test_cases = [
        ("Simple GTIN", "0106285096000842"),
        ("GTIN + Expiry", "0106285096000842172901"),
        ("GTIN + Batch (variable)", "010628509600084210BATCH123"),
        ("With GS separators", "010628509600084210ABC\x1d17290131\x1d21XYZ"),
        ("Bracketed", "(01)06285096000842(17)290131(10)ABC(21)XYZ"),
        ("Symbology prefix", "]d2010611800002210721NWHFG1H8HN5P95\x1d17270301\x1d10250987"),
    ]

    print("GS1 parsing:")
    print("-" * 60)

    for name, input_str in test_cases:
        mean, min_t, max_t = benchmark(
            lambda s=input_str: parse_gs1(s),
            iterations=1000
        )
        print(f"  {name:30} {mean:8.3f}ms avg ({min_t:.3f}-{max_t:.3f})")

    print()
    print("Code values and composition:")
    print("-" * 60)

    pairs = [("01", "06285096000842"), ("10", "ABC"), ("17", "290131"), ("21", "XYZ")]
    code_cases = [
        ("Compose GS1-128", lambda: compose_gs1_128(pairs)),
        ("EAN-13 completion", lambda: build_format_value("EAN13", "400638133393")),
        ("GS1-128 bracketed", lambda: build_format_value("GS1_128", "(01)06285096000842(10)ABC")),
        ("Auto-fit 200 chars", lambda: fit_font_dots("x" * 200, 240, 64, 32, 8)),
    ]

    for name, func in code_cases:
        mean, min_t, max_t = benchmark(func, iterations=1000)
        print(f"  {name:30} {mean:8.3f}ms avg ({min_t:.3f}-{max_t:.3f})")

    print()
    print("Batch throughput (1000 rows):")
    print("-" * 60)

    design = design_from_dict(DESIGN)
    rows = [
        {"Producto": f"Producto {i}", "EAN": "400638133393", "GTIN": "0628509600084"}
        for i in range(1000)
    ]
    now = datetime(2026, 1, 31)

    start = time.perf_counter()
    batch = generate_batch(design, rows, None, now)
    total = time.perf_counter() - start

    print(f"  Throughput: {len(batch.labels) / total:.0f} labels/second")
    print(f"  Total time: {total:.3f}s for {len(batch.labels)} labels")
    print(f"  Skipped elements: {len(batch.skipped)}")

    print()
    print("=" * 60)


if __name__ == "__main__":
    run_benchmarks()
