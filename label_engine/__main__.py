"""
CLI interface for the label engine.

Usage:
    python -m label_engine parse "<gs1 data>" [--json]
    python -m label_engine check <code> [--format EAN13]
    python -m label_engine zpl design.json [--data rows.csv] [--mapping map.json]
    python -m label_engine validate design.json [--standard gs1] [--data rows.csv]

Options:
    --verbose           Debug logging on stderr
    --dpi               Printer resolution (203, 300, 600)
    --now               Reference time for date expressions (ISO 8601)
    --gs1-mode          off | validate | complete
"""

import argparse
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from dateutil.parser import isoparse

from .codes import build_format_value
from .compliance import count_by_severity, has_errors, sort_issues, validate_design, validate_rows
from .data import load_design, load_mapping, load_rows
from .formatters import format_parse_result, to_json
from .gs1 import Gs1ParseResult, parse_gs1
from .models import DesignError
from .options import DEFAULT_DPI, Gs1Mode, LabelOptions
from .printing import generate_batch

logger = logging.getLogger("label_engine")


def format_result(result: Gs1ParseResult) -> str:
    """Format a parse result for display."""
    lines = [
        "=" * 60,
        "GS1 Parse Result",
        "=" * 60,
        f"Raw Input: {result.raw!r}",
        f"Normalized: {result.normalized!r}",
    ]

    if result.symbology_identifier:
        lines.append(f"Symbology: {result.symbology_identifier}")

    lines.extend([
        "",
        "Elements:",
        "-" * 40,
    ])

    for element in result.elements:
        lines.append(f"  AI({element.ai}): {element.title}")
        lines.append(f"    Value: {element.value!r}")
        lines.append("")

    if result.error:
        lines.extend([
            "Error:",
            "-" * 40,
            f"  [{result.error.code.value}] {result.error.message}",
        ])
        if result.error.at_index is not None:
            lines.append(f"    at index: {result.error.at_index}")
        lines.append("")

    if result.warnings:
        lines.extend([
            "Warnings:",
            "-" * 40,
        ])
        for warning in result.warnings:
            lines.append(f"  [{warning.code.value}] {warning.message}")
        lines.append("")

    return "\n".join(lines)


def _options(args: argparse.Namespace) -> LabelOptions:
    return LabelOptions(dpi=args.dpi, gs1_mode=Gs1Mode(args.gs1_mode))


def _now(args: argparse.Namespace) -> datetime:
    return isoparse(args.now) if args.now else datetime.now()


def _rows(args: argparse.Namespace):
    return load_rows(args.data) if args.data else []


def _mapping(args: argparse.Namespace):
    return load_mapping(args.mapping) if args.mapping else {}


def cmd_parse(args: argparse.Namespace) -> int:
    result = parse_gs1(args.data)
    if args.json:
        print(to_json(format_parse_result(result, include_raw_values=args.raw_dates)))
    else:
        print(format_result(result))
    return 0 if result.ok else 1


def cmd_check(args: argparse.Namespace) -> int:
    code = build_format_value(args.format, args.code, Gs1Mode(args.gs1_mode))
    if args.json:
        print(to_json(code))
    elif code.ok:
        print(f"{code.format}: {code.payload}")
        if code.hri and code.hri != code.payload:
            print(f"HRI: {code.hri}")
        if code.check_digit_added:
            print("Check digit added")
    else:
        print(f"{code.format}: [{code.error.code.value}] {code.error.message}")
    return 0 if code.ok else 1


def cmd_zpl(args: argparse.Namespace) -> int:
    design = load_design(args.design)
    batch = generate_batch(design, _rows(args), _mapping(args), _now(args), _options(args))

    for skipped in batch.skipped:
        logger.warning("Skipped %s: %s", skipped.element_id, skipped.message)

    output = to_json(batch) if args.json else batch.zpl
    if args.output:
        Path(args.output).write_text(output + "\n", encoding="utf-8")
        logger.info("Wrote %d labels to %s", len(batch.labels), args.output)
    else:
        print(output)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    design = load_design(args.design)
    report = validate_design(design, args.standard)
    rows = _rows(args)
    if rows:
        report.issues = sort_issues(
            report.issues + validate_rows(design, rows, _mapping(args), _now(args), _options(args))
        )

    if args.json:
        print(to_json(report))
    else:
        for issue in report.issues:
            where = f" [{issue.element_id}]" if issue.element_id else ""
            print(f"{issue.severity.value.upper():7} {issue.code}{where}: {issue.message}")
            if issue.fix_hint:
                print(f"        hint: {issue.fix_hint}")
        counts = count_by_severity(report.issues)
        print(f"{counts['errors']} errors, {counts['warnings']} warnings, {counts['infos']} infos")

    return 1 if has_errors(report.issues) else 0


def _add_print_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--data", default=None, help="CSV or Excel file with one row per label")
    parser.add_argument("--mapping", default=None, help="JSON object: element id -> column name")
    parser.add_argument("--dpi", type=int, default=DEFAULT_DPI, help="Printer resolution")
    parser.add_argument("--now", default=None, help="Reference time for date expressions (ISO 8601)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="label-engine",
        description="Generate barcode payloads and ZPL print commands for label designs",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--gs1-mode",
        choices=[m.value for m in Gs1Mode],
        default=Gs1Mode.COMPLETE.value,
        help="Check digit policy for GS1 symbologies",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("parse", help="Parse a GS1 element string")
    p.add_argument("data", help="GS1 data, raw (use <GS> for separators) or bracketed")
    p.add_argument("--json", action="store_true", help="Output result as JSON")
    p.add_argument("--raw-dates", action="store_true", help="Include raw date values in JSON")
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("check", help="Validate and complete a barcode value")
    p.add_argument("code", help="Value to encode")
    p.add_argument("--format", default="EAN13", help="Barcode format (default: EAN13)")
    p.add_argument("--json", action="store_true", help="Output result as JSON")
    p.set_defaults(func=cmd_check)

    p = sub.add_parser("zpl", help="Generate ZPL for a design")
    p.add_argument("design", help="Design JSON file")
    _add_print_options(p)
    p.add_argument("--output", "-o", default=None, help="Write output to a file")
    p.add_argument("--json", action="store_true", help="Output labels and skipped elements as JSON")
    p.set_defaults(func=cmd_zpl)

    p = sub.add_parser("validate", help="Check a design against a compliance standard")
    p.add_argument("design", help="Design JSON file")
    p.add_argument("--standard", default=None, help="gs1, fmd or eu1169 (default: the design's own)")
    _add_print_options(p)
    p.add_argument("--json", action="store_true", help="Output report as JSON")
    p.set_defaults(func=cmd_validate)

    return parser


def main(argv: Optional[list] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        return args.func(args)
    except (DesignError, ValueError, OSError) as e:
        logger.error("%s", e)
        return 1


if __name__ == "__main__":
    sys.exit(main())
