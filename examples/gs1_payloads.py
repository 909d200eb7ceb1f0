"""
Demo: GS1 Payloads

Check digits, element string parsing and composition, and the clean
JSON output for a few pharmaceutical codes.
"""

from label_engine.codes import build_format_value
from label_engine.formatters import parse_gs1_to_json
from label_engine.gs1 import GS, calculate_check_digit, compose_gs1_128, parse_gs1


def demo_check_digits():
    print("=" * 80)
    print("  CHECK DIGITS")
    print("=" * 80)

    for body in ("400638133393", "9638507", "03600029145", "0628674000024"):
        print(f"  {body:15s} -> {body}{calculate_check_digit(body)}")


def demo_code_values():
    print("\n" + "=" * 80)
    print("  CODE VALUES")
    print("=" * 80)

    cases = [
        ("EAN13", "400638133393"),
        ("EAN13", "4006381333932"),
        ("ITF14", "1234567890123"),
        ("GS1_128", "(01)0628674000024(17)280430(10)GB2C"),
        ("DATAMATRIX", "(01)06286740000249(21)71490437969853"),
        ("CODE39", "abc"),
    ]

    for fmt, value in cases:
        code = build_format_value(fmt, value)
        status = "[OK]" if code.ok else f"[!!] {code.error.code.value}"
        print(f"\n{fmt}: {value}")
        print(f"  {status}")
        if code.ok:
            print(f"  Payload: {code.payload!r}")
            if code.hri:
                print(f"  HRI:     {code.hri}")


def demo_parse_and_compose():
    print("\n" + "=" * 80)
    print("  PARSE AND COMPOSE")
    print("=" * 80)

    barcode = f"]d201062867400002491728043010GB2C{GS}2171490437969853"
    result = parse_gs1(barcode)

    print(f"\nInput:     {barcode!r}")
    print(f"Symbology: {result.symbology_identifier}")
    for element in result.elements:
        print(f"  ({element.ai}) {element.title:30s} {element.value}")

    composed = compose_gs1_128(result.pairs())
    print(f"\nComposed:  {composed!r}")
    print(f"Round trip: {'[OK]' if parse_gs1(composed).pairs() == result.pairs() else '[!!]'}")

    print("\nJSON Output:")
    print(parse_gs1_to_json(barcode))


if __name__ == "__main__":
    demo_check_digits()
    demo_code_values()
    demo_parse_and_compose()
