"""
GS1-128 Element String Parser

Splits a GS1 element string into its (AI, value) pairs.

Rules:
- Leading symbology identifier (]C1, ]d2, ]e0, ...) and leading FNC1 are
  stripped; FNC1 is transmitted as <GS> (ASCII 29, 0x1D)
- AIs are matched longest first (4, then 3, then 2 digits)
- Fixed-length AIs take exactly their declared length; one separator
  after them is tolerated
- Variable-length AIs run to the next separator or to the end of input

Also provides the reverse direction (composition) and the bracketed
human-readable notation "(01)09501101530003(10)ABC".
"""

from __future__ import annotations

import re
from calendar import monthrange
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from .ai_table import AIEntry, AITable, DEFAULT_AI_TABLE
from .checksum import ErrorCode, verify_check_digit

GS = "\x1d"

GS_ALIASES = ("<GS>",)

FNC1_LITERAL = "FNC1"

SYMBOLOGY_PATTERNS = [
    (r"^\]C1", "GS1-128"),
    (r"^\]d2", "GS1 DataMatrix"),
    (r"^\]e0", "GS1 DataBar"),
    (r"^\]e1", "GS1 DataBar Limited"),
    (r"^\]e2", "GS1 DataBar Expanded"),
    (r"^\]Q3", "GS1 QR Code"),
    (r"^\]J1", "GS1 DotCode"),
]

SYMBOLOGY_REGEX = [(re.compile(p), name) for p, name in SYMBOLOGY_PATTERNS]

BRACKETED_AI = re.compile(r"\((\d{2,4})\)")

# GS1 AI encodable character set 82
CSET82 = frozenset(
    '!"#$%&\'()*+,-./0123456789:;<=>?@'
    'ABCDEFGHIJKLMNOPQRSTUVWXYZ[\\]^_`'
    'abcdefghijklmnopqrstuvwxyz{|}'
)

CENTURY_PIVOT = 51


@dataclass
class Gs1Error:
    """A parse or validation problem in a GS1 element string."""
    code: ErrorCode
    message: str
    at_index: Optional[int] = None
    ai: Optional[str] = None
    fragment: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        data = {"code": self.code.value, "message": self.message}
        for key in ("at_index", "ai", "fragment"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.meta:
            data["meta"] = dict(self.meta)
        return data


@dataclass
class AIElement:
    """One parsed (AI, value) pair with its position in the normalised input."""
    ai: str
    value: str
    title: str = ""
    start_index: int = 0
    end_index: int = 0


@dataclass
class Gs1ParseResult:
    """
    Outcome of parsing a GS1 element string.

    ``error`` is set when parsing stopped; ``elements`` then holds whatever
    was parsed before the failure.
    """
    raw: str
    normalized: str
    symbology_identifier: Optional[str] = None
    elements: List[AIElement] = field(default_factory=list)
    error: Optional[Gs1Error] = None
    warnings: List[Gs1Error] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None

    def pairs(self) -> List[Tuple[str, str]]:
        return [(e.ai, e.value) for e in self.elements]

    def get(self, ai: str) -> Optional[str]:
        for element in self.elements:
            if element.ai == ai:
                return element.value
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw": self.raw,
            "normalized": self.normalized,
            "symbology_identifier": self.symbology_identifier,
            "elements": [
                {"ai": e.ai, "title": e.title, "value": e.value}
                for e in self.elements
            ],
            "error": self.error.to_dict() if self.error else None,
            "warnings": [w.to_dict() for w in self.warnings],
        }


def _strip_prefixes(data: str) -> Tuple[str, Optional[str]]:
    """Normalise separators and strip symbology identifier and leading FNC1."""
    text = data
    for alias in GS_ALIASES:
        text = text.replace(alias, GS)

    symbology = None
    for pattern, name in SYMBOLOGY_REGEX:
        match = pattern.match(text)
        if match:
            text = text[match.end():]
            symbology = name
            break

    if text.startswith(GS):
        text = text[1:]
    elif text.startswith(FNC1_LITERAL):
        text = text[len(FNC1_LITERAL):]

    return text, symbology


def parse_gs1_128(data: str, *, table: Optional[AITable] = None) -> Gs1ParseResult:
    """
    Parse a GS1-128 element string into ordered (AI, value) pairs.

    Examples:
        >>> parse_gs1_128("011234567890123410ABC123").pairs()
        [('01', '12345678901234'), ('10', 'ABC123')]

    Never raises: an unknown AI prefix yields ``result.error`` with code
    UNKNOWN_AI and the offending fragment (up to 4 characters).
    """
    table = table or DEFAULT_AI_TABLE
    text, symbology = _strip_prefixes(data or "")
    result = Gs1ParseResult(raw=data or "", normalized=text, symbology_identifier=symbology)

    if not text:
        result.error = Gs1Error(ErrorCode.EMPTY_INPUT, "No GS1 data to parse", at_index=0)
        return result

    pos = 0
    length = len(text)

    while pos < length:
        if text[pos] == GS:
            result.warnings.append(Gs1Error(
                ErrorCode.EXTRA_SEPARATOR,
                "Unexpected separator skipped",
                at_index=pos,
            ))
            pos += 1
            continue

        entry, ai_len = table.find_longest_match(text, pos)
        if entry is None:
            fragment = text[pos:pos + AITable.MAX_AI_LENGTH]
            result.error = Gs1Error(
                ErrorCode.UNKNOWN_AI,
                f"Unknown Application Identifier at position {pos}: {fragment!r}",
                at_index=pos,
                fragment=fragment,
            )
            return result

        start = pos + ai_len
        fixed = entry.fixed_length

        if fixed is not None:
            end = min(start + fixed, length)
            if end - start < fixed:
                result.warnings.append(Gs1Error(
                    ErrorCode.TRUNCATED_DATA,
                    f"AI ({entry.ai}) expects {fixed} characters, got {end - start}",
                    at_index=start,
                    ai=entry.ai,
                ))
            next_pos = end + 1 if end < length and text[end] == GS else end
        else:
            gs_pos = text.find(GS, start)
            end = length if gs_pos == -1 else gs_pos
            next_pos = length if gs_pos == -1 else gs_pos + 1

        result.elements.append(AIElement(
            ai=entry.ai,
            value=text[start:end],
            title=entry.title,
            start_index=pos,
            end_index=end,
        ))
        pos = next_pos

    return result


def looks_like_gs1(data: str, *, table: Optional[AITable] = None) -> bool:
    """
    Cheap routing hint: does the data start with a known AI?

    Not a validation; a True answer can still fail to parse.
    """
    table = table or DEFAULT_AI_TABLE
    text, _ = _strip_prefixes(data or "")
    entry, _ = table.find_longest_match(text)
    return entry is not None


def is_bracketed(data: str) -> bool:
    """True if ``data`` is in "(AI)value" human-readable notation."""
    return bool(data) and BRACKETED_AI.match(data.strip()) is not None


def parse_bracketed(data: str, *, table: Optional[AITable] = None) -> Gs1ParseResult:
    """
    Parse human-readable notation such as "(01)09501101530003(17)250101".

    A parenthesised group only starts a new element when it names a known
    AI, so values may themselves contain parentheses.
    """
    table = table or DEFAULT_AI_TABLE
    text = (data or "").strip()
    result = Gs1ParseResult(raw=data or "", normalized=text)

    if not text:
        result.error = Gs1Error(ErrorCode.EMPTY_INPUT, "No GS1 data to parse", at_index=0)
        return result

    first = BRACKETED_AI.match(text)
    if first is None:
        result.error = Gs1Error(
            ErrorCode.UNKNOWN_AI,
            "Bracketed GS1 data must start with an (AI)",
            at_index=0,
            fragment=text[:4],
        )
        return result

    markers = [m for m in BRACKETED_AI.finditer(text) if m.group(1) in table]
    if not markers or markers[0].start() != 0:
        result.error = Gs1Error(
            ErrorCode.UNKNOWN_AI,
            f"Unknown Application Identifier ({first.group(1)})",
            at_index=0,
            ai=first.group(1),
            fragment=first.group(1)[:4],
        )
        return result

    for i, marker in enumerate(markers):
        ai = marker.group(1)
        end = markers[i + 1].start() if i + 1 < len(markers) else len(text)
        entry = table.get(ai)
        result.elements.append(AIElement(
            ai=ai,
            value=text[marker.end():end],
            title=entry.title if entry else "",
            start_index=marker.start(),
            end_index=end,
        ))

    return result


def parse_gs1(data: str, *, table: Optional[AITable] = None) -> Gs1ParseResult:
    """Parse either bracketed notation or a raw FNC1-delimited string."""
    if is_bracketed(data):
        return parse_bracketed(data, table=table)
    return parse_gs1_128(data, table=table)


def compose_gs1_128(
    pairs: Sequence[Tuple[str, str]],
    *,
    table: Optional[AITable] = None,
    separator: str = GS,
) -> str:
    """
    Build a GS1-128 element string from (AI, value) pairs.

    A separator follows every AI outside the predefined-length table,
    except the last one, so the result parses back to the same pairs.

    Raises:
        ValueError: on an unknown AI or a fixed-length value of the wrong size
    """
    table = table or DEFAULT_AI_TABLE
    parts: List[str] = []
    last = len(pairs) - 1

    for i, (ai, value) in enumerate(pairs):
        entry = table.get(ai)
        if entry is None:
            raise ValueError(f"Unknown Application Identifier: {ai}")
        fixed = entry.fixed_length
        if fixed is not None and len(value) != fixed:
            raise ValueError(f"AI ({ai}) requires exactly {fixed} characters, got {len(value)}")
        if GS in value:
            raise ValueError(f"AI ({ai}) value contains a separator")
        parts.append(f"{ai}{value}")
        if i < last and entry.separator_required:
            parts.append(separator)

    return "".join(parts)


def format_hri(pairs: Iterable[Tuple[str, str]]) -> str:
    """Human readable interpretation: "(01)...(10)..."."""
    return "".join(f"({ai}){value}" for ai, value in pairs)


def _check_date(value: str, allow_zero_day: bool) -> Optional[str]:
    if len(value) != 6 or not value.isdigit():
        return "Date must be 6 digits (YYMMDD)"
    yy, mm, dd = int(value[0:2]), int(value[2:4]), int(value[4:6])
    if not 1 <= mm <= 12:
        return f"Invalid month: {mm}"
    year = 1900 + yy if yy >= CENTURY_PIVOT else 2000 + yy
    if dd == 0 and allow_zero_day:
        return None
    if not 1 <= dd <= monthrange(year, mm)[1]:
        return f"Invalid day {dd} for month {mm}"
    return None


def _check_components(entry: AIEntry, value: str) -> Optional[Gs1Error]:
    offset = 0
    for component in entry.components:
        part = value[offset:offset + component.max_length]
        offset += len(part)
        if component.data_type == "N" and part and not (part.isdigit() and part.isascii()):
            return Gs1Error(
                ErrorCode.NOT_DIGITS,
                f"AI ({entry.ai}) must be numeric",
                ai=entry.ai,
            )
        if component.data_type == "X" and any(c not in CSET82 for c in part):
            return Gs1Error(
                ErrorCode.INVALID_CHARACTERS,
                f"AI ({entry.ai}) contains characters outside GS1 CSET 82",
                ai=entry.ai,
            )
    return None


def validate_ai_value(ai: str, value: str, *, table: Optional[AITable] = None) -> Optional[Gs1Error]:
    """
    Validate one AI value: length, character set, check digit and date.

    Returns None when the value is valid.
    """
    table = table or DEFAULT_AI_TABLE
    entry = table.get(ai)
    if entry is None:
        return Gs1Error(ErrorCode.UNKNOWN_AI, f"Unknown Application Identifier: {ai}", ai=ai)

    if not entry.min_length <= len(value) <= entry.max_length:
        expected = (
            f"{entry.fixed_length}" if entry.fixed_length is not None
            else f"{entry.min_length}-{entry.max_length}"
        )
        return Gs1Error(
            ErrorCode.WRONG_LENGTH,
            f"AI ({ai}) requires {expected} characters, got {len(value)}",
            ai=ai,
        )

    error = _check_components(entry, value)
    if error is not None:
        return error

    span = entry.check_digit_span
    if span is not None:
        check = verify_check_digit(value[span[0]:span[1]])
        if not check.valid:
            return Gs1Error(
                ErrorCode.CHECKSUM_MISMATCH,
                f"AI ({ai}) {check.errors[0]}",
                ai=ai,
                meta={"expected_check_digit": check.expected_check_digit},
            )

    date_format = entry.date_format
    if date_format is not None:
        problem = _check_date(value[:6], allow_zero_day=(date_format == "yymmd0"))
        if problem:
            return Gs1Error(ErrorCode.INVALID_AI_VALUE, f"AI ({ai}) {problem}", ai=ai)

    return None


def validate_ai_values(
    pairs: Iterable[Tuple[str, str]],
    *,
    table: Optional[AITable] = None,
) -> List[Gs1Error]:
    """Validate every (AI, value) pair; returns the errors found."""
    errors = []
    for ai, value in pairs:
        error = validate_ai_value(ai, value, table=table)
        if error is not None:
            errors.append(error)
    return errors
