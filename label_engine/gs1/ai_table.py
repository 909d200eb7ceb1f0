"""
GS1 Application Identifier Table

The set of Application Identifiers the engine recognises, written in the
GS1 Barcode Syntax Dictionary notation and compiled into a trie for
longest-match lookup.

Line format::

    AI  [*]  COMPONENT [COMPONENT ...]  # Title

- ``*`` marks a predefined-length AI (no FNC1 separator needed after it)
- a component is ``N14`` (fixed), ``X..20`` (variable, 1-20) with optional
  linters after commas (``csum``, ``yymmd0``, ``yymmdd``, ...)
- ``310n`` expands to the ten AIs 3100-3109, ``91-99`` to 91..99

Reference: https://ref.gs1.org/tools/gs1-barcode-syntax-resource/syntax-dictionary/
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Tuple


@dataclass(frozen=True)
class AIComponent:
    """One data component of an AI ('N' numeric or 'X' CSET 82)."""
    data_type: str
    min_length: int
    max_length: int
    linters: Tuple[str, ...] = ()

    @property
    def fixed(self) -> bool:
        return self.min_length == self.max_length


@dataclass(frozen=True)
class AIEntry:
    """
    A single Application Identifier definition.

    Attributes:
        ai: The AI code (2-4 digits)
        title: Data title from the syntax dictionary
        predefined: True if the AI is in the predefined-length table
        components: Data components in order
    """
    ai: str
    title: str
    predefined: bool
    components: Tuple[AIComponent, ...]

    @property
    def fixed_length(self) -> Optional[int]:
        """Total data length when every component is fixed, else None."""
        if all(c.fixed for c in self.components):
            return sum(c.max_length for c in self.components)
        return None

    @property
    def min_length(self) -> int:
        return sum(c.min_length for c in self.components)

    @property
    def max_length(self) -> int:
        return sum(c.max_length for c in self.components)

    @property
    def separator_required(self) -> bool:
        return not self.predefined

    @property
    def check_digit_span(self) -> Optional[Tuple[int, int]]:
        """(start, end) slice of the component carrying a mod-10 check digit."""
        offset = 0
        for component in self.components:
            if "csum" in component.linters:
                return offset, offset + component.max_length
            offset += component.max_length
        return None

    @property
    def date_format(self) -> Optional[str]:
        for component in self.components:
            for linter in component.linters:
                if linter in ("yymmd0", "yymmdd"):
                    return linter
        return None


RAW_AI_TABLE = """
00    *  N18,csum                 # SSCC
01    *  N14,csum                 # GTIN
02    *  N14,csum                 # CONTENT
03    *  N14,csum                 # MTO GTIN
10       X..20                    # BATCH/LOT
11    *  N6,yymmd0                # PROD DATE
12    *  N6,yymmd0                # DUE DATE
13    *  N6,yymmd0                # PACK DATE
15    *  N6,yymmd0                # BEST BEFORE or BEST BY
16    *  N6,yymmd0                # SELL BY
17    *  N6,yymmd0                # USE BY OR EXPIRY
20    *  N2                       # VARIANT
21       X..20                    # SERIAL
22       X..20                    # CPV
235      X..28                    # TPX
240      X..30                    # ADDITIONAL ID
241      X..30                    # CUST. PART No.
242      N..6                     # MTO VARIANT
243      X..20                    # PCN
250      X..30                    # SECONDARY SERIAL
251      X..30                    # REF. TO SOURCE
253      N13,csum X0..17          # GDTI
254      X..20                    # GLN EXTENSION COMPONENT
255      N13,csum N0..12          # GCN
30       N..8                     # VAR. COUNT
310n  *  N6                       # NET WEIGHT (kg)
311n  *  N6                       # LENGTH (m)
312n  *  N6                       # WIDTH (m)
313n  *  N6                       # HEIGHT (m)
314n  *  N6                       # AREA (m2)
315n  *  N6                       # NET VOLUME (l)
316n  *  N6                       # NET VOLUME (m3)
320n  *  N6                       # NET WEIGHT (lb)
321n  *  N6                       # LENGTH (in)
322n  *  N6                       # LENGTH (ft)
323n  *  N6                       # LENGTH (yd)
324n  *  N6                       # WIDTH (in)
325n  *  N6                       # WIDTH (ft)
326n  *  N6                       # WIDTH (yd)
327n  *  N6                       # HEIGHT (in)
328n  *  N6                       # HEIGHT (ft)
329n  *  N6                       # HEIGHT (yd)
330n  *  N6                       # GROSS WEIGHT (kg)
331n  *  N6                       # LENGTH (m), log
332n  *  N6                       # WIDTH (m), log
333n  *  N6                       # HEIGHT (m), log
334n  *  N6                       # AREA (m2), log
335n  *  N6                       # VOLUME (l), log
336n  *  N6                       # VOLUME (m3), log
337n  *  N6                       # KG PER m2
340n  *  N6                       # GROSS WEIGHT (lb)
341n  *  N6                       # LENGTH (in), log
342n  *  N6                       # LENGTH (ft), log
343n  *  N6                       # LENGTH (yd), log
344n  *  N6                       # WIDTH (in), log
345n  *  N6                       # WIDTH (ft), log
346n  *  N6                       # WIDTH (yd), log
347n  *  N6                       # HEIGHT (in), log
348n  *  N6                       # HEIGHT (ft), log
349n  *  N6                       # HEIGHT (yd), log
350n  *  N6                       # AREA (in2)
351n  *  N6                       # AREA (ft2)
352n  *  N6                       # AREA (yd2)
353n  *  N6                       # AREA (in2), log
354n  *  N6                       # AREA (ft2), log
355n  *  N6                       # AREA (yd2), log
356n  *  N6                       # NET WEIGHT (t oz)
357n  *  N6                       # NET VOLUME (oz)
360n  *  N6                       # NET VOLUME (qt)
361n  *  N6                       # NET VOLUME (gal)
362n  *  N6                       # VOLUME (qt), log
363n  *  N6                       # VOLUME (gal), log
364n  *  N6                       # VOLUME (in3)
365n  *  N6                       # VOLUME (ft3)
366n  *  N6                       # VOLUME (yd3)
367n  *  N6                       # VOLUME (in3), log
368n  *  N6                       # VOLUME (ft3), log
369n  *  N6                       # VOLUME (yd3), log
37       N..8                     # COUNT
390n     N..15                    # AMOUNT
391n     N3,iso4217 N..15         # AMOUNT
392n     N..15                    # PRICE
393n     N3,iso4217 N..15         # PRICE
394n     N4                       # PRCNT OFF
395n     N6                       # PRICE/UoM
400      X..30                    # ORDER NUMBER
401      X..30                    # GINC
402      N17,csum                 # GSIN
403      X..30                    # ROUTE
410   *  N13,csum                 # SHIP TO LOC
411   *  N13,csum                 # BILL TO
412   *  N13,csum                 # PURCHASE FROM
413   *  N13,csum                 # SHIP FOR LOC
414   *  N13,csum                 # LOC No.
415   *  N13,csum                 # PAY TO
416   *  N13,csum                 # PROD/SERV LOC
417   *  N13,csum                 # PARTY
420      X..20                    # SHIP TO POST
421      N3,iso3166 X..9          # SHIP TO POST
422      N3,iso3166               # ORIGIN
423      N3 N0..12                # COUNTRY - INITIAL PROCESS.
424      N3,iso3166               # COUNTRY - PROCESS.
425      N3 N0..12                # COUNTRY - DISASSEMBLY
426      N3,iso3166               # COUNTRY - FULL PROCESS
427      X..3                     # ORIGIN SUBDIVISION
7001     N13                      # NSN
7002     X..30                    # MEAT CUT
7003     N10,yymmddhhmi           # EXPIRY TIME
7004     N..4                     # ACTIVE POTENCY
7005     X..12                    # CATCH AREA
7006     N6,yymmdd                # FIRST FREEZE DATE
7007     N6,yymmdd N0..6          # HARVEST DATE
7008     X..3                     # AQUATIC SPECIES
7009     X..10                    # FISHING GEAR TYPE
7010     X..2                     # PROD METHOD
710      X..20                    # NHRN PZN
711      X..20                    # NHRN CIP
712      X..20                    # NHRN CN
713      X..20                    # NHRN DRN
714      X..20                    # NHRN AIM
715      X..20                    # NHRN NDC
723n     X2 X..28                 # CERT # n
8001     N14                      # DIMENSIONS
8002     X..20                    # CMT No.
8003     N1 N13,csum X0..16       # GRAI
8004     X..30                    # GIAI
8005     N6                       # PRICE PER UNIT
8006     N14,csum N2 N2           # ITIP
8007     X..34                    # IBAN
8008     N8 N0..4                 # PROD TIME
8010     X..30                    # CPID
8011     N..12                    # CPID SERIAL
8012     X..20                    # VERSION
8013     X..25                    # GMN
8017     N18,csum                 # GSRN - PROVIDER
8018     N18,csum                 # GSRN - RECIPIENT
8019     N..10                    # SRIN
8020     X..25                    # REF No.
8026     N14,csum N2 N2           # ITIP CONTENT
8110     X..70                    # COUPON CODE (NORTH AMERICA)
8111     N4                       # POINTS
8112     X..70                    # PAPERLESS COUPON CODE
8200     X..70                    # PRODUCT URL
90       X..30                    # INTERNAL
91-99    X..90                    # INTERNAL
"""


def _parse_component(spec: str) -> AIComponent:
    """
    Parse one component specification.

    Examples:
        "N14,csum" -> AIComponent('N', 14, 14, ('csum',))
        "X..20"    -> AIComponent('X', 1, 20, ())
        "N0..12"   -> AIComponent('N', 0, 12, ())  optional trailing component
    """
    parts = spec.split(",")
    type_len, linters = parts[0], tuple(parts[1:])
    data_type, len_spec = type_len[0], type_len[1:]

    if ".." in len_spec:
        low, _, high = len_spec.partition("..")
        min_len, max_len = (int(low) if low else 1), int(high)
    else:
        min_len = max_len = int(len_spec)

    return AIComponent(data_type, min_len, max_len, linters)


def _expand_ai_codes(ai_spec: str) -> List[str]:
    if ai_spec.endswith("n"):
        return [f"{ai_spec[:-1]}{n}" for n in range(10)]
    if "-" in ai_spec:
        start, end = ai_spec.split("-")
        width = len(start)
        return [str(i).zfill(width) for i in range(int(start), int(end) + 1)]
    return [ai_spec]


def parse_ai_table(raw: str) -> Dict[str, AIEntry]:
    """Parse table text into AIEntry objects keyed by AI code."""
    entries: Dict[str, AIEntry] = {}

    for line in raw.strip().splitlines():
        main_part, _, title = line.partition("#")
        tokens = main_part.split()
        if not tokens:
            continue

        ai_spec, rest = tokens[0], tokens[1:]
        predefined = bool(rest) and rest[0] == "*"
        if predefined:
            rest = rest[1:]
        components = tuple(_parse_component(spec) for spec in rest)

        for ai in _expand_ai_codes(ai_spec):
            entries[ai] = AIEntry(ai, title.strip(), predefined, components)

    return entries


class TrieNode:
    """Trie node for AI prefix matching."""
    __slots__ = ["children", "entry"]

    def __init__(self):
        self.children: Dict[str, TrieNode] = {}
        self.entry: Optional[AIEntry] = None


class AITable:
    """
    Application Identifier lookup table.

    Backed by a trie so that matching at a position costs at most four
    character steps (AIs are 2-4 digits).
    """

    MAX_AI_LENGTH = 4

    def __init__(self, entries: Dict[str, AIEntry]):
        self.root = TrieNode()
        self._entries: Dict[str, AIEntry] = {}
        for ai, entry in entries.items():
            self._insert(ai, entry)

    def _insert(self, ai: str, entry: AIEntry) -> None:
        node = self.root
        for char in ai:
            node = node.children.setdefault(char, TrieNode())
        node.entry = entry
        self._entries[ai] = entry

    def find_longest_match(self, text: str, start: int = 0) -> Tuple[Optional[AIEntry], int]:
        """
        Find the longest AI starting at ``start``.

        Returns (AIEntry, length) or (None, 0) if no AI matches.
        """
        node = self.root
        match: Optional[AIEntry] = None
        match_len = 0

        for i, char in enumerate(text[start:start + self.MAX_AI_LENGTH]):
            node = node.children.get(char)
            if node is None:
                break
            if node.entry is not None:
                match, match_len = node.entry, i + 1

        return match, match_len

    def get(self, ai: str) -> Optional[AIEntry]:
        return self._entries.get(ai)

    def __contains__(self, ai: str) -> bool:
        return ai in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def prefix_conflicts(self) -> List[Tuple[str, str]]:
        """Pairs (short, long) where one AI is a strict prefix of another."""
        conflicts = []
        codes = sorted(self._entries)
        for short in codes:
            for long in codes:
                if len(long) > len(short) and long.startswith(short):
                    conflicts.append((short, long))
        return conflicts


def load_ai_table(raw: Optional[str] = None, extra: Optional[str] = None) -> AITable:
    """
    Build an AITable.

    Args:
        raw: Table text replacing the built-in table
        extra: Additional lines merged over the built-in (or ``raw``) table
    """
    entries = parse_ai_table(raw if raw is not None else RAW_AI_TABLE)
    if extra:
        entries.update(parse_ai_table(extra))
    return AITable(entries)


DEFAULT_AI_TABLE = load_ai_table()
