"""
Drug description parsing and duplicate grouping.

Descriptions are free-text report lines such as ``"LIPITOR 10MG TB 90"``.
Parsing is best effort and never raises: a line without a recognisable
strength falls back to its first word as the chemical name.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

NO_STRENGTH = "NO_STRENGTH"

DOSAGE_FORMS = frozenset([
    "TB", "TAB", "TABLET", "TABLETS",
    "CP", "CAP", "CAPS", "CAPSULE", "CAPSULES",
    "ML", "MG", "MCG", "G", "GM",
    "INJ", "INJECTION",
    "SYR", "SYRUP",
    "SOL", "SOLUTION",
    "SUSP", "SUSPENSION",
    "CR", "CREAM",
    "OINT", "OINTMENT",
    "GEL",
    "LOT", "LOTION",
    "DROP", "DROPS",
    "SPRAY",
    "PATCH",
    "INH", "INHALER",
    "PEN",
    "DISKUS",
    "HFA",
    "UD",
    # release modifiers
    "XR", "SR", "ER", "CD", "LA", "XL", "DR", "EC", "OD", "IR",
    "CONTIN",
])

# one or two numeric runs ("5/50"), then a unit
STRENGTH_PATTERN = re.compile(
    r"(\d+\.?\d*/?\d*\.?\d*)\s*(MG|MCG|G|ML|%|IU|UNIT|UNITS|UG|MEQ)",
    re.IGNORECASE | re.ASCII,
)


@dataclass(frozen=True)
class ParsedDrug:
    chemical: str
    strength: Optional[str]
    form: Optional[str]
    raw_description: Optional[str]


@dataclass
class DuplicateGroup:
    count: int = 0
    mfr_codes: set = field(default_factory=set)
    items: list = field(default_factory=list)

    @property
    def is_true_duplicate(self) -> bool:
        return len(self.mfr_codes) > 1

    def add(self, item, mfr_code) -> None:
        self.count += 1
        self.mfr_codes.add(mfr_code)
        self.items.append(item)


def parse_drug_description(description: Optional[str]) -> ParsedDrug:
    if not description:
        return ParsedDrug(chemical="", strength=None, form=None, raw_description=description)

    strength = None
    form = None
    match = STRENGTH_PATTERN.search(description)

    if match:
        strength = match.group(0).upper()
        tokens = description[:match.start()].split()
        # only the last form token popped is kept
        while tokens and tokens[-1].upper() in DOSAGE_FORMS:
            form = tokens.pop()
        chemical = " ".join(tokens)
        if form is None:
            following = description[match.end():].split()
            if following and following[0].upper() in DOSAGE_FORMS:
                form = following[0]
    else:
        words = description.split()
        chemical = words[0] if words else ""

    chemical = " ".join(chemical.split())
    return ParsedDrug(chemical=chemical, strength=strength, form=form, raw_description=description)


def get_duplicate_key(description: Optional[str]) -> str:
    """``CHEMICAL|STRENGTH``, uppercased with whitespace removed from the strength."""
    parsed = parse_drug_description(description)
    chemical = parsed.chemical.upper().strip()
    strength = "".join(parsed.strength.upper().split()) if parsed.strength else ""
    return f"{chemical}|{strength or NO_STRENGTH}"


def _field(item: Any, name: str):
    if isinstance(item, dict):
        return item.get(name)
    return getattr(item, name, None)


def find_duplicate_groups(items: Iterable[Any]) -> dict[str, DuplicateGroup]:
    """Group items by duplicate key in one pass; keys keep first-seen order."""
    groups: dict[str, DuplicateGroup] = {}
    for item in items:
        key = get_duplicate_key(_field(item, "description"))
        group = groups.get(key)
        if group is None:
            group = groups[key] = DuplicateGroup()
        group.add(item, _field(item, "manufacturer_code"))
    return groups


def get_true_duplicate_keys(items: Iterable[Any]) -> set[str]:
    """Keys whose items come from more than one manufacturer code."""
    return {key for key, group in find_duplicate_groups(items).items() if group.is_true_duplicate}
