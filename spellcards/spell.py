"""Spell record model.

A ``SpellRecord`` is the normalized, immutable form of one spell's printable
content. Records are built either directly or from loosely typed table rows
via ``SpellRecord.from_mapping``; both paths validate and raise
``InvalidSpellData`` on bad input.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Type, TypeVar

import pandas as pd

from .errors import InvalidSpellData

MIN_LEVEL = 0
MAX_LEVEL = 10

_TAG_SEPARATORS = re.compile(r"[;,]")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


class _Tag(str, Enum):
    """String enum parsed case-insensitively from table values."""

    @classmethod
    def parse(cls, value: Any, field_name: str):
        if isinstance(value, cls):
            return value
        text = str(value).strip().lower()
        for member in cls:
            if member.value == text or member.name.lower() == text:
                return member
        allowed = ", ".join(m.value for m in cls)
        raise InvalidSpellData(f"Unknown {field_name} '{value}' (expected one of: {allowed})", field_name)


class SpellKind(_Tag):
    SPELL = "spell"
    CANTRIP = "cantrip"
    FOCUS = "focus"
    RITUAL = "ritual"


class Tradition(_Tag):
    ARCANE = "arcane"
    DIVINE = "divine"
    OCCULT = "occult"
    PRIMAL = "primal"


class School(_Tag):
    ABJURATION = "abjuration"
    CONJURATION = "conjuration"
    DIVINATION = "divination"
    ENCHANTMENT = "enchantment"
    EVOCATION = "evocation"
    ILLUSION = "illusion"
    NECROMANCY = "necromancy"
    TRANSMUTATION = "transmutation"


class Rarity(_Tag):
    COMMON = "common"
    UNCOMMON = "uncommon"
    RARE = "rare"
    UNIQUE = "unique"


class Component(_Tag):
    FOCUS = "focus"
    MATERIAL = "material"
    SOMATIC = "somatic"
    VERBAL = "verbal"


class SavingThrow(_Tag):
    FORTITUDE = "fortitude"
    REFLEX = "reflex"
    WILL = "will"


@dataclass(frozen=True)
class HeightenedEntry:
    """A heightened variant, e.g. label ``+1`` or ``3rd`` with its rules text."""

    label: str
    text: str

    @property
    def lead_in(self) -> str:
        return f"Heightened ({self.label})"


E = TypeVar("E", bound=_Tag)


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, set, frozenset, dict)):
        return False
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        return False


def _optional_text(value: Any) -> Optional[str]:
    if _is_missing(value):
        return None
    return str(value).strip()


def _split_tags(value: Any) -> List[str]:
    if _is_missing(value):
        return []
    if isinstance(value, str):
        parts = _TAG_SEPARATORS.split(value)
    else:
        parts = [str(v) for v in value]
    return [p.strip() for p in parts if p and p.strip()]


def _ordered_tags(enum_cls: Type[E], values: Iterable[Any], field_name: str) -> Tuple[E, ...]:
    """Parse tags, drop duplicates and return them in enumeration order."""
    parsed = {enum_cls.parse(v, field_name) for v in values}
    return tuple(m for m in enum_cls if m in parsed)


def _parse_level(value: Any) -> int:
    if _is_missing(value):
        raise InvalidSpellData("level is required", "level")
    if isinstance(value, bool):
        raise InvalidSpellData(f"level must be a number, got {value!r}", "level")
    if isinstance(value, str):
        # accept "3", "Spell 3", "Rank 3"
        m = re.fullmatch(r"(?:[a-z]+\s+)?(\d+)", value.strip(), flags=re.I)
        if not m:
            raise InvalidSpellData(f"level must be a number, got {value!r}", "level")
        return int(m.group(1))
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidSpellData(f"level must be a number, got {value!r}", "level") from None
    if not number.is_integer():
        raise InvalidSpellData(f"level must be a whole number, got {value!r}", "level")
    return int(number)


def _parse_save(value: Any) -> Tuple[Optional[SavingThrow], bool]:
    text = _optional_text(value)
    if text is None:
        return None, False
    basic = False
    lowered = text.lower()
    if lowered.startswith("basic"):
        basic = True
        text = text[len("basic"):].strip()
    return SavingThrow.parse(text, "save"), basic


def _parse_heightened(value: Any) -> Tuple[HeightenedEntry, ...]:
    if _is_missing(value):
        return ()
    if isinstance(value, str):
        items: List[Any] = [chunk for chunk in value.split("|") if chunk.strip()]
    else:
        items = list(value)

    entries = []
    for item in items:
        if isinstance(item, HeightenedEntry):
            entries.append(item)
            continue
        if isinstance(item, Mapping):
            label, text = item.get("label"), item.get("text")
        elif isinstance(item, str):
            if ":" not in item:
                raise InvalidSpellData(f"heightened entry needs 'label: text', got {item!r}", "heightened")
            label, text = item.split(":", 1)
        else:
            try:
                label, text = item
            except (TypeError, ValueError):
                raise InvalidSpellData(f"cannot read heightened entry {item!r}", "heightened") from None
        label, text = _optional_text(label), _optional_text(text)
        if not label or not text:
            raise InvalidSpellData(f"heightened entry needs a label and a text, got {item!r}", "heightened")
        entries.append(HeightenedEntry(label, text))
    return tuple(entries)


def _parse_bool(value: Any) -> bool:
    if _is_missing(value):
        return False
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "x")
    return bool(value)


@dataclass(frozen=True)
class SpellRecord:
    """One spell's printable fields."""

    name: str
    level: int
    kind: SpellKind = SpellKind.SPELL
    traditions: Tuple[Tradition, ...] = ()
    school: Optional[School] = None
    rarity: Rarity = Rarity.COMMON
    traits: Tuple[str, ...] = ()
    cast: Optional[str] = None
    components: Tuple[Component, ...] = ()
    trigger: Optional[str] = None
    requirements: Optional[str] = None
    range: Optional[str] = None
    area: Optional[str] = None
    targets: Optional[str] = None
    duration: Optional[str] = None
    save: Optional[SavingThrow] = None
    basic_save: bool = False
    description: str = ""
    heightened: Tuple[HeightenedEntry, ...] = field(default_factory=tuple)
    source_url: Optional[str] = None

    def __post_init__(self):
        name = self.name.strip() if isinstance(self.name, str) else ""
        if not name:
            raise InvalidSpellData("spell name must not be empty", "name")
        object.__setattr__(self, "name", name)

        if isinstance(self.level, bool) or not isinstance(self.level, int):
            raise InvalidSpellData(f"level must be an integer, got {self.level!r}", "level")
        if not MIN_LEVEL <= self.level <= MAX_LEVEL:
            raise InvalidSpellData(
                f"level {self.level} of '{name}' is outside [{MIN_LEVEL}, {MAX_LEVEL}]", "level"
            )
        if self.description is None:
            object.__setattr__(self, "description", "")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SpellRecord":
        """Build a record from a table row or JSON object.

        Tag fields accept lists or ``,``/``;`` separated strings and missing
        values may be ``None``, NaN or blank strings.
        """
        name = _optional_text(data.get("name"))
        if name is None:
            raise InvalidSpellData("spell name must not be empty", "name")

        traits = tuple(_split_tags(data.get("traits")))
        kind_value = _optional_text(data.get("kind"))
        if kind_value is not None:
            kind = SpellKind.parse(kind_value, "kind")
        elif any(t.lower() == "cantrip" for t in traits):
            kind = SpellKind.CANTRIP
        else:
            kind = SpellKind.SPELL

        school_value = _optional_text(data.get("school"))
        rarity_value = _optional_text(data.get("rarity"))
        save, basic = _parse_save(data.get("save"))
        if "basic_save" in data and not _is_missing(data.get("basic_save")):
            basic = _parse_bool(data.get("basic_save"))

        return cls(
            name=name,
            level=_parse_level(data.get("level")),
            kind=kind,
            traditions=_ordered_tags(Tradition, _split_tags(data.get("traditions")), "tradition"),
            school=School.parse(school_value, "school") if school_value else None,
            rarity=Rarity.parse(rarity_value, "rarity") if rarity_value else Rarity.COMMON,
            traits=tuple(t for t in traits if t.lower() not in ("cantrip", "focus")),
            cast=_optional_text(data.get("cast")),
            components=_ordered_tags(Component, _split_tags(data.get("components")), "component"),
            trigger=_optional_text(data.get("trigger")),
            requirements=_optional_text(data.get("requirements")),
            range=_optional_text(data.get("range")),
            area=_optional_text(data.get("area")),
            targets=_optional_text(data.get("targets")),
            duration=_optional_text(data.get("duration")),
            save=save,
            basic_save=basic,
            description=_optional_text(data.get("description")) or "",
            heightened=_parse_heightened(data.get("heightened")),
            source_url=_optional_text(data.get("source_url")),
        )

    @property
    def level_label(self) -> str:
        if self.level == 0:
            return "Cantrip"
        return f"{self.kind.value.title()} {self.level}"

    @property
    def trait_line(self) -> str:
        tags = []
        if self.rarity is not Rarity.COMMON:
            tags.append(self.rarity.value)
        if self.school is not None:
            tags.append(self.school.value)
        tags.extend(self.traits)
        return " ".join(t.upper() for t in tags)

    @property
    def save_text(self) -> Optional[str]:
        if self.save is None:
            return None
        name = self.save.value.title()
        return f"basic {name}" if self.basic_save else name

    def meta_entries(self) -> List[Tuple[str, str]]:
        """Label/value pairs shown between header and body, in card order."""
        candidates = [
            ("Cast", self.cast),
            ("Components", ", ".join(c.value for c in self.components) or None),
            ("Trigger", self.trigger),
            ("Requirements", self.requirements),
            ("Range", self.range),
            ("Area", self.area),
            ("Targets", self.targets),
            ("Duration", self.duration),
            ("Saving Throw", self.save_text),
        ]
        return [(label, value) for label, value in candidates if value]

    def body_paragraphs(self) -> List[Tuple[Optional[str], str]]:
        """Description paragraphs followed by heightened entries as (lead-in, text)."""
        paragraphs: List[Tuple[Optional[str], str]] = [
            (None, p.strip()) for p in _PARAGRAPH_BREAK.split(self.description.strip()) if p.strip()
        ]
        paragraphs.extend((entry.lead_in, entry.text) for entry in self.heightened)
        return paragraphs
