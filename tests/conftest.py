"""Shared fixtures for the spell card test suite."""

from __future__ import annotations

from typing import Any, Callable

import pytest

from spellcards.geometry import CardGeometry
from spellcards.spell import (
    Component,
    SavingThrow,
    SpellRecord,
    Tradition,
)

VOCABULARY = (
    "a", "burst", "of", "flame", "erupts", "from", "the", "point", "you", "choose",
    "dealing", "fire", "damage", "to", "each", "creature", "within", "area", "blazing",
    "sphere", "roars", "outward", "scorching", "everything",
)


def make_words(count: int) -> str:
    """Deterministic filler text with ``count`` words separated by single spaces."""
    return " ".join(VOCABULARY[i % len(VOCABULARY)] for i in range(count))


@pytest.fixture
def words() -> Callable[[int], str]:
    return make_words


@pytest.fixture
def geometry() -> CardGeometry:
    """The 300x400 point card used by the layout scenarios."""
    return CardGeometry(width=300, height=400)


@pytest.fixture
def make_spell() -> Callable[..., SpellRecord]:
    """Factory for a fully populated spell; keyword arguments override fields."""

    def factory(**overrides: Any) -> SpellRecord:
        fields: dict[str, Any] = {
            "name": "Fireball",
            "level": 3,
            "traditions": (Tradition.ARCANE, Tradition.PRIMAL),
            "traits": ("Fire",),
            "cast": "two actions",
            "components": (Component.SOMATIC, Component.VERBAL),
            "range": "500 feet",
            "area": "20-foot burst",
            "save": SavingThrow.REFLEX,
            "basic_save": True,
            "description": make_words(50),
        }
        fields.update(overrides)
        return SpellRecord(**fields)

    return factory
