"""Tests for text measurement and wrapping."""

from __future__ import annotations

import pytest

from spellcards.text_utils import (
    TextDoesNotFit,
    line_metrics,
    text_width,
    wrap_words,
)

FONT = "Helvetica"


class TestWrapWords:
    """Tests for greedy word wrapping."""

    def test_everything_on_one_line(self) -> None:
        assert wrap_words(["magic", "missile"], FONT, 10, 500) == ["magic missile"]

    def test_wraps_at_word_boundaries(self) -> None:
        words = "you send a dart of force streaking toward a creature".split()
        lines = wrap_words(words, FONT, 10, 80)

        assert len(lines) > 1
        assert " ".join(lines).split() == words
        assert all(text_width(line, FONT, 10) <= 80 for line in lines)

    def test_long_word_split_by_characters(self) -> None:
        word = "m" * 40
        lines = wrap_words([word], FONT, 10, 50)

        assert "".join(lines) == word
        assert all(text_width(line, FONT, 10) <= 50 for line in lines)

    def test_words_after_hard_break_continue_the_line(self) -> None:
        lines = wrap_words(["i" * 30, "a"], FONT, 10, 60)

        assert lines[-1].endswith(" a")

    def test_first_width_narrows_first_line(self) -> None:
        words = ["alpha", "beta", "gamma"]
        first = text_width("alpha", FONT, 10) + 1
        lines = wrap_words(words, FONT, 10, 500, first_width=first)

        assert lines == ["alpha", "beta gamma"]

    def test_first_word_too_wide_for_lead_in_leaves_first_line_empty(self) -> None:
        lines = wrap_words(["teleport"], FONT, 10, 500, first_width=5)

        assert lines == ["", "teleport"]

    def test_character_wider_than_line(self) -> None:
        with pytest.raises(TextDoesNotFit) as excinfo:
            wrap_words(["W"], FONT, 10, 2)

        assert excinfo.value.char == "W"

    def test_no_words(self) -> None:
        assert wrap_words([], FONT, 10, 100) == []


class TestLineMetrics:
    """Tests for line height calculation."""

    def test_line_height_follows_spacing(self) -> None:
        height, baseline = line_metrics(FONT, 10, 1.5)

        assert height == pytest.approx(15)
        assert 0 < baseline < height

    def test_line_height_never_below_glyph_height(self) -> None:
        height, baseline = line_metrics(FONT, 10, 1.0)

        assert height >= 9.25
        assert baseline <= height
