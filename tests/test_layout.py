"""Tests for the card layout engine."""

from __future__ import annotations

import pytest

from spellcards.constants import TRUNCATION_MARKER
from spellcards.errors import GeometryTooSmall
from spellcards.geometry import CardGeometry, FontSpec, OverflowPolicy
from spellcards.layout import REGION_ORDER, Box, Region, inner_rect, layout
from spellcards.spell import HeightenedEntry
from spellcards.text_utils import text_width


def assert_within_bounds(result) -> None:
    bounds = result.bounds
    for block in result.blocks:
        assert bounds.contains(block.box), block.region
        for run in block.runs:
            right = run.x + text_width(run.text, run.font_name, run.font_size)
            assert run.x >= block.box.x - 1e-6
            assert right <= block.box.right + 1e-6
            assert block.box.y - 1e-6 <= run.baseline <= block.box.top + 1e-6


class TestInnerRect:
    """Tests for the margin helper."""

    def test_applies_margin_on_all_sides(self) -> None:
        assert inner_rect(10, 20, 100, 200, 5) == (15, 25, 90, 190)


class TestLayoutScenarios:
    """Card scenarios on a 300x400 geometry."""

    def test_short_description_fits(self, geometry, make_spell, words) -> None:
        """A 50-word description fits with every region present and no overflow."""
        spell = make_spell(description=words(50))
        result = layout(spell, geometry)

        assert tuple(b.region for b in result.blocks) == REGION_ORDER
        assert not any(b.overflow for b in result.blocks)
        assert result.block(Region.BODY).text == spell.description
        assert result.block(Region.BODY).font_size == geometry.body_font.size
        assert_within_bounds(result)

    def test_huge_description_overflows(self, geometry, make_spell, words) -> None:
        """A 5,000-word description is truncated at a word boundary."""
        spell = make_spell(description=words(5000))
        result = layout(spell, geometry)
        body = result.block(Region.BODY)

        assert body.overflow
        assert 0 < len(body.text) < len(spell.description)
        assert spell.description.startswith(body.text)
        assert spell.description[len(body.text)] == " "
        assert body.font_size == geometry.min_body_font_size
        assert body.runs[-1].text.endswith(TRUNCATION_MARKER)
        assert_within_bounds(result)

    def test_too_narrow_for_one_title_character(self, make_spell) -> None:
        narrow = CardGeometry(width=2, height=400, margin=0)

        with pytest.raises(GeometryTooSmall) as excinfo:
            layout(make_spell(), narrow)

        assert excinfo.value.spell_name == "Fireball"

    def test_too_short_for_header_and_meta(self, make_spell) -> None:
        short = CardGeometry(width=300, height=30, margin=0)

        with pytest.raises(GeometryTooSmall):
            layout(make_spell(), short)

    def test_margins_consuming_the_card(self, make_spell) -> None:
        with pytest.raises(GeometryTooSmall):
            layout(make_spell(), CardGeometry(width=20, height=400, margin=10))


class TestLayoutProperties:
    """Invariants that hold for every layout."""

    @pytest.mark.parametrize("count", [0, 1, 20, 200, 600, 1500, 5000])
    def test_blocks_inside_card_and_only_body_overflows(self, geometry, make_spell, words, count) -> None:
        result = layout(make_spell(description=words(count)), geometry)

        assert_within_bounds(result)
        assert tuple(b.region for b in result.blocks) == REGION_ORDER
        assert not result.block(Region.HEADER).overflow
        assert not result.block(Region.META).overflow

    def test_deterministic(self, geometry, make_spell, words) -> None:
        spell = make_spell(description=words(3000))

        first = layout(spell, geometry)
        second = layout(spell, geometry)

        assert first == second
        assert first.to_dict() == second.to_dict()

    def test_truncated_text_is_word_prefix(self, make_spell, words) -> None:
        spell = make_spell(description=words(400))
        small = CardGeometry(width=180, height=250, overflow_policy=OverflowPolicy.TRUNCATE)
        body = layout(spell, small).block(Region.BODY)

        assert body.overflow
        shown = body.text.split()
        assert spell.description.split()[: len(shown)] == shown

    def test_shrinks_before_truncating(self, geometry, make_spell, words) -> None:
        """Some description length fits only at a reduced body size."""
        base = geometry.body_font.size
        shrunk = None
        for count in range(300, 1500, 50):
            body = layout(make_spell(description=words(count)), geometry).block(Region.BODY)
            if body.font_size < base and not body.overflow:
                shrunk = body
                break

        assert shrunk is not None
        assert geometry.min_body_font_size <= shrunk.font_size < base

    def test_truncate_policy_keeps_body_size(self, make_spell, words) -> None:
        fixed = CardGeometry(width=300, height=400, overflow_policy=OverflowPolicy.TRUNCATE)
        body = layout(make_spell(description=words(5000)), fixed).block(Region.BODY)

        assert body.overflow
        assert body.font_size == fixed.body_font.size

    def test_truncated_text_keeps_source_whitespace(self, geometry, make_spell, words) -> None:
        description = "Alpha beta\ngamma  delta\n\n  Second   part " + words(5000)
        body = layout(make_spell(description=description), geometry).block(Region.BODY)

        assert body.overflow
        assert body.text.startswith("Alpha beta\ngamma  delta\n\n  Second   part ")
        assert description.startswith(body.text)
        assert description[len(body.text)].isspace()

    def test_fitting_text_keeps_source_whitespace(self, geometry, make_spell) -> None:
        description = "Alpha  beta\ngamma\tdelta"
        body = layout(make_spell(description=description), geometry).block(Region.BODY)

        assert not body.overflow
        assert body.text == description

    def test_header_keeps_requested_size_when_body_has_no_room(self, geometry, make_spell, words) -> None:
        spell = make_spell(description=words(30))
        roomy = layout(spell, geometry)
        fixed = (
            roomy.block(Region.HEADER).box.height
            + geometry.region_gap
            + roomy.block(Region.META).box.height
        )
        tight = CardGeometry(width=300, height=fixed + 2 * geometry.margin + 1)

        result = layout(spell, tight)
        body = result.block(Region.BODY)

        assert result.block(Region.HEADER).font_size == geometry.title_font.size
        assert result.block(Region.META).font_size == geometry.label_font.size
        assert body.overflow
        assert body.runs == ()
        assert body.text == ""
        assert_within_bounds(result)

    def test_header_keeps_requested_size_when_body_has_one_line(self, geometry, make_spell, words) -> None:
        spell = make_spell(description=words(200))
        roomy = layout(spell, geometry)
        fixed = (
            roomy.block(Region.HEADER).box.height
            + geometry.region_gap
            + roomy.block(Region.META).box.height
        )
        tight = CardGeometry(width=300, height=fixed + 2 * geometry.margin + geometry.region_gap + 12)

        result = layout(spell, tight)
        body = result.block(Region.BODY)

        assert result.block(Region.HEADER).font_size == geometry.title_font.size
        assert body.overflow
        assert body.runs[-1].text.endswith(TRUNCATION_MARKER)
        assert spell.description.startswith(body.text)
        assert_within_bounds(result)

    def test_body_box_takes_remaining_height(self, geometry, make_spell) -> None:
        result = layout(make_spell(), geometry)
        meta = result.block(Region.META)
        body = result.block(Region.BODY)

        assert body.box.y == pytest.approx(geometry.margin)
        assert body.box.top == pytest.approx(meta.box.y - geometry.region_gap)


class TestRegions:
    """Content placement within the regions."""

    def test_level_label_right_aligned_on_title_line(self, geometry, make_spell) -> None:
        header = layout(make_spell(), geometry).block(Region.HEADER)
        name_run, level_run = header.runs[0], header.runs[1]

        assert name_run.text == "Fireball"
        assert level_run.text == "Spell 3"
        assert level_run.baseline == name_run.baseline
        right = level_run.x + text_width(level_run.text, level_run.font_name, level_run.font_size)
        assert right == pytest.approx(geometry.width - geometry.margin)

    def test_header_and_meta_text(self, geometry, make_spell) -> None:
        result = layout(make_spell(), geometry)

        assert "FIRE" in result.block(Region.HEADER).text
        assert "Traditions arcane, primal" in result.block(Region.HEADER).text
        meta_text = result.block(Region.META).text
        assert "Cast two actions" in meta_text
        assert "Saving Throw basic Reflex" in meta_text

    def test_no_meta_entries_keeps_empty_meta_block(self, geometry) -> None:
        from spellcards.spell import SpellRecord

        result = layout(SpellRecord(name="Shield", level=1, description="A magical barrier."), geometry)
        meta = result.block(Region.META)

        assert meta.runs == ()
        assert meta.box.height == 0
        assert not meta.overflow

    def test_empty_description(self, geometry, make_spell) -> None:
        body = layout(make_spell(description=""), geometry).block(Region.BODY)

        assert body.runs == ()
        assert body.text == ""
        assert not body.overflow

    def test_long_word_is_hard_broken(self, geometry, make_spell) -> None:
        word = "x" * 300
        result = layout(make_spell(description=f"start {word} end"), geometry)
        body = result.block(Region.BODY)

        assert not body.overflow
        assert "".join(r.text for r in body.runs).replace(" ", "") == f"start{word}end"
        assert len(body.runs) > 1
        assert_within_bounds(result)

    def test_heightened_lead_in(self, geometry, make_spell) -> None:
        spell = make_spell(heightened=(HeightenedEntry("+1", "The damage increases by 2d6."),))
        body = layout(spell, geometry).block(Region.BODY)

        lead = [r for r in body.runs if r.text == "Heightened (+1)"]
        assert len(lead) == 1
        assert lead[0].font_name == geometry.label_font.name
        assert body.text.endswith("Heightened (+1) The damage increases by 2d6.")

    def test_heightened_lead_in_dropped_with_its_words(self, make_spell, words) -> None:
        spell = make_spell(
            description=words(2000),
            heightened=(HeightenedEntry("+1", "The damage increases by 2d6."),),
        )
        body = layout(spell, CardGeometry(width=300, height=400)).block(Region.BODY)

        assert body.overflow
        assert "Heightened" not in body.text
        assert all("Heightened" not in r.text for r in body.runs)

    def test_paragraphs_separated(self, geometry, make_spell) -> None:
        body = layout(make_spell(description="First part.\n\nSecond part."), geometry).block(Region.BODY)

        assert body.text == "First part.\n\nSecond part."
        assert body.runs[0].baseline > body.runs[1].baseline

    def test_level_label_moves_below_long_unbreakable_name(self, make_spell) -> None:
        spell = make_spell(name="Supercalifragilistic", level=10)
        narrow = CardGeometry(
            width=140,
            height=400,
            margin=5,
            title_font=FontSpec("Helvetica-Bold", 11),
        )
        header = layout(spell, narrow).block(Region.HEADER)

        level_runs = [r for r in header.runs if r.text == "Spell 10"]
        assert level_runs
        assert level_runs[0].baseline < header.runs[0].baseline


class TestToDict:
    """Tests for the JSON form of a layout."""

    def test_round_trips_block_data(self, geometry, make_spell) -> None:
        result = layout(make_spell(), geometry)
        data = result.to_dict()

        assert data["spell"] == "Fireball"
        assert [b["region"] for b in data["blocks"]] == ["header", "meta", "body"]
        assert data["blocks"][2]["overflow"] is False
        x, y, w, h = data["blocks"][0]["box"]
        assert Box(0, 0, 300, 400).contains(Box(x, y, w, h))
