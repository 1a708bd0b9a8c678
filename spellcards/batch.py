"""Batch driver: one layout (and rendered card) per input spell, in input order."""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, List, Mapping, Optional, Union

from .errors import BatchAborted, GeometryTooSmall, InvalidSpellData
from .geometry import CardGeometry
from .layout import LayoutResult, layout
from .renderer import CardRenderer, RenderedCard
from .spell import SpellRecord

SpellEntry = Union[SpellRecord, Mapping[str, Any]]


class ErrorPolicy(str, Enum):
    SKIP = "skip"
    ABORT = "abort"


@dataclass(frozen=True)
class CardOutcome:
    """Result for one input entry: either a layout or the error that prevented it."""

    index: int
    name: Optional[str]
    layout: Optional[LayoutResult] = None
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    outcomes: List[CardOutcome] = field(default_factory=list)

    @property
    def layouts(self) -> List[LayoutResult]:
        return [o.layout for o in self.outcomes if o.layout is not None]

    @property
    def failures(self) -> List[CardOutcome]:
        return [o for o in self.outcomes if o.error is not None]

    @property
    def overflowed(self) -> List[CardOutcome]:
        return [o for o in self.outcomes if o.layout is not None and o.layout.overflow]


def _entry_name(entry: SpellEntry) -> Optional[str]:
    if isinstance(entry, SpellRecord):
        return entry.name
    value = entry.get("name") if isinstance(entry, Mapping) else None
    return str(value).strip() if isinstance(value, str) and value.strip() else None


def layout_entry(index: int, entry: SpellEntry, geometry: CardGeometry) -> CardOutcome:
    """Build the record (if needed) and lay it out, capturing per-record failures."""
    name = _entry_name(entry)
    try:
        spell = entry if isinstance(entry, SpellRecord) else SpellRecord.from_mapping(entry)
        return CardOutcome(index, spell.name, layout=layout(spell, geometry))
    except (InvalidSpellData, GeometryTooSmall) as exc:
        return CardOutcome(index, name, error=exc)


def layout_batch(
    entries: Iterable[SpellEntry],
    geometry: CardGeometry,
    on_error: Union[ErrorPolicy, str] = ErrorPolicy.SKIP,
    max_workers: Optional[int] = None,
    logger: Optional[logging.Logger] = None,
) -> BatchResult:
    """Lay out every entry against one shared geometry.

    Args:
        entries: SpellRecords or raw field mappings (table rows, JSON objects).
        geometry: Card geometry applied to every record.
        on_error: ``skip`` records failures and continues, ``abort`` raises
            BatchAborted at the first failure in input order.
        max_workers: Run layouts on a thread pool when greater than 1. Results
            are always reported in input order.
        logger: optional logger for per-record messages.

    Returns:
        A BatchResult with one outcome per entry.
    """
    if logger is None:
        logger = logging.getLogger(__name__)
    policy = ErrorPolicy(on_error)
    items = list(entries)
    result = BatchResult()

    def collect(outcome: CardOutcome) -> None:
        if outcome.error is not None:
            logger.warning(
                "Spell #%d (%s) skipped: %s: %s",
                outcome.index,
                outcome.name or "unnamed",
                type(outcome.error).__name__,
                outcome.error,
            )
            if policy is ErrorPolicy.ABORT:
                raise BatchAborted(outcome, result.outcomes)
        elif outcome.layout.overflow:
            logger.info("Spell #%d (%s): description truncated to fit the card", outcome.index, outcome.name)
        result.outcomes.append(outcome)

    if max_workers and max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            futures = [executor.submit(layout_entry, i, entry, geometry) for i, entry in enumerate(items)]
            try:
                for future in futures:
                    collect(future.result())
            except BatchAborted:
                for future in futures:
                    future.cancel()
                raise
    else:
        for i, entry in enumerate(items):
            collect(layout_entry(i, entry, geometry))

    logger.debug("Laid out %d of %d spell(s)", len(result.layouts), len(items))
    return result


def render_batch(result: BatchResult, renderer: CardRenderer) -> List[RenderedCard]:
    """Render the successful layouts of a batch, keeping input order."""
    return [renderer.render(layout_result) for layout_result in result.layouts]
