"""Reading spell tables (CSV or JSON) into field mappings for the batch driver.

Column names are matched case-insensitively against a list of aliases so that
exports from different spell databases can be used without editing, e.g.
``Spell``/``Title`` for the name, ``Rank`` for the level or ``Defense`` for
the saving throw. Unknown columns are kept under their original name and
ignored by the record builder.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pandas as pd

COLUMN_ALIASES: Dict[str, tuple] = {
    "name": ("name", "spell", "title"),
    "level": ("level", "rank", "spell level"),
    "kind": ("kind", "type", "category"),
    "traditions": ("traditions", "tradition"),
    "school": ("school",),
    "rarity": ("rarity",),
    "traits": ("traits", "trait"),
    "cast": ("cast", "casting time", "actions", "cast time"),
    "components": ("components", "component"),
    "trigger": ("trigger",),
    "requirements": ("requirements", "requirement"),
    "range": ("range",),
    "area": ("area",),
    "targets": ("targets", "target"),
    "duration": ("duration",),
    "save": ("save", "saving throw", "defense"),
    "basic_save": ("basic save", "basic_save", "basic"),
    "description": ("description", "text", "effect", "summary"),
    "heightened": ("heightened",),
    "source_url": ("url", "link", "source url", "source_url", "aon"),
}


def _normalize(column: str) -> str:
    return " ".join(str(column).strip().lower().replace("_", " ").split())


def canonical_columns(columns: List[str]) -> Dict[str, str]:
    """Map table columns to canonical field names; first matching column wins."""
    renames: Dict[str, str] = {}
    taken = set()
    for column in columns:
        key = _normalize(column)
        for field_name, aliases in COLUMN_ALIASES.items():
            if field_name in taken:
                continue
            if key in (_normalize(a) for a in aliases):
                renames[column] = field_name
                taken.add(field_name)
                break
    return renames


def read_spell_table(path: str, logger: Optional[logging.Logger] = None) -> pd.DataFrame:
    """Load a spell list from CSV or JSON (list of objects) into a DataFrame.

    String cells are stripped and columns renamed to canonical field names.
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    suffix = Path(path).suffix.lower()
    if suffix == ".json":
        data = pd.read_json(path, orient="records", dtype=False)
    else:
        data = pd.read_csv(path, dtype=str, keep_default_na=True)

    # Remove leading/trailing whitespaces across the DataFrame
    try:
        data = data.map(lambda x: x.strip() if isinstance(x, str) else x)
    except AttributeError:
        data = data.applymap(lambda x: x.strip() if isinstance(x, str) else x)

    renames = canonical_columns(list(data.columns))
    unknown = [c for c in data.columns if c not in renames]
    if unknown:
        logger.debug("Ignoring unrecognized columns: %s", unknown)
    if "name" not in renames.values():
        logger.warning("No name column found in %s; every row will be rejected", path)
    data = data.rename(columns=renames)
    logger.info("Read %d spell row(s) from %s", len(data), path)
    return data


def _cell(value: Any) -> Any:
    if isinstance(value, (list, tuple, dict)):
        return value
    try:
        if pd.isna(value):
            return None
    except (TypeError, ValueError):
        pass
    return value


def table_to_mappings(df: pd.DataFrame) -> Iterator[Dict[str, Any]]:
    """Yield one plain dict per row, with missing cells as None."""
    for _, row in df.iterrows():
        yield {column: _cell(value) for column, value in row.items()}
