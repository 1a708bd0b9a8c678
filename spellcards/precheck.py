"""Pre-check utilities for spell card generation.

This module provides functionality that should run before layout. Currently
it removes duplicate spells from the input DataFrame, which happens when
several source books or exports are concatenated.
"""
from __future__ import annotations

from typing import Optional, Tuple, List
import pandas as pd
import logging


def remove_duplicates(
    df: pd.DataFrame,
    subset: Optional[List[str]] = None,
    keep: str = "first",
    logger: Optional[logging.Logger] = None,
) -> Tuple[pd.DataFrame, int, List[int]]:
    """Remove duplicate spells from the provided DataFrame.

    By default spells are considered duplicates when name and level match
    (case-insensitive, surrounding whitespace ignored). Without a name
    column the function falls back to comparing all columns.

    Args:
        df: The input DataFrame with canonical column names.
        subset: Columns to consider when identifying duplicates. If None,
            name and level are used when present.
        keep: Which duplicate to keep (passed to DataFrame.duplicated).
        logger: Optional logger for informational messages.

    Returns:
        A tuple of (deduped_dataframe, removed_count, removed_row_indices).
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    if subset is None:
        subset = [c for c in ("name", "level") if c in df.columns]
        if "name" not in subset:
            subset = []
            logger.debug("Pre-check: no name column detected; comparing all columns")
        else:
            logger.debug("Pre-check: deduplicating using columns: %s", subset)

    if subset:
        keys = df[subset].apply(lambda col: col.astype(str).str.strip().str.lower())
    else:
        keys = df.astype(str)
    duplicated_mask = keys.duplicated(keep=keep)
    removed_row_indices = df[duplicated_mask].index.tolist()
    deduped = df[~duplicated_mask]

    removed = len(removed_row_indices)
    if removed:
        logger.info("Pre-check: removed %d duplicate spell(s) (by %s)", removed, subset or "all columns")
        logger.debug("Removed duplicate row indices: %s", removed_row_indices)
    return deduped, removed, removed_row_indices
