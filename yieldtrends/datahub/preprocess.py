"""Reshape the wide crop table into tidy (entity, year, crop, yield) rows."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

import pandas as pd

from ..errors import ConfigurationError
from .config import YIELD_SUFFIX
from .helpers import strip_suffix
from .observation import Observation

CROP_COLUMN = "crop"
YIELD_COLUMN = "yield"


def crop_columns(table: pd.DataFrame, suffix: str = YIELD_SUFFIX) -> List[str]:
    """Return the wide crop-quantity columns in table order."""
    return [str(column) for column in table.columns if str(column).endswith(suffix)]


def pivot_crops_longer(table: pd.DataFrame, suffix: str = YIELD_SUFFIX) -> pd.DataFrame:
    """Produce one row per (input row, crop column), ordered by input row then crop column."""
    value_columns = crop_columns(table, suffix)
    if not value_columns:
        raise ConfigurationError("suffix", f"no columns end with '{suffix}'")
    id_columns = [column for column in table.columns if column not in value_columns]

    wide = table.reset_index(drop=True)
    long = wide.melt(
        id_vars=id_columns,
        value_vars=value_columns,
        var_name=CROP_COLUMN,
        value_name=YIELD_COLUMN,
        ignore_index=False,
    )
    # melt stacks column-major; restore row-major order.
    long["_row"] = long.index
    long["_crop_pos"] = long[CROP_COLUMN].map({column: pos for pos, column in enumerate(value_columns)})
    long = long.sort_values(["_row", "_crop_pos"], kind="stable")
    long[CROP_COLUMN] = long[CROP_COLUMN].map(lambda column: strip_suffix(column, suffix))
    return long.drop(columns=["_row", "_crop_pos"]).reset_index(drop=True)


def tidy_yields(
    table: pd.DataFrame,
    crops: Sequence[str],
    entities: Optional[Iterable[str]] = None,
    suffix: str = YIELD_SUFFIX,
    entity_column: str = "entity",
) -> pd.DataFrame:
    """Pivot crop columns longer, then keep selected crops, selected entities, and present yields."""
    if not crops:
        raise ConfigurationError("crops", "select at least one crop")
    available = {strip_suffix(column, suffix) for column in crop_columns(table, suffix)}
    unknown = [crop for crop in crops if crop not in available]
    if unknown:
        raise ConfigurationError("crops", f"no yield column for {', '.join(unknown)}")

    long = pivot_crops_longer(table, suffix)
    mask = long[CROP_COLUMN].isin(list(crops)) & long[YIELD_COLUMN].notna()
    if entities is not None:
        mask &= long[entity_column].isin(list(entities))
    return long[mask].reset_index(drop=True)


def observations_from_frame(
    tidy: pd.DataFrame,
    entity_column: str = "entity",
    year_column: str = "year",
) -> List[Observation]:
    """Convert a tidy table into immutable Observation records."""
    return [
        Observation(
            entity=str(entity),
            year=int(year),
            crop=str(crop),
            yield_value=float(value),
        )
        for entity, year, crop, value in zip(
            tidy[entity_column],
            tidy[year_column],
            tidy[CROP_COLUMN],
            tidy[YIELD_COLUMN],
        )
    ]


__all__ = [
    "CROP_COLUMN",
    "YIELD_COLUMN",
    "crop_columns",
    "observations_from_frame",
    "pivot_crops_longer",
    "tidy_yields",
]
