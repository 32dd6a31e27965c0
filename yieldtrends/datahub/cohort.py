"""Select the cohort of entities ranked highest by an attribute at their latest period."""

from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from ..errors import ConfigurationError
from .config import AGGREGATE_ENTITIES


def latest_rows(
    table: pd.DataFrame,
    *,
    entity_column: str = "entity",
    period_column: str = "year",
) -> pd.DataFrame:
    """Keep one row per entity: the first row at that entity's most recent period."""
    latest_period = table.groupby(entity_column, sort=False)[period_column].transform("max")
    latest = table[table[period_column] == latest_period]
    return latest.drop_duplicates(subset=entity_column, keep="first")


def select_top_entities(
    table: pd.DataFrame,
    ranking_column: str,
    n: int,
    *,
    entity_column: str = "entity",
    code_column: str = "code",
    period_column: str = "year",
    exclude: Iterable[str] = AGGREGATE_ENTITIES,
) -> List[str]:
    """Return the `n` entities with the largest `ranking_column` value at their latest period.

    Rows with a missing code or an aggregate pseudo-entity are ineligible, as
    are entities whose latest row has no ranking value. Ties keep input order.
    When fewer than `n` entities are eligible the full eligible set is returned.
    """
    if n <= 0:
        raise ConfigurationError("n", f"expected a positive entity count, received {n}")
    for column in (ranking_column, entity_column, code_column, period_column):
        if column not in table.columns:
            raise ConfigurationError("column", f"'{column}' is missing from the table")

    excluded = set(exclude)
    eligible = table[table[code_column].notna() & ~table[entity_column].isin(excluded)]
    latest = latest_rows(eligible, entity_column=entity_column, period_column=period_column)
    latest = latest[latest[ranking_column].notna()]
    ranked = latest.sort_values(ranking_column, ascending=False, kind="stable")

    if n > len(ranked):
        print(f"[datahub] Requested top {n} entities but only {len(ranked)} are eligible; using all of them.")
    return [str(entity) for entity in ranked[entity_column].head(n)]


__all__ = ["latest_rows", "select_top_entities"]
