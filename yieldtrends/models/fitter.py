"""Fan-out of one linear trend model per (entity, crop) group."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional, Sequence, Union

from ..datahub.observation import Observation
from ..errors import GroupFitError, GroupKey
from ..pipelines import build_group_plan
from .ols import SLOPE_TERM, LinearTrendConfig, LinearTrendModel
from .records import SkippedGroup, SlopeRecord, TrendBatch

FitOutcome = Union[SlopeRecord, SkippedGroup]


def fit_group_trends(
    observations: Sequence[Observation],
    config: Optional[LinearTrendConfig] = None,
    max_workers: Optional[int] = None,
) -> TrendBatch:
    """Fit yield ~ year for every (entity, crop) group and extract the year coefficient.

    Groups are fitted in order of first appearance and the returned records
    keep that order regardless of `max_workers`. Groups that cannot be
    modelled are reported in `TrendBatch.skipped` instead of aborting the batch.
    """
    plan = build_group_plan(observations, key_fn=lambda obs: obs.key)
    model = LinearTrendModel(config)
    keys: List[GroupKey] = list(plan.indices)

    def fit_one(key: GroupKey) -> FitOutcome:
        return _fit_group(model, key, plan.members(key))

    if max_workers is not None and max_workers > 1 and len(keys) > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as pool:
            outcomes = list(pool.map(fit_one, keys))
    else:
        outcomes = [fit_one(key) for key in keys]

    batch = TrendBatch()
    for outcome in outcomes:
        if isinstance(outcome, SkippedGroup):
            print(f"[trends] Skipping {outcome.entity}/{outcome.crop}: {outcome.reason}")
            batch.skipped.append(outcome)
        else:
            batch.records.append(outcome)

    print(f"[trends] Fitted {len(batch.records)} of {batch.group_count} groups ({len(batch.skipped)} skipped).")
    return batch


def _fit_group(model: LinearTrendModel, key: GroupKey, members: Sequence[Observation]) -> FitOutcome:
    entity, crop = key
    years = [obs.year for obs in members]
    yields = [obs.yield_value for obs in members]
    try:
        fitted = model.fit(years, yields, key=key)
    except GroupFitError as exc:
        return SkippedGroup(entity=entity, crop=crop, reason=exc.message, n_obs=len(members))

    row = fitted.term(SLOPE_TERM)
    return SlopeRecord(
        entity=entity,
        crop=crop,
        estimate=row.estimate,
        std_error=row.std_error,
        statistic=row.statistic,
        p_value=row.p_value,
        raw_p_value=row.p_value,
        n_obs=fitted.n_obs,
    )


__all__ = ["fit_group_trends"]
