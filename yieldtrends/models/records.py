"""Shared data records for per-group trend estimates."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class SlopeRecord:
    """Year coefficient for one (entity, crop) group.

    `p_value` starts as the raw p-value and is overwritten once, for the whole
    batch, by a multiple-comparison adjustment.
    """

    entity: str
    crop: str
    estimate: float
    std_error: float
    statistic: float
    p_value: float
    raw_p_value: float
    n_obs: int


@dataclass(frozen=True)
class SkippedGroup:
    """Group that could not be modelled, with the reason reported by the fitter."""

    entity: str
    crop: str
    reason: str
    n_obs: int


@dataclass
class TrendBatch:
    """Fitter output: fitted records in group order plus every skipped group."""

    records: List[SlopeRecord] = field(default_factory=list)
    skipped: List[SkippedGroup] = field(default_factory=list)

    @property
    def group_count(self) -> int:
        return len(self.records) + len(self.skipped)
