from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Dict, Optional, Sequence, Tuple

import pandas as pd

from yieldtrends.datahub.cohort import select_top_entities
from yieldtrends.datahub.config import (
    DEFAULT_CROPS,
    DEFAULT_RANKING_COLUMN,
    DEFAULT_TOP_N,
    YIELD_SUFFIX,
)
from yieldtrends.datahub.preprocess import observations_from_frame, tidy_yields
from yieldtrends.errors import ConfigurationError
from yieldtrends.metrics import DEFAULT_METHOD, apply_adjustment, get_policy
from yieldtrends.models import SkippedGroup, SlopeRecord, TrendBatch, fit_group_trends

SIGNIFICANCE_LEVEL = 0.05


@dataclass(frozen=True)
class TrendsConfig:
    """Parameters for one end-to-end trend analysis run."""

    top_n: int = DEFAULT_TOP_N
    crops: Tuple[str, ...] = DEFAULT_CROPS
    ranking_column: str = DEFAULT_RANKING_COLUMN
    method: str = DEFAULT_METHOD
    suffix: str = YIELD_SUFFIX
    max_workers: Optional[int] = None

    def validate(self) -> None:
        if self.top_n <= 0:
            raise ConfigurationError("top_n", f"expected a positive entity count, received {self.top_n}")
        if not self.crops:
            raise ConfigurationError("crops", "select at least one crop")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError("max_workers", f"expected at least 1 worker, received {self.max_workers}")
        get_policy(self.method)


@dataclass
class CropTrendsResult:
    """Everything a run produces: the tidy table, the cohort, and the adjusted batch."""

    entities: Sequence[str]
    tidy: pd.DataFrame
    batch: TrendBatch
    method: str
    config: TrendsConfig = field(default_factory=TrendsConfig)

    @property
    def records(self) -> Sequence[SlopeRecord]:
        return self.batch.records


def run_crop_trends(
    crop_table: pd.DataFrame,
    land_use_table: pd.DataFrame,
    config: Optional[TrendsConfig] = None,
) -> CropTrendsResult:
    """Select the cohort, tidy the yields, fit one trend per group, and adjust p-values."""
    cfg = config or TrendsConfig()
    cfg.validate()

    entities = select_top_entities(land_use_table, cfg.ranking_column, cfg.top_n)
    print(f"[trends] Cohort of {len(entities)} entities ranked by {cfg.ranking_column}.")

    tidy = tidy_yields(crop_table, cfg.crops, entities, suffix=cfg.suffix)
    print(f"[trends] Tidy table has {len(tidy)} observations across {len(cfg.crops)} crops.")

    batch = fit_group_trends(observations_from_frame(tidy), max_workers=cfg.max_workers)
    if not batch.records:
        raise ConfigurationError("crops", "no (entity, crop) group had enough data to fit a trend")

    apply_adjustment(batch.records, get_policy(cfg.method))
    print(f"[trends] Adjusted {len(batch.records)} p-values with {cfg.method}.")
    return CropTrendsResult(entities=entities, tidy=tidy, batch=batch, method=cfg.method, config=cfg)


def records_to_frame(records: Sequence[SlopeRecord]) -> pd.DataFrame:
    columns = ["entity", "crop", "estimate", "std_error", "statistic", "p_value", "raw_p_value", "n_obs"]
    return pd.DataFrame([asdict(record) for record in records], columns=columns)


def skipped_to_frame(skipped: Sequence[SkippedGroup]) -> pd.DataFrame:
    return pd.DataFrame([asdict(group) for group in skipped], columns=["entity", "crop", "reason", "n_obs"])


def write_results(result: CropTrendsResult, out_dir: Path) -> Dict[str, Path]:
    """Write slopes (CSV and JSON records) and skipped groups under `out_dir`."""
    out_dir.mkdir(parents=True, exist_ok=True)
    slopes = records_to_frame(result.records)
    paths = {
        "slopes_csv": out_dir / "slopes.csv",
        "slopes_json": out_dir / "slopes.json",
        "skipped_csv": out_dir / "skipped.csv",
        "run_json": out_dir / "run.json",
    }
    slopes.to_csv(paths["slopes_csv"], index=False)
    slopes.to_json(paths["slopes_json"], orient="records", indent=2)
    skipped_to_frame(result.batch.skipped).to_csv(paths["skipped_csv"], index=False)
    paths["run_json"].write_text(
        json.dumps(
            {
                "method": result.method,
                "entities": list(result.entities),
                "crops": list(result.config.crops),
                "ranking_column": result.config.ranking_column,
                "fitted_groups": len(result.records),
                "skipped_groups": len(result.batch.skipped),
            },
            indent=2,
        )
        + "\n"
    )
    print(f"[trends] Wrote results under {out_dir}")
    return paths


def print_summary(result: CropTrendsResult, limit: int = 10) -> None:
    frame = records_to_frame(result.records).sort_values("p_value", kind="stable")
    significant = frame[frame["p_value"] < SIGNIFICANCE_LEVEL]
    print(f"Entity               Crop      Slope (t/ha/yr)  Adj. p ({result.method})")
    print("-----------------------------------------------------------------")
    for row in frame.head(limit).itertuples(index=False):
        print(f"{row.entity:<20} {row.crop:<9} {row.estimate:+.4f}          {row.p_value:.3g}")
    print(f"{len(significant)} of {len(frame)} trends significant at {SIGNIFICANCE_LEVEL}.")
    if result.batch.skipped:
        print(f"{len(result.batch.skipped)} group(s) skipped; see skipped.csv.")


__all__ = [
    "CropTrendsResult",
    "TrendsConfig",
    "print_summary",
    "records_to_frame",
    "run_crop_trends",
    "skipped_to_frame",
    "write_results",
]
