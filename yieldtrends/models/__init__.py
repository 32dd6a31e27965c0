"""Per-group linear trend models and coefficient records."""

from .fitter import fit_group_trends
from .ols import FittedModel, LinearTrendConfig, LinearTrendModel, TermEstimate, fit_linear_trend
from .records import SkippedGroup, SlopeRecord, TrendBatch

__all__ = [
    "FittedModel",
    "LinearTrendConfig",
    "LinearTrendModel",
    "SkippedGroup",
    "SlopeRecord",
    "TermEstimate",
    "TrendBatch",
    "fit_group_trends",
    "fit_linear_trend",
]
