"""Simple linear trend model (yield ~ year) fitted by ordinary least squares."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from scipy import stats
from sklearn.linear_model import LinearRegression

from ..errors import GroupKey, InsufficientDataError, NumericDegeneracyError
from .helpers import ArrayLike, ensure_aligned

INTERCEPT_TERM = "(Intercept)"
SLOPE_TERM = "year"


@dataclass(frozen=True)
class TermEstimate:
    """One coefficient row of a fitted model."""

    term: str
    estimate: float
    std_error: float
    statistic: float
    p_value: float


@dataclass(frozen=True)
class FittedModel:
    """Coefficients and diagnostics of a single OLS fit."""

    intercept: float
    slope: float
    intercept_std_error: float
    slope_std_error: float
    df_resid: int
    rss: float
    n_obs: int

    def tidy(self) -> Tuple[TermEstimate, TermEstimate]:
        """Return the intercept and slope rows with t-statistics and two-sided p-values."""
        return (
            _term_estimate(INTERCEPT_TERM, self.intercept, self.intercept_std_error, self.df_resid),
            _term_estimate(SLOPE_TERM, self.slope, self.slope_std_error, self.df_resid),
        )

    def term(self, name: str) -> TermEstimate:
        for row in self.tidy():
            if row.term == name:
                return row
        raise KeyError(f"Unknown model term '{name}'")


@dataclass
class LinearTrendConfig:
    min_distinct_years: int = 2


class LinearTrendModel:
    """Fits yield = b0 + b1 * year for one group of observations."""

    def __init__(self, config: Optional[LinearTrendConfig] = None) -> None:
        self.config = config or LinearTrendConfig()
        if self.config.min_distinct_years < 2:
            raise ValueError("min_distinct_years must be at least 2 to identify a slope.")

    def fit(self, years: ArrayLike, yields: ArrayLike, key: Optional[GroupKey] = None) -> FittedModel:
        x, y = ensure_aligned(years, yields)
        n_obs = x.shape[0]

        distinct = np.unique(x).size
        if distinct < self.config.min_distinct_years:
            raise InsufficientDataError(
                key,
                f"{distinct} distinct year(s) across {n_obs} observation(s); "
                f"need at least {self.config.min_distinct_years}",
            )

        if np.ptp(y) == 0.0:
            raise NumericDegeneracyError(key, "constant yields give an undefined t-statistic")

        regression = LinearRegression(fit_intercept=True)
        regression.fit(x.reshape(-1, 1), y)
        slope = float(regression.coef_[0])
        intercept = float(regression.intercept_)

        residuals = y - regression.predict(x.reshape(-1, 1))
        rss = float(np.dot(residuals, residuals))
        df_resid = n_obs - 2
        x_mean = float(x.mean())
        sxx = float(np.sum((x - x_mean) ** 2))

        if not (math.isfinite(slope) and math.isfinite(intercept)):
            raise NumericDegeneracyError(key, f"non-finite coefficients (intercept={intercept}, slope={slope})")
        if df_resid < 1:
            raise NumericDegeneracyError(key, f"no residual degrees of freedom with {n_obs} observations")
        if sxx <= 0.0:
            raise NumericDegeneracyError(key, "year has zero variance")

        sigma2 = rss / df_resid
        slope_se = math.sqrt(sigma2 / sxx)
        intercept_se = math.sqrt(sigma2 * (1.0 / n_obs + x_mean**2 / sxx))
        if not math.isfinite(slope_se):
            raise NumericDegeneracyError(key, "non-finite slope standard error")

        return FittedModel(
            intercept=intercept,
            slope=slope,
            intercept_std_error=intercept_se,
            slope_std_error=slope_se,
            df_resid=df_resid,
            rss=rss,
            n_obs=n_obs,
        )


def fit_linear_trend(years: ArrayLike, yields: ArrayLike, key: Optional[GroupKey] = None) -> FittedModel:
    """Fit a single linear trend with the default configuration."""
    return LinearTrendModel().fit(years, yields, key=key)


def _term_estimate(term: str, estimate: float, std_error: float, df_resid: int) -> TermEstimate:
    if std_error == 0.0:
        # Exact fit (e.g. a perfectly linear series): report t = +-inf and p = 0
        # rather than a large finite statistic.
        statistic = math.copysign(math.inf, estimate) if estimate != 0.0 else math.nan
        p_value = 0.0 if estimate != 0.0 else math.nan
    else:
        statistic = estimate / std_error
        p_value = float(min(1.0, 2.0 * stats.t.sf(abs(statistic), df_resid)))
    return TermEstimate(
        term=term,
        estimate=estimate,
        std_error=std_error,
        statistic=statistic,
        p_value=p_value,
    )


__all__ = [
    "FittedModel",
    "INTERCEPT_TERM",
    "LinearTrendConfig",
    "LinearTrendModel",
    "SLOPE_TERM",
    "TermEstimate",
    "fit_linear_trend",
]
