"""Multiple-comparison adjustment policies for batches of p-values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, MutableSequence, Protocol, Sequence

import numpy as np

from ..errors import ConfigurationError
from ..models.records import SlopeRecord


class AdjustmentPolicy(Protocol):
    """Strategy object that maps raw p-values to adjusted p-values."""

    name: str

    def adjust(self, p_values: np.ndarray) -> np.ndarray:
        """Return adjusted p-values aligned with the input positions."""
        return p_values


@dataclass(frozen=True)
class BenjaminiHochbergPolicy:
    """Step-up false discovery rate control."""

    name: str = "fdr_bh"

    def adjust(self, p_values: np.ndarray) -> np.ndarray:
        m = p_values.shape[0]
        order = np.argsort(p_values, kind="stable")
        ranks = np.arange(1, m + 1, dtype=np.float64)
        candidates = p_values[order] * (m / ranks)
        # Running minimum from the largest rank down keeps the adjustment monotone.
        stepped = np.minimum.accumulate(candidates[::-1])[::-1]
        return _scatter(np.minimum(stepped, 1.0), order)


@dataclass(frozen=True)
class HolmPolicy:
    """Step-down family-wise error rate control."""

    name: str = "holm"

    def adjust(self, p_values: np.ndarray) -> np.ndarray:
        m = p_values.shape[0]
        order = np.argsort(p_values, kind="stable")
        multipliers = np.arange(m, 0, -1, dtype=np.float64)
        stepped = np.maximum.accumulate(p_values[order] * multipliers)
        return _scatter(np.minimum(stepped, 1.0), order)


@dataclass(frozen=True)
class BonferroniPolicy:
    """Single-step family-wise error rate control."""

    name: str = "bonferroni"

    def adjust(self, p_values: np.ndarray) -> np.ndarray:
        return np.minimum(p_values * p_values.shape[0], 1.0)


POLICIES: Dict[str, AdjustmentPolicy] = {
    "fdr_bh": BenjaminiHochbergPolicy(),
    "holm": HolmPolicy(),
    "bonferroni": BonferroniPolicy(),
}
DEFAULT_METHOD = "fdr_bh"


def get_policy(name: str) -> AdjustmentPolicy:
    if name not in POLICIES:
        raise ConfigurationError("method", f"'{name}' is not one of {', '.join(sorted(POLICIES))}")
    return POLICIES[name]


def adjust_pvalues(p_values: Sequence[float], policy: AdjustmentPolicy | None = None) -> List[float]:
    """Adjust a batch of raw p-values, returning values in input order.

    Args:
        p_values: Raw p-values for every hypothesis in the batch.
        policy: Adjustment strategy; Benjamini-Hochberg when omitted.

    Returns:
        Adjusted p-values, elementwise >= the raw values and within [0, 1].
    """
    values = np.asarray(list(p_values), dtype=np.float64)
    if values.size == 0:
        raise ConfigurationError("p_values", "cannot adjust an empty collection")
    if values.ndim != 1:
        raise ConfigurationError("p_values", f"expected a flat collection, got shape {values.shape}")
    if np.any(~np.isfinite(values)) or np.any(values < 0.0) or np.any(values > 1.0):
        raise ConfigurationError("p_values", "every p-value must be a finite number in [0, 1]")

    adjusted = (policy or get_policy(DEFAULT_METHOD)).adjust(values)
    return [float(value) for value in adjusted]


def apply_adjustment(
    records: MutableSequence[SlopeRecord],
    policy: AdjustmentPolicy | None = None,
) -> MutableSequence[SlopeRecord]:
    """Overwrite each record's p-value with its batch-adjusted value, in place."""
    adjusted = adjust_pvalues([record.raw_p_value for record in records], policy)
    for record, value in zip(records, adjusted):
        record.p_value = value
    return records


def _scatter(sorted_values: np.ndarray, order: np.ndarray) -> np.ndarray:
    restored = np.empty_like(sorted_values)
    restored[order] = sorted_values
    return restored


__all__ = [
    "AdjustmentPolicy",
    "BenjaminiHochbergPolicy",
    "BonferroniPolicy",
    "DEFAULT_METHOD",
    "HolmPolicy",
    "POLICIES",
    "adjust_pvalues",
    "apply_adjustment",
    "get_policy",
]
