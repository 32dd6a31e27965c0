"""Batch-level statistics applied across every fitted group."""

from .adjust import (
    DEFAULT_METHOD,
    AdjustmentPolicy,
    BenjaminiHochbergPolicy,
    BonferroniPolicy,
    HolmPolicy,
    adjust_pvalues,
    apply_adjustment,
    get_policy,
)

__all__ = [
    "AdjustmentPolicy",
    "BenjaminiHochbergPolicy",
    "BonferroniPolicy",
    "DEFAULT_METHOD",
    "HolmPolicy",
    "adjust_pvalues",
    "apply_adjustment",
    "get_policy",
]
