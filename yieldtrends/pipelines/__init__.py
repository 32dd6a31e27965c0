"""Shared pipeline helpers for partitioning observations into model groups."""

from .grouping import GroupKey, GroupPlan, build_group_plan

__all__ = [
    "GroupKey",
    "GroupPlan",
    "build_group_plan",
]
