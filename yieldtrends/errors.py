"""Error taxonomy shared by the data hub, fitter, and corrector."""

from __future__ import annotations

from typing import Optional, Tuple

GroupKey = Tuple[str, str]


class YieldTrendsError(Exception):
    """Base class for every error raised by the package."""


class DataSourceError(YieldTrendsError):
    """An upstream table could not be fetched or parsed."""

    def __init__(self, source: str, reason: str) -> None:
        super().__init__(f"Could not load {source}: {reason}")
        self.source = source
        self.reason = reason


class ConfigurationError(YieldTrendsError, ValueError):
    """A caller supplied an invalid parameter."""

    def __init__(self, parameter: str, message: str) -> None:
        super().__init__(f"Invalid {parameter}: {message}")
        self.parameter = parameter


class GroupFitError(YieldTrendsError):
    """A single (entity, crop) group could not be modelled."""

    def __init__(self, key: Optional[GroupKey], message: str) -> None:
        label = f"{key[0]}/{key[1]}" if key is not None else "<unkeyed group>"
        super().__init__(f"{label}: {message}")
        self.key = key
        self.message = message


class InsufficientDataError(GroupFitError):
    """A group has fewer than two distinct years."""


class NumericDegeneracyError(GroupFitError):
    """A fit produced a non-finite slope, standard error, or statistic."""


__all__ = [
    "ConfigurationError",
    "DataSourceError",
    "GroupFitError",
    "GroupKey",
    "InsufficientDataError",
    "NumericDegeneracyError",
    "YieldTrendsError",
]
