"""Plotting utilities for crop trend results."""

from .save_config import PlotSaveConfig, PlotSaveDestinations, write_figure
from .slope_volcano import plot_slope_volcano
from .yield_traces import plot_yield_traces

__all__ = [
    "plot_slope_volcano",
    "plot_yield_traces",
    "PlotSaveConfig",
    "PlotSaveDestinations",
    "write_figure",
]
