"""Volcano-style scatter of yield trend estimates against adjusted p-values."""

from __future__ import annotations

import sys
from typing import Optional, Sequence

import pandas as pd
import plotly.express as px

from yieldtrends.models.records import SlopeRecord
from .save_config import PlotSaveDestinations, write_figure

# Log axes cannot place exact zeros; floor them at the smallest positive double.
MIN_PLOTTED_P_VALUE = sys.float_info.min


def volcano_frame(records: Sequence[SlopeRecord]) -> pd.DataFrame:
    df = pd.DataFrame(
        {
            "entity": [record.entity for record in records],
            "crop": [record.crop for record in records],
            "estimate": [record.estimate for record in records],
            "p_value": [max(record.p_value, MIN_PLOTTED_P_VALUE) for record in records],
        }
    )
    return df.sort_values(["crop", "entity"], kind="stable")


def plot_slope_volcano(
    records: Sequence[SlopeRecord],
    method: str = "fdr_bh",
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Plot each group's slope estimate against its adjusted p-value, one panel per crop."""
    if not records:
        return

    df = volcano_frame(records)
    fig = px.scatter(
        df,
        x="estimate",
        y="p_value",
        color="crop",
        facet_col="crop",
        text="entity",
        log_y=True,
        title="Increase in yield per year vs. adjusted p-value",
        labels={
            "estimate": "Increase in tons per hectare per year",
            "p_value": f"Adjusted p-value ({method})",
        },
    )
    fig.update_traces(textposition="top center", textfont_size=9, showlegend=False)
    fig.add_vline(x=0.0, line_dash="dash", line_color="gray")
    fig.update_yaxes(autorange="reversed")
    fig.for_each_annotation(lambda annotation: annotation.update(text=annotation.text.split("=")[-1]))

    write_figure(fig, save_to)
