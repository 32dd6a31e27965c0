"""Faceted line plot of yield over time for every entity in the cohort."""

from __future__ import annotations

from typing import Optional

import pandas as pd
import plotly.express as px

from .save_config import PlotSaveDestinations, write_figure

FACETS_PER_ROW = 5


def plot_yield_traces(
    tidy: pd.DataFrame,
    save_to: Optional[PlotSaveDestinations] = None,
) -> None:
    """Plot yield against year, one panel per entity, coloured by crop."""
    if tidy.empty:
        return

    df = tidy.sort_values(["entity", "crop", "year"], kind="stable")
    entity_count = df["entity"].nunique()
    rows = (entity_count + FACETS_PER_ROW - 1) // FACETS_PER_ROW

    fig = px.line(
        df,
        x="year",
        y="yield",
        color="crop",
        facet_col="entity",
        facet_col_wrap=FACETS_PER_ROW,
        markers=True,
        title="Crop yields over time",
        labels={"year": "Year", "yield": "Yield (tonnes per hectare)", "crop": "Crop"},
        height=max(400, 220 * rows),
    )
    fig.for_each_annotation(lambda annotation: annotation.update(text=annotation.text.split("=")[-1]))
    fig.update_yaxes(matches=None, rangemode="tozero")

    write_figure(fig, save_to)
