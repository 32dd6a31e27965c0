"""Static configuration for dataset download paths and analysis defaults."""

from __future__ import annotations

from pathlib import Path
from typing import Literal, Tuple, TypedDict

TableId = Literal["crop_yields", "land_use"]


class TableConfig(TypedDict):
    url: str
    file_name: str
    description: str


# Default directories used by the Typer CLI; callers may override these.
DEFAULT_RAW_ROOT = Path("data/raw")
DEFAULT_RESULTS_ROOT = Path("data/results")

# ---------------------------------------------------------------------------
# Table-specific configuration payloads.

TIDYTUESDAY_BASE_URL = "https://raw.githubusercontent.com/rfordatascience/tidytuesday/master/data/2020/2020-09-01"

CROP_YIELDS: TableConfig = {
    "url": f"{TIDYTUESDAY_BASE_URL}/key_crop_yields.csv",
    "file_name": "key_crop_yields.csv",
    "description": "Crop yields in tonnes per hectare, one column per crop.",
}

LAND_USE: TableConfig = {
    "url": f"{TIDYTUESDAY_BASE_URL}/land_use_vs_yield_change_in_cereal_production.csv",
    "file_name": "land_use_vs_yield_change_in_cereal_production.csv",
    "description": "Cereal land use, yield index and population per country and year.",
}

TABLES: dict[TableId, TableConfig] = {
    "crop_yields": CROP_YIELDS,
    "land_use": LAND_USE,
}

# ---------------------------------------------------------------------------
# Analysis defaults.

YIELD_SUFFIX = "_tonnes_per_hectare"
DEFAULT_CROPS: Tuple[str, ...] = ("wheat", "rice", "maize", "barley")
DEFAULT_TOP_N = 30
DEFAULT_RANKING_COLUMN = "total_population_gapminder"
AGGREGATE_ENTITIES: Tuple[str, ...] = ("World",)


__all__ = [
    "AGGREGATE_ENTITIES",
    "CROP_YIELDS",
    "DEFAULT_CROPS",
    "DEFAULT_RANKING_COLUMN",
    "DEFAULT_RAW_ROOT",
    "DEFAULT_RESULTS_ROOT",
    "DEFAULT_TOP_N",
    "LAND_USE",
    "TABLES",
    "TableConfig",
    "TableId",
    "YIELD_SUFFIX",
]
