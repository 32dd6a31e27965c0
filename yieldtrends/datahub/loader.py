from __future__ import annotations

from pathlib import Path
from typing import Union

import pandas as pd

from ..errors import DataSourceError
from .config import CROP_YIELDS, DEFAULT_RAW_ROOT, LAND_USE
from .helpers import clean_names

TableSource = Union[str, Path]


def read_table(source: TableSource) -> pd.DataFrame:
    """Read a comma-separated table from a path or URL and normalize its headers."""
    label = str(source)
    if isinstance(source, Path) and not source.exists():
        raise DataSourceError(
            label,
            "file not found. Run `python main.py datahub` to download the tables first.",
        )
    try:
        table = pd.read_csv(source)
    except (OSError, ValueError, pd.errors.ParserError) as exc:
        raise DataSourceError(label, str(exc)) from exc
    if table.columns.empty:
        raise DataSourceError(label, "table has no header row")

    table.columns = clean_names(table.columns)
    return table


def load_crop_yields(root: Path = DEFAULT_RAW_ROOT) -> pd.DataFrame:
    """Load the cached wide crop-yield table."""
    return read_table(root / CROP_YIELDS["file_name"])


def load_land_use(root: Path = DEFAULT_RAW_ROOT) -> pd.DataFrame:
    """Load the cached land-use and population table."""
    return read_table(root / LAND_USE["file_name"])
