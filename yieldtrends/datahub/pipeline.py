"""High-level orchestration for downloading the source tables."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, cast

import requests

from ..errors import DataSourceError
from .config import TABLES, TableId
from .io import create_session, fetch_cached

ALL_TABLES: Tuple[TableId, ...] = ("crop_yields", "land_use")


@dataclass(frozen=True)
class DataRequest:
    """Describe which tables to materialize."""

    tables: Tuple[TableId, ...]

    @classmethod
    def from_flags(cls, all: bool, crop_yields: bool, land_use: bool) -> "DataRequest":
        """Translate CLI flags into a normalized request."""
        if all:
            selected = list(ALL_TABLES)
        else:
            selected = [table for table, flag in zip(ALL_TABLES, (crop_yields, land_use)) if flag]

        if not selected:
            raise ValueError("Select at least one table via --all or table flags.")
        return cls(cast(Tuple[TableId, ...], tuple(selected)))


def prepare_datasets(
    request: DataRequest,
    raw_root: Path,
    force: bool = False,
    session: Optional[requests.Session] = None,
) -> Dict[TableId, Path]:
    """Download every requested table into `raw_root`, reusing verified cached copies."""
    raw_root.mkdir(parents=True, exist_ok=True)
    client = session or create_session()

    paths: Dict[TableId, Path] = {}
    for table in request.tables:
        if table not in TABLES:
            raise ValueError(f"Unknown table key '{table}'")
        config = TABLES[table]
        try:
            paths[table] = fetch_cached(config["url"], raw_root / config["file_name"], force=force, session=client)
        except requests.RequestException as exc:
            raise DataSourceError(config["url"], str(exc)) from exc
    return paths


__all__ = ["ALL_TABLES", "DataRequest", "prepare_datasets"]
