"""Tests for cohort selection and the tidy reshaper."""

from __future__ import annotations

from pathlib import Path
import sys

import numpy as np
import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from yieldtrends.datahub.cohort import latest_rows, select_top_entities
from yieldtrends.datahub.observation import Observation
from yieldtrends.datahub.preprocess import (
    crop_columns,
    observations_from_frame,
    pivot_crops_longer,
    tidy_yields,
)
from yieldtrends.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


def _make_land_use() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "entity": ["A", "B", "C", "D"],
            "code": ["AAA", "BBB", "CCC", "DDD"],
            "year": [2019, 2019, 2019, 2019],
            "total_population_gapminder": [50.0, 10.0, 90.0, 30.0],
        }
    )


def _make_wide_yields() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "entity": ["A", "A", "B", "C"],
            "code": ["AAA", "AAA", "BBB", "CCC"],
            "year": [2018, 2019, 2018, 2018],
            "wheat_tonnes_per_hectare": [3.0, 3.5, np.nan, 2.0],
            "rice_tonnes_per_hectare": [4.0, np.nan, 5.0, 6.0],
            "barley_tonnes_per_hectare": [1.0, 1.1, 1.2, np.nan],
        }
    )


# ---------------------------------------------------------------------------
# Cohort selector tests


def test_select_top_entities_orders_by_ranking() -> None:
    assert select_top_entities(_make_land_use(), "total_population_gapminder", 2) == ["C", "A"]


def test_select_top_entities_returns_exactly_n_in_descending_order() -> None:
    table = _make_land_use()
    selected = select_top_entities(table, "total_population_gapminder", 3)
    assert selected == ["C", "A", "D"]
    ranking = table.set_index("entity")["total_population_gapminder"]
    assert list(ranking[selected]) == sorted(ranking[selected], reverse=True)


def test_select_top_entities_uses_latest_year_per_entity() -> None:
    table = pd.DataFrame(
        {
            "entity": ["A", "A", "B", "B", "C"],
            "code": ["AAA", "AAA", "BBB", "BBB", "CCC"],
            "year": [2000, 2019, 2000, 2015, 2019],
            "total_population_gapminder": [500.0, 10.0, 1.0, 40.0, 20.0],
        }
    )
    # A's large historical value is ignored; B's latest year is 2015.
    assert select_top_entities(table, "total_population_gapminder", 3) == ["B", "C", "A"]


def test_select_top_entities_excludes_aggregates_and_missing_codes() -> None:
    table = pd.DataFrame(
        {
            "entity": ["World", "Asia", "A", "B"],
            "code": ["OWID_WRL", None, "AAA", "BBB"],
            "year": [2019, 2019, 2019, 2019],
            "total_population_gapminder": [7e9, 4e9, 5.0, 9.0],
        }
    )
    assert select_top_entities(table, "total_population_gapminder", 4) == ["B", "A"]


def test_select_top_entities_breaks_ties_by_input_order() -> None:
    table = _make_land_use()
    table["total_population_gapminder"] = [10.0, 20.0, 20.0, 10.0]
    assert select_top_entities(table, "total_population_gapminder", 4) == ["B", "C", "A", "D"]


def test_select_top_entities_clamps_to_eligible(capsys: pytest.CaptureFixture[str]) -> None:
    selected = select_top_entities(_make_land_use(), "total_population_gapminder", 10)
    assert selected == ["C", "A", "D", "B"]
    assert "only 4 are eligible" in capsys.readouterr().out


def test_select_top_entities_rejects_bad_parameters() -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        select_top_entities(_make_land_use(), "total_population_gapminder", 0)
    assert excinfo.value.parameter == "n"
    with pytest.raises(ConfigurationError):
        select_top_entities(_make_land_use(), "gdp", 2)


def test_latest_rows_keeps_first_duplicate() -> None:
    table = pd.DataFrame({"entity": ["A", "A"], "year": [2019, 2019], "value": [1, 2]})
    latest = latest_rows(table)
    assert list(latest["value"]) == [1]


# ---------------------------------------------------------------------------
# Tidy reshaper tests


def test_crop_columns_in_table_order() -> None:
    assert crop_columns(_make_wide_yields()) == [
        "wheat_tonnes_per_hectare",
        "rice_tonnes_per_hectare",
        "barley_tonnes_per_hectare",
    ]


def test_pivot_crops_longer_row_count_and_order() -> None:
    wide = _make_wide_yields()
    long = pivot_crops_longer(wide)

    assert len(long) == len(wide) * 3
    assert list(long.columns) == ["entity", "code", "year", "crop", "yield"]
    assert list(long["crop"][:6]) == ["wheat", "rice", "barley", "wheat", "rice", "barley"]
    assert list(long["entity"][:6]) == ["A", "A", "A", "A", "A", "A"]
    assert list(long["year"][:6]) == [2018, 2018, 2018, 2019, 2019, 2019]
    assert long["yield"].iloc[1] == pytest.approx(4.0)


def test_pivot_crops_longer_requires_crop_columns() -> None:
    with pytest.raises(ConfigurationError):
        pivot_crops_longer(pd.DataFrame({"entity": ["A"], "year": [2000]}))


def test_tidy_yields_filters_crop_entity_and_missing() -> None:
    wide = _make_wide_yields()
    tidy = tidy_yields(wide, crops=("wheat", "rice"), entities=["A", "B"])

    # 12 pivoted rows: 4 barley dropped, C's 2 rows dropped, A/2019 rice and B/2018 wheat missing.
    assert len(tidy) == 12 - 4 - 2 - 2
    assert list(zip(tidy["entity"], tidy["year"], tidy["crop"])) == [
        ("A", 2018, "wheat"),
        ("A", 2018, "rice"),
        ("A", 2019, "wheat"),
        ("B", 2018, "rice"),
    ]
    assert tidy["yield"].notna().all()


def test_tidy_yields_is_idempotent_and_pure() -> None:
    wide = _make_wide_yields()
    snapshot = wide.copy()

    first = tidy_yields(wide, crops=("wheat", "rice", "barley"), entities=["A", "B", "C"])
    second = tidy_yields(wide, crops=("wheat", "rice", "barley"), entities=["A", "B", "C"])

    pd.testing.assert_frame_equal(first, second)
    pd.testing.assert_frame_equal(wide, snapshot)


def test_tidy_yields_validates_crops() -> None:
    with pytest.raises(ConfigurationError):
        tidy_yields(_make_wide_yields(), crops=())
    with pytest.raises(ConfigurationError) as excinfo:
        tidy_yields(_make_wide_yields(), crops=("wheat", "cassava"))
    assert "cassava" in str(excinfo.value)


def test_observations_from_frame() -> None:
    tidy = tidy_yields(_make_wide_yields(), crops=("wheat",), entities=["A"])
    observations = observations_from_frame(tidy)
    assert observations == [
        Observation(entity="A", year=2018, crop="wheat", yield_value=3.0),
        Observation(entity="A", year=2019, crop="wheat", yield_value=3.5),
    ]
    assert observations[0].key == ("A", "wheat")


def test_observation_rejects_invalid_yields() -> None:
    with pytest.raises(ValueError):
        Observation(entity="A", year=2000, crop="wheat", yield_value=-1.0)
    with pytest.raises(ValueError):
        Observation(entity="A", year=2000, crop="wheat", yield_value=float("nan"))
