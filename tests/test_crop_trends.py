"""End-to-end tests for the crop trend workflow, its outputs, plots, and CLI."""

from __future__ import annotations

import json
from pathlib import Path
import sys

import pandas as pd
import pytest
from typer.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from experiments.crop_trends import (
    TrendsConfig,
    print_summary,
    records_to_frame,
    run_crop_trends,
    write_results,
)
from experiments.plots import PlotSaveConfig, plot_slope_volcano, plot_yield_traces
from experiments.plots.slope_volcano import MIN_PLOTTED_P_VALUE, volcano_frame
from main import app
from yieldtrends.datahub.config import CROP_YIELDS, LAND_USE
from yieldtrends.errors import ConfigurationError


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


def _make_land_use() -> pd.DataFrame:
    return pd.DataFrame(
        {
            "entity": ["A", "B", "C", "D", "World"],
            "code": ["AAA", "BBB", "CCC", "DDD", "OWID_WRL"],
            "year": [2019, 2019, 2019, 2019, 2019],
            "total_population_gapminder": [300.0, 200.0, 100.0, 1.0, 1e9],
        }
    )


def _make_crop_table() -> pd.DataFrame:
    rows = []
    for entity, code in (("A", "AAA"), ("B", "BBB"), ("C", "CCC"), ("D", "DDD")):
        for year, wheat in ((2018, 3.0), (2019, 4.0), (2020, 5.0)):
            rows.append(
                {
                    "entity": entity,
                    "code": code,
                    "year": year,
                    "wheat_tonnes_per_hectare": wheat,
                    "rice_tonnes_per_hectare": 2.0 if (entity == "C" and year == 2018) else None,
                    "barley_tonnes_per_hectare": 1.0 + 0.1 * (year - 2018),
                }
            )
    return pd.DataFrame(rows)


# ---------------------------------------------------------------------------
# Workflow tests


def test_run_crop_trends_perfect_wheat_trends() -> None:
    config = TrendsConfig(top_n=3, crops=("wheat",))
    result = run_crop_trends(_make_crop_table(), _make_land_use(), config)

    assert list(result.entities) == ["A", "B", "C"]
    assert [record.entity for record in result.records] == ["A", "B", "C"]
    raw = result.records[0].raw_p_value
    for record in result.records:
        assert record.estimate == pytest.approx(1.0, abs=1e-9)
        assert record.p_value == record.raw_p_value == raw
    assert result.batch.skipped == []


def test_run_crop_trends_skips_single_point_group() -> None:
    config = TrendsConfig(top_n=3, crops=("wheat", "rice"))
    result = run_crop_trends(_make_crop_table(), _make_land_use(), config)

    assert [(r.entity, r.crop) for r in result.records] == [("A", "wheat"), ("B", "wheat"), ("C", "wheat")]
    assert [(g.entity, g.crop, g.n_obs) for g in result.batch.skipped] == [("C", "rice", 1)]
    for record in result.records:
        assert record.estimate == pytest.approx(1.0, abs=1e-9)


def test_run_crop_trends_adjusts_across_crops() -> None:
    config = TrendsConfig(top_n=2, crops=("wheat", "barley"), method="bonferroni")
    result = run_crop_trends(_make_crop_table(), _make_land_use(), config)

    assert [(r.entity, r.crop) for r in result.records] == [
        ("A", "wheat"),
        ("A", "barley"),
        ("B", "wheat"),
        ("B", "barley"),
    ]
    for record in result.records:
        assert record.p_value >= record.raw_p_value
        assert 0.0 <= record.p_value <= 1.0
    assert result.method == "bonferroni"


def test_trends_config_validation() -> None:
    with pytest.raises(ConfigurationError):
        TrendsConfig(top_n=0).validate()
    with pytest.raises(ConfigurationError):
        TrendsConfig(crops=()).validate()
    with pytest.raises(ConfigurationError):
        TrendsConfig(method="unknown").validate()
    with pytest.raises(ConfigurationError):
        TrendsConfig(max_workers=0).validate()


def test_run_crop_trends_fails_when_nothing_is_fittable() -> None:
    config = TrendsConfig(top_n=3, crops=("rice",))
    with pytest.raises(ConfigurationError):
        run_crop_trends(_make_crop_table(), _make_land_use(), config)


# ---------------------------------------------------------------------------
# Output tests


def test_write_results_round_trips(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    config = TrendsConfig(top_n=3, crops=("wheat", "rice"))
    result = run_crop_trends(_make_crop_table(), _make_land_use(), config)

    paths = write_results(result, tmp_path / "results")

    slopes = pd.read_csv(paths["slopes_csv"])
    assert list(slopes.columns) == list(records_to_frame(result.records).columns)
    assert list(slopes["entity"]) == ["A", "B", "C"]
    records = json.loads(paths["slopes_json"].read_text())
    assert [row["crop"] for row in records] == ["wheat", "wheat", "wheat"]
    skipped = pd.read_csv(paths["skipped_csv"])
    assert list(skipped["crop"]) == ["rice"]
    run = json.loads(paths["run_json"].read_text())
    assert run["method"] == "fdr_bh"
    assert run["skipped_groups"] == 1

    print_summary(result)
    out = capsys.readouterr().out
    assert "1 group(s) skipped" in out


# ---------------------------------------------------------------------------
# Plot tests


def test_plots_write_html(tmp_path: Path) -> None:
    result = run_crop_trends(_make_crop_table(), _make_land_use(), TrendsConfig(top_n=3, crops=("wheat", "barley")))
    save_config = PlotSaveConfig(base_dir=tmp_path, run_tag="run", save_static=False, save_html=True)

    plot_yield_traces(result.tidy, save_to=save_config.for_plot("yield_traces"))
    plot_slope_volcano(result.records, method=result.method, save_to=save_config.for_plot("slope_volcano"))

    assert (tmp_path / "run" / "yield_traces.html").exists()
    assert (tmp_path / "run" / "slope_volcano.html").exists()
    assert not (tmp_path / "run" / "yield_traces.png").exists()


def test_volcano_frame_floors_zero_p_values() -> None:
    result = run_crop_trends(_make_crop_table(), _make_land_use(), TrendsConfig(top_n=1, crops=("wheat", "barley")))
    result.records[0].p_value = 0.0

    frame = volcano_frame(result.records)

    assert frame["p_value"].min() >= MIN_PLOTTED_P_VALUE
    assert list(frame["crop"]) == ["barley", "wheat"]


# ---------------------------------------------------------------------------
# CLI tests


def test_cli_trends_writes_results(tmp_path: Path) -> None:
    raw_root = tmp_path / "raw"
    raw_root.mkdir()
    crop = _make_crop_table().rename(
        columns={
            "entity": "Entity",
            "code": "Code",
            "year": "Year",
            "wheat_tonnes_per_hectare": "Wheat (tonnes per hectare)",
            "rice_tonnes_per_hectare": "Rice (tonnes per hectare)",
            "barley_tonnes_per_hectare": "Barley (tonnes per hectare)",
        }
    )
    crop.to_csv(raw_root / CROP_YIELDS["file_name"], index=False)
    land_use = _make_land_use().rename(
        columns={
            "entity": "Entity",
            "code": "Code",
            "year": "Year",
            "total_population_gapminder": "Total population (Gapminder)",
        }
    )
    land_use.to_csv(raw_root / LAND_USE["file_name"], index=False)
    results_root = tmp_path / "results"

    runner = CliRunner()
    outcome = runner.invoke(
        app,
        [
            "trends",
            "--top-n",
            "2",
            "--crop",
            "wheat",
            "--crop",
            "barley",
            "--raw-root",
            str(raw_root),
            "--results-root",
            str(results_root),
            "--no-plots",
        ],
    )

    assert outcome.exit_code == 0, outcome.output
    slopes = pd.read_csv(results_root / "slopes.csv")
    assert len(slopes) == 4


def test_cli_trends_reports_missing_tables(tmp_path: Path) -> None:
    runner = CliRunner()
    outcome = runner.invoke(app, ["trends", "--raw-root", str(tmp_path), "--no-plots"])
    assert outcome.exit_code == 1


def test_cli_trends_rejects_unknown_method(tmp_path: Path) -> None:
    runner = CliRunner()
    outcome = runner.invoke(app, ["trends", "--method", "nope", "--raw-root", str(tmp_path), "--no-plots"])
    assert outcome.exit_code == 2
