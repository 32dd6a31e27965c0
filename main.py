from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer

from experiments.crop_trends import TrendsConfig, print_summary, run_crop_trends, write_results
from experiments.plots import PlotSaveConfig, plot_slope_volcano, plot_yield_traces
from yieldtrends.datahub import DataRequest, load_crop_yields, load_land_use, prepare_datasets
from yieldtrends.datahub.config import (
    DEFAULT_CROPS,
    DEFAULT_RANKING_COLUMN,
    DEFAULT_RAW_ROOT,
    DEFAULT_RESULTS_ROOT,
    DEFAULT_TOP_N,
)
from yieldtrends.errors import ConfigurationError, DataSourceError
from yieldtrends.metrics import DEFAULT_METHOD

app = typer.Typer()


@app.command("datahub")
def datahub(
    all: bool = typer.Option(False, "--all", help="Download every table."),
    crop_yields: bool = typer.Option(False, "--crop-yields", help="Download the key crop yields table."),
    land_use: bool = typer.Option(False, "--land-use", help="Download the land use and population table."),
    force: bool = typer.Option(False, "--force", help="Redownload even if files exist."),
    raw_root: Path = typer.Option(
        DEFAULT_RAW_ROOT,
        "--raw-root",
        exists=False,
        file_okay=False,
        dir_okay=True,
        writable=True,
        help="Directory to store raw tables.",
    ),
) -> None:
    """
    Download the source tables, reusing cached copies whose checksum still matches.
    """
    try:
        request = DataRequest.from_flags(all=all, crop_yields=crop_yields, land_use=land_use)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    try:
        paths = prepare_datasets(request, raw_root=raw_root, force=force)
    except DataSourceError as exc:
        typer.echo(f"[datahub] {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for table, path in paths.items():
        print(f"[datahub] {table} → {path}")


@app.command()
def trends(
    top_n: int = typer.Option(DEFAULT_TOP_N, "--top-n", help="Number of most populous countries to model."),
    crops: List[str] = typer.Option(
        list(DEFAULT_CROPS),
        "--crop",
        help="Crops to model (repeat the flag for several).",
        show_default=True,
    ),
    ranking_column: str = typer.Option(
        DEFAULT_RANKING_COLUMN,
        "--rank-by",
        help="Land use column used to rank countries at their latest year.",
    ),
    method: str = typer.Option(
        DEFAULT_METHOD,
        "--method",
        help="Multiple-comparison adjustment (fdr_bh, holm, bonferroni).",
    ),
    workers: Optional[int] = typer.Option(None, "--workers", help="Fit groups on a thread pool of this size."),
    raw_root: Path = typer.Option(DEFAULT_RAW_ROOT, "--raw-root", help="Directory holding the downloaded tables."),
    results_root: Path = typer.Option(
        DEFAULT_RESULTS_ROOT,
        "--results-root",
        help="Directory where slope tables are written.",
    ),
    plots_root: Optional[Path] = typer.Option(
        None,
        "--plots-root",
        help="Directory where plots should be saved (subfolders are created automatically).",
    ),
    plots_tag: Optional[str] = typer.Option(
        None,
        "--plots-tag",
        help="Folder suffix for this run (defaults to timestamp).",
    ),
    no_plots: bool = typer.Option(False, "--no-plots", help="Skip plotting entirely."),
    save_static: bool = typer.Option(True, help="Write static PNG snapshots when saving plots."),
    save_html: bool = typer.Option(True, help="Write interactive HTML plots when saving."),
) -> None:
    """
    Fit one yield ~ year model per (country, crop) and adjust the slope p-values.
    """
    config = TrendsConfig(
        top_n=top_n,
        crops=tuple(crops),
        ranking_column=ranking_column,
        method=method,
        max_workers=workers,
    )
    try:
        config.validate()
        crop_table = load_crop_yields(raw_root)
        land_use_table = load_land_use(raw_root)
        result = run_crop_trends(crop_table, land_use_table, config)
    except ConfigurationError as exc:
        raise typer.BadParameter(str(exc)) from exc
    except DataSourceError as exc:
        typer.echo(f"[trends] {exc}", err=True)
        raise typer.Exit(code=1) from exc

    write_results(result, results_root)
    print_summary(result)

    if no_plots:
        return

    save_config: Optional[PlotSaveConfig] = None
    if plots_root:
        tag = plots_tag or datetime.utcnow().strftime("%Y%m%d-%H%M%S")
        base_dir = plots_root / "crop_trends"
        save_config = PlotSaveConfig(base_dir=base_dir, run_tag=tag, save_static=save_static, save_html=save_html)
        print(f"[plots] Saving figures under {base_dir / tag}")

    plot_yield_traces(
        result.tidy,
        save_to=save_config.for_plot("yield_traces") if save_config else None,
    )
    plot_slope_volcano(
        result.records,
        method=result.method,
        save_to=save_config.for_plot("slope_volcano") if save_config else None,
    )


if __name__ == "__main__":
    app()
