from __future__ import annotations

import logging
from pathlib import Path

import click

from .analysis.run_analysis import run_analysis, run_plots, run_statistics
from .config import load_config, output_dir
from .data.features import run_feature_engineering
from .utils.logs import setup_logging


def _init_logging(ctx: click.Context, config_path: str) -> None:
    level = logging.DEBUG if ctx.obj.get("verbose") else logging.INFO
    log_dir: Path | None = None
    if Path(config_path).exists():
        cfg, base_dir = load_config(config_path)
        if (cfg.get("outputs") or {}).get("log_dir", "logs"):
            log_dir = output_dir(cfg, "log_dir", base_dir)
    setup_logging(log_dir, level)


@click.group()
@click.option("--verbose", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """posture_analysis command line interface."""

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command("run-analysis")
@click.option("--config", "config_path", default="config/analysis.yml", show_default=True)
@click.pass_context
def run_analysis_cmd(ctx: click.Context, config_path: str) -> None:
    """Run the full pipeline: derive, plot, aggregate and export."""

    _init_logging(ctx, config_path)
    result = run_analysis(config_path)
    click.echo("Analysis complete:")
    click.echo(f"  Report: {result['report']}")
    click.echo(f"  LaTeX table: {result['latex_table']}")
    click.echo(f"  Statistics: {result['stats_json']}")
    click.echo(f"  Figures: {len(result['figures'])}")


@cli.command("derive-features")
@click.option("--config", "config_path", default="config/analysis.yml", show_default=True)
@click.pass_context
def derive_features_cmd(ctx: click.Context, config_path: str) -> None:
    """Compute asymmetry indices and after-minus-before differences."""

    _init_logging(ctx, config_path)
    result = run_feature_engineering(config_path)
    click.echo("Features derived:")
    click.echo(f"  Asymmetry: {result['asymmetry']}")
    click.echo(f"  Differences: {result['differences']}")
    click.echo(f"  Subjects: {result['row_count']}")


@cli.command("plot-asymmetry")
@click.option("--config", "config_path", default="config/analysis.yml", show_default=True)
@click.pass_context
def plot_asymmetry_cmd(ctx: click.Context, config_path: str) -> None:
    """Render the asymmetry boxplots."""

    _init_logging(ctx, config_path)
    result = run_plots(config_path)
    click.echo("Boxplots rendered:")
    for fig in result["figures"]:
        click.echo(f"  {fig}")
    if result["failed"]:
        click.echo(f"  Failed: {', '.join(result['failed'])}")


@cli.command("compute-stats")
@click.option("--config", "config_path", default="config/analysis.yml", show_default=True)
@click.pass_context
def compute_stats_cmd(ctx: click.Context, config_path: str) -> None:
    """Compute the statistics tables and export them."""

    _init_logging(ctx, config_path)
    result = run_statistics(config_path)
    click.echo("Statistics exported:")
    click.echo(f"  Summary: {result['summary_csv']}")
    click.echo(f"  Tests: {result['tests_csv']}")
    click.echo(f"  LaTeX table: {result['latex_table']}")


if __name__ == "__main__":
    cli()
