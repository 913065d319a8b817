from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pandas as pd

from ..config import load_config, output_dir, output_path, statistics_params
from ..data.features import derive_tables, difference_columns
from ..data.ingest import load_measurements_from_config
from ..data.schema import Group
from ..utils.io import save_csv, save_json
from .aggregate import aggregate_all
from .boxplots import groupings_from_config, plot_asymmetry_groupings
from .export import build_report_context, export_latex, render_report, tables_to_dict

logger = logging.getLogger(__name__)


def _prepare(config_path: str | Path) -> Tuple[Dict[str, Any], Path, Dict[str, pd.DataFrame]]:
    cfg, base_dir = load_config(config_path)
    measurements = load_measurements_from_config(cfg, base_dir)
    return cfg, base_dir, derive_tables(measurements)


def _group_sizes(table: pd.DataFrame) -> Dict[str, int]:
    counts = table["group"].value_counts()
    return {g.value: int(counts.get(g.value, 0)) for g in Group}


def make_plots(cfg: Dict[str, Any], base_dir: Path, asymmetry: pd.DataFrame) -> Dict[str, List[str]]:
    plots_cfg = cfg.get("plots") or {}
    return plot_asymmetry_groupings(
        asymmetry,
        output_dir(cfg, "figures_dir", base_dir),
        groupings=groupings_from_config(plots_cfg),
        seed=plots_cfg.get("seed", 42),
        dpi=plots_cfg.get("dpi"),
    )


def make_statistics(cfg: Dict[str, Any], base_dir: Path, differences: pd.DataFrame) -> Dict[str, Any]:
    params = statistics_params(cfg)
    summary, tests = aggregate_all(
        differences,
        difference_columns(),
        alternative=params["alternative"],
        equal_var=params["equal_var"],
        decimals=params["decimals"],
    )
    group_sizes = _group_sizes(differences)

    summary_path = save_csv(summary, output_path(cfg, "summary_csv", base_dir))
    tests_path = save_csv(tests, output_path(cfg, "tests_csv", base_dir))
    latex_path = export_latex(tests, output_path(cfg, "latex_table", base_dir), decimals=params["decimals"])
    stats_json_path = output_path(cfg, "stats_json", base_dir)
    save_json(tables_to_dict(summary, tests, group_sizes), stats_json_path)

    return {
        "summary": summary,
        "tests": tests,
        "group_sizes": group_sizes,
        "summary_csv": str(summary_path),
        "tests_csv": str(tests_path),
        "latex_table": str(latex_path),
        "stats_json": str(stats_json_path),
    }


def run_plots(config_path: str | Path) -> Dict[str, List[str]]:
    cfg, base_dir, tables = _prepare(config_path)
    return make_plots(cfg, base_dir, tables["asymmetry"])


def run_statistics(config_path: str | Path) -> Dict[str, Any]:
    cfg, base_dir, tables = _prepare(config_path)
    return make_statistics(cfg, base_dir, tables["differences"])


def run_analysis(config_path: str | Path) -> Dict[str, Any]:
    """Load, derive, plot, aggregate and export in a single pass."""

    cfg, base_dir, tables = _prepare(config_path)

    asym_path = save_csv(tables["asymmetry"], output_path(cfg, "asymmetry_csv", base_dir))
    diff_path = save_csv(tables["differences"], output_path(cfg, "differences_csv", base_dir))

    plots = make_plots(cfg, base_dir, tables["asymmetry"])
    stats_result = make_statistics(cfg, base_dir, tables["differences"])

    report_path = output_path(cfg, "report", base_dir)
    context = build_report_context(
        stats_result["summary"],
        stats_result["tests"],
        plots["figures"],
        stats_result["group_sizes"],
        report_path,
        decimals=statistics_params(cfg)["decimals"],
    )
    render_report(context, report_path)
    logger.info("Analysis finished: %d figures, report at %s", len(plots["figures"]), report_path)
    if plots["failed"]:
        logger.warning("Boxplots not rendered: %s", ", ".join(plots["failed"]))

    return {
        "asymmetry_csv": str(asym_path),
        "differences_csv": str(diff_path),
        "figures": plots["figures"],
        "failed_figures": plots["failed"],
        "summary_csv": stats_result["summary_csv"],
        "tests_csv": stats_result["tests_csv"],
        "latex_table": stats_result["latex_table"],
        "stats_json": stats_result["stats_json"],
        "report": str(report_path),
    }
