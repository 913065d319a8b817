from __future__ import annotations

import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

import pandas as pd
from jinja2 import Template

from ..utils.io import resolve_output

logger = logging.getLogger(__name__)

TEMPLATE_PATH = Path(__file__).parent / "templates" / "report_template.html"

LATEX_COLUMNS: List[str] = ["variable", "source", "n", "wilcoxon_stat", "wilcoxon_p", "rank_effsize", "rank_magnitude"]
LATEX_HEADERS: Dict[str, str] = {
    "variable": "Variable",
    "source": "Source",
    "n": "n",
    "wilcoxon_stat": "W",
    "wilcoxon_p": "p",
    "rank_effsize": "r",
    "rank_magnitude": "Magnitude",
}


def select_columns(tests: pd.DataFrame, columns: Sequence[str] = LATEX_COLUMNS) -> pd.DataFrame:
    missing = [col for col in columns if col not in tests.columns]
    if missing:
        raise KeyError(f"Test table is missing columns required for export: {missing}")
    return tests.loc[:, list(columns)].copy()


def to_latex_table(tests: pd.DataFrame, decimals: int = 3, caption: str | None = None, label: str | None = None) -> str:
    table = select_columns(tests).rename(columns=LATEX_HEADERS)
    table["Variable"] = table["Variable"].str.replace("_", " ", regex=False)
    return table.to_latex(
        index=False,
        float_format=f"%.{decimals}f",
        caption=caption,
        label=label,
        escape=True,
    )


def export_latex(tests: pd.DataFrame, path: Path, decimals: int = 3) -> Path:
    out = resolve_output(path)
    latex = to_latex_table(
        tests,
        decimals=decimals,
        caption="Wilcoxon tests and rank-biserial effect sizes of asymmetry changes",
        label="tab:wilcoxon",
    )
    out.write_text(latex, encoding="utf-8")
    logger.info("Wrote LaTeX table %s", out)
    return out


def tables_to_dict(summary: pd.DataFrame, tests: pd.DataFrame, group_sizes: Dict[str, int]) -> Dict[str, Any]:
    return {
        "group_sizes": group_sizes,
        "summary": summary.to_dict(orient="records"),
        "tests": tests.to_dict(orient="records"),
    }


def render_report(context: Dict[str, Any], report_path: Path) -> None:
    template_text = TEMPLATE_PATH.read_text(encoding="utf-8")
    template = Template(template_text)
    html = template.render(**context)
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(html, encoding="utf-8")


def build_report_context(
    summary: pd.DataFrame,
    tests: pd.DataFrame,
    figures: Sequence[str],
    group_sizes: Dict[str, int],
    report_path: Path,
    decimals: int = 3,
) -> Dict[str, Any]:
    figure_links = [os.path.relpath(fig, report_path.parent) for fig in figures]
    float_format = f"{{:.{decimals}f}}".format
    return {
        "generated_at": datetime.now().isoformat(timespec="seconds"),
        "group_sizes": group_sizes,
        "summary_html": summary.to_html(index=False, float_format=float_format, classes="table"),
        "tests_html": tests.to_html(index=False, float_format=float_format, classes="table"),
        "figures": figure_links,
    }
