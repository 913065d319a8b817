from __future__ import annotations

from pathlib import Path
from typing import List, Sequence, Tuple

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from .io import ensure_dir

DEFAULT_FONT = "DejaVu Sans"
GROUP_PALETTE = {"control": "#0072B2", "experimental": "#D55E00"}


def setup_style(dpi: int = 120) -> None:
    sns.set_style("whitegrid")
    plt.rcParams["font.sans-serif"] = [DEFAULT_FONT]
    plt.rcParams["axes.unicode_minus"] = False
    plt.rcParams["figure.dpi"] = dpi


def save_current_fig(path: str | Path, dpi: int | None = None) -> None:
    file_path = Path(path)
    ensure_dir(file_path.parent)
    plt.tight_layout()
    plt.savefig(file_path, dpi=dpi)
    plt.close()


def plot_group_boxplot(
    long_df: pd.DataFrame,
    order: Sequence[str],
    title: str,
    ylabel: str,
    out_path: Path,
    reference_lines: List[Tuple[float, float, float]],
    seed: int = 42,
    dpi: int | None = None,
) -> None:
    """Grouped box-and-jitter plot of ``value`` per ``variable`` split by ``group``.

    ``reference_lines`` holds ``(y, x_start, x_end)`` in category coordinates,
    drawn as dashed horizontal segments.
    """

    np.random.seed(seed)
    hue_order = [g for g in GROUP_PALETTE if g in set(long_df["group"])]
    fig, ax = plt.subplots(figsize=(max(6, 1.6 * len(order)), 4.5))
    sns.boxplot(
        data=long_df,
        x="variable",
        y="value",
        hue="group",
        order=list(order),
        hue_order=hue_order,
        palette=GROUP_PALETTE,
        showfliers=False,
        ax=ax,
    )
    sns.stripplot(
        data=long_df,
        x="variable",
        y="value",
        hue="group",
        order=list(order),
        hue_order=hue_order,
        palette=GROUP_PALETTE,
        dodge=True,
        jitter=0.15,
        size=3,
        alpha=0.7,
        legend=False,
        ax=ax,
    )
    for y, x_start, x_end in reference_lines:
        ax.hlines(y, x_start, x_end, colors="grey", linestyles="dashed", linewidth=1)
    ax.set_xlim(-0.5, len(order) - 0.5)
    ax.set_xlabel("")
    ax.set_ylabel(ylabel)
    ax.set_title(title)
    ax.legend(title="Group")
    save_current_fig(out_path, dpi=dpi)
