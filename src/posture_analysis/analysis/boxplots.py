from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt
import pandas as pd

from ..data.schema import PERIODS, get_family
from ..utils import plotting

logger = logging.getLogger(__name__)


@dataclass
class PlotGrouping:
    name: str
    families: List[str]
    title: str = ""
    percent: bool = False
    segmented: bool = False
    ylabel: str = "Asymmetry"

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PlotGrouping":
        grouping = cls(
            name=raw["name"],
            families=list(raw["families"]),
            title=raw.get("title", ""),
            percent=bool(raw.get("percent", False)),
            segmented=bool(raw.get("segmented", False)),
            ylabel=raw.get("ylabel", "Asymmetry"),
        )
        for name in grouping.families:
            get_family(name)
        if grouping.segmented and len(grouping.families) < 2:
            raise ValueError(f"Grouping '{grouping.name}' is segmented but has fewer than two families")
        return grouping

    def columns(self) -> List[str]:
        return [get_family(name).asymmetry_column(period) for name in self.families for period in PERIODS]


DEFAULT_GROUPINGS: List[PlotGrouping] = [
    PlotGrouping("rearfoot_weight", ["rearfoot_weight"], "Rearfoot weight asymmetry", percent=True),
    PlotGrouping("weight_distribution", ["weight_distribution"], "Anterior/posterior weight distribution", percent=True),
    PlotGrouping("foot_pressure", ["foot_pressure", "max_foot_pressure"], "Mean and max foot pressure asymmetry", segmented=True),
    PlotGrouping("contact_surface", ["contact_surface"], "Contact surface asymmetry"),
    PlotGrouping("center_of_pressure", ["center_of_pressure"], "Center of pressure asymmetry"),
]


def groupings_from_config(plots_cfg: Dict[str, Any] | None) -> List[PlotGrouping]:
    raw = (plots_cfg or {}).get("groupings")
    if not raw:
        return list(DEFAULT_GROUPINGS)
    return [PlotGrouping.from_dict(item) for item in raw]


def _display_name(column: str) -> str:
    for period in PERIODS:
        suffix = f"_{period}"
        if column.endswith(suffix):
            family = get_family(column[: -len(suffix)])
            return f"{family.label}\n{period.capitalize()}"
    return column


def to_long(asymmetry: pd.DataFrame, columns: Sequence[str], scale: float = 1.0) -> pd.DataFrame:
    long_df = asymmetry[["group", *columns]].melt(id_vars="group", var_name="variable", value_name="value")
    long_df["value"] = long_df["value"] * scale
    long_df["variable"] = long_df["variable"].map(_display_name)
    return long_df


def reference_lines(long_df: pd.DataFrame, order: Sequence[str], segmented: bool) -> List[Tuple[float, float, float]]:
    """Dashed reference lines at the pooled median, one per segment when segmented."""

    n = len(order)
    if not segmented:
        return [(float(long_df["value"].median()), -0.5, n - 0.5)]
    split = n // 2
    lines = []
    for segment, (start, end) in zip((order[:split], order[split:]), ((-0.5, split - 0.5), (split - 0.5, n - 0.5))):
        median = long_df.loc[long_df["variable"].isin(segment), "value"].median()
        lines.append((float(median), start, end))
    return lines


def render_grouping(
    asymmetry: pd.DataFrame,
    grouping: PlotGrouping,
    figures_dir: Path,
    seed: int = 42,
    dpi: int | None = None,
) -> Path:
    columns = grouping.columns()
    scale = 100.0 if grouping.percent else 1.0
    long_df = to_long(asymmetry, columns, scale)
    order = [_display_name(col) for col in columns]
    ylabel = f"{grouping.ylabel} (%)" if grouping.percent else grouping.ylabel
    out_path = figures_dir / f"boxplot_{grouping.name}.png"
    plotting.plot_group_boxplot(
        long_df,
        order,
        grouping.title or grouping.name,
        ylabel,
        out_path,
        reference_lines(long_df, order, grouping.segmented),
        seed=seed,
        dpi=dpi,
    )
    logger.info("Saved boxplot %s", out_path)
    return out_path


def plot_asymmetry_groupings(
    asymmetry: pd.DataFrame,
    figures_dir: Path,
    groupings: Sequence[PlotGrouping] | None = None,
    seed: int = 42,
    dpi: int | None = None,
) -> Dict[str, List[str]]:
    """Render every grouping; a failing grouping is logged and skipped."""

    plotting.setup_style()
    figures_dir.mkdir(parents=True, exist_ok=True)
    created: List[str] = []
    failed: List[str] = []
    for grouping in groupings or DEFAULT_GROUPINGS:
        try:
            created.append(str(render_grouping(asymmetry, grouping, figures_dir, seed=seed, dpi=dpi)))
        except (KeyError, ValueError, RuntimeError, OSError):
            logger.exception("Boxplot '%s' failed", grouping.name)
            plt.close("all")
            failed.append(grouping.name)
    return {"figures": created, "failed": failed}
