from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Dict, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

MAGNITUDE_LABELS: Tuple[str, str, str, str] = ("negligible", "small", "medium", "large")
COHEN_D_CUTOFFS: Tuple[float, float, float] = (0.2, 0.5, 0.8)
RANK_BISERIAL_CUTOFFS: Tuple[float, float, float] = (0.1, 0.3, 0.5)


@dataclass
class StatSummary:
    count: int
    mean: float | None
    median: float | None
    std: float | None

    def to_dict(self) -> Dict[str, float | int | None]:
        return {
            "count": self.count,
            "mean": self.mean,
            "median": self.median,
            "std": self.std,
        }


def describe_series(series: pd.Series) -> StatSummary:
    clean = pd.to_numeric(series, errors="coerce")
    clean = clean.dropna()
    if clean.empty:
        return StatSummary(0, None, None, None)
    return StatSummary(
        count=int(clean.count()),
        mean=float(clean.mean()),
        median=float(clean.median()),
        std=float(clean.std(ddof=1)),
    )


def shapiro_p(values: Sequence[float]) -> float:
    _, p_value = stats.shapiro(np.asarray(values, dtype=float))
    return float(p_value)


def one_sample_tests(values: Sequence[float], alternative: str = "less") -> Dict[str, float]:
    """Student t-test and Wilcoxon signed-rank test of ``values`` against zero.

    The Wilcoxon statistic is the sum of the ranks of the positive differences.
    """

    arr = np.asarray(values, dtype=float)
    t_stat, t_p = stats.ttest_1samp(arr, popmean=0.0, alternative=alternative)
    w_stat, w_p = stats.wilcoxon(arr, alternative=alternative)
    return {
        "t_stat": float(t_stat),
        "t_p": float(t_p),
        "wilcoxon_stat": float(w_stat),
        "wilcoxon_p": float(w_p),
    }


def two_sample_tests(
    x: Sequence[float],
    y: Sequence[float],
    alternative: str = "less",
    equal_var: bool = False,
) -> Dict[str, float]:
    """Unpaired t-test and Wilcoxon rank-sum (Mann-Whitney U) of ``x`` against ``y``."""

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    t_stat, t_p = stats.ttest_ind(x_arr, y_arr, equal_var=equal_var, alternative=alternative)
    u_stat, u_p = stats.mannwhitneyu(x_arr, y_arr, alternative=alternative)
    return {
        "t_stat": float(t_stat),
        "t_p": float(t_p),
        "wilcoxon_stat": float(u_stat),
        "wilcoxon_p": float(u_p),
    }


def cohens_d_one_sample(values: Sequence[float], popmean: float = 0.0) -> float:
    arr = np.asarray(values, dtype=float)
    sd = np.std(arr, ddof=1)
    if sd == 0:
        return float("nan")
    return float((np.mean(arr) - popmean) / sd)


def cohens_d_two_sample(x: Sequence[float], y: Sequence[float], equal_var: bool = False) -> float:
    """Standardized mean difference of ``x`` minus ``y``.

    With ``equal_var`` the pooled standard deviation is used, otherwise the
    square root of the average of both variances (matching Welch's t-test).
    """

    x_arr = np.asarray(x, dtype=float)
    y_arr = np.asarray(y, dtype=float)
    n1, n2 = len(x_arr), len(y_arr)
    var1, var2 = np.var(x_arr, ddof=1), np.var(y_arr, ddof=1)
    if equal_var:
        scale = np.sqrt(((n1 - 1) * var1 + (n2 - 1) * var2) / (n1 + n2 - 2))
    else:
        scale = np.sqrt((var1 + var2) / 2)
    if scale == 0:
        return float("nan")
    return float((np.mean(x_arr) - np.mean(y_arr)) / scale)


def rank_biserial_paired(values: Sequence[float]) -> float:
    """Matched-pairs rank-biserial correlation of differences against zero.

    r = (R+ - R-) / (R+ + R-), zeros dropped as in the signed-rank test.
    """

    arr = np.asarray(values, dtype=float)
    arr = arr[arr != 0]
    if arr.size == 0:
        return float("nan")
    ranks = stats.rankdata(np.abs(arr))
    r_plus = ranks[arr > 0].sum()
    r_minus = ranks[arr < 0].sum()
    return float((r_plus - r_minus) / (r_plus + r_minus))


def rank_biserial_independent(u_stat: float, n1: int, n2: int) -> float:
    """Rank-biserial correlation from the U statistic of the first sample.

    Positive when the first sample tends to be larger.
    """

    return float(2 * u_stat / (n1 * n2) - 1)


def magnitude_label(value: float, cutoffs: Tuple[float, float, float] = COHEN_D_CUTOFFS) -> str:
    if value is None or math.isnan(value):
        return "undefined"
    abs_value = abs(value)
    for cutoff, label in zip(cutoffs, MAGNITUDE_LABELS):
        if abs_value < cutoff:
            return label
    return MAGNITUDE_LABELS[-1]


def round_frame(df: pd.DataFrame, decimals: int = 3) -> pd.DataFrame:
    float_cols = df.select_dtypes(include="floating").columns
    rounded = df.copy()
    rounded[float_cols] = rounded[float_cols].round(decimals)
    return rounded
