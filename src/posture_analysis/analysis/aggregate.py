"""Per-variable descriptive and inferential statistics of after-minus-before changes.

For every difference column three subsets are considered: the control group,
the experimental ("case") group and the pooled sample. Each subset yields one
summary row (n, mean, median, sd). The test table holds one row per
comparison: control against zero, case against zero, and control against case.
"""

from __future__ import annotations

import logging
import warnings
from contextlib import contextmanager
from typing import Dict, Iterator, List, Sequence, Tuple

import numpy as np
import pandas as pd

from ..data.ingest import SUBJECT_COLUMN
from ..data.schema import Group
from ..utils import stats as stats_utils

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS: List[str] = ["variable", "source", "n", "mean", "median", "sd"]
TEST_COLUMNS: List[str] = [
    "variable",
    "source",
    "n",
    "shapiro_p",
    "t_stat",
    "t_p",
    "wilcoxon_stat",
    "wilcoxon_p",
    "cohen_d",
    "cohen_magnitude",
    "rank_effsize",
    "rank_magnitude",
]

MIN_OBSERVATIONS = 3
ID_COLUMNS = (SUBJECT_COLUMN, "group")


class AnalysisError(RuntimeError):
    """A subset cannot support the requested statistics."""


@contextmanager
def _diagnostics(column: str, source: str) -> Iterator[None]:
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        try:
            yield
        except ValueError as exc:
            raise AnalysisError(f"{column} [{source}]: {exc}") from exc
    for warning in caught:
        logger.warning("%s [%s]: %s", column, source, warning.message)


def _check_subset(values: np.ndarray, column: str, source: str, require_spread: bool = True) -> None:
    if values.size < MIN_OBSERVATIONS:
        raise AnalysisError(
            f"{column} [{source}]: need at least {MIN_OBSERVATIONS} observations, got {values.size}"
        )
    if require_spread and np.ptp(values) == 0:
        raise AnalysisError(f"{column} [{source}]: values are constant, tests are undefined")


def _measurement_columns(table: pd.DataFrame) -> List[str]:
    return [str(col) for col in table.columns if col not in ID_COLUMNS]


def _resolve_column(table: pd.DataFrame, column: str | int) -> str:
    """Column name for ``column``; integer indexes count difference columns only."""

    measurement = _measurement_columns(table)
    if isinstance(column, (int, np.integer)):
        try:
            return measurement[column]
        except IndexError:
            raise AnalysisError(
                f"Column index {column} out of range for {len(measurement)} difference columns"
            ) from None
    if column in ID_COLUMNS:
        raise AnalysisError(f"{column}: identifier column cannot be aggregated")
    if column not in table.columns:
        raise KeyError(f"Column '{column}' not found in difference table")
    return column


def _summary_row(column: str, source: str, values: np.ndarray) -> Dict[str, object]:
    summary = stats_utils.describe_series(pd.Series(values))
    return {
        "variable": column,
        "source": source,
        "n": summary.count,
        "mean": summary.mean,
        "median": summary.median,
        "sd": summary.std,
    }


def _one_sample_row(column: str, source: str, values: np.ndarray, alternative: str) -> Dict[str, object]:
    with _diagnostics(column, source):
        shapiro = stats_utils.shapiro_p(values)
        tests = stats_utils.one_sample_tests(values, alternative=alternative)
    d = stats_utils.cohens_d_one_sample(values)
    r = stats_utils.rank_biserial_paired(values)
    return {
        "variable": column,
        "source": source,
        "n": int(values.size),
        "shapiro_p": shapiro,
        **tests,
        "cohen_d": d,
        "cohen_magnitude": stats_utils.magnitude_label(d, stats_utils.COHEN_D_CUTOFFS),
        "rank_effsize": r,
        "rank_magnitude": stats_utils.magnitude_label(r, stats_utils.RANK_BISERIAL_CUTOFFS),
    }


def _between_row(
    column: str,
    control: np.ndarray,
    case: np.ndarray,
    pooled: np.ndarray,
    alternative: str,
    equal_var: bool,
) -> Dict[str, object]:
    with _diagnostics(column, "between"):
        shapiro = stats_utils.shapiro_p(pooled)
        tests = stats_utils.two_sample_tests(control, case, alternative=alternative, equal_var=equal_var)
    d = stats_utils.cohens_d_two_sample(control, case, equal_var=equal_var)
    r = stats_utils.rank_biserial_independent(tests["wilcoxon_stat"], control.size, case.size)
    return {
        "variable": column,
        "source": "between",
        "n": int(pooled.size),
        "shapiro_p": shapiro,
        **tests,
        "cohen_d": d,
        "cohen_magnitude": stats_utils.magnitude_label(d, stats_utils.COHEN_D_CUTOFFS),
        "rank_effsize": r,
        "rank_magnitude": stats_utils.magnitude_label(r, stats_utils.RANK_BISERIAL_CUTOFFS),
    }


def aggregate_stats(
    table: pd.DataFrame,
    column: str | int,
    alternative: str = "less",
    equal_var: bool = False,
    decimals: int = 3,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Summary rows (control, case, total) and test rows (control, case, between) for one column."""

    column = _resolve_column(table, column)
    try:
        values = pd.to_numeric(table[column], errors="raise")
    except (TypeError, ValueError) as exc:
        raise AnalysisError(f"{column}: non-numeric values ({exc})") from exc
    control = values[table["group"] == Group.CONTROL.value].to_numpy(dtype=float)
    case = values[table["group"] == Group.EXPERIMENTAL.value].to_numpy(dtype=float)
    pooled = values.to_numpy(dtype=float)

    if control.size + case.size != pooled.size:
        unexpected = sorted(set(table["group"]) - {g.value for g in Group})
        raise AnalysisError(f"{column}: rows with unexpected group labels {unexpected}")

    _check_subset(control, column, "control")
    _check_subset(case, column, "case")
    _check_subset(pooled, column, "total", require_spread=False)

    summary = pd.DataFrame(
        [
            _summary_row(column, "control", control),
            _summary_row(column, "case", case),
            _summary_row(column, "total", pooled),
        ],
        columns=SUMMARY_COLUMNS,
    )
    tests = pd.DataFrame(
        [
            _one_sample_row(column, "control", control, alternative),
            _one_sample_row(column, "case", case, alternative),
            _between_row(column, control, case, pooled, alternative, equal_var),
        ],
        columns=TEST_COLUMNS,
    )
    logger.debug("Aggregated %s (control=%d, case=%d)", column, control.size, case.size)
    return stats_utils.round_frame(summary, decimals), stats_utils.round_frame(tests, decimals)


def aggregate_all(
    table: pd.DataFrame,
    columns: Sequence[str],
    alternative: str = "less",
    equal_var: bool = False,
    decimals: int = 3,
) -> Tuple[pd.DataFrame, pd.DataFrame]:
    """Run :func:`aggregate_stats` for each column and stack the results in column order."""

    summaries: List[pd.DataFrame] = []
    tests: List[pd.DataFrame] = []
    for column in columns:
        summary, test = aggregate_stats(table, column, alternative, equal_var, decimals)
        summaries.append(summary)
        tests.append(test)
        logger.info("Statistics computed for %s", column)
    return (
        pd.concat(summaries, ignore_index=True),
        pd.concat(tests, ignore_index=True),
    )
