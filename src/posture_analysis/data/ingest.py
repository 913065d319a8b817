from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Mapping

import pandas as pd

from ..utils.io import load_dataframe, resolve_path
from .schema import (
    DEFAULT_GROUP_LABELS,
    DataValidationError,
    Group,
    canonical_group,
    measurement_columns,
)

logger = logging.getLogger(__name__)

SUBJECT_COLUMN = "subject_id"


def _normalize_label_map(group_labels: Mapping[str, str] | None) -> Dict[str, str]:
    labels = dict(group_labels or DEFAULT_GROUP_LABELS)
    valid = {g.value for g in Group}
    bad_targets = sorted({str(v) for v in labels.values()} - valid)
    if bad_targets:
        raise DataValidationError(f"Group label mapping targets must be in {sorted(valid)}, got {bad_targets}")
    return {str(raw).strip(): str(target) for raw, target in labels.items()}


def assign_groups(series: pd.Series, group_labels: Mapping[str, str] | None = None) -> pd.Series:
    """Map raw group labels onto the canonical two-valued group enumeration."""

    label_map = _normalize_label_map(group_labels)
    mapped = [canonical_group(value, label_map) for value in series]
    unknown = sorted({str(v) for v, g in zip(series, mapped) if g is None})
    if unknown:
        raise DataValidationError(
            f"Unrecognised group labels {unknown} in column '{series.name}'; "
            f"expected one of {sorted(label_map)}"
        )
    return pd.Series([g.value for g in mapped], index=series.index, name=series.name, dtype=object)


def convert_measurements(df: pd.DataFrame, columns: List[str]) -> pd.DataFrame:
    numeric = df[columns].apply(pd.to_numeric, errors="coerce")
    bad_cells = numeric.isna() & df[columns].notna()
    if bad_cells.any().any():
        offending = [col for col in columns if bad_cells[col].any()]
        raise DataValidationError(f"Non-numeric values in measurement columns: {offending}")
    missing = [col for col in columns if numeric[col].isna().any()]
    if missing:
        raise DataValidationError(f"Missing values in measurement columns: {missing}")
    return numeric.astype(float)


def validate_measurements(
    raw: pd.DataFrame,
    group_column: str = "group",
    group_labels: Mapping[str, str] | None = None,
    column_overrides: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    """Return a canonical measurement table: ``group`` plus one column per measurement key."""

    column_map = measurement_columns(column_overrides)
    required = [group_column] + list(column_map.values())
    missing = [col for col in required if col not in raw.columns]
    if missing:
        raise DataValidationError(f"Input table is missing required columns: {missing}")

    measurements = convert_measurements(raw, list(column_map.values()))
    measurements.columns = list(column_map.keys())

    table = pd.DataFrame(index=raw.index)
    if SUBJECT_COLUMN in raw.columns:
        table[SUBJECT_COLUMN] = raw[SUBJECT_COLUMN]
    table["group"] = assign_groups(raw[group_column], group_labels)
    table = pd.concat([table, measurements], axis=1)

    counts = table["group"].value_counts()
    empty = [g.value for g in Group if counts.get(g.value, 0) == 0]
    if empty:
        raise DataValidationError(f"No subjects found for group(s): {empty}")

    table.reset_index(drop=True, inplace=True)
    return table


def load_measurements(
    path: str | Path,
    group_column: str = "group",
    group_labels: Mapping[str, str] | None = None,
    column_overrides: Mapping[str, str] | None = None,
) -> pd.DataFrame:
    raw = load_dataframe(path)
    table = validate_measurements(raw, group_column, group_labels, column_overrides)
    counts = table["group"].value_counts()
    logger.info(
        "Loaded %d subjects from %s (control=%d, experimental=%d)",
        len(table),
        path,
        counts.get(Group.CONTROL.value, 0),
        counts.get(Group.EXPERIMENTAL.value, 0),
    )
    return table


def load_measurements_from_config(cfg: Dict, base_dir: Path) -> pd.DataFrame:
    return load_measurements(
        resolve_path(cfg["input_path"], base_dir),
        group_column=cfg.get("group_column", "group"),
        group_labels=cfg.get("group_labels"),
        column_overrides=cfg.get("columns"),
    )
