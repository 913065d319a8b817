from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import pandas as pd

from ..config import load_config, output_path
from ..utils.io import save_csv
from .ingest import SUBJECT_COLUMN, load_measurements_from_config
from .schema import FAMILIES, PERIODS

logger = logging.getLogger(__name__)


def _id_columns(df: pd.DataFrame) -> List[str]:
    return [col for col in (SUBJECT_COLUMN, "group") if col in df.columns]


def asymmetry_columns() -> List[str]:
    return [family.asymmetry_column(period) for family in FAMILIES for period in PERIODS]


def difference_columns() -> List[str]:
    return [family.name for family in FAMILIES]


def compute_asymmetry(measurements: pd.DataFrame) -> pd.DataFrame:
    """Absolute side-to-side difference per family, before and after treatment."""

    asym = measurements[_id_columns(measurements)].copy()
    for family in FAMILIES:
        side_a, side_b = family.sides
        for period in PERIODS:
            a = measurements[family.key(side_a, period)]
            b = measurements[family.key(side_b, period)]
            asym[family.asymmetry_column(period)] = (a - b).abs()
    return asym


def compute_differences(asymmetry: pd.DataFrame) -> pd.DataFrame:
    """After-minus-before change of each asymmetry index."""

    diffs = asymmetry[_id_columns(asymmetry)].copy()
    for family in FAMILIES:
        diffs[family.name] = asymmetry[family.asymmetry_column("after")] - asymmetry[family.asymmetry_column("before")]
    return diffs


def derive_tables(measurements: pd.DataFrame) -> Dict[str, pd.DataFrame]:
    asymmetry = compute_asymmetry(measurements)
    differences = compute_differences(asymmetry)
    logger.info(
        "Derived %d asymmetry and %d difference columns for %d subjects",
        len(asymmetry_columns()),
        len(difference_columns()),
        len(differences),
    )
    return {"asymmetry": asymmetry, "differences": differences}


def run_feature_engineering(config_path: str | Path) -> Dict[str, str]:
    cfg, base_dir = load_config(config_path)
    measurements = load_measurements_from_config(cfg, base_dir)
    tables = derive_tables(measurements)

    asym_path = save_csv(tables["asymmetry"], output_path(cfg, "asymmetry_csv", base_dir))
    diff_path = save_csv(tables["differences"], output_path(cfg, "differences_csv", base_dir))
    logger.info("Wrote %s and %s", asym_path, diff_path)

    return {
        "asymmetry": str(asym_path),
        "differences": str(diff_path),
        "row_count": len(tables["differences"]),
    }
