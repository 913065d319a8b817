from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pandas as pd
import pytest
import yaml

from posture_analysis.data.schema import FAMILIES, PERIODS
from posture_analysis.utils.logs import LOGGER_NAME

CONTROL_DIFFS: List[float] = [-1.0, -2.0, -3.0, -4.0, -5.0]
CASE_DIFFS: List[float] = [-0.5, -1.5, 0.25, -2.0, 1.0]
BASELINE_ASYMMETRY = 5.0
REFERENCE_SIDE = 10.0


def family_scale(index: int) -> float:
    return float(index + 1)


def build_measurements(control_diffs: List[float], case_diffs: List[float]) -> pd.DataFrame:
    """Raw sheet whose asymmetry changes equal ``diff * (family index + 1)``.

    The first side alternates above and below the reference side so that the
    absolute value in the asymmetry index matters.
    """

    groups = ["Control"] * len(control_diffs) + ["Experimental"] * len(case_diffs)
    diffs = list(control_diffs) + list(case_diffs)
    rows: List[Dict[str, object]] = []
    for subject, (group, diff) in enumerate(zip(groups, diffs)):
        sign = 1.0 if subject % 2 == 0 else -1.0
        row: Dict[str, object] = {"subject_id": f"S{subject + 1:02d}", "group": group}
        for idx, family in enumerate(FAMILIES):
            scale = family_scale(idx)
            asymmetry = {
                "before": BASELINE_ASYMMETRY * scale,
                "after": (BASELINE_ASYMMETRY + diff) * scale,
            }
            side_a, side_b = family.sides
            for period in PERIODS:
                row[family.key(side_a, period)] = REFERENCE_SIDE * scale + sign * asymmetry[period]
                row[family.key(side_b, period)] = REFERENCE_SIDE * scale
        rows.append(row)
    return pd.DataFrame(rows)


@pytest.fixture
def raw_measurements() -> pd.DataFrame:
    return build_measurements(CONTROL_DIFFS, CASE_DIFFS)


@pytest.fixture
def random_measurements() -> pd.DataFrame:
    rng = np.random.default_rng(7)
    control = list(np.round(rng.normal(-1.0, 1.0, size=15), 3))
    case = list(np.round(rng.normal(-0.2, 1.0, size=17), 3))
    control = [min(max(v, -4.5), 4.5) for v in control]
    case = [min(max(v, -4.5), 4.5) for v in case]
    return build_measurements(control, case)


@pytest.fixture
def project_dir(tmp_path: Path, raw_measurements: pd.DataFrame) -> Path:
    (tmp_path / "data" / "raw").mkdir(parents=True)
    (tmp_path / "config").mkdir()
    raw_measurements.to_csv(tmp_path / "data" / "raw" / "baropodometry.csv", index=False)
    cfg = {
        "input_path": "data/raw/baropodometry.csv",
        "group_column": "group",
        "statistics": {"alternative": "less", "equal_var": False, "decimals": 3},
        "plots": {"seed": 1, "dpi": 40},
        "outputs": {"log_dir": None},
    }
    (tmp_path / "config" / "analysis.yml").write_text(yaml.safe_dump(cfg), encoding="utf-8")
    return tmp_path


@pytest.fixture
def config_path(project_dir: Path) -> Path:
    return project_dir / "config" / "analysis.yml"


@pytest.fixture(autouse=True)
def reset_package_logger():
    yield
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
