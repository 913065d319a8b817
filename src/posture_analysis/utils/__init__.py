"""Utility helpers"""

from .io import (
    ensure_dir,
    infer_base_dir,
    load_dataframe,
    load_yaml,
    resolve_output,
    resolve_path,
    save_csv,
    save_json,
)
from .logs import setup_logging
from .stats import (
    StatSummary,
    describe_series,
    magnitude_label,
    round_frame,
)
from . import plotting

__all__ = [
    "ensure_dir",
    "infer_base_dir",
    "load_dataframe",
    "load_yaml",
    "resolve_output",
    "resolve_path",
    "save_csv",
    "save_json",
    "setup_logging",
    "StatSummary",
    "describe_series",
    "magnitude_label",
    "round_frame",
    "plotting",
]
