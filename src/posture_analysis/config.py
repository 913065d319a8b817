from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Tuple

from .utils.io import infer_base_dir, load_yaml, resolve_output, resolve_path

DEFAULT_OUTPUTS: Dict[str, str] = {
    "figures_dir": "figures",
    "asymmetry_csv": "results/asymmetry.csv",
    "differences_csv": "results/differences.csv",
    "summary_csv": "results/summary_statistics.csv",
    "tests_csv": "results/test_statistics.csv",
    "latex_table": "results/wilcoxon_table.tex",
    "stats_json": "results/statistics.json",
    "report": "reports/analysis_report.html",
    "log_dir": "logs",
}

DEFAULT_STATISTICS: Dict[str, Any] = {
    "alternative": "less",
    "equal_var": False,
    "decimals": 3,
}


def load_config(config_path: str | Path) -> Tuple[Dict[str, Any], Path]:
    config_path = Path(config_path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")
    return load_yaml(config_path), infer_base_dir(config_path)


def statistics_params(cfg: Dict[str, Any]) -> Dict[str, Any]:
    params = dict(DEFAULT_STATISTICS)
    params.update(cfg.get("statistics") or {})
    return params


def output_path(cfg: Dict[str, Any], key: str, base_dir: Path) -> Path:
    outputs = cfg.get("outputs") or {}
    return resolve_output(resolve_path(outputs.get(key, DEFAULT_OUTPUTS[key]), base_dir))


def output_dir(cfg: Dict[str, Any], key: str, base_dir: Path) -> Path:
    outputs = cfg.get("outputs") or {}
    target = resolve_path(outputs.get(key, DEFAULT_OUTPUTS[key]), base_dir)
    target.mkdir(parents=True, exist_ok=True)
    return target
