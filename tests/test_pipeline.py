from __future__ import annotations

import json
from pathlib import Path

import pandas as pd
from click.testing import CliRunner

from posture_analysis.analysis.run_analysis import run_analysis, run_statistics
from posture_analysis.cli import cli

TABLE_OUTPUTS = ["asymmetry_csv", "differences_csv", "summary_csv", "tests_csv", "latex_table", "stats_json"]


def test_run_analysis_produces_all_outputs(config_path, project_dir):
    result = run_analysis(config_path)
    assert len(result["figures"]) == 5
    assert result["failed_figures"] == []
    for key in TABLE_OUTPUTS + ["report"]:
        assert Path(result[key]).exists(), key
    bundle = json.loads(Path(result["stats_json"]).read_text(encoding="utf-8"))
    assert bundle["group_sizes"] == {"control": 5, "experimental": 5}
    assert len(bundle["tests"]) == 18
    assert Path(result["report"]).parent.name == "reports"


def test_pipeline_is_idempotent(config_path):
    first = run_analysis(config_path)
    snapshots = {key: Path(first[key]).read_bytes() for key in TABLE_OUTPUTS}
    second = run_analysis(config_path)
    for key in TABLE_OUTPUTS:
        assert Path(second[key]).read_bytes() == snapshots[key], key


def test_run_statistics_tables(config_path):
    result = run_statistics(config_path)
    tests = pd.read_csv(result["tests_csv"])
    assert list(tests["source"][:3]) == ["control", "case", "between"]
    assert result["group_sizes"] == {"control": 5, "experimental": 5}


def test_cli_run_analysis(config_path):
    runner = CliRunner()
    result = runner.invoke(cli, ["run-analysis", "--config", str(config_path)])
    assert result.exit_code == 0, result.output
    assert "Analysis complete" in result.output
    assert "Figures: 5" in result.output


def test_cli_stage_commands(config_path, project_dir):
    runner = CliRunner()
    derive = runner.invoke(cli, ["derive-features", "--config", str(config_path)])
    assert derive.exit_code == 0, derive.output
    assert "Subjects: 10" in derive.output
    stats_result = runner.invoke(cli, ["--verbose", "compute-stats", "--config", str(config_path)])
    assert stats_result.exit_code == 0, stats_result.output
    assert "LaTeX table" in stats_result.output
    plots = runner.invoke(cli, ["plot-asymmetry", "--config", str(config_path)])
    assert plots.exit_code == 0, plots.output
    assert "Boxplots rendered" in plots.output
    assert len(list((project_dir / "figures").glob("boxplot_*.png"))) == 5


def test_cli_fails_loudly_on_bad_labels(config_path, project_dir):
    data_path = project_dir / "data" / "raw" / "baropodometry.csv"
    raw = pd.read_csv(data_path)
    raw.loc[0, "group"] = "unknown"
    raw.to_csv(data_path, index=False)
    runner = CliRunner()
    result = runner.invoke(cli, ["compute-stats", "--config", str(config_path)])
    assert result.exit_code != 0
    assert "unknown" in str(result.exception)
