from __future__ import annotations

import pandas as pd
import pytest

from posture_analysis.data.ingest import assign_groups, load_measurements, validate_measurements
from posture_analysis.data.schema import DataValidationError, measurement_columns, measurement_keys


def test_measurement_keys_cover_all_families():
    keys = measurement_keys()
    assert len(keys) == 24
    assert "rearfoot_weight_left_before" in keys
    assert "weight_distribution_posterior_after" in keys


def test_measurement_columns_apply_overrides():
    columns = measurement_columns({"foot_pressure_left_before": "FP L pre"})
    assert columns["foot_pressure_left_before"] == "FP L pre"
    assert columns["foot_pressure_right_before"] == "foot_pressure_right_before"


def test_measurement_columns_reject_unknown_override():
    with pytest.raises(DataValidationError):
        measurement_columns({"knee_angle_left_before": "x"})


def test_validate_canonicalises_groups(raw_measurements):
    table = validate_measurements(raw_measurements)
    assert set(table["group"]) == {"control", "experimental"}
    assert (table["group"] == "control").sum() == 5
    assert list(table.columns[:2]) == ["subject_id", "group"]


def test_unknown_group_label_is_rejected(raw_measurements):
    raw_measurements.loc[0, "group"] = "placebo"
    with pytest.raises(DataValidationError, match="placebo"):
        validate_measurements(raw_measurements)


def test_custom_group_labels():
    series = pd.Series(["VR", "C", "VR"], name="arm")
    mapped = assign_groups(series, {"VR": "experimental", "C": "control"})
    assert list(mapped) == ["experimental", "control", "experimental"]


def test_label_mapping_target_must_be_canonical():
    with pytest.raises(DataValidationError):
        assign_groups(pd.Series(["A"]), {"A": "treated"})


def test_missing_column_is_reported(raw_measurements):
    raw = raw_measurements.drop(columns=["contact_surface_left_after"])
    with pytest.raises(DataValidationError, match="contact_surface_left_after"):
        validate_measurements(raw)


def test_non_numeric_cell_is_reported(raw_measurements):
    raw_measurements["center_of_pressure_left_before"] = raw_measurements["center_of_pressure_left_before"].astype(object)
    raw_measurements.loc[2, "center_of_pressure_left_before"] = "n/a"
    with pytest.raises(DataValidationError, match="Non-numeric"):
        validate_measurements(raw_measurements)


def test_empty_group_is_rejected(raw_measurements):
    raw = raw_measurements[raw_measurements["group"] == "Control"]
    with pytest.raises(DataValidationError, match="experimental"):
        validate_measurements(raw)


def test_load_measurements_from_excel(tmp_path, raw_measurements):
    path = tmp_path / "sheet.xlsx"
    raw_measurements.to_excel(path, index=False)
    table = load_measurements(path)
    assert len(table) == len(raw_measurements)


def test_load_measurements_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_measurements(tmp_path / "absent.csv")


def test_unknown_labels_are_listed_by_assign_groups():
    series = pd.Series(["control", "placebo", "experimental", "sham"], name="group")
    with pytest.raises(DataValidationError) as excinfo:
        assign_groups(series)
    message = str(excinfo.value)
    assert "['placebo', 'sham']" in message
    assert "'group'" in message


def test_missing_group_label_is_rejected():
    series = pd.Series(["control", float("nan"), "experimental"], name="group")
    with pytest.raises(DataValidationError, match="Unrecognised group labels"):
        assign_groups(series)


def test_assign_groups_keeps_index():
    series = pd.Series(["Control", "experimental"], index=[10, 11], name="arm")
    mapped = assign_groups(series)
    assert list(mapped.index) == [10, 11]
    assert list(mapped) == ["control", "experimental"]


def test_legacy_xls_is_rejected(tmp_path, raw_measurements):
    path = tmp_path / "sheet.xls"
    path.write_bytes(b"not a workbook")
    with pytest.raises(ValueError, match="Unsupported file format"):
        load_measurements(path)
