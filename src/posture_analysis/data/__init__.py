from .schema import FAMILIES, Group, DataValidationError, measurement_columns
from .ingest import load_measurements, load_measurements_from_config, validate_measurements
from .features import compute_asymmetry, compute_differences, run_feature_engineering

__all__ = [
    "FAMILIES",
    "Group",
    "DataValidationError",
    "measurement_columns",
    "load_measurements",
    "load_measurements_from_config",
    "validate_measurements",
    "compute_asymmetry",
    "compute_differences",
    "run_feature_engineering",
]
