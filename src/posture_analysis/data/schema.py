from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Mapping, Tuple

PERIODS: Tuple[str, str] = ("before", "after")


class DataValidationError(ValueError):
    """Input table does not match the expected schema or group labels."""


class Group(str, Enum):
    CONTROL = "control"
    EXPERIMENTAL = "experimental"


@dataclass(frozen=True)
class Family:
    name: str
    sides: Tuple[str, str]
    label: str

    def key(self, side: str, period: str) -> str:
        return f"{self.name}_{side}_{period}"

    def asymmetry_column(self, period: str) -> str:
        return f"{self.name}_{period}"


FAMILIES: Tuple[Family, ...] = (
    Family("rearfoot_weight", ("left", "right"), "Rearfoot weight"),
    Family("weight_distribution", ("anterior", "posterior"), "Weight distribution"),
    Family("foot_pressure", ("left", "right"), "Foot pressure"),
    Family("max_foot_pressure", ("left", "right"), "Max foot pressure"),
    Family("contact_surface", ("left", "right"), "Contact surface"),
    Family("center_of_pressure", ("left", "right"), "Center of pressure"),
)

FAMILY_BY_NAME: Dict[str, Family] = {family.name: family for family in FAMILIES}

DEFAULT_GROUP_LABELS: Dict[str, str] = {
    "control": Group.CONTROL.value,
    "experimental": Group.EXPERIMENTAL.value,
}


def get_family(name: str) -> Family:
    try:
        return FAMILY_BY_NAME[name]
    except KeyError:
        raise DataValidationError(
            f"Unknown measurement family '{name}'; expected one of {sorted(FAMILY_BY_NAME)}"
        ) from None


def measurement_keys() -> List[str]:
    keys: List[str] = []
    for family in FAMILIES:
        for period in PERIODS:
            for side in family.sides:
                keys.append(family.key(side, period))
    return keys


def measurement_columns(overrides: Mapping[str, str] | None = None) -> Dict[str, str]:
    """Map every canonical measurement key to its raw column name in the input sheet."""

    overrides = dict(overrides or {})
    unknown = sorted(set(overrides) - set(measurement_keys()))
    if unknown:
        raise DataValidationError(f"Column overrides reference unknown measurements: {unknown}")
    return {key: overrides.get(key, key) for key in measurement_keys()}


def canonical_group(label: object, mapping: Mapping[str, str]) -> Group | None:
    if label is None:
        return None
    text = str(label).strip()
    target = mapping.get(text)
    if target is None:
        target = mapping.get(text.lower())
    if target is None:
        return None
    return Group(target)
