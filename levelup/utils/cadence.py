# levelup/utils/cadence.py
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


# =====================================================================
# OVERRIDE VALUES
# =====================================================================


@dataclass(frozen=True)
class Inherited:
    """No per-user value, use the template default."""


@dataclass(frozen=True)
class Override:
    value: Any


CadenceField = Union[Inherited, Override]

INHERITED = Inherited()


def cadence_field(value: Any) -> CadenceField:
    """Lift a nullable override column. Only None means "inherit"; 0 is a value."""
    return INHERITED if value is None else Override(value)


def pick(field: CadenceField, default: Any) -> Any:
    if isinstance(field, Override):
        return field.value
    return default


# =====================================================================
# EFFECTIVE CADENCE
# =====================================================================


@dataclass(frozen=True)
class EffectiveCadence:
    frequency_type: str
    frequency_interval: int
    week_start: int
    max_per_period: int

    def as_dict(self) -> Dict[str, Any]:
        return {
            "effective_frequency_type": self.frequency_type,
            "effective_frequency_interval": self.frequency_interval,
            "effective_week_start": self.week_start,
            "effective_max_per_period": self.max_per_period,
        }


def resolve_cadence(user_goal, template) -> EffectiveCadence:
    """Merge a user goal's overrides over its template's cadence."""
    return EffectiveCadence(
        frequency_type=pick(
            cadence_field(user_goal.frequency_type_override), template.frequency_type
        ),
        frequency_interval=pick(
            cadence_field(user_goal.frequency_interval_override), template.frequency_interval
        ),
        week_start=pick(cadence_field(user_goal.week_start_override), template.week_start),
        max_per_period=pick(
            cadence_field(user_goal.max_per_period_override), template.max_per_period
        ),
    )


# =====================================================================
# CADENCE PRESETS
# =====================================================================

CADENCE_PRESETS: Dict[str, Dict[str, Any]] = {
    "daily": {
        "frequency_type_override": "daily",
        "frequency_interval_override": 1,
        "week_start_override": None,
        "max_per_period_override": 1,
    },
    "weekly": {
        "frequency_type_override": "weekly",
        "frequency_interval_override": 1,
        "week_start_override": 1,  # Monday
        "max_per_period_override": 1,
    },
}


def overrides_for_cadence(cadence: Optional[str]) -> Optional[Dict[str, Any]]:
    """Override columns for a user-facing cadence choice, or None if unknown."""
    preset = CADENCE_PRESETS.get(str(cadence or "").strip().lower())
    return dict(preset) if preset else None
