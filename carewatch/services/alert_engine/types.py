"""
Clinical rule types.

Rules are a closed tagged union (threshold / trend / composite). Each family
has its own evaluator function; there is no shared evaluate() interface.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union


class VitalType(str, Enum):
    """Vital sign type tags (mirror the vitals.vital_type column values)"""
    BLOOD_PRESSURE_SYSTOLIC = "blood_pressure_systolic"
    BLOOD_PRESSURE_DIASTOLIC = "blood_pressure_diastolic"
    HEART_RATE = "heart_rate"
    BLOOD_GLUCOSE = "blood_glucose"
    WEIGHT = "weight"
    OXYGEN_SATURATION = "oxygen_saturation"
    TEMPERATURE = "temperature"

    @property
    def display_name(self) -> str:
        return self.value.replace("_", " ")


class AlertSeverity(str, Enum):
    CRITICAL = "critical"
    ELEVATED = "elevated"
    INFORMATIONAL = "informational"

    @property
    def rank(self) -> int:
        """Sort rank, most urgent first"""
        return {"critical": 1, "elevated": 2, "informational": 3}[self.value]


class AlertStatus(str, Enum):
    ACTIVE = "active"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"

    @classmethod
    def terminal(cls) -> Tuple["AlertStatus", ...]:
        return (cls.ACKNOWLEDGED, cls.RESOLVED, cls.DISMISSED)


class MedicationStatus(str, Enum):
    TAKEN = "taken"
    MISSED = "missed"
    LATE = "late"
    SKIPPED = "skipped"


class Comparison(str, Enum):
    """Strict comparison operators used by bounds and conditions"""
    GT = "gt"
    LT = "lt"

    def holds(self, observed: float, threshold: float) -> bool:
        if self is Comparison.GT:
            return observed > threshold
        return observed < threshold

    @property
    def verb(self) -> str:
        return "exceeds" if self is Comparison.GT else "is below"


class TrendDirection(str, Enum):
    RISING = "rising"
    FALLING = "falling"


class RuleKind(str, Enum):
    THRESHOLD = "threshold"
    TREND = "trend"
    COMPOSITE = "composite"


# Lookback applied to composite conditions that don't declare one
DEFAULT_LOOKBACK_DAYS = 3


@dataclass(frozen=True)
class ThresholdBound:
    """A single boundary, e.g. systolic > 180 => critical"""
    operator: Comparison
    value: float
    severity: AlertSeverity
    label: str


@dataclass(frozen=True)
class ThresholdRule:
    """
    Fires when the latest reading crosses one of its bounds.
    Bounds are ordered most-severe-first; the first matching bound wins.
    """
    id: str
    name: str
    vital_type: VitalType
    bounds: Tuple[ThresholdBound, ...]
    kind: RuleKind = field(default=RuleKind.THRESHOLD, init=False)


@dataclass(frozen=True)
class TrendRule:
    """Fires when the last N readings are strictly monotonic in one direction"""
    id: str
    name: str
    vital_type: VitalType
    consecutive_count: int
    direction: TrendDirection
    severity: AlertSeverity
    kind: RuleKind = field(default=RuleKind.TREND, init=False)


@dataclass(frozen=True)
class CompositeCondition:
    """
    One sub-condition of a composite rule.

    Vital conditions compare the change over `delta_over_days` against `value`.
    A condition without a vital type or threshold must be covered by an entry
    in the rule registry's override table.
    """
    key: str
    label: str
    vital_type: Optional[VitalType] = None
    operator: Comparison = Comparison.GT
    value: Optional[float] = None
    delta_over_days: Optional[int] = None

    @property
    def lookback_days(self) -> int:
        return self.delta_over_days or DEFAULT_LOOKBACK_DAYS


@dataclass(frozen=True)
class CompositeRule:
    """Fires when at least `min_conditions_met` sub-conditions hold together"""
    id: str
    name: str
    conditions: Tuple[CompositeCondition, ...]
    min_conditions_met: int
    severity: AlertSeverity
    kind: RuleKind = field(default=RuleKind.COMPOSITE, init=False)


ClinicalRule = Union[ThresholdRule, TrendRule, CompositeRule]


@dataclass
class PendingAlert:
    """Rule engine output, not yet persisted"""
    patient_id: str
    severity: AlertSeverity
    rule_id: str
    rule_name: str
    title: str
    description: str
    evidence: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patient_id": self.patient_id,
            "severity": self.severity.value,
            "rule_id": self.rule_id,
            "rule_name": self.rule_name,
            "title": self.title,
            "description": self.description,
            "evidence": self.evidence,
        }
