"""
Alert Engine Service Package - clinical rule evaluation for remote patient monitoring.

Components:
1. TimeSeriesAccessor - read-only vitals / medication-log queries pinned to one "now"
2. Rule definitions - threshold, trend and composite rule catalogues
3. Rule registry - rule set, rule-id special cases, load-time validation
4. Evaluators - one function family per rule kind
5. DeduplicationGate - at most one active alert per (patient, rule)
6. ClinicalRuleEngine - runs all families for a patient and merges pending alerts
7. AlertPersistenceService - stores pending alerts, applies lifecycle transitions
8. AlertEvaluationJob / AlertEvaluationCronJob - periodic evaluation of active patients
"""

from .types import (
    AlertSeverity,
    AlertStatus,
    ClinicalRule,
    Comparison,
    CompositeCondition,
    CompositeRule,
    PendingAlert,
    RuleKind,
    ThresholdBound,
    ThresholdRule,
    TrendDirection,
    TrendRule,
    VitalType,
)
from .exceptions import (
    AlertEngineError,
    AlertNotFoundError,
    DataAccessError,
    InvalidAlertTransitionError,
    RuleConfigurationError,
)
from .rule_registry import DEFAULT_RULE_SET, RuleSet, validate_rule_set
from .timeseries import TimeSeriesAccessor
from .dedup import DeduplicationGate
from .rule_engine import ClinicalRuleEngine
from .alert_persistence import AlertPersistenceService
from .background_worker import AlertEvaluationJob, AlertEvaluationCronJob

__all__ = [
    'AlertSeverity',
    'AlertStatus',
    'ClinicalRule',
    'Comparison',
    'CompositeCondition',
    'CompositeRule',
    'PendingAlert',
    'RuleKind',
    'ThresholdBound',
    'ThresholdRule',
    'TrendDirection',
    'TrendRule',
    'VitalType',
    'AlertEngineError',
    'AlertNotFoundError',
    'DataAccessError',
    'InvalidAlertTransitionError',
    'RuleConfigurationError',
    'DEFAULT_RULE_SET',
    'RuleSet',
    'validate_rule_set',
    'TimeSeriesAccessor',
    'DeduplicationGate',
    'ClinicalRuleEngine',
    'AlertPersistenceService',
    'AlertEvaluationJob',
    'AlertEvaluationCronJob',
]
