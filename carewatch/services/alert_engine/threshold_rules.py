"""
Threshold Rules - single-reading bound checks.

Bounds are listed most-severe-first. Weight gain is the one rule whose bound
is a 1-day delta rather than an absolute value (see rule_registry).
"""

from .types import AlertSeverity, Comparison, ThresholdBound, ThresholdRule, VitalType

WEIGHT_GAIN_RULE_ID = "threshold-weight-gain"


BP_SYSTOLIC_RULE = ThresholdRule(
    id="threshold-bp-systolic",
    name="Blood Pressure (Systolic) Threshold",
    vital_type=VitalType.BLOOD_PRESSURE_SYSTOLIC,
    bounds=(
        ThresholdBound(Comparison.GT, 180, AlertSeverity.CRITICAL, "Hypertensive crisis"),
        ThresholdBound(Comparison.GT, 140, AlertSeverity.ELEVATED, "Hypertension Stage 2"),
    ),
)

BP_DIASTOLIC_RULE = ThresholdRule(
    id="threshold-bp-diastolic",
    name="Blood Pressure (Diastolic) Threshold",
    vital_type=VitalType.BLOOD_PRESSURE_DIASTOLIC,
    bounds=(
        ThresholdBound(Comparison.GT, 120, AlertSeverity.CRITICAL, "Hypertensive crisis (diastolic)"),
        ThresholdBound(Comparison.GT, 90, AlertSeverity.ELEVATED, "Diastolic hypertension"),
    ),
)

HEART_RATE_RULE = ThresholdRule(
    id="threshold-heart-rate",
    name="Heart Rate Threshold",
    vital_type=VitalType.HEART_RATE,
    bounds=(
        ThresholdBound(Comparison.GT, 120, AlertSeverity.CRITICAL, "Tachycardia (severe)"),
        ThresholdBound(Comparison.LT, 50, AlertSeverity.ELEVATED, "Bradycardia"),
        ThresholdBound(Comparison.GT, 100, AlertSeverity.ELEVATED, "Tachycardia (mild)"),
    ),
)

BLOOD_GLUCOSE_RULE = ThresholdRule(
    id="threshold-blood-glucose",
    name="Blood Glucose Threshold",
    vital_type=VitalType.BLOOD_GLUCOSE,
    bounds=(
        ThresholdBound(Comparison.GT, 300, AlertSeverity.CRITICAL, "Severe hyperglycemia"),
        ThresholdBound(Comparison.LT, 70, AlertSeverity.CRITICAL, "Hypoglycemia"),
        ThresholdBound(Comparison.GT, 200, AlertSeverity.ELEVATED, "Hyperglycemia"),
    ),
)

OXYGEN_SATURATION_RULE = ThresholdRule(
    id="threshold-oxygen-saturation",
    name="Oxygen Saturation Threshold",
    vital_type=VitalType.OXYGEN_SATURATION,
    bounds=(
        ThresholdBound(Comparison.LT, 90, AlertSeverity.CRITICAL, "Severe hypoxemia"),
        ThresholdBound(Comparison.LT, 94, AlertSeverity.ELEVATED, "Low oxygen saturation"),
    ),
)

TEMPERATURE_RULE = ThresholdRule(
    id="threshold-temperature",
    name="Temperature Threshold",
    vital_type=VitalType.TEMPERATURE,
    bounds=(
        ThresholdBound(Comparison.GT, 103, AlertSeverity.CRITICAL, "High fever"),
        ThresholdBound(Comparison.GT, 100.4, AlertSeverity.ELEVATED, "Fever"),
    ),
)

# Bound is a delta from the earliest reading in the last day, not an absolute weight
WEIGHT_GAIN_RULE = ThresholdRule(
    id=WEIGHT_GAIN_RULE_ID,
    name="Sudden Weight Gain",
    vital_type=VitalType.WEIGHT,
    bounds=(
        ThresholdBound(Comparison.GT, 3, AlertSeverity.ELEVATED, "Sudden weight gain (>3 lbs/day)"),
    ),
)


THRESHOLD_RULES = (
    BP_SYSTOLIC_RULE,
    BP_DIASTOLIC_RULE,
    HEART_RATE_RULE,
    BLOOD_GLUCOSE_RULE,
    OXYGEN_SATURATION_RULE,
    TEMPERATURE_RULE,
    WEIGHT_GAIN_RULE,
)
