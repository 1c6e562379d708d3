"""
Composite Rules - multi-signal correlations.

1. CHF Exacerbation: at least 2 of
   - weight gain > 3 lbs over 3 days
   - systolic BP rise > 20 mmHg over 3 days
   - heart rate increase > 15 bpm over 3 days
2. Medication Non-Adherence + BP Rise: both of
   - 2+ missed medication doses in the past 3 days (medication logs, not vitals)
   - systolic BP rise > 15 mmHg over 3 days

The adherence condition carries no vital type or threshold; it is resolved
through the override table in rule_registry.
"""

from .types import AlertSeverity, Comparison, CompositeCondition, CompositeRule, VitalType

CHF_EXACERBATION_RULE_ID = "composite-chf-exacerbation"
MED_NONADHERENCE_BP_RULE_ID = "composite-med-nonadherence-bp"


CHF_EXACERBATION_RULE = CompositeRule(
    id=CHF_EXACERBATION_RULE_ID,
    name="CHF Exacerbation Detection",
    conditions=(
        CompositeCondition(
            key=VitalType.WEIGHT.value,
            label="Weight gain > 3 lbs over 3 days",
            vital_type=VitalType.WEIGHT,
            operator=Comparison.GT,
            value=3,  # lbs
            delta_over_days=3,
        ),
        CompositeCondition(
            key=VitalType.BLOOD_PRESSURE_SYSTOLIC.value,
            label="Systolic BP rise > 20 mmHg over 3 days",
            vital_type=VitalType.BLOOD_PRESSURE_SYSTOLIC,
            operator=Comparison.GT,
            value=20,  # mmHg
            delta_over_days=3,
        ),
        CompositeCondition(
            key=VitalType.HEART_RATE.value,
            label="Heart rate increase > 15 bpm over 3 days",
            vital_type=VitalType.HEART_RATE,
            operator=Comparison.GT,
            value=15,  # bpm
            delta_over_days=3,
        ),
    ),
    min_conditions_met=2,
    severity=AlertSeverity.CRITICAL,
)

MED_NONADHERENCE_BP_RULE = CompositeRule(
    id=MED_NONADHERENCE_BP_RULE_ID,
    name="Medication Non-Adherence + BP Rise",
    conditions=(
        CompositeCondition(
            key="missed_medication_doses",
            label="2+ missed medication doses in past 3 days",
            delta_over_days=3,
        ),
        CompositeCondition(
            key=VitalType.BLOOD_PRESSURE_SYSTOLIC.value,
            label="Systolic BP rise > 15 mmHg over 3 days",
            vital_type=VitalType.BLOOD_PRESSURE_SYSTOLIC,
            operator=Comparison.GT,
            value=15,  # mmHg
            delta_over_days=3,
        ),
    ),
    min_conditions_met=2,
    severity=AlertSeverity.ELEVATED,
)


COMPOSITE_RULES = (
    CHF_EXACERBATION_RULE,
    MED_NONADHERENCE_BP_RULE,
)
