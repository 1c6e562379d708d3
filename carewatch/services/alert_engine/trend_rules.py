"""
Trend Rules - N consecutive strictly rising or falling readings.
"""

from .types import AlertSeverity, TrendDirection, TrendRule, VitalType


def _trend(rule_id: str, name: str, vital_type: VitalType, direction: TrendDirection,
           severity: AlertSeverity = AlertSeverity.ELEVATED, consecutive_count: int = 3) -> TrendRule:
    return TrendRule(
        id=rule_id,
        name=name,
        vital_type=vital_type,
        consecutive_count=consecutive_count,
        direction=direction,
        severity=severity,
    )


BP_SYSTOLIC_RISING_TREND = _trend(
    "trend-bp-systolic-rising", "Rising Systolic BP Trend",
    VitalType.BLOOD_PRESSURE_SYSTOLIC, TrendDirection.RISING,
)
BP_SYSTOLIC_FALLING_TREND = _trend(
    "trend-bp-systolic-falling", "Falling Systolic BP Trend",
    VitalType.BLOOD_PRESSURE_SYSTOLIC, TrendDirection.FALLING,
)
BP_DIASTOLIC_RISING_TREND = _trend(
    "trend-bp-diastolic-rising", "Rising Diastolic BP Trend",
    VitalType.BLOOD_PRESSURE_DIASTOLIC, TrendDirection.RISING,
)
BP_DIASTOLIC_FALLING_TREND = _trend(
    "trend-bp-diastolic-falling", "Falling Diastolic BP Trend",
    VitalType.BLOOD_PRESSURE_DIASTOLIC, TrendDirection.FALLING,
)
GLUCOSE_RISING_TREND = _trend(
    "trend-glucose-rising", "Rising Blood Glucose Trend",
    VitalType.BLOOD_GLUCOSE, TrendDirection.RISING,
)
GLUCOSE_FALLING_TREND = _trend(
    "trend-glucose-falling", "Falling Blood Glucose Trend",
    VitalType.BLOOD_GLUCOSE, TrendDirection.FALLING,
)
WEIGHT_RISING_TREND = _trend(
    "trend-weight-rising", "Rising Weight Trend",
    VitalType.WEIGHT, TrendDirection.RISING,
)
WEIGHT_FALLING_TREND = _trend(
    "trend-weight-falling", "Falling Weight Trend",
    VitalType.WEIGHT, TrendDirection.FALLING, AlertSeverity.INFORMATIONAL,
)
HEART_RATE_RISING_TREND = _trend(
    "trend-heart-rate-rising", "Rising Heart Rate Trend",
    VitalType.HEART_RATE, TrendDirection.RISING,
)
HEART_RATE_FALLING_TREND = _trend(
    "trend-heart-rate-falling", "Falling Heart Rate Trend",
    VitalType.HEART_RATE, TrendDirection.FALLING, AlertSeverity.INFORMATIONAL,
)


TREND_RULES = (
    BP_SYSTOLIC_RISING_TREND,
    BP_SYSTOLIC_FALLING_TREND,
    BP_DIASTOLIC_RISING_TREND,
    BP_DIASTOLIC_FALLING_TREND,
    GLUCOSE_RISING_TREND,
    GLUCOSE_FALLING_TREND,
    WEIGHT_RISING_TREND,
    WEIGHT_FALLING_TREND,
    HEART_RATE_RISING_TREND,
    HEART_RATE_FALLING_TREND,
)
