from carewatch.models.vitals import VitalReading
from carewatch.models.medication import Medication, MedicationLog
from carewatch.models.alert_models import Alert

__all__ = [
    "VitalReading",
    "Medication",
    "MedicationLog",
    "Alert",
]
