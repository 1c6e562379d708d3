"""
Alert engine error taxonomy.

Insufficient data is deliberately absent: a rule without enough readings
simply does not fire.
"""


class AlertEngineError(Exception):
    """Base class for alert engine failures"""


class RuleConfigurationError(AlertEngineError):
    """Static rule definitions are inconsistent; raised at load time"""


class DataAccessError(AlertEngineError):
    """A store read failed or returned a malformed row"""


class AlertNotFoundError(AlertEngineError):
    """No alert record with the requested id"""


class InvalidAlertTransitionError(AlertEngineError):
    """Requested lifecycle change is not allowed from the alert's current status"""
