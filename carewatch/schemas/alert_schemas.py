"""
Alert Engine API schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PendingAlertResponse(BaseModel):
    patient_id: str
    severity: str
    rule_id: str
    rule_name: str
    title: str
    description: str
    evidence: Dict[str, Any] = Field(default_factory=dict)


class EvaluationResponse(BaseModel):
    patient_id: str
    evaluated_at: datetime
    pending_alerts: List[PendingAlertResponse]
    persisted_alert_ids: List[str] = Field(default_factory=list)


class AlertResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    severity: str
    status: str
    rule_id: str
    rule_name: str
    title: str
    description: Optional[str] = None
    vitals_snapshot: Optional[Dict[str, Any]] = None
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution_note: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AlertUpdateRequest(BaseModel):
    status: Literal["acknowledged", "resolved", "dismissed"]
    resolved_by: Optional[str] = None
    resolution_note: Optional[str] = Field(None, max_length=2000)


class RuleSummary(BaseModel):
    id: str
    name: str
    kind: str
