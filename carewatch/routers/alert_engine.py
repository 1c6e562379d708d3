"""
Alert Engine API - on-demand evaluation and clinician alert workflow.

Endpoints:
- POST  /api/alert-engine/patients/{patient_id}/evaluate
- GET   /api/alert-engine/alerts
- PATCH /api/alert-engine/alerts/{alert_id}
- GET   /api/alert-engine/rules
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from carewatch.database import get_db
from carewatch.schemas.alert_schemas import (
    AlertResponse,
    AlertUpdateRequest,
    EvaluationResponse,
    PendingAlertResponse,
    RuleSummary,
)
from carewatch.services.alert_engine import (
    DEFAULT_RULE_SET,
    AlertNotFoundError,
    AlertPersistenceService,
    AlertStatus,
    ClinicalRuleEngine,
    DataAccessError,
    InvalidAlertTransitionError,
)
from carewatch.services.alert_engine.timeseries import utcnow

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/alert-engine", tags=["Alert Engine"])


@router.post("/patients/{patient_id}/evaluate", response_model=EvaluationResponse)
async def evaluate_patient(
    patient_id: str,
    persist: bool = False,
    db: Session = Depends(get_db)
):
    """Run all clinical rules for a patient; optionally store the resulting alerts"""
    evaluated_at = utcnow()
    try:
        pending = await ClinicalRuleEngine(db).evaluate(patient_id, now=evaluated_at)
        persisted_ids = []
        if persist:
            created = AlertPersistenceService(db).persist_pending_alerts(pending, now=evaluated_at)
            persisted_ids = [alert.id for alert in created]
    except DataAccessError as e:
        logger.error(f"Evaluation unavailable: {e}")
        raise HTTPException(status_code=503, detail="Alert evaluation temporarily unavailable")

    return EvaluationResponse(
        patient_id=patient_id,
        evaluated_at=evaluated_at,
        pending_alerts=[PendingAlertResponse(**alert.to_dict()) for alert in pending],
        persisted_alert_ids=persisted_ids,
    )


@router.get("/alerts", response_model=List[AlertResponse])
async def list_alerts(
    status: AlertStatus = AlertStatus.ACTIVE,
    patient_id: Optional[str] = None,
    limit: int = Query(default=100, ge=1, le=500),
    db: Session = Depends(get_db)
):
    """Alerts in a status, most severe first"""
    try:
        alerts = AlertPersistenceService(db).list_alerts(status=status, patient_id=patient_id, limit=limit)
    except DataAccessError as e:
        logger.error(f"Error fetching alerts: {e}")
        raise HTTPException(status_code=503, detail="Alerts temporarily unavailable")
    return [AlertResponse.model_validate(alert) for alert in alerts]


@router.patch("/alerts/{alert_id}", response_model=AlertResponse)
async def update_alert(
    alert_id: str,
    update: AlertUpdateRequest,
    db: Session = Depends(get_db)
):
    """Acknowledge, resolve or dismiss an active alert"""
    try:
        alert = AlertPersistenceService(db).transition_alert(
            alert_id,
            AlertStatus(update.status),
            resolved_by=update.resolved_by,
            resolution_note=update.resolution_note,
        )
    except AlertNotFoundError:
        raise HTTPException(status_code=404, detail="Alert not found")
    except InvalidAlertTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except DataAccessError as e:
        logger.error(f"Error updating alert: {e}")
        raise HTTPException(status_code=503, detail="Failed to update alert")
    return AlertResponse.model_validate(alert)


@router.get("/rules", response_model=List[RuleSummary])
async def list_rules():
    """Configured clinical rules"""
    return [
        RuleSummary(id=rule.id, name=rule.name, kind=rule.kind.value)
        for rule in DEFAULT_RULE_SET.all_rules()
    ]
