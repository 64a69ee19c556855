"""API endpoints for alerts."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.dependencies import get_db, get_household_id
from app.schemas.alert import AlertResponse, AlertsListResponse
from app.services import alerts_service

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertsListResponse)
def get_alerts(
    household_id: str = Depends(get_household_id),
    db: Session = Depends(get_db)
):
    """Current alerts for the household, most severe first."""
    alerts = alerts_service.generate_alerts(db, household_id)
    return AlertsListResponse(
        items=[AlertResponse(**a) for a in alerts],
        total=len(alerts)
    )
