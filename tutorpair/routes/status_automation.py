"""
API endpoint for status automation and analytics
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..domain.requests.service import RequestService
from ..models import Participant
from ..services.status_automation import complete_elapsed_pairings

router = APIRouter(prefix="/status", tags=["status"])


class StatusSummary(BaseModel):
    pending: int
    confirmed: int
    completed: int
    cancelled: int
    confirmed_this_week: int
    completed_this_week: int
    cancelled_last_7_days: int


class AutomationResult(BaseModel):
    checked: int
    confirmed_to_completed: int


@router.get("/analytics", response_model=StatusSummary)
async def get_status_analytics(
    _admin: Participant = Depends(get_current_admin), db: Session = Depends(get_db)
):
    """Get count of non-archived requests by status, plus weekly activity"""
    return StatusSummary(**RequestService(db).status_summary())


@router.post("/automation/run", response_model=AutomationResult)
async def run_status_automation(
    _admin: Participant = Depends(get_current_admin), db: Session = Depends(get_db)
):
    """
    Manually trigger one completion tick
    (In production, this runs via the worker's cron job)
    """
    result = complete_elapsed_pairings(db)
    return AutomationResult(**result)
