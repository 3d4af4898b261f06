"""Pairing request router - FastAPI endpoints for a participant's own requests"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_participant
from ...database import get_db
from ...models import Participant
from .schemas import RequestCreate, RequestResponse
from .service import RequestService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/requests", tags=["Requests"])


def get_request_service(db: Session = Depends(get_db)) -> RequestService:
    """Dependency injection for RequestService"""
    return RequestService(db)


@router.post("", response_model=RequestResponse, status_code=201)
async def create_request(
    data: RequestCreate,
    current_participant: Participant = Depends(get_current_participant),
    service: RequestService = Depends(get_request_service),
):
    """Submit an offer or seek request for one subject"""
    request = service.create_request(
        current_participant, data.intent, data.subjectId, data.timeslots
    )
    return RequestResponse.from_model(request)


@router.get("/mine", response_model=list[RequestResponse])
async def get_my_requests(
    current_participant: Participant = Depends(get_current_participant),
    service: RequestService = Depends(get_request_service),
):
    """All requests of the current participant, newest first"""
    return [
        RequestResponse.from_model(r) for r in service.get_participant_requests(current_participant)
    ]


@router.post("/{request_id}/cancel", response_model=RequestResponse)
async def cancel_request(
    request_id: int,
    current_participant: Participant = Depends(get_current_participant),
    service: RequestService = Depends(get_request_service),
):
    """Cancel one of the current participant's pending or confirmed requests"""
    return RequestResponse.from_model(service.cancel_request(request_id, current_participant))
