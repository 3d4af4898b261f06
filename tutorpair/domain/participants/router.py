"""Participant router - FastAPI endpoints for participants and subjects"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import get_current_admin
from ...database import get_db
from ...models import Participant, Subject
from .schemas import ParticipantCreate, ParticipantResponse, SubjectCreate, SubjectResponse
from .service import ParticipantService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Participants"])


def get_participant_service(db: Session = Depends(get_db)) -> ParticipantService:
    """Dependency injection for ParticipantService"""
    return ParticipantService(db)


def _subject_response(subject: Subject) -> SubjectResponse:
    return SubjectResponse(id=subject.id, code=subject.code, displayName=subject.display_name)


def participant_response(participant: Participant) -> ParticipantResponse:
    return ParticipantResponse(
        id=participant.id,
        fullName=participant.full_name,
        email=participant.email,
        role=participant.role,
        level=participant.level,
        track=participant.track,
        subjects=[_subject_response(s) for s in participant.subjects],
        availability=list(participant.availability or []),
        created_at=participant.created_at,
    )


@router.post("/participants", response_model=ParticipantResponse, status_code=201)
async def register_participant(
    data: ParticipantCreate,
    service: ParticipantService = Depends(get_participant_service),
):
    """Register a participant profile"""
    return participant_response(service.create_participant(data))


@router.get("/participants/{participant_id}", response_model=ParticipantResponse)
async def get_participant(
    participant_id: int,
    service: ParticipantService = Depends(get_participant_service),
):
    return participant_response(service.get_participant(participant_id))


@router.get("/subjects", response_model=list[SubjectResponse])
async def list_subjects(service: ParticipantService = Depends(get_participant_service)):
    return [_subject_response(s) for s in service.list_subjects()]


@router.post("/subjects", response_model=SubjectResponse, status_code=201)
async def create_subject(
    data: SubjectCreate,
    _admin: Participant = Depends(get_current_admin),
    service: ParticipantService = Depends(get_participant_service),
):
    return _subject_response(service.create_subject(data))
