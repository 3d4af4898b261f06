"""
Admin endpoints: request oversight, matching runs, archival, participant removal
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..auth import get_current_admin
from ..database import get_db
from ..domain.participants.router import participant_response
from ..domain.participants.schemas import DeleteParticipantResponse, ParticipantResponse
from ..domain.participants.service import ParticipantService
from ..domain.requests.schemas import (
    ArchiveResponse,
    MatchingPreviewResponse,
    MatchingRunResponse,
    PairingResponse,
    RequestResponse,
)
from ..domain.requests.service import RequestService
from ..models import Participant, RequestStatus
from ..services.matching_engine import MatchingEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])


@router.get("/participants", response_model=list[ParticipantResponse])
async def list_participants(
    _admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return [participant_response(p) for p in ParticipantService(db).list_participants()]


@router.get("/requests", response_model=list[RequestResponse])
async def list_requests(
    status: Optional[RequestStatus] = Query(None),
    include_archived: bool = Query(False),
    _admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """All requests, optionally filtered by status; archived ones hidden by default"""
    requests = RequestService(db).search_requests(status=status, include_archived=include_archived)
    return [RequestResponse.from_model(r) for r in requests]


@router.post("/requests/{request_id}/cancel", response_model=RequestResponse)
async def admin_cancel_request(
    request_id: int,
    admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Cancel any request regardless of owner"""
    logger.info(f"🛠️ Admin {admin.id} cancelling request {request_id}")
    return RequestResponse.from_model(RequestService(db).cancel_request(request_id, None))


@router.delete("/participants/{participant_id}", response_model=DeleteParticipantResponse)
async def delete_participant(
    participant_id: int,
    admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    logger.info(f"🛠️ Admin {admin.id} deleting participant {participant_id}")
    return DeleteParticipantResponse(**ParticipantService(db).delete_participant(participant_id))


@router.post("/matching/preview", response_model=MatchingPreviewResponse)
async def preview_matching(
    _admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Compute the pairings a run would make without saving anything"""
    pairings = MatchingEngine(db).run_matching()
    return MatchingPreviewResponse(
        pairings=[
            PairingResponse(
                offerRequestId=p.offer_request.id,
                seekRequestId=p.seek_request.id,
                tutorId=p.offer_request.owner_id,
                tuteeId=p.seek_request.owner_id,
                timeslot=p.timeslot,
                weight=p.weight,
            )
            for p in pairings
        ],
        totalWeight=sum(p.weight for p in pairings),
    )


@router.post("/matching/run", response_model=MatchingRunResponse)
async def run_matching(
    admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    """Run matching and confirm the resulting pairings"""
    matched_count = MatchingEngine(db).perform_matching()
    logger.info(f"🛠️ Admin {admin.id} ran matching: {matched_count} request(s) confirmed")
    return MatchingRunResponse(matchedCount=matched_count)


@router.post("/archive", response_model=ArchiveResponse)
async def archive_requests(
    _admin: Participant = Depends(get_current_admin),
    db: Session = Depends(get_db),
):
    return ArchiveResponse(archivedCount=RequestService(db).archive_closed_requests())
