"""Pairing request schemas - Pydantic models for validation"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...models import PairingRequest, RequestIntent, RequestStatus


class RequestCreate(BaseModel):
    """Schema for submitting a pairing request"""

    intent: RequestIntent
    subjectId: int
    timeslots: list[str] = Field(default_factory=list)


class RequestResponse(BaseModel):
    id: int
    ownerId: int
    intent: RequestIntent
    subjectId: int
    timeslots: list[str]
    status: RequestStatus
    chosenTimeslot: Optional[str] = None
    weekStartDate: Optional[date] = None
    matchedPartnerId: Optional[int] = None
    archived: bool
    created_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_model(cls, request: PairingRequest) -> "RequestResponse":
        return cls(
            id=request.id,
            ownerId=request.owner_id,
            intent=request.intent,
            subjectId=request.subject_id,
            timeslots=list(request.timeslots or []),
            status=request.status,
            chosenTimeslot=request.chosen_timeslot,
            weekStartDate=request.week_start_date,
            matchedPartnerId=request.matched_partner_id,
            archived=request.archived,
            created_at=request.created_at,
            cancelled_at=request.cancelled_at,
        )


class PairingResponse(BaseModel):
    offerRequestId: int
    seekRequestId: int
    tutorId: int
    tuteeId: int
    timeslot: str
    weight: float


class MatchingPreviewResponse(BaseModel):
    pairings: list[PairingResponse]
    totalWeight: float


class MatchingRunResponse(BaseModel):
    matchedCount: int


class ArchiveResponse(BaseModel):
    archivedCount: int
