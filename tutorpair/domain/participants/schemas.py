"""Participant domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...models import ParticipantRole, Track
from ...shared.validators import validate_email, validate_subject_code


class SubjectCreate(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    displayName: str = Field(min_length=1, max_length=255)

    @field_validator("code")
    @classmethod
    def check_code(cls, v):
        return validate_subject_code(v)


class SubjectResponse(BaseModel):
    id: int
    code: str
    displayName: str


class ParticipantCreate(BaseModel):
    """Schema for registering a participant"""

    fullName: str = Field(min_length=1, max_length=255)
    email: str
    level: int = Field(ge=1, le=13)
    track: Track = Track.NONE
    role: ParticipantRole = ParticipantRole.STUDENT
    subjectIds: list[int] = []
    availability: list[str] = []

    @field_validator("email")
    @classmethod
    def check_email(cls, v):
        return validate_email(v)


class ParticipantResponse(BaseModel):
    id: int
    fullName: str
    email: str
    role: ParticipantRole
    level: int
    track: Track
    subjects: list[SubjectResponse]
    availability: list[str]
    created_at: Optional[datetime] = None


class DeleteParticipantResponse(BaseModel):
    partner_requests_cancelled: int
    references_cleared: int
    requests_deleted: int
