import enum

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum,
    ForeignKey,
    Integer,
    String,
    Table,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class ParticipantRole(str, enum.Enum):
    STUDENT = "STUDENT"
    ADMIN = "ADMIN"


class Track(str, enum.Enum):
    """Exam track; a shared non-NONE track earns a matching bonus"""

    GCSE = "GCSE"
    A_LEVELS = "A_LEVELS"
    IB = "IB"
    NONE = "NONE"


class RequestIntent(str, enum.Enum):
    OFFER = "OFFER"  # offering help (tutor)
    SEEK = "SEEK"  # seeking help (tutee)


class RequestStatus(str, enum.Enum):
    """
    PENDING → CONFIRMED (matching engine) → COMPLETED (completion scheduler)
    PENDING | CONFIRMED → CANCELLED (explicit cancellation)
    """

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


CANCELLABLE_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.CONFIRMED})
CLOSED_STATUSES = frozenset({RequestStatus.COMPLETED, RequestStatus.CANCELLED})


participant_subjects = Table(
    "participant_subjects",
    Base.metadata,
    Column("participant_id", Integer, ForeignKey("participants.id", ondelete="CASCADE"), primary_key=True),
    Column("subject_id", Integer, ForeignKey("subjects.id", ondelete="CASCADE"), primary_key=True),
)


class Subject(Base):
    __tablename__ = "subjects"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), unique=True, index=True, nullable=False)  # e.g. MATHS
    display_name = Column(String(255), nullable=False)


class Participant(Base):
    __tablename__ = "participants"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    role = Column(Enum(ParticipantRole), default=ParticipantRole.STUDENT, nullable=False)
    level = Column(Integer, nullable=False)  # year group, tutors must be >= tutees
    track = Column(Enum(Track), default=Track.NONE, nullable=False)
    availability = Column(JSON, default=list, nullable=False)  # timeslot codes
    created_at = Column(DateTime, server_default=func.now())

    subjects = relationship("Subject", secondary=participant_subjects, lazy="selectin")
    requests = relationship(
        "PairingRequest",
        back_populates="owner",
        foreign_keys="PairingRequest.owner_id",
    )


class PairingRequest(Base):
    __tablename__ = "pairing_requests"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("participants.id"), index=True, nullable=False)
    intent = Column(Enum(RequestIntent), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id"), index=True, nullable=False)
    timeslots = Column(JSON, default=list, nullable=False)  # candidate timeslot codes
    status = Column(Enum(RequestStatus), default=RequestStatus.PENDING, index=True, nullable=False)
    # Scheduling fields, set together on confirmation
    chosen_timeslot = Column(String(20), nullable=True)
    week_start_date = Column(Date, nullable=True)  # Monday of the confirmed session's week
    matched_partner_id = Column(Integer, ForeignKey("participants.id"), index=True, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)  # hides closed requests
    created_at = Column(DateTime, server_default=func.now())
    cancelled_at = Column(DateTime, nullable=True)

    owner = relationship("Participant", back_populates="requests", foreign_keys=[owner_id])
    matched_partner = relationship("Participant", foreign_keys=[matched_partner_id])
    subject = relationship("Subject")

    def can_be_cancelled(self) -> bool:
        return self.status in CANCELLABLE_STATUSES

    def __repr__(self):
        return (
            f"<PairingRequest id={self.id} intent={self.intent} subject_id={self.subject_id} "
            f"status={self.status} chosen={self.chosen_timeslot} archived={self.archived}>"
        )
