"""Participant service - Registration lookups and the owner deletion cascade"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import ParticipantNotFound, RequestValidationFailed
from ...models import Participant, RequestStatus, Subject
from ...services.clock import Clock, get_clock
from ...services.timeslot_calendar import TimeslotCalendar, default_calendar
from ..requests.repository import RequestRepository
from .repository import ParticipantRepository
from .schemas import ParticipantCreate, SubjectCreate

logger = logging.getLogger(__name__)


class ParticipantService:
    """Service layer for participant business logic"""

    def __init__(
        self,
        db: Session,
        calendar: TimeslotCalendar = default_calendar,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.calendar = calendar
        self.clock = clock or get_clock()
        self.repo = ParticipantRepository()
        self.requests = RequestRepository()

    def get_participant(self, participant_id: int) -> Participant:
        participant = self.repo.get_by_id(self.db, participant_id)
        if not participant:
            raise ParticipantNotFound(f"Participant {participant_id} not found")
        return participant

    def create_participant(self, data: ParticipantCreate) -> Participant:
        email = data.email.lower()
        if self.repo.get_by_email(self.db, email):
            raise RequestValidationFailed(f"Participant with email {email} already exists")

        subjects = self.repo.get_subjects(self.db, data.subjectIds)
        if len(subjects) != len(set(data.subjectIds)):
            raise RequestValidationFailed("Invalid subject selected")

        participant = Participant(
            full_name=data.fullName,
            email=email,
            role=data.role,
            level=data.level,
            track=data.track,
            # unknown codes are dropped rather than rejected on profiles
            availability=self.calendar.filter_valid(data.availability),
            subjects=subjects,
        )
        try:
            self.db.add(participant)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(participant)
        logger.info(f"📥 Registered participant {participant.id} (level {participant.level})")
        return participant

    def create_subject(self, data: SubjectCreate) -> Subject:
        code = data.code.upper()
        if self.repo.get_subject_by_code(self.db, code):
            raise RequestValidationFailed(f"Subject {code} already exists")
        subject = Subject(code=code, display_name=data.displayName)
        try:
            self.db.add(subject)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(subject)
        return subject

    def list_participants(self) -> list[Participant]:
        return self.repo.list_participants(self.db)

    def list_subjects(self) -> list[Subject]:
        return self.repo.list_subjects(self.db)

    def delete_participant(self, participant_id: int) -> dict:
        """
        Delete a participant and everything that references them.

        Steps run in order inside one transaction:
          1. partners' CONFIRMED requests pointing at the participant → CANCELLED
          2. any remaining partner references to the participant are cleared
          3. the participant's own requests are deleted
          4. the participant row is deleted
        """
        participant = self.get_participant(participant_id)
        summary = {"partner_requests_cancelled": 0, "references_cleared": 0, "requests_deleted": 0}

        try:
            partner_requests = self.requests.find_by_partner_and_status(
                self.db, participant.id, RequestStatus.CONFIRMED
            )
            for partner_request in partner_requests:
                partner_request.status = RequestStatus.CANCELLED
                partner_request.matched_partner_id = None
                partner_request.cancelled_at = self.clock.now()
                self.requests.save(self.db, partner_request)
                summary["partner_requests_cancelled"] += 1
                logger.info(
                    f"🔗 Cancelled partner request {partner_request.id} "
                    f"(participant {participant.id} is being deleted)"
                )

            summary["references_cleared"] = self.requests.clear_partner_references(
                self.db, participant.id
            )
            summary["requests_deleted"] = self.requests.delete_by_owner(self.db, participant.id)
            self.repo.delete(self.db, participant)

            self.db.commit()
        except Exception as e:
            logger.error(f"❌ Failed to delete participant {participant_id}: {str(e)}")
            self.db.rollback()
            raise

        logger.info(f"🗑️ Deleted participant {participant_id}: {summary}")
        return summary
