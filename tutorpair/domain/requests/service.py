"""Pairing request service - Lifecycle rules for pairing requests"""

import logging
from datetime import timedelta
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from ...exceptions import (
    InvalidStateTransition,
    NotRequestOwner,
    RequestNotFound,
    RequestValidationFailed,
)
from ...models import (
    PairingRequest,
    Participant,
    RequestIntent,
    RequestStatus,
    Subject,
)
from ...services.clock import Clock, get_clock
from ...services.timeslot_calendar import TimeslotCalendar, default_calendar, monday_of_week
from .repository import RequestRepository

logger = logging.getLogger(__name__)


class RequestService:
    """Service layer owning every pairing request state transition"""

    def __init__(
        self,
        db: Session,
        calendar: TimeslotCalendar = default_calendar,
        clock: Optional[Clock] = None,
    ):
        self.db = db
        self.calendar = calendar
        self.clock = clock or get_clock()
        self.repo = RequestRepository()

    def get_request(self, request_id: int) -> PairingRequest:
        request = self.repo.get_by_id(self.db, request_id)
        if not request:
            raise RequestNotFound(f"Request {request_id} not found")
        return request

    def get_participant_requests(self, participant: Participant) -> list[PairingRequest]:
        return self.repo.get_by_owner(self.db, participant.id)

    def search_requests(
        self, status: Optional[RequestStatus] = None, include_archived: bool = False
    ) -> list[PairingRequest]:
        return self.repo.search(self.db, status=status, include_archived=include_archived)

    def has_active_request(self, owner: Participant, intent: RequestIntent, subject_id: int) -> bool:
        return (
            self.repo.find_by_owner_intent_subject_status(
                self.db, owner.id, intent, subject_id, RequestStatus.PENDING
            )
            is not None
        )

    def create_request(
        self,
        owner: Participant,
        intent: RequestIntent,
        subject_id: int,
        timeslots: Optional[Iterable[str]],
    ) -> PairingRequest:
        """Create a PENDING request after validation and the duplicate guard"""
        requested = list(timeslots or [])
        if not requested:
            raise RequestValidationFailed("At least one timeslot must be selected")

        valid = self.calendar.filter_valid(requested)
        unknown = sorted(set(requested) - set(valid))
        if unknown:
            raise RequestValidationFailed(f"Unknown timeslot(s): {', '.join(unknown)}")

        subject = self.db.query(Subject).filter(Subject.id == subject_id).first()
        if not subject:
            raise RequestValidationFailed("Invalid subject selected")

        if self.has_active_request(owner, intent, subject_id):
            raise RequestValidationFailed(
                f"You already have an active {intent.value.lower()} request for {subject.display_name}"
            )

        request = PairingRequest(
            owner_id=owner.id,
            intent=intent,
            subject_id=subject.id,
            timeslots=valid,
            status=RequestStatus.PENDING,
            archived=False,
        )
        try:
            self.repo.save(self.db, request)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        self.db.refresh(request)

        logger.info(
            f"📥 Created {intent.value} request {request.id} for participant {owner.id} "
            f"(subject {subject.code}, {len(valid)} timeslot(s))"
        )
        return request

    def cancel_request(
        self, request_id: int, acting_participant: Optional[Participant] = None
    ) -> PairingRequest:
        """
        Cancel a request, cascading to the partner's side of a confirmed pairing.

        acting_participant=None is an administrative override that skips the
        ownership check. Both sides of the cascade commit together.
        """
        try:
            request = self.repo.get_by_id(self.db, request_id, lock=True)
            if not request:
                raise RequestNotFound(f"Request {request_id} not found")

            if acting_participant is not None and request.owner_id != acting_participant.id:
                raise NotRequestOwner("You can only cancel your own requests")

            if request.archived or not request.can_be_cancelled():
                raise InvalidStateTransition(
                    f"Request {request.id} cannot be cancelled (status {request.status.value})"
                )

            prior_status = request.status
            partner_id = request.matched_partner_id
            now = self.clock.now()

            request.status = RequestStatus.CANCELLED
            request.matched_partner_id = None
            request.cancelled_at = now
            self.repo.save(self.db, request)

            if prior_status == RequestStatus.CONFIRMED and partner_id is not None:
                partner_request = self.repo.find_by_owner_partner_status_subject(
                    self.db,
                    owner_id=partner_id,
                    partner_id=request.owner_id,
                    status=RequestStatus.CONFIRMED,
                    subject_id=request.subject_id,
                    chosen_timeslot=request.chosen_timeslot,
                    week_start_date=request.week_start_date,
                    lock=True,
                )
                if partner_request:
                    partner_request.status = RequestStatus.CANCELLED
                    partner_request.matched_partner_id = None
                    partner_request.cancelled_at = now
                    self.repo.save(self.db, partner_request)
                    logger.info(
                        f"🔗 Cascaded cancellation to partner request {partner_request.id}"
                    )
                else:
                    logger.warning(
                        f"⚠️ No confirmed partner request found for request {request.id} "
                        f"(partner {partner_id})"
                    )

            self.db.commit()

        except Exception:
            self.db.rollback()
            raise

        self.db.refresh(request)
        logger.info(f"🛑 Request {request.id} cancelled (was {prior_status.value})")
        return request

    def archive_closed_requests(self) -> int:
        """Hide completed/cancelled requests from weeks before the current one"""
        current_week = monday_of_week(self.clock.today())
        try:
            archivable = self.repo.find_archivable(self.db, before=current_week)
            for request in archivable:
                request.archived = True
            self.db.commit()
        except Exception as e:
            logger.error(f"❌ Archival failed: {str(e)}")
            self.db.rollback()
            raise

        if archivable:
            logger.info(f"📦 Archived {len(archivable)} closed request(s)")
        else:
            logger.debug("ℹ️ No closed requests to archive")
        return len(archivable)

    def status_summary(self) -> dict[str, int]:
        """
        Count of non-archived requests per status, zero-filled, plus the
        current week's confirmed and completed sessions and cancellations
        over the last 7 days.
        """
        counts = self.repo.count_by_status(self.db)
        summary = {status.value.lower(): counts.get(status, 0) for status in RequestStatus}

        week_counts = self.repo.count_for_week(self.db, monday_of_week(self.clock.today()))
        summary["confirmed_this_week"] = week_counts.get(RequestStatus.CONFIRMED, 0)
        summary["completed_this_week"] = week_counts.get(RequestStatus.COMPLETED, 0)
        summary["cancelled_last_7_days"] = self.repo.count_cancelled_since(
            self.db, self.clock.now() - timedelta(days=7)
        )
        return summary
