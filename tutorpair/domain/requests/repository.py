"""Pairing request repository - Database operations for pairing requests

Methods never commit; the calling service owns the transaction.
"""

from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.orm import Session, joinedload

from ...models import (
    CLOSED_STATUSES,
    PairingRequest,
    RequestIntent,
    RequestStatus,
)


class RequestRepository:
    """Repository for pairing request database operations"""

    @staticmethod
    def get_by_id(db: Session, request_id: int, lock: bool = False) -> Optional[PairingRequest]:
        """Fetch one request; lock=True holds a row lock until the transaction ends"""
        query = db.query(PairingRequest).filter(PairingRequest.id == request_id)
        if lock:
            query = query.with_for_update().populate_existing()
        return query.first()

    @staticmethod
    def find_by_status(db: Session, status: RequestStatus) -> list[PairingRequest]:
        return (
            db.query(PairingRequest)
            .options(joinedload(PairingRequest.owner))
            .filter(PairingRequest.status == status)
            .order_by(PairingRequest.id.asc())
            .all()
        )

    @staticmethod
    def find_pending_by_intent(
        db: Session, intent: RequestIntent, lock: bool = False
    ) -> list[PairingRequest]:
        """Pending requests of one intent, owners eagerly loaded for constraint checks"""
        query = (
            db.query(PairingRequest)
            .options(joinedload(PairingRequest.owner, innerjoin=True))
            .filter(
                PairingRequest.status == RequestStatus.PENDING,
                PairingRequest.intent == intent,
            )
            .order_by(PairingRequest.id.asc())
        )
        if lock:
            query = query.with_for_update(of=PairingRequest)
        return query.all()

    @staticmethod
    def find_confirmed(db: Session) -> list[PairingRequest]:
        return RequestRepository.find_by_status(db, RequestStatus.CONFIRMED)

    @staticmethod
    def find_by_owner_intent_subject_status(
        db: Session,
        owner_id: int,
        intent: RequestIntent,
        subject_id: int,
        status: RequestStatus,
    ) -> Optional[PairingRequest]:
        """Used for the duplicate active request guard"""
        return (
            db.query(PairingRequest)
            .filter(
                PairingRequest.owner_id == owner_id,
                PairingRequest.intent == intent,
                PairingRequest.subject_id == subject_id,
                PairingRequest.status == status,
            )
            .first()
        )

    @staticmethod
    def find_by_owner_partner_status_subject(
        db: Session,
        owner_id: int,
        partner_id: int,
        status: RequestStatus,
        subject_id: int,
        chosen_timeslot: Optional[str] = None,
        week_start_date: Optional[date] = None,
        lock: bool = False,
    ) -> Optional[PairingRequest]:
        """
        Find the partner's side of a confirmed pairing.

        Two participants can hold several pairings in one subject, so the
        session (timeslot and week) narrows the match to the same one.
        """
        query = db.query(PairingRequest).filter(
            PairingRequest.owner_id == owner_id,
            PairingRequest.matched_partner_id == partner_id,
            PairingRequest.status == status,
            PairingRequest.subject_id == subject_id,
            PairingRequest.chosen_timeslot == chosen_timeslot,
            PairingRequest.week_start_date == week_start_date,
        )
        if lock:
            query = query.with_for_update()
        return query.order_by(PairingRequest.id.asc()).first()

    @staticmethod
    def find_by_partner_and_status(
        db: Session, partner_id: int, status: RequestStatus
    ) -> list[PairingRequest]:
        return (
            db.query(PairingRequest)
            .filter(
                PairingRequest.matched_partner_id == partner_id,
                PairingRequest.status == status,
            )
            .order_by(PairingRequest.id.asc())
            .all()
        )

    @staticmethod
    def get_by_owner(db: Session, owner_id: int) -> list[PairingRequest]:
        """All requests for a participant, newest first"""
        return (
            db.query(PairingRequest)
            .filter(PairingRequest.owner_id == owner_id)
            .order_by(PairingRequest.created_at.desc(), PairingRequest.id.desc())
            .all()
        )

    @staticmethod
    def search(
        db: Session,
        status: Optional[RequestStatus] = None,
        include_archived: bool = False,
    ) -> list[PairingRequest]:
        query = db.query(PairingRequest)

        if status:
            query = query.filter(PairingRequest.status == status)

        if not include_archived:
            query = query.filter(PairingRequest.archived.is_(False))

        return query.order_by(PairingRequest.created_at.desc(), PairingRequest.id.desc()).all()

    @staticmethod
    def count_by_status(db: Session) -> dict[RequestStatus, int]:
        """Count non-archived requests per status"""
        rows = (
            db.query(PairingRequest.status, func.count(PairingRequest.id))
            .filter(PairingRequest.archived.is_(False))
            .group_by(PairingRequest.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def count_for_week(db: Session, week_start: date) -> dict[RequestStatus, int]:
        """Count non-archived requests per status confirmed for the given week"""
        rows = (
            db.query(PairingRequest.status, func.count(PairingRequest.id))
            .filter(
                PairingRequest.archived.is_(False),
                PairingRequest.week_start_date == week_start,
            )
            .group_by(PairingRequest.status)
            .all()
        )
        return {status: count for status, count in rows}

    @staticmethod
    def count_cancelled_since(db: Session, since: datetime) -> int:
        return (
            db.query(func.count(PairingRequest.id))
            .filter(
                PairingRequest.status == RequestStatus.CANCELLED,
                PairingRequest.cancelled_at >= since,
            )
            .scalar()
        )

    @staticmethod
    def find_archivable(db: Session, before: date) -> list[PairingRequest]:
        """Closed, unarchived requests that belong to a week before `before`"""
        cutoff = datetime.combine(before, time.min)
        return (
            db.query(PairingRequest)
            .filter(
                PairingRequest.archived.is_(False),
                PairingRequest.status.in_(list(CLOSED_STATUSES)),
                or_(
                    PairingRequest.week_start_date < before,
                    and_(
                        PairingRequest.week_start_date.is_(None),
                        or_(
                            PairingRequest.cancelled_at.is_(None),
                            PairingRequest.cancelled_at < cutoff,
                        ),
                    ),
                ),
            )
            .order_by(PairingRequest.id.asc())
            .all()
        )

    @staticmethod
    def clear_partner_references(db: Session, partner_id: int) -> int:
        """Bulk-null matched_partner_id wherever it points at partner_id"""
        return (
            db.query(PairingRequest)
            .filter(PairingRequest.matched_partner_id == partner_id)
            .update({PairingRequest.matched_partner_id: None}, synchronize_session="fetch")
        )

    @staticmethod
    def delete_by_owner(db: Session, owner_id: int) -> int:
        return (
            db.query(PairingRequest)
            .filter(PairingRequest.owner_id == owner_id)
            .delete(synchronize_session="fetch")
        )

    @staticmethod
    def save(db: Session, request: PairingRequest) -> PairingRequest:
        db.add(request)
        db.flush()
        return request
