"""
Automated status transitions for pairing requests
Handles confirmed → completed once the chosen timeslot has ended
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.requests.repository import RequestRepository
from ..models import PairingRequest, RequestStatus
from .clock import Clock, get_clock
from .timeslot_calendar import TimeslotCalendar, default_calendar

logger = logging.getLogger(__name__)


def should_be_completed(
    request: PairingRequest,
    now: datetime,
    calendar: TimeslotCalendar = default_calendar,
) -> bool:
    """
    True when the request's timeslot end time is strictly before now.

    Requests without a chosen timeslot or week start are skipped, as are
    codes the calendar cannot resolve.
    """
    if request.week_start_date is None or request.chosen_timeslot is None:
        logger.debug(f"Skipping request {request.id}: missing scheduling fields")
        return False

    end_time = calendar.resolve_end_time(request.week_start_date, request.chosen_timeslot)
    if end_time is None:
        logger.debug(
            f"Skipping request {request.id}: unresolvable timeslot {request.chosen_timeslot!r}"
        )
        return False

    return now > end_time


def complete_elapsed_pairings(
    db: Session,
    clock: Optional[Clock] = None,
    calendar: TimeslotCalendar = default_calendar,
) -> dict:
    """
    Mark confirmed requests whose session has ended as completed.
    Run on a fixed period by the worker; safe to repeat.

    Each request is re-read under a row lock and committed on its own so a
    concurrent cancellation either wins cleanly or sees the completed row.

    Returns:
        dict: Summary of status changes made
    """
    clock = clock or get_clock()
    repo = RequestRepository()
    summary = {"checked": 0, "confirmed_to_completed": 0}

    now = clock.now()
    confirmed = repo.find_confirmed(db)
    summary["checked"] = len(confirmed)

    # decided up front; commits below expire the loaded rows
    due_ids = [c.id for c in confirmed if should_be_completed(c, now, calendar)]

    for request_id in due_ids:
        try:
            request = repo.get_by_id(db, request_id, lock=True)
            # cancelled, completed or deleted since the batch read
            if request is None or request.status != RequestStatus.CONFIRMED:
                db.rollback()
                continue

            slot, week = request.chosen_timeslot, request.week_start_date
            request.status = RequestStatus.COMPLETED
            repo.save(db, request)
            db.commit()
        except Exception as e:
            logger.error(f"❌ Error completing request {request_id}: {str(e)}")
            db.rollback()
            raise

        summary["confirmed_to_completed"] += 1
        logger.info(
            f"✅ Request {request_id} transitioned: confirmed → completed "
            f"(slot {slot}, week of {week})"
        )

    if summary["confirmed_to_completed"]:
        logger.info(f"📊 Status automation summary: {summary}")
    else:
        logger.debug("ℹ️ No pairing status updates needed")

    return summary
