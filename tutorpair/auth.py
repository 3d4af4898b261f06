"""
Acting participant resolution.

Identity is supplied by the fronting gateway in the X-Participant-Id header;
this module only turns it into a Participant row and enforces the admin role.
"""

import logging

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from .database import get_db
from .models import Participant, ParticipantRole

logger = logging.getLogger(__name__)


def get_current_participant(
    x_participant_id: int = Header(..., alias="X-Participant-Id"),
    db: Session = Depends(get_db),
) -> Participant:
    participant = db.query(Participant).filter(Participant.id == x_participant_id).first()
    if not participant:
        logger.warning(f"⚠️ Unknown participant id in header: {x_participant_id}")
        raise HTTPException(status_code=401, detail="Unknown participant")
    return participant


def get_current_admin(participant: Participant = Depends(get_current_participant)) -> Participant:
    if participant.role != ParticipantRole.ADMIN:
        logger.warning(f"⚠️ Participant {participant.id} attempted an admin action")
        raise HTTPException(status_code=403, detail="Admin access required")
    return participant
