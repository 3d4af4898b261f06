"""Participant repository - Database operations for participants and subjects"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Participant, Subject


class ParticipantRepository:
    """Repository for participant database operations"""

    @staticmethod
    def get_by_id(db: Session, participant_id: int) -> Optional[Participant]:
        return db.query(Participant).filter(Participant.id == participant_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Participant]:
        return db.query(Participant).filter(Participant.email == email).first()

    @staticmethod
    def list_participants(db: Session) -> list[Participant]:
        return db.query(Participant).order_by(Participant.full_name.asc()).all()

    @staticmethod
    def get_subjects(db: Session, subject_ids: list[int]) -> list[Subject]:
        if not subject_ids:
            return []
        return db.query(Subject).filter(Subject.id.in_(subject_ids)).all()

    @staticmethod
    def list_subjects(db: Session) -> list[Subject]:
        return db.query(Subject).order_by(Subject.display_name.asc()).all()

    @staticmethod
    def get_subject_by_code(db: Session, code: str) -> Optional[Subject]:
        return db.query(Subject).filter(Subject.code == code).first()

    @staticmethod
    def delete(db: Session, participant: Participant) -> None:
        db.delete(participant)
        db.flush()
