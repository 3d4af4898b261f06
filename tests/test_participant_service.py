"""
Tests for participant registration and the deletion cascade
"""

from datetime import date

import pytest

from tutorpair.domain.participants.schemas import ParticipantCreate, SubjectCreate
from tutorpair.domain.participants.service import ParticipantService
from tutorpair.exceptions import ParticipantNotFound, RequestValidationFailed
from tutorpair.models import PairingRequest, Participant, RequestIntent, RequestStatus, Track
from tests.conftest import FIXED_NOW


@pytest.fixture
def service(db, clock):
    return ParticipantService(db, clock=clock)


class TestRegistration:
    def test_create_participant(self, service, maths):
        participant = service.create_participant(
            ParticipantCreate(
                fullName="Ada Lovelace",
                email="Ada@Example.org",
                level=12,
                track=Track.A_LEVELS,
                subjectIds=[maths.id],
                availability=["MON_P1", "SUN_P9", "MON_P1"],
            )
        )

        assert participant.email == "ada@example.org"
        assert [s.code for s in participant.subjects] == ["MATHS"]
        assert participant.availability == ["MON_P1"]

    def test_duplicate_email_rejected(self, service, make_participant):
        existing = make_participant()

        with pytest.raises(RequestValidationFailed):
            service.create_participant(
                ParticipantCreate(fullName="Copy", email=existing.email, level=10)
            )

    def test_unknown_subject_rejected(self, service):
        with pytest.raises(RequestValidationFailed):
            service.create_participant(
                ParticipantCreate(fullName="Bob", email="bob@example.org", level=10, subjectIds=[42])
            )

    def test_invalid_email_rejected_by_schema(self):
        with pytest.raises(ValueError):
            ParticipantCreate(fullName="Bob", email="not-an-email", level=10)

    def test_subject_codes_are_normalised(self, service):
        subject = service.create_subject(SubjectCreate(code="further-maths", displayName="Further Maths"))

        assert subject.code == "FURTHER_MATHS"
        with pytest.raises(RequestValidationFailed):
            service.create_subject(SubjectCreate(code="FURTHER_MATHS", displayName="Again"))


class TestDeleteParticipant:
    """Test that removing a participant leaves no dangling partner references"""

    def test_cascade(self, db, service, make_participant, make_request, maths, physics):
        leaving = make_participant(level=12)
        partner = make_participant(level=11)
        past_partner = make_participant(level=11)
        confirmed = dict(
            status=RequestStatus.CONFIRMED,
            chosen_timeslot="MON_P1",
            week_start_date=date(2025, 1, 20),
        )
        make_request(leaving, RequestIntent.OFFER, maths, ["MON_P1"], matched_partner_id=partner.id, **confirmed)
        partner_request = make_request(
            partner, RequestIntent.SEEK, maths, ["MON_P1"], matched_partner_id=leaving.id, **confirmed
        )
        completed_request = make_request(
            past_partner,
            RequestIntent.SEEK,
            physics,
            ["TUE_P1"],
            status=RequestStatus.COMPLETED,
            chosen_timeslot="TUE_P1",
            week_start_date=date(2025, 1, 13),
            matched_partner_id=leaving.id,
        )
        make_request(leaving, RequestIntent.OFFER, physics, ["WED_P2"])

        leaving_id = leaving.id

        summary = service.delete_participant(leaving_id)

        assert summary == {
            "partner_requests_cancelled": 1,
            "references_cleared": 1,
            "requests_deleted": 2,
        }
        db.expire_all()
        assert db.get(Participant, leaving_id) is None
        assert db.query(PairingRequest).filter(PairingRequest.owner_id == leaving_id).count() == 0

        assert partner_request.status == RequestStatus.CANCELLED
        assert partner_request.matched_partner_id is None
        assert partner_request.cancelled_at == FIXED_NOW

        # history keeps its status, only the reference goes
        assert completed_request.status == RequestStatus.COMPLETED
        assert completed_request.matched_partner_id is None

    def test_unknown_participant(self, service):
        with pytest.raises(ParticipantNotFound):
            service.delete_participant(999)
