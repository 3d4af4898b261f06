"""
HTTP-level tests for the TutorPair API
"""

from datetime import date

import pytest

from tutorpair.models import ParticipantRole, RequestIntent, RequestStatus


def as_participant(participant):
    return {"X-Participant-Id": str(participant.id)}


@pytest.fixture
def admin(make_participant):
    return make_participant(level=13, role=ParticipantRole.ADMIN, name="Admin")


class TestPublicEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}

    def test_timeslot_catalog(self, client):
        response = client.get("/timeslots")

        assert response.status_code == 200
        slots = response.json()
        assert len(slots) == 35
        assert slots[0] == {"code": "MON_P1", "label": "Monday, P1 (09:00-09:50)"}

    def test_register_participant(self, client, maths):
        response = client.post(
            "/participants",
            json={
                "fullName": "Grace Hopper",
                "email": "grace@example.org",
                "level": 12,
                "track": "IB",
                "subjectIds": [maths.id],
                "availability": ["MON_P1"],
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data["role"] == "STUDENT"
        assert data["subjects"][0]["code"] == "MATHS"

        fetched = client.get(f"/participants/{data['id']}")
        assert fetched.json()["email"] == "grace@example.org"

    def test_register_bad_email(self, client):
        response = client.post(
            "/participants", json={"fullName": "X", "email": "nope", "level": 10}
        )
        assert response.status_code == 422

    def test_unknown_participant(self, client):
        assert client.get("/participants/999").status_code == 404


class TestRequestEndpoints:
    """Test a participant's own request lifecycle over HTTP"""

    def test_create_and_list(self, client, make_participant, maths):
        owner = make_participant()

        response = client.post(
            "/requests",
            json={"intent": "OFFER", "subjectId": maths.id, "timeslots": ["MON_P1", "TUE_P2"]},
            headers=as_participant(owner),
        )

        assert response.status_code == 201
        assert response.json()["status"] == "PENDING"
        mine = client.get("/requests/mine", headers=as_participant(owner)).json()
        assert [r["id"] for r in mine] == [response.json()["id"]]

    def test_unknown_header_participant(self, client, maths):
        response = client.post(
            "/requests",
            json={"intent": "OFFER", "subjectId": maths.id, "timeslots": ["MON_P1"]},
            headers={"X-Participant-Id": "999"},
        )
        assert response.status_code == 401

    def test_validation_errors(self, client, make_participant, maths):
        headers = as_participant(make_participant())

        empty = client.post(
            "/requests",
            json={"intent": "SEEK", "subjectId": maths.id, "timeslots": []},
            headers=headers,
        )
        assert empty.status_code == 400
        assert empty.json()["detail"] == "At least one timeslot must be selected"

        client.post(
            "/requests",
            json={"intent": "SEEK", "subjectId": maths.id, "timeslots": ["MON_P1"]},
            headers=headers,
        )
        duplicate = client.post(
            "/requests",
            json={"intent": "SEEK", "subjectId": maths.id, "timeslots": ["TUE_P1"]},
            headers=headers,
        )
        assert duplicate.status_code == 400

    def test_cancel_rules(self, client, make_participant, make_request, maths):
        owner = make_participant()
        pending = make_request(owner, RequestIntent.OFFER, maths, ["MON_P1"])
        completed = make_request(
            owner, RequestIntent.SEEK, maths, ["MON_P1"], status=RequestStatus.COMPLETED
        )

        stranger = client.post(
            f"/requests/{pending.id}/cancel", headers=as_participant(make_participant())
        )
        assert stranger.status_code == 403

        terminal = client.post(f"/requests/{completed.id}/cancel", headers=as_participant(owner))
        assert terminal.status_code == 409

        ok = client.post(f"/requests/{pending.id}/cancel", headers=as_participant(owner))
        assert ok.status_code == 200
        assert ok.json()["status"] == "CANCELLED"

        missing = client.post("/requests/4242/cancel", headers=as_participant(owner))
        assert missing.status_code == 404


class TestAdminEndpoints:
    def test_students_are_forbidden(self, client, make_participant):
        headers = as_participant(make_participant())

        assert client.post("/admin/matching/run", headers=headers).status_code == 403
        assert client.get("/status/analytics", headers=headers).status_code == 403

    def test_matching_preview_then_run(self, client, admin, make_participant, make_request, maths):
        tutor = make_participant(level=12)
        tutee = make_participant(level=11)
        make_request(tutor, RequestIntent.OFFER, maths, ["MON_P1"])
        make_request(tutee, RequestIntent.SEEK, maths, ["MON_P1"])

        preview = client.post("/admin/matching/preview", headers=as_participant(admin)).json()
        assert preview["totalWeight"] == 130
        assert preview["pairings"][0]["tutorId"] == tutor.id

        run = client.post("/admin/matching/run", headers=as_participant(admin))
        assert run.json() == {"matchedCount": 2}

        mine = client.get("/requests/mine", headers=as_participant(tutee)).json()
        assert mine[0]["status"] == "CONFIRMED"
        assert mine[0]["matchedPartnerId"] == tutor.id
        assert mine[0]["chosenTimeslot"] == "MON_P1"

        analytics = client.get("/status/analytics", headers=as_participant(admin)).json()
        assert analytics == {
            "pending": 0,
            "confirmed": 2,
            "completed": 0,
            "cancelled": 0,
            "confirmed_this_week": 2,
            "completed_this_week": 0,
            "cancelled_last_7_days": 0,
        }

    def test_admin_cancel_and_listing(self, client, admin, make_participant, make_request, maths):
        request = make_request(make_participant(), RequestIntent.OFFER, maths, ["MON_P1"])

        cancelled = client.post(
            f"/admin/requests/{request.id}/cancel", headers=as_participant(admin)
        )
        assert cancelled.json()["status"] == "CANCELLED"

        listed = client.get(
            "/admin/requests", params={"status": "CANCELLED"}, headers=as_participant(admin)
        ).json()
        assert [r["id"] for r in listed] == [request.id]

    def test_delete_participant(self, client, admin, make_participant, make_request, maths):
        leaving = make_participant(level=12)
        partner = make_participant(level=11)
        confirmed = dict(
            status=RequestStatus.CONFIRMED,
            chosen_timeslot="MON_P1",
            week_start_date=date(2025, 1, 20),
        )
        make_request(leaving, RequestIntent.OFFER, maths, ["MON_P1"], matched_partner_id=partner.id, **confirmed)
        make_request(partner, RequestIntent.SEEK, maths, ["MON_P1"], matched_partner_id=leaving.id, **confirmed)
        leaving_id = leaving.id

        response = client.delete(f"/admin/participants/{leaving_id}", headers=as_participant(admin))

        assert response.status_code == 200
        assert response.json()["partner_requests_cancelled"] == 1
        mine = client.get("/requests/mine", headers=as_participant(partner)).json()
        assert mine[0]["status"] == "CANCELLED"
        assert client.get(f"/participants/{leaving_id}").status_code == 404

    def test_create_subject(self, client, admin):
        response = client.post(
            "/subjects",
            json={"code": "chemistry", "displayName": "Chemistry"},
            headers=as_participant(admin),
        )

        assert response.status_code == 201
        assert response.json()["code"] == "CHEMISTRY"
        assert [s["code"] for s in client.get("/subjects").json()] == ["CHEMISTRY"]

    def test_automation_and_archive_endpoints(self, client, admin):
        tick = client.post("/status/automation/run", headers=as_participant(admin))
        assert tick.json() == {"checked": 0, "confirmed_to_completed": 0}

        archive = client.post("/admin/archive", headers=as_participant(admin))
        assert archive.json() == {"archivedCount": 0}

    def test_list_participants(self, client, admin, make_participant):
        make_participant(name="Zed")
        make_participant(name="Amy")

        names = [p["fullName"] for p in client.get("/admin/participants", headers=as_participant(admin)).json()]

        assert names == ["Admin", "Amy", "Zed"]
