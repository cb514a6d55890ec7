from sqlalchemy import func, select

from careshare.database.models import Appointment, ConversationCall, InboundConversation, Senior


def ids(rows):
    return [row["id"] for row in rows]


class TestEnvelope:
    def test_hello(self, client):
        response = client.get("/api/agent/hello")

        assert response.status_code == 200
        assert response.json() == {"message": "hello from agent route"}

    def test_invalid_body_is_200_with_details(self, client):
        response = client.post("/api/agent/find-and-parse", json={"caller_phone_number": "212-736-5000"})

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["error"]["code"] == "INVALID_BODY"
        assert body["error"]["message"] == "Invalid request body"
        assert body["error"]["details"][0]["loc"] == ["body", "request_details"]

    def test_unknown_agent_route(self, client):
        response = client.post("/api/agent/does-not-exist", json={})

        assert response.status_code == 404
        assert response.json() == {
            "success": False,
            "error": {"code": "NOT_FOUND", "message": "Route not found", "path": "/api/agent/does-not-exist"},
        }

    def test_wrong_method_is_route_not_found(self, client):
        response = client.get("/api/agent/list-volunteers")

        assert response.status_code == 404
        assert response.json()["error"] == {
            "code": "NOT_FOUND", "message": "Route not found", "path": "/api/agent/list-volunteers"
        }

    def test_repeated_slashes_are_collapsed(self, client):
        response = client.get("/api//agent///hello")

        assert response.status_code == 200
        assert response.json() == {"message": "hello from agent route"}

    def test_responses_carry_request_id(self, client):
        response = client.get("/api/agent/hello")

        assert response.headers["X-Request-ID"]


class TestFindAndParse:
    def test_invalid_phone(self, client):
        body = client.post(
            "/api/agent/find-and-parse",
            json={"caller_phone_number": "12", "request_details": "need a ride"}
        ).json()

        assert body == {"success": False, "error": {"code": "INVALID_PHONE", "message": "Invalid phone number format."}}

    def test_unknown_senior(self, client):
        body = client.post(
            "/api/agent/find-and-parse",
            json={"caller_phone_number": "212-736-5000", "request_details": "need a ride"}
        ).json()

        assert body["error"] == {"code": "NOT_FOUND", "message": "Senior not found"}

    def test_no_skill(self, client, make_senior):
        make_senior()

        body = client.post(
            "/api/agent/find-and-parse",
            json={"caller_phone_number": "212-736-5000", "request_details": "just saying hi"}
        ).json()

        assert body["error"]["code"] == "NO_SKILL"

    def test_returns_senior_skill_and_skilled_volunteers(self, client, make_senior, make_volunteer):
        senior = make_senior()
        driver = make_volunteer("Maria", "10002", ["Driving"])
        make_volunteer("David", "90211", ["Gardening"])

        body = client.post(
            "/api/agent/find-and-parse",
            json={"caller_phone_number": "(212) 736-5000", "request_details": "I need a ride to the doctor"}
        ).json()

        assert body["success"] is True
        assert body["data"]["senior"]["id"] == senior.id
        assert body["data"]["matched_skill"] == "Driving"
        assert ids(body["data"]["potential_volunteers"]) == [driver.id]


class TestListVolunteers:
    def test_skill_filter_only_returns_volunteers_with_that_skill(self, client, make_volunteer):
        gardener = make_volunteer("David", "90211", ["Gardening", "Companionship"])
        make_volunteer("Maria", "10002", ["Driving"])
        other_gardener = make_volunteer("Sam", "10001", ["Gardening"])

        body = client.post("/api/agent/list-volunteers", json={"skill": "Gardening"}).json()

        assert body["success"] is True
        assert ids(body["data"]) == [other_gardener.id, gardener.id]
        assert all("Gardening" in row["skills"] for row in body["data"])

    def test_zip_filter_uses_radius_zip_set(self, client, make_volunteer, zip_radius):
        near = make_volunteer("Near", "90212", ["Driving"])
        make_volunteer("Far", "90045", ["Driving"])
        make_volunteer("Elsewhere", "10002", ["Driving"])

        body = client.post("/api/agent/list-volunteers", json={"zip": "90210", "radius": 5}).json()

        assert ids(body["data"]) == [near.id]
        assert zip_radius.calls == [("90210", 5)]

    def test_gardening_near_90210(self, client, make_volunteer):
        match = make_volunteer("David", "90211", ["Gardening"])
        make_volunteer("Maria", "90211", ["Driving"])
        make_volunteer("Ana", "90045", ["Gardening"])

        body = client.post(
            "/api/agent/list-volunteers", json={"skill": "Gardening", "zip": "90210", "radius": 10}
        ).json()

        assert ids(body["data"]) == [match.id]
        assert body["data"][0]["skills"] == ["Gardening"]
        assert body["data"][0]["zip_code"] == "90211"

    def test_radius_defaults_to_ten(self, client, zip_radius):
        client.post("/api/agent/list-volunteers", json={"zip": "90210"})

        assert zip_radius.calls == [("90210", 10)]

    def test_inactive_volunteers_are_excluded(self, client, make_volunteer):
        make_volunteer("Gone", "90211", ["Driving"], is_active=False)

        body = client.post("/api/agent/list-volunteers", json={}).json()

        assert body == {"success": True, "data": []}

    def test_invalid_zip(self, client):
        body = client.post("/api/agent/list-volunteers", json={"zip": "99999"}).json()

        assert body["error"] == {"code": "INVALID_ZIP", "message": "Invalid zip provided"}

    def test_unknown_skill_or_bad_radius_is_invalid_body(self, client):
        for payload in ({"skill": "Juggling"}, {"radius": 0}, {"radius": 500}):
            body = client.post("/api/agent/list-volunteers", json=payload).json()
            assert body["error"]["code"] == "INVALID_BODY"

    def test_find_volunteers_alias(self, client, make_volunteer):
        volunteer = make_volunteer("Maria", "10002", ["Tech Help"])

        body = client.post("/api/agent/find-volunteers", json={"skill": "Tech Help"}).json()

        assert ids(body["data"]) == [volunteer.id]


class TestCreateSenior:
    def test_upsert_by_phone_is_idempotent(self, client, db):
        first = client.post(
            "/api/agent/create-senior",
            json={"phone_number": "212-736-5000", "first_name": "Eleanor", "email": "  "}
        ).json()
        second = client.post(
            "/api/agent/create-senior",
            json={"phone_number": "+1 (212) 736-5000", "last_name": "Vance", "zip_code": "10001"}
        ).json()

        assert first["upserted"] == "created"
        assert second["upserted"] == "updated"
        assert first["data"]["id"] == second["data"]["id"]
        assert second["data"]["first_name"] == "Eleanor"
        assert second["data"]["last_name"] == "Vance"
        assert second["data"]["email"] is None
        assert second["data"]["phone_number"] == "+12127365000"
        assert db.scalar(select(func.count(Senior.id)).where(Senior.phone_number == "+12127365000")) == 1

    def test_invalid_phone(self, client):
        body = client.post("/api/agent/create-senior", json={"phone_number": "abc"}).json()

        assert body["error"]["code"] == "INVALID_PHONE"

    def test_empty_name_is_invalid_body(self, client):
        body = client.post(
            "/api/agent/create-senior", json={"phone_number": "212-736-5000", "first_name": ""}
        ).json()

        assert body["error"]["code"] == "INVALID_BODY"


class TestInboundConversation:
    def test_driving_request_widens_radius_when_nothing_local(self, client, db, make_senior, make_volunteer):
        make_senior(zip_code="90210")
        make_volunteer("Local", "90211", ["Gardening"])
        widened = make_volunteer("Maria", "90045", ["Driving"])
        make_volunteer("TooFar", "91101", ["Driving"])

        response = client.post(
            "/api/agent/start-inbound-conversation",
            json={"caller_phone_number": "212-736-5000", "request_details": "I need a ride to the doctor"}
        )

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["matched_skill"] == "Driving"
        assert ids(data["volunteers"]) == [widened.id]

        conversation = db.get(InboundConversation, data["conversation_id"])
        assert conversation.status == "OPEN"
        assert conversation.senior_id == data["senior"]["id"]
        assert ids(conversation.nearby_volunteers) == [widened.id]

    def test_falls_back_to_any_nearby_volunteer(self, client, make_volunteer):
        local = make_volunteer("Local", "90211", ["Gardening"])
        make_volunteer("Remote", "91101", ["Companionship"])

        data = client.post(
            "/api/agent/start-inbound-conversation",
            json={"caller_phone_number": "212-736-5000", "request_details": "help with my computer", "zip": "90210"}
        ).json()["data"]

        assert data["matched_skill"] == "Tech Help"
        assert data["senior"] is None
        assert ids(data["volunteers"]) == [local.id]

    def test_creates_senior_when_details_given(self, client, db):
        data = client.post(
            "/api/agent/start-inbound-conversation",
            json={
                "caller_phone_number": "516-477-0955",
                "request_details": "someone to talk to",
                "first_name": "Eleanor",
                "zip_code": "10001",
            }
        ).json()["data"]

        assert data["senior"]["first_name"] == "Eleanor"
        assert data["senior"]["phone_number"] == "+15164770955"
        assert data["matched_skill"] == "Companionship"

    def test_invalid_zip_creates_nothing(self, client, db):
        body = client.post(
            "/api/agent/start-inbound-conversation",
            json={
                "caller_phone_number": "516-477-0955",
                "request_details": "need a ride",
                "create_if_missing": True,
                "zip": "99999",
            }
        ).json()

        assert body["error"]["code"] == "INVALID_ZIP"
        assert db.scalar(select(func.count(Senior.id))) == 0
        assert db.scalar(select(func.count(InboundConversation.id))) == 0


def start_conversation(client, make_senior, phone="212-736-5000"):
    make_senior()
    return client.post(
        "/api/agent/start-inbound-conversation",
        json={"caller_phone_number": phone, "request_details": "need a ride", "zip": "90210"}
    ).json()["data"]["conversation_id"]


class TestConversationCalls:
    def test_log_and_read_back_calls(self, client, make_senior, make_volunteer):
        maria = make_volunteer("Maria", "90211", ["Driving"], phone_number="+12125559999")
        david = make_volunteer("David", "90212", ["Driving"])
        conversation_id = start_conversation(client, make_senior)

        first = client.post(
            "/api/agent/log-volunteer-call",
            json={"conversation_id": conversation_id, "volunteer_id": maria.id, "outcome": "ACCEPTED"}
        )
        client.post(
            "/api/agent/log-volunteer-call",
            json={"conversation_id": conversation_id, "volunteer_id": david.id, "outcome": "DECLINED", "notes": "busy"}
        )

        assert first.status_code == 201
        assert first.json()["data"]["role"] == "VOLUNTEER"

        detail = client.get(f"/api/agent/conversation/{conversation_id}").json()["data"]
        assert detail["conversation"]["id"] == conversation_id
        assert [c["outcome"] for c in detail["calls"]] == ["DECLINED", "ACCEPTED"]

        accepted = client.get(f"/api/agent/conversation/{conversation_id}/accepted").json()["data"]
        assert accepted == [{
            "volunteer_id": maria.id, "first_name": "Maria", "last_name": "Tester", "phone_number": "+12125559999",
        }]

    def test_log_call_for_missing_conversation_or_volunteer(self, client, make_senior, make_volunteer):
        volunteer = make_volunteer("Maria", "90211", ["Driving"])
        conversation_id = start_conversation(client, make_senior)

        missing_conversation = client.post(
            "/api/agent/log-volunteer-call",
            json={"conversation_id": 999, "volunteer_id": volunteer.id, "outcome": "ACCEPTED"}
        ).json()
        missing_volunteer = client.post(
            "/api/agent/log-volunteer-call",
            json={"conversation_id": conversation_id, "volunteer_id": 999, "outcome": "ACCEPTED"}
        ).json()

        assert missing_conversation["error"] == {"code": "NOT_FOUND", "message": "Conversation not found"}
        assert missing_volunteer["error"] == {"code": "NOT_FOUND", "message": "Volunteer not found"}

    def test_pending_outcome_cannot_be_logged(self, client):
        body = client.post(
            "/api/agent/log-volunteer-call",
            json={"conversation_id": 1, "volunteer_id": 1, "outcome": "PENDING"}
        ).json()

        assert body["error"]["code"] == "INVALID_BODY"

    def test_invalid_conversation_id(self, client):
        for raw in ("abc", "0", "-3"):
            body = client.get(f"/api/agent/conversation/{raw}").json()
            assert body["error"] == {"code": "INVALID_ID", "message": "Invalid conversation id"}


class TestVolunteerLookup:
    def test_get_volunteer(self, client, make_volunteer):
        volunteer = make_volunteer("Maria", "10002", ["Driving"])

        body = client.get(f"/api/volunteer/{volunteer.id}").json()

        assert body["success"] is True
        assert body["data"]["email"] == "maria@example.com"
        assert body["data"]["background_check_status"] == "Not Started"

    def test_missing_and_invalid_ids_stay_200(self, client):
        missing = client.get("/api/volunteer/42")
        invalid = client.get("/api/volunteer/x")

        assert missing.status_code == 200
        assert missing.json()["error"]["code"] == "NOT_FOUND"
        assert invalid.status_code == 200
        assert invalid.json()["error"] == {"code": "INVALID_ID", "message": "Invalid volunteer id"}


class TestScheduling:
    def test_finalize_schedules_and_closes_conversation(self, client, db, make_senior, make_volunteer):
        volunteer = make_volunteer("Maria", "90211", ["Driving"])
        conversation_id = start_conversation(client, make_senior)
        senior = db.scalars(select(Senior)).one()
        senior.street_address = "1 Main St"
        senior.city = "Beverly Hills"
        db.commit()

        response = client.post(
            "/api/agent/finalize-conversation",
            json={
                "conversation_id": conversation_id,
                "chosen_volunteer_id": volunteer.id,
                "appointment_datetime": "2030-05-01T15:00:00Z",
            }
        )

        assert response.status_code == 201
        appointment = response.json()["data"]
        assert appointment["status"] == "Scheduled"
        assert appointment["location"] == "1 Main St, Beverly Hills, 90210"

        db.expire_all()
        conversation = db.get(InboundConversation, conversation_id)
        assert conversation.status == "SCHEDULED"
        assert conversation.scheduled_appointment_id == appointment["id"]

    def test_finalize_without_senior(self, client, db, make_volunteer):
        volunteer = make_volunteer("Maria", "90211", ["Driving"])
        conversation_id = client.post(
            "/api/agent/start-inbound-conversation",
            json={"caller_phone_number": "212-736-5000", "request_details": "need a ride"}
        ).json()["data"]["conversation_id"]

        body = client.post(
            "/api/agent/finalize-conversation",
            json={
                "conversation_id": conversation_id,
                "chosen_volunteer_id": volunteer.id,
                "appointment_datetime": "2030-05-01T15:00:00Z",
            }
        ).json()

        assert body["error"] == {"code": "NO_SENIOR", "message": "Senior id is required to schedule"}

    def test_finalize_unknown_volunteer_leaves_conversation_open(self, client, db, make_senior):
        conversation_id = start_conversation(client, make_senior)

        body = client.post(
            "/api/agent/finalize-conversation",
            json={"conversation_id": conversation_id, "chosen_volunteer_id": 999, "appointment_datetime": "2030-05-01T15:00:00Z"}
        ).json()

        assert body["error"]["code"] == "NOT_FOUND"
        db.expire_all()
        assert db.get(InboundConversation, conversation_id).status == "OPEN"
        assert db.scalar(select(func.count(Appointment.id))) == 0

    def test_schedule_then_confirm(self, client, make_senior, make_volunteer):
        senior = make_senior()
        volunteer = make_volunteer("Maria", "90211", ["Driving"])

        created = client.post(
            "/api/agent/schedule-appointment",
            json={
                "senior_id": senior.id,
                "volunteer_id": volunteer.id,
                "appointment_datetime": "2030-05-01T15:00:00Z",
                "location": "Community center",
            }
        )
        assert created.status_code == 201
        appointment_id = created.json()["id"]

        confirmed = client.post("/api/agent/confirm-appointment", json={"appointment_id": appointment_id}).json()

        assert confirmed["data"]["status"] == "Confirmed"
        assert confirmed["data"]["location"] == "Community center"

    def test_schedule_returns_bare_appointment_row(self, client, make_senior, make_volunteer):
        senior = make_senior(street_address="1 Main St", city="Beverly Hills")
        volunteer = make_volunteer("Maria", "90211", ["Driving"])

        response = client.post(
            "/api/agent/schedule-appointment",
            json={"senior_id": senior.id, "volunteer_id": volunteer.id, "appointment_datetime": "2030-05-01T15:00:00Z"}
        )

        assert response.status_code == 201
        body = response.json()
        assert "success" not in body
        assert body["senior_id"] == senior.id
        assert body["volunteer_id"] == volunteer.id
        assert body["status"] == "Scheduled"
        assert body["location"] == "1 Main St, Beverly Hills, 90210"

    def test_schedule_failure_keeps_error_envelope(self, client, make_volunteer):
        volunteer = make_volunteer("Maria", "90211", ["Driving"])

        response = client.post(
            "/api/agent/schedule-appointment",
            json={"senior_id": 404, "volunteer_id": volunteer.id, "appointment_datetime": "2030-05-01T15:00:00Z"}
        )

        assert response.status_code == 200
        assert response.json() == {"success": False, "error": {"code": "NOT_FOUND", "message": "Senior not found"}}

    def test_confirm_missing_appointment(self, client):
        body = client.post("/api/agent/confirm-appointment", json={"appointment_id": 77}).json()

        assert body["error"] == {"code": "NOT_FOUND", "message": "Appointment not found"}

    def test_log_call_outcome(self, client, make_senior, make_volunteer):
        senior = make_senior()
        volunteer = make_volunteer("Maria", "90211", ["Driving"])

        response = client.post(
            "/api/agent/log-call-outcome",
            json={"senior_id": senior.id, "volunteer_id": volunteer.id, "outcome": "VOICEMAIL"}
        )

        assert response.status_code == 201
        assert response.json()["data"]["outcome"] == "VOICEMAIL"


class TestOutboundCalls:
    def test_outbound_call_logs_pending_volunteer_call(self, client, db, make_senior, make_volunteer, elevenlabs):
        volunteer = make_volunteer("Maria", "90211", ["Driving"], phone_number="+12125559999")
        conversation_id = start_conversation(client, make_senior)

        body = client.post(
            "/api/agent/outbound-call", json={"conversation_id": conversation_id, "volunteer_id": volunteer.id}
        ).json()

        assert body == {
            "success": True,
            "upstream_status": 200,
            "data": {"success": True, "message": "Call initiated", "callSid": "CA123"},
        }
        call = db.scalars(select(ConversationCall)).one()
        assert (call.outcome, call.role, call.call_sid, call.volunteer_id) == ("PENDING", "VOLUNTEER", "CA123", volunteer.id)

        request = elevenlabs.requests[0]
        assert str(request.url) == "https://api.elevenlabs.io/v1/convai/twilio/outbound-call"
        assert request.headers["xi-api-key"] == "xi-test-key-9876"

    def test_senior_callback_logs_pending_row_without_volunteer(self, client, db, make_senior, elevenlabs):
        conversation_id = start_conversation(client, make_senior)

        body = client.post("/api/agent/outbound-callback-senior", json={"conversation_id": conversation_id}).json()

        assert body["success"] is True
        call = db.scalars(select(ConversationCall)).one()
        assert (call.role, call.volunteer_id, call.call_sid) == ("SENIOR_CALLBACK", None, "CA123")
        assert b'"to_number":"+12127365000"' in elevenlabs.requests[0].content.replace(b" ", b"")

    def test_senior_callback_requires_a_senior(self, client):
        conversation_id = client.post(
            "/api/agent/start-inbound-conversation",
            json={"caller_phone_number": "212-736-5000", "request_details": "need a ride"}
        ).json()["data"]["conversation_id"]

        body = client.post("/api/agent/outbound-callback-senior", json={"conversation_id": conversation_id}).json()

        assert body["error"] == {"code": "NO_SENIOR", "message": "Senior id/number required"}
