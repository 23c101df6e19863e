from datetime import datetime

import pytest
from conftest import FIXED_NOW, MONDAY, SATURDAY, TUESDAY
from fastapi import HTTPException

from tradelink.database import SessionLocal
from tradelink.domain.scheduling import approval_service
from tradelink.domain.scheduling.router import get_clock
from tradelink.domain.scheduling.service import SchedulingService
from tradelink.main import app


def _set_one_hour_window(client, contractor_id):
    response = client.put(
        f"/contractors/{contractor_id}/availability",
        json={
            "workingHours": {"start": "09:00", "end": "10:00"},
            "workingDays": [1, 2, 3, 4, 5],
            "meetingDuration": 30,
        },
    )
    assert response.status_code == 200
    return response.json()


def _propose(client, contractor_id, realtor_id, start_time="09:30", on_date=TUESDAY, notes=""):
    return client.post(
        f"/contractors/{contractor_id}/meeting-requests",
        json={
            "realtorId": realtor_id,
            "date": on_date.isoformat(),
            "startTime": start_time,
            "notes": notes,
        },
    )


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_new_contractor_gets_default_availability(client, contractor):
    response = client.get(f"/contractors/{contractor['id']}/availability")

    assert response.status_code == 200
    body = response.json()
    assert body["workingHours"] == {"start": "09:00", "end": "17:00"}
    assert body["workingDays"] == [1, 2, 3, 4, 5]
    assert body["meetingDuration"] == 30
    assert body["bookedSlots"] == []


def test_unknown_contractor_is_404(client, realtor):
    assert client.get("/contractors/nope/availability").status_code == 404
    # realtors have no calendar
    assert client.get(f"/contractors/{realtor['id']}/slots?date=2024-05-14").status_code == 404


def test_update_availability_validates_input(client, contractor):
    url = f"/contractors/{contractor['id']}/availability"
    bad_payloads = [
        {"workingHours": {"start": "10:00", "end": "09:00"}, "workingDays": [1], "meetingDuration": 30},
        {"workingHours": {"start": "9:00", "end": "17:00"}, "workingDays": [1], "meetingDuration": 30},
        {"workingHours": {"start": "09:00", "end": "17:00"}, "workingDays": [7], "meetingDuration": 30},
        {"workingHours": {"start": "09:00", "end": "17:00"}, "workingDays": [1], "meetingDuration": 0},
    ]
    for payload in bad_payloads:
        assert client.put(url, json=payload).status_code == 422


def test_slots_for_working_and_non_working_days(client, contractor):
    _set_one_hour_window(client, contractor["id"])

    tuesday = client.get(f"/contractors/{contractor['id']}/slots", params={"date": TUESDAY.isoformat()})
    saturday = client.get(f"/contractors/{contractor['id']}/slots", params={"date": SATURDAY.isoformat()})

    assert tuesday.json()["slots"] == ["09:00", "09:30"]
    assert saturday.json()["slots"] == []


def test_slots_for_past_date_are_empty(client, contractor):
    response = client.get(f"/contractors/{contractor['id']}/slots", params={"date": "2024-05-10"})
    assert response.json()["slots"] == []


def test_propose_accept_flow(client, contractor, realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"

    proposed = _propose(client, contractor["id"], realtor["id"], notes="Kitchen walkthrough")
    assert proposed.status_code == 201
    request = proposed.json()
    assert request["status"] == "pending"
    assert request["endTime"] == "10:00"

    # a pending request does not block the slot
    slots = client.get(f"{base}/slots", params={"date": TUESDAY.isoformat()}).json()["slots"]
    assert slots == ["09:00", "09:30"]

    accepted = client.post(f"{base}/meeting-requests/{request['id']}/accept")
    assert accepted.status_code == 200
    booked = accepted.json()["bookedSlot"]
    assert booked["status"] == "confirmed"
    assert booked["realtorId"] == realtor["id"]
    assert booked["startTime"] == "09:30"
    assert booked["notes"] == "Kitchen walkthrough"

    assert client.get(f"{base}/meeting-requests").json() == []
    assert len(client.get(f"{base}/booked-slots").json()) == 1
    slots = client.get(f"{base}/slots", params={"date": TUESDAY.isoformat()}).json()["slots"]
    assert slots == ["09:00"]

    again = client.post(f"{base}/meeting-requests/{request['id']}/accept")
    assert again.status_code == 404


def test_decline_keeps_request_visible(client, contractor, realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"
    request = _propose(client, contractor["id"], realtor["id"]).json()

    declined = client.post(f"{base}/meeting-requests/{request['id']}/decline")

    assert declined.status_code == 200
    assert declined.json()["status"] == "declined"
    assert declined.json()["respondedAt"] is not None
    assert client.get(f"{base}/meeting-requests/{request['id']}").json()["status"] == "declined"
    assert client.get(f"{base}/booked-slots").json() == []
    assert client.post(f"{base}/meeting-requests/{request['id']}/accept").status_code == 400
    assert [r["id"] for r in client.get(f"{base}/meeting-requests?status=declined").json()] == [
        request["id"]
    ]


def test_unknown_request_ids_are_404(client, contractor):
    base = f"/contractors/{contractor['id']}/meeting-requests/missing"
    assert client.post(f"{base}/accept").status_code == 404
    assert client.post(f"{base}/decline").status_code == 404
    assert client.patch(f"{base}/notes", json={"notes": "x"}).status_code == 404


def test_two_realtors_same_slot_first_acceptance_wins(client, contractor, realtor, other_realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"
    first = _propose(client, contractor["id"], realtor["id"]).json()
    second = _propose(client, contractor["id"], other_realtor["id"]).json()

    assert client.post(f"{base}/meeting-requests/{first['id']}/accept").status_code == 200
    conflict = client.post(f"{base}/meeting-requests/{second['id']}/accept")

    assert conflict.status_code == 409
    assert client.get(f"{base}/meeting-requests/{second['id']}").json()["status"] == "pending"
    assert client.post(f"{base}/meeting-requests/{second['id']}/decline").status_code == 200


def test_proposal_rejections(client, contractor, realtor):
    _set_one_hour_window(client, contractor["id"])

    assert _propose(client, contractor["id"], realtor["id"], start_time="09:15").status_code == 409
    assert _propose(client, contractor["id"], realtor["id"], on_date=SATURDAY).status_code == 409
    assert _propose(client, contractor["id"], realtor["id"], start_time="25:00").status_code == 422

    assert _propose(client, contractor["id"], realtor["id"]).status_code == 201
    duplicate = _propose(client, contractor["id"], realtor["id"])
    assert duplicate.status_code == 409


def test_only_realtors_can_propose(client, contractor):
    _set_one_hour_window(client, contractor["id"])
    assert _propose(client, contractor["id"], contractor["id"]).status_code == 400
    assert _propose(client, contractor["id"], "ghost").status_code == 404


def test_booking_horizon_is_enforced(client, contractor, realtor):
    response = client.post(
        f"/contractors/{contractor['id']}/bookings",
        json={"realtorId": realtor["id"], "date": "2024-07-02", "startTime": "09:00"},
    )
    assert response.status_code == 409


def test_direct_booking_accepts_iso_timestamps(client, contractor, realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"

    response = client.post(
        f"{base}/bookings",
        json={"realtorId": realtor["id"], "date": "2024-05-14T00:00:00.000Z", "startTime": "09:00"},
    )

    assert response.status_code == 201
    slot = response.json()["bookedSlot"]
    assert slot["date"] == "2024-05-14"
    assert slot["requestId"]
    assert client.get(f"{base}/meeting-requests").json() == []

    taken = client.post(
        f"{base}/bookings",
        json={"realtorId": realtor["id"], "date": "2024-05-14", "startTime": "09:00"},
    )
    assert taken.status_code == 409


def test_notes_updates(client, contractor, realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"
    request = _propose(client, contractor["id"], realtor["id"], start_time="09:00").json()

    updated = client.patch(f"{base}/meeting-requests/{request['id']}/notes", json={"notes": "bring samples"})
    assert updated.json()["notes"] == "bring samples"

    client.post(f"{base}/meeting-requests/{request['id']}/accept")
    slot = client.patch(f"{base}/booked-slots/2024-05-14/09:00/notes", json={"notes": "gate code 42"})
    assert slot.status_code == 200
    assert slot.json()["notes"] == "gate code 42"
    assert client.get(f"{base}/availability").json()["bookedSlots"][0]["notes"] == "gate code 42"

    missing = client.patch(f"{base}/booked-slots/2024-05-14/09:30/notes", json={"notes": "x"})
    assert missing.status_code == 404
    malformed = client.patch(f"{base}/booked-slots/2024-05-14/9am/notes", json={"notes": "x"})
    assert malformed.status_code == 400


def test_schedule_merges_requests_and_bookings(client, contractor, realtor, other_realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"
    late = _propose(client, contractor["id"], realtor["id"], start_time="09:30").json()
    early = _propose(client, contractor["id"], other_realtor["id"], start_time="09:00").json()
    client.post(f"{base}/meeting-requests/{early['id']}/accept")

    schedule = client.get(f"{base}/schedule").json()

    assert [(e["startTime"], e["status"]) for e in schedule] == [
        ("09:00", "confirmed"),
        ("09:30", "pending"),
    ]
    assert schedule[1]["requestId"] == late["id"]


def test_user_directory(client, contractor, realtor):
    contractors = client.get("/users", params={"role": "contractor"}).json()
    assert [u["id"] for u in contractors] == [contractor["id"]]
    assert client.get(f"/users/{realtor['id']}").json()["role"] == "realtor"
    assert client.get("/users/missing").status_code == 404
    assert client.get("/users", params={"role": "plumber"}).status_code == 400

    duplicate = client.post(
        "/users", json={"name": "Emma", "email": "EMMA@homes.com", "role": "realtor"}
    )
    assert duplicate.status_code == 409


def test_late_evening_slots_can_all_be_requested(client, contractor, realtor):
    base = f"/contractors/{contractor['id']}"
    client.put(
        f"{base}/availability",
        json={
            "workingHours": {"start": "22:00", "end": "23:59"},
            "workingDays": [1, 2, 3, 4, 5],
            "meetingDuration": 60,
        },
    )

    slots = client.get(f"{base}/slots", params={"date": TUESDAY.isoformat()}).json()["slots"]

    assert slots == ["22:00"]
    for slot in slots:
        assert _propose(client, contractor["id"], realtor["id"], start_time=slot).status_code == 201
    assert _propose(client, contractor["id"], realtor["id"], start_time="23:00").status_code == 409


def test_request_that_already_started_cannot_be_accepted(client, contractor, realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"
    request = _propose(client, contractor["id"], realtor["id"], start_time="09:30", on_date=MONDAY).json()

    app.dependency_overrides[get_clock] = lambda: (lambda: datetime(2024, 5, 13, 10, 0))
    late = client.post(f"{base}/meeting-requests/{request['id']}/accept")

    assert late.status_code == 400
    assert client.get(f"{base}/booked-slots").json() == []
    assert client.post(f"{base}/meeting-requests/{request['id']}/decline").status_code == 200


def test_concurrent_acceptances_only_one_commits(client, contractor, realtor, other_realtor):
    _set_one_hour_window(client, contractor["id"])
    base = f"/contractors/{contractor['id']}"
    first = _propose(client, contractor["id"], realtor["id"]).json()
    second = _propose(client, contractor["id"], other_realtor["id"]).json()

    winner_db, loser_db = SessionLocal(), SessionLocal()
    try:
        winner = SchedulingService(winner_db, clock=lambda: FIXED_NOW)
        loser = SchedulingService(loser_db, clock=lambda: FIXED_NOW)

        # the losing session reads the calendar before the winner commits
        stale = approval_service.accept_request(loser.load_calendar(contractor["id"]), second["id"])
        assert stale.ok
        winner.accept_request(contractor["id"], first["id"])

        with pytest.raises(HTTPException) as exc_info:
            loser._persist_booking(contractor["id"], stale)
        assert exc_info.value.status_code == 409
    finally:
        winner_db.close()
        loser_db.close()

    booked_slots = client.get(f"{base}/booked-slots").json()
    assert [(s["startTime"], s["realtorId"]) for s in booked_slots] == [("09:30", realtor["id"])]
    assert client.get(f"{base}/meeting-requests/{second['id']}").json()["status"] == "pending"
