from datetime import date, datetime, time

from medbook.models import AppointmentStatus, AvailabilityRule, ConsultationType
from medbook.shared.clock import get_clock

NEXT_MONDAY = "2025-06-09"


def slot_map(response):
    return {s["time"]: s["available"] for s in response.json()["slots"]}


def test_slots_for_working_day(client, doctor):
    response = client.get(f"/doctors/{doctor.id}/slots", params={"date": NEXT_MONDAY})

    assert response.status_code == 200
    data = response.json()
    assert data["doctorId"] == doctor.id
    assert data["date"] == NEXT_MONDAY
    assert [s["time"] for s in data["slots"]] == ["09:00", "09:30", "10:00", "10:30", "11:00", "11:30"]
    assert all(s["available"] for s in data["slots"])


def test_slots_today_hide_started_times(client, doctor):
    # Clock is pinned to Monday 2025-06-02 10:15
    response = client.get(f"/doctors/{doctor.id}/slots", params={"date": "2025-06-02"})

    slots = slot_map(response)
    assert slots["10:00"] is False
    assert slots["10:30"] is True


def test_booked_slot_is_unavailable(client, doctor, patient, make_appointment):
    make_appointment(doctor, patient, day=date(2025, 6, 9), slot_time=time(10, 0))

    slots = slot_map(client.get(f"/doctors/{doctor.id}/slots", params={"date": NEXT_MONDAY}))

    assert slots["10:00"] is False
    assert slots["09:30"] is True


def test_cancelled_appointment_frees_slot(client, doctor, patient, make_appointment):
    make_appointment(
        doctor, patient, day=date(2025, 6, 9), slot_time=time(10, 0), status=AppointmentStatus.CANCELLED
    )

    slots = slot_map(client.get(f"/doctors/{doctor.id}/slots", params={"date": NEXT_MONDAY}))

    assert slots["10:00"] is True


def test_slots_outside_booking_window_are_empty(client, doctor):
    before = client.get(f"/doctors/{doctor.id}/slots", params={"date": "2025-05-26"})
    after = client.get(f"/doctors/{doctor.id}/slots", params={"date": "2025-12-01"})

    assert before.json()["slots"] == []
    assert after.json()["slots"] == []


def test_slots_unknown_doctor(client):
    response = client.get("/doctors/999/slots", params={"date": NEXT_MONDAY})

    assert response.status_code == 404
    assert response.json()["detail"] == "Doctor not found"


def test_slots_invalid_date(client, doctor):
    response = client.get(f"/doctors/{doctor.id}/slots", params={"date": "09/06/2025"})

    assert response.status_code == 422


def test_get_availability_lists_rules_and_bookings(client, doctor, make_patient, make_appointment):
    patient = make_patient(first_name="Sara", last_name="Boudiaf")
    make_appointment(doctor, patient, day=date(2025, 6, 9), slot_time=time(9, 30), kind=ConsultationType.VIDEO)
    make_appointment(doctor, patient, day=date(2025, 6, 9), slot_time=time(10, 0), status=AppointmentStatus.CANCELLED)
    # Before today, outside the window
    make_appointment(doctor, patient, day=date(2025, 5, 26), slot_time=time(9, 0))

    response = client.get(f"/doctors/{doctor.id}/availability")

    assert response.status_code == 200
    data = response.json()
    assert data["availability"] == [{"dayOfWeek": 1, "startTime": "09:00", "endTime": "12:00"}]
    assert data["bookedSlots"] == [
        {"date": "2025-06-09", "time": "09:30", "type": "video", "patientName": "Sara Boudiaf"}
    ]


def test_get_availability_unknown_doctor(client):
    assert client.get("/doctors/42/availability").status_code == 404


def test_replace_availability(client, doctor, db_session):
    payload = {
        "availability": [
            {"dayOfWeek": 3, "startTime": "14:00", "endTime": "16:00"},
            {"dayOfWeek": 2, "startTime": "09:00:00", "endTime": "10:00"},
        ]
    }

    response = client.put("/doctors/availability", json=payload, headers=doctor.headers)

    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Availability updated successfully"
    assert data["availability"] == [
        {"dayOfWeek": 2, "startTime": "09:00", "endTime": "10:00"},
        {"dayOfWeek": 3, "startTime": "14:00", "endTime": "16:00"},
    ]

    db_session.expire_all()
    rules = db_session.query(AvailabilityRule).filter(AvailabilityRule.doctor_id == doctor.id).all()
    assert {r.day_of_week for r in rules} == {2, 3}

    # Monday no longer has slots
    slots = client.get(f"/doctors/{doctor.id}/slots", params={"date": NEXT_MONDAY}).json()["slots"]
    assert slots == []


def test_replace_availability_with_empty_list(client, doctor):
    response = client.put("/doctors/availability", json={"availability": []}, headers=doctor.headers)

    assert response.status_code == 200
    assert response.json()["availability"] == []


def test_replace_availability_rejects_inverted_range(client, doctor):
    payload = {"availability": [{"dayOfWeek": 1, "startTime": "12:00", "endTime": "09:00"}]}

    response = client.put("/doctors/availability", json=payload, headers=doctor.headers)

    assert response.status_code == 422


def test_replace_availability_rejects_bad_day(client, doctor):
    payload = {"availability": [{"dayOfWeek": 7, "startTime": "09:00", "endTime": "12:00"}]}

    response = client.put("/doctors/availability", json=payload, headers=doctor.headers)

    assert response.status_code == 422


def test_invalid_rule_keeps_existing_rules(client, doctor):
    payload = {
        "availability": [
            {"dayOfWeek": 2, "startTime": "09:00", "endTime": "10:00"},
            {"dayOfWeek": 3, "startTime": "25:00", "endTime": "26:00"},
        ]
    }

    assert client.put("/doctors/availability", json=payload, headers=doctor.headers).status_code == 422

    rules = client.get(f"/doctors/{doctor.id}/availability").json()["availability"]
    assert rules == [{"dayOfWeek": 1, "startTime": "09:00", "endTime": "12:00"}]


def test_replace_availability_requires_doctor(client, patient):
    payload = {"availability": [{"dayOfWeek": 1, "startTime": "09:00", "endTime": "12:00"}]}

    response = client.put("/doctors/availability", json=payload, headers=patient.headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Only doctors can perform this action"


def test_replace_availability_requires_token(client):
    response = client.put("/doctors/availability", json={"availability": []})

    assert response.status_code == 401
    assert response.json()["detail"] == "No token, authorization denied"


def test_bookable_dates(client, make_doctor):
    doctor = make_doctor(
        availability=((1, time(9, 0), time(12, 0)), (3, time(14, 0), time(16, 0)))
    )

    response = client.get(f"/doctors/{doctor.id}/bookable-dates", params={"days": 7})

    assert response.status_code == 200
    assert response.json() == {"doctorId": doctor.id, "dates": ["2025-06-02", "2025-06-04"]}


def test_bookable_dates_match_slot_window_near_short_month(app, client, make_doctor):
    app.dependency_overrides[get_clock] = lambda: (lambda: datetime(2025, 11, 30, 8, 0))
    doctor = make_doctor(availability=tuple((day, time(9, 0), time(10, 0)) for day in range(7)))

    dates = client.get(f"/doctors/{doctor.id}/bookable-dates", params={"days": 92}).json()["dates"]

    assert dates[-1] == "2026-02-28"
    assert "2026-03-01" not in dates
    last_slots = client.get(f"/doctors/{doctor.id}/slots", params={"date": dates[-1]}).json()["slots"]
    assert [s["time"] for s in last_slots] == ["09:00", "09:30"]
