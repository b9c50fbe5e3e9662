from datetime import date, time
from types import SimpleNamespace

import pytest

from medbook import rate_limiter
from medbook.models import Appointment, AvailabilityRule, DoctorProfile, Review, User
from medbook.rate_limiter import check_rate_limit
from medbook.seed import seed_database
from medbook.shared.validators import parse_calendar_date, parse_clock_time, validate_phone
from medbook.utils.sanitization import validate_and_sanitize_input


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_seed_loads_demo_data_once(db_session):
    assert seed_database(db_session) is True
    assert seed_database(db_session) is False

    assert db_session.query(User).count() == 4
    assert db_session.query(DoctorProfile).count() == 2
    assert db_session.query(Appointment).count() == 3
    assert db_session.query(Review).count() == 2
    assert db_session.query(AvailabilityRule).count() == 10


def test_seeded_accounts_can_log_in(client, db_session):
    seed_database(db_session)

    response = client.post("/auth/login", json={"email": "amina@test.com", "password": "test"})

    assert response.status_code == 200
    assert response.json()["userType"] == "doctor"


def test_seeded_doctor_slots(client, db_session):
    seed_database(db_session)
    karim = db_session.query(DoctorProfile).filter(DoctorProfile.specialty == "Cardiologue").one()

    # Friday 2025-06-06: 09:00 to 12:00
    response = client.get(f"/doctors/{karim.id}/slots", params={"date": "2025-06-06"})

    assert len(response.json()["slots"]) == 6


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("+213 555-12-34-56", "+213555123456"),
        ("00213555123456", "+213555123456"),
        ("(0555) 12 34 56", "0555123456"),
    ],
)
def test_validate_phone_normalizes(raw, expected):
    assert validate_phone(raw) == expected


@pytest.mark.parametrize("raw", ["1234", "+12345678901234567", "phone"])
def test_validate_phone_rejects(raw):
    with pytest.raises(ValueError):
        validate_phone(raw)


def test_parse_clock_time():
    assert parse_clock_time("09:30") == time(9, 30)
    assert parse_clock_time("09:30:45") == time(9, 30)
    assert parse_clock_time(time(9, 30, 12)) == time(9, 30)
    with pytest.raises(ValueError):
        parse_clock_time("9h30")


def test_parse_calendar_date():
    assert parse_calendar_date("2025-06-02") == date(2025, 6, 2)
    with pytest.raises(ValueError):
        parse_calendar_date("2025-02-30")


def test_sanitize_input():
    assert validate_and_sanitize_input("  <i>hi</i>\x07 ") == "&lt;i&gt;hi&lt;/i&gt;"
    assert validate_and_sanitize_input("   ") is None
    with pytest.raises(ValueError):
        validate_and_sanitize_input("x" * 11, max_length=10)


def test_memory_rate_limit_window():
    key = "test:127.0.0.1"

    results = [check_rate_limit(key, limit=2, window_seconds=60)[0] for _ in range(3)]

    assert results == [True, True, False]


def test_expired_rate_limit_counters_are_purged(monkeypatch):
    now = [1000]
    monkeypatch.setattr(rate_limiter, "time", SimpleNamespace(time=lambda: now[0]))

    check_rate_limit("login:10.0.0.1", limit=1, window_seconds=60)
    now[0] = 1100
    allowed, count, ttl = check_rate_limit("login:10.0.0.2", limit=1, window_seconds=60)

    assert (allowed, count, ttl) == (True, 1, 60)
    assert "login:10.0.0.1" not in rate_limiter.counters
    assert "login:10.0.0.2" in rate_limiter.counters
