from datetime import timedelta

import pytest

from medbook.models import DoctorProfile, User
from medbook.security_utils import create_access_token, verify_access_token

from .conftest import TEST_PASSWORD


def patient_payload(**overrides):
    payload = {
        "email": "Ahmed.Mansouri@Example.com",
        "password": "motdepasse",
        "firstName": "Ahmed",
        "lastName": "Mansouri",
        "phone": "+213555789012",
        "userType": "patient",
    }
    payload.update(overrides)
    return payload


def doctor_payload(**overrides):
    payload = {
        "email": "karim@example.com",
        "password": "motdepasse",
        "firstName": "Karim",
        "lastName": "Benali",
        "userType": "doctor",
        "specialty": "Cardiologue",
        "license": "ALG123456",
        "city": "Alger",
    }
    payload.update(overrides)
    return payload


def test_register_patient_returns_usable_token(client, db_session):
    response = client.post("/auth/register", json=patient_payload())

    assert response.status_code == 201
    data = response.json()
    assert data["userType"] == "patient"

    me = client.get("/users/me", headers={"Authorization": f"Bearer {data['token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "ahmed.mansouri@example.com"


def test_register_doctor_creates_profile(client, db_session):
    response = client.post("/auth/register", json=doctor_payload())

    assert response.status_code == 201
    assert response.json()["userType"] == "doctor"

    user = db_session.query(User).filter(User.email == "karim@example.com").one()
    profile = db_session.query(DoctorProfile).filter(DoctorProfile.user_id == user.id).one()
    assert profile.specialty == "Cardiologue"
    assert [d["lastName"] for d in client.get("/doctors", params={"city": "alger"}).json()] == ["Benali"]


@pytest.mark.parametrize("missing", ["specialty", "license"])
def test_register_doctor_requires_professional_fields(client, db_session, missing):
    response = client.post("/auth/register", json=doctor_payload(**{missing: None}))

    assert response.status_code == 422
    assert db_session.query(User).count() == 0


def test_register_duplicate_email(client):
    client.post("/auth/register", json=patient_payload())

    response = client.post("/auth/register", json=patient_payload(email="ahmed.mansouri@example.com"))

    assert response.status_code == 409


@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "not-an-email"},
        {"password": "abc"},
        {"password": "é" * 40},
        {"userType": "admin"},
        {"firstName": "   "},
        {"phone": "abc"},
    ],
)
def test_register_validation(client, overrides):
    response = client.post("/auth/register", json=patient_payload(**overrides))

    assert response.status_code == 422


def test_login(client, patient):
    response = client.post("/auth/login", json={"email": patient.email, "password": TEST_PASSWORD})

    assert response.status_code == 200
    data = response.json()
    assert data["userType"] == "patient"
    assert verify_access_token(data["token"])["sub"] == str(patient.id)


def test_login_with_wrong_password(client, patient):
    response = client.post("/auth/login", json={"email": patient.email, "password": "wrong"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_with_unknown_email(client):
    response = client.post("/auth/login", json={"email": "ghost@example.com", "password": "whatever"})

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_is_rate_limited(client):
    payload = {"email": "ghost@example.com", "password": "whatever"}
    for _ in range(10):
        assert client.post("/auth/login", json=payload).status_code == 401

    response = client.post("/auth/login", json=payload)

    assert response.status_code == 429
    assert "Retry-After" in response.headers


def test_token_claims():
    token = create_access_token(7, "doctor")

    payload = verify_access_token(token)

    assert payload["sub"] == "7"
    assert payload["role"] == "doctor"


def test_expired_token_is_rejected(client):
    token = create_access_token(1, "patient", expires_delta=timedelta(seconds=-1))

    assert verify_access_token(token) is None
    response = client.get("/appointments", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Token is not valid"


def test_token_for_deleted_user_is_rejected(client):
    token = create_access_token(12345, "patient")

    response = client.get("/appointments", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 401


def test_doctor_token_without_profile(client, db_session, password_hash):
    user = User(
        email="orphan@example.com",
        hashed_password=password_hash,
        first_name="Orphan",
        last_name="Doctor",
        role="doctor",
    )
    db_session.add(user)
    db_session.commit()

    response = client.get(
        "/appointments",
        headers={"Authorization": f"Bearer {create_access_token(user.id, user.role)}"},
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Doctor profile not found"
