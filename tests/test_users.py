import pytest

from medbook import storage
from medbook.domain.users import service as user_service
from medbook.models import User

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def fake_storage(monkeypatch):
    """Record R2 calls instead of hitting the network"""
    calls = {"put": [], "delete": []}

    monkeypatch.setattr(storage, "put_object", lambda key, body, content_type: calls["put"].append(key))
    monkeypatch.setattr(storage, "delete_object", lambda key: calls["delete"].append(key))
    monkeypatch.setattr(storage, "generate_presigned_url", lambda key: f"https://r2.example.com/{key}?sig=1")
    return calls


def upload(client, headers, content=PNG_BYTES, content_type="image/png", filename="me.png"):
    return client.post(
        "/users/profile-photo",
        files={"photo": (filename, content, content_type)},
        headers=headers,
    )


def test_me(client, doctor):
    response = client.get("/users/me", headers=doctor.headers)

    assert response.status_code == 200
    data = response.json()
    assert data["id"] == doctor.user_id
    assert data["userType"] == "doctor"
    assert data["photoUrl"] is None


def test_me_requires_token(client):
    assert client.get("/users/me").status_code == 401


def test_upload_profile_photo(client, db_session, patient, fake_storage):
    response = upload(client, patient.headers)

    assert response.status_code == 200
    [key] = fake_storage["put"]
    assert key.startswith(f"profile-photos/{patient.id}/")
    assert key.endswith(".png")
    assert response.json() == {"photoUrl": f"https://r2.example.com/{key}?sig=1"}

    db_session.expire_all()
    assert db_session.get(User, patient.id).photo_key == key
    assert client.get("/users/me", headers=patient.headers).json()["photoUrl"].startswith("https://r2.example.com/")


def test_new_photo_replaces_previous_object(client, patient, fake_storage):
    upload(client, patient.headers)
    upload(client, patient.headers, content_type="image/jpeg", filename="me.jpg")

    first_key, second_key = fake_storage["put"]
    assert fake_storage["delete"] == [first_key]
    assert second_key.endswith(".jpg")


def test_upload_rejects_non_image(client, patient, fake_storage):
    response = upload(client, patient.headers, content=b"%PDF-1.4", content_type="application/pdf", filename="cv.pdf")

    assert response.status_code == 400
    assert fake_storage["put"] == []


def test_upload_rejects_large_file(client, patient, fake_storage, monkeypatch):
    monkeypatch.setattr(user_service, "MAX_PHOTO_SIZE_BYTES", 16)

    response = upload(client, patient.headers)

    assert response.status_code == 400
    assert "exceeds" in response.json()["detail"]
    assert fake_storage["put"] == []


def test_upload_storage_failure(client, db_session, patient, monkeypatch):
    def failing_put(key, body, content_type):
        raise RuntimeError("bucket unavailable")

    monkeypatch.setattr(storage, "put_object", failing_put)

    response = upload(client, patient.headers)

    assert response.status_code == 500
    assert response.json()["detail"] == "Upload failed"
    db_session.expire_all()
    assert db_session.get(User, patient.id).photo_key is None


def test_delete_profile_photo(client, db_session, patient, fake_storage):
    upload(client, patient.headers)
    [key] = fake_storage["put"]

    response = client.delete("/users/profile-photo", headers=patient.headers)

    assert response.status_code == 200
    assert fake_storage["delete"] == [key]
    db_session.expire_all()
    assert db_session.get(User, patient.id).photo_key is None


def test_delete_without_photo(client, patient, fake_storage):
    response = client.delete("/users/profile-photo", headers=patient.headers)

    assert response.status_code == 404
