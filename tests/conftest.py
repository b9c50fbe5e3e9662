import itertools
from datetime import date, datetime, time
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from medbook.database import Database
from medbook.main import create_app
from medbook.models import (
    Appointment,
    AppointmentStatus,
    AvailabilityRule,
    ConsultationType,
    DoctorProfile,
    User,
    UserRole,
)
from medbook.rate_limiter import reset_rate_limits
from medbook.security_utils import create_access_token, hash_password_bcrypt
from medbook.shared.clock import get_clock

# Monday 2 June 2025, 10:15
FIXED_NOW = datetime(2025, 6, 2, 10, 15)
TEST_PASSWORD = "secret123"


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role)}"}


@pytest.fixture(scope="session")
def password_hash():
    return hash_password_bcrypt(TEST_PASSWORD)


@pytest.fixture(autouse=True)
def clear_rate_limits():
    reset_rate_limits()
    yield
    reset_rate_limits()


@pytest.fixture
def database():
    db = Database("sqlite://", slow_query_logging=False)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def db_session(database):
    session = database.session()
    yield session
    session.close()


@pytest.fixture
def app(database):
    application = create_app(database=database)
    application.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def make_patient(db_session, password_hash):
    counter = itertools.count(1)

    def _make(first_name="Ahmed", last_name="Mansouri", phone="+213555789012"):
        n = next(counter)
        user = User(
            email=f"patient{n}@example.com",
            hashed_password=password_hash,
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=UserRole.PATIENT.value,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return SimpleNamespace(user=user, id=user.id, email=user.email, headers=auth_header(user))

    return _make


@pytest.fixture
def make_doctor(db_session, password_hash):
    counter = itertools.count(1)

    def _make(
        first_name="Karim",
        last_name="Benali",
        specialty="Cardiologue",
        city="Alger",
        consultation_fee=2000,
        availability=((1, time(9, 0), time(12, 0)),),
    ):
        n = next(counter)
        user = User(
            email=f"doctor{n}@example.com",
            hashed_password=password_hash,
            first_name=first_name,
            last_name=last_name,
            phone="+213555123456",
            role=UserRole.DOCTOR.value,
        )
        profile = DoctorProfile(
            user=user,
            specialty=specialty,
            license=f"ALG{n:06d}",
            address="123 Rue Didouche Mourad",
            city=city,
            consultation_fee=consultation_fee,
        )
        profile.availability = [
            AvailabilityRule(day_of_week=day, start_time=start, end_time=end)
            for day, start, end in availability
        ]
        db_session.add(profile)
        db_session.commit()
        db_session.refresh(profile)
        return SimpleNamespace(
            user=user,
            id=profile.id,
            user_id=user.id,
            profile=profile,
            headers=auth_header(user),
        )

    return _make


@pytest.fixture
def make_appointment(db_session):
    def _make(
        doctor,
        patient,
        day=date(2025, 6, 9),
        slot_time=time(9, 0),
        status=AppointmentStatus.PENDING,
        kind=ConsultationType.IN_PERSON,
        notes=None,
    ):
        appointment = Appointment(
            doctor_id=doctor.id,
            patient_id=patient.id,
            date=day,
            time=slot_time,
            status=status.value,
            type=kind.value,
            notes=notes,
        )
        db_session.add(appointment)
        db_session.commit()
        db_session.refresh(appointment)
        return appointment

    return _make


@pytest.fixture
def doctor(make_doctor):
    return make_doctor()


@pytest.fixture
def patient(make_patient):
    return make_patient()
