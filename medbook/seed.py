"""
Demo data for local development

Run with ``python -m medbook.seed`` or start the API with SEED_DATABASE=true.
Every demo account uses the password ``test``.
"""

import logging
from datetime import date, time

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .models import (
    Appointment,
    AppointmentStatus,
    AvailabilityRule,
    ConsultationType,
    DoctorProfile,
    Review,
    User,
    UserRole,
)
from .security_utils import hash_password_bcrypt

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "test"

DEMO_DOCTORS = [
    {
        "email": "test@test.com",
        "first_name": "Karim",
        "last_name": "Benali",
        "phone": "+213555123456",
        "specialty": "Cardiologue",
        "license": "ALG123456",
        "address": "123 Rue Didouche Mourad",
        "city": "Alger",
        "bio": "Cardiologue expérimenté avec plus de 10 ans de pratique",
        "consultation_fee": 2000,
        # (day_of_week, start, end), 0 = Sunday
        "availability": [
            (1, time(9, 0), time(17, 0)),
            (2, time(9, 0), time(17, 0)),
            (3, time(9, 0), time(17, 0)),
            (4, time(9, 0), time(17, 0)),
            (5, time(9, 0), time(12, 0)),
        ],
    },
    {
        "email": "amina@test.com",
        "first_name": "Amina",
        "last_name": "Kadi",
        "phone": "+213555789123",
        "specialty": "Dermatologue",
        "license": "ALG789123",
        "address": "45 Boulevard Zirout Youcef",
        "city": "Oran",
        "bio": "Spécialiste en dermatologie esthétique et médicale",
        "consultation_fee": 2500,
        "availability": [
            (1, time(10, 0), time(18, 0)),
            (2, time(10, 0), time(18, 0)),
            (3, time(10, 0), time(18, 0)),
            (4, time(10, 0), time(18, 0)),
            (6, time(10, 0), time(15, 0)),
        ],
    },
]

DEMO_PATIENTS = [
    {"email": "patient@test.com", "first_name": "Ahmed", "last_name": "Mansouri", "phone": "+213555789012"},
    {"email": "sara@test.com", "first_name": "Sara", "last_name": "Boudiaf", "phone": "+213555456789"},
]

# (doctor index, patient index, date, time, status, type, notes)
DEMO_APPOINTMENTS = [
    (0, 0, date(2024, 3, 20), time(9, 0), AppointmentStatus.CONFIRMED, ConsultationType.IN_PERSON, "Consultation de routine"),
    (1, 0, date(2024, 3, 25), time(14, 30), AppointmentStatus.PENDING, ConsultationType.VIDEO, "Suivi traitement"),
    (0, 1, date(2024, 3, 21), time(11, 0), AppointmentStatus.CONFIRMED, ConsultationType.IN_PERSON, "Première consultation"),
]

# (doctor index, patient index, rating, comment)
DEMO_REVIEWS = [
    (0, 0, 5, "Excellent médecin, très professionnel et à l'écoute"),
    (1, 1, 5, "Très satisfaite de la consultation, je recommande"),
]


def seed_database(db: Session) -> bool:
    """
    Insert demo doctors, patients, appointments, reviews and availability.

    Does nothing when users already exist.

    Returns:
        True if data was inserted
    """
    if db.query(User.id).first():
        logger.info("Database already contains users - skipping seed")
        return False

    hashed_password = hash_password_bcrypt(DEMO_PASSWORD)

    try:
        doctors = []
        for entry in DEMO_DOCTORS:
            user = User(
                email=entry["email"],
                hashed_password=hashed_password,
                first_name=entry["first_name"],
                last_name=entry["last_name"],
                phone=entry["phone"],
                role=UserRole.DOCTOR.value,
            )
            profile = DoctorProfile(
                user=user,
                specialty=entry["specialty"],
                license=entry["license"],
                address=entry["address"],
                city=entry["city"],
                bio=entry["bio"],
                consultation_fee=entry["consultation_fee"],
            )
            profile.availability = [
                AvailabilityRule(day_of_week=day, start_time=start, end_time=end)
                for day, start, end in entry["availability"]
            ]
            db.add(profile)
            doctors.append(profile)

        patients = []
        for entry in DEMO_PATIENTS:
            user = User(hashed_password=hashed_password, role=UserRole.PATIENT.value, **entry)
            db.add(user)
            patients.append(user)

        for doctor_idx, patient_idx, day, slot_time, status, kind, notes in DEMO_APPOINTMENTS:
            db.add(
                Appointment(
                    doctor=doctors[doctor_idx],
                    patient=patients[patient_idx],
                    date=day,
                    time=slot_time,
                    status=status.value,
                    type=kind.value,
                    notes=notes,
                )
            )

        for doctor_idx, patient_idx, rating, comment in DEMO_REVIEWS:
            db.add(
                Review(
                    doctor=doctors[doctor_idx],
                    patient=patients[patient_idx],
                    rating=rating,
                    comment=comment,
                )
            )

        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"❌ Error seeding database: {e}")
        raise

    logger.info("🌱 Database seeded successfully")
    return True


if __name__ == "__main__":
    from .config import DATABASE_URL
    from .database import Database

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    database = Database(DATABASE_URL)
    database.create_all()
    session = database.session()
    try:
        seed_database(session)
    finally:
        session.close()
        database.dispose()
