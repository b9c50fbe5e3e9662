"""Doctor service - search, dashboard, profile settings, consultation requests and reviews"""

import logging
from datetime import datetime
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import DoctorActor, PatientActor
from ...models import AppointmentStatus, DoctorProfile, Review, User, UserRole
from ..appointments.repository import AppointmentRepository
from ..appointments.service import serialize_appointment
from .repository import DoctorRepository
from .schemas import ConsultationAction, DoctorProfileUpdate, ReviewCreate

logger = logging.getLogger(__name__)

DECISION_STATUS = {
    ConsultationAction.ACCEPT: AppointmentStatus.CONFIRMED,
    ConsultationAction.REJECT: AppointmentStatus.CANCELLED,
}


def serialize_doctor(doctor: DoctorProfile, user: User, rating=0, reviews_count=0) -> dict:
    return {
        "id": doctor.id,
        "userId": user.id,
        "firstName": user.first_name,
        "lastName": user.last_name,
        "email": user.email,
        "phone": user.phone,
        "specialty": doctor.specialty,
        "license": doctor.license,
        "address": doctor.address,
        "city": doctor.city,
        "bio": doctor.bio,
        "consultationFee": doctor.consultation_fee,
        "rating": round(float(rating or 0), 1),
        "reviewsCount": int(reviews_count or 0),
    }


def serialize_review(review: Review) -> dict:
    return {
        "id": review.id,
        "doctorId": review.doctor_id,
        "patientId": review.patient_id,
        "rating": review.rating,
        "comment": review.comment,
        "patientFirstName": review.patient.first_name if review.patient else None,
        "patientLastName": review.patient.last_name if review.patient else None,
        "createdAt": review.created_at.isoformat() if review.created_at else None,
    }


class DoctorService:
    """Service layer for doctor business logic"""

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.repo = DoctorRepository()
        self.appointments = AppointmentRepository()
        self.clock = clock or datetime.now

    # Public listing
    def search_doctors(self, search: Optional[str] = None, city: Optional[str] = None) -> list[dict]:
        rows = self.repo.search_doctors(self.db, search, city)
        logger.debug(f"🔍 Doctor search search={search!r} city={city!r}: {len(rows)} results")
        return [serialize_doctor(*row) for row in rows]

    def get_doctor(self, doctor_id: int) -> dict:
        row = self.repo.get_doctor_row(self.db, doctor_id)
        if not row:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return serialize_doctor(*row)

    # Dashboard
    def get_dashboard(self, doctor: DoctorActor) -> dict:
        """Profile with today's and upcoming appointments and recent reviews"""
        now = self.clock()
        today = now.date()

        profile = self.get_doctor(doctor.doctor_id)
        today_appointments = self.appointments.list_for_doctor_on(self.db, doctor.doctor_id, today)
        upcoming = self.appointments.list_upcoming_for_doctor(
            self.db, doctor.doctor_id, today, now.time().replace(microsecond=0)
        )
        reviews = self.repo.get_reviews(self.db, doctor.doctor_id, limit=5)

        return {
            "profile": profile,
            "todayAppointments": [serialize_appointment(a, UserRole.DOCTOR) for a in today_appointments],
            "upcomingAppointments": [serialize_appointment(a, UserRole.DOCTOR) for a in upcoming],
            "reviews": [serialize_review(r) for r in reviews],
        }

    def update_profile(self, doctor: DoctorActor, data: DoctorProfileUpdate) -> dict:
        profile = self.repo.get_doctor(self.db, doctor.doctor_id)
        if not profile:
            raise HTTPException(status_code=404, detail="Doctor profile not found")

        updates = {}
        if data.specialty is not None:
            updates["specialty"] = data.specialty
        if data.address is not None:
            updates["address"] = data.address
        if data.city is not None:
            updates["city"] = data.city
        if data.bio is not None:
            updates["bio"] = data.bio
        if data.consultationFee is not None:
            updates["consultation_fee"] = data.consultationFee

        user_updates = {"phone": data.phone}

        self.repo.update_profile(self.db, profile, user_updates, **updates)
        logger.info(f"✅ Doctor {doctor.doctor_id} profile updated")
        return {"message": "Profile updated successfully", "profile": self.get_doctor(doctor.doctor_id)}

    # Consultation requests
    def get_consultation_requests(self, doctor: DoctorActor) -> list[dict]:
        pending = self.repo.get_pending_requests(self.db, doctor.doctor_id)
        return [serialize_appointment(a, UserRole.DOCTOR) for a in pending]

    def respond_to_request(
        self, doctor: DoctorActor, appointment_id: int, action: ConsultationAction
    ) -> dict:
        """Accept (confirm) or reject (cancel) a pending request owned by the doctor"""
        appointment = self.repo.get_pending_request(self.db, doctor.doctor_id, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Consultation request not found")

        status = DECISION_STATUS[action]
        self.appointments.update_status(self.db, appointment, status.value)
        logger.info(f"📋 Doctor {doctor.doctor_id} {action.value}ed request {appointment_id}")

        return {
            "message": f"Consultation request {action.value}ed",
            "id": appointment.id,
            "status": status.value,
        }

    # Reviews
    def get_reviews(self, doctor_id: int) -> list[dict]:
        if not self.repo.get_doctor(self.db, doctor_id):
            raise HTTPException(status_code=404, detail="Doctor not found")
        return [serialize_review(r) for r in self.repo.get_reviews(self.db, doctor_id)]

    def create_review(self, doctor_id: int, data: ReviewCreate, patient: PatientActor) -> dict:
        if not self.repo.get_doctor(self.db, doctor_id):
            raise HTTPException(status_code=404, detail="Doctor not found")
        if not self.repo.has_completed_appointment(self.db, doctor_id, patient.user_id):
            logger.info(f"⛔ Patient {patient.user_id} has no completed appointment with doctor {doctor_id}")
            raise HTTPException(
                status_code=403,
                detail="Only patients with a completed appointment can review this doctor",
            )

        review = self.repo.create_review(
            self.db,
            doctor_id=doctor_id,
            patient_id=patient.user_id,
            rating=data.rating,
            comment=data.comment,
        )
        logger.info(f"⭐ Patient {patient.user_id} reviewed doctor {doctor_id}: {data.rating}/5")
        return serialize_review(review)
