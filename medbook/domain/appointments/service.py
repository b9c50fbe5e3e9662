"""Appointment service - Booking and status transitions"""

import logging

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...auth import Actor, PatientActor
from ...models import Appointment, AppointmentStatus, UserRole
from .repository import AppointmentRepository
from .schemas import AppointmentCreate

logger = logging.getLogger(__name__)

SLOT_TAKEN_MESSAGE = "This time slot is already booked"


def serialize_appointment(appointment: Appointment, view: UserRole) -> dict:
    """Appointment as a dict joined with the other party's identity"""
    data = {
        "id": appointment.id,
        "doctorId": appointment.doctor_id,
        "patientId": appointment.patient_id,
        "date": appointment.date.isoformat(),
        "time": appointment.time.strftime("%H:%M"),
        "status": appointment.status,
        "type": appointment.type,
        "notes": appointment.notes,
        "createdAt": appointment.created_at.isoformat() if appointment.created_at else None,
    }

    if view is UserRole.DOCTOR:
        patient = appointment.patient
        data.update(
            {
                "patientFirstName": patient.first_name if patient else None,
                "patientLastName": patient.last_name if patient else None,
                "patientPhone": patient.phone if patient else None,
            }
        )
    else:
        doctor = appointment.doctor
        doctor_user = doctor.user if doctor else None
        data.update(
            {
                "doctorFirstName": doctor_user.first_name if doctor_user else None,
                "doctorLastName": doctor_user.last_name if doctor_user else None,
                "doctorPhone": doctor_user.phone if doctor_user else None,
                "specialty": doctor.specialty if doctor else None,
                "consultationFee": doctor.consultation_fee if doctor else None,
            }
        )
    return data


def is_party_to(actor: Actor, appointment: Appointment) -> bool:
    """True when the actor is the appointment's patient or its doctor"""
    if actor.role is UserRole.DOCTOR:
        return appointment.doctor_id == actor.doctor_id
    return appointment.patient_id == actor.user_id


class AppointmentService:
    """Service layer for appointment business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AppointmentRepository()

    def get_appointment_for(self, actor: Actor, appointment_id: int, action: str) -> Appointment:
        """Load an appointment the actor is allowed to act on"""
        appointment = self.repo.get_appointment(self.db, appointment_id)
        if not appointment:
            raise HTTPException(status_code=404, detail="Appointment not found")

        if not is_party_to(actor, appointment):
            logger.warning(
                f"⚠️ User {actor.user_id} tried to {action} appointment {appointment_id} they are not part of"
            )
            raise HTTPException(
                status_code=403, detail=f"Not authorized to {action} this appointment"
            )
        return appointment

    def create_appointment(self, data: AppointmentCreate, patient: PatientActor) -> Appointment:
        """Book a slot for the patient; the slot must not hold a live appointment"""
        logger.info(
            f"📥 Booking request: patient {patient.user_id} → doctor {data.doctorId} "
            f"on {data.date} at {data.time:%H:%M}"
        )

        if not self.repo.get_doctor(self.db, data.doctorId):
            raise HTTPException(status_code=404, detail="Doctor not found")

        if self.repo.find_active_at(self.db, data.doctorId, data.date, data.time):
            logger.info(f"⛔ Slot already booked for doctor {data.doctorId} on {data.date} {data.time:%H:%M}")
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

        try:
            appointment = self.repo.create_appointment(
                self.db,
                doctor_id=data.doctorId,
                patient_id=patient.user_id,
                date=data.date,
                time=data.time,
                status=AppointmentStatus.PENDING.value,
                type=data.type.value,
                notes=data.notes,
            )
        except IntegrityError as e:
            # Lost a race with a concurrent booking for the same slot
            self.db.rollback()
            logger.warning(f"⚠️ Concurrent booking rejected by unique slot index: {e.orig}")
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE) from e

        logger.info(f"✅ Appointment {appointment.id} created (pending)")
        return appointment

    def list_appointments(self, actor: Actor) -> list[dict]:
        """Appointments of the actor, newest first"""
        if actor.role is UserRole.DOCTOR:
            appointments = self.repo.list_for_doctor(self.db, actor.doctor_id)
        else:
            appointments = self.repo.list_for_patient(self.db, actor.user_id)
        return [serialize_appointment(a, actor.role) for a in appointments]

    def update_status(self, actor: Actor, appointment_id: int, status: AppointmentStatus) -> dict:
        """Move an appointment to any valid status"""
        appointment = self.get_appointment_for(actor, appointment_id, "update")
        previous = appointment.status

        # A cancelled appointment can only come back if nobody took its slot meanwhile
        if previous == AppointmentStatus.CANCELLED.value and status is not AppointmentStatus.CANCELLED:
            if self.repo.find_active_at(
                self.db, appointment.doctor_id, appointment.date, appointment.time, exclude_id=appointment.id
            ):
                raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE)

        try:
            self.repo.update_status(self.db, appointment, status.value)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Status change rejected by unique slot index: {e.orig}")
            raise HTTPException(status_code=409, detail=SLOT_TAKEN_MESSAGE) from e

        logger.info(f"🔄 Appointment {appointment_id}: {previous} → {status.value} by user {actor.user_id}")
        return {"message": "Appointment status updated successfully", "status": status.value}

    def delete_appointment(self, actor: Actor, appointment_id: int) -> dict:
        appointment = self.get_appointment_for(actor, appointment_id, "delete")
        self.repo.delete_appointment(self.db, appointment)
        logger.info(f"🗑️ Appointment {appointment_id} deleted by user {actor.user_id}")
        return {"message": "Appointment deleted successfully"}
