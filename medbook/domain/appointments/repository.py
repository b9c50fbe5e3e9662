"""Appointment repository - Database operations for appointments"""

from datetime import date, time
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Appointment, AppointmentStatus, DoctorProfile


class AppointmentRepository:
    """Repository for appointment database operations"""

    @staticmethod
    def get_appointment(db: Session, appointment_id: int) -> Optional[Appointment]:
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.patient), joinedload(Appointment.doctor))
            .filter(Appointment.id == appointment_id)
            .first()
        )

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[DoctorProfile]:
        return db.query(DoctorProfile).filter(DoctorProfile.id == doctor_id).first()

    @staticmethod
    def find_active_at(
        db: Session,
        doctor_id: int,
        day: date,
        slot_time: time,
        exclude_id: Optional[int] = None,
    ) -> Optional[Appointment]:
        """Non-cancelled appointment occupying (doctor, date, time), if any"""
        query = db.query(Appointment).filter(
            Appointment.doctor_id == doctor_id,
            Appointment.date == day,
            Appointment.time == slot_time,
            Appointment.status != AppointmentStatus.CANCELLED.value,
        )
        if exclude_id is not None:
            query = query.filter(Appointment.id != exclude_id)
        return query.first()

    @staticmethod
    def create_appointment(db: Session, **appointment_data) -> Appointment:
        """Insert a new appointment; IntegrityError propagates to the caller"""
        appointment = Appointment(**appointment_data)
        db.add(appointment)
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def update_status(db: Session, appointment: Appointment, status: str) -> Appointment:
        appointment.status = status
        db.commit()
        db.refresh(appointment)
        return appointment

    @staticmethod
    def delete_appointment(db: Session, appointment: Appointment) -> None:
        db.delete(appointment)
        db.commit()

    # Listing Methods
    @staticmethod
    def list_for_doctor(db: Session, doctor_id: int) -> list[Appointment]:
        """Doctor's appointments with patient identity loaded, newest first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.patient))
            .filter(Appointment.doctor_id == doctor_id)
            .order_by(Appointment.date.desc(), Appointment.time.desc())
            .all()
        )

    @staticmethod
    def list_for_patient(db: Session, patient_id: int) -> list[Appointment]:
        """Patient's appointments with doctor profile and identity loaded"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.doctor).joinedload(DoctorProfile.user))
            .filter(Appointment.patient_id == patient_id)
            .order_by(Appointment.date.desc(), Appointment.time.desc())
            .all()
        )

    @staticmethod
    def list_for_doctor_on(db: Session, doctor_id: int, day: date) -> list[Appointment]:
        """Doctor's appointments on one date, earliest first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.patient))
            .filter(Appointment.doctor_id == doctor_id, Appointment.date == day)
            .order_by(Appointment.time.asc())
            .all()
        )

    @staticmethod
    def list_upcoming_for_doctor(
        db: Session, doctor_id: int, today: date, now_time: time, limit: int = 10
    ) -> list[Appointment]:
        """Appointments after now (later today or any later date), earliest first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.patient))
            .filter(
                Appointment.doctor_id == doctor_id,
                (Appointment.date > today)
                | ((Appointment.date == today) & (Appointment.time > now_time)),
            )
            .order_by(Appointment.date.asc(), Appointment.time.asc())
            .limit(limit)
            .all()
        )

    @staticmethod
    def list_upcoming_for_patient(db: Session, patient_id: int, today: date) -> list[Appointment]:
        """Appointments dated today or later, earliest first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.doctor).joinedload(DoctorProfile.user))
            .filter(Appointment.patient_id == patient_id, Appointment.date >= today)
            .order_by(Appointment.date.asc(), Appointment.time.asc())
            .all()
        )

    @staticmethod
    def list_past_for_patient(
        db: Session, patient_id: int, today: date, limit: int = 5
    ) -> list[Appointment]:
        """Appointments dated before today, most recent first"""
        return (
            db.query(Appointment)
            .options(joinedload(Appointment.doctor).joinedload(DoctorProfile.user))
            .filter(Appointment.patient_id == patient_id, Appointment.date < today)
            .order_by(Appointment.date.desc(), Appointment.time.desc())
            .limit(limit)
            .all()
        )
