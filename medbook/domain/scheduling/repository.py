"""Availability repository - Database operations for weekly rules and booked slots"""

from datetime import date
from typing import Optional

from sqlalchemy.orm import Session

from ...models import Appointment, AppointmentStatus, AvailabilityRule, DoctorProfile, User


class AvailabilityRepository:
    """Repository for availability database operations"""

    @staticmethod
    def get_doctor(db: Session, doctor_id: int) -> Optional[DoctorProfile]:
        return db.query(DoctorProfile).filter(DoctorProfile.id == doctor_id).first()

    @staticmethod
    def get_rules(db: Session, doctor_id: int) -> list[AvailabilityRule]:
        """Get weekly rules ordered by day and start time"""
        return (
            db.query(AvailabilityRule)
            .filter(AvailabilityRule.doctor_id == doctor_id)
            .order_by(AvailabilityRule.day_of_week.asc(), AvailabilityRule.start_time.asc())
            .all()
        )

    @staticmethod
    def get_booked_slots(db: Session, doctor_id: int, start: date, end: date) -> list[tuple]:
        """
        Get non-cancelled appointments between start and end (inclusive).
        Returns (date, time, type, first_name, last_name) rows.
        """
        return (
            db.query(
                Appointment.date,
                Appointment.time,
                Appointment.type,
                User.first_name,
                User.last_name,
            )
            .join(User, Appointment.patient_id == User.id)
            .filter(
                Appointment.doctor_id == doctor_id,
                Appointment.date >= start,
                Appointment.date <= end,
                Appointment.status != AppointmentStatus.CANCELLED.value,
            )
            .order_by(Appointment.date.asc(), Appointment.time.asc())
            .all()
        )

    @staticmethod
    def replace_rules(db: Session, doctor_id: int, rules: list[dict]) -> list[AvailabilityRule]:
        """Delete all rules for the doctor and insert the new set in one transaction"""
        try:
            db.query(AvailabilityRule).filter(AvailabilityRule.doctor_id == doctor_id).delete(
                synchronize_session=False
            )
            new_rules = [AvailabilityRule(doctor_id=doctor_id, **rule) for rule in rules]
            db.add_all(new_rules)
            db.commit()
        except Exception:
            db.rollback()
            raise
        return AvailabilityRepository.get_rules(db, doctor_id)
