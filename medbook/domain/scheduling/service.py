"""Availability service - resolves weekly rules into bookable slots"""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from fastapi import HTTPException
from sqlalchemy.orm import Session

from ...auth import DoctorActor
from ...models import AvailabilityRule, DoctorProfile
from .availability import bookable_dates, booking_window, generate_slots
from .repository import AvailabilityRepository
from .schemas import AvailabilityRuleIn

logger = logging.getLogger(__name__)


def format_clock(value) -> str:
    return value.strftime("%H:%M")


def serialize_rule(rule: AvailabilityRule) -> dict:
    return {
        "dayOfWeek": rule.day_of_week,
        "startTime": format_clock(rule.start_time),
        "endTime": format_clock(rule.end_time),
    }


class AvailabilityService:
    """Service layer for availability and slot resolution"""

    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.repo = AvailabilityRepository()
        self.clock = clock or datetime.now

    def _get_doctor(self, doctor_id: int) -> DoctorProfile:
        doctor = self.repo.get_doctor(self.db, doctor_id)
        if not doctor:
            raise HTTPException(status_code=404, detail="Doctor not found")
        return doctor

    def get_availability(self, doctor_id: int) -> dict:
        """Weekly rules plus non-cancelled bookings inside the booking window"""
        self._get_doctor(doctor_id)
        start, end = booking_window(self.clock().date())

        rules = self.repo.get_rules(self.db, doctor_id)
        booked = self.repo.get_booked_slots(self.db, doctor_id, start, end)

        return {
            "availability": [serialize_rule(r) for r in rules],
            "bookedSlots": [
                {
                    "date": row.date.isoformat(),
                    "time": format_clock(row.time),
                    "type": row.type,
                    "patientName": f"{row.first_name} {row.last_name}",
                }
                for row in booked
            ],
        }

    def get_slots(self, doctor_id: int, day: date) -> dict:
        """Candidate slots for one date with their availability flag"""
        self._get_doctor(doctor_id)
        now = self.clock()
        start, end = booking_window(now.date())

        slots = []
        if start <= day <= end:
            rules = self.repo.get_rules(self.db, doctor_id)
            booked = [
                (row.date, row.time) for row in self.repo.get_booked_slots(self.db, doctor_id, day, day)
            ]
            slots = generate_slots(rules, day, booked, now)
        else:
            logger.debug(f"Date {day} outside booking window for doctor {doctor_id}")

        return {
            "doctorId": doctor_id,
            "date": day.isoformat(),
            "slots": [{"time": s.label, "available": s.available} for s in slots],
        }

    def get_bookable_dates(self, doctor_id: int, days: int = 14) -> dict:
        """Upcoming dates on which the doctor works"""
        self._get_doctor(doctor_id)
        rules = self.repo.get_rules(self.db, doctor_id)
        dates = bookable_dates(rules, self.clock().date(), days)
        return {"doctorId": doctor_id, "dates": [d.isoformat() for d in dates]}

    def replace_availability(self, doctor: DoctorActor, rules: list[AvailabilityRuleIn]) -> dict:
        """Replace the doctor's whole rule set"""
        logger.info(f"📅 Replacing availability for doctor {doctor.doctor_id} ({len(rules)} rules)")
        saved = self.repo.replace_rules(
            self.db,
            doctor.doctor_id,
            [
                {"day_of_week": r.dayOfWeek, "start_time": r.startTime, "end_time": r.endTime}
                for r in rules
            ],
        )
        return {
            "message": "Availability updated successfully",
            "availability": [serialize_rule(r) for r in saved],
        }
