"""Patient service - patient dashboard"""

from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ...auth import PatientActor
from ...models import UserRole
from ..appointments.repository import AppointmentRepository
from ..appointments.service import serialize_appointment


class PatientService:
    def __init__(self, db: Session, clock: Optional[Callable[[], datetime]] = None):
        self.db = db
        self.appointments = AppointmentRepository()
        self.clock = clock or datetime.now

    def get_dashboard(self, patient: PatientActor, past_limit: int = 5) -> dict:
        """Profile with upcoming (today onwards) and the last few past appointments"""
        today = self.clock().date()
        user = patient.user

        upcoming = self.appointments.list_upcoming_for_patient(self.db, user.id, today)
        past = self.appointments.list_past_for_patient(self.db, user.id, today, limit=past_limit)

        return {
            "profile": {
                "id": user.id,
                "email": user.email,
                "firstName": user.first_name,
                "lastName": user.last_name,
                "phone": user.phone,
                "userType": user.role,
                "createdAt": user.created_at.isoformat() if user.created_at else None,
            },
            "upcomingAppointments": [serialize_appointment(a, UserRole.PATIENT) for a in upcoming],
            "pastAppointments": [serialize_appointment(a, UserRole.PATIENT) for a in past],
        }
