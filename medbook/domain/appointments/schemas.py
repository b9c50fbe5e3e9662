"""Appointment domain schemas - Pydantic models for validation"""

import datetime as dt
from typing import Optional

from pydantic import BaseModel, field_validator

from ...models import AppointmentStatus, ConsultationType
from ...shared.validators import parse_calendar_date, parse_clock_time
from ...utils.sanitization import validate_and_sanitize_input


class AppointmentCreate(BaseModel):
    """Schema for booking a slot"""

    doctorId: int
    date: dt.date
    time: dt.time
    type: ConsultationType
    notes: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def validate_date(cls, v):
        return parse_calendar_date(v)

    @field_validator("time", mode="before")
    @classmethod
    def validate_time(cls, v):
        return parse_clock_time(v)

    @field_validator("notes")
    @classmethod
    def validate_notes(cls, v):
        return validate_and_sanitize_input(v, max_length=1000)


class AppointmentStatusUpdate(BaseModel):
    status: AppointmentStatus


class AppointmentCreated(BaseModel):
    id: int
    status: str
    message: str


class AppointmentOut(BaseModel):
    """Appointment row as seen by either party"""

    id: int
    doctorId: int
    patientId: int
    date: str
    time: str
    status: str
    type: str
    notes: Optional[str] = None
    createdAt: Optional[str] = None
    # Doctor view
    patientFirstName: Optional[str] = None
    patientLastName: Optional[str] = None
    patientPhone: Optional[str] = None
    # Patient view
    doctorFirstName: Optional[str] = None
    doctorLastName: Optional[str] = None
    doctorPhone: Optional[str] = None
    specialty: Optional[str] = None
    consultationFee: Optional[float] = None


class StatusUpdated(BaseModel):
    message: str
    status: str
