"""Appointment router - FastAPI endpoints for booking and status changes"""

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import Actor, PatientActor, get_current_actor, get_current_patient
from ...database import get_db
from ...schemas import MessageResponse
from .schemas import (
    AppointmentCreate,
    AppointmentCreated,
    AppointmentOut,
    AppointmentStatusUpdate,
    StatusUpdated,
)
from .service import AppointmentService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


def get_appointment_service(db: Session = Depends(get_db)) -> AppointmentService:
    """Dependency injection for AppointmentService"""
    return AppointmentService(db)


@router.post("", response_model=AppointmentCreated, status_code=201)
async def create_appointment(
    data: AppointmentCreate,
    patient: PatientActor = Depends(get_current_patient),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Book a slot with a doctor (patients only)"""
    appointment = service.create_appointment(data, patient)
    return AppointmentCreated(
        id=appointment.id,
        status=appointment.status,
        message="Appointment created successfully",
    )


@router.get("", response_model=list[AppointmentOut])
async def get_appointments(
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Appointments of the current doctor or patient"""
    return service.list_appointments(actor)


@router.put("/{appointment_id}", response_model=StatusUpdated)
async def update_appointment_status(
    appointment_id: int,
    data: AppointmentStatusUpdate,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Change the status of an appointment (its patient or doctor)"""
    return service.update_status(actor, appointment_id, data.status)


@router.delete("/{appointment_id}", response_model=MessageResponse)
async def delete_appointment(
    appointment_id: int,
    actor: Actor = Depends(get_current_actor),
    service: AppointmentService = Depends(get_appointment_service),
):
    """Delete an appointment (its patient or doctor)"""
    return service.delete_appointment(actor, appointment_id)
