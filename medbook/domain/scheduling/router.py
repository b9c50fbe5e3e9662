"""Scheduling router - availability rules and bookable slots"""

import logging
from datetime import date
from typing import Callable

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import DoctorActor, get_current_doctor
from ...database import get_db
from ...shared.clock import get_clock
from .schemas import (
    AvailabilityResponse,
    AvailabilityUpdate,
    AvailabilityUpdated,
    BookableDatesResponse,
    SlotsResponse,
)
from .service import AvailabilityService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Scheduling"])


def get_availability_service(
    db: Session = Depends(get_db), clock: Callable = Depends(get_clock)
) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db, clock)


@router.put("/availability", response_model=AvailabilityUpdated)
async def update_availability(
    data: AvailabilityUpdate,
    doctor: DoctorActor = Depends(get_current_doctor),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Replace the authenticated doctor's weekly availability"""
    return service.replace_availability(doctor, data.availability)


@router.get("/{doctor_id}/availability", response_model=AvailabilityResponse)
async def get_doctor_availability(
    doctor_id: int,
    service: AvailabilityService = Depends(get_availability_service),
):
    """Weekly rules and booked slots for the next booking window (public)"""
    return service.get_availability(doctor_id)


@router.get("/{doctor_id}/slots", response_model=SlotsResponse)
async def get_doctor_slots(
    doctor_id: int,
    day: date = Query(..., alias="date", description="Calendar date (YYYY-MM-DD)"),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Resolved 30-minute slots for one date (public)"""
    return service.get_slots(doctor_id, day)


@router.get("/{doctor_id}/bookable-dates", response_model=BookableDatesResponse)
async def get_doctor_bookable_dates(
    doctor_id: int,
    days: int = Query(14, ge=1, le=92),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Upcoming dates on which the doctor has availability (public)"""
    return service.get_bookable_dates(doctor_id, days)
