"""Doctor router - FastAPI endpoints for doctor search, dashboard and reviews"""

import logging
from typing import Callable, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import DoctorActor, PatientActor, get_current_doctor, get_current_patient
from ...database import get_db
from ...shared.clock import get_clock
from ..appointments.schemas import AppointmentOut
from .schemas import ConsultationDecision, DoctorOut, DoctorProfileUpdate, ReviewCreate, ReviewOut
from .service import DoctorService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/doctors", tags=["Doctors"])


def get_doctor_service(
    db: Session = Depends(get_db), clock: Callable = Depends(get_clock)
) -> DoctorService:
    """Dependency injection for DoctorService"""
    return DoctorService(db, clock)


# ============================================================================
# PUBLIC SEARCH
# ============================================================================


@router.get("", response_model=list[DoctorOut])
async def search_doctors(
    search: Optional[str] = Query(None, description="Matches first name, last name or specialty"),
    city: Optional[str] = Query(None, description="Substring of the city"),
    service: DoctorService = Depends(get_doctor_service),
):
    """List doctors with rating and review count"""
    return service.search_doctors(search, city)


# ============================================================================
# DOCTOR DASHBOARD (authenticated doctor)
# ============================================================================


@router.get("/profile")
async def get_profile(
    doctor: DoctorActor = Depends(get_current_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Own profile with today's and upcoming appointments and recent reviews"""
    return service.get_dashboard(doctor)


@router.put("/profile")
async def update_profile(
    data: DoctorProfileUpdate,
    doctor: DoctorActor = Depends(get_current_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Update specialty, address, city, bio, fee and phone"""
    return service.update_profile(doctor, data)


@router.get("/consultation-requests", response_model=list[AppointmentOut])
async def get_consultation_requests(
    doctor: DoctorActor = Depends(get_current_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Pending appointments awaiting accept/reject"""
    return service.get_consultation_requests(doctor)


@router.put("/consultation-requests/{appointment_id}")
async def respond_to_consultation_request(
    appointment_id: int,
    data: ConsultationDecision,
    doctor: DoctorActor = Depends(get_current_doctor),
    service: DoctorService = Depends(get_doctor_service),
):
    """Accept (confirm) or reject (cancel) a pending request"""
    return service.respond_to_request(doctor, appointment_id, data.action)


# ============================================================================
# PUBLIC DOCTOR DETAIL & REVIEWS
# ============================================================================


@router.get("/{doctor_id}", response_model=DoctorOut)
async def get_doctor(
    doctor_id: int,
    service: DoctorService = Depends(get_doctor_service),
):
    return service.get_doctor(doctor_id)


@router.get("/{doctor_id}/reviews", response_model=list[ReviewOut])
async def get_doctor_reviews(
    doctor_id: int,
    service: DoctorService = Depends(get_doctor_service),
):
    return service.get_reviews(doctor_id)


@router.post("/{doctor_id}/reviews", response_model=ReviewOut, status_code=201)
async def create_doctor_review(
    doctor_id: int,
    data: ReviewCreate,
    patient: PatientActor = Depends(get_current_patient),
    service: DoctorService = Depends(get_doctor_service),
):
    """Leave a 1-5 star review (patients only)"""
    return service.create_review(doctor_id, data, patient)
