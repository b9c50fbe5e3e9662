"""Patient router - patient dashboard endpoint"""

from typing import Callable

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import PatientActor, get_current_patient
from ...database import get_db
from ...shared.clock import get_clock
from .service import PatientService

router = APIRouter(prefix="/patients", tags=["Patients"])


def get_patient_service(
    db: Session = Depends(get_db), clock: Callable = Depends(get_clock)
) -> PatientService:
    return PatientService(db, clock)


@router.get("/profile")
async def get_profile(
    patient: PatientActor = Depends(get_current_patient),
    service: PatientService = Depends(get_patient_service),
):
    """Own profile with upcoming and past appointments"""
    return service.get_dashboard(patient)
