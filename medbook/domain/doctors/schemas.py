"""Doctor domain schemas - Pydantic models for validation"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.validators import validate_phone
from ...utils.sanitization import validate_and_sanitize_input


class DoctorOut(BaseModel):
    """Doctor card used by search results and the public detail page"""

    id: int
    userId: int
    firstName: str
    lastName: str
    email: str
    phone: Optional[str] = None
    specialty: str
    license: str
    address: Optional[str] = None
    city: Optional[str] = None
    bio: Optional[str] = None
    consultationFee: Optional[float] = None
    rating: float
    reviewsCount: int


class DoctorProfileUpdate(BaseModel):
    """Schema for the doctor's own profile settings"""

    specialty: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=255)
    bio: Optional[str] = None
    consultationFee: Optional[float] = Field(None, ge=0)
    phone: Optional[str] = None

    @field_validator("phone")
    @classmethod
    def validate_phone_number(cls, v):
        if v:
            return validate_phone(v)
        return v

    @field_validator("bio")
    @classmethod
    def validate_bio(cls, v):
        return validate_and_sanitize_input(v, max_length=2000)


class ConsultationAction(str, Enum):
    ACCEPT = "accept"
    REJECT = "reject"


class ConsultationDecision(BaseModel):
    action: ConsultationAction


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def validate_comment(cls, v):
        return validate_and_sanitize_input(v, max_length=1000)


class ReviewOut(BaseModel):
    id: int
    doctorId: int
    patientId: int
    rating: int
    comment: Optional[str] = None
    patientFirstName: Optional[str] = None
    patientLastName: Optional[str] = None
    createdAt: Optional[str] = None
