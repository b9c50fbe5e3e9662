"""Auth domain schemas - registration and login payloads"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from ...models import UserRole
from ...security_utils import MAX_BCRYPT_BYTES
from ...shared.validators import validate_phone


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    firstName: str = Field(..., min_length=1, max_length=100)
    lastName: str = Field(..., min_length=1, max_length=100)
    phone: Optional[str] = None
    userType: UserRole = UserRole.PATIENT

    # Doctor-only fields
    specialty: Optional[str] = Field(None, max_length=255)
    license: Optional[str] = Field(None, max_length=100)
    address: Optional[str] = Field(None, max_length=500)
    city: Optional[str] = Field(None, max_length=255)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()

    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v):
        if len(v.encode("utf-8")) > MAX_BCRYPT_BYTES:
            raise ValueError(f"Password must be at most {MAX_BCRYPT_BYTES} bytes")
        return v

    @field_validator("firstName", "lastName")
    @classmethod
    def strip_names(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v

    @field_validator("phone")
    @classmethod
    def validate_phone_number(cls, v):
        if v:
            return validate_phone(v)
        return v

    @model_validator(mode="after")
    def require_doctor_fields(self):
        if self.userType == UserRole.DOCTOR:
            if not self.specialty or not self.specialty.strip():
                raise ValueError("Specialty is required for doctors")
            if not self.license or not self.license.strip():
                raise ValueError("License is required for doctors")
        return self


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower()


class TokenResponse(BaseModel):
    token: str
    userType: UserRole
