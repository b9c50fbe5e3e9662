"""Scheduling domain schemas - Pydantic models for validation"""

from datetime import time

from pydantic import BaseModel, Field, field_validator, model_validator

from ...shared.validators import parse_clock_time


class AvailabilityRuleIn(BaseModel):
    """One weekly availability window (0 = Sunday)"""

    dayOfWeek: int = Field(..., ge=0, le=6)
    startTime: time
    endTime: time

    @field_validator("startTime", "endTime", mode="before")
    @classmethod
    def validate_clock(cls, v):
        return parse_clock_time(v)

    @model_validator(mode="after")
    def validate_range(self):
        if self.startTime >= self.endTime:
            raise ValueError("startTime must be before endTime")
        return self


class AvailabilityUpdate(BaseModel):
    """Full replacement of a doctor's weekly rules"""

    availability: list[AvailabilityRuleIn]


class AvailabilityRuleOut(BaseModel):
    dayOfWeek: int
    startTime: str
    endTime: str


class BookedSlotOut(BaseModel):
    date: str
    time: str
    type: str
    patientName: str


class AvailabilityResponse(BaseModel):
    availability: list[AvailabilityRuleOut]
    bookedSlots: list[BookedSlotOut]


class SlotOut(BaseModel):
    time: str
    available: bool


class SlotsResponse(BaseModel):
    doctorId: int
    date: str
    slots: list[SlotOut]


class BookableDatesResponse(BaseModel):
    doctorId: int
    dates: list[str]


class AvailabilityUpdated(BaseModel):
    message: str
    availability: list[AvailabilityRuleOut]
