# patient models — roster records, write payloads and plan renewal
# dates travel as iso strings; write payloads validate them, read models keep them raw

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field, field_validator


def _empty_to_none(value):
    """blank form fields are stored as null, not as empty strings"""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class Patient(BaseModel):
    """a practitioner's patient as stored in the patients collection"""
    id: str
    name: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    contact: Optional[str] = None
    birth_date: Optional[str] = Field(None, alias="birthDate")
    next_appointment: Optional[str] = Field(None, alias="nextAppointment")
    extra_notes: Optional[str] = Field(None, alias="extraNotes")
    anamnesis: Optional[str] = None
    plan_start_date: Optional[str] = Field(None, alias="planStartDate")
    plan_end_date: Optional[str] = Field(None, alias="planEndDate")

    model_config = {"populate_by_name": True}


class PatientResponse(Patient):
    """roster entry with days left on the current plan"""
    days_remaining: Optional[int] = Field(None, alias="daysRemaining")

    model_config = {"populate_by_name": True}


class PatientCreate(BaseModel):
    name: str = Field(..., min_length=1)
    contact: Optional[str] = None
    birth_date: Optional[date] = Field(None, alias="birthDate")
    next_appointment: Optional[date] = Field(None, alias="nextAppointment")
    extra_notes: Optional[str] = Field(None, alias="extraNotes")
    anamnesis: Optional[str] = None
    plan_start_date: Optional[date] = Field(None, alias="planStartDate")
    plan_end_date: Optional[date] = Field(None, alias="planEndDate")

    model_config = {"populate_by_name": True}

    @field_validator(
        "birth_date", "next_appointment", "plan_start_date", "plan_end_date",
        mode="before",
    )
    @classmethod
    def blank_dates(cls, value):
        return _empty_to_none(value)


class PatientUpdate(PatientCreate):
    name: Optional[str] = Field(None, min_length=1)


class RenewPlanRequest(BaseModel):
    plan_end_date: date = Field(..., alias="planEndDate")

    model_config = {"populate_by_name": True}
