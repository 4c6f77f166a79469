# assessment models — dated body-composition snapshots with a calorie goal

from datetime import date
from typing import Optional
from pydantic import BaseModel, Field


class Assessment(BaseModel):
    id: str
    patient_id: str = Field(..., alias="patientId")
    date: Optional[str] = None
    weight: float = 0.0
    height: Optional[float] = None
    calorie_goal: float = Field(0.0, alias="calorieGoal")
    body_fat: Optional[float] = Field(None, alias="bodyFat")
    objective: Optional[str] = None
    activity_level: Optional[str] = Field(None, alias="activityLevel")
    notes: Optional[str] = None
    status: Optional[str] = None

    model_config = {"populate_by_name": True}


class AssessmentCreate(BaseModel):
    patient_id: str = Field(..., alias="patientId")
    assessed_on: date = Field(..., alias="date")
    weight: float = Field(..., gt=0)
    height: Optional[float] = Field(None, gt=0)
    calorie_goal: float = Field(..., ge=0, alias="calorieGoal")
    body_fat: Optional[float] = Field(None, ge=0, le=100, alias="bodyFat")
    objective: Optional[str] = None
    activity_level: Optional[str] = Field(None, alias="activityLevel")
    notes: Optional[str] = None
    status: Optional[str] = None

    model_config = {"populate_by_name": True}
