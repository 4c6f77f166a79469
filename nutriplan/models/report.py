# report models — monthly practice statistics view models
# mirrors frontend reportService MonthlyStats, TimelineEvent

from datetime import date
from typing import Literal
from pydantic import BaseModel, Field

from nutriplan.models.patient import Patient


class TimelineEvent(BaseModel):
    """a dated thing that happened in the reporting month"""
    event_date: date = Field(..., alias="date")
    type: Literal["new_student", "assessment", "renewal", "churn"]
    title: str
    description: str

    model_config = {"populate_by_name": True}


class StudentsList(BaseModel):
    new: list[Patient] = Field(default_factory=list)
    churned: list[Patient] = Field(default_factory=list)
    renewed: list[Patient] = Field(default_factory=list)
    active: list[Patient] = Field(default_factory=list)


class EvolutionPoint(BaseModel):
    month: str
    active: int = 0


class MovementPoint(BaseModel):
    month: str
    inflow: int = Field(0, alias="in")
    outflow: int = Field(0, alias="out")

    model_config = {"populate_by_name": True}


class ChartData(BaseModel):
    evolution: list[EvolutionPoint] = Field(default_factory=list)
    movement: list[MovementPoint] = Field(default_factory=list)


class MonthlyStats(BaseModel):
    """kpis, patient lists, trailing trend and timeline for one calendar month"""
    total_active: int = Field(0, alias="totalActive")
    new_students: int = Field(0, alias="newStudents")
    churned: int = 0
    renewals: int = 0
    growth_rate: float = Field(0.0, alias="growthRate")
    total_assessments: int = Field(0, alias="totalAssessments")
    total_plans: int = Field(0, alias="totalPlans")
    students_list: StudentsList = Field(default_factory=StudentsList, alias="studentsList")
    chart_data: ChartData = Field(default_factory=ChartData, alias="chartData")
    expiring_soon: list[Patient] = Field(default_factory=list, alias="expiringSoon")
    timeline: list[TimelineEvent] = Field(default_factory=list)

    model_config = {"populate_by_name": True}
