# record helpers — mongo document mapping (patients, assessments, meals), plan countdown and roster filtering

from datetime import date, datetime
from typing import Literal, Optional

from nutriplan.models.assessment import Assessment
from nutriplan.models.meal import Meal
from nutriplan.models.patient import Patient, PatientResponse
from nutriplan.services.report_service import parse_date

RosterStatus = Literal["all", "active", "inactive"]


def days_remaining(plan_end: Optional[str], today: date) -> Optional[int]:
    """whole days until the plan ends (negative once lapsed), None without an end date"""
    end = parse_date(plan_end)
    if end is None:
        return None
    return (end - today).days


def is_on_plan(patient: Patient, today: date) -> bool:
    """a patient is active on the roster while their plan end date is today or later"""
    remaining = days_remaining(patient.plan_end_date, today)
    return remaining is not None and remaining >= 0


def filter_roster(
    patients: list[Patient],
    today: date,
    search: str = "",
    status: RosterStatus = "all",
) -> list[Patient]:
    """name search (case-insensitive substring) plus plan status, sorted by name"""
    needle = search.strip().lower()
    result = []
    for p in patients:
        if needle and needle not in p.name.lower():
            continue
        if status == "active" and not is_on_plan(p, today):
            continue
        if status == "inactive" and is_on_plan(p, today):
            continue
        result.append(p)
    return sorted(result, key=lambda p: p.name.lower())


def _date_str(value) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def doc_to_patient(doc: dict) -> Patient:
    """convert a mongodb patients document to the patient model"""
    return Patient(
        id=str(doc["_id"]),
        name=doc.get("name", ""),
        createdAt=_date_str(doc.get("created_at")),
        contact=doc.get("contact"),
        birthDate=_date_str(doc.get("birth_date")),
        nextAppointment=_date_str(doc.get("next_appointment")),
        extraNotes=doc.get("extra_notes"),
        anamnesis=doc.get("anamnesis"),
        planStartDate=_date_str(doc.get("plan_start_date")),
        planEndDate=_date_str(doc.get("plan_end_date")),
    )


def to_response(patient: Patient, today: date) -> PatientResponse:
    return PatientResponse(
        **patient.model_dump(),
        days_remaining=days_remaining(patient.plan_end_date, today),
    )


def doc_to_assessment(doc: dict) -> Assessment:
    """convert a mongodb assessments document to the assessment model"""
    return Assessment(
        id=str(doc["_id"]),
        patientId=doc.get("patient_id", ""),
        date=_date_str(doc.get("date")),
        weight=doc.get("weight") or 0.0,
        height=doc.get("height"),
        calorieGoal=doc.get("calorie_goal") or 0.0,
        bodyFat=doc.get("body_fat"),
        objective=doc.get("objective"),
        activityLevel=doc.get("activity_level"),
        notes=doc.get("notes"),
        status=doc.get("status"),
    )


def doc_to_meal(doc: dict) -> Meal:
    """convert a mongodb meals document to the meal model"""
    return Meal(
        id=str(doc["_id"]),
        patientId=doc.get("patient_id", ""),
        assessmentId=doc.get("assessment_id", ""),
        name=doc.get("name", ""),
        description=doc.get("description") or "",
        quantity=doc.get("quantity") or "",
        calories=doc.get("calories") or 0.0,
        time=doc.get("time") or "",
        type=doc.get("type") or "normal",
        foods=doc.get("foods") or [],
    )
