# patients router — roster management for the authenticated practitioner
# every query is scoped by user_id; records of other practitioners read as not found

import logging
from datetime import date, datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from bson import ObjectId
from bson.errors import InvalidId

from nutriplan.models.patient import (
    PatientResponse,
    PatientCreate,
    PatientUpdate,
    RenewPlanRequest,
)
from nutriplan.services.db import Database, get_db
from nutriplan.services.records import (
    RosterStatus,
    doc_to_patient,
    filter_roster,
    to_response,
)
from nutriplan.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/patients", tags=["patients"])


def _to_doc_fields(body: PatientCreate, exclude_unset: bool = False) -> dict:
    """snake_case mongo fields, dates stored as iso strings"""
    fields = body.model_dump(exclude_unset=exclude_unset)
    return {k: v.isoformat() if isinstance(v, date) else v for k, v in fields.items()}


async def _get_owned_patient(patient_id: str, user_id: str, db: Database) -> dict:
    try:
        doc = await db.patients.find_one({"_id": ObjectId(patient_id), "user_id": user_id})
    except InvalidId:
        doc = None

    if not doc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient not found",
        )
    return doc


@router.get("", response_model=list[PatientResponse])
async def list_patients(
    search: str = Query("", max_length=100),
    status_filter: RosterStatus = Query("all", alias="status"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """list the practitioner's patients, optionally filtered by name and plan status"""
    cursor = db.patients.find({"user_id": current_user["id"]})
    patients = [doc_to_patient(doc) async for doc in cursor]

    today = date.today()
    roster = filter_roster(patients, today, search=search, status=status_filter)
    return [to_response(p, today) for p in roster]


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def create_patient(
    body: PatientCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """register a new patient"""
    doc = _to_doc_fields(body)
    doc["user_id"] = current_user["id"]
    doc["created_at"] = datetime.now(timezone.utc).isoformat()

    await db.patients.insert_one(doc)
    logger.info(f"Patient created: {doc['_id']} by {current_user['id']}")
    return to_response(doc_to_patient(doc), date.today())


@router.get("/{patient_id}", response_model=PatientResponse)
async def get_patient(
    patient_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """get a single patient"""
    doc = await _get_owned_patient(patient_id, current_user["id"], db)
    return to_response(doc_to_patient(doc), date.today())


@router.put("/{patient_id}", response_model=PatientResponse)
async def update_patient(
    patient_id: str,
    body: PatientUpdate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """update the fields sent in the body; explicit nulls clear a field"""
    doc = await _get_owned_patient(patient_id, current_user["id"], db)
    updates = _to_doc_fields(body, exclude_unset=True)
    if updates.get("name") is None:
        updates.pop("name", None)

    if updates:
        await db.patients.update_one({"_id": doc["_id"]}, {"$set": updates})
        doc.update(updates)
        logger.info(f"Patient updated: {patient_id} ({sorted(updates)})")
    return to_response(doc_to_patient(doc), date.today())


@router.post("/{patient_id}/renew", response_model=PatientResponse)
async def renew_plan(
    patient_id: str,
    body: RenewPlanRequest,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """start a new plan today, running until the requested end date"""
    doc = await _get_owned_patient(patient_id, current_user["id"], db)

    today = date.today()
    if body.plan_end_date < today:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Plan end date cannot be in the past",
        )

    updates = {
        "plan_start_date": today.isoformat(),
        "plan_end_date": body.plan_end_date.isoformat(),
    }
    await db.patients.update_one({"_id": doc["_id"]}, {"$set": updates})
    doc.update(updates)
    logger.info(f"Plan renewed for patient {patient_id} until {updates['plan_end_date']}")
    return to_response(doc_to_patient(doc), today)


@router.delete("/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_patient(
    patient_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """remove a patient together with their assessments and meals"""
    doc = await _get_owned_patient(patient_id, current_user["id"], db)

    scope = {"patient_id": patient_id, "user_id": current_user["id"]}
    await db.patients.delete_one({"_id": doc["_id"]})
    removed = await db.assessments.delete_many(scope)
    meals = await db.meals.delete_many(scope)
    logger.info(
        f"Patient deleted: {patient_id} "
        f"({removed.deleted_count} assessments, {meals.deleted_count} meals removed)"
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
