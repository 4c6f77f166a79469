# assessments router — body-composition assessments for the practitioner's patients

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from bson import ObjectId
from bson.errors import InvalidId

from nutriplan.models.assessment import Assessment, AssessmentCreate
from nutriplan.services.db import Database, get_db
from nutriplan.services.records import doc_to_assessment
from nutriplan.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/assessments", tags=["assessments"])


def _to_doc_fields(body: AssessmentCreate) -> dict:
    fields = body.model_dump(exclude={"assessed_on"})
    fields["date"] = body.assessed_on.isoformat()
    return fields


async def _ensure_patient_owned(patient_id: str, user_id: str, db: Database):
    try:
        doc = await db.patients.find_one({"_id": ObjectId(patient_id), "user_id": user_id})
    except InvalidId:
        doc = None
    if not doc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Patient not found",
        )


async def _get_owned_assessment(assessment_id: str, user_id: str, db: Database) -> dict:
    try:
        doc = await db.assessments.find_one({"_id": ObjectId(assessment_id), "user_id": user_id})
    except InvalidId:
        doc = None
    if not doc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Assessment not found",
        )
    return doc


@router.get("", response_model=list[Assessment])
async def list_assessments(
    patient_id: Optional[str] = Query(None, alias="patientId"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """list assessments, newest first, optionally for a single patient"""
    query = {"user_id": current_user["id"]}
    if patient_id:
        query["patient_id"] = patient_id

    cursor = db.assessments.find(query).sort("date", -1)
    return [doc_to_assessment(doc) async for doc in cursor]


@router.post("", response_model=Assessment, status_code=status.HTTP_201_CREATED)
async def create_assessment(
    body: AssessmentCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """record a new assessment for one of the practitioner's patients"""
    await _ensure_patient_owned(body.patient_id, current_user["id"], db)

    doc = _to_doc_fields(body)
    doc["user_id"] = current_user["id"]
    await db.assessments.insert_one(doc)
    logger.info(f"Assessment created: {doc['_id']} for patient {body.patient_id}")
    return doc_to_assessment(doc)


@router.get("/{assessment_id}", response_model=Assessment)
async def get_assessment(
    assessment_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned_assessment(assessment_id, current_user["id"], db)
    return doc_to_assessment(doc)


@router.put("/{assessment_id}", response_model=Assessment)
async def update_assessment(
    assessment_id: str,
    body: AssessmentCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """replace the measurements of an existing assessment"""
    doc = await _get_owned_assessment(assessment_id, current_user["id"], db)
    if body.patient_id != doc.get("patient_id"):
        await _ensure_patient_owned(body.patient_id, current_user["id"], db)

    updates = _to_doc_fields(body)
    await db.assessments.update_one({"_id": doc["_id"]}, {"$set": updates})
    doc.update(updates)
    logger.info(f"Assessment updated: {assessment_id}")
    return doc_to_assessment(doc)


@router.delete("/{assessment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_assessment(
    assessment_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """remove an assessment and the meal plan built on it"""
    doc = await _get_owned_assessment(assessment_id, current_user["id"], db)
    await db.assessments.delete_one({"_id": doc["_id"]})
    meals = await db.meals.delete_many(
        {"assessment_id": assessment_id, "user_id": current_user["id"]}
    )
    logger.info(f"Assessment deleted: {assessment_id} ({meals.deleted_count} meals removed)")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
