# meals router — the meal plan built on an assessment
# meals inherit their patient from the assessment; listing is ordered by time of day

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from bson import ObjectId
from bson.errors import InvalidId

from nutriplan.models.meal import Meal, MealCreate
from nutriplan.services.db import Database, get_db
from nutriplan.services.records import doc_to_meal
from nutriplan.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/meals", tags=["meals"])


async def _get_owned(collection, record_id: str, user_id: str, label: str) -> dict:
    try:
        doc = await collection.find_one({"_id": ObjectId(record_id), "user_id": user_id})
    except InvalidId:
        doc = None
    if not doc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{label} not found",
        )
    return doc


def _to_doc_fields(body: MealCreate, assessment: dict) -> dict:
    fields = body.model_dump()
    fields["patient_id"] = assessment.get("patient_id", "")
    return fields


@router.get("", response_model=list[Meal])
async def list_meals(
    assessment_id: Optional[str] = Query(None, alias="assessmentId"),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """list meals, optionally for one assessment, earliest time first"""
    query = {"user_id": current_user["id"]}
    if assessment_id:
        query["assessment_id"] = assessment_id

    cursor = db.meals.find(query).sort("time", 1)
    return [doc_to_meal(doc) async for doc in cursor]


@router.post("", response_model=Meal, status_code=status.HTTP_201_CREATED)
async def create_meal(
    body: MealCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """add a meal to one of the practitioner's assessments"""
    assessment = await _get_owned(db.assessments, body.assessment_id, current_user["id"], "Assessment")

    doc = _to_doc_fields(body, assessment)
    doc["user_id"] = current_user["id"]
    await db.meals.insert_one(doc)
    logger.info(f"Meal created: {doc['_id']} on assessment {body.assessment_id}")
    return doc_to_meal(doc)


@router.get("/{meal_id}", response_model=Meal)
async def get_meal(
    meal_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned(db.meals, meal_id, current_user["id"], "Meal")
    return doc_to_meal(doc)


@router.put("/{meal_id}", response_model=Meal)
async def update_meal(
    meal_id: str,
    body: MealCreate,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """replace a meal; moving it to another assessment requires owning that one too"""
    doc = await _get_owned(db.meals, meal_id, current_user["id"], "Meal")
    assessment = await _get_owned(db.assessments, body.assessment_id, current_user["id"], "Assessment")

    updates = _to_doc_fields(body, assessment)
    await db.meals.update_one({"_id": doc["_id"]}, {"$set": updates})
    doc.update(updates)
    logger.info(f"Meal updated: {meal_id}")
    return doc_to_meal(doc)


@router.delete("/{meal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_meal(
    meal_id: str,
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    doc = await _get_owned(db.meals, meal_id, current_user["id"], "Meal")
    await db.meals.delete_one({"_id": doc["_id"]})
    logger.info(f"Meal deleted: {meal_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
