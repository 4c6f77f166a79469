# reports router — monthly practice statistics for the dashboard
# loads the practitioner's patients and assessments, then runs the aggregation in memory

import asyncio
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query

from nutriplan.config import settings
from nutriplan.models.report import MonthlyStats
from nutriplan.services.db import Database, get_db
from nutriplan.services.records import doc_to_assessment, doc_to_patient
from nutriplan.services.report_service import compute_monthly_stats
from nutriplan.dependencies import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("/monthly", response_model=MonthlyStats)
async def get_monthly_report(
    month: Optional[int] = Query(None, ge=0, le=11, description="zero-based month, 0 = january"),
    year: Optional[int] = Query(None, ge=1970, le=9999),
    current_user: dict = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    """kpis, patient movement and timeline for one month (defaults to the current month)"""
    today = date.today()
    target_month = today.month - 1 if month is None else month
    target_year = today.year if year is None else year

    scope = {"user_id": current_user["id"]}
    patient_docs, assessment_docs = await asyncio.gather(
        db.patients.find(scope).to_list(length=None),
        db.assessments.find(scope).to_list(length=None),
    )

    stats = compute_monthly_stats(
        [doc_to_patient(doc) for doc in patient_docs],
        [doc_to_assessment(doc) for doc in assessment_docs],
        target_month,
        target_year,
        today,
        locale=settings.REPORT_LOCALE,
        trend_months=settings.REPORT_TREND_MONTHS,
        expiry_window_days=settings.REPORT_EXPIRY_WINDOW_DAYS,
    )
    logger.info(
        f"Monthly report {target_year}-{target_month + 1:02d} for {current_user['id']}: "
        f"{stats.total_active} active, {len(stats.timeline)} events"
    )
    return stats
