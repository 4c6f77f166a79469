# monthly report aggregation — practice kpis, trailing trend and event timeline
# pure computation over patient and assessment records already loaded by the caller
# "today" is an argument so a report can be reproduced; it defaults to the local date
# missing or malformed optional dates exclude a patient from the affected metric only

import calendar
import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional, Sequence

from nutriplan.models.assessment import Assessment
from nutriplan.models.patient import Patient
from nutriplan.models.report import (
    ChartData,
    EvolutionPoint,
    MonthlyStats,
    MovementPoint,
    StudentsList,
    TimelineEvent,
)

logger = logging.getLogger(__name__)

TREND_MONTHS = 12
EXPIRY_WINDOW_DAYS = 30
DEFAULT_LOCALE = "pt-BR"

MONTH_LABELS = {
    "pt-BR": ("jan", "fev", "mar", "abr", "mai", "jun", "jul", "ago", "set", "out", "nov", "dez"),
    "es": ("ene", "feb", "mar", "abr", "may", "jun", "jul", "ago", "sept", "oct", "nov", "dic"),
    "en-US": ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"),
}

# assessments whose owner is no longer on the roster
UNKNOWN_PATIENT_NAME = "Paciente"


def parse_date(value: Any) -> Optional[date]:
    """calendar date from an iso date/timestamp string, or None when absent or unparseable.
    timestamps carrying an offset are converted to the server's local day first;
    naive timestamps keep their own calendar day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return _local_day(value)
    if isinstance(value, date):
        return value

    text = str(value).strip()
    if not text:
        return None

    if len(text) > 10:
        # fromisoformat only learned the "Z" suffix in 3.11
        stamp_text = text[:-1] + "+00:00" if text.endswith("Z") else text
        try:
            return _local_day(datetime.fromisoformat(stamp_text))
        except ValueError:
            pass
    try:
        return date.fromisoformat(text.split("T")[0].split(" ")[0])
    except ValueError:
        logger.debug(f"Ignoring malformed date value: {text!r}")
        return None


def _local_day(stamp: datetime) -> date:
    if stamp.tzinfo is None:
        return stamp.date()
    return stamp.astimezone().date()


def month_label(month: int, locale: str = DEFAULT_LOCALE) -> str:
    """short month name, month is 1-12"""
    labels = MONTH_LABELS.get(locale, MONTH_LABELS[DEFAULT_LOCALE])
    return labels[month - 1]


@dataclass(frozen=True)
class Period:
    """an inclusive range of calendar days"""
    start: date
    end: date

    def contains(self, day: Optional[date]) -> bool:
        return day is not None and self.start <= day <= self.end


def month_period(year: int, month_index: int) -> Period:
    """first to last day of a month. month_index is zero-based and may fall outside
    0-11; it rolls over into the neighbouring years."""
    year += month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return Period(date(year, month, 1), date(year, month, last_day))


@dataclass(frozen=True)
class _PlanDates:
    """the dates of one patient the report cares about, parsed once per call"""
    created: Optional[date]
    plan_start: Optional[date]
    plan_end: Optional[date]

    @classmethod
    def of(cls, patient: Patient) -> "_PlanDates":
        created = parse_date(patient.created_at)
        # no explicit plan start means the plan started when the patient was registered
        plan_start = parse_date(patient.plan_start_date) or created
        return cls(created, plan_start, parse_date(patient.plan_end_date))

    def active_in(self, period: Period) -> bool:
        if self.plan_end is None or self.plan_start is None:
            return False
        return self.plan_start <= period.end and self.plan_end >= period.start

    def lapsed_in(self, period: Period, today: date) -> bool:
        return period.contains(self.plan_end) and self.plan_end < today


def growth_rate(current: int, previous: int) -> float:
    """signed month-over-month change in percent, unrounded"""
    if previous > 0:
        return (current - previous) / previous * 100
    if current > 0:
        return 100.0
    return 0.0


def compute_monthly_stats(
    patients: Sequence[Patient],
    assessments: Sequence[Assessment],
    target_month: int,
    target_year: int,
    today: Optional[date] = None,
    *,
    locale: str = DEFAULT_LOCALE,
    trend_months: int = TREND_MONTHS,
    expiry_window_days: int = EXPIRY_WINDOW_DAYS,
) -> MonthlyStats:
    """build the monthly report for target_month (0-11) of target_year.

    today anchors three things: the churn rule (a plan only counts as churned once its
    end date has passed), the trailing trend window (always ending at today's month,
    whatever the target) and the expiring-soon forecast.
    """
    if today is None:
        today = date.today()

    period = month_period(target_year, target_month)
    plan_dates = [(p, _PlanDates.of(p)) for p in patients]

    students = StudentsList()
    timeline: list[TimelineEvent] = []

    for patient, dates in plan_dates:
        if dates.active_in(period):
            students.active.append(patient)

        if period.contains(dates.created):
            students.new.append(patient)
            timeline.append(TimelineEvent(
                date=dates.created,
                type="new_student",
                title="Novo Paciente",
                description=f"{patient.name} iniciou o acompanhamento.",
            ))
        elif (
            period.contains(dates.plan_start)
            and dates.created is not None
            and dates.created < period.start
        ):
            students.renewed.append(patient)
            timeline.append(TimelineEvent(
                date=dates.plan_start,
                type="renewal",
                title="Renovação de Plano",
                description=f"Plano de {patient.name} renovado.",
            ))

        if dates.lapsed_in(period, today):
            students.churned.append(patient)
            timeline.append(TimelineEvent(
                date=dates.plan_end,
                type="churn",
                title="Encerramento de Plano",
                description=f"Vencimento do plano de {patient.name}.",
            ))

    # assessments — one plan is issued per assessment
    names = {p.id: p.name for p in patients}
    total_assessments = 0
    for assessment in assessments:
        assessed_on = parse_date(assessment.date)
        if not period.contains(assessed_on):
            continue
        total_assessments += 1
        patient_name = names.get(assessment.patient_id) or UNKNOWN_PATIENT_NAME
        timeline.append(TimelineEvent(
            date=assessed_on,
            type="assessment",
            title="Avaliação Realizada",
            description=f"Avaliação física de {patient_name}.",
        ))

    # stable, so same-day events keep insertion order
    timeline.sort(key=lambda event: event.event_date)

    # growth vs the month before the target
    previous = month_period(target_year, target_month - 1)
    prev_active = sum(1 for _, dates in plan_dates if dates.active_in(previous))
    total_active = len(students.active)

    # trailing trend, oldest month first
    chart = ChartData()
    for offset in range(trend_months - 1, -1, -1):
        window = month_period(today.year, today.month - 1 - offset)
        label = month_label(window.start.month, locale)
        active = inflow = outflow = 0
        for _, dates in plan_dates:
            if dates.active_in(window):
                active += 1
            if window.contains(dates.plan_start):
                inflow += 1
            if dates.lapsed_in(window, today):
                outflow += 1
        chart.evolution.append(EvolutionPoint(month=label, active=active))
        chart.movement.append(MovementPoint(month=label, inflow=inflow, outflow=outflow))

    # plans ending within the forecast window, soonest first
    horizon = Period(today, today + timedelta(days=expiry_window_days))
    expiring = [(dates.plan_end, p) for p, dates in plan_dates if horizon.contains(dates.plan_end)]
    expiring.sort(key=lambda item: item[0])

    return MonthlyStats(
        totalActive=total_active,
        newStudents=len(students.new),
        churned=len(students.churned),
        renewals=len(students.renewed),
        growthRate=growth_rate(total_active, prev_active),
        totalAssessments=total_assessments,
        totalPlans=total_assessments,
        studentsList=students,
        chartData=chart,
        expiringSoon=[p for _, p in expiring],
        timeline=timeline,
    )
