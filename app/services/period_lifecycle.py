"""
Period Lifecycle Controller

State machine over EvaluationPeriod.status:

    DRAFT  -> ACTIVE
    ACTIVE -> REVIEW | DRAFT
    REVIEW -> CLOSED | ACTIVE
    CLOSED -> REVIEW          (re-open for corrections)

DRAFT -> ACTIVE additionally requires evaluations to have been generated.
Transitions read and write the status under a row lock in one transaction and
never touch evaluation or self-evaluation records.
"""
from datetime import date
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.exceptions import DomainValidationError, NotFoundError, StateConflictError
from app.models.evaluation import Evaluation, EvaluationStatus
from app.models.period import EvaluationPeriod, PeriodStatus
from app.services.base import BaseService

ALLOWED_TRANSITIONS: Dict[PeriodStatus, frozenset] = {
    PeriodStatus.DRAFT: frozenset({PeriodStatus.ACTIVE}),
    PeriodStatus.ACTIVE: frozenset({PeriodStatus.REVIEW, PeriodStatus.DRAFT}),
    PeriodStatus.REVIEW: frozenset({PeriodStatus.CLOSED, PeriodStatus.ACTIVE}),
    PeriodStatus.CLOSED: frozenset({PeriodStatus.REVIEW}),
}

# Only a DRAFT period can be (re)generated
GENERATION_STATES = frozenset({PeriodStatus.DRAFT})


def parse_status(value) -> PeriodStatus:
    try:
        return PeriodStatus(value)
    except ValueError:
        raise DomainValidationError(
            f"Invalid period status '{value}'",
            details={"allowed": [s.value for s in PeriodStatus]},
        ) from None


def is_transition_allowed(source: PeriodStatus, target: PeriodStatus) -> bool:
    return target in ALLOWED_TRANSITIONS.get(source, frozenset())


class PeriodLifecycleService(BaseService):

    def __init__(self, db: Session, actor_id: Optional[int] = None):
        super().__init__(db, actor_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def get_period(self, period_id: int) -> EvaluationPeriod:
        period = self.db.get(EvaluationPeriod, period_id)
        if period is None:
            raise NotFoundError("Evaluation period", period_id)
        return period

    def list_periods(self) -> List[EvaluationPeriod]:
        return (
            self.db.query(EvaluationPeriod)
            .order_by(EvaluationPeriod.year.desc(), EvaluationPeriod.term.desc())
            .all()
        )

    def evaluation_count(self, period_id: int) -> int:
        return self.db.query(func.count(Evaluation.id)).filter(Evaluation.period_id == period_id).scalar()

    def progress(self, period_id: int) -> Dict[str, int]:
        self.get_period(period_id)
        rows = (
            self.db.query(Evaluation.status, func.count(Evaluation.id))
            .filter(Evaluation.period_id == period_id)
            .group_by(Evaluation.status)
            .all()
        )
        counts = {status.value: 0 for status in EvaluationStatus}
        for status, count in rows:
            counts[status] = count
        counts["total"] = sum(counts.values())
        return counts

    # ------------------------------------------------------------------
    # Period maintenance
    # ------------------------------------------------------------------
    def create_period(self, name: str, year: int, term: str, start_date: date, end_date: date) -> EvaluationPeriod:
        if not name or not term or not year:
            raise DomainValidationError("name, year and term are required")
        if end_date < start_date:
            raise DomainValidationError("end_date must not be before start_date")

        existing = self.db.query(EvaluationPeriod).filter(
            EvaluationPeriod.year == year, EvaluationPeriod.term == term
        ).first()
        if existing:
            raise StateConflictError(
                f"Period already exists for {year} {term}", details={"period_id": existing.id}
            )

        period = EvaluationPeriod(
            name=name, year=year, term=term,
            start_date=start_date, end_date=end_date,
            status=PeriodStatus.DRAFT.value,
        )
        self.db.add(period)
        try:
            self.db.commit()
        except IntegrityError:
            # Lost a race against a concurrent create for the same (year, term)
            self.db.rollback()
            raise StateConflictError(f"Period already exists for {year} {term}") from None
        self.db.refresh(period)
        self.log_info(f"Created evaluation period {period.id} ({year} {term})", period_id=period.id)
        return period

    def update_period(self, period_id: int, name: Optional[str] = None,
                      start_date: Optional[date] = None, end_date: Optional[date] = None) -> EvaluationPeriod:
        period = self.get_period(period_id)
        if period.status != PeriodStatus.DRAFT.value:
            raise StateConflictError("Only DRAFT periods can be edited", details={"status": period.status})

        new_start = start_date or period.start_date
        new_end = end_date or period.end_date
        if new_end < new_start:
            raise DomainValidationError("end_date must not be before start_date")

        if name:
            period.name = name
        period.start_date = new_start
        period.end_date = new_end
        self.commit()
        self.db.refresh(period)
        return period

    def delete_period(self, period_id: int) -> None:
        period = self.get_period(period_id)
        if self.evaluation_count(period_id) > 0:
            raise StateConflictError("Period has evaluations and cannot be deleted")
        self.db.delete(period)
        self.commit()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def ensure_generation_allowed(self, period_id: int) -> EvaluationPeriod:
        period = self.get_period(period_id)
        if PeriodStatus(period.status) not in GENERATION_STATES:
            raise StateConflictError(
                "Evaluations can only be generated for DRAFT periods",
                details={"status": period.status},
            )
        return period

    def transition(self, period_id: int, target) -> EvaluationPeriod:
        target_status = parse_status(target)

        period = (
            self.db.query(EvaluationPeriod)
            .filter(EvaluationPeriod.id == period_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if period is None:
            self.db.rollback()
            raise NotFoundError("Evaluation period", period_id)

        source_status = PeriodStatus(period.status)
        if not is_transition_allowed(source_status, target_status):
            self.db.rollback()
            raise StateConflictError(
                f"Cannot transition from {source_status.value} to {target_status.value}",
                details={"from": source_status.value, "to": target_status.value},
            )

        if source_status == PeriodStatus.DRAFT and target_status == PeriodStatus.ACTIVE:
            if self.evaluation_count(period_id) == 0:
                self.db.rollback()
                raise StateConflictError("No evaluations exist. Generate evaluations first.")

        period.status = target_status.value
        self.commit()
        self.db.refresh(period)
        self.log_info(
            f"Period {period_id} moved {source_status.value} -> {target_status.value}",
            period_id=period_id,
        )
        return period
