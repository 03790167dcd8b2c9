import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy import distinct
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.limiter import limiter
from app.core.schemas import ApiResponse
from app.database import get_db
from app.models.evaluation import Evaluation
from app.models.period import EvaluationPeriod, PeriodStatus
from app.routers.auth_deps import get_current_user, require_admin, require_manager
from app.schemas.auth import CurrentUser
from app.schemas.period import (
    GenerationResult, PeriodCreate, PeriodProgress, PeriodResponse, PeriodStatusUpdate, PeriodUpdate,
)
from app.services.audit import AuditService
from app.services.generation import GenerationService
from app.services.master_data import ensure_growth_categories, ensure_process_categories
from app.services.notification import NotificationService
from app.services.period_lifecycle import PeriodLifecycleService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/evaluation/periods", tags=["Evaluation Periods"])


@router.get("", response_model=List[PeriodResponse])
def list_periods(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return PeriodLifecycleService(db).list_periods()


@router.post("", response_model=PeriodResponse, status_code=status.HTTP_201_CREATED)
def create_period(
    payload: PeriodCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    period = PeriodLifecycleService(db, current_user.id).create_period(
        name=payload.name,
        year=payload.year,
        term=payload.term,
        start_date=payload.start_date,
        end_date=payload.end_date,
    )
    AuditService(db, current_user.id).log_action(
        "create_period", "evaluation_period", period.id, current_user.role.value,
        details=payload.model_dump(mode="json"),
    )
    return period


@router.get("/{period_id}", response_model=PeriodResponse)
def get_period(
    period_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return PeriodLifecycleService(db).get_period(period_id)


@router.patch("/{period_id}", response_model=PeriodResponse)
def update_period(
    period_id: int,
    payload: PeriodUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    return PeriodLifecycleService(db, current_user.id).update_period(
        period_id, name=payload.name, start_date=payload.start_date, end_date=payload.end_date
    )


@router.delete("/{period_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_period(
    period_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    PeriodLifecycleService(db, current_user.id).delete_period(period_id)
    AuditService(db, current_user.id).log_action(
        "delete_period", "evaluation_period", period_id, current_user.role.value
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.patch("/{period_id}/status", response_model=PeriodResponse)
def transition_period(
    period_id: int,
    payload: PeriodStatusUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = PeriodLifecycleService(db, current_user.id)
    before = service.get_period(period_id).status
    period = service.transition(period_id, payload.status)

    AuditService(db, current_user.id).log_action(
        "transition_period", "evaluation_period", period.id, current_user.role.value,
        before_state={"status": before}, after_state={"status": period.status},
    )
    if period.status == PeriodStatus.ACTIVE.value and before == PeriodStatus.DRAFT.value:
        _notify_period_opened(db, period)
    return period


@router.post("/{period_id}/generate", response_model=ApiResponse[GenerationResult])
@limiter.limit(settings.rate_limit_generate)
def generate_evaluations(
    request: Request,
    period_id: int,
    unit_id: Optional[int] = Query(None, description="Restrict generation to this unit and its sub-units"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    PeriodLifecycleService(db, current_user.id).ensure_generation_allowed(period_id)
    ensure_growth_categories(db)
    ensure_process_categories(db)

    summary = GenerationService(db).generate(period_id, unit_id=unit_id)
    result = GenerationResult(
        period_id=summary.period_id,
        total_employees=summary.total_employees,
        created=summary.created,
        skipped=summary.skipped,
        unresolved=summary.unresolved,
        failed=summary.failed,
    )

    if summary.has_partial_failure:
        logger.warning(
            f"Generation for period {period_id} left {len(summary.unresolved)} unresolved "
            f"and {len(summary.failed)} failed employees"
        )

    AuditService(db, current_user.id).log_action(
        "generate_evaluations", "evaluation_period", period_id, current_user.role.value,
        details={"unit_id": unit_id, **result.model_dump(exclude={"period_id"})},
    )
    return ApiResponse.ok(data=result, metadata={"partial_failure": summary.has_partial_failure})


@router.get("/{period_id}/progress", response_model=PeriodProgress)
def get_progress(
    period_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    counts = PeriodLifecycleService(db).progress(period_id)
    return PeriodProgress(
        period_id=period_id,
        total=counts["total"],
        pending=counts["PENDING"],
        in_progress=counts["IN_PROGRESS"],
        completed=counts["COMPLETED"],
        confirmed=counts["CONFIRMED"],
    )


def _notify_period_opened(db: Session, period: EvaluationPeriod) -> None:
    rows = db.query(distinct(Evaluation.evaluator_id)).filter(Evaluation.period_id == period.id).all()
    evaluator_ids = [row[0] for row in rows]
    NotificationService.notify_users(
        db,
        evaluator_ids,
        title=f"Evaluation period {period.name} is open",
        message="Evaluations assigned to you are ready for scoring.",
        link=f"/evaluations?period_id={period.id}",
    )
