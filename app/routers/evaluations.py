from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.exceptions import AccessDeniedError
from app.database import get_db
from app.models.evaluation import Evaluation
from app.routers.auth_deps import get_current_user
from app.schemas.auth import CurrentUser
from app.schemas.evaluation import EvaluationResponse, EvaluationUpdate
from app.services.audit import AuditService
from app.services.evaluation_service import EvaluationService
from app.services.notification import NotificationService

router = APIRouter(prefix="/evaluation/evaluations", tags=["Evaluations"])


def _ensure_evaluator(evaluation: Evaluation, current_user: CurrentUser) -> None:
    if current_user.is_admin or evaluation.evaluator_id == current_user.id:
        return
    raise AccessDeniedError("Only the assigned evaluator can modify this evaluation")


@router.get("", response_model=List[EvaluationResponse])
def list_evaluations(
    period_id: Optional[int] = None,
    evaluator_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    status_filter: Optional[str] = Query(None, alias="status"),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    # Plain employees only see the evaluations assigned to them
    if not current_user.is_manager:
        evaluator_id = current_user.id
    return EvaluationService(db).list(
        period_id=period_id, evaluator_id=evaluator_id, employee_id=employee_id, status=status_filter
    )


@router.get("/evaluatees", response_model=List[EvaluationResponse])
def list_evaluatees(
    period_id: int,
    evaluator_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Evaluations the caller is assigned to for a period, without excluded employees."""
    if evaluator_id is None or not current_user.is_manager:
        evaluator_id = current_user.id
    return EvaluationService(db).list_evaluatees(evaluator_id, period_id)


@router.get("/{evaluation_id}", response_model=EvaluationResponse)
def get_evaluation(
    evaluation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    evaluation = EvaluationService(db).get(evaluation_id)
    if not current_user.is_manager and current_user.id not in (evaluation.evaluator_id, evaluation.employee_id):
        raise AccessDeniedError()
    return evaluation


@router.patch("/{evaluation_id}", response_model=EvaluationResponse)
def update_evaluation(
    evaluation_id: int,
    payload: EvaluationUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = EvaluationService(db, current_user.id)
    _ensure_evaluator(service.get(evaluation_id), current_user)
    return service.update_scores(evaluation_id, payload.model_dump(exclude_unset=True))


@router.post("/{evaluation_id}/complete", response_model=EvaluationResponse)
def complete_evaluation(
    evaluation_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    service = EvaluationService(db, current_user.id)
    evaluation = service.get(evaluation_id)
    _ensure_evaluator(evaluation, current_user)
    before = evaluation.status

    evaluation = service.complete(evaluation_id)

    AuditService(db, current_user.id).log_action(
        "complete_evaluation", "evaluation", evaluation.id, current_user.role.value,
        before_state={"status": before},
        after_state={"status": evaluation.status, "final_score": evaluation.final_score,
                     "final_grade": evaluation.final_grade},
    )
    NotificationService.notify_user(
        db,
        evaluation.employee_id,
        title="Your evaluation has been completed",
        message=f"Your evaluation for period {evaluation.period_id} was completed by your evaluator.",
        link=f"/evaluations/{evaluation.id}",
    )
    return evaluation
