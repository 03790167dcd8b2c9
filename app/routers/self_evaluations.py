from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.database import get_db
from app.routers.auth_deps import get_current_user
from app.schemas.auth import CurrentUser
from app.schemas.self_evaluation import SelfEvaluationDraft, SelfEvaluationResponse, SelfEvaluationSubmit
from app.services.audit import AuditService
from app.services.self_evaluation import SelfEvaluationService

router = APIRouter(prefix="/evaluation/self-evaluations", tags=["Self Evaluations"])


@router.get("/{period_id}", response_model=SelfEvaluationResponse)
def get_my_self_evaluation(
    period_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    record = SelfEvaluationService(db).get(period_id, current_user.id)
    if record is None:
        raise NotFoundError("Self evaluation")
    return record


@router.put("", response_model=SelfEvaluationResponse)
def save_draft(
    payload: SelfEvaluationDraft,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    return SelfEvaluationService(db, current_user.id).save_draft(
        period_id=payload.period_id,
        user_id=current_user.id,
        process_scores=payload.self_process_scores,
        growth_category_id=payload.self_growth_category_id,
        growth_level=payload.self_growth_level,
    )


@router.post("/submit", response_model=SelfEvaluationResponse)
def submit_self_evaluation(
    payload: SelfEvaluationSubmit,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    record = SelfEvaluationService(db, current_user.id).submit(
        period_id=payload.period_id,
        user_id=current_user.id,
        process_scores=payload.self_process_scores,
        growth_category_id=payload.self_growth_category_id,
        growth_level=payload.self_growth_level,
    )
    AuditService(db, current_user.id).log_action(
        "submit_self_evaluation", "self_evaluation", record.id, current_user.role.value,
        details={"period_id": payload.period_id},
    )
    return record
