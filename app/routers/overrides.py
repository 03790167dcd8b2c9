from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.auth_deps import require_manager
from app.schemas.auth import CurrentUser
from app.schemas.override import OverrideCreate, OverrideResponse
from app.services.audit import AuditService
from app.services.overrides import EvaluatorOverrideService

router = APIRouter(prefix="/evaluation/overrides", tags=["Evaluator Overrides"])


@router.get("", response_model=List[OverrideResponse])
def list_overrides(
    period_id: Optional[int] = None,
    employee_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    return EvaluatorOverrideService(db).list(period_id=period_id, employee_id=employee_id)


@router.post("", response_model=OverrideResponse)
def upsert_override(
    payload: OverrideCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    override = EvaluatorOverrideService(db, current_user.id).upsert(
        employee_id=payload.employee_id,
        evaluator_id=payload.evaluator_id,
        period_id=payload.period_id,
        effective_from=payload.effective_from,
        effective_to=payload.effective_to,
    )
    AuditService(db, current_user.id).log_action(
        "upsert_evaluator_override", "evaluator_override", override.id, current_user.role.value,
        details=payload.model_dump(mode="json"),
    )
    return override


@router.delete("/{override_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_override(
    override_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    EvaluatorOverrideService(db, current_user.id).delete(override_id)
    AuditService(db, current_user.id).log_action(
        "delete_evaluator_override", "evaluator_override", override_id, current_user.role.value
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
