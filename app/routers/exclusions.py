from typing import List, Optional

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from app.database import get_db
from app.routers.auth_deps import require_manager
from app.schemas.auth import CurrentUser
from app.schemas.override import ExclusionCreate, ExclusionResponse
from app.services.audit import AuditService
from app.services.exclusions import ExclusionService

router = APIRouter(prefix="/evaluation/exclusions", tags=["Evaluation Exclusions"])


@router.get("", response_model=List[ExclusionResponse])
def list_exclusions(
    period_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    """Period-specific exclusions plus the global ones when period_id is given."""
    return ExclusionService(db).list(period_id=period_id)


@router.post("", response_model=ExclusionResponse)
def upsert_exclusion(
    payload: ExclusionCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    exclusion = ExclusionService(db, current_user.id).upsert(
        employee_id=payload.employee_id,
        period_id=payload.period_id,
        reason=payload.reason,
        note=payload.note,
    )
    AuditService(db, current_user.id).log_action(
        "upsert_exclusion", "evaluation_exclusion", exclusion.id, current_user.role.value,
        details=payload.model_dump(mode="json"),
    )
    return exclusion


@router.delete("/{exclusion_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_exclusion(
    exclusion_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_manager),
):
    ExclusionService(db, current_user.id).delete(exclusion_id)
    AuditService(db, current_user.id).log_action(
        "delete_exclusion", "evaluation_exclusion", exclusion_id, current_user.role.value
    )
    return Response(status_code=status.HTTP_204_NO_CONTENT)
