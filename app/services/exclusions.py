from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import DomainValidationError, NotFoundError
from app.models.employee import Employee
from app.models.exclusion import EvaluationExclusion, ExclusionReason
from app.models.period import EvaluationPeriod
from app.services.base import BaseService


class ExclusionService(BaseService):

    def __init__(self, db: Session, actor_id: Optional[int] = None):
        super().__init__(db, actor_id)

    def list(self, period_id: Optional[int] = None) -> List[EvaluationExclusion]:
        query = self.db.query(EvaluationExclusion)
        if period_id is not None:
            query = query.filter(
                or_(EvaluationExclusion.period_id == period_id, EvaluationExclusion.period_id.is_(None))
            )
        return query.order_by(EvaluationExclusion.created_at.desc(), EvaluationExclusion.id.desc()).all()

    def get(self, exclusion_id: int) -> EvaluationExclusion:
        exclusion = self.db.get(EvaluationExclusion, exclusion_id)
        if exclusion is None:
            raise NotFoundError("Exclusion", exclusion_id)
        return exclusion

    def upsert(
        self,
        employee_id: int,
        period_id: Optional[int] = None,
        reason: Optional[str] = None,
        note: Optional[str] = None,
    ) -> EvaluationExclusion:
        reason = reason or ExclusionReason.OTHER.value
        if reason not in {r.value for r in ExclusionReason}:
            raise DomainValidationError(f"Invalid exclusion reason '{reason}'")
        if self.db.get(Employee, employee_id) is None:
            raise NotFoundError("Employee", employee_id)
        if period_id is not None and self.db.get(EvaluationPeriod, period_id) is None:
            raise NotFoundError("Evaluation period", period_id)

        query = self.db.query(EvaluationExclusion).filter(EvaluationExclusion.employee_id == employee_id)
        if period_id is None:
            query = query.filter(EvaluationExclusion.period_id.is_(None))
        else:
            query = query.filter(EvaluationExclusion.period_id == period_id)
        exclusion = query.first()

        if exclusion is None:
            exclusion = EvaluationExclusion(employee_id=employee_id, period_id=period_id)
            self.db.add(exclusion)
        exclusion.reason = reason
        exclusion.note = note

        self.commit()
        self.db.refresh(exclusion)
        return exclusion

    def delete(self, exclusion_id: int) -> None:
        exclusion = self.get(exclusion_id)
        self.db.delete(exclusion)
        self.commit()
