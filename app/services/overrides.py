from datetime import date
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import DomainValidationError, NotFoundError
from app.models.employee import Employee
from app.models.evaluator_override import EvaluatorOverride
from app.models.period import EvaluationPeriod
from app.services.base import BaseService


class EvaluatorOverrideService(BaseService):
    """Create-or-update keyed on (employee_id, period_id); NULL period = global."""

    def __init__(self, db: Session, actor_id: Optional[int] = None):
        super().__init__(db, actor_id)

    def list(self, period_id: Optional[int] = None, employee_id: Optional[int] = None) -> List[EvaluatorOverride]:
        query = self.db.query(EvaluatorOverride)
        if period_id is not None:
            query = query.filter(
                or_(EvaluatorOverride.period_id == period_id, EvaluatorOverride.period_id.is_(None))
            )
        if employee_id is not None:
            query = query.filter(EvaluatorOverride.employee_id == employee_id)
        return query.order_by(EvaluatorOverride.created_at.desc(), EvaluatorOverride.id.desc()).all()

    def get(self, override_id: int) -> EvaluatorOverride:
        override = self.db.get(EvaluatorOverride, override_id)
        if override is None:
            raise NotFoundError("Evaluator override", override_id)
        return override

    def upsert(
        self,
        employee_id: int,
        evaluator_id: int,
        period_id: Optional[int] = None,
        effective_from: Optional[date] = None,
        effective_to: Optional[date] = None,
    ) -> EvaluatorOverride:
        if employee_id == evaluator_id:
            raise DomainValidationError("Cannot set an employee as their own evaluator")
        if effective_from and effective_to and effective_from > effective_to:
            raise DomainValidationError("effective_from must not be after effective_to")
        for label, emp_id in (("Employee", employee_id), ("Evaluator", evaluator_id)):
            if self.db.get(Employee, emp_id) is None:
                raise NotFoundError(label, emp_id)
        if period_id is not None and self.db.get(EvaluationPeriod, period_id) is None:
            raise NotFoundError("Evaluation period", period_id)

        query = self.db.query(EvaluatorOverride).filter(EvaluatorOverride.employee_id == employee_id)
        if period_id is None:
            query = query.filter(EvaluatorOverride.period_id.is_(None))
        else:
            query = query.filter(EvaluatorOverride.period_id == period_id)
        override = query.first()

        if override is None:
            override = EvaluatorOverride(employee_id=employee_id, period_id=period_id)
            self.db.add(override)
        override.evaluator_id = evaluator_id
        override.effective_from = effective_from
        override.effective_to = effective_to

        self.commit()
        self.db.refresh(override)
        return override

    def delete(self, override_id: int) -> None:
        override = self.get(override_id)
        self.db.delete(override)
        self.commit()
