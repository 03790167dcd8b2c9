"""
Scope Resolver

Works out which employees take part in a period: active, inside the optional
organizational filter, and not excluded for that period or globally.
"""
from typing import List, Optional, Set

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.employee import Employee
from app.models.exclusion import EvaluationExclusion
from app.models.organization import OrgUnit
from app.services.base import BaseService


class ScopeResolver(BaseService):

    def __init__(self, db: Session, max_depth: Optional[int] = None):
        super().__init__(db)
        self.max_depth = max_depth if max_depth is not None else settings.max_hierarchy_depth

    def excluded_employee_ids(self, period_id: int) -> Set[int]:
        rows = self.db.query(EvaluationExclusion.employee_id).filter(
            or_(
                EvaluationExclusion.period_id == period_id,
                EvaluationExclusion.period_id.is_(None),
            )
        ).all()
        return {row.employee_id for row in rows}

    def unit_subtree_ids(self, unit_id: int) -> Set[int]:
        """The unit and its descendants, walked level by level up to max_depth."""
        collected = {unit_id}
        frontier = {unit_id}
        for _ in range(self.max_depth):
            children = {
                row.id
                for row in self.db.query(OrgUnit.id).filter(OrgUnit.parent_id.in_(frontier)).all()
            }
            frontier = children - collected
            if not frontier:
                break
            collected |= frontier
        return collected

    def resolve(self, period_id: int, unit_id: Optional[int] = None) -> List[Employee]:
        """
        Returns in-scope employees ordered by unit code, then employee id.
        Employees without a unit sort last. An empty list is a valid result.
        """
        query = (
            self.db.query(Employee)
            .outerjoin(OrgUnit, Employee.unit_id == OrgUnit.id)
            .filter(Employee.is_active.is_(True))
        )
        if unit_id is not None:
            query = query.filter(Employee.unit_id.in_(self.unit_subtree_ids(unit_id)))

        excluded = self.excluded_employee_ids(period_id)
        if excluded:
            query = query.filter(Employee.id.notin_(excluded))

        employees = query.order_by(OrgUnit.code.is_(None), OrgUnit.code, Employee.id).all()
        self._logger.debug(
            f"Scope for period {period_id}: {len(employees)} employees ({len(excluded)} excluded)"
        )
        return employees

    def resolve_ids(self, period_id: int, unit_id: Optional[int] = None) -> List[int]:
        return [employee.id for employee in self.resolve(period_id, unit_id)]
