"""
Evaluator Resolver

Priority for a single employee and period:
1. Override registered for this period, effective during the period's dates
2. Global override (period_id NULL), same date rule
3. First manager found walking unit -> parent -> grandparent who is not the employee
4. Otherwise unresolved (None)

Each step is a separate method so precedence can be checked in isolation.
"""
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.models.employee import Employee
from app.models.evaluator_override import EvaluatorOverride
from app.models.organization import OrgUnit
from app.models.period import EvaluationPeriod
from app.services.base import BaseService

SOURCE_PERIOD_OVERRIDE = "override_period"
SOURCE_GLOBAL_OVERRIDE = "override_global"


@dataclass(frozen=True)
class ResolvedEvaluator:
    evaluator_id: int
    source: str  # one of the override sources or the unit level that supplied the manager


class EvaluatorResolver(BaseService):

    def __init__(self, db: Session, max_depth: Optional[int] = None):
        super().__init__(db)
        self.max_depth = max_depth if max_depth is not None else settings.max_hierarchy_depth
        # Units are shared by many employees during a generation run
        self._units: Dict[int, Optional[OrgUnit]] = {}

    def _unit(self, unit_id: int) -> Optional[OrgUnit]:
        if unit_id not in self._units:
            self._units[unit_id] = self.db.get(OrgUnit, unit_id)
        return self._units[unit_id]

    def _effective_override(self, employee_id: int, period: EvaluationPeriod, period_id: Optional[int]) -> Optional[EvaluatorOverride]:
        query = self.db.query(EvaluatorOverride).filter(EvaluatorOverride.employee_id == employee_id)
        if period_id is None:
            query = query.filter(EvaluatorOverride.period_id.is_(None))
        else:
            query = query.filter(EvaluatorOverride.period_id == period_id)
        override = query.first()
        if override is None:
            return None
        if not override.is_effective_during(period.start_date, period.end_date):
            self._logger.debug(
                f"Override {override.id} for employee {employee_id} is outside period {period.id}"
            )
            return None
        return override

    def find_period_override(self, employee_id: int, period: EvaluationPeriod) -> Optional[EvaluatorOverride]:
        return self._effective_override(employee_id, period, period.id)

    def find_global_override(self, employee_id: int, period: EvaluationPeriod) -> Optional[EvaluatorOverride]:
        return self._effective_override(employee_id, period, None)

    def resolve_from_hierarchy(self, employee: Employee) -> Optional[ResolvedEvaluator]:
        """
        Walks the parent chain by id. A cycle or a chain longer than max_depth
        stops the walk and leaves the employee unresolved.
        """
        visited = set()
        unit_id = employee.unit_id
        hops = 0
        while unit_id is not None and hops < self.max_depth:
            if unit_id in visited:
                self.log_warning(
                    f"Cycle in unit hierarchy at unit {unit_id} while resolving employee {employee.id}"
                )
                return None
            visited.add(unit_id)

            unit = self._unit(unit_id)
            if unit is None:
                return None
            if unit.manager_id is not None and unit.manager_id != employee.id:
                return ResolvedEvaluator(evaluator_id=unit.manager_id, source=unit.level)

            unit_id = unit.parent_id
            hops += 1
        return None

    def resolve(self, employee: Employee, period: EvaluationPeriod) -> Optional[ResolvedEvaluator]:
        override = self.find_period_override(employee.id, period)
        if override is not None:
            return ResolvedEvaluator(evaluator_id=override.evaluator_id, source=SOURCE_PERIOD_OVERRIDE)

        override = self.find_global_override(employee.id, period)
        if override is not None:
            return ResolvedEvaluator(evaluator_id=override.evaluator_id, source=SOURCE_GLOBAL_OVERRIDE)

        return self.resolve_from_hierarchy(employee)
