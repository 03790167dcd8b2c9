"""
Generation Engine

Materializes one PENDING evaluation per in-scope employee for a period.

- Idempotent: an employee who already has a record is counted as skipped.
- Each employee is resolved and inserted with ``INSERT ... ON CONFLICT DO NOTHING``
  on (period_id, employee_id) inside one SAVEPOINT, so a concurrent run inserting
  the same row turns into a skip and one bad employee never aborts the batch.
- Employees without a resolvable evaluator are reported, not generated.
- No notifications or audit entries are written here; callers do that after
  the run completes.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import NotFoundError
from app.models.employee import Employee
from app.models.evaluation import Evaluation, EvaluationStatus
from app.models.period import EvaluationPeriod
from app.services.base import BaseService
from app.services.evaluator_resolver import EvaluatorResolver, ResolvedEvaluator
from app.services.scope import ScopeResolver
from app.services.upsert import conflict_aware_insert


@dataclass
class GenerationSummary:
    period_id: int
    total_employees: int = 0
    created: int = 0
    skipped: int = 0
    unresolved: List[int] = field(default_factory=list)
    failed: List[Dict[str, object]] = field(default_factory=list)

    @property
    def has_partial_failure(self) -> bool:
        return bool(self.unresolved or self.failed)


class GenerationService(BaseService):

    def __init__(self, db: Session, chunk_size: Optional[int] = None):
        super().__init__(db)
        self.chunk_size = chunk_size or settings.generation_chunk_size
        self.scope = ScopeResolver(db)
        self.resolver = EvaluatorResolver(db)

    def generate(self, period_id: int, unit_id: Optional[int] = None) -> GenerationSummary:
        period = self.db.get(EvaluationPeriod, period_id)
        if period is None:
            raise NotFoundError("Evaluation period", period_id)

        employees = self.scope.resolve(period_id, unit_id)
        summary = GenerationSummary(period_id=period_id, total_employees=len(employees))

        for start in range(0, len(employees), self.chunk_size):
            self._generate_chunk(period, employees[start:start + self.chunk_size], summary)
            self.commit()

        self.log_info(
            f"Generated evaluations for period {period_id}: "
            f"{summary.created} created, {summary.skipped} skipped, "
            f"{len(summary.unresolved)} unresolved, {len(summary.failed)} failed",
            period_id=period_id,
            unit_id=unit_id,
        )
        return summary

    def _generate_chunk(self, period: EvaluationPeriod, employees: List[Employee], summary: GenerationSummary):
        existing = {
            row.employee_id
            for row in self.db.query(Evaluation.employee_id).filter(
                Evaluation.period_id == period.id,
                Evaluation.employee_id.in_([e.id for e in employees]),
            ).all()
        }

        for employee in employees:
            employee_id = employee.id
            if employee_id in existing:
                summary.skipped += 1
                continue
            try:
                # Resolution reads share the savepoint so a failed query only rolls back this employee.
                with self.db.begin_nested():
                    resolved = self.resolver.resolve(employee, period)
                    created = self._insert_evaluation(period, employee, resolved) if resolved is not None else None
            except Exception as e:
                self._logger.error(
                    f"Evaluation generation failed for employee {employee_id}: {e}", exc_info=True
                )
                summary.failed.append({"employee_id": employee_id, "error": str(e)})
                continue

            if resolved is None:
                self._logger.debug(f"No evaluator for employee {employee_id} in period {period.id}")
                summary.unresolved.append(employee_id)
            elif created:
                summary.created += 1
            else:
                summary.skipped += 1

    def _insert_evaluation(self, period: EvaluationPeriod, employee: Employee, resolved: ResolvedEvaluator) -> bool:
        """Returns False when another writer already created the row."""
        stmt = conflict_aware_insert(self.db, Evaluation.__table__).values(
            period_id=period.id,
            employee_id=employee.id,
            evaluator_id=resolved.evaluator_id,
            evaluator_source=resolved.source,
            unit_name=employee.unit.name if employee.unit is not None else None,
            status=EvaluationStatus.PENDING.value,
        ).on_conflict_do_nothing(index_elements=["period_id", "employee_id"])
        return self.db.execute(stmt).rowcount == 1
