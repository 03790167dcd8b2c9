"""
Evaluator-side scoring and the completion gate.
"""
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import DomainValidationError, NotFoundError, StateConflictError
from app.models.evaluation import Evaluation, EvaluationStatus
from app.models.period import PeriodStatus
from app.services.base import BaseService
from app.services import score_calculator
from app.services.master_data import require_growth_category, require_process_keys
from app.services.scope import ScopeResolver

REQUIRED_FOR_COMPLETION = ("score2", "score3")
SCORING_PERIOD_STATES = frozenset({PeriodStatus.ACTIVE.value, PeriodStatus.REVIEW.value})
LOCKED_STATES = frozenset({EvaluationStatus.COMPLETED.value, EvaluationStatus.CONFIRMED.value})


class EvaluationService(BaseService):

    def __init__(self, db: Session, actor_id: Optional[int] = None):
        super().__init__(db, actor_id)

    def get(self, evaluation_id: int) -> Evaluation:
        evaluation = self.db.get(Evaluation, evaluation_id)
        if evaluation is None:
            raise NotFoundError("Evaluation", evaluation_id)
        return evaluation

    def list(
        self,
        period_id: Optional[int] = None,
        evaluator_id: Optional[int] = None,
        employee_id: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[Evaluation]:
        query = self.db.query(Evaluation)
        if period_id is not None:
            query = query.filter(Evaluation.period_id == period_id)
        if evaluator_id is not None:
            query = query.filter(Evaluation.evaluator_id == evaluator_id)
        if employee_id is not None:
            query = query.filter(Evaluation.employee_id == employee_id)
        if status:
            if status not in {s.value for s in EvaluationStatus}:
                raise DomainValidationError(f"Invalid evaluation status '{status}'")
            query = query.filter(Evaluation.status == status)
        return query.order_by(Evaluation.period_id, Evaluation.employee_id).all()

    def list_evaluatees(self, evaluator_id: int, period_id: int) -> List[Evaluation]:
        """
        Evaluations assigned to the evaluator for the period. Employees excluded
        after generation, for the period or globally, drop out of the list.
        """
        query = self.db.query(Evaluation).filter(
            Evaluation.period_id == period_id,
            Evaluation.evaluator_id == evaluator_id,
        )
        excluded = ScopeResolver(self.db).excluded_employee_ids(period_id)
        if excluded:
            query = query.filter(Evaluation.employee_id.notin_(excluded))
        return query.order_by(Evaluation.employee_id).all()

    def update_scores(self, evaluation_id: int, changes: Dict[str, Any]) -> Evaluation:
        """
        Applies evaluator input. score2 is derived from process_scores and
        score3 from the growth selection unless given explicitly. A growth
        category or level sent alone is paired with the stored counterpart.
        The final score and grade are recomputed on every update.
        """
        evaluation = self.get(evaluation_id)
        if evaluation.status in LOCKED_STATES:
            raise StateConflictError(
                f"Evaluation is {evaluation.status} and can no longer be edited",
                details={"status": evaluation.status},
            )
        if evaluation.period.status not in SCORING_PERIOD_STATES:
            raise StateConflictError(
                "Evaluations can only be scored while the period is ACTIVE or REVIEW",
                details={"period_status": evaluation.period.status},
            )

        process_scores = changes.get("process_scores")
        require_process_keys(self.db, process_scores or {})

        growth_category_id = changes.get("growth_category_id")
        growth_level = changes.get("growth_level")
        category = None
        if growth_category_id is not None or growth_level is not None:
            if growth_category_id is None:
                growth_category_id = evaluation.growth_category_id
            if growth_level is None:
                growth_level = evaluation.growth_level
            missing = [
                name for name, value in (("growth_category_id", growth_category_id), ("growth_level", growth_level))
                if value is None
            ]
            if missing:
                raise DomainValidationError(
                    "growth_category_id and growth_level must be set together", details={"missing": missing}
                )
            category = require_growth_category(self.db, growth_category_id)

        for field in ("score1", "score2", "score3", "overall_comment"):
            if changes.get(field) is not None:
                setattr(evaluation, field, changes[field])

        if process_scores:
            evaluation.process_scores = dict(process_scores)
            if changes.get("score2") is None:
                evaluation.score2 = score_calculator.calculate_process_score(process_scores)

        if category is not None:
            evaluation.growth_category_id = growth_category_id
            evaluation.growth_level = growth_level
            if changes.get("score3") is None:
                evaluation.score3 = score_calculator.calculate_growth_score(growth_level, category.coefficient)

        result = score_calculator.calculate_final_score(
            evaluation.score1 or 0, evaluation.score2 or 0, evaluation.score3 or 0
        )
        evaluation.final_score = result.final_score
        evaluation.final_grade = result.final_grade

        if evaluation.status == EvaluationStatus.PENDING.value:
            evaluation.status = EvaluationStatus.IN_PROGRESS.value

        self.commit()
        self.db.refresh(evaluation)
        return evaluation

    def complete(self, evaluation_id: int) -> Evaluation:
        evaluation = self.get(evaluation_id)
        if evaluation.status in LOCKED_STATES:
            raise StateConflictError(
                f"Evaluation is already {evaluation.status}", details={"status": evaluation.status}
            )

        missing = [slot for slot in REQUIRED_FOR_COMPLETION if getattr(evaluation, slot) is None]
        if missing:
            raise DomainValidationError(
                f"All scores must be entered before completing: missing {', '.join(missing)}",
                details={"missing": missing},
            )

        evaluation.status = EvaluationStatus.COMPLETED.value
        evaluation.evaluated_at = datetime.now(timezone.utc)
        self.commit()
        self.db.refresh(evaluation)
        self.log_info(f"Evaluation {evaluation_id} completed", evaluation_id=evaluation_id)
        return evaluation
