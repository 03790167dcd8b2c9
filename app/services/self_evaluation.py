"""
Self-Evaluation Workflow

One record per (period, user). Employees may save drafts and submit once while
the period is ACTIVE. The "not yet submitted" guard is part of the upsert
statement itself:

    INSERT ... ON CONFLICT (period_id, user_id) DO UPDATE SET ...
    WHERE status IS NULL OR status != 'SUBMITTED'

so two racing submissions cannot both succeed.
"""
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import DomainValidationError, NotFoundError, StateConflictError
from app.models.period import EvaluationPeriod, PeriodStatus
from app.models.self_evaluation import SelfEvaluation, SelfEvaluationStatus
from app.services.base import BaseService
from app.services.master_data import require_growth_category, require_process_keys
from app.services.score_calculator import VALID_LEVELS
from app.services.upsert import conflict_aware_insert


class SelfEvaluationService(BaseService):

    def __init__(self, db: Session, actor_id: Optional[int] = None):
        super().__init__(db, actor_id)

    def get(self, period_id: int, user_id: int) -> Optional[SelfEvaluation]:
        return (
            self.db.query(SelfEvaluation)
            .filter(SelfEvaluation.period_id == period_id, SelfEvaluation.user_id == user_id)
            .populate_existing()
            .first()
        )

    def submit(
        self,
        period_id: int,
        user_id: int,
        process_scores: Optional[Mapping[str, int]],
        growth_category_id: Optional[int],
        growth_level: Optional[int],
    ) -> SelfEvaluation:
        missing = [
            name for name, value in (
                ("process_scores", process_scores),
                ("growth_category_id", growth_category_id),
                ("growth_level", growth_level),
            )
            if value is None or value == {}
        ]
        if missing:
            raise DomainValidationError("Missing required fields", details={"missing": missing})
        self._validate_levels(process_scores, growth_level)

        self._require_active_period(period_id)
        require_growth_category(self.db, growth_category_id)
        require_process_keys(self.db, process_scores)

        values = {
            "self_process_scores": dict(process_scores),
            "self_growth_category_id": growth_category_id,
            "self_growth_level": growth_level,
            "self_evaluation_status": SelfEvaluationStatus.SUBMITTED.value,
            "submitted_at": datetime.now(timezone.utc),
        }
        record = self._guarded_upsert(period_id, user_id, values)
        self.log_info(f"Self-evaluation submitted for user {user_id} in period {period_id}", period_id=period_id)
        return record

    def save_draft(
        self,
        period_id: int,
        user_id: int,
        process_scores: Optional[Mapping[str, int]] = None,
        growth_category_id: Optional[int] = None,
        growth_level: Optional[int] = None,
    ) -> SelfEvaluation:
        """Partial save; fields left as None keep their stored value."""
        self._validate_levels(process_scores or {}, growth_level)
        self._require_active_period(period_id)
        if growth_category_id is not None:
            require_growth_category(self.db, growth_category_id)
        require_process_keys(self.db, process_scores or {})

        values: Dict[str, Any] = {"self_evaluation_status": SelfEvaluationStatus.DRAFT.value}
        if process_scores is not None:
            values["self_process_scores"] = dict(process_scores)
        if growth_category_id is not None:
            values["self_growth_category_id"] = growth_category_id
        if growth_level is not None:
            values["self_growth_level"] = growth_level
        return self._guarded_upsert(period_id, user_id, values)

    # ------------------------------------------------------------------
    def _guarded_upsert(self, period_id: int, user_id: int, values: Dict[str, Any]) -> SelfEvaluation:
        table = SelfEvaluation.__table__
        stmt = conflict_aware_insert(self.db, table).values(period_id=period_id, user_id=user_id, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=["period_id", "user_id"],
            set_={key: getattr(stmt.excluded, key) for key in values},
            where=or_(
                table.c.self_evaluation_status.is_(None),
                table.c.self_evaluation_status != SelfEvaluationStatus.SUBMITTED.value,
            ),
        )
        result = self.db.execute(stmt)
        if result.rowcount == 0:
            self.db.rollback()
            raise StateConflictError(
                "Self evaluation has already been submitted",
                details={"period_id": period_id, "user_id": user_id},
            )
        self.commit()
        return self.get(period_id, user_id)

    def _require_active_period(self, period_id: int) -> EvaluationPeriod:
        period = self.db.get(EvaluationPeriod, period_id)
        if period is None:
            raise NotFoundError("Evaluation period", period_id)
        if period.status != PeriodStatus.ACTIVE.value:
            raise StateConflictError(
                "Self evaluation can only be changed during an ACTIVE period",
                details={"status": period.status},
            )
        return period

    @staticmethod
    def _validate_levels(process_scores: Mapping[str, int], growth_level: Optional[int]) -> None:
        bad = {key: level for key, level in process_scores.items() if level not in VALID_LEVELS}
        if bad:
            raise DomainValidationError("Process levels must be between 1 and 4", details={"invalid": bad})
        if growth_level is not None and growth_level not in VALID_LEVELS:
            raise DomainValidationError("growth_level must be between 1 and 4")
