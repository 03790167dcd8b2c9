from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base

class EvaluatorOverride(Base):
    """
    Administrator-assigned evaluator that supersedes the organizational default.
    period_id NULL means the override applies to every period.
    """
    __tablename__ = "evaluator_overrides"
    __table_args__ = (
        # NULLs are distinct in a plain unique constraint, so the global row gets its own partial index
        Index(
            "uq_evaluator_override_employee_period", "employee_id", "period_id",
            unique=True, sqlite_where=text("period_id IS NOT NULL"), postgresql_where=text("period_id IS NOT NULL"),
        ),
        Index(
            "uq_evaluator_override_employee_global", "employee_id",
            unique=True, sqlite_where=text("period_id IS NULL"), postgresql_where=text("period_id IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    evaluator_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    period_id = Column(Integer, ForeignKey("evaluation_periods.id"), nullable=True, index=True)
    effective_from = Column(Date, nullable=True)
    effective_to = Column(Date, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Employee", foreign_keys=[employee_id])
    evaluator = relationship("Employee", foreign_keys=[evaluator_id])
    period = relationship("EvaluationPeriod")

    def is_effective_during(self, start, end) -> bool:
        """True when [effective_from, effective_to] intersects [start, end]; a missing bound is open."""
        if self.effective_from is not None and self.effective_from > end:
            return False
        if self.effective_to is not None and self.effective_to < start:
            return False
        return True
