from sqlalchemy import Column, Integer, String, Float, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum

class EvaluationStatus(str, enum.Enum):
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CONFIRMED = "CONFIRMED"

class Evaluation(Base):
    __tablename__ = "evaluations"
    __table_args__ = (
        UniqueConstraint("period_id", "employee_id", name="uq_evaluation_period_employee"),
    )

    id = Column(Integer, primary_key=True, index=True)
    period_id = Column(Integer, ForeignKey("evaluation_periods.id"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    evaluator_id = Column(Integer, ForeignKey("employees.id"), nullable=True, index=True)
    status = Column(String, default=EvaluationStatus.PENDING.value, nullable=False, index=True)

    # Snapshot of the organization at generation time
    unit_name = Column(String, nullable=True)
    evaluator_source = Column(String, nullable=True)  # override_period, override_global, TEAM, ...

    # score1: results, score2: process, score3: growth
    score1 = Column(Float, nullable=True)
    score2 = Column(Float, nullable=True)
    score3 = Column(Float, nullable=True)
    process_scores = Column(JSON, nullable=True)  # {"initiative": 3, ...}
    growth_category_id = Column(Integer, ForeignKey("growth_categories.id"), nullable=True)
    growth_level = Column(Integer, nullable=True)

    final_score = Column(Float, nullable=True)
    final_grade = Column(String, nullable=True)
    overall_comment = Column(Text, nullable=True)

    evaluated_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    period = relationship("EvaluationPeriod", back_populates="evaluations")
    employee = relationship("Employee", foreign_keys=[employee_id])
    evaluator = relationship("Employee", foreign_keys=[evaluator_id])
    growth_category = relationship("GrowthCategory")
