from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.sql import func
from app.database import Base
import enum

class SelfEvaluationStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"

class SelfEvaluation(Base):
    __tablename__ = "self_evaluations"
    __table_args__ = (
        UniqueConstraint("period_id", "user_id", name="uq_self_evaluation_period_user"),
    )

    id = Column(Integer, primary_key=True, index=True)
    period_id = Column(Integer, ForeignKey("evaluation_periods.id"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, index=True)  # identity-service user id
    self_process_scores = Column(JSON, nullable=True)
    self_growth_category_id = Column(Integer, ForeignKey("growth_categories.id"), nullable=True)
    self_growth_level = Column(Integer, nullable=True)
    self_evaluation_status = Column(String, nullable=True)  # NULL until first save
    submitted_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())
