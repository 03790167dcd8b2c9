from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, text
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum

class ExclusionReason(str, enum.Enum):
    MATERNITY_LEAVE = "MATERNITY_LEAVE"
    SICK_LEAVE = "SICK_LEAVE"
    RESIGNATION = "RESIGNATION"
    SECONDMENT = "SECONDMENT"
    PROBATION = "PROBATION"
    OTHER = "OTHER"

class EvaluationExclusion(Base):
    __tablename__ = "evaluation_exclusions"
    __table_args__ = (
        Index(
            "uq_evaluation_exclusion_employee_period", "employee_id", "period_id",
            unique=True, sqlite_where=text("period_id IS NOT NULL"), postgresql_where=text("period_id IS NOT NULL"),
        ),
        Index(
            "uq_evaluation_exclusion_employee_global", "employee_id",
            unique=True, sqlite_where=text("period_id IS NULL"), postgresql_where=text("period_id IS NULL"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    period_id = Column(Integer, ForeignKey("evaluation_periods.id"), nullable=True, index=True)  # NULL = every period
    reason = Column(String, default=ExclusionReason.OTHER.value, nullable=False)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    employee = relationship("Employee")
    period = relationship("EvaluationPeriod")
