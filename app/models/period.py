from sqlalchemy import Column, Integer, String, Date, DateTime, UniqueConstraint
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from app.database import Base
import enum

class PeriodStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    ACTIVE = "ACTIVE"
    REVIEW = "REVIEW"
    CLOSED = "CLOSED"

class EvaluationPeriod(Base):
    __tablename__ = "evaluation_periods"
    __table_args__ = (
        UniqueConstraint("year", "term", name="uq_evaluation_period_year_term"),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    year = Column(Integer, nullable=False)
    term = Column(String, nullable=False)  # "H1", "H2", "Q3", ...
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    status = Column(String, default=PeriodStatus.DRAFT.value, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    evaluations = relationship("Evaluation", back_populates="period")

    def __repr__(self):
        return f"<EvaluationPeriod {self.year}-{self.term} ({self.status})>"
