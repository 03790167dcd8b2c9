from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime
from typing import Dict, Optional


class EvaluationUpdate(BaseModel):
    score1: Optional[float] = Field(None, ge=0)
    score2: Optional[float] = Field(None, ge=0)
    score3: Optional[float] = Field(None, ge=0)
    process_scores: Optional[Dict[str, int]] = None
    growth_category_id: Optional[int] = None
    growth_level: Optional[int] = Field(None, ge=1, le=4)
    overall_comment: Optional[str] = None

    @field_validator("process_scores")
    @classmethod
    def check_levels(cls, value: Optional[Dict[str, int]]):
        if value is not None:
            bad = [key for key, level in value.items() if level not in (1, 2, 3, 4)]
            if bad:
                raise ValueError(f"levels must be between 1 and 4: {', '.join(bad)}")
        return value


class EvaluationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    period_id: int
    employee_id: int
    evaluator_id: Optional[int] = None
    evaluator_source: Optional[str] = None
    unit_name: Optional[str] = None
    status: str
    score1: Optional[float] = None
    score2: Optional[float] = None
    score3: Optional[float] = None
    process_scores: Optional[Dict[str, int]] = None
    growth_category_id: Optional[int] = None
    growth_level: Optional[int] = None
    final_score: Optional[float] = None
    final_grade: Optional[str] = None
    overall_comment: Optional[str] = None
    evaluated_at: Optional[datetime] = None
