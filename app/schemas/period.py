from pydantic import BaseModel, ConfigDict, Field, model_validator
from datetime import date, datetime
from typing import List, Optional


class PeriodCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    year: int = Field(..., ge=2000, le=2100)
    term: str = Field(..., min_length=1, max_length=20)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class PeriodUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class PeriodStatusUpdate(BaseModel):
    # Free-form so that unknown values reach the lifecycle service and get its error
    status: str


class PeriodResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    year: int
    term: str
    start_date: date
    end_date: date
    status: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class PeriodProgress(BaseModel):
    period_id: int
    total: int
    pending: int
    in_progress: int
    completed: int
    confirmed: int


class GenerationFailure(BaseModel):
    employee_id: int
    error: str


class GenerationResult(BaseModel):
    period_id: int
    total_employees: int
    created: int
    skipped: int
    unresolved: List[int]
    failed: List[GenerationFailure] = []
