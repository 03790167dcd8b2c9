from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Optional


class OverrideCreate(BaseModel):
    employee_id: int
    evaluator_id: int
    period_id: Optional[int] = None
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None


class OverrideResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    evaluator_id: int
    period_id: Optional[int] = None
    effective_from: Optional[date] = None
    effective_to: Optional[date] = None
    created_at: Optional[datetime] = None


class ExclusionCreate(BaseModel):
    employee_id: int
    period_id: Optional[int] = None
    reason: Optional[str] = None
    note: Optional[str] = None


class ExclusionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    employee_id: int
    period_id: Optional[int] = None
    reason: str
    note: Optional[str] = None
    created_at: Optional[datetime] = None
