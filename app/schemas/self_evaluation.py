from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Dict, Optional


class SelfEvaluationDraft(BaseModel):
    period_id: int
    self_process_scores: Optional[Dict[str, int]] = None
    self_growth_category_id: Optional[int] = None
    self_growth_level: Optional[int] = None


class SelfEvaluationSubmit(BaseModel):
    # Optional at the schema level so that the service reports every missing field at once
    period_id: int
    self_process_scores: Optional[Dict[str, int]] = None
    self_growth_category_id: Optional[int] = None
    self_growth_level: Optional[int] = None


class SelfEvaluationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    period_id: int
    user_id: int
    self_process_scores: Optional[Dict[str, int]] = None
    self_growth_category_id: Optional[int] = None
    self_growth_level: Optional[int] = None
    self_evaluation_status: Optional[str] = None
    submitted_at: Optional[datetime] = None
