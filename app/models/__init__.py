# Models package
# Importing modules here ensures they are registered with SQLAlchemy Base
from . import (
    organization, employee, period, growth_category, process_category,
    evaluator_override, exclusion, evaluation, self_evaluation,
    audit_log, notification
)

# Explicit class exports for cleaner imports
from .organization import OrgUnit, UnitLevel
from .employee import Employee
from .period import EvaluationPeriod, PeriodStatus
from .growth_category import GrowthCategory
from .process_category import ProcessCategory
from .evaluator_override import EvaluatorOverride
from .exclusion import EvaluationExclusion, ExclusionReason
from .evaluation import Evaluation, EvaluationStatus
from .self_evaluation import SelfEvaluation, SelfEvaluationStatus
from .audit_log import AuditLog
from .notification import Notification

__all__ = [
    "OrgUnit",
    "UnitLevel",
    "Employee",
    "EvaluationPeriod",
    "PeriodStatus",
    "GrowthCategory",
    "ProcessCategory",
    "EvaluatorOverride",
    "EvaluationExclusion",
    "ExclusionReason",
    "Evaluation",
    "EvaluationStatus",
    "SelfEvaluation",
    "SelfEvaluationStatus",
    "AuditLog",
    "Notification",
]
