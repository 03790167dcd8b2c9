import logging
from typing import Mapping, Type

from sqlalchemy.orm import Session

from app.core.exceptions import DomainValidationError
from app.database import Base
from app.models.growth_category import GrowthCategory
from app.models.process_category import ProcessCategory

logger = logging.getLogger(__name__)

DEFAULT_PROCESS_CATEGORIES = [
    {"name": "initiative", "description": "Thinking independently and acting proactively", "sort_order": 1},
    {"name": "teamwork", "description": "Cooperating and coordinating within the team", "sort_order": 2},
    {"name": "responsibility", "description": "Commitment to delivering on the role", "sort_order": 3},
    {"name": "improvement", "description": "Looking for and proposing better ways of working", "sort_order": 4},
    {"name": "expertise", "description": "Applying the knowledge and skills the job needs", "sort_order": 5},
]

DEFAULT_GROWTH_CATEGORIES = [
    {"name": "Professional Skill Improvement", "description": "Acquiring and improving job skills", "coefficient": 1.0, "sort_order": 1},
    {"name": "Certification", "description": "Earning job-related certifications", "coefficient": 1.2, "sort_order": 2},
    {"name": "Domain Knowledge", "description": "Deepening industry and business knowledge", "coefficient": 1.0, "sort_order": 3},
    {"name": "Mentoring", "description": "Coaching and developing juniors", "coefficient": 1.3, "sort_order": 4},
    {"name": "Leadership", "description": "Leading the team", "coefficient": 1.3, "sort_order": 5},
    {"name": "Problem Solving", "description": "Solving problems and proposing improvements", "coefficient": 1.1, "sort_order": 6},
    {"name": "New Challenge", "description": "Taking on new fields and technologies", "coefficient": 1.2, "sort_order": 7},
]


def _ensure_defaults(db: Session, model: Type[Base], defaults) -> int:
    existing = {name for (name,) in db.query(model.name).all()}
    created = 0
    for category in defaults:
        if category["name"] in existing:
            continue
        db.add(model(**category))
        created += 1

    if created:
        try:
            db.commit()
        except Exception:
            db.rollback()
            raise
        logger.info(f"Seeded {created} default {model.__tablename__}")
    return created


def ensure_growth_categories(db: Session) -> int:
    """
    Creates any missing default growth categories. Safe to call repeatedly.
    Returns the number of categories created.
    """
    return _ensure_defaults(db, GrowthCategory, DEFAULT_GROWTH_CATEGORIES)


def ensure_process_categories(db: Session) -> int:
    return _ensure_defaults(db, ProcessCategory, DEFAULT_PROCESS_CATEGORIES)


def require_growth_category(db: Session, growth_category_id: int) -> GrowthCategory:
    """Returns the category, rejecting unknown and deactivated ones alike."""
    category = db.get(GrowthCategory, growth_category_id)
    if category is None or not category.is_active:
        raise DomainValidationError(
            "Unknown growth category", details={"growth_category_id": growth_category_id}
        )
    return category


def require_process_keys(db: Session, process_scores: Mapping[str, int]) -> None:
    """Every key of process_scores must name an active process category."""
    if not process_scores:
        return
    known = {
        name for (name,) in db.query(ProcessCategory.name).filter(ProcessCategory.is_active.is_(True)).all()
    }
    unknown = sorted(key for key in process_scores if key not in known)
    if unknown:
        raise DomainValidationError(
            f"Unknown process categories: {', '.join(unknown)}", details={"unknown": unknown}
        )
