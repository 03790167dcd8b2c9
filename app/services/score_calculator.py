"""
Score calculation for the three evaluation criteria.

- score1: results (entered by the evaluator)
- score2: process, the mean of per-category levels mapped to scores
- score3: growth, level score x category coefficient, capped at MAX_GROWTH_SCORE
"""
from typing import Dict, Mapping, Optional

from pydantic import BaseModel

from app.core.config import ScoreWeights, settings

# T1..T4 level -> score
LEVEL_TO_SCORE: Dict[int, float] = {
    1: 1.0,
    2: 2.5,
    3: 3.5,
    4: 5.0,
}
VALID_LEVELS = frozenset(LEVEL_TO_SCORE)
DEFAULT_LEVEL_SCORE = 2.5
MAX_GROWTH_SCORE = 5.0

GRADE_THRESHOLDS = (
    ("S", 4.5),
    ("A", 3.5),
    ("B", 2.5),
    ("C", 1.5),
)


class ScoreResult(BaseModel):
    score1: float
    score2: float
    score3: float
    weighted_score1: float
    weighted_score2: float
    weighted_score3: float
    final_score: float
    final_grade: str


def level_score(level: int) -> float:
    return LEVEL_TO_SCORE.get(level, DEFAULT_LEVEL_SCORE)


def calculate_process_score(process_scores: Mapping[str, int]) -> float:
    if not process_scores:
        return 0.0
    scores = [level_score(level) for level in process_scores.values()]
    return round(sum(scores) / len(scores), 2)


def calculate_growth_score(growth_level: int, coefficient: Optional[float] = None) -> float:
    coefficient = coefficient or 1.0
    return min(round(level_score(growth_level) * coefficient, 2), MAX_GROWTH_SCORE)


def determine_grade(score: float) -> str:
    for grade, threshold in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "D"


def calculate_final_score(score1: float, score2: float, score3: float,
                          weights: Optional[ScoreWeights] = None) -> ScoreResult:
    weights = weights or settings.weights
    weighted1 = round(score1 * weights.results_weight / 100, 2)
    weighted2 = round(score2 * weights.process_weight / 100, 2)
    weighted3 = round(score3 * weights.growth_weight / 100, 2)
    final = round(weighted1 + weighted2 + weighted3, 2)
    return ScoreResult(
        score1=score1,
        score2=score2,
        score3=score3,
        weighted_score1=weighted1,
        weighted_score2=weighted2,
        weighted_score3=weighted3,
        final_score=final,
        final_grade=determine_grade(final),
    )
