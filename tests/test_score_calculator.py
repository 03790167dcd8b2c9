import pytest

from app.core.config import ScoreWeights
from app.services import score_calculator


@pytest.mark.parametrize("score,grade", [
    (5.0, "S"), (4.5, "S"), (4.49, "A"), (3.5, "A"), (2.5, "B"), (1.5, "C"), (1.49, "D"), (0, "D"),
])
def test_grade_thresholds(score, grade):
    assert score_calculator.determine_grade(score) == grade


def test_process_score_is_mean_of_level_scores():
    assert score_calculator.calculate_process_score({"a": 1, "b": 4}) == 3.0
    assert score_calculator.calculate_process_score({}) == 0.0


def test_growth_score_is_capped():
    assert score_calculator.calculate_growth_score(4, 1.3) == 5.0
    assert score_calculator.calculate_growth_score(2) == 2.5


def test_final_score_uses_default_weights():
    result = score_calculator.calculate_final_score(4.0, 3.0, 2.0)
    # 1.2 + 1.2 + 0.6
    assert result.final_score == 3.0
    assert result.final_grade == "B"


def test_final_score_with_custom_weights():
    weights = ScoreWeights(results_weight=50, process_weight=50, growth_weight=0)
    result = score_calculator.calculate_final_score(4.0, 5.0, 1.0, weights=weights)
    assert result.final_score == 4.5
    assert result.weighted_score3 == 0
    assert result.final_grade == "S"
