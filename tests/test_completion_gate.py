import pytest

from app.core.exceptions import DomainValidationError, StateConflictError
from app.models.evaluation import Evaluation, EvaluationStatus
from app.services.evaluation_service import EvaluationService


@pytest.fixture
def evaluation(db_session, org, make_period):
    period = make_period(status="ACTIVE")
    record = Evaluation(period_id=period.id, employee_id=org.alice.id, evaluator_id=org.team_lead.id)
    db_session.add(record)
    db_session.commit()
    return record


def test_completion_names_missing_score3(db_session, evaluation):
    service = EvaluationService(db_session)
    service.update_scores(evaluation.id, {"score1": 4.0, "score2": 3.5})

    with pytest.raises(DomainValidationError, match="score3") as exc_info:
        service.complete(evaluation.id)
    assert exc_info.value.details["missing"] == ["score3"]
    assert service.get(evaluation.id).status == EvaluationStatus.IN_PROGRESS.value

    service.update_scores(evaluation.id, {"score3": 3.0})
    completed = service.complete(evaluation.id)
    assert completed.status == EvaluationStatus.COMPLETED.value
    assert completed.evaluated_at is not None


def test_first_score_moves_pending_to_in_progress(db_session, evaluation):
    assert evaluation.status == EvaluationStatus.PENDING.value
    updated = EvaluationService(db_session).update_scores(evaluation.id, {"score1": 3.0})
    assert updated.status == EvaluationStatus.IN_PROGRESS.value


def test_process_and_growth_scores_are_derived(db_session, evaluation, growth_category, process_categories):
    updated = EvaluationService(db_session).update_scores(evaluation.id, {
        "score1": 5.0,
        "process_scores": {"initiative": 4, "collaboration": 3},
        "growth_category_id": growth_category.id,
        "growth_level": 1,
    })
    assert updated.score2 == 4.25
    assert updated.score3 == 1.3
    # 1.5 + 1.7 + 0.39
    assert updated.final_score == 3.59
    assert updated.final_grade == "A"


def test_completed_evaluation_is_locked(db_session, evaluation):
    service = EvaluationService(db_session)
    service.update_scores(evaluation.id, {"score1": 3.0, "score2": 3.0, "score3": 3.0})
    service.complete(evaluation.id)

    with pytest.raises(StateConflictError):
        service.update_scores(evaluation.id, {"score1": 1.0})


def test_confirmed_evaluation_cannot_be_completed_again(db_session, evaluation):
    evaluation.status = EvaluationStatus.CONFIRMED.value
    evaluation.score2 = 3.0
    evaluation.score3 = 3.0
    db_session.commit()

    with pytest.raises(StateConflictError):
        EvaluationService(db_session).complete(evaluation.id)


def test_scoring_requires_active_or_review_period(db_session, evaluation):
    evaluation.period.status = "CLOSED"
    db_session.commit()

    with pytest.raises(StateConflictError):
        EvaluationService(db_session).update_scores(evaluation.id, {"score1": 3.0})


def test_growth_category_without_level_is_rejected(db_session, evaluation, growth_category):
    service = EvaluationService(db_session)

    with pytest.raises(DomainValidationError) as exc_info:
        service.update_scores(evaluation.id, {"growth_category_id": growth_category.id})
    assert exc_info.value.details["missing"] == ["growth_level"]

    stored = service.get(evaluation.id)
    assert stored.growth_category_id is None
    assert stored.status == EvaluationStatus.PENDING.value


def test_growth_level_alone_reuses_stored_category(db_session, evaluation, growth_category):
    service = EvaluationService(db_session)
    service.update_scores(evaluation.id, {"growth_category_id": growth_category.id, "growth_level": 1})

    updated = service.update_scores(evaluation.id, {"growth_level": 2})

    assert updated.growth_category_id == growth_category.id
    assert updated.growth_level == 2
    assert updated.score3 == pytest.approx(3.25)


def test_inactive_growth_category_is_rejected(db_session, evaluation):
    from app.models.growth_category import GrowthCategory
    retired = GrowthCategory(name="Retired", coefficient=2.0, is_active=False)
    db_session.add(retired)
    db_session.commit()

    with pytest.raises(DomainValidationError):
        EvaluationService(db_session).update_scores(
            evaluation.id, {"growth_category_id": retired.id, "growth_level": 4}
        )


def test_unknown_process_category_is_rejected(db_session, evaluation, process_categories):
    with pytest.raises(DomainValidationError) as exc_info:
        EvaluationService(db_session).update_scores(
            evaluation.id, {"process_scores": {"initiative": 3, "charisma": 4}}
        )
    assert exc_info.value.details["unknown"] == ["charisma"]
    assert EvaluationService(db_session).get(evaluation.id).process_scores is None


def test_completed_evaluation_cannot_be_completed_again(db_session, evaluation):
    service = EvaluationService(db_session)
    service.update_scores(evaluation.id, {"score2": 3.0, "score3": 3.0})
    first = service.complete(evaluation.id).evaluated_at

    with pytest.raises(StateConflictError):
        service.complete(evaluation.id)
    assert service.get(evaluation.id).evaluated_at == first
