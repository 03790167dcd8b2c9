import pytest

from app.core.exceptions import DomainValidationError, StateConflictError
from app.models.self_evaluation import SelfEvaluationStatus
from app.services.self_evaluation import SelfEvaluationService

SCORES = {"initiative": 3, "collaboration": 4}

pytestmark = pytest.mark.usefixtures("process_categories")


def test_submit_then_second_submit_conflicts(db_session, org, make_period, growth_category):
    period = make_period(status="ACTIVE")
    service = SelfEvaluationService(db_session)

    record = service.submit(period.id, org.alice.id, SCORES, growth_category.id, 2)
    assert record.self_evaluation_status == SelfEvaluationStatus.SUBMITTED.value
    assert record.submitted_at is not None

    with pytest.raises(StateConflictError):
        service.submit(period.id, org.alice.id, {"initiative": 1}, growth_category.id, 1)

    stored = service.get(period.id, org.alice.id)
    assert stored.self_process_scores == SCORES


def test_submitted_record_rejects_drafts(db_session, org, make_period, growth_category):
    period = make_period(status="ACTIVE")
    service = SelfEvaluationService(db_session)
    service.submit(period.id, org.alice.id, SCORES, growth_category.id, 2)

    with pytest.raises(StateConflictError):
        service.save_draft(period.id, org.alice.id, process_scores={"initiative": 1})


def test_draft_then_submit(db_session, org, make_period, growth_category):
    period = make_period(status="ACTIVE")
    service = SelfEvaluationService(db_session)

    draft = service.save_draft(period.id, org.bob.id, process_scores={"initiative": 2})
    assert draft.self_evaluation_status == SelfEvaluationStatus.DRAFT.value
    assert draft.submitted_at is None

    # A later partial save keeps earlier fields
    draft = service.save_draft(period.id, org.bob.id, growth_category_id=growth_category.id)
    assert draft.self_process_scores == {"initiative": 2}
    assert draft.self_growth_category_id == growth_category.id

    submitted = service.submit(period.id, org.bob.id, SCORES, growth_category.id, 3)
    assert submitted.id == draft.id
    assert submitted.self_evaluation_status == SelfEvaluationStatus.SUBMITTED.value


@pytest.mark.parametrize("status", ["DRAFT", "REVIEW", "CLOSED"])
def test_submit_outside_active_period(db_session, org, make_period, growth_category, status):
    period = make_period(status=status)
    with pytest.raises(StateConflictError):
        SelfEvaluationService(db_session).submit(period.id, org.alice.id, SCORES, growth_category.id, 2)


def test_missing_fields_are_all_reported(db_session, org, make_period):
    period = make_period(status="ACTIVE")
    with pytest.raises(DomainValidationError) as exc_info:
        SelfEvaluationService(db_session).submit(period.id, org.alice.id, {}, None, None)
    assert exc_info.value.details["missing"] == ["process_scores", "growth_category_id", "growth_level"]


def test_out_of_range_level_is_rejected(db_session, org, make_period, growth_category):
    period = make_period(status="ACTIVE")
    with pytest.raises(DomainValidationError):
        SelfEvaluationService(db_session).submit(period.id, org.alice.id, {"initiative": 7}, growth_category.id, 2)


def test_unknown_growth_category_is_rejected(db_session, org, make_period):
    period = make_period(status="ACTIVE")
    with pytest.raises(DomainValidationError):
        SelfEvaluationService(db_session).submit(period.id, org.alice.id, SCORES, 987654, 2)


def test_unknown_process_category_is_rejected(db_session, org, make_period, growth_category):
    period = make_period(status="ACTIVE")
    service = SelfEvaluationService(db_session)

    with pytest.raises(DomainValidationError) as exc_info:
        service.save_draft(period.id, org.alice.id, process_scores={"initiative": 2, "charisma": 3})
    assert exc_info.value.details["unknown"] == ["charisma"]
    assert service.get(period.id, org.alice.id) is None


def test_inactive_process_category_is_rejected(db_session, org, make_period, growth_category, process_categories):
    period = make_period(status="ACTIVE")
    process_categories[1].is_active = False
    db_session.commit()

    with pytest.raises(DomainValidationError) as exc_info:
        SelfEvaluationService(db_session).submit(period.id, org.alice.id, SCORES, growth_category.id, 2)
    assert exc_info.value.details["unknown"] == ["collaboration"]
