from datetime import date

from app.models.evaluator_override import EvaluatorOverride
from app.services.evaluator_resolver import (
    SOURCE_GLOBAL_OVERRIDE, SOURCE_PERIOD_OVERRIDE, EvaluatorResolver,
)


def _override(db_session, employee, evaluator, period=None, effective_from=None, effective_to=None):
    override = EvaluatorOverride(
        employee_id=employee.id,
        evaluator_id=evaluator.id,
        period_id=period.id if period else None,
        effective_from=effective_from,
        effective_to=effective_to,
    )
    db_session.add(override)
    db_session.commit()
    return override


def test_team_member_gets_team_manager(db_session, org, make_period):
    resolved = EvaluatorResolver(db_session).resolve(org.alice, make_period())
    assert resolved.evaluator_id == org.team_lead.id
    assert resolved.source == "TEAM"


def test_hierarchy_walks_upward(db_session, org, make_period):
    period = make_period()
    resolver = EvaluatorResolver(db_session)

    assert resolver.resolve(org.team_lead, period).evaluator_id == org.dept_head.id
    division_pick = resolver.resolve(org.dept_head, period)
    assert division_pick.evaluator_id == org.ceo.id
    assert division_pick.source == "DIVISION"


def test_manager_of_own_unit_is_skipped(db_session, org, make_period):
    org.team_lead.unit_id = org.team.id
    db_session.commit()

    resolved = EvaluatorResolver(db_session).resolve(org.team_lead, make_period())
    assert resolved.evaluator_id == org.dept_head.id
    assert resolved.source == "DEPARTMENT"


def test_top_of_hierarchy_is_unresolved(db_session, org, make_period):
    assert EvaluatorResolver(db_session).resolve(org.ceo, make_period()) is None


def test_period_override_beats_global_override(db_session, org, make_period):
    period = make_period()
    _override(db_session, org.alice, org.ceo)
    _override(db_session, org.alice, org.dept_head, period=period)

    resolved = EvaluatorResolver(db_session).resolve(org.alice, period)
    assert resolved.evaluator_id == org.dept_head.id
    assert resolved.source == SOURCE_PERIOD_OVERRIDE


def test_global_override_beats_hierarchy(db_session, org, make_period):
    _override(db_session, org.alice, org.ceo)

    resolved = EvaluatorResolver(db_session).resolve(org.alice, make_period())
    assert resolved.evaluator_id == org.ceo.id
    assert resolved.source == SOURCE_GLOBAL_OVERRIDE


def test_override_outside_period_dates_is_ignored(db_session, org, make_period):
    period = make_period(start_date=date(2025, 1, 1), end_date=date(2025, 6, 30))
    _override(db_session, org.alice, org.ceo, period=period,
              effective_from=date(2025, 7, 1), effective_to=date(2025, 12, 31))

    resolved = EvaluatorResolver(db_session).resolve(org.alice, period)
    assert resolved.evaluator_id == org.team_lead.id


def test_override_overlapping_period_dates_applies(db_session, org, make_period):
    period = make_period(start_date=date(2025, 1, 1), end_date=date(2025, 6, 30))
    _override(db_session, org.alice, org.ceo, period=period, effective_from=date(2025, 6, 1))

    assert EvaluatorResolver(db_session).resolve(org.alice, period).evaluator_id == org.ceo.id


def test_cycle_in_hierarchy_leaves_employee_unresolved(db_session, org, make_period):
    for unit in (org.division, org.department, org.team):
        unit.manager_id = None
    org.division.parent_id = org.team.id
    db_session.commit()

    assert EvaluatorResolver(db_session, max_depth=10).resolve(org.alice, make_period()) is None


def test_walk_stops_at_max_depth(db_session, org, make_period):
    org.team.manager_id = None
    db_session.commit()

    assert EvaluatorResolver(db_session, max_depth=1).resolve(org.alice, make_period()) is None
    assert EvaluatorResolver(db_session, max_depth=2).resolve(org.alice, make_period(term="H2")).evaluator_id == org.dept_head.id
