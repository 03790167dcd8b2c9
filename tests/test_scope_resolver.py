import pytest
from app.models.employee import Employee
from app.models.exclusion import EvaluationExclusion
from app.services.scope import ScopeResolver


def test_resolve_orders_by_unit_code_then_id(db_session, org, make_period):
    period = make_period()
    employees = ScopeResolver(db_session).resolve(period.id)
    # DEP-01 < DIV-01 < TEAM-01
    assert [e.id for e in employees] == [
        org.team_lead.id, org.ceo.id, org.dept_head.id, org.alice.id, org.bob.id, org.carol.id,
    ]


def test_employees_without_unit_sort_last(db_session, org, make_period):
    period = make_period()
    drifter = Employee(employee_number="E099", name="No Unit")
    db_session.add(drifter)
    db_session.commit()

    ids = ScopeResolver(db_session).resolve_ids(period.id)
    assert ids[-1] == drifter.id


def test_inactive_employees_are_out_of_scope(db_session, org, make_period):
    period = make_period()
    org.bob.is_active = False
    db_session.commit()

    assert org.bob.id not in ScopeResolver(db_session).resolve_ids(period.id)


def test_unit_filter_includes_descendants(db_session, org, make_period):
    period = make_period()
    resolver = ScopeResolver(db_session)

    assert resolver.resolve_ids(period.id, unit_id=org.team.id) == [org.alice.id, org.bob.id, org.carol.id]
    assert set(resolver.resolve_ids(period.id, unit_id=org.department.id)) == {
        org.team_lead.id, org.alice.id, org.bob.id, org.carol.id,
    }


def test_global_and_period_exclusions_apply(db_session, org, make_period):
    period = make_period()
    other = make_period(term="H2")
    db_session.add_all([
        EvaluationExclusion(employee_id=org.alice.id, period_id=None, reason="SICK_LEAVE"),
        EvaluationExclusion(employee_id=org.bob.id, period_id=period.id, reason="PROBATION"),
        EvaluationExclusion(employee_id=org.carol.id, period_id=other.id, reason="OTHER"),
    ])
    db_session.commit()

    ids = ScopeResolver(db_session).resolve_ids(period.id, unit_id=org.team.id)
    assert ids == [org.carol.id]


def test_empty_scope_is_not_an_error(db_session, make_period):
    period = make_period()
    assert ScopeResolver(db_session).resolve(period.id) == []


@pytest.mark.parametrize("depth,expected", [(0, 1), (1, 2), (2, 3)])
def test_unit_subtree_respects_depth(db_session, org, depth, expected):
    subtree = ScopeResolver(db_session, max_depth=depth).unit_subtree_ids(org.division.id)
    assert len(subtree) == expected
