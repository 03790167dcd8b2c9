import pytest
import os
from datetime import date
from types import SimpleNamespace

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set env before importing app components
os.environ["APP_ENV"] = "testing"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"

from app.database import Base, get_db
from app.main import app
from fastapi.testclient import TestClient

# SQLite in-memory database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# pysqlite does not emit BEGIN itself, which breaks SAVEPOINT handling.
@event.listens_for(engine, "connect")
def _disable_pysqlite_transactions(dbapi_connection, connection_record):
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn):
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False)


@pytest.fixture(scope="session", autouse=True)
def setup_database():
    """Create tables once for the whole test session."""
    import app.models  # noqa: F401
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Session bound to an outer transaction that is rolled back after the test.
    Service-level commit() and rollback() only act on savepoints.
    """
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection, join_transaction_mode="create_savepoint")

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def org(db_session):
    """
    Three-level hierarchy:

        DIV-01 (manager: ceo)
          └─ DEP-01 (manager: dept_head)
               └─ TEAM-01 (manager: team_lead)

    ceo and dept_head sit in the division, team_lead in the department,
    alice, bob and carol in the team.
    """
    from app.models.employee import Employee
    from app.models.organization import OrgUnit, UnitLevel

    division = OrgUnit(code="DIV-01", name="Sales Division", level=UnitLevel.DIVISION.value)
    db_session.add(division)
    db_session.flush()
    department = OrgUnit(code="DEP-01", name="Enterprise Sales", level=UnitLevel.DEPARTMENT.value,
                         parent_id=division.id)
    db_session.add(department)
    db_session.flush()
    team = OrgUnit(code="TEAM-01", name="Key Accounts", level=UnitLevel.TEAM.value, parent_id=department.id)
    db_session.add(team)
    db_session.flush()

    def _employee(number, name, unit):
        employee = Employee(employee_number=number, name=name, email=f"{number.lower()}@example.com",
                            unit_id=unit.id)
        db_session.add(employee)
        return employee

    ceo = _employee("E001", "Dana Park", division)
    dept_head = _employee("E002", "Lee Morgan", division)
    team_lead = _employee("E003", "Sam Rivera", department)
    alice = _employee("E004", "Alice Kim", team)
    bob = _employee("E005", "Bob Chen", team)
    carol = _employee("E006", "Carol Diaz", team)
    db_session.flush()

    division.manager_id = ceo.id
    department.manager_id = dept_head.id
    team.manager_id = team_lead.id
    db_session.commit()

    return SimpleNamespace(
        division=division, department=department, team=team,
        ceo=ceo, dept_head=dept_head, team_lead=team_lead,
        alice=alice, bob=bob, carol=carol,
    )


@pytest.fixture(scope="function")
def make_period(db_session):
    """Factory for periods in an arbitrary status, bypassing the lifecycle checks."""
    from app.models.period import EvaluationPeriod, PeriodStatus

    def _make_period(status=PeriodStatus.DRAFT.value, year=2025, term="H1",
                     start_date=date(2025, 1, 1), end_date=date(2025, 6, 30)):
        period = EvaluationPeriod(
            name=f"{year} {term}", year=year, term=term,
            start_date=start_date, end_date=end_date, status=status,
        )
        db_session.add(period)
        db_session.commit()
        return period
    return _make_period


@pytest.fixture(scope="function")
def growth_category(db_session):
    from app.models.growth_category import GrowthCategory
    category = GrowthCategory(name="Mentoring", description="Coaching juniors", coefficient=1.3, sort_order=4)
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope="function")
def process_categories(db_session):
    """The process criteria the tests score against."""
    from app.models.process_category import ProcessCategory
    categories = [
        ProcessCategory(name="initiative", description="Acting proactively", sort_order=1),
        ProcessCategory(name="collaboration", description="Working with the team", sort_order=2),
    ]
    db_session.add_all(categories)
    db_session.commit()
    return categories


@pytest.fixture(scope="function")
def get_token():
    """Helper fixture to create access tokens as the identity service would."""
    from app.core.security import create_access_token

    def _get_token(employee, role="ADMIN"):
        return create_access_token(data={
            "sub": str(employee.id),
            "role": role,
            "type": "access"
        })
    return _get_token


@pytest.fixture(scope="function")
def auth_headers(get_token):
    def _auth_headers(employee, role="ADMIN"):
        return {"Authorization": f"Bearer {get_token(employee, role)}"}
    return _auth_headers


@pytest.fixture(scope="function")
def client(db_session):
    """Get a TestClient that uses the test database session via dependency override."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()
