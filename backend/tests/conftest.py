import os

os.environ.setdefault("DATABASE_URL", "sqlite://")

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import money_requests.models  # noqa: F401
from money_requests.database import Base, get_db
from money_requests.main import app
from money_requests.models.approval_template import ApprovalTemplate
from money_requests.models.department import Department
from money_requests.models.fund_type import FundType
from money_requests.models.user_profile import UserProfile
from money_requests.schemas.money_request import MoneyRequestCreate
from money_requests.services.approval_workflow_service import approval_workflow_service
from money_requests.services.directory_service import ActingUser


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def actor(user: UserProfile) -> ActingUser:
    return ActingUser(id=user.id, role=user.role)


@pytest.fixture
def youth(db):
    department = Department(name="Youth")
    db.add(department)
    db.commit()
    return department


@pytest.fixture
def music(db):
    department = Department(name="Music")
    db.add(department)
    db.commit()
    return department


@pytest.fixture
def general_fund(db):
    fund = FundType(name="General Fund", opening_balance=Decimal("1000.00"), current_balance=Decimal("1000.00"))
    db.add(fund)
    db.commit()
    return fund


@pytest.fixture
def users(db):
    """One user per role, keyed by role; 'member' has no approval authority"""
    roles = {
        "member": "department_member",
        "treasurer": "treasurer",
        "hod": "head_of_department",
        "elder": "finance_elder",
        "pastor": "pastor",
        "admin": "administrator",
        "finance_admin": "finance_administrator",
        "norole": None,
    }
    created = {}
    for key, role in roles.items():
        user = UserProfile(email=f"{key}@church.example", first_name=key.title(), last_name="Tester", role=role)
        db.add(user)
        created[key] = user
    db.commit()
    return created


@pytest.fixture
def actors(users):
    return {key: actor(user) for key, user in users.items()}


@pytest.fixture
def youth_templates(db, youth):
    """Youth tiers: up to 500 needs two approvers, up to 5000 needs three"""
    small = ApprovalTemplate(
        name="Youth small",
        department_id=youth.id,
        max_amount=Decimal("500"),
        approval_steps=[
            {"role": "treasurer", "timeout_hours": 48},
            {"role": "head_of_department", "timeout_hours": 48},
        ],
    )
    large = ApprovalTemplate(
        name="Youth large",
        department_id=youth.id,
        min_amount=Decimal("0"),
        max_amount=Decimal("5000"),
        approval_steps=[
            {"role": "treasurer"},
            {"role": "head_of_department"},
            {"role": "finance_elder"},
        ],
    )
    db.add_all([small, large])
    db.commit()
    return {"small": small, "large": large}


@pytest.fixture
def make_request(db, users, youth, general_fund):
    def _make(amount="300", department=None, fund=None, requester=None, **extra):
        requester = requester or users["member"]
        data = MoneyRequestCreate(
            requesting_department_id=(department or youth).id,
            fund_type_id=(fund or general_fund).id,
            amount=Decimal(amount),
            purpose=extra.pop("purpose", "Youth retreat transport"),
            **extra
        )
        return approval_workflow_service.create_request(actor(requester), data, db)
    return _make


@pytest.fixture
def submitted_request(db, users, youth_templates, make_request):
    def _submit(amount="300", **extra):
        request = make_request(amount=amount, **extra)
        return approval_workflow_service.submit_request(actor(users["member"]), request.id, db)
    return _submit
