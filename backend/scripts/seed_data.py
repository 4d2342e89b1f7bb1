"""
Seed script to generate synthetic departments, funds, users, approval templates
and money requests for demo purposes
"""
import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy.orm import Session
from money_requests.database import SessionLocal, engine, Base
from money_requests.models.department import Department
from money_requests.models.fund_type import FundType
from money_requests.models.user_profile import UserProfile
from money_requests.models.approval_template import ApprovalTemplate
from money_requests.models.enums import Priority
from money_requests.schemas.money_request import MoneyRequestCreate
from money_requests.services.approval_workflow_service import approval_workflow_service
from money_requests.services.directory_service import ActingUser
from decimal import Decimal
from faker import Faker

fake = Faker()

DEPARTMENT_NAMES = ["Youth", "Music", "Ushering", "Women's Ministry", "Missions", "Children"]
FUND_NAMES = ["General Fund", "Building Fund", "Missions Fund", "Benevolence Fund"]
ROLES = [
    "administrator", "treasurer", "head_of_department", "finance_elder",
    "general_secretary", "pastor", "department_member", "department_member",
]


def create_departments(db: Session) -> list[Department]:
    departments = [Department(name=name) for name in DEPARTMENT_NAMES]
    db.add_all(departments)
    db.commit()
    return departments


def create_funds(db: Session) -> list[FundType]:
    """Create funds with random opening balances"""
    funds = []
    for name in FUND_NAMES:
        balance = Decimal(str(fake.random_int(min=5000, max=50000)))
        fund = FundType(
            name=name,
            description=fake.sentence(),
            opening_balance=balance,
            current_balance=balance
        )
        db.add(fund)
        funds.append(fund)
    db.commit()
    return funds


def create_users(db: Session) -> list[UserProfile]:
    users = []
    for role in ROLES:
        user = UserProfile(
            email=fake.unique.email(),
            first_name=fake.first_name(),
            last_name=fake.last_name(),
            role=role
        )
        db.add(user)
        users.append(user)
    db.commit()
    return users


def create_templates(db: Session, departments: list[Department]) -> list[ApprovalTemplate]:
    """
    Create a small tier per department plus a church-wide default:
    - up to 500: treasurer, head_of_department
    - above 500: treasurer, head_of_department, finance_elder, pastor
    """
    templates = []
    for department in departments:
        templates.append(ApprovalTemplate(
            name=f"{department.name} - small",
            department_id=department.id,
            max_amount=Decimal("500"),
            approval_steps=[
                {"role": "treasurer", "timeout_hours": 48},
                {"role": "head_of_department", "timeout_hours": 48},
            ]
        ))
    templates.append(ApprovalTemplate(
        name="Church-wide default",
        description="Used when no department tier applies",
        approval_steps=[
            {"role": "treasurer", "timeout_hours": 48},
            {"role": "head_of_department", "timeout_hours": 72},
            {"role": "finance_elder", "timeout_hours": 72},
            {"role": "pastor", "timeout_hours": 96},
        ],
        is_default=True
    ))
    db.add_all(templates)
    db.commit()
    return templates


def create_money_requests(db: Session, departments, funds, users, count: int = 15) -> None:
    """Create requests; roughly two thirds are submitted into their chain"""
    requesters = [u for u in users if u.role == "department_member"]
    for _ in range(count):
        requester = fake.random_element(elements=requesters)
        acting_user = ActingUser(id=requester.id, role=requester.role)
        request = approval_workflow_service.create_request(acting_user, MoneyRequestCreate(
            requesting_department_id=fake.random_element(elements=departments).id,
            fund_type_id=fake.random_element(elements=funds).id,
            amount=Decimal(str(fake.random_int(min=20, max=3000))),
            purpose=fake.sentence(nb_words=8),
            suggested_vendor=fake.company() if fake.boolean() else None,
            associated_project=fake.bs() if fake.boolean(chance_of_getting_true=30) else None,
            priority=fake.random_element(elements=list(Priority))
        ), db)
        if fake.boolean(chance_of_getting_true=66):
            approval_workflow_service.submit_request(acting_user, request.id, db)


def main():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        departments = create_departments(db)
        funds = create_funds(db)
        users = create_users(db)
        create_templates(db, departments)
        create_money_requests(db, departments, funds, users)
        print(f"Seeded {len(departments)} departments, {len(funds)} funds, {len(users)} users")
    finally:
        db.close()


if __name__ == "__main__":
    main()
