from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List
from money_requests.database import get_db
from money_requests.models.fund_type import FundType
from money_requests.schemas.fund_type import FundTypeResponse
from money_requests.services.directory_service import directory_service

router = APIRouter(prefix="/api/fund-types", tags=["fund-types"])


@router.get("", response_model=List[FundTypeResponse])
def list_fund_types(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db)
):
    """List funds with their current balances"""
    query = db.query(FundType)
    if not include_inactive:
        query = query.filter(FundType.is_active.is_(True))
    return query.order_by(FundType.name).all()


@router.get("/{fund_type_id}", response_model=FundTypeResponse)
def get_fund_type(fund_type_id: int, db: Session = Depends(get_db)):
    return directory_service.get_fund(fund_type_id, db)
