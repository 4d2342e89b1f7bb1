from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from decimal import Decimal


class FundTypeResponse(BaseModel):
    id: int
    name: str
    description: Optional[str]
    opening_balance: Decimal
    current_balance: Decimal
    is_active: bool
    created_at: Optional[datetime]

    class Config:
        from_attributes = True
