from fastapi import Depends, Header
from sqlalchemy.orm import Session

from money_requests.database import get_db
from money_requests.services.directory_service import ActingUser, directory_service


def get_acting_user(
    x_user_id: int = Header(..., description="ID of the user performing the request"),
    db: Session = Depends(get_db)
) -> ActingUser:
    """Resolve the calling user and their role from the directory"""
    return directory_service.resolve_acting_user(x_user_id, db)
