"""
Approval templates API router - template administration.
"""
import logging
from typing import List
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from money_requests.database import get_db
from money_requests.deps import get_acting_user
from money_requests.exceptions import NotAuthorized
from money_requests.schemas.approval import (
    ApprovalTemplateCreate,
    ApprovalTemplateUpdate,
    ApprovalTemplateResponse
)
from money_requests.services.directory_service import ActingUser, directory_service
from money_requests.services.template_service import template_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/approval-templates", tags=["approval-templates"])


def _require_admin(acting_user: ActingUser) -> None:
    if not directory_service.has_override_role(acting_user.role):
        raise NotAuthorized(f"User {acting_user.id} may not manage approval templates")


@router.get("", response_model=List[ApprovalTemplateResponse])
def list_templates(
    include_inactive: bool = Query(False),
    db: Session = Depends(get_db)
):
    """List approval templates, newest first"""
    return template_service.list_templates(db, include_inactive=include_inactive)


@router.post("", response_model=ApprovalTemplateResponse, status_code=201)
def create_template(
    data: ApprovalTemplateCreate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    _require_admin(acting_user)
    return template_service.create_template(data, acting_user.id, db)


@router.patch("/{template_id}", response_model=ApprovalTemplateResponse)
def update_template(
    template_id: int,
    data: ApprovalTemplateUpdate,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    _require_admin(acting_user)
    return template_service.update_template(template_id, data, db)


@router.delete("/{template_id}", response_model=ApprovalTemplateResponse)
def deactivate_template(
    template_id: int,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    """Deactivate (soft delete) a template"""
    _require_admin(acting_user)
    return template_service.deactivate_template(template_id, db)


@router.post("/{template_id}/set-default", response_model=ApprovalTemplateResponse)
def set_default_template(
    template_id: int,
    acting_user: ActingUser = Depends(get_acting_user),
    db: Session = Depends(get_db)
):
    _require_admin(acting_user)
    return template_service.set_default(template_id, db)
