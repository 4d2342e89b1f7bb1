"""
Template Service - selects and manages approval templates.
Templates are tiered by department and amount; the selected template's role
list becomes a request's approval chain.
"""
import logging
import re
from datetime import datetime, timedelta
from decimal import Decimal
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session

from money_requests.config import settings
from money_requests.database import commit_or_rollback
from money_requests.exceptions import InvalidTemplate, NoTemplateFound, TemplateNotFound
from money_requests.models.approval_step import ApprovalStep
from money_requests.models.approval_template import ApprovalTemplate
from money_requests.models.enums import StepDecision, RequestStatus
from money_requests.schemas.approval import ApprovalTemplateCreate, ApprovalTemplateUpdate, TemplateStep

logger = logging.getLogger(__name__)

ROLE_PATTERN = re.compile(r"^[a-z][a-z0-9_]*$")


class TemplateService:
    """Service for approval template selection and administration"""

    def select_template(self, department_id: int, amount: Decimal, db: Session) -> ApprovalTemplate:
        """
        Pick the template for a department and amount.

        Candidates are active templates for the department or church-wide
        (no department) whose amount range covers the amount. Preference:
        - department-specific over church-wide
        - tightest max_amount (smallest bound >= amount), unbounded last
        - highest min_amount
        Falls back to the active default template.

        Raises:
            NoTemplateFound: nothing matches and no default is configured
        """
        candidates = db.query(ApprovalTemplate).filter(
            ApprovalTemplate.is_active.is_(True),
            or_(ApprovalTemplate.department_id.is_(None), ApprovalTemplate.department_id == department_id),
            or_(ApprovalTemplate.min_amount.is_(None), ApprovalTemplate.min_amount <= amount),
            or_(ApprovalTemplate.max_amount.is_(None), ApprovalTemplate.max_amount >= amount),
        ).all()

        if candidates:
            template = min(candidates, key=self._specificity_key)
            logger.info(f"Selected approval template {template.id} ({template.name}) for department {department_id}, amount {amount}")
            return template

        default = db.query(ApprovalTemplate).filter(
            ApprovalTemplate.is_default.is_(True),
            ApprovalTemplate.is_active.is_(True)
        ).first()
        if default:
            logger.info(f"No tiered template for department {department_id}, amount {amount}; using default {default.id}")
            return default

        logger.warning(f"No approval template for department {department_id}, amount {amount}")
        raise NoTemplateFound(f"No approval template covers department {department_id} for amount {amount}")

    def _specificity_key(self, template: ApprovalTemplate):
        department_rank = 0 if template.department_id is not None else 1
        unbounded = template.max_amount is None
        max_bound = template.max_amount if not unbounded else Decimal(0)
        min_bound = template.min_amount if template.min_amount is not None else Decimal(0)
        return (department_rank, unbounded, max_bound, -min_bound, template.id)

    def status_for_role(self, role: str) -> str:
        """Request status while a step for this role is current"""
        return settings.status_override_map.get(role, f"pending_{role}_approval")

    def checked_status_for_role(self, role: str) -> str:
        """status_for_role, refusing the fixed request statuses (draft, approved, ...)"""
        status = self.status_for_role(role)
        if status in {s.value for s in RequestStatus}:
            raise InvalidTemplate(f"Role '{role}' maps onto reserved status {status}")
        return status

    def build_chain(self, template: ApprovalTemplate, submitted_at: datetime) -> List[ApprovalStep]:
        """
        Create the unsaved approval steps for a template, ordered 1..N.

        Each step's pending status is resolved here, once, and stored on the
        step. Status overrides are checked again here, not only when the
        template is saved.

        Raises:
            NoTemplateFound: template has no steps
            InvalidTemplate: a role resolves to a reserved status
        """
        entries = template.approval_steps or []
        if not entries:
            raise NoTemplateFound(f"Approval template {template.id} has no steps")

        steps = []
        for index, entry in enumerate(entries):
            role = entry["role"]
            timeout_hours = entry.get("timeout_hours") or settings.default_step_sla_hours
            steps.append(ApprovalStep(
                approver_role=role,
                step_order=index + 1,
                decision=StepDecision.PENDING,
                pending_status=self.checked_status_for_role(role),
                due_date=submitted_at + timedelta(hours=timeout_hours) if timeout_hours else None
            ))
        return steps

    def validate_steps(self, steps: List[TemplateStep]) -> list:
        if not steps:
            raise InvalidTemplate("Approval template needs at least one step")

        validated = []
        for step in steps:
            role = step.role.strip()
            if not ROLE_PATTERN.match(role):
                raise InvalidTemplate(f"Invalid approver role '{step.role}'")
            self.checked_status_for_role(role)
            validated.append({"role": role, "timeout_hours": step.timeout_hours})
        return validated

    def _validate_range(self, min_amount: Optional[Decimal], max_amount: Optional[Decimal]) -> None:
        if min_amount is not None and min_amount < 0:
            raise InvalidTemplate("min_amount must not be negative")
        if min_amount is not None and max_amount is not None and min_amount > max_amount:
            raise InvalidTemplate("min_amount must not exceed max_amount")

    def get_template(self, template_id: int, db: Session) -> ApprovalTemplate:
        template = db.query(ApprovalTemplate).filter(ApprovalTemplate.id == template_id).first()
        if not template:
            raise TemplateNotFound(f"Approval template {template_id} not found")
        return template

    def list_templates(self, db: Session, include_inactive: bool = False) -> List[ApprovalTemplate]:
        query = db.query(ApprovalTemplate)
        if not include_inactive:
            query = query.filter(ApprovalTemplate.is_active.is_(True))
        return query.order_by(ApprovalTemplate.created_at.desc(), ApprovalTemplate.id.desc()).all()

    def create_template(self, data: ApprovalTemplateCreate, created_by: Optional[int], db: Session) -> ApprovalTemplate:
        steps = self.validate_steps(data.approval_steps)
        self._validate_range(data.min_amount, data.max_amount)

        if data.is_default:
            self._clear_default(db)

        template = ApprovalTemplate(
            name=data.name,
            description=data.description,
            department_id=data.department_id,
            min_amount=data.min_amount,
            max_amount=data.max_amount,
            approval_steps=steps,
            is_default=data.is_default,
            created_by=created_by
        )
        db.add(template)
        commit_or_rollback(db)
        db.refresh(template)

        logger.info(f"Created approval template {template.id} ({template.name}) with roles {template.roles}")
        return template

    def update_template(self, template_id: int, data: ApprovalTemplateUpdate, db: Session) -> ApprovalTemplate:
        template = self.get_template(template_id, db)
        changes = data.model_dump(exclude_unset=True)

        if "name" in changes and not (changes["name"] or "").strip():
            raise InvalidTemplate("Approval template name must not be empty")
        if "approval_steps" in changes:
            changes["approval_steps"] = self.validate_steps(data.approval_steps or [])

        self._validate_range(
            changes.get("min_amount", template.min_amount),
            changes.get("max_amount", template.max_amount)
        )
        for field, value in changes.items():
            setattr(template, field, value)

        commit_or_rollback(db)
        db.refresh(template)
        logger.info(f"Updated approval template {template.id}")
        return template

    def deactivate_template(self, template_id: int, db: Session) -> ApprovalTemplate:
        """Soft delete; chains already built from the template are unaffected"""
        template = self.get_template(template_id, db)
        template.is_active = False
        template.is_default = False
        commit_or_rollback(db)
        db.refresh(template)
        logger.info(f"Deactivated approval template {template.id}")
        return template

    def set_default(self, template_id: int, db: Session) -> ApprovalTemplate:
        template = self.get_template(template_id, db)
        if not template.is_active:
            raise InvalidTemplate(f"Approval template {template_id} is inactive")

        self._clear_default(db)
        template.is_default = True
        commit_or_rollback(db)
        db.refresh(template)
        logger.info(f"Approval template {template.id} is now the default")
        return template

    def _clear_default(self, db: Session) -> None:
        db.query(ApprovalTemplate).filter(
            ApprovalTemplate.is_default.is_(True)
        ).update({ApprovalTemplate.is_default: False}, synchronize_session=False)


# Singleton instance
template_service = TemplateService()
