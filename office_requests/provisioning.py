"""Registration, admin account management and company policy updates."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from django.db import transaction
from django.utils import timezone

from .authentication import require_same_company, require_self_or_superadmin, require_superadmin
from .exceptions import Conflict, Forbidden, InvalidState, NotFound, ValidationFailed
from .identity import IdentityClaims, IdentityProvider
from .models import AdminRequest, Company, Member
from .utils import generate_company_code

logger = logging.getLogger(__name__)

FALLBACK_ADMIN_DEPARTMENT = "IT"


def admin_job_title(department: str) -> str:
    return f"Head of {department}"


def _check_department(company: Company, department: str) -> None:
    if department and not company.has_department(department):
        raise ValidationFailed(f"Unknown department: {department}")


def _company_member(actor: Member, member_id: int) -> Member:
    target = Member.objects.select_related("company").filter(pk=member_id).first()
    if target is None:
        raise NotFound("User not found")
    require_same_company(actor, target.company_id)
    return target


@transaction.atomic
def register_member(identity: IdentityClaims, data: Mapping[str, Any]) -> Member:
    """Create the directory record for a freshly signed-up identity account.

    Either founds a new company (the registrant becomes its superadmin) or
    joins an existing one by company code.
    """
    if Member.objects.filter(pk=identity.uid).exists():
        raise Conflict("User already registered")

    if data.get("is_creating_company"):
        company_name = (data.get("company_name") or "").strip()
        if not company_name:
            raise ValidationFailed("Company name is required")
        company = Company.objects.create(
            name=company_name,
            company_code=generate_company_code(company_name),
        )
        role = Member.Role.SUPERADMIN
        department = FALLBACK_ADMIN_DEPARTMENT
        job_title = admin_job_title(department)
        logger.info("Company %s created with code %s", company.pk, company.company_code)
    else:
        code = (data.get("company_code") or "").strip()
        if not code:
            raise ValidationFailed("Company code is required")
        company = Company.objects.filter(company_code=code).first()
        if company is None:
            raise ValidationFailed("Invalid company code")
        role = Member.Role.MEMBER
        department = data.get("department") or ""
        _check_department(company, department)
        job_title = "Employee"

    member = Member.objects.create(
        account_id=identity.uid,
        company=company,
        email=identity.email,
        full_name=data["full_name"],
        role=role,
        department=department,
        job_title=job_title,
    )
    logger.info("Member %s registered in company %s as %s", member.pk, company.pk, role)
    return member


@transaction.atomic
def create_admin(actor: Member, data: Mapping[str, Any], provider: Optional[IdentityProvider] = None) -> Member:
    require_superadmin(actor)
    company = actor.company
    department = data["department"]
    _check_department(company, department)

    provider = provider or IdentityProvider.from_settings()
    account = provider.create_account(data["email"], data["password"], data["full_name"])
    member = Member.objects.create(
        account=account,
        company=company,
        email=account.email,
        full_name=data["full_name"],
        role=Member.Role.ADMIN,
        department=department,
        job_title=admin_job_title(department),
    )
    logger.info("Admin %s created in company %s by %s", member.pk, company.pk, actor.pk)
    return member


def _grant_admin(member: Member, department: str) -> Member:
    member.role = Member.Role.ADMIN
    member.department = department
    member.job_title = admin_job_title(department)
    member.save(update_fields=["role", "department", "job_title"])
    return member


@transaction.atomic
def promote_to_admin(actor: Member, member_id: int, department: str) -> Member:
    require_superadmin(actor)
    target = _company_member(actor, member_id)
    if target.role != Member.Role.MEMBER:
        raise InvalidState("User is already an admin or super admin")
    _check_department(actor.company, department)
    _grant_admin(target, department)
    logger.info("Member %s promoted to admin of %s by %s", target.pk, department, actor.pk)
    return target


@transaction.atomic
def update_role(actor: Member, member_id: int, data: Mapping[str, Any]) -> Member:
    require_superadmin(actor)
    target = _company_member(actor, member_id)
    if target.is_superadmin:
        raise Forbidden("Cannot change the role of a super admin")

    target.role = data["role"]
    fields = ["role"]
    if data.get("job_title") is not None:
        target.job_title = data["job_title"]
        fields.append("job_title")
    if data.get("department") is not None:
        _check_department(actor.company, data["department"])
        target.department = data["department"]
        fields.append("department")
    target.save(update_fields=fields)
    logger.info("Member %s role set to %s by %s", target.pk, target.role, actor.pk)
    return target


@transaction.atomic
def update_profile(actor: Member, member_id: int, data: Mapping[str, Any]) -> Member:
    target = Member.objects.select_related("company").filter(pk=member_id).first()
    if target is None:
        raise NotFound("User not found")
    require_self_or_superadmin(actor, target)

    fields = []
    if data.get("department") is not None:
        _check_department(target.company, data["department"])
        target.department = data["department"]
        fields.append("department")
    if data.get("job_title") is not None:
        target.job_title = data["job_title"]
        fields.append("job_title")
    if fields:
        target.save(update_fields=fields)
    return target


@transaction.atomic
def delete_member(actor: Member, member_id: int, provider: Optional[IdentityProvider] = None) -> None:
    require_superadmin(actor)
    target = _company_member(actor, member_id)
    if target.is_superadmin:
        raise Forbidden("Cannot delete super admin")

    uid = target.pk
    target.delete()
    (provider or IdentityProvider.from_settings()).delete_account(uid)
    logger.info("Member %s deleted by %s", uid, actor.pk)


def request_admin(member: Member) -> AdminRequest:
    if AdminRequest.objects.filter(requester=member, status=AdminRequest.Status.PENDING).exists():
        raise Conflict("You already have a pending request")
    admin_request = AdminRequest.objects.create(
        requester=member,
        requester_name=member.full_name,
        requester_email=member.email,
        company_id=member.company_id,
    )
    logger.info("Admin request %s filed by member %s", admin_request.pk, member.pk)
    return admin_request


def pending_admin_requests(actor: Member):
    require_superadmin(actor)
    return AdminRequest.objects.filter(company_id=actor.company_id, status=AdminRequest.Status.PENDING)


@transaction.atomic
def decide_admin_request(
    actor: Member,
    admin_request_id: int,
    approve: bool,
    department: Optional[str] = None,
) -> AdminRequest:
    require_superadmin(actor)
    admin_request = (
        AdminRequest.objects.select_for_update().select_related("requester").filter(pk=admin_request_id).first()
    )
    if admin_request is None:
        raise NotFound("Request not found")
    require_same_company(actor, admin_request.company_id)
    if admin_request.status != AdminRequest.Status.PENDING:
        raise InvalidState("Request is not pending")

    now = timezone.now()
    if approve:
        company = actor.company
        department = department or next(iter(company.departments or []), FALLBACK_ADMIN_DEPARTMENT)
        _check_department(company, department)
        if not admin_request.requester.is_superadmin:
            _grant_admin(admin_request.requester, department)
        admin_request.status = AdminRequest.Status.APPROVED
        admin_request.approved_at = now
        fields = ["status", "approved_at", "decided_by"]
    else:
        admin_request.status = AdminRequest.Status.REJECTED
        admin_request.rejected_at = now
        fields = ["status", "rejected_at", "decided_by"]
    admin_request.decided_by = actor
    admin_request.save(update_fields=fields)
    logger.info("Admin request %s %s by %s", admin_request.pk, admin_request.status, actor.pk)
    return admin_request


def update_company_settings(actor: Member, data: Mapping[str, Any]) -> Company:
    require_superadmin(actor)
    company = actor.company
    field_map = {
        "annual_leave_balance": "annual_leave_allotment",
        "sick_leave_balance": "sick_leave_allotment",
        "personal_leave_balance": "personal_leave_allotment",
        "emergency_leave_balance": "emergency_leave_allotment",
        "departments": "departments",
        "job_titles": "job_titles",
    }
    fields = []
    for key, attribute in field_map.items():
        if data.get(key) is not None:
            setattr(company, attribute, data[key])
            fields.append(attribute)
    if fields:
        company.save(update_fields=fields)
        logger.info("Company %s settings updated by %s: %s", company.pk, actor.pk, ", ".join(fields))
    return company
