"""Submission and approval lifecycle for service and leave requests."""
from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from django.db import transaction
from django.utils import timezone

from .authentication import require_admin, require_same_company
from .exceptions import InvalidState, NotFound
from .models import LeaveBalance, Member, ServiceRequest, ServiceRequestQuerySet
from .routing import resolve_assignee

logger = logging.getLogger(__name__)


def submit_request(owner: Member, data: Mapping[str, Any]) -> ServiceRequest:
    """Persist a Pending request for ``owner`` and route it to an admin.

    Leave balance is never touched here; a ``deduct`` request is only charged
    when it is approved.
    """
    request_type = data.get("request_type") or ServiceRequest.LEAVE
    category = data.get("category") or "HR"
    routing_category = "Leave" if request_type == ServiceRequest.LEAVE else category

    now = timezone.now()
    service_request = ServiceRequest(
        owner=owner,
        owner_name=owner.full_name,
        owner_email=owner.email,
        company_id=owner.company_id,
        title=data.get("title") or "Leave Request",
        description=data.get("description") or "",
        priority=data.get("priority") or "Normal",
        category=category,
        request_type=request_type,
        assigned_to_id=resolve_assignee(routing_category, owner.company_id),
        date_submitted=now,
        last_updated=now,
    )
    if service_request.is_leave:
        service_request.leave_start = data.get("leave_start")
        service_request.leave_end = data.get("leave_end")
        service_request.leave_days = data.get("leave_days") or 0
        service_request.leave_type = data.get("leave_type") or LeaveBalance.Bucket.ANNUAL.value
        service_request.deduct = bool(data.get("deduct"))
    service_request.save()
    logger.info(
        "Request %s submitted by member %s, assigned to %s",
        service_request.pk,
        owner.pk,
        service_request.assigned_to_id,
    )
    return service_request


def list_requests(principal: Member, status: Optional[str] = None) -> ServiceRequestQuerySet:
    """Admins see their whole company, members only what they submitted."""
    if principal.is_admin:
        requests = ServiceRequest.objects.for_company(principal.company_id)
    else:
        requests = ServiceRequest.objects.owned_by(principal)
    if status:
        requests = requests.with_status(status)
    return requests.order_by("-date_submitted", "-pk")


def _load_for_decision(request_id: int, actor: Member) -> ServiceRequest:
    require_admin(actor)
    service_request = ServiceRequest.objects.select_for_update().filter(pk=request_id).first()
    if service_request is None:
        raise NotFound("Request not found")
    require_same_company(actor, service_request.company_id)
    if not service_request.is_pending:
        raise InvalidState("Request is not pending")
    return service_request


def _transition(service_request: ServiceRequest, actor: Member, status: str, **timestamps) -> None:
    # Only a row that is still Pending may move; a lost race rolls back the caller's transaction.
    claimed = ServiceRequest.objects.filter(pk=service_request.pk, status=ServiceRequest.Status.PENDING).update(
        status=status,
        reviewed_by=actor,
        **timestamps,
    )
    if not claimed:
        raise InvalidState("Request is not pending")
    service_request.refresh_from_db()


@transaction.atomic
def approve_request(request_id: int, actor: Member) -> ServiceRequest:
    service_request = _load_for_decision(request_id, actor)

    if service_request.deducts_balance:
        owner = service_request.owner
        if owner is None:
            raise NotFound("Request owner not found")
        balance = LeaveBalance.ensure_for_member(owner)
        bucket = balance.deduct(service_request.leave_type, service_request.leave_days)
        logger.info(
            "Deducted %s %s day(s) from member %s for request %s",
            service_request.leave_days,
            bucket,
            owner.pk,
            service_request.pk,
        )

    now = timezone.now()
    _transition(service_request, actor, ServiceRequest.Status.APPROVED, approved_at=now, last_updated=now)
    logger.info("Request %s approved by member %s", service_request.pk, actor.pk)
    return service_request


@transaction.atomic
def reject_request(request_id: int, actor: Member) -> ServiceRequest:
    service_request = _load_for_decision(request_id, actor)
    now = timezone.now()
    _transition(service_request, actor, ServiceRequest.Status.REJECTED, rejected_at=now, last_updated=now)
    logger.info("Request %s rejected by member %s", service_request.pk, actor.pk)
    return service_request
