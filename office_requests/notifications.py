"""Email notification helpers for request and admin-request events."""
from __future__ import annotations

from typing import Iterable

from django.conf import settings
from django.core.mail import send_mail

from .models import AdminRequest, Member, ServiceRequest


def _send(to_addresses: Iterable[str], subject: str, message: str) -> None:
    recipients = [email for email in to_addresses if email]
    if not recipients:
        return
    send_mail(
        subject=subject,
        message=message,
        from_email=getattr(settings, "DEFAULT_FROM_EMAIL", "no-reply@example.com"),
        recipient_list=recipients,
        fail_silently=True,
    )


def _leave_summary(request_obj: ServiceRequest) -> str:
    if not request_obj.is_leave:
        return ""
    return (
        f"{request_obj.leave_days} day(s) of {request_obj.leave_type} leave "
        f"({request_obj.leave_start} to {request_obj.leave_end}).\n"
    )


def notify_request_submitted(request_obj: ServiceRequest) -> None:
    """Confirm to the requester and alert the admin the request was routed to."""
    _send(
        [request_obj.owner_email],
        f"Request submitted: {request_obj.title}",
        (
            f"Hi {request_obj.owner_name},\n\n"
            f"Your {request_obj.category} request \"{request_obj.title}\" was submitted.\n"
            f"{_leave_summary(request_obj)}"
            "You will receive an update once it has been reviewed."
        ),
    )
    assignee = request_obj.assigned_to
    if assignee is None:
        return
    _send(
        [assignee.email],
        f"New {request_obj.category} request: {request_obj.title}",
        (
            f"Hi {assignee.full_name},\n\n"
            f"{request_obj.owner_name} submitted \"{request_obj.title}\" ({request_obj.priority} priority).\n"
            f"{_leave_summary(request_obj)}"
            "Please review it in officeFlow."
        ),
    )


def notify_request_approved(request_obj: ServiceRequest) -> None:
    _send(
        [request_obj.owner_email],
        f"Request approved: {request_obj.title}",
        (
            f"Hi {request_obj.owner_name},\n\n"
            f"Your request \"{request_obj.title}\" was approved.\n"
            f"{_leave_summary(request_obj)}"
        ),
    )


def notify_request_rejected(request_obj: ServiceRequest) -> None:
    _send(
        [request_obj.owner_email],
        f"Request declined: {request_obj.title}",
        (
            f"Hi {request_obj.owner_name},\n\n"
            f"Your request \"{request_obj.title}\" was rejected.\n"
            "Contact your administrator for details."
        ),
    )


def notify_admin_request_decided(admin_request: AdminRequest) -> None:
    outcome = "approved" if admin_request.status == AdminRequest.Status.APPROVED else "rejected"
    _send(
        [admin_request.requester_email],
        f"Admin access {outcome}",
        f"Hi {admin_request.requester_name},\n\nYour request for admin access was {outcome}.",
    )


def notify_admin_created(member: Member) -> None:
    _send(
        [member.email],
        "Your officeFlow admin account",
        (
            f"Hi {member.full_name},\n\n"
            f"An admin account was created for you as {member.job_title} at {member.company.name}."
        ),
    )
