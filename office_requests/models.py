"""Database models for companies, their members and internal requests."""
from __future__ import annotations

from datetime import date
from typing import Dict, List, Optional

from django.contrib.auth import get_user_model
from django.db import models
from django.db.models import F
from django.db.models.functions import Greatest
from django.utils import timezone

User = get_user_model()

DEFAULT_DEPARTMENTS = ["IT", "HR", "Maintenance", "Finance", "Operations"]
DEFAULT_JOB_TITLES = {
    "IT": ["Head of IT", "IT Manager", "Developer", "System Administrator", "IT Support"],
    "HR": ["Head of HR", "HR Manager", "HR Coordinator", "Recruiter"],
    "Maintenance": ["Head of Maintenance", "Maintenance Manager", "Technician"],
    "Finance": ["Head of Finance", "Finance Manager", "Accountant", "Financial Analyst"],
    "Operations": ["Head of Operations", "Operations Manager", "Coordinator"],
}


def default_departments() -> List[str]:
    return list(DEFAULT_DEPARTMENTS)


def default_job_titles() -> Dict[str, List[str]]:
    return {department: list(titles) for department, titles in DEFAULT_JOB_TITLES.items()}


class Company(models.Model):
    """A tenant. Every other record is partitioned by company."""

    name = models.CharField(max_length=160)
    company_code = models.CharField(max_length=32, unique=True)
    annual_leave_allotment = models.PositiveIntegerField(default=20)
    sick_leave_allotment = models.PositiveIntegerField(default=10)
    personal_leave_allotment = models.PositiveIntegerField(default=0)
    emergency_leave_allotment = models.PositiveIntegerField(default=0)
    departments = models.JSONField(default=default_departments, blank=True)
    job_titles = models.JSONField(default=default_job_titles, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["name"]
        verbose_name_plural = "companies"

    def __str__(self) -> str:
        return f"{self.name} ({self.company_code})"

    @property
    def leave_allotments(self) -> Dict[str, int]:
        return {
            "annual": self.annual_leave_allotment,
            "sick": self.sick_leave_allotment,
            "personal": self.personal_leave_allotment,
            "emergency": self.emergency_leave_allotment,
        }

    def has_department(self, department: str) -> bool:
        # An empty department list means the company has not restricted them.
        if not self.departments:
            return True
        return department in self.departments

    def settings_payload(self) -> dict:
        return {
            "annualLeaveBalance": self.annual_leave_allotment,
            "sickLeaveBalance": self.sick_leave_allotment,
            "personalLeaveBalance": self.personal_leave_allotment,
            "emergencyLeaveBalance": self.emergency_leave_allotment,
            "departments": list(self.departments or []),
            "jobTitles": dict(self.job_titles or {}),
        }

    def as_payload(self) -> dict:
        return {
            "id": self.pk,
            "name": self.name,
            "companyCode": self.company_code,
            "settings": self.settings_payload(),
        }


class MemberQuerySet(models.QuerySet):
    def in_company(self, company_id: int) -> "MemberQuerySet":
        return self.filter(company_id=company_id)

    def with_role(self, role: str) -> "MemberQuerySet":
        return self.filter(role=role)

    def department_admins(self, company_id: int, department: str) -> "MemberQuerySet":
        return self.in_company(company_id).with_role(Member.Role.ADMIN).filter(department=department)

    def superadmins(self, company_id: int) -> "MemberQuerySet":
        return self.in_company(company_id).with_role(Member.Role.SUPERADMIN)


class Member(models.Model):
    """Directory record for an identity account inside one company."""

    class Role(models.TextChoices):
        MEMBER = "member", "Member"
        ADMIN = "admin", "Admin"
        SUPERADMIN = "superadmin", "Super Admin"

    account = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name="member",
    )
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="members",
    )
    email = models.EmailField(unique=True)
    full_name = models.CharField(max_length=160)
    role = models.CharField(max_length=12, choices=Role.choices, default=Role.MEMBER)
    department = models.CharField(max_length=120, blank=True)
    job_title = models.CharField(max_length=160, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    objects = MemberQuerySet.as_manager()

    class Meta:
        ordering = ["full_name"]

    def __str__(self) -> str:
        return f"{self.full_name} <{self.email}> ({self.role})"

    @property
    def is_admin(self) -> bool:
        return self.role in {self.Role.ADMIN, self.Role.SUPERADMIN}

    @property
    def is_superadmin(self) -> bool:
        return self.role == self.Role.SUPERADMIN

    def as_payload(self) -> dict:
        balance = getattr(self, "leave_balance", None)
        return {
            "id": self.pk,
            "email": self.email,
            "fullName": self.full_name,
            "role": self.role,
            "jobTitle": self.job_title,
            "department": self.department,
            "companyId": self.company_id,
            "leaveBalance": balance.as_payload() if balance else None,
            "createdAt": self.created_at,
        }


class LeaveBalance(models.Model):
    """Days remaining per leave bucket for one member."""

    class Bucket(models.TextChoices):
        ANNUAL = "annual", "Annual"
        SICK = "sick", "Sick"
        PERSONAL = "personal", "Personal"
        EMERGENCY = "emergency", "Emergency"

    member = models.OneToOneField(
        Member,
        on_delete=models.CASCADE,
        related_name="leave_balance",
    )
    annual = models.PositiveIntegerField(default=0)
    sick = models.PositiveIntegerField(default=0)
    personal = models.PositiveIntegerField(default=0)
    emergency = models.PositiveIntegerField(default=0)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name = "leave balance"
        verbose_name_plural = "leave balances"

    def __str__(self) -> str:
        return f"{self.member.email} balance"

    @classmethod
    def bucket_for(cls, leave_type: Optional[str]) -> str:
        """Map a free-text leave type onto a balance bucket, defaulting to annual."""
        normalized = (leave_type or "").strip().lower()
        if normalized in {cls.Bucket.SICK.value, cls.Bucket.PERSONAL.value, cls.Bucket.EMERGENCY.value}:
            return normalized
        return cls.Bucket.ANNUAL.value

    @classmethod
    def ensure_for_member(cls, member: Member) -> "LeaveBalance":
        balance, _ = cls.objects.get_or_create(member=member, defaults=member.company.leave_allotments)
        return balance

    def remaining(self, leave_type: Optional[str]) -> int:
        return getattr(self, self.bucket_for(leave_type))

    def deduct(self, leave_type: Optional[str], days: int) -> str:
        """Subtract ``days`` from the matching bucket, never going below zero."""
        if days <= 0:
            raise ValueError("Days to deduct must be positive.")
        bucket = self.bucket_for(leave_type)
        LeaveBalance.objects.filter(pk=self.pk).update(**{bucket: Greatest(F(bucket) - days, 0)})
        self.refresh_from_db(fields=[bucket, "updated_at"])
        return bucket

    def as_payload(self) -> dict:
        return {
            "annual": self.annual,
            "sick": self.sick,
            "personal": self.personal,
            "emergency": self.emergency,
        }


class ServiceRequestQuerySet(models.QuerySet):
    def owned_by(self, member: Member) -> "ServiceRequestQuerySet":
        return self.filter(owner=member)

    def for_company(self, company_id: int) -> "ServiceRequestQuerySet":
        return self.filter(company_id=company_id)

    def with_status(self, status: str) -> "ServiceRequestQuerySet":
        return self.filter(status=status)

    def pending(self) -> "ServiceRequestQuerySet":
        return self.with_status(ServiceRequest.Status.PENDING)

    def assigned_to(self, member: Member) -> "ServiceRequestQuerySet":
        return self.filter(assigned_to=member)


class ServiceRequest(models.Model):
    """A general or leave request raised by a member."""

    LEAVE = "Leave"

    class Status(models.TextChoices):
        PENDING = "Pending", "Pending"
        APPROVED = "Approved", "Approved"
        REJECTED = "Rejected", "Rejected"

    owner = models.ForeignKey(
        Member,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="service_requests",
    )
    owner_name = models.CharField(max_length=160)
    owner_email = models.EmailField()
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="service_requests",
    )
    title = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    category = models.CharField(max_length=60, default="HR")
    request_type = models.CharField(max_length=60, default=LEAVE)
    priority = models.CharField(max_length=20, default="Normal")
    status = models.CharField(max_length=12, choices=Status.choices, default=Status.PENDING)
    assigned_to = models.ForeignKey(
        Member,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="assigned_requests",
    )
    reviewed_by = models.ForeignKey(
        Member,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="reviewed_requests",
    )

    leave_start = models.DateField(null=True, blank=True)
    leave_end = models.DateField(null=True, blank=True)
    leave_days = models.PositiveIntegerField(default=0)
    leave_type = models.CharField(max_length=20, blank=True, default="annual")
    deduct = models.BooleanField(default=False)

    date_submitted = models.DateTimeField(default=timezone.now)
    last_updated = models.DateTimeField(default=timezone.now)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    objects = ServiceRequestQuerySet.as_manager()

    class Meta:
        ordering = ["-date_submitted"]

    def __str__(self) -> str:
        return f"{self.owner_name}: {self.title} ({self.status})"

    @property
    def is_leave(self) -> bool:
        return self.request_type == self.LEAVE

    @property
    def is_pending(self) -> bool:
        return self.status == self.Status.PENDING

    @property
    def deducts_balance(self) -> bool:
        return self.is_leave and self.deduct and self.leave_days > 0

    def leave_payload(self) -> Optional[dict]:
        if not self.is_leave:
            return None
        return {
            "start": _iso(self.leave_start),
            "end": _iso(self.leave_end),
            "days": self.leave_days,
            "leaveType": self.leave_type,
        }

    def as_payload(self) -> dict:
        return {
            "id": self.pk,
            "userId": self.owner_id,
            "userName": self.owner_name,
            "userEmail": self.owner_email,
            "companyId": self.company_id,
            "title": self.title,
            "description": self.description,
            "priority": self.priority,
            "category": self.category,
            "type": self.request_type,
            "leave": self.leave_payload(),
            "deduct": self.deduct,
            "status": self.status,
            "assignedTo": self.assigned_to_id,
            "reviewedBy": self.reviewed_by_id,
            "dateSubmitted": self.date_submitted,
            "lastUpdated": self.last_updated,
            "approvedAt": self.approved_at,
            "rejectedAt": self.rejected_at,
        }


class AdminRequest(models.Model):
    """A member's self-nomination for the admin role."""

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        APPROVED = "approved", "Approved"
        REJECTED = "rejected", "Rejected"

    requester = models.ForeignKey(
        Member,
        on_delete=models.CASCADE,
        related_name="admin_requests",
    )
    requester_name = models.CharField(max_length=160)
    requester_email = models.EmailField()
    company = models.ForeignKey(
        Company,
        on_delete=models.CASCADE,
        related_name="admin_requests",
    )
    status = models.CharField(max_length=10, choices=Status.choices, default=Status.PENDING)
    decided_by = models.ForeignKey(
        Member,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(default=timezone.now)
    approved_at = models.DateTimeField(null=True, blank=True)
    rejected_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"{self.requester_name} admin request ({self.status})"

    def as_payload(self) -> dict:
        return {
            "id": self.pk,
            "userId": self.requester_id,
            "userName": self.requester_name,
            "userEmail": self.requester_email,
            "companyId": self.company_id,
            "status": self.status,
            "createdAt": self.created_at,
            "approvedAt": self.approved_at,
            "rejectedAt": self.rejected_at,
        }


def _iso(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None
