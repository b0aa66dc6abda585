"""Boundary schemas for the JSON endpoints.

Request bodies use the camelCase keys of the public API; each form declares
how those keys map onto its own fields and validates them before anything
reaches the services.
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from django import forms

from .models import Member, ServiceRequest
from .utils import inclusive_days


class PayloadForm(forms.Form):
    """A form bound from a decoded JSON object instead of POST data."""

    aliases: Dict[str, str] = {}
    # Fields left out of the body clean to None so services can skip them;
    # a field sent as "" is kept so it can be cleared.
    partial_fields: tuple = ()

    def was_sent(self, name: str) -> bool:
        return self.data.get(name) is not None

    def clean(self) -> dict[str, Any]:
        cleaned = super().clean()
        for name in self.partial_fields:
            if not self.was_sent(name):
                cleaned[name] = None
        return cleaned

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None, **kwargs: Any) -> "PayloadForm":
        data = {}
        for key, value in (payload or {}).items():
            data[cls.aliases.get(key, key)] = value
        return cls(data=data, **kwargs)


class SignUpForm(PayloadForm):
    aliases = {"fullName": "full_name", "displayName": "full_name"}

    email = forms.EmailField()
    password = forms.CharField(min_length=6, strip=False)
    full_name = forms.CharField(max_length=160, required=False)


class SignInForm(PayloadForm):
    email = forms.EmailField()
    password = forms.CharField(strip=False)


class RegistrationForm(PayloadForm):
    aliases = {
        "fullName": "full_name",
        "companyCode": "company_code",
        "companyName": "company_name",
        "isCreatingCompany": "is_creating_company",
    }

    full_name = forms.CharField(max_length=160, error_messages={"required": "Missing required fields"})
    company_code = forms.CharField(max_length=32, required=False)
    company_name = forms.CharField(max_length=160, required=False)
    is_creating_company = forms.BooleanField(required=False)
    department = forms.CharField(max_length=120, required=False)


class CompanyCodeForm(PayloadForm):
    aliases = {"companyCode": "company_code"}

    company_code = forms.CharField(max_length=32, error_messages={"required": "Company code is required"})


class ServiceRequestForm(PayloadForm):
    """A member's submission; the nested ``leave`` object is flattened into leave_* fields."""

    aliases = {"type": "request_type"}
    leave_aliases = {"start": "leave_start", "end": "leave_end", "days": "leave_days", "leaveType": "leave_type"}

    title = forms.CharField(max_length=200, required=False)
    description = forms.CharField(required=False)
    priority = forms.CharField(max_length=20, required=False)
    category = forms.CharField(max_length=60, required=False)
    request_type = forms.CharField(max_length=60, required=False)
    leave_start = forms.DateField(required=False, input_formats=["%Y-%m-%d"])
    leave_end = forms.DateField(required=False, input_formats=["%Y-%m-%d"])
    leave_days = forms.IntegerField(required=False)
    leave_type = forms.CharField(max_length=20, required=False)
    deduct = forms.BooleanField(required=False)

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any] | None, **kwargs: Any) -> "ServiceRequestForm":
        payload = dict(payload or {})
        leave = payload.pop("leave", None) or {}
        if not isinstance(leave, Mapping):
            leave = {"invalid": leave}
        for key, value in leave.items():
            payload[cls.leave_aliases.get(key, f"leave_{key}")] = value
        return super().from_payload(payload, **kwargs)

    def clean(self) -> dict[str, Any]:
        cleaned = super().clean()
        cleaned["request_type"] = cleaned.get("request_type") or ServiceRequest.LEAVE
        cleaned["category"] = cleaned.get("category") or "HR"
        if cleaned["request_type"] != ServiceRequest.LEAVE or self.errors:
            return cleaned

        start = cleaned.get("leave_start")
        end = cleaned.get("leave_end")
        if not start or not end:
            raise forms.ValidationError("Please provide valid start/end dates for leave.")
        if end < start:
            raise forms.ValidationError("End date cannot be earlier than the start date.")
        days = cleaned.get("leave_days")
        if days is None:
            days = inclusive_days(start, end)
        if days <= 0:
            raise forms.ValidationError("Leave duration must be at least one day.")
        cleaned["leave_days"] = days
        return cleaned


class RequestFilterForm(forms.Form):
    status = forms.ChoiceField(choices=ServiceRequest.Status.choices, required=False)


class CreateAdminForm(PayloadForm):
    aliases = {"fullName": "full_name"}

    full_name = forms.CharField(max_length=160, error_messages={"required": "Full name is required"})
    email = forms.EmailField(error_messages={"required": "Email is required"})
    password = forms.CharField(min_length=6, strip=False, error_messages={"required": "Password is required"})
    department = forms.CharField(max_length=120, error_messages={"required": "Department is required"})


class PromoteToAdminForm(PayloadForm):
    aliases = {"userId": "user_id"}

    user_id = forms.IntegerField(error_messages={"required": "Missing required fields"})
    department = forms.CharField(max_length=120, error_messages={"required": "Missing required fields"})


class RoleUpdateForm(PayloadForm):
    aliases = {"jobTitle": "job_title"}
    partial_fields = ("job_title", "department")

    role = forms.ChoiceField(
        choices=[(Member.Role.MEMBER, "Member"), (Member.Role.ADMIN, "Admin")],
        error_messages={"required": "Invalid role", "invalid_choice": "Invalid role"},
    )
    job_title = forms.CharField(max_length=160, required=False)
    department = forms.CharField(max_length=120, required=False)


class ProfileUpdateForm(PayloadForm):
    aliases = {"jobTitle": "job_title"}
    partial_fields = ("job_title", "department")

    job_title = forms.CharField(max_length=160, required=False)
    department = forms.CharField(max_length=120, required=False)


class AdminDecisionForm(PayloadForm):
    department = forms.CharField(max_length=120, required=False, empty_value=None)


class CompanySettingsForm(PayloadForm):
    aliases = {
        "annualLeaveBalance": "annual_leave_balance",
        "sickLeaveBalance": "sick_leave_balance",
        "personalLeaveBalance": "personal_leave_balance",
        "emergencyLeaveBalance": "emergency_leave_balance",
        "jobTitles": "job_titles",
    }

    annual_leave_balance = forms.IntegerField(min_value=0, required=False)
    sick_leave_balance = forms.IntegerField(min_value=0, required=False)
    personal_leave_balance = forms.IntegerField(min_value=0, required=False)
    emergency_leave_balance = forms.IntegerField(min_value=0, required=False)
    departments = forms.JSONField(required=False)
    job_titles = forms.JSONField(required=False)

    # JSONField cleans [] and {} to None; fall back to the raw value so an
    # explicit empty list or mapping clears the setting.
    def clean_departments(self):
        departments = self.cleaned_data.get("departments")
        if departments is None:
            departments = self.data.get("departments")
        if departments is None:
            return None
        if not isinstance(departments, list) or not all(isinstance(d, str) and d.strip() for d in departments):
            raise forms.ValidationError("Departments must be a list of names.")
        return [d.strip() for d in departments]

    def clean_job_titles(self):
        job_titles = self.cleaned_data.get("job_titles")
        if job_titles is None:
            job_titles = self.data.get("job_titles")
        if job_titles is None:
            return None
        if not isinstance(job_titles, dict):
            raise forms.ValidationError("Job titles must map departments to lists of titles.")
        for titles in job_titles.values():
            if not isinstance(titles, list) or not all(isinstance(t, str) for t in titles):
                raise forms.ValidationError("Job titles must map departments to lists of titles.")
        return job_titles
