from __future__ import annotations

import json
from typing import Any, Optional, Tuple

from django.test import TestCase

from office_requests.identity import IdentityProvider
from office_requests.models import Company, LeaveBalance, Member

PASSWORD = "secret-pass"


class OfficeFlowTestCase(TestCase):
    """Shared fixtures: companies, members with real identity accounts, and JSON calls."""

    def setUp(self):
        self.provider = IdentityProvider.from_settings()

    def make_company(self, name: str = "Acme Corp", code: str = "ACME1234", **fields: Any) -> Company:
        return Company.objects.create(name=name, company_code=code, **fields)

    def make_member(
        self,
        company: Company,
        email: str,
        role: str = Member.Role.MEMBER,
        department: str = "",
        full_name: Optional[str] = None,
    ) -> Member:
        full_name = full_name or email.split("@")[0].title()
        account = self.provider.create_account(email, PASSWORD, full_name)
        return Member.objects.create(
            account=account,
            company=company,
            email=account.email,
            full_name=full_name,
            role=role,
            department=department,
            job_title=f"Head of {department}" if role == Member.Role.ADMIN else "Employee",
        )

    def set_balance(self, member: Member, **buckets: int) -> LeaveBalance:
        LeaveBalance.objects.filter(member=member).update(**buckets)
        return LeaveBalance.objects.get(member=member)

    def balance_of(self, member: Member) -> LeaveBalance:
        return LeaveBalance.objects.get(member=member)

    def token_for(self, member: Member) -> str:
        return self.provider.issue_token(member.account)

    def api(
        self,
        method: str,
        url: str,
        member: Optional[Member] = None,
        body: Any = None,
        token: Optional[str] = None,
    ) -> Tuple[int, dict]:
        headers = {}
        if member is not None:
            token = self.token_for(member)
        if token is not None:
            headers["HTTP_AUTHORIZATION"] = f"Bearer {token}"
        if method.upper() == "GET":
            response = self.client.get(url, body or {}, **headers)
        else:
            data = "" if body is None else json.dumps(body)
            response = self.client.generic(method.upper(), url, data, content_type="application/json", **headers)
        return response.status_code, response.json()
