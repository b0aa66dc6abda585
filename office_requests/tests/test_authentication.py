from __future__ import annotations

from datetime import datetime, timedelta, timezone

from django.test import RequestFactory

from office_requests.authentication import (
    authenticate_identity,
    authenticate_principal,
    require_admin,
    require_superadmin,
)
from office_requests.exceptions import Forbidden, PrincipalNotFound, Unauthenticated
from office_requests.identity import IdentityProvider
from office_requests.models import Member

from .helpers import OfficeFlowTestCase


class CredentialVerifierTests(OfficeFlowTestCase):
    def setUp(self):
        super().setUp()
        self.factory = RequestFactory()
        self.company = self.make_company()
        self.member = self.make_member(self.company, "emp@acme.test")

    def _request(self, header=None):
        extra = {"HTTP_AUTHORIZATION": header} if header is not None else {}
        return self.factory.get("/api/auth/user-data", **extra)

    def test_valid_token_attaches_identity_and_principal(self):
        request = self._request(f"Bearer {self.token_for(self.member)}")

        principal = authenticate_principal(request)

        self.assertEqual(principal, self.member)
        self.assertEqual(request.principal, self.member)
        self.assertEqual(request.identity.uid, self.member.pk)
        self.assertEqual(request.identity.email, "emp@acme.test")

    def test_missing_or_malformed_header(self):
        for header in (None, "", "Bearer", "Token abc", "Basic dXNlcjpwYXNz"):
            with self.subTest(header=header):
                with self.assertRaises(Unauthenticated):
                    authenticate_identity(self._request(header))

    def test_token_signed_with_another_secret_is_rejected(self):
        forged = IdentityProvider(secret="an-entirely-different-signing-secret-value").issue_token(self.member.account)
        with self.assertRaises(Unauthenticated):
            authenticate_identity(self._request(f"Bearer {forged}"))

    def test_expired_token_is_rejected(self):
        long_ago = datetime.now(timezone.utc) - timedelta(days=30)
        stale = self.provider.issue_token(self.member.account, now=long_ago)
        with self.assertRaises(Unauthenticated):
            authenticate_identity(self._request(f"Bearer {stale}"))

    def test_token_of_deleted_account_is_rejected(self):
        token = self.token_for(self.member)
        self.member.account.delete()
        with self.assertRaises(Unauthenticated):
            authenticate_identity(self._request(f"Bearer {token}"))

    def test_identity_without_directory_record(self):
        account = self.provider.create_account("new@acme.test", "pw123456")
        request = self._request(f"Bearer {self.provider.issue_token(account)}")

        self.assertEqual(authenticate_identity(request).uid, account.pk)
        with self.assertRaises(PrincipalNotFound):
            authenticate_principal(request)


class RoleGateTests(OfficeFlowTestCase):
    def setUp(self):
        super().setUp()
        company = self.make_company()
        self.member = self.make_member(company, "emp@acme.test")
        self.admin = self.make_member(company, "hr@acme.test", role=Member.Role.ADMIN, department="HR")
        self.superadmin = self.make_member(company, "boss@acme.test", role=Member.Role.SUPERADMIN)

    def test_require_admin(self):
        require_admin(self.admin)
        require_admin(self.superadmin)
        with self.assertRaises(Forbidden):
            require_admin(self.member)

    def test_require_superadmin(self):
        require_superadmin(self.superadmin)
        for member in (self.admin, self.member):
            with self.assertRaises(Forbidden):
                require_superadmin(member)
