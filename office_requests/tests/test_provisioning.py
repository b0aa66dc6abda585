from __future__ import annotations

from django.contrib.auth import get_user_model

from office_requests import provisioning
from office_requests.exceptions import Conflict, Forbidden, InvalidState, NotFound, ValidationFailed
from office_requests.identity import IdentityClaims
from office_requests.models import AdminRequest, Company, Member

from .helpers import OfficeFlowTestCase

User = get_user_model()


class AdminProvisioningTests(OfficeFlowTestCase):
    def setUp(self):
        super().setUp()
        self.company = self.make_company(annual_leave_allotment=25, sick_leave_allotment=8)
        self.superadmin = self.make_member(self.company, "boss@acme.test", role=Member.Role.SUPERADMIN, department="IT")
        self.member = self.make_member(self.company, "emp@acme.test")

    def test_promote_member_to_department_head(self):
        promoted = provisioning.promote_to_admin(self.superadmin, self.member.pk, "Finance")

        promoted.refresh_from_db()
        self.assertEqual(promoted.role, Member.Role.ADMIN)
        self.assertEqual(promoted.department, "Finance")
        self.assertEqual(promoted.job_title, "Head of Finance")

    def test_promote_rejects_existing_admins(self):
        provisioning.promote_to_admin(self.superadmin, self.member.pk, "HR")
        with self.assertRaises(InvalidState):
            provisioning.promote_to_admin(self.superadmin, self.member.pk, "IT")
        with self.assertRaises(InvalidState):
            provisioning.promote_to_admin(self.superadmin, self.superadmin.pk, "IT")

    def test_promote_requires_superadmin_and_same_company(self):
        with self.assertRaises(Forbidden):
            provisioning.promote_to_admin(self.member, self.member.pk, "HR")

        other = self.make_company(name="Other", code="OTHR1111")
        outsider = self.make_member(other, "eve@other.test")
        with self.assertRaises(Forbidden):
            provisioning.promote_to_admin(self.superadmin, outsider.pk, "HR")

    def test_promote_rejects_unknown_department(self):
        with self.assertRaises(ValidationFailed):
            provisioning.promote_to_admin(self.superadmin, self.member.pk, "Catering")
        self.member.refresh_from_db()
        self.assertEqual(self.member.role, Member.Role.MEMBER)

    def test_create_admin_provisions_account_and_balance(self):
        admin = provisioning.create_admin(
            self.superadmin,
            {"full_name": "Ada Admin", "email": "Ada@Acme.test", "password": "pw123456", "department": "HR"},
        )

        self.assertEqual(admin.role, Member.Role.ADMIN)
        self.assertEqual(admin.job_title, "Head of HR")
        self.assertEqual(admin.email, "ada@acme.test")
        self.assertTrue(User.objects.get(pk=admin.pk).check_password("pw123456"))
        balance = self.balance_of(admin)
        self.assertEqual((balance.annual, balance.sick, balance.personal, balance.emergency), (25, 8, 0, 0))

    def test_create_admin_with_taken_email_conflicts(self):
        with self.assertRaises(Conflict):
            provisioning.create_admin(
                self.superadmin,
                {"full_name": "Dup", "email": "emp@acme.test", "password": "pw123456", "department": "HR"},
            )

    def test_deleting_superadmin_is_refused_without_side_effects(self):
        with self.assertRaises(Forbidden):
            provisioning.delete_member(self.superadmin, self.superadmin.pk)
        self.assertTrue(Member.objects.filter(pk=self.superadmin.pk).exists())
        self.assertTrue(User.objects.filter(pk=self.superadmin.pk).exists())

    def test_delete_member_removes_record_and_account(self):
        uid = self.member.pk
        provisioning.delete_member(self.superadmin, uid)
        self.assertFalse(Member.objects.filter(pk=uid).exists())
        self.assertFalse(User.objects.filter(pk=uid).exists())

    def test_delete_unknown_member(self):
        with self.assertRaises(NotFound):
            provisioning.delete_member(self.superadmin, 424242)

    def test_update_role_sets_fields_and_protects_superadmin(self):
        updated = provisioning.update_role(
            self.superadmin,
            self.member.pk,
            {"role": Member.Role.ADMIN, "department": "Operations", "job_title": "Ops Lead"},
        )
        self.assertEqual((updated.role, updated.department, updated.job_title), ("admin", "Operations", "Ops Lead"))

        with self.assertRaises(Forbidden):
            provisioning.update_role(self.superadmin, self.superadmin.pk, {"role": Member.Role.MEMBER})

    def test_profile_update_is_self_or_superadmin(self):
        colleague = self.make_member(self.company, "col@acme.test")
        with self.assertRaises(Forbidden):
            provisioning.update_profile(colleague, self.member.pk, {"department": "HR"})

        provisioning.update_profile(self.member, self.member.pk, {"department": "HR", "job_title": "Recruiter"})
        provisioning.update_profile(self.superadmin, self.member.pk, {"job_title": "HR Coordinator"})
        self.member.refresh_from_db()
        self.assertEqual((self.member.department, self.member.job_title), ("HR", "HR Coordinator"))

    def test_company_settings_partial_update(self):
        company = provisioning.update_company_settings(
            self.superadmin,
            {"sick_leave_balance": 12, "departments": ["IT", "HR"], "annual_leave_balance": None},
        )
        company.refresh_from_db()
        self.assertEqual(company.sick_leave_allotment, 12)
        self.assertEqual(company.annual_leave_allotment, 25)
        self.assertEqual(company.departments, ["IT", "HR"])

        with self.assertRaises(Forbidden):
            provisioning.update_company_settings(self.member, {"sick_leave_balance": 1})


class AdminRequestTests(OfficeFlowTestCase):
    def setUp(self):
        super().setUp()
        self.company = self.make_company(departments=["Operations", "IT"])
        self.superadmin = self.make_member(self.company, "boss@acme.test", role=Member.Role.SUPERADMIN, department="IT")
        self.member = self.make_member(self.company, "emp@acme.test")

    def test_only_one_pending_request_per_member(self):
        provisioning.request_admin(self.member)
        with self.assertRaises(Conflict):
            provisioning.request_admin(self.member)

    def test_approval_promotes_into_first_department_by_default(self):
        admin_request = provisioning.request_admin(self.member)

        decided = provisioning.decide_admin_request(self.superadmin, admin_request.pk, approve=True)

        self.assertEqual(decided.status, AdminRequest.Status.APPROVED)
        self.assertIsNotNone(decided.approved_at)
        self.member.refresh_from_db()
        self.assertEqual(self.member.role, Member.Role.ADMIN)
        self.assertEqual(self.member.job_title, "Head of Operations")

    def test_approval_with_explicit_department(self):
        admin_request = provisioning.request_admin(self.member)
        provisioning.decide_admin_request(self.superadmin, admin_request.pk, approve=True, department="IT")
        self.member.refresh_from_db()
        self.assertEqual(self.member.department, "IT")

    def test_rejection_keeps_role_and_blocks_second_decision(self):
        admin_request = provisioning.request_admin(self.member)
        provisioning.decide_admin_request(self.superadmin, admin_request.pk, approve=False)

        self.member.refresh_from_db()
        self.assertEqual(self.member.role, Member.Role.MEMBER)
        with self.assertRaises(InvalidState):
            provisioning.decide_admin_request(self.superadmin, admin_request.pk, approve=True)

    def test_pending_list_is_company_scoped(self):
        mine = provisioning.request_admin(self.member)
        other = self.make_company(name="Other", code="OTHR1111")
        provisioning.request_admin(self.make_member(other, "eve@other.test"))

        self.assertEqual(list(provisioning.pending_admin_requests(self.superadmin)), [mine])
        with self.assertRaises(Forbidden):
            provisioning.pending_admin_requests(self.member)


class RegistrationTests(OfficeFlowTestCase):
    def _identity(self, email: str) -> IdentityClaims:
        account = self.provider.create_account(email, "pw123456", "Someone")
        return IdentityClaims(uid=account.pk, email=account.email)

    def test_creating_a_company_makes_a_superadmin(self):
        member = provisioning.register_member(
            self._identity("founder@new.test"),
            {"full_name": "Fay Founder", "is_creating_company": True, "company_name": "Techcorp"},
        )

        self.assertEqual(member.role, Member.Role.SUPERADMIN)
        self.assertEqual((member.department, member.job_title), ("IT", "Head of IT"))
        self.assertTrue(member.company.company_code.startswith("TECH"))
        self.assertEqual(len(member.company.company_code), 8)
        self.assertEqual(self.balance_of(member).annual, 20)

    def test_joining_by_code(self):
        company = self.make_company(sick_leave_allotment=7)
        member = provisioning.register_member(
            self._identity("joiner@acme.test"),
            {"full_name": "Joe Joiner", "company_code": company.company_code, "department": "HR"},
        )
        self.assertEqual(member.company, company)
        self.assertEqual((member.role, member.job_title, member.department), ("member", "Employee", "HR"))
        self.assertEqual(self.balance_of(member).sick, 7)

    def test_invalid_code_and_double_registration(self):
        identity = self._identity("joiner@acme.test")
        with self.assertRaises(ValidationFailed):
            provisioning.register_member(identity, {"full_name": "Joe", "company_code": "NOPE0000"})

        company = self.make_company()
        provisioning.register_member(identity, {"full_name": "Joe", "company_code": company.company_code})
        with self.assertRaises(Conflict):
            provisioning.register_member(identity, {"full_name": "Joe", "company_code": company.company_code})
        self.assertEqual(Company.objects.count(), 1)
