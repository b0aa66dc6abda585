from __future__ import annotations

from office_requests.models import Member
from office_requests.routing import resolve_assignee

from .helpers import OfficeFlowTestCase


class ResolveAssigneeTests(OfficeFlowTestCase):
    def setUp(self):
        super().setUp()
        self.company = self.make_company()
        self.superadmin = self.make_member(self.company, "boss@acme.test", role=Member.Role.SUPERADMIN, department="IT")
        self.it_admin = self.make_member(self.company, "it@acme.test", role=Member.Role.ADMIN, department="IT")
        self.hr_admin = self.make_member(self.company, "hr@acme.test", role=Member.Role.ADMIN, department="HR")
        self.make_member(self.company, "staff@acme.test", department="IT")

    def test_category_goes_to_matching_department_admin(self):
        self.assertEqual(resolve_assignee("IT", self.company.pk), self.it_admin.pk)
        self.assertEqual(resolve_assignee("HR", self.company.pk), self.hr_admin.pk)

    def test_leave_is_handled_by_hr(self):
        self.assertEqual(resolve_assignee("Leave", self.company.pk), self.hr_admin.pk)

    def test_department_without_admin_falls_back_to_superadmin(self):
        self.assertEqual(resolve_assignee("Maintenance", self.company.pk), self.superadmin.pk)

    def test_unmapped_category_falls_back_to_superadmin(self):
        self.assertEqual(resolve_assignee("Facilities", self.company.pk), self.superadmin.pk)

    def test_admins_of_other_companies_are_ignored(self):
        other = self.make_company(name="Other", code="OTHR1111")
        other_boss = self.make_member(other, "boss@other.test", role=Member.Role.SUPERADMIN, department="IT")
        self.assertEqual(resolve_assignee("IT", other.pk), other_boss.pk)

    def test_returns_none_when_company_has_no_admins(self):
        empty = self.make_company(name="Empty", code="EMPT1111")
        self.make_member(empty, "lonely@empty.test")
        self.assertIsNone(resolve_assignee("HR", empty.pk))

    def test_any_admin_of_the_department_is_acceptable(self):
        second_it = self.make_member(self.company, "it2@acme.test", role=Member.Role.ADMIN, department="IT")
        self.assertIn(resolve_assignee("IT", self.company.pk), {self.it_admin.pk, second_it.pk})
