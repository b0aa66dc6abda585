from __future__ import annotations

from django.core.management.base import BaseCommand
from django.db import transaction

from ...identity import IdentityProvider
from ...models import Company, Member

DEMO_COMPANY_NAME = "TechCorp Solutions"
DEMO_COMPANY_CODE = "TECH2026"


class Command(BaseCommand):
    help = "Create a demo company with a super admin account for presentations."

    def add_arguments(self, parser):
        parser.add_argument("--email", default="admin@techcorp.com", help="Super admin email.")
        parser.add_argument("--password", default="Admin123!", help="Super admin password.")
        parser.add_argument("--full-name", default="John Anderson", help="Super admin display name.")
        parser.add_argument("--code", default=DEMO_COMPANY_CODE, help="Company join code.")

    def handle(self, *args, **options):
        code = options["code"]
        if Company.objects.filter(company_code=code).exists():
            self.stdout.write(self.style.WARNING(f"Company {code} already exists, nothing to do."))
            return

        provider = IdentityProvider.from_settings()
        with transaction.atomic():
            company = Company.objects.create(name=DEMO_COMPANY_NAME, company_code=code)
            account = provider.create_account(options["email"], options["password"], options["full_name"])
            Member.objects.create(
                account=account,
                company=company,
                email=account.email,
                full_name=options["full_name"],
                role=Member.Role.SUPERADMIN,
                department="IT",
                job_title="Head of IT",
            )

        self.stdout.write(self.style.SUCCESS(f"Created {company.name} (code {company.company_code})."))
        self.stdout.write(f"Super admin: {account.email}")
