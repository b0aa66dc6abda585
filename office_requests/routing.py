"""Pick the admin who should handle a newly submitted request."""
from __future__ import annotations

import logging
from typing import Optional

from .models import Member

logger = logging.getLogger(__name__)

CATEGORY_DEPARTMENTS = {
    "HR": "HR",
    "IT": "IT",
    "Maintenance": "Maintenance",
    "Leave": "HR",
}


def resolve_assignee(category: str, company_id: int) -> Optional[int]:
    """Return the id of the department admin for ``category``, else a superadmin, else None.

    When several admins share a department the choice between them is arbitrary.
    """
    department = CATEGORY_DEPARTMENTS.get(category)
    if department:
        admin_id = (
            Member.objects.department_admins(company_id, department).values_list("pk", flat=True).first()
        )
        if admin_id is not None:
            return admin_id

    superadmin_id = Member.objects.superadmins(company_id).values_list("pk", flat=True).first()
    if superadmin_id is None:
        logger.warning("No admin available for %s requests in company %s", category, company_id)
    return superadmin_id
