"""Small helpers shared by forms and provisioning."""
from __future__ import annotations

import random
from datetime import date
from typing import Optional

from .models import Company


def inclusive_days(start: Optional[date], end: Optional[date]) -> int:
    """Number of calendar days from ``start`` to ``end`` counting both ends, 0 if invalid."""
    if not start or not end or end < start:
        return 0
    return (end - start).days + 1


def generate_company_code(company_name: str, attempts: int = 20) -> str:
    """Build a shareable join code like ``TECH4821`` that no other company uses."""
    prefix = "".join(ch for ch in company_name if ch.isalnum())[:4].upper() or "CORP"
    for _ in range(attempts):
        code = f"{prefix}{random.randint(1000, 9999)}"
        if not Company.objects.filter(company_code=code).exists():
            return code
    raise RuntimeError(f"Could not generate a unique company code for {company_name!r}")
