"""Signal handlers for office_requests."""
from __future__ import annotations

from django.db.models.signals import post_save
from django.dispatch import receiver

from .models import LeaveBalance, Member


@receiver(post_save, sender=Member)
def create_leave_balance(sender, instance: Member, created: bool, **kwargs) -> None:
    """Give every new member a balance seeded from their company's allotments."""
    if created:
        LeaveBalance.ensure_for_member(instance)
