"""Admin configuration for officeFlow."""
from django.contrib import admin

from .models import AdminRequest, Company, LeaveBalance, Member, ServiceRequest


class LeaveBalanceInline(admin.StackedInline):
    model = LeaveBalance
    extra = 0
    readonly_fields = ("updated_at",)


@admin.register(Company)
class CompanyAdmin(admin.ModelAdmin):
    list_display = ("name", "company_code", "annual_leave_allotment", "sick_leave_allotment", "created_at")
    search_fields = ("name", "company_code")
    readonly_fields = ("created_at",)


@admin.register(Member)
class MemberAdmin(admin.ModelAdmin):
    list_display = ("full_name", "email", "company", "role", "department", "job_title")
    list_filter = ("role", "department", "company")
    search_fields = ("full_name", "email")
    autocomplete_fields = ("company",)
    readonly_fields = ("created_at",)
    inlines = [LeaveBalanceInline]


@admin.register(ServiceRequest)
class ServiceRequestAdmin(admin.ModelAdmin):
    list_display = (
        "title",
        "owner_name",
        "company",
        "category",
        "request_type",
        "status",
        "assigned_to",
        "date_submitted",
    )
    list_filter = ("status", "category", "request_type", "company")
    search_fields = ("title", "owner_name", "owner_email", "description")
    autocomplete_fields = ("owner", "assigned_to", "reviewed_by", "company")
    readonly_fields = ("date_submitted", "last_updated", "approved_at", "rejected_at")
    ordering = ("-date_submitted",)


@admin.register(AdminRequest)
class AdminRequestAdmin(admin.ModelAdmin):
    list_display = ("requester_name", "requester_email", "company", "status", "created_at")
    list_filter = ("status", "company")
    search_fields = ("requester_name", "requester_email")
    autocomplete_fields = ("requester", "company", "decided_by")
    readonly_fields = ("created_at", "approved_at", "rejected_at")
