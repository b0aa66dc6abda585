"""JSON endpoints for officeFlow."""
from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any, Dict, Type

from django.http import HttpRequest, JsonResponse
from django.utils.decorators import method_decorator
from django.views import View
from django.views.decorators.csrf import csrf_exempt

from . import provisioning, workflow
from .authentication import (
    authenticate_identity,
    authenticate_principal,
    require_admin,
    require_self_or_admin,
    require_superadmin,
)
from .exceptions import NotFound, OfficeFlowError, ValidationFailed
from .forms import (
    AdminDecisionForm,
    CompanyCodeForm,
    CompanySettingsForm,
    CreateAdminForm,
    PayloadForm,
    ProfileUpdateForm,
    PromoteToAdminForm,
    RegistrationForm,
    RequestFilterForm,
    RoleUpdateForm,
    ServiceRequestForm,
    SignInForm,
    SignUpForm,
)
from .identity import IdentityProvider
from .models import Company, Member
from .notifications import (
    notify_admin_created,
    notify_admin_request_decided,
    notify_request_approved,
    notify_request_rejected,
    notify_request_submitted,
)

logger = logging.getLogger(__name__)


def api_response(status: int = HTTPStatus.OK, message: str | None = None, **payload: Any) -> JsonResponse:
    body: Dict[str, Any] = {"success": HTTPStatus.OK <= status < HTTPStatus.MULTIPLE_CHOICES}
    if message:
        body["message"] = message
    body.update(payload)
    return JsonResponse(body, status=status)


@method_decorator(csrf_exempt, name="dispatch")
class ApiView(View):
    """Authenticates the caller before decoding the JSON body; failures become JSON.

    ``authentication`` is ``"principal"`` (token plus directory record),
    ``"identity"`` (token only) or ``None`` for public endpoints.
    """

    authentication: str | None = "principal"
    body_methods = {"post", "put", "patch"}

    def dispatch(self, request: HttpRequest, *args, **kwargs):
        method = request.method.lower()
        if method not in self.http_method_names or not hasattr(self, method):
            return self.http_method_not_allowed(request, *args, **kwargs)
        try:
            self.authenticate(request)
            self.check_permissions(request)
            self.payload = self.parse_body(request)
            return super().dispatch(request, *args, **kwargs)
        except OfficeFlowError as exc:
            logger.info("%s %s -> %s %s", request.method, request.path, int(exc.status_code), exc.message)
            return api_response(exc.status_code, exc.message)
        except Exception:
            logger.exception("Unhandled error on %s %s", request.method, request.path)
            return api_response(HTTPStatus.INTERNAL_SERVER_ERROR, "Server error")

    def parse_body(self, request: HttpRequest) -> Dict[str, Any]:
        if request.method.lower() not in self.body_methods or not request.body:
            return {}
        try:
            payload = json.loads(request.body)
        except (ValueError, UnicodeDecodeError) as exc:
            raise ValidationFailed("Request body must be valid JSON") from exc
        if not isinstance(payload, dict):
            raise ValidationFailed("Request body must be a JSON object")
        return payload

    def authenticate(self, request: HttpRequest) -> None:
        if self.authentication == "principal":
            authenticate_principal(request)
        elif self.authentication == "identity":
            authenticate_identity(request)

    def check_permissions(self, request: HttpRequest) -> None:
        """Hook for role mixins."""

    def cleaned(self, form_class: Type[PayloadForm]) -> Dict[str, Any]:
        form = form_class.from_payload(self.payload)
        if not form.is_valid():
            raise ValidationFailed.from_form(form)
        return form.cleaned_data


class AdminRequiredMixin:
    """Admits admins and superadmins."""

    def check_permissions(self, request):
        super().check_permissions(request)
        require_admin(request.principal)


class SuperAdminRequiredMixin:
    """Admits superadmins only."""

    def check_permissions(self, request):
        super().check_permissions(request)
        require_superadmin(request.principal)


class DeprecatedEndpointView(ApiView):
    """Password endpoints of the old JSON-file backend; kept so old clients get a clear answer."""

    authentication = None

    def post(self, request, *args, **kwargs):
        return api_response(
            HTTPStatus.GONE,
            "This endpoint is deprecated. Please sign in through /api/auth/sign-in instead.",
        )


class SignUpView(ApiView):
    authentication = None

    def post(self, request, *args, **kwargs):
        data = self.cleaned(SignUpForm)
        provider = IdentityProvider.from_settings()
        account = provider.create_account(data["email"], data["password"], data["full_name"])
        return api_response(
            HTTPStatus.CREATED,
            "Account created",
            uid=account.pk,
            token=provider.issue_token(account),
        )


class SignInView(ApiView):
    authentication = None

    def post(self, request, *args, **kwargs):
        data = self.cleaned(SignInForm)
        provider = IdentityProvider.from_settings()
        account = provider.sign_in(data["email"], data["password"])
        return api_response(uid=account.pk, token=provider.issue_token(account))


class RegisterView(ApiView):
    authentication = "identity"

    def post(self, request, *args, **kwargs):
        data = self.cleaned(RegistrationForm)
        member = provisioning.register_member(request.identity, data)
        return api_response(
            HTTPStatus.CREATED,
            f"{member.full_name} successfully registered!",
            user=member.as_payload(),
            company=member.company.as_payload(),
        )


class UserDataView(ApiView):
    def get(self, request, *args, **kwargs):
        return api_response(user=request.principal.as_payload())


class VerifyCompanyCodeView(ApiView):
    authentication = None

    def post(self, request, *args, **kwargs):
        data = self.cleaned(CompanyCodeForm)
        company = Company.objects.filter(company_code=data["company_code"].strip()).first()
        if company is None:
            raise NotFound("Invalid company code")
        return api_response(companyName=company.name, departments=list(company.departments or []))


class ServiceRequestCollectionView(ApiView):
    """Members submit requests here; everyone lists what they may see."""

    def get(self, request, *args, **kwargs):
        filters = RequestFilterForm(request.GET or None)
        status = None
        if filters.is_bound:
            if not filters.is_valid():
                raise ValidationFailed.from_form(filters)
            status = filters.cleaned_data.get("status") or None
        requests = workflow.list_requests(request.principal, status=status)
        return api_response(requests=[item.as_payload() for item in requests])

    def post(self, request, *args, **kwargs):
        data = self.cleaned(ServiceRequestForm)
        service_request = workflow.submit_request(request.principal, data)
        notify_request_submitted(service_request)
        message = (
            "Request submitted and routed to appropriate admin"
            if service_request.assigned_to_id
            else "Request submitted (no admin available yet)"
        )
        return api_response(HTTPStatus.CREATED, message, request=service_request.as_payload())


class ServiceRequestDecisionView(AdminRequiredMixin, ApiView):
    decision: str = "approve"

    def post(self, request, *args, pk: int, **kwargs):
        if self.decision == "approve":
            service_request = workflow.approve_request(pk, request.principal)
            notify_request_approved(service_request)
            message = "Request approved"
        else:
            service_request = workflow.reject_request(pk, request.principal)
            notify_request_rejected(service_request)
            message = "Request rejected"
        return api_response(message=message, request=service_request.as_payload())


class RequestAdminView(ApiView):
    def post(self, request, *args, **kwargs):
        admin_request = provisioning.request_admin(request.principal)
        return api_response(
            HTTPStatus.CREATED,
            "Admin request submitted successfully",
            request=admin_request.as_payload(),
        )


class AdminRequestListView(SuperAdminRequiredMixin, ApiView):
    def get(self, request, *args, **kwargs):
        pending = provisioning.pending_admin_requests(request.principal)
        return api_response(requests=[item.as_payload() for item in pending])


class AdminRequestDecisionView(SuperAdminRequiredMixin, ApiView):
    decision: str = "approve"

    def post(self, request, *args, pk: int, **kwargs):
        data = self.cleaned(AdminDecisionForm)
        approve = self.decision == "approve"
        admin_request = provisioning.decide_admin_request(
            request.principal,
            pk,
            approve=approve,
            department=data.get("department"),
        )
        notify_admin_request_decided(admin_request)
        return api_response(
            message="Admin request approved" if approve else "Admin request rejected",
            request=admin_request.as_payload(),
        )


class CreateAdminView(SuperAdminRequiredMixin, ApiView):
    def post(self, request, *args, **kwargs):
        data = self.cleaned(CreateAdminForm)
        member = provisioning.create_admin(request.principal, data)
        notify_admin_created(member)
        return api_response(HTTPStatus.CREATED, "Admin created successfully", user=member.as_payload())


class PromoteToAdminView(SuperAdminRequiredMixin, ApiView):
    def post(self, request, *args, **kwargs):
        data = self.cleaned(PromoteToAdminForm)
        member = provisioning.promote_to_admin(request.principal, data["user_id"], data["department"])
        return api_response(
            message=f"{member.full_name} has been promoted to Admin ({member.job_title})",
            user=member.as_payload(),
        )


class UserDetailView(ApiView):
    def get(self, request, *args, pk: int, **kwargs):
        target = Member.objects.select_related("leave_balance").filter(pk=pk).first()
        if target is None:
            raise NotFound("User not found")
        require_self_or_admin(request.principal, target)
        return api_response(user=target.as_payload())

    def delete(self, request, *args, pk: int, **kwargs):
        provisioning.delete_member(request.principal, pk)
        return api_response(message="User deleted successfully")


class UserRoleView(SuperAdminRequiredMixin, ApiView):
    def put(self, request, *args, pk: int, **kwargs):
        data = self.cleaned(RoleUpdateForm)
        member = provisioning.update_role(request.principal, pk, data)
        return api_response(message="User role updated successfully", user=member.as_payload())


class UserProfileView(ApiView):
    def put(self, request, *args, pk: int, **kwargs):
        data = self.cleaned(ProfileUpdateForm)
        member = provisioning.update_profile(request.principal, pk, data)
        return api_response(message="Profile updated successfully", user=member.as_payload())


class CompanyUsersView(AdminRequiredMixin, ApiView):
    def get(self, request, *args, **kwargs):
        members = (
            Member.objects.in_company(request.principal.company_id)
            .select_related("leave_balance")
            .order_by("full_name")
        )
        return api_response(users=[member.as_payload() for member in members])


class CompanySettingsView(ApiView):
    def get(self, request, *args, **kwargs):
        return api_response(company=request.principal.company.as_payload())

    def put(self, request, *args, **kwargs):
        data = self.cleaned(CompanySettingsForm)
        company = provisioning.update_company_settings(request.principal, data)
        return api_response(message="Company settings updated successfully", company=company.as_payload())
