"""URL routing for the officeFlow API."""
from django.urls import path

from . import views

app_name = "office_requests"

urlpatterns = [
    path("api/auth/sign-up", views.SignUpView.as_view(), name="sign_up"),
    path("api/auth/sign-in", views.SignInView.as_view(), name="sign_in"),
    path("api/auth/register", views.RegisterView.as_view(), name="register"),
    path("api/auth/user-data", views.UserDataView.as_view(), name="user_data"),
    path("api/verify-company-code", views.VerifyCompanyCodeView.as_view(), name="verify_company_code"),
    path("api/leave-requests", views.ServiceRequestCollectionView.as_view(), name="requests"),
    path(
        "api/leave-requests/<int:pk>/approve",
        views.ServiceRequestDecisionView.as_view(decision="approve"),
        name="approve_request",
    ),
    path(
        "api/leave-requests/<int:pk>/reject",
        views.ServiceRequestDecisionView.as_view(decision="reject"),
        name="reject_request",
    ),
    path("api/request-admin", views.RequestAdminView.as_view(), name="request_admin"),
    path("api/admin-requests", views.AdminRequestListView.as_view(), name="admin_requests"),
    path(
        "api/admin-requests/<int:pk>/approve",
        views.AdminRequestDecisionView.as_view(decision="approve"),
        name="approve_admin_request",
    ),
    path(
        "api/admin-requests/<int:pk>/reject",
        views.AdminRequestDecisionView.as_view(decision="reject"),
        name="reject_admin_request",
    ),
    path("api/create-admin", views.CreateAdminView.as_view(), name="create_admin"),
    path("api/promote-to-admin", views.PromoteToAdminView.as_view(), name="promote_to_admin"),
    path("api/users/<int:pk>", views.UserDetailView.as_view(), name="user_detail"),
    path("api/users/<int:pk>/role", views.UserRoleView.as_view(), name="user_role"),
    path("api/users/<int:pk>/profile", views.UserProfileView.as_view(), name="user_profile"),
    path("api/company/users", views.CompanyUsersView.as_view(), name="company_users"),
    path("api/company/settings", views.CompanySettingsView.as_view(), name="company_settings"),
    path("register-form-api", views.DeprecatedEndpointView.as_view(), name="legacy_register"),
    path("login-form-api", views.DeprecatedEndpointView.as_view(), name="legacy_login"),
]
