"""Bearer credential verification and role checks."""
from __future__ import annotations

from django.http import HttpRequest

from .exceptions import Forbidden, PrincipalNotFound, Unauthenticated
from .identity import IdentityClaims, IdentityProvider
from .models import Member


def bearer_token(request: HttpRequest) -> str:
    header = request.META.get("HTTP_AUTHORIZATION", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthenticated("Access token required")
    return token.strip()


def authenticate_identity(request: HttpRequest, provider: IdentityProvider | None = None) -> IdentityClaims:
    """Verify the bearer token only; used before a directory record exists."""
    provider = provider or IdentityProvider.from_settings()
    claims = provider.verify_token(bearer_token(request))
    request.identity = claims
    return claims


def authenticate_principal(request: HttpRequest, provider: IdentityProvider | None = None) -> Member:
    """Verify the bearer token and load the caller's directory record."""
    claims = authenticate_identity(request, provider)
    member = Member.objects.select_related("company").filter(pk=claims.uid).first()
    if member is None:
        raise PrincipalNotFound("User not found")
    request.principal = member
    return member


def require_admin(member: Member) -> None:
    if not member.is_admin:
        raise Forbidden("Admin access required")


def require_superadmin(member: Member) -> None:
    if not member.is_superadmin:
        raise Forbidden("Super admin access required")


def require_same_company(member: Member, company_id: int) -> None:
    if member.company_id != company_id:
        raise Forbidden("Unauthorized")


def require_self_or_superadmin(member: Member, target: Member) -> None:
    if member.pk == target.pk:
        return
    if member.is_superadmin and member.company_id == target.company_id:
        return
    raise Forbidden("Unauthorized")


def require_self_or_admin(member: Member, target: Member) -> None:
    if member.pk == target.pk:
        return
    if member.is_admin and member.company_id == target.company_id:
        return
    raise Forbidden("Unauthorized")
