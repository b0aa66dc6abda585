"""Identity provider adapter: accounts live in django.contrib.auth, tokens are JWTs."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from django.conf import settings
from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction

from .exceptions import Conflict, Internal, Unauthenticated

logger = logging.getLogger(__name__)

User = get_user_model()


@dataclass(frozen=True)
class IdentityClaims:
    """What a verified bearer token says about its holder."""

    uid: int
    email: str


class IdentityProvider:
    """Creates, checks and removes accounts and signs the bearer tokens for them."""

    def __init__(self, secret: str, algorithm: str = "HS256", ttl_seconds: int = 7 * 24 * 60 * 60) -> None:
        self.secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(seconds=ttl_seconds)

    @classmethod
    def from_settings(cls) -> "IdentityProvider":
        return cls(
            secret=settings.OFFICEFLOW_TOKEN_SECRET,
            algorithm=getattr(settings, "OFFICEFLOW_TOKEN_ALGORITHM", "HS256"),
            ttl_seconds=getattr(settings, "OFFICEFLOW_TOKEN_TTL_SECONDS", 7 * 24 * 60 * 60),
        )

    def create_account(self, email: str, password: str, display_name: str = "") -> User:
        email = email.strip().lower()
        if User.objects.filter(username=email).exists():
            raise Conflict("Email already exists")
        first_name, _, last_name = display_name.strip().partition(" ")
        try:
            with transaction.atomic():
                account = User.objects.create_user(
                    username=email,
                    email=email,
                    password=password,
                    first_name=first_name[:150],
                    last_name=last_name[:150],
                )
        except IntegrityError as exc:
            raise Conflict("Email already exists") from exc
        logger.info("Created identity account %s", account.pk)
        return account

    def sign_in(self, email: str, password: str) -> User:
        account = User.objects.filter(username=email.strip().lower()).first()
        if account is None or not account.is_active or not account.check_password(password):
            raise Unauthenticated("Invalid email or password")
        return account

    def delete_account(self, uid: int) -> None:
        deleted, _ = User.objects.filter(pk=uid).delete()
        if not deleted:
            raise Internal(f"Identity account {uid} could not be deleted")
        logger.info("Deleted identity account %s", uid)

    def issue_token(self, account: User, now: Optional[datetime] = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        claims = {
            "sub": str(account.pk),
            "email": account.email,
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify_token(self, token: str) -> IdentityClaims:
        try:
            claims = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": ["sub", "exp"]},
            )
        except jwt.PyJWTError as exc:
            raise Unauthenticated("Invalid or expired token") from exc

        try:
            uid = int(claims["sub"])
        except (TypeError, ValueError) as exc:
            raise Unauthenticated("Invalid or expired token") from exc

        account = User.objects.filter(pk=uid, is_active=True).first()
        if account is None:
            raise Unauthenticated("Invalid or expired token")
        return IdentityClaims(uid=account.pk, email=account.email)
