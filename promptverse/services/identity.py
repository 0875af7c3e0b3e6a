# promptverse/services/identity.py
"""
Admin identity check, the first of the two admin gates (the PIN is the second).

Two strategies, chosen per deployment:
- LOCAL: username and password are hashed and compared against stored hashes
- DELEGATED: a Supabase access token is validated and its email must be on
  the admin allow-list
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Optional

from supabase import Client

from promptverse.app.domain.errors import InvalidCredentialsError, UnauthorizedIdentityError
from promptverse.services.errors import IdentityProviderError
from promptverse.services.security import matches_hash

logger = logging.getLogger(__name__)


class AuthStrategy(str, Enum):
    LOCAL = "local"
    DELEGATED = "delegated"


@dataclass
class Credentials:
    username: Optional[str] = None
    password: Optional[str] = None
    access_token: Optional[str] = None


class IdentityVerifier(ABC):
    strategy: AuthStrategy

    @abstractmethod
    def authenticate(self, credentials: Credentials) -> str:
        """
        Check the submitted credentials.

        Returns:
            A label for the authenticated admin identity

        Raises:
            InvalidCredentialsError: Wrong or missing credentials
            UnauthorizedIdentityError: Valid identity that is not an admin
            IdentityProviderError: The external provider failed
        """
        pass

    def sign_out(self, credentials: Credentials) -> None:
        return None


class LocalCredentialVerifier(IdentityVerifier):
    strategy = AuthStrategy.LOCAL

    def __init__(self, stored_hashes: Callable[[], tuple[str, str]]) -> None:
        self._stored_hashes = stored_hashes

    def authenticate(self, credentials: Credentials) -> str:
        username = credentials.username or ""
        password = credentials.password or ""
        user_hash, pass_hash = self._stored_hashes()

        # both comparisons always run; the error never says which field failed
        user_ok = matches_hash(username, user_hash)
        pass_ok = matches_hash(password, pass_hash)
        if not (username and password and user_ok and pass_ok):
            logger.warning("identity.local_rejected")
            raise InvalidCredentialsError()
        return username


class DelegatedIdentityVerifier(IdentityVerifier):
    strategy = AuthStrategy.DELEGATED

    def __init__(self, client_factory: Callable[[], Client], allowed_emails: Iterable[str]) -> None:
        self._client_factory = client_factory
        self._allowed = {email.strip().lower() for email in allowed_emails if email.strip()}

    def is_authorized(self, email: Optional[str]) -> bool:
        if not email:
            return False
        return email.strip().lower() in self._allowed

    def authenticate(self, credentials: Credentials) -> str:
        token = (credentials.access_token or "").strip()
        if not token:
            raise InvalidCredentialsError()

        try:
            res = self._client_factory().auth.get_user(token)
        except Exception as exc:
            logger.error("identity.provider_failed error=%s", exc)
            raise IdentityProviderError("Login failed. Please try again.") from exc

        user = getattr(res, "user", None)
        if not user:
            raise InvalidCredentialsError()

        email = getattr(user, "email", None)
        if not self.is_authorized(email):
            logger.warning("identity.delegated_denied email=%s", email)
            raise UnauthorizedIdentityError()
        return str(email)

    def sign_out(self, credentials: Credentials) -> None:
        token = (credentials.access_token or "").strip()
        if not token:
            return
        try:
            self._client_factory().auth.admin.sign_out(token)
        except Exception:
            logger.exception("identity.sign_out_failed")


def build_identity_verifier(
    strategy: AuthStrategy | str,
    *,
    stored_hashes: Callable[[], tuple[str, str]],
    client_factory: Callable[[], Client],
    allowed_emails: Iterable[str] = (),
) -> IdentityVerifier:
    if AuthStrategy(strategy) == AuthStrategy.DELEGATED:
        return DelegatedIdentityVerifier(client_factory, allowed_emails)
    return LocalCredentialVerifier(stored_hashes)
