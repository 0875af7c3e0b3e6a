from __future__ import annotations

from types import SimpleNamespace

import pytest

from promptverse.app.domain.defaults import DEFAULT_PASS_HASH, DEFAULT_USER_HASH
from promptverse.app.domain.errors import InvalidCredentialsError, UnauthorizedIdentityError
from promptverse.services.errors import IdentityProviderError
from promptverse.services.identity import (
    AuthStrategy,
    Credentials,
    DelegatedIdentityVerifier,
    LocalCredentialVerifier,
    build_identity_verifier,
)


class AuthAdminStub:
    def __init__(self) -> None:
        self.signed_out: list[str] = []
        self.fail = False

    def sign_out(self, token: str) -> None:
        if self.fail:
            raise RuntimeError("provider down")
        self.signed_out.append(token)


class AuthStub:
    def __init__(self) -> None:
        self.email: str | None = "Owner@Example.com"
        self.error: Exception | None = None
        self.tokens: list[str] = []
        self.admin = AuthAdminStub()

    def get_user(self, token: str):
        self.tokens.append(token)
        if self.error is not None:
            raise self.error
        if self.email is None:
            return SimpleNamespace(user=None)
        return SimpleNamespace(user=SimpleNamespace(email=self.email))


class SupabaseStub:
    def __init__(self) -> None:
        self.auth = AuthStub()


def _local() -> LocalCredentialVerifier:
    return LocalCredentialVerifier(lambda: (DEFAULT_USER_HASH, DEFAULT_PASS_HASH))


def _delegated(client: SupabaseStub) -> DelegatedIdentityVerifier:
    return DelegatedIdentityVerifier(lambda: client, ["owner@example.com", " second@example.com "])


class TestLocalCredentialVerifier:
    def test_default_credentials(self) -> None:
        assert _local().authenticate(Credentials(username="admin", password="admin123")) == "admin"

    @pytest.mark.parametrize(
        "username,password",
        [("admin", "wrong"), ("root", "admin123"), ("", ""), (None, None), ("Admin", "admin123")],
    )
    def test_rejects_with_generic_error(self, username, password) -> None:
        with pytest.raises(InvalidCredentialsError) as excinfo:
            _local().authenticate(Credentials(username=username, password=password))
        assert str(excinfo.value) == "Invalid credentials"

    def test_reads_current_hashes(self) -> None:
        hashes = [(DEFAULT_USER_HASH, DEFAULT_PASS_HASH)]
        verifier = LocalCredentialVerifier(lambda: hashes[0])
        hashes[0] = (DEFAULT_USER_HASH.upper(), DEFAULT_PASS_HASH.upper())
        assert verifier.authenticate(Credentials(username="admin", password="admin123")) == "admin"


class TestDelegatedIdentityVerifier:
    def test_allowed_email_case_insensitive(self) -> None:
        client = SupabaseStub()
        identity = _delegated(client).authenticate(Credentials(access_token=" tok "))
        assert identity == "Owner@Example.com"
        assert client.auth.tokens == ["tok"]

    def test_email_not_on_list(self) -> None:
        client = SupabaseStub()
        client.auth.email = "intruder@example.com"
        with pytest.raises(UnauthorizedIdentityError) as excinfo:
            _delegated(client).authenticate(Credentials(access_token="tok"))
        assert "not authorized" in str(excinfo.value)

    def test_missing_user(self) -> None:
        client = SupabaseStub()
        client.auth.email = None
        with pytest.raises(InvalidCredentialsError):
            _delegated(client).authenticate(Credentials(access_token="tok"))

    def test_missing_token_skips_provider(self) -> None:
        client = SupabaseStub()
        with pytest.raises(InvalidCredentialsError):
            _delegated(client).authenticate(Credentials(username="admin", password="admin123"))
        assert client.auth.tokens == []

    def test_provider_failure(self) -> None:
        client = SupabaseStub()
        client.auth.error = RuntimeError("timeout")
        with pytest.raises(IdentityProviderError) as excinfo:
            _delegated(client).authenticate(Credentials(access_token="tok"))
        assert str(excinfo.value) == "Login failed. Please try again."

    def test_is_authorized(self) -> None:
        verifier = _delegated(SupabaseStub())
        assert verifier.is_authorized("SECOND@example.com")
        assert not verifier.is_authorized(None)
        assert not verifier.is_authorized("")

    def test_sign_out(self) -> None:
        client = SupabaseStub()
        _delegated(client).sign_out(Credentials(access_token="tok"))
        assert client.auth.admin.signed_out == ["tok"]

    def test_sign_out_failure_is_logged_only(self) -> None:
        client = SupabaseStub()
        client.auth.admin.fail = True
        _delegated(client).sign_out(Credentials(access_token="tok"))
        assert client.auth.admin.signed_out == []


class TestBuildIdentityVerifier:
    def test_local(self) -> None:
        verifier = build_identity_verifier(
            "local", stored_hashes=lambda: ("", ""), client_factory=SupabaseStub
        )
        assert verifier.strategy is AuthStrategy.LOCAL

    def test_delegated(self) -> None:
        verifier = build_identity_verifier(
            AuthStrategy.DELEGATED,
            stored_hashes=lambda: ("", ""),
            client_factory=SupabaseStub,
            allowed_emails=["a@b.c"],
        )
        assert isinstance(verifier, DelegatedIdentityVerifier)

    def test_unknown_strategy(self) -> None:
        with pytest.raises(ValueError):
            build_identity_verifier("oauth", stored_hashes=lambda: ("", ""), client_factory=SupabaseStub)
