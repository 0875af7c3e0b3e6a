# promptverse/app/context.py
"""
Application context: explicit state created at startup and passed to the
routers through FastAPI dependencies.

Admin sessions are ephemeral (process memory only). A session exists once
the identity check succeeded; its PinGuard tracks the second gate. A session
expires after SESSION_TTL_SECONDS without an authenticated request, and at
most MAX_ADMIN_SESSIONS are kept (the oldest is dropped first).
"""
from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from supabase import Client

from promptverse.app.config import Settings
from promptverse.app.domain.errors import NotAuthenticatedError, PinNotVerifiedError
from promptverse.app.infra.storage.base import KeyValueStore
from promptverse.app.infra.storage.file_store import FileKeyValueStore
from promptverse.services.catalog import CatalogService
from promptverse.services.clock import Clock, now_ms
from promptverse.services.identity import Credentials, IdentityVerifier, build_identity_verifier
from promptverse.services.persistence import PersistenceGateway
from promptverse.services.pin_guard import LockoutStore, PinGuard, PinState

logger = logging.getLogger(__name__)


@dataclass
class AdminSession:
    token: str
    identity: str
    guard: PinGuard
    credentials: Credentials
    expires_at: int = 0  # epoch ms, pushed forward on every authenticated request

    @property
    def pin_verified(self) -> bool:
        return self.guard.verified


class AppContext:
    def __init__(
        self,
        settings: Settings,
        *,
        store: Optional[KeyValueStore] = None,
        clock: Clock = now_ms,
        identity: Optional[IdentityVerifier] = None,
        client_factory: Optional[Callable[[], Client]] = None,
    ) -> None:
        self.settings = settings
        self.clock = clock
        self.store = store or FileKeyValueStore(
            Path(settings.STORE_DIR), max_value_bytes=settings.STORE_MAX_BYTES
        )
        self.catalog = CatalogService(
            PersistenceGateway(self.store, key=settings.STORAGE_KEY),
            clock=clock,
            media_base_url=settings.MEDIA_BASE_URL,
            retention_hours=settings.MESSAGE_RETENTION_HOURS,
        )
        self.lockout = LockoutStore(self.store, key=settings.LOCKOUT_KEY)
        self.identity = identity or build_identity_verifier(
            settings.AUTH_STRATEGY,
            stored_hashes=self.catalog.credential_hashes,
            client_factory=client_factory or _supabase_client,
            allowed_emails=settings.ADMIN_EMAILS,
        )
        self.session_ttl_ms = int(settings.SESSION_TTL_SECONDS * 1000)
        self.max_sessions = settings.MAX_ADMIN_SESSIONS
        # insertion order doubles as age order for eviction
        self._sessions: dict[str, AdminSession] = {}
        self._sessions_lock = threading.Lock()

    # ----- sessions -----

    def login(self, credentials: Credentials) -> AdminSession:
        identity = self.identity.authenticate(credentials)
        token = secrets.token_urlsafe(32)
        guard = PinGuard(
            self.lockout,
            self.catalog.pin_hash,
            clock=self.clock,
            on_success=lambda: logger.info("session.pin_verified identity=%s", identity),
        )
        # only the provider token is kept, never a password
        session = AdminSession(
            token=token,
            identity=identity,
            guard=guard,
            credentials=Credentials(access_token=credentials.access_token),
            expires_at=self.clock() + self.session_ttl_ms,
        )
        with self._sessions_lock:
            self._evict_expired()
            while len(self._sessions) >= self.max_sessions:
                oldest = next(iter(self._sessions))
                self._sessions.pop(oldest)
                logger.info("session.evicted reason=capacity")
            self._sessions[token] = session
        self.catalog.notices.publish("Welcome Admin")
        logger.info("session.opened strategy=%s", self.identity.strategy.value)
        return session

    def logout(self, token: str) -> None:
        with self._sessions_lock:
            session = self._sessions.pop(token, None)
        if session is None:
            return
        session.guard.reset()
        self.identity.sign_out(session.credentials)
        self.catalog.notices.publish("Logged out successfully", "info")
        logger.info("session.closed")

    def session(self, token: Optional[str]) -> AdminSession:
        now = self.clock()
        with self._sessions_lock:
            session = self._sessions.get(token or "")
            if session is not None and now >= session.expires_at:
                self._sessions.pop(session.token, None)
                logger.info("session.expired")
                session = None
            if session is None:
                raise NotAuthenticatedError()
            session.expires_at = now + self.session_ttl_ms
        return session

    def admin_session(self, token: Optional[str]) -> AdminSession:
        session = self.session(token)
        if not session.pin_verified:
            raise PinNotVerifiedError()
        return session

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def _evict_expired(self) -> int:
        now = self.clock()
        expired = [token for token, s in self._sessions.items() if now >= s.expires_at]
        for token in expired:
            del self._sessions[token]
        if expired:
            logger.info("session.expired count=%d", len(expired))
        return len(expired)

    # ----- timers -----

    def refresh_lockouts(self) -> None:
        """Drop idle sessions, then let locked guards notice an expired lockout."""
        with self._sessions_lock:
            self._evict_expired()
            locked = [s.guard for s in self._sessions.values() if s.guard.state == PinState.LOCKED]
        for guard in locked:
            guard.tick()

    def sweep_messages(self) -> int:
        return self.catalog.sweep_messages()


def _supabase_client() -> Client:
    from promptverse.app.deps import get_supabase

    return get_supabase()
