# promptverse/services/pin_guard.py
"""
4-digit PIN gate with escalating, persisted lockouts.

The failure streak and the lockout expiry are stored under their own key so
a restart neither forgets failures nor shortens a running lockout. Only a
correct PIN clears the streak; an expiring lockout just unlocks input.
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Callable, Optional

from pydantic import ValidationError

from promptverse.app.domain.errors import InvalidPinFormatError, PersistenceError, PinLockedError
from promptverse.app.domain.models import LockoutRecord
from promptverse.app.infra.storage.base import KeyValueStore
from promptverse.services.clock import Clock, now_ms
from promptverse.services.security import matches_hash

logger = logging.getLogger(__name__)

LOCKOUT_KEY = "promptverse_lockout_v1"
PIN_LENGTH = 4
# indexed by failures recorded before the current attempt
LOCKOUT_SCHEDULE_SECONDS = (5, 10, 3600)

_DIGITS = frozenset("0123456789")


class PinState(str, Enum):
    IDLE = "idle"
    EVALUATING = "evaluating"
    SUCCESS = "success"
    FAILURE = "failure"
    LOCKED = "locked"


def lockout_seconds(previous_failures: int) -> int:
    index = min(max(previous_failures, 0), len(LOCKOUT_SCHEDULE_SECONDS) - 1)
    return LOCKOUT_SCHEDULE_SECONDS[index]


class LockoutStore:
    def __init__(self, store: KeyValueStore, key: str = LOCKOUT_KEY) -> None:
        self._store = store
        self.key = key

    def load(self) -> LockoutRecord:
        try:
            raw = self._store.get(self.key)
        except PersistenceError:
            logger.exception("lockout.load_failed key=%s", self.key)
            return LockoutRecord()
        if not raw:
            return LockoutRecord()
        try:
            return LockoutRecord.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            logger.error("lockout.load_malformed key=%s", self.key)
            return LockoutRecord()

    def save(self, record: LockoutRecord) -> None:
        try:
            self._store.set(self.key, record.model_dump_json())
        except PersistenceError:
            logger.exception("lockout.save_failed key=%s", self.key)

    def reset(self) -> None:
        try:
            self._store.delete(self.key)
        except PersistenceError:
            logger.exception("lockout.reset_failed key=%s", self.key)


class PinGuard:
    """
    PIN entry state machine for one admin session.

    States: IDLE (accepting digits), EVALUATING (4th digit in), SUCCESS,
    FAILURE (momentary) and LOCKED (input rejected until the stored expiry).
    """

    def __init__(
        self,
        lockout: LockoutStore,
        expected_hash: Callable[[], str],
        clock: Clock = now_ms,
        on_success: Optional[Callable[[], None]] = None,
    ) -> None:
        self._lockout = lockout
        self._expected_hash = expected_hash
        self._clock = clock
        self._on_success = on_success
        self._digits = ""
        self.state = PinState.IDLE
        self.tick()

    @property
    def digits_entered(self) -> int:
        return len(self._digits)

    @property
    def verified(self) -> bool:
        return self.state == PinState.SUCCESS

    @property
    def failed_attempts(self) -> int:
        return self._lockout.load().failedAttempts

    def seconds_remaining(self) -> int:
        lock_until = self._lockout.load().lockUntil
        if lock_until is None:
            return 0
        remaining_ms = lock_until - self._clock()
        if remaining_ms <= 0:
            return 0
        return -(-remaining_ms // 1000)

    def tick(self) -> PinState:
        """Re-check the persisted lockout; safe to call any number of times."""
        if self.state == PinState.SUCCESS:
            return self.state

        record = self._lockout.load()
        if record.lockUntil is None:
            if self.state == PinState.LOCKED:
                self._digits = ""
                self.state = PinState.IDLE
            return self.state

        if self._clock() < record.lockUntil:
            self._digits = ""
            self.state = PinState.LOCKED
            return self.state

        self._lockout.save(record.model_copy(update={"lockUntil": None}))
        self._digits = ""
        self.state = PinState.IDLE
        logger.info("pin.unlocked failed_attempts=%d", record.failedAttempts)
        return self.state

    def press(self, digit: str) -> PinState:
        if len(digit) != 1 or digit not in _DIGITS:
            raise InvalidPinFormatError("PIN digits must be 0-9")

        self.tick()
        if self.state == PinState.LOCKED:
            raise PinLockedError(self.seconds_remaining())
        if self.state == PinState.SUCCESS or len(self._digits) >= PIN_LENGTH:
            return self.state

        self._digits += digit
        if len(self._digits) == PIN_LENGTH:
            return self._evaluate()
        return self.state

    def delete(self) -> PinState:
        self.tick()
        if self.state in (PinState.LOCKED, PinState.SUCCESS):
            return self.state
        self._digits = self._digits[:-1]
        return self.state

    def reset(self) -> None:
        """Forget this session's buffer and verification (logout)."""
        self._digits = ""
        self.state = PinState.IDLE
        self.tick()

    def _evaluate(self) -> PinState:
        self.state = PinState.EVALUATING
        entered, self._digits = self._digits, ""

        if matches_hash(entered, self._expected_hash()):
            self._lockout.reset()
            self.state = PinState.SUCCESS
            logger.info("pin.verified")
            if self._on_success is not None:
                self._on_success()
            return self.state

        record = self._lockout.load()
        duration = lockout_seconds(record.failedAttempts)
        self.state = PinState.FAILURE
        self._lockout.save(
            LockoutRecord(
                failedAttempts=record.failedAttempts + 1,
                lockUntil=self._clock() + duration * 1000,
            )
        )
        logger.warning(
            "pin.rejected failed_attempts=%d locked_seconds=%d",
            record.failedAttempts + 1,
            duration,
        )
        self.state = PinState.LOCKED
        return self.state
