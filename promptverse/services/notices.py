from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import Literal

NoticeLevel = Literal["success", "info", "error"]

log = logging.getLogger("notices")


@dataclass(frozen=True, slots=True)
class Notice:
    message: str
    level: NoticeLevel = "success"


class NoticeBoard:
    """Transient user-facing notifications raised by catalog mutations."""

    def __init__(self, max_pending: int = 50) -> None:
        self._pending: deque[Notice] = deque(maxlen=max_pending)

    def publish(self, message: str, level: NoticeLevel = "success") -> Notice:
        notice = Notice(message=message, level=level)
        self._pending.append(notice)
        log.info("notice.published level=%s message=%s", level, message)
        return notice

    def drain(self) -> list[Notice]:
        notices = list(self._pending)
        self._pending.clear()
        return notices

    def __len__(self) -> int:
        return len(self._pending)
