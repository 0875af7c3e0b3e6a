# promptverse/services/ids.py
import logging
import re
import secrets
import time
import uuid

logger = logging.getLogger(__name__)

_WHITESPACE_RE = re.compile(r"\s+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits: list[str] = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def fallback_id() -> str:
    """Timestamp em base 36 + sufixo aleatório; único na prática, não criptográfico."""
    stamp = _to_base36(int(time.time() * 1000))
    suffix = "".join(secrets.choice(_BASE36) for _ in range(11))
    return stamp + suffix


def generate_id() -> str:
    try:
        return str(uuid.uuid4())
    except (NotImplementedError, OSError):
        logger.warning("ids.random_source_unavailable using timestamp fallback")
        return fallback_id()


def category_id_from_name(name: str) -> str:
    """Ex.: "Concept Art" -> "concept-art"."""
    return _WHITESPACE_RE.sub("-", name.lower())
