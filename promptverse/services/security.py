# promptverse/services/security.py
import hashlib
import hmac


def hash_value(value: str) -> str:
    """SHA-256 hex digest of the UTF-8 text; "admin123" -> "240be518..."."""
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def matches_hash(value: str, expected_hash: str) -> bool:
    """Compara o hash do valor com o esperado em tempo constante."""
    return hmac.compare_digest(hash_value(value), (expected_hash or "").lower())
