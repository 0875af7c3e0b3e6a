from __future__ import annotations

from typing import Optional


class CatalogError(Exception):
    pass


class CatalogValidationError(CatalogError):
    pass


class MissingFieldError(CatalogValidationError):
    def __init__(self, field: str, message: Optional[str] = None):
        super().__init__(message or f"Please enter a {field}.")
        self.field = field


class DuplicateCategoryError(CatalogValidationError):
    def __init__(self, category_id: str):
        super().__init__("Category already exists!")
        self.category_id = category_id


class ReservedCategoryError(CatalogValidationError):
    def __init__(self, category_id: str):
        super().__init__(f"Cannot delete the '{category_id}' category.")
        self.category_id = category_id


class InvalidPinFormatError(CatalogValidationError):
    def __init__(self, message: str = "PIN must be exactly 4 digits"):
        super().__init__(message)


class ImportFormatError(CatalogError):
    def __init__(self, reason: str = "Invalid File"):
        super().__init__(f"Import rejected: {reason}")
        self.reason = reason


class PersistenceError(CatalogError):
    pass


class StorageQuotaError(PersistenceError):
    def __init__(self, key: str, limit_bytes: int):
        super().__init__(f"Storage quota exceeded for {key} (limit {limit_bytes} bytes)")
        self.key = key
        self.limit_bytes = limit_bytes


class AuthenticationError(CatalogError):
    pass


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)


class UnauthorizedIdentityError(AuthenticationError):
    def __init__(self, message: str = "Access Denied: You are not authorized."):
        super().__init__(message)


class NotAuthenticatedError(AuthenticationError):
    def __init__(self, message: str = "Admin session required"):
        super().__init__(message)


class PinNotVerifiedError(AuthenticationError):
    def __init__(self, message: str = "PIN verification required"):
        super().__init__(message)


class PinLockedError(AuthenticationError):
    def __init__(self, seconds_remaining: int):
        super().__init__(f"System locked. Try again in {seconds_remaining}s")
        self.seconds_remaining = seconds_remaining
