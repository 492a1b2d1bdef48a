"""Error hierarchy shared by the domain model and the application services."""

from __future__ import annotations

from typing import Optional


class AppError(Exception):
    """Base class for every error raised by the application layer."""

    message = "application error"

    def __init__(self, detail: Optional[str] = None) -> None:
        self.detail = detail
        super().__init__(*(() if detail is None else (detail,)))

    def __str__(self) -> str:
        if self.detail is None:
            return self.message
        return f"{self.message}: {self.detail}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, AppError):
            return NotImplemented
        return type(self) is type(other) and self.detail == other.detail

    def __hash__(self) -> int:
        return hash((type(self), self.detail))


class InternalError(AppError):
    message = "internal error"


class DomainError(AppError):
    """A violated domain rule or a failed domain operation."""

    message = "domain error"


class InvalidStateTransition(DomainError):
    message = "invalid state transition"


class SessionExpired(DomainError):
    message = "pairing session has expired"


class InvalidPinCode(DomainError):
    message = "PIN code does not match"


class BusinessRuleViolation(DomainError):
    message = "business rule violation"


class DeviceNotFound(DomainError):
    message = "device not found"


class DeviceNotTrusted(DomainError):
    message = "device not trusted"


class ShareNotFound(DomainError):
    message = "share not found"


class TransferNotFound(DomainError):
    message = "transfer not found"


class PermissionDenied(DomainError):
    message = "permission denied"


class VersionConflict(DomainError):
    message = "version conflict"


class IntegrityError(DomainError):
    message = "integrity error"


class NotFound(DomainError):
    message = "not found"


class PersistenceError(DomainError):
    message = "persistence error"


class NetworkError(DomainError):
    message = "network error"


class SecurityError(DomainError):
    message = "security error"


class FileSystemError(DomainError):
    message = "file system error"


class NonceReplay(DomainError):
    message = "nonce replay detected"


class TimestampOutOfWindow(DomainError):
    message = "timestamp out of window"