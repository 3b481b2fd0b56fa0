"""
Error taxonomy for the Echo Brain system.

Quota and entitlement errors are user facing and always carry a specific
code. Synthesis errors surface generative-service failures during answer
composition, which has no local fallback.
"""
from typing import Optional

from echo_brain.domains.enums import EntitlementCode, QuotaKind


class EchoError(Exception):
    """Base class for all Echo Brain errors."""

    code = "ECHO_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class InputError(EchoError):
    """Raised when submitted content is malformed or cannot be encoded."""

    code = "INPUT_ERROR"


class UserNotFoundError(EchoError):
    """Raised when an owner id has no user record."""

    code = "USER_NOT_FOUND"

    def __init__(self, user_id: str):
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class EntitlementError(EchoError):
    """Raised when a feature or resource is denied by the user's tier."""

    def __init__(self, message: str, code: EntitlementCode):
        super().__init__(message)
        self.code = code.value if isinstance(code, EntitlementCode) else code


_QUOTA_CODES = {
    QuotaKind.MONTHLY_INGEST: EntitlementCode.MONTHLY_INGEST_LIMIT_EXCEEDED,
    QuotaKind.MEMORY_COUNT: EntitlementCode.MEMORY_LIMIT_EXCEEDED,
    QuotaKind.FILE_SIZE: EntitlementCode.FILE_SIZE_EXCEEDED,
}


class QuotaExceeded(EntitlementError):
    """Raised when an ingest request hits a tier ceiling."""

    def __init__(self, message: str, kind: QuotaKind):
        kind = QuotaKind(kind)
        super().__init__(message, _QUOTA_CODES[kind])
        self.kind = kind


class SynthesisError(EchoError):
    """Raised when the generative service fails while composing an answer."""

    code = "SYNTHESIS_ERROR"

    def __init__(self, cause: str, message: Optional[str] = None):
        super().__init__(message or f"Answer synthesis failed: {cause}")
        self.cause = cause
