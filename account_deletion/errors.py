"""Error categories surfaced by the account deletion workflow."""
from __future__ import annotations


class SupabaseError(RuntimeError):
    """A Supabase REST or auth call failed."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AccountDeletionError(RuntimeError):
    """Base for failures that end the request with a typed JSON error."""

    status_code = 500
    error = "Internal server error"

    def __init__(self, details: str | None = None) -> None:
        super().__init__(details or self.error)
        self.details = details

    def body(self) -> dict:
        payload = {"error": self.error}
        if self.details is not None:
            payload["details"] = self.details
        return payload


class MissingCredentialError(AccountDeletionError):
    status_code = 401
    error = "Missing authorization header"


class InvalidCredentialError(AccountDeletionError):
    status_code = 401
    error = "Invalid or expired token"


class IdentityDeletionError(AccountDeletionError):
    status_code = 500
    error = "Failed to delete user account"
