"""
Delete the calling user's account: dependent rows first, then the auth user.

Dependent deletions are best effort. Each one is attempted regardless of how
the others went, and only the auth user deletion decides the response.
"""
from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Callable, Mapping

from account_deletion.clients import AdminClient, CallerClient
from account_deletion.config import Settings
from account_deletion.errors import (
    AccountDeletionError,
    IdentityDeletionError,
    InvalidCredentialError,
    MissingCredentialError,
)

LogFn = Callable[[str], None]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

# (collection, key column) in deletion order.
DEPENDENT_COLLECTIONS: tuple[tuple[str, str], ...] = (
    ("subscriptions", "user_id"),
    ("appointments", "user_id"),
    ("tasks", "user_id"),
    ("user_profile", "id"),
)


@dataclass(slots=True)
class DeletionOutcome:
    """How one dependent collection deletion went."""

    collection: str
    ok: bool
    error: str | None = None


@dataclass(slots=True)
class AccountDeletionResult:
    """Terminal response for one request, plus the dependent outcomes."""

    status_code: int
    body: dict | str
    outcomes: list[DeletionOutcome] = field(default_factory=list)
    user_id: str | None = None

    @classmethod
    def preflight(cls) -> "AccountDeletionResult":
        return cls(status_code=200, body="ok")

    @classmethod
    def from_error(cls, exc: AccountDeletionError, **kwargs) -> "AccountDeletionResult":
        return cls(status_code=exc.status_code, body=exc.body(), **kwargs)

    @classmethod
    def unexpected(cls, exc: Exception, **kwargs) -> "AccountDeletionResult":
        return cls(status_code=500, body={"error": "Internal server error", "details": str(exc)}, **kwargs)

    def to_lambda_response(self) -> dict:
        if isinstance(self.body, str):
            return {"statusCode": self.status_code, "headers": dict(CORS_HEADERS), "body": self.body}
        return {
            "statusCode": self.status_code,
            "headers": {**CORS_HEADERS, "Content-Type": "application/json"},
            "body": json.dumps(self.body),
        }


def _emit(log: LogFn | None, message: str) -> None:
    if log:
        log(message)


def get_header(headers: Mapping[str, str] | None, name: str) -> str | None:
    """Case-insensitive header lookup. Empty values count as absent."""
    target = name.lower()
    for key, value in (headers or {}).items():
        if key.lower() == target and value:
            return value
    return None


def get_method(event: Mapping) -> str:
    """Read the HTTP method from a function URL / HTTP API or REST API event."""
    http = (event.get("requestContext") or {}).get("http") or {}
    method = http.get("method") or event.get("httpMethod") or ""
    return method.upper()


def resolve_caller(authorization: str | None, caller: CallerClient, *, log: LogFn | None = print) -> str:
    """Return the id of the user behind ``authorization`` or raise a 401 error."""
    if not authorization:
        raise MissingCredentialError()

    try:
        user = caller.get_user(authorization)
    except Exception as exc:
        _emit(log, f"Error getting user: {exc}")
        _emit(log, "Auth header received: present")
        raise InvalidCredentialError(str(exc) or "Could not authenticate user") from exc

    user_id = (user or {}).get("id")
    if not user_id:
        _emit(log, "Error getting user: no user returned")
        _emit(log, "Auth header received: present")
        raise InvalidCredentialError("Could not authenticate user")
    return str(user_id)


def delete_dependent_records(
    user_id: str,
    admin: AdminClient,
    *,
    collections: tuple[tuple[str, str], ...] = DEPENDENT_COLLECTIONS,
    log: LogFn | None = print,
) -> list[DeletionOutcome]:
    """Delete the user's rows from every dependent collection, never raising."""
    outcomes: list[DeletionOutcome] = []
    for collection, column in collections:
        try:
            admin.delete_rows(collection, column, user_id)
        except Exception as exc:
            _emit(log, f"Error deleting {collection}: {exc}")
            outcomes.append(DeletionOutcome(collection=collection, ok=False, error=str(exc)))
        else:
            _emit(log, f"Deleted {collection} for user: {user_id}")
            outcomes.append(DeletionOutcome(collection=collection, ok=True))
    return outcomes


def delete_account(
    authorization: str | None,
    *,
    admin: AdminClient,
    caller: CallerClient,
    log: LogFn | None = print,
) -> AccountDeletionResult:
    """
    Run the deletion flow for the caller identified by ``authorization``.

    Always returns a result; typed failures and unexpected exceptions are
    turned into 401/500 responses.
    """
    outcomes: list[DeletionOutcome] = []
    user_id: str | None = None
    try:
        user_id = resolve_caller(authorization, caller, log=log)
        _emit(log, f"Attempting to delete account for user: {user_id}")

        outcomes = delete_dependent_records(user_id, admin, log=log)

        try:
            admin.delete_user(user_id)
        except Exception as exc:
            _emit(log, f"Error deleting user: {exc}")
            raise IdentityDeletionError(str(exc)) from exc

        _emit(log, f"Successfully deleted user account: {user_id}")
        return AccountDeletionResult(
            status_code=200,
            body={"message": "Account deleted successfully", "userId": user_id},
            outcomes=outcomes,
            user_id=user_id,
        )
    except AccountDeletionError as exc:
        return AccountDeletionResult.from_error(exc, outcomes=outcomes, user_id=user_id)
    except Exception as exc:
        _emit(log, f"Unexpected error: {exc}")
        return AccountDeletionResult.unexpected(exc, outcomes=outcomes, user_id=user_id)


def short_circuit(event: Mapping) -> AccountDeletionResult | None:
    """Answer requests that need no collaborator: preflight and missing credential."""
    if get_method(event) == "OPTIONS":
        return AccountDeletionResult.preflight()
    if not get_header(event.get("headers"), "authorization"):
        return AccountDeletionResult.from_error(MissingCredentialError())
    return None


def handle_event(
    event: Mapping,
    *,
    admin: AdminClient,
    caller: CallerClient,
    log: LogFn | None = print,
) -> AccountDeletionResult:
    """Dispatch one HTTP event: answer preflight, otherwise delete the account."""
    result = short_circuit(event)
    if result is not None:
        return result

    authorization = get_header(event.get("headers"), "authorization")
    return delete_account(authorization, admin=admin, caller=caller, log=log)


def summarize(result: AccountDeletionResult) -> str:
    """One JSON log line describing the request outcome."""
    return json.dumps(
        {
            "userId": result.user_id,
            "statusCode": result.status_code,
            "outcomes": [asdict(outcome) for outcome in result.outcomes],
        }
    )


def lambda_handler(event, context):
    """
    AWS Lambda entry point.
    """
    event = event or {}

    # Same gate handle_event applies, run first so these requests skip the
    # settings lookup and its SSM call.
    result = short_circuit(event)
    if result is not None:
        print(summarize(result))
        return result.to_lambda_response()

    try:
        settings = Settings.from_env()
    except Exception as e:
        print(f"Unexpected error: {e}")
        result = AccountDeletionResult.unexpected(e)
        print(summarize(result))
        return result.to_lambda_response()

    admin = AdminClient(settings.url, settings.service_role_key)
    caller = CallerClient(settings.url, settings.anon_key)

    result = handle_event(event, admin=admin, caller=caller)
    print(summarize(result))
    return result.to_lambda_response()


if __name__ == "__main__":
    # Simulated preflight event for local testing
    test_event = {
        "requestContext": {"http": {"method": "OPTIONS"}},
        "headers": {},
    }
    print(lambda_handler(test_event, None))
