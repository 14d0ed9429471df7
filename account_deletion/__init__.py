"""Delete a Supabase user's account and dependent rows from a Lambda."""
from __future__ import annotations

from account_deletion.clients import AdminClient, CallerClient
from account_deletion.config import Settings
from account_deletion.delete_function import (
    AccountDeletionResult,
    DeletionOutcome,
    delete_account,
    handle_event,
    lambda_handler,
)

__all__ = [
    "AccountDeletionResult",
    "AdminClient",
    "CallerClient",
    "DeletionOutcome",
    "Settings",
    "delete_account",
    "handle_event",
    "lambda_handler",
]
