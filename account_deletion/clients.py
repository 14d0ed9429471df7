"""
Supabase handles for the two privilege levels the deletion flow needs.

Both wrap a supabase-py client built without session persistence or token
refresh. The underlying client is created on first use, so missing settings
fail at call time instead of at handler start.
"""
from __future__ import annotations

from supabase import Client, ClientOptions, create_client

from account_deletion.errors import SupabaseError


def _options() -> ClientOptions:
    return ClientOptions(auto_refresh_token=False, persist_session=False)


def _wrap(exc: Exception) -> SupabaseError:
    message = getattr(exc, "message", None) or str(exc) or exc.__class__.__name__
    status = getattr(exc, "status", None)
    return SupabaseError(str(message), status_code=status if isinstance(status, int) else None)


def bearer_token(authorization: str) -> str:
    """Strip the ``Bearer`` scheme from an authorization header value."""
    scheme, _, token = authorization.strip().partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return authorization.strip()


class _Handle:
    def __init__(self, url: str, key: str, *, client: Client | None = None) -> None:
        self.url = url
        self._key = key
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            try:
                self._client = create_client(self.url, self._key, options=_options())
            except Exception as exc:
                raise _wrap(exc) from exc
        return self._client


class AdminClient(_Handle):
    """Service-role handle. Bypasses row level security."""

    def delete_rows(self, table: str, column: str, value: str) -> None:
        """Delete every row of ``table`` where ``column`` equals ``value``."""
        client = self.client
        try:
            client.table(table).delete().eq(column, value).execute()
        except Exception as exc:
            raise _wrap(exc) from exc

    def delete_user(self, user_id: str) -> None:
        """Delete the auth user record for ``user_id``."""
        client = self.client
        try:
            client.auth.admin.delete_user(user_id)
        except Exception as exc:
            raise _wrap(exc) from exc


class CallerClient(_Handle):
    """Anon-key handle, used only to find out who is calling."""

    def get_user(self, authorization: str) -> dict:
        """
        Resolve the user behind ``authorization``.

        Only the token from the header is sent, never a stored session, so
        the check runs against exactly the credential the caller supplied.
        """
        client = self.client
        try:
            response = client.auth.get_user(bearer_token(authorization))
        except Exception as exc:
            raise _wrap(exc) from exc
        user = getattr(response, "user", None)
        if user is None:
            return {}
        return {"id": user.id, "email": getattr(user, "email", None)}
