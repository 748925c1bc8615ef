"""
Async client for the hosted backend's auth and table REST APIs.
"""
import asyncio
import json
import logging
import time
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import aiohttp

logger = logging.getLogger(__name__)

Filter = Tuple[str, str, Any]  # (column, operator, value), e.g. ("id", "eq", 3)
AuthCallback = Callable[[str, Optional[Dict[str, Any]]], Any]

SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"

# Refresh the access token this many seconds before it expires
EXPIRY_MARGIN = 60


class BackendError(Exception):
    """Raised when the backend rejects a request or cannot be reached."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status

    def __str__(self) -> str:
        return self.message


class AuthSubscription:
    """Handle returned by ``on_auth_state_change``."""

    def __init__(self, client: "BackendClient", callback: AuthCallback):
        self._client = client
        self.callback = callback

    def unsubscribe(self) -> None:
        self._client._remove_listener(self.callback)


class BackendClient:
    """
    Thin wrapper over the backend's auth (``/auth/v1``) and table
    (``/rest/v1``) endpoints.

    Every method raises BackendError on failure; callers convert it into a
    result envelope at their boundary. Use as an async context manager, or
    call ``close()`` when done.
    """

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 5.0,
        clock: Callable[[], float] = time.time
    ):
        """
        Args:
            url: Base URL of the backend project
            anon_key: Public API key sent with every request
            timeout: Total request timeout in seconds
            clock: Wall-clock time source in epoch seconds, used for token expiry
        """
        if not url:
            raise ValueError("Backend URL is required")
        if not anon_key:
            raise ValueError("Backend API key is required")

        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self._clock = clock
        self._http: Optional[aiohttp.ClientSession] = None
        self._session: Optional[Dict[str, Any]] = None
        self._listeners: List[AuthCallback] = []

    async def __aenter__(self) -> "BackendClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def close(self) -> None:
        if self._http is not None and not self._http.closed:
            await self._http.close()
        self._http = None

    def _get_http(self) -> aiohttp.ClientSession:
        if self._http is None or self._http.closed:
            self._http = aiohttp.ClientSession(timeout=aiohttp.ClientTimeout(total=self.timeout))
        return self._http

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        token = self._session["access_token"] if self._session else self.anon_key
        headers = {
            "apikey": self.anon_key,
            "Authorization": f"Bearer {token}",
        }
        if extra:
            headers.update(extra)
        return headers

    @staticmethod
    def _error_message(data: Any, status: int) -> str:
        if isinstance(data, dict):
            for key in ("message", "msg", "error_description", "error"):
                if data.get(key):
                    return str(data[key])
        return f"Request failed with status {status}"

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: Optional[List[Tuple[str, str]]] = None,
        payload: Any = None,
        headers: Optional[Dict[str, str]] = None,
        refresh: bool = True
    ) -> Any:
        if refresh and self._session_expiring():
            await self.refresh_session()

        http = self._get_http()
        try:
            async with http.request(
                method,
                f"{self.url}{path}",
                params=params,
                json=payload,
                headers=self._headers(headers)
            ) as response:
                text = await response.text()
                try:
                    data = json.loads(text) if text else None
                except ValueError:
                    data = None
                if response.status >= 400:
                    raise BackendError(self._error_message(data, response.status), response.status)
                return data
        except aiohttp.ClientError as e:
            raise BackendError(f"Network error: {e}") from e
        except asyncio.TimeoutError as e:
            raise BackendError(f"Request timed out after {self.timeout}s") from e

    # ---- auth ---------------------------------------------------------------

    async def sign_in_with_password(self, email: str, password: str) -> Dict[str, Any]:
        """Sign in and keep the returned session. Returns the session dict."""
        data = await self._request(
            "POST",
            "/auth/v1/token",
            params=[("grant_type", "password")],
            payload={"email": email, "password": password},
            refresh=False
        )
        if not isinstance(data, dict) or "access_token" not in data:
            raise BackendError("Malformed sign-in response")
        self._set_session(self._with_expiry(data), SIGNED_IN)
        return self._session

    async def refresh_session(self) -> Dict[str, Any]:
        """
        Exchange the refresh token for a new access token.

        Raises:
            BackendError: If there is no session to refresh or the backend rejects it
        """
        if self._session is None or not self._session.get("refresh_token"):
            raise BackendError("Auth session missing!")

        data = await self._request(
            "POST",
            "/auth/v1/token",
            params=[("grant_type", "refresh_token")],
            payload={"refresh_token": self._session["refresh_token"]},
            refresh=False
        )
        if not isinstance(data, dict) or "access_token" not in data:
            raise BackendError("Malformed refresh response")
        self._set_session(self._with_expiry(data), TOKEN_REFRESHED)
        logger.info("Access token refreshed")
        return self._session

    def _with_expiry(self, session: Dict[str, Any]) -> Dict[str, Any]:
        """Fill in ``expires_at`` from ``expires_in`` when the backend only sends the latter."""
        if session.get("expires_at") is None and session.get("expires_in") is not None:
            session = dict(session, expires_at=self._clock() + session["expires_in"])
        return session

    def _session_expiring(self) -> bool:
        if self._session is None or not self._session.get("refresh_token"):
            return False
        expires_at = self._session.get("expires_at")
        if expires_at is None:
            return False
        return self._clock() >= expires_at - EXPIRY_MARGIN

    async def sign_up(self, email: str, password: str, metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Register a new user.

        Returns:
            The created user. When the backend also returns a session (no
            email confirmation required) it is kept as the current session.
        """
        data = await self._request(
            "POST",
            "/auth/v1/signup",
            payload={"email": email, "password": password, "data": metadata or {}},
            refresh=False
        )
        if not isinstance(data, dict):
            raise BackendError("Malformed sign-up response")
        if "access_token" in data:
            self._set_session(self._with_expiry(data), SIGNED_IN)
            return data.get("user") or {}
        return data.get("user", data)

    async def sign_out(self) -> None:
        """
        Revoke the session on the backend and drop it locally.

        The local session is cleared and SIGNED_OUT is emitted even when the
        backend rejects the logout; the error is raised afterwards.
        """
        try:
            if self._session is not None:
                await self._request("POST", "/auth/v1/logout", refresh=False)
        finally:
            self._set_session(None, SIGNED_OUT)

    async def get_user(self) -> Dict[str, Any]:
        if self._session is None:
            raise BackendError("Auth session missing!")
        data = await self._request("GET", "/auth/v1/user")
        if not isinstance(data, dict):
            raise BackendError("Malformed user response")
        return data

    async def get_session(self) -> Optional[Dict[str, Any]]:
        return self._session

    def on_auth_state_change(self, callback: AuthCallback) -> AuthSubscription:
        self._listeners.append(callback)
        return AuthSubscription(self, callback)

    def _remove_listener(self, callback: AuthCallback) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def _set_session(self, session: Optional[Dict[str, Any]], event: str) -> None:
        self._session = session
        for callback in list(self._listeners):
            callback(event, session)

    async def validate_connection(self) -> bool:
        """Check that the auth service answers."""
        try:
            await self._request("GET", "/auth/v1/health")
            logger.info("Backend connection successful")
            return True
        except BackendError as e:
            logger.error(f"Backend connection error: {e}")
            return False

    # ---- tables -------------------------------------------------------------

    @staticmethod
    def _filter_params(filters: Optional[Sequence[Filter]]) -> List[Tuple[str, str]]:
        params = []
        for column, operator, value in filters or ():
            if isinstance(value, bool):
                value = "true" if value else "false"
            params.append((column, f"{operator}.{value}"))
        return params

    async def select(
        self,
        table: str,
        columns: str = "*",
        filters: Optional[Sequence[Filter]] = None,
        order: Optional[Tuple[str, bool]] = None,
        limit: Optional[int] = None,
        single: bool = False
    ) -> Any:
        """
        Read rows from a table.

        Args:
            table: Table name
            columns: Comma-separated column list
            filters: (column, operator, value) triples, all must match
            order: (column, ascending) pair
            limit: Maximum number of rows
            single: Expect exactly one row and return it as a dict

        Returns:
            List of row dicts, or one row dict when ``single`` is set
        """
        params = [("select", columns)]
        params.extend(self._filter_params(filters))
        if order is not None:
            column, ascending = order
            params.append(("order", f"{column}.{'asc' if ascending else 'desc'}"))
        if limit is not None:
            params.append(("limit", str(limit)))

        headers = {"Accept": "application/vnd.pgrst.object+json"} if single else None
        data = await self._request("GET", f"/rest/v1/{table}", params=params, headers=headers)
        if data is None:
            return {} if single else []
        return data

    async def insert(self, table: str, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Insert rows and return them as stored."""
        data = await self._request(
            "POST",
            f"/rest/v1/{table}",
            payload=rows,
            headers={"Prefer": "return=representation"}
        )
        return data or []

    async def update(self, table: str, values: Dict[str, Any], filters: Sequence[Filter]) -> List[Dict[str, Any]]:
        """Update the rows matching ``filters`` and return them."""
        data = await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=self._filter_params(filters),
            payload=values,
            headers={"Prefer": "return=representation"}
        )
        return data or []
