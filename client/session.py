# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Client-side session handling for the Component Tracker API.

``SessionManager`` owns the access / refresh token pair and puts the bearer
header on every request.  When a request comes back 401 it refreshes the
session silently and replays the request once.

Refresh protocol
----------------
* Only one /auth/refresh call is in flight at a time.  Requests that hit 401
  while it runs wait on a future in ``_pending``.  When the refresh ends the
  futures are resolved in arrival order, with the new access token or with
  the failure.
* A request whose 401 arrives after another request already refreshed the
  session is replayed with the current token, without another refresh.
* If the refresh fails, every credential is dropped, the session goes back
  to ANONYMOUS, and ``redirect_to_login`` is called.  The callback is skipped
  when the app is already on a public route, so there is no redirect loop.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, Iterable, List, Optional

import httpx

from client.storage import TokenStore

logger = logging.getLogger("tracker.client")

PUBLIC_ROUTES = ("/login", "/signup")


class SessionState(str, Enum):
    ANONYMOUS = "anonymous"
    AUTHENTICATING = "authenticating"
    AUTHENTICATED = "authenticated"
    REFRESHING = "refreshing"


class ApiError(Exception):
    """A failure envelope (or a non-JSON error) returned by the API."""

    def __init__(self, status_code: int, message: str, errors: Optional[List[str]] = None):
        self.status_code = status_code
        self.message = message
        self.errors = errors or []
        super().__init__(f"{status_code}: {message}")


class SessionExpiredError(Exception):
    """The session could not be refreshed; the user has to sign in again."""


def unwrap(response: httpx.Response):
    """Return the ``data`` member of a success envelope or raise ApiError."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if not isinstance(body, dict):
        if response.is_success:
            return body
        raise ApiError(response.status_code, response.reason_phrase or "Request failed")
    if response.is_success and body.get("success", True):
        return body.get("data")
    raise ApiError(
        response.status_code,
        body.get("message") or body.get("error") or "Request failed",
        body.get("errors"),
    )


class SessionManager:
    def __init__(
        self,
        base_url: str = "http://localhost:5000",
        store: Optional[TokenStore] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        redirect_to_login: Optional[Callable[[], None]] = None,
        public_routes: Iterable[str] = PUBLIC_ROUTES,
    ):
        self.store = store if store is not None else TokenStore()
        self.state = SessionState.ANONYMOUS
        # Set by the application as the user navigates
        self.current_route = "/"
        self.redirect_to_login = redirect_to_login
        self.public_routes = tuple(public_routes)

        self._http = httpx.AsyncClient(base_url=base_url, transport=transport)
        self._refreshing = False
        self._pending: List[asyncio.Future] = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def is_authenticated(self) -> bool:
        return self.state in (SessionState.AUTHENTICATED, SessionState.REFRESHING)

    @property
    def user(self) -> Optional[dict]:
        return self.store.user

    # -- lifecycle ------------------------------------------------------------

    async def start(self) -> SessionState:
        """
        Restore the session from the store.  With only a refresh token left,
        exchange it for a new pair first; on any failure start anonymous.
        """
        if self.store.access_token and self.store.refresh_token:
            self.state = SessionState.AUTHENTICATED
            return self.state

        if not self.store.refresh_token:
            if self.store.access_token or self.store.user:
                # an access token alone cannot be renewed
                self.store.clear()
            self.state = SessionState.ANONYMOUS
            return self.state

        self.state = SessionState.AUTHENTICATING
        try:
            await self._exchange_refresh_token()
        except SessionExpiredError:
            logger.info("stored session could not be restored")
            self.store.clear()
            self.state = SessionState.ANONYMOUS
        else:
            self.state = SessionState.AUTHENTICATED
        return self.state

    async def signup(self, name: str, email: str, password: str) -> dict:
        response = await self._http.post(
            "/auth/signup", json={"name": name, "email": email, "password": password}
        )
        return unwrap(response)

    async def login(self, email: str, password: str) -> dict:
        self.state = SessionState.AUTHENTICATING
        try:
            data = unwrap(await self._http.post("/auth/signin", json={"email": email, "password": password}))
        except (ApiError, httpx.HTTPError):
            # never leave half a session behind
            self.store.clear()
            self.state = SessionState.ANONYMOUS
            raise

        self.store.save(data["accessToken"], data["refreshToken"], data.get("user"))
        self.state = SessionState.AUTHENTICATED
        return data.get("user")

    async def logout(self) -> None:
        """Tell the server to drop the session, then forget it locally."""
        refresh_token = self.store.refresh_token
        try:
            if refresh_token:
                await self._http.post("/auth/logout", json={"refreshToken": refresh_token})
        except httpx.HTTPError as exc:
            logger.warning("logout request failed: %s", exc)
        finally:
            self.store.clear()
            self.state = SessionState.ANONYMOUS

    # -- authenticated requests ---------------------------------------------

    async def request(self, method: str, url: str, **kwargs) -> httpx.Response:
        """
        Send a request with the current access token.  A 401 triggers at
        most one refresh-and-replay.  Raises SessionExpiredError if the
        session cannot be refreshed.
        """
        sent_token = self.store.access_token
        response = await self._send(method, url, sent_token, kwargs)
        if response.status_code != 401:
            return response

        current = self.store.access_token
        if current and current != sent_token:
            return await self._send(method, url, current, kwargs)

        token = await self._refresh_once()
        return await self._send(method, url, token, kwargs)

    async def get(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("POST", url, **kwargs)

    async def put(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("PUT", url, **kwargs)

    async def delete(self, url: str, **kwargs) -> httpx.Response:
        return await self.request("DELETE", url, **kwargs)

    async def _send(self, method: str, url: str, token: Optional[str], kwargs: dict) -> httpx.Response:
        headers = dict(kwargs.get("headers") or {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return await self._http.request(method, url, **{**kwargs, "headers": headers})

    # -- refresh coordination -------------------------------------------------

    async def _refresh_once(self) -> str:
        if self._refreshing:
            waiter = asyncio.get_running_loop().create_future()
            self._pending.append(waiter)
            return await waiter

        self._refreshing = True
        self.state = SessionState.REFRESHING
        try:
            token = await self._exchange_refresh_token()
        except SessionExpiredError as exc:
            self._release(error=exc)
            self._expire()
            raise
        except BaseException as exc:
            # malformed answer or cancellation: waiters must not hang
            self._release(error=exc)
            self.state = SessionState.AUTHENTICATED if self.store.access_token else SessionState.ANONYMOUS
            raise
        else:
            self.state = SessionState.AUTHENTICATED
            self._release(token=token)
            return token
        finally:
            self._refreshing = False

    def _release(self, token: Optional[str] = None, error: Optional[BaseException] = None) -> None:
        pending, self._pending = self._pending, []
        for waiter in pending:
            if waiter.done():
                continue
            if isinstance(error, asyncio.CancelledError):
                waiter.cancel()
            elif error is not None:
                waiter.set_exception(error)
            else:
                waiter.set_result(token)

    async def _exchange_refresh_token(self) -> str:
        refresh_token = self.store.refresh_token
        if not refresh_token:
            raise SessionExpiredError("No refresh token available")

        try:
            response = await self._http.post("/auth/refresh", json={"refreshToken": refresh_token})
            data = unwrap(response)
        except ApiError as exc:
            raise SessionExpiredError(exc.message) from exc
        except httpx.HTTPError as exc:
            raise SessionExpiredError(f"Token refresh failed: {exc}") from exc

        if not isinstance(data, dict) or not data.get("accessToken") or not data.get("refreshToken"):
            raise SessionExpiredError("Token refresh returned no tokens")

        self.store.save(data["accessToken"], data["refreshToken"], data.get("user"))
        logger.debug("session refreshed")
        return data["accessToken"]

    def _expire(self) -> None:
        logger.info("session expired; clearing credentials")
        self.store.clear()
        self.state = SessionState.ANONYMOUS
        if self.redirect_to_login and not self._on_public_route():
            self.redirect_to_login()

    def _on_public_route(self) -> bool:
        return any(self.current_route.startswith(route) for route in self.public_routes)
