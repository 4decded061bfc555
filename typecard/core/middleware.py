import re
from collections import deque
from collections.abc import Awaitable
from collections.abc import Callable
from threading import RLock
from time import monotonic

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response


JSON_CARD_PATH = re.compile(r"^/api/json/(?P<username>[^/]+)/")
CARD_PATH_PREFIX = "/api/cards/"


class SlidingWindow:
    """Per-key request timestamps inside a fixed time window.

    Keys whose window has emptied are removed, so idle clients do not
    accumulate.
    """

    def __init__(self, max_requests: int, window_seconds: int) -> None:
        self.max_requests = max(1, max_requests)
        self.window_seconds = max(1, window_seconds)
        self._hits: dict[str, deque[float]] = {}
        self._last_sweep = 0.0

    def __len__(self) -> int:
        return len(self._hits)

    def retry_after(self, key: str, now: float) -> int | None:
        """Return seconds to wait if `key` is over its limit, else None."""

        cutoff = now - self.window_seconds
        # Idle keys are only dropped by a full sweep, run at most once per window.
        if now - self._last_sweep >= self.window_seconds:
            for stale_key in list(self._hits):
                self._evict(stale_key, cutoff)
            self._last_sweep = now
        elif key in self._hits:
            self._evict(key, cutoff)

        hits = self._hits.get(key)
        if hits is None or len(hits) < self.max_requests:
            return None
        return max(1, int(self.window_seconds - (now - hits[0])))

    def record(self, key: str, now: float) -> None:
        self._hits.setdefault(key, deque()).append(now)

    def _evict(self, key: str, cutoff: float) -> None:
        hits = self._hits[key]
        while hits and hits[0] <= cutoff:
            hits.popleft()
        if not hits:
            del self._hits[key]


class CardRateLimitMiddleware(BaseHTTPMiddleware):
    """Limits card requests per client and per requested GitHub user.

    Every card request fans out to GitHub, so one client is capped, and so
    is the total traffic for one username across clients.
    """

    def __init__(
        self,
        app,
        requests_per_window: int = 30,
        window_seconds: int = 60,
        username_requests_per_window: int = 60,
        trust_forwarded_for: bool = False,
    ) -> None:
        super().__init__(app)
        self.clients = SlidingWindow(requests_per_window, window_seconds)
        self.usernames = SlidingWindow(username_requests_per_window, window_seconds)
        self.trust_forwarded_for = trust_forwarded_for
        self._lock = RLock()

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.method != "GET" or not self._is_card_request(request):
            return await call_next(request)

        client_key = self._client_key(request)
        username = self._username(request)
        now = monotonic()

        with self._lock:
            waits = [self.clients.retry_after(client_key, now)]
            if username:
                waits.append(self.usernames.retry_after(username, now))
            blocked = [wait for wait in waits if wait is not None]
            if blocked:
                return JSONResponse(
                    status_code=429,
                    content={"detail": "Too Many Requests"},
                    headers={"Retry-After": str(max(blocked))},
                )

            self.clients.record(client_key, now)
            if username:
                self.usernames.record(username, now)

        return await call_next(request)

    @staticmethod
    def _is_card_request(request: Request) -> bool:
        path = request.url.path
        return path.startswith(CARD_PATH_PREFIX) or bool(JSON_CARD_PATH.match(path))

    @staticmethod
    def _username(request: Request) -> str | None:
        match = JSON_CARD_PATH.match(request.url.path)
        raw = match["username"] if match else request.query_params.get("username")
        if raw is None or not raw.strip():
            return None
        return raw.strip().lower()

    def _client_key(self, request: Request) -> str:
        # X-Forwarded-For is client-controlled unless a trusted proxy sets it.
        if self.trust_forwarded_for:
            forwarded_for = request.headers.get("x-forwarded-for")
            if forwarded_for:
                return forwarded_for.split(",")[0].strip() or "unknown"

        if request.client and request.client.host:
            return request.client.host

        return "unknown"
