"""Per-client cooldown for the naming endpoint.

In-memory moving window from the ``limits`` library. One instance lives on
``app.state`` for the lifetime of the process; nothing is persisted.
"""

import logging

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter
from starlette.requests import Request

from plantnamer.config import RateLimitSettings

logger = logging.getLogger(__name__)

FORWARDED_FOR_HEADER = "X-Forwarded-For"
UNKNOWN_CLIENT = "unknown"
NAMESPACE = "plantnamer"


def get_client_id(request: Request, trust_forwarded_for: bool = True) -> str:
    """Identify the caller for rate limiting.

    Uses the first hop of X-Forwarded-For. Without the header (or when it is
    not trusted) every caller shares the "unknown" bucket, matching a
    deployment where the proxy always sets it.
    """
    if trust_forwarded_for:
        forwarded_for = request.headers.get(FORWARDED_FOR_HEADER, "")
        client_id = forwarded_for.split(",")[0].strip()
        if client_id:
            return client_id
    return UNKNOWN_CLIENT


class ClientRateLimiter:
    """Moving-window limiter keyed by client identifier.

    ``hit`` records the request only when it is accepted, so rejected retries
    do not push a client's window further out.
    """

    def __init__(self, settings: RateLimitSettings):
        self.settings = settings
        self.storage = MemoryStorage()
        self.limiter = MovingWindowRateLimiter(self.storage)
        self.item = RateLimitItemPerSecond(
            settings.requests_per_window,
            settings.window_seconds,
        )

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def hit(self, client_id: str) -> bool:
        """Record a request for ``client_id``; return False if over the limit."""
        if not self.enabled:
            return True

        accepted = self.limiter.hit(self.item, NAMESPACE, client_id)
        if not accepted:
            logger.info(
                "Rate limited client",
                extra={"client_id": client_id, "window_seconds": self.settings.window_seconds},
            )
        return accepted

    def reset(self) -> None:
        """Drop all recorded requests."""
        self.storage.reset()
