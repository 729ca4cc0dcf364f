"""Per-client throttling for public form submissions, backed by ``limits``."""

import logging
import math
import time

from limits import RateLimitItemPerSecond
from limits.storage import storage_from_string
from limits.strategies import MovingWindowRateLimiter

from backend.nightnurse.core.errors import RateLimitError
from backend.nightnurse.core.settings import Settings

logger = logging.getLogger(__name__)

FORM_LIMIT_MESSAGE = "Too many submissions. Please try again shortly."
STRICT_LIMIT_MESSAGE = "Too many submission attempts. Please try again later."


class SubmissionRateLimiter:
    """
    Two moving-window limits per client address:

    - form: every submission attempt counts (default 10 per minute)
    - strict: only rejected or failed submissions count (default 5 per minute)
    """

    def __init__(self, settings: Settings):
        window = settings.rate_limit_window_seconds
        self.window_seconds = window
        self.storage_uri = settings.rate_limit_storage_uri
        self.storage = storage_from_string(self.storage_uri)
        self.strategy = MovingWindowRateLimiter(self.storage)
        self.form_limit = RateLimitItemPerSecond(settings.rate_limit_max, window)
        self.strict_limit = RateLimitItemPerSecond(settings.strict_rate_limit_max, window)

    def _retry_after(self, limit, *identifiers: str) -> int:
        stats = self.strategy.get_window_stats(limit, *identifiers)
        return max(1, math.ceil(stats.reset_time - time.time()))

    def check(self, client: str, *, strict: bool = False) -> None:
        if not self.strategy.hit(self.form_limit, "form", client):
            logger.warning("Form rate limit exceeded for %s", client)
            raise RateLimitError(FORM_LIMIT_MESSAGE, self._retry_after(self.form_limit, "form", client))
        if strict and not self.strategy.test(self.strict_limit, "strict", client):
            logger.warning("Strict rate limit exceeded for %s", client)
            raise RateLimitError(STRICT_LIMIT_MESSAGE, self._retry_after(self.strict_limit, "strict", client))

    def record_failure(self, client: str) -> None:
        self.strategy.hit(self.strict_limit, "strict", client)

    def remaining(self, client: str) -> dict:
        """Attempts left in the current window, per limit."""
        return {
            "form": self.strategy.get_window_stats(self.form_limit, "form", client).remaining,
            "strict": self.strategy.get_window_stats(self.strict_limit, "strict", client).remaining,
        }
