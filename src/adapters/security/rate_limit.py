"""
Rate limiter adapter - Implements RateLimiter protocol via the limits library.

Limits are expressed in limits' string notation (e.g. "5/15 minutes") and
evaluated with a moving window, so a burst cannot straddle a window edge.
Counters live in any limits storage backend ("memory://", "redis://...").
"""

import logging

from limits import parse, storage, strategies

logger = logging.getLogger(__name__)


class LimitsRateLimiter:
    """Per-bucket, per-identity moving window limiter."""

    def __init__(self, limit: str = "5/15 minutes", storage_uri: str = "memory://") -> None:
        self._item = parse(limit)
        self._storage = storage.storage_from_string(storage_uri)
        self._limiter = strategies.MovingWindowRateLimiter(self._storage)

    def hit(self, bucket: str, identity: str) -> bool:
        allowed = self._limiter.hit(self._item, bucket, identity)
        if not allowed:
            logger.debug("Limit %s reached for %s/%s", self._item, bucket, identity)
        return allowed

    def reset(self) -> None:
        """Clear all counters."""
        self._storage.reset()
