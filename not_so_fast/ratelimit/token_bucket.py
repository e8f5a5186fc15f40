"""
Token bucket rate limiter.
"""

import threading
from typing import Any, Dict, Hashable, Optional

from not_so_fast.config import LimiterOptions, LimiterSettings, get_settings
from not_so_fast.errors import ConfigurationError, ExhaustionError
from not_so_fast.logging import get_logger
from not_so_fast.metrics import LimiterMetrics
from not_so_fast.ratelimit.expiry import ExpiryScheduler


class _Bucket:
    """Remaining tokens of one namespace for one epoch."""

    __slots__ = ("tokens",)

    def __init__(self, tokens):
        self.tokens = tokens


class TokenBucketLimiter:
    """In-process per-namespace token bucket with fixed-window reset.

    Each namespace gets ``threshold`` tokens on first touch. The bucket is
    dropped ``ttl`` seconds later regardless of its count, and the next touch
    starts a full bucket again. Falsy namespaces are never limited.
    """

    def __init__(self, options: Any, name: str = "default", metrics: Optional[LimiterMetrics] = None):
        self.name = name
        self.logger = get_logger(f"not_so_fast.limiter.{name}")

        try:
            self.options = LimiterOptions.parse(options)
        except ConfigurationError as e:
            self.logger.error("Invalid limiter options", error=e.message, **e.details)
            raise

        self.threshold = self.options.threshold
        self.ttl_milliseconds = self.options.ttl_milliseconds

        self._tokens: Dict[Hashable, _Bucket] = {}
        self._lock = threading.Lock()
        self._scheduler = ExpiryScheduler(self.ttl_milliseconds / 1000, self._expire, name=name)
        self.metrics = metrics if metrics is not None else LimiterMetrics(limiter_name=name)

        self.logger.info(
            "Rate limiter created",
            threshold=self.threshold,
            ttl_milliseconds=self.ttl_milliseconds
        )

    @classmethod
    def from_settings(cls, settings: Optional[LimiterSettings] = None, configure_logs: bool = False,
                      **kwargs) -> "TokenBucketLimiter":
        """Create a limiter from environment settings.

        Bad environment values raise ``ConfigurationError`` like bad options
        do. With ``configure_logs`` the settings' ``log_level`` is applied to
        the ``not_so_fast`` loggers before the limiter is built.
        """
        if settings is None:
            try:
                settings = get_settings()
            except ConfigurationError as e:
                get_logger("not_so_fast.limiter.settings").error(
                    "Invalid limiter settings", error=e.message, **e.details
                )
                raise
        if configure_logs:
            settings.configure_logging()
        kwargs.setdefault("name", settings.name)
        return cls(settings.to_options(), **kwargs)

    def _check(self, namespace: Hashable, consume: bool) -> bool:
        operation = "consume" if consume else "has_token"

        if not namespace:
            self.metrics.record_check(operation, "unlimited")
            return True

        exhausted = False
        with self._lock:
            bucket = self._tokens.get(namespace)
            if bucket is None:
                bucket = _Bucket(self.threshold)
                self._tokens[namespace] = bucket
                self._schedule_expire(namespace, bucket)

            if bucket.tokens > 0:
                if consume:
                    bucket.tokens -= 1
                    exhausted = bucket.tokens <= 0
                allowed = True
            else:
                allowed = False

        self.metrics.record_check(operation, "allowed" if allowed else "denied")
        if exhausted:
            self.logger.info("Namespace bucket exhausted", namespace=str(namespace), threshold=self.threshold)
        return allowed

    def _schedule_expire(self, namespace: Hashable, bucket: _Bucket) -> None:
        # Caller holds the lock and has just stored this bucket
        self._scheduler.schedule(namespace, bucket)
        self.metrics.record_bucket_created()

    def _expire(self, namespace: Hashable, bucket: _Bucket) -> None:
        with self._lock:
            if self._tokens.get(namespace) is not bucket:
                return
            del self._tokens[namespace]
        self.metrics.record_bucket_expired()

    def consume_sync(self, namespace: Hashable) -> bool:
        """Take a token from ``namespace``. Returns whether one was available."""
        return self._check(namespace, consume=True)

    def has_token_sync(self, namespace: Hashable) -> bool:
        """Whether ``namespace`` has a token left, without taking it."""
        return self._check(namespace, consume=False)

    async def consume(self, namespace: Hashable) -> None:
        """Take a token or raise ``ExhaustionError``.

        The check runs when the coroutine is awaited, not when it is created;
        a coroutine that is never awaited takes nothing.
        """
        if self.consume_sync(namespace) is True:
            return
        raise ExhaustionError(namespace)

    async def has_token(self, namespace: Hashable) -> None:
        """Return if ``namespace`` has a token left, otherwise raise ``ExhaustionError``.

        Like ``consume``, the check runs at await time.
        """
        if self.has_token_sync(namespace) is True:
            return
        raise ExhaustionError(namespace)

    consumeSync = consume_sync
    hasTokenSync = has_token_sync
    hasToken = has_token

    def get_status(self, namespace: Hashable) -> Dict[str, Any]:
        """Read-only view of a namespace bucket. Never starts an epoch."""
        if not namespace:
            return {
                "namespace": namespace,
                "threshold": self.threshold,
                "remaining": None,
                "active": False
            }

        with self._lock:
            bucket = self._tokens.get(namespace)
            remaining = bucket.tokens if bucket is not None else self.threshold

        return {
            "namespace": namespace,
            "threshold": self.threshold,
            "remaining": remaining,
            "active": bucket is not None
        }

    def get_stats(self) -> Dict[str, Any]:
        """Get limiter-wide statistics."""
        with self._lock:
            active_buckets = len(self._tokens)

        return {
            "name": self.name,
            "threshold": self.threshold,
            "ttl_seconds": self.options.ttl,
            "active_buckets": active_buckets,
            "pending_expiries": self._scheduler.pending()
        }


RateLimiter = TokenBucketLimiter
NotSoFast = TokenBucketLimiter
