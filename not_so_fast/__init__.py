"""
not-so-fast: in-process per-namespace token bucket rate limiting.

- ratelimit: the token bucket limiter and its expiry scheduler
- config: limiter options and environment settings via pydantic-settings
- errors: configuration and exhaustion error types
- logging: structured logging via structlog
- metrics: Prometheus metrics for limiter decisions
"""

from not_so_fast.config import LimiterOptions, LimiterSettings
from not_so_fast.errors import ConfigurationError, ExhaustionError, LimiterException
from not_so_fast.ratelimit.token_bucket import NotSoFast, RateLimiter, TokenBucketLimiter

__version__ = "1.0.0"

__all__ = [
    "ConfigurationError",
    "ExhaustionError",
    "LimiterException",
    "LimiterOptions",
    "LimiterSettings",
    "NotSoFast",
    "RateLimiter",
    "TokenBucketLimiter",
]
