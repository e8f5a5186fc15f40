"""
Prometheus metrics for not-so-fast limiters.
"""

from typing import Dict, Any, Optional

from prometheus_client import CollectorRegistry, Counter, Gauge


class LimiterMetrics:
    """Decision and bucket lifecycle metrics for one limiter.

    Each collector registers on its own ``CollectorRegistry`` unless one is
    passed in, so any number of limiters can live in one process. Pass
    ``prometheus_client.REGISTRY`` to expose the metrics on the default
    registry.
    """

    def __init__(self, limiter_name: str = "default", registry: Optional[CollectorRegistry] = None):
        self.limiter_name = limiter_name
        self.registry = registry if registry is not None else CollectorRegistry()
        self._metrics: Dict[str, Any] = {}
        self._setup_metrics()

    def _setup_metrics(self):
        """Set up limiter metrics and bind this limiter's label children."""

        self._metrics["checks_total"] = Counter(
            "not_so_fast_checks_total",
            "Total token checks",
            ["limiter", "operation", "outcome"],
            registry=self.registry
        )

        self._metrics["buckets_created_total"] = Counter(
            "not_so_fast_buckets_created_total",
            "Total namespace buckets created",
            ["limiter"],
            registry=self.registry
        )

        self._metrics["buckets_expired_total"] = Counter(
            "not_so_fast_buckets_expired_total",
            "Total namespace buckets expired",
            ["limiter"],
            registry=self.registry
        )

        self._metrics["active_buckets"] = Gauge(
            "not_so_fast_active_buckets",
            "Namespace buckets currently tracked",
            ["limiter"],
            registry=self.registry
        )

        # Resolved once, checks run on the hot path
        self._checks = {
            (operation, outcome): self._metrics["checks_total"].labels(
                limiter=self.limiter_name, operation=operation, outcome=outcome
            )
            for operation in ("consume", "has_token")
            for outcome in ("allowed", "denied", "unlimited")
        }
        self._created = self._metrics["buckets_created_total"].labels(limiter=self.limiter_name)
        self._expired = self._metrics["buckets_expired_total"].labels(limiter=self.limiter_name)
        self._active = self._metrics["active_buckets"].labels(limiter=self.limiter_name)

    def record_check(self, operation: str, outcome: str):
        """Record a check decision."""
        self._checks[(operation, outcome)].inc()

    def record_bucket_created(self):
        self._created.inc()
        self._active.inc()

    def record_bucket_expired(self):
        self._expired.inc()
        self._active.dec()

    def get_metric(self, name: str) -> Optional[Any]:
        """Get metric by name."""
        return self._metrics.get(name)

    def get_sample_value(self, name: str, labels: Optional[Dict[str, str]] = None) -> Optional[float]:
        """Read a sample from this collector's registry."""
        sample_labels = {"limiter": self.limiter_name}
        sample_labels.update(labels or {})
        return self.registry.get_sample_value(name, sample_labels)
