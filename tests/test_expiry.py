"""
Unit tests for the expiry scheduler.
"""

import threading
import time
from unittest.mock import MagicMock

import pytest

from not_so_fast.ratelimit.expiry import ExpiryScheduler


class TestExpiryScheduler:
    """Test cases for ExpiryScheduler."""

    @pytest.fixture
    def fired(self):
        """Collect fired timers."""
        return []

    @pytest.fixture
    def scheduler(self, fired):
        """Create ExpiryScheduler instance with a short delay."""
        done = threading.Event()

        def callback(key, token):
            fired.append((key, token))
            done.set()

        scheduler = ExpiryScheduler(0.1, callback, name="test")
        scheduler.done = done
        return scheduler

    def test_fires_after_delay(self, scheduler, fired):
        """Test a timer fires once its delay has elapsed."""
        started = time.monotonic()
        scheduler.schedule("a", "token-a")

        assert scheduler.done.wait(2)
        assert time.monotonic() - started >= 0.1
        assert fired == [("a", "token-a")]

    def test_not_fired_early(self, scheduler, fired):
        """Test a timer does not fire before its delay."""
        scheduler.schedule("a")

        assert fired == []
        assert scheduler.pending() == 1

    def test_fires_in_order(self, scheduler, fired):
        """Test timers fire in scheduling order."""
        for key in ("a", "b", "c"):
            scheduler.schedule(key)

        time.sleep(0.4)

        assert [key for key, _ in fired] == ["a", "b", "c"]
        assert scheduler.pending() == 0

    def test_worker_exits_when_drained(self, scheduler):
        """Test the worker thread stops once no timer is pending."""
        scheduler.schedule("a")
        worker = scheduler._worker

        assert worker is not None
        worker.join(2)

        assert not worker.is_alive()
        assert scheduler._worker is None

    def test_worker_restarts(self, scheduler, fired):
        """Test scheduling after the worker exited starts a new one."""
        scheduler.schedule("a")
        scheduler._worker.join(2)
        scheduler.done.clear()

        scheduler.schedule("b")

        assert scheduler.done.wait(2)
        assert [key for key, _ in fired] == ["a", "b"]

    def test_zero_delay(self):
        """Test a zero delay fires right away."""
        done = threading.Event()
        scheduler = ExpiryScheduler(0, lambda key, token: done.set())

        scheduler.schedule("a")

        assert done.wait(1)

    def test_callback_error_does_not_stop_worker(self):
        """Test a failing callback does not stall later timers."""
        callback = MagicMock(side_effect=[RuntimeError("boom"), None])
        scheduler = ExpiryScheduler(0.05, callback)

        scheduler.schedule("a")
        scheduler.schedule("b")
        time.sleep(0.3)

        assert callback.call_count == 2
        assert scheduler.pending() == 0
