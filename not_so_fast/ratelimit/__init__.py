"""
Rate limiting package.

Holds the token bucket limiter that enforces per-namespace budgets over a
fixed window, and the scheduler that expires those budgets.
"""
