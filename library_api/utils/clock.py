from datetime import datetime, timedelta

from flask import current_app, has_app_context


class SystemClock:
    """Wall clock, naive UTC (matches what the DateTime columns store)."""

    def now(self) -> datetime:
        return datetime.utcnow()


class FixedClock:
    """Clock pinned to a given instant; tests move it explicitly."""

    def __init__(self, at: datetime):
        self.at = at

    def now(self) -> datetime:
        return self.at

    def set(self, at: datetime):
        self.at = at

    def advance(self, **kwargs):
        self.at = self.at + timedelta(**kwargs)
        return self.at


def get_clock():
    return current_app.extensions["clock"]


def utcnow() -> datetime:
    return get_clock().now()


def clock_now() -> datetime:
    """Column default/onupdate: the app clock when one is active, wall clock otherwise."""
    if has_app_context() and "clock" in current_app.extensions:
        return utcnow()
    return datetime.utcnow()
