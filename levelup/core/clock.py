# levelup/core/clock.py
from datetime import datetime
from zoneinfo import ZoneInfo

from levelup.core.config import settings


def local_now() -> datetime:
    """
    Current wall-clock time in the configured timezone, as a naive datetime.

    Every timestamp written by the progression engine (completions, goal
    updates) uses this representation so period windows can be compared
    directly against stored values.
    """
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def get_now() -> datetime:
    """Request-scoped "now" dependency. Overridden in tests."""
    return local_now()
