"""
Pure decision logic for refreshing the window cache.

These functions contain no I/O and are fully unit-testable. They are
used by RefreshCoordinator and PollRefresher.
"""

from typing import Optional


def is_cache_fresh(
    last_full_fetch_at: Optional[float],
    now: float,
    ttl: float,
) -> bool:
    """Whether the last successful full fetch is still inside the TTL.

    Args:
        last_full_fetch_at: Clock value of the last successful fetch, or None
        now: Current clock value
        ttl: Staleness window in seconds

    Returns:
        True if a non-forced refresh should be skipped
    """
    if last_full_fetch_at is None:
        return False
    return (now - last_full_fetch_at) < ttl


def should_start_refresh(
    in_flight: bool,
    forced: bool,
    last_full_fetch_at: Optional[float],
    now: float,
    ttl: float,
) -> bool:
    """Single-flight and TTL gate for a refresh request."""
    if in_flight:
        return False
    if forced:
        return True
    return not is_cache_fresh(last_full_fetch_at, now, ttl)


def should_poll_refresh(
    overlay_visible: bool,
    in_flight: bool,
    cache_fresh: bool,
    seconds_since_activity: float,
    idle_threshold: float,
    active_window: float,
) -> bool:
    """Decide whether the background timer should refresh now.

    Polling only runs while the overlay is hidden, nothing is fetching,
    the cache is stale and the user is around: active within
    ``active_window`` but not idle for longer than ``idle_threshold``.

    Violating this costs staleness, never correctness.
    """
    if overlay_visible or in_flight or cache_fresh:
        return False
    if seconds_since_activity > idle_threshold:
        return False
    return seconds_since_activity < active_window
