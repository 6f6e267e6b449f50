"""
Refresh Coordinator - decides when to query aerospace and publishes results.

A refresh request returns immediately. When it is allowed (nothing in
flight, and either forced or the cache is stale) the queries run on a
worker thread and the results are published to the SnapshotStore stamped
with the time the fetch started. Failures leave the previous windows in
place and always clear the in-flight flag; the next trigger retries.
"""

import threading
import time
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .aerospace_queries import (
    FOCUSED_WORKSPACE_ARGS,
    ParsedWindows,
    all_windows_args,
    parse_all_windows,
    parse_focused_workspace,
    parse_workspace_windows,
    workspace_windows_args,
)
from .command_runner import CommandRunner
from .logging_config import get_logger
from .refresh_policy import is_cache_fresh, should_start_refresh
from .settings import OVERLAY, default_workspace_names
from .snapshot_store import SnapshotStore


log = get_logger("refresh")

MODE_ALL = "all"
MODE_PER_WORKSPACE = "per-workspace"


@dataclass
class RefreshState:
    """Owned by the coordinator; callers only ever get a copy."""

    in_flight: bool = False
    last_full_fetch_at: Optional[float] = None


@dataclass(frozen=True)
class RefreshOutcome:
    """Summary of one completed full refresh."""

    ok: bool
    started_at: float
    finished_at: float
    workspace: Optional[str] = None
    workspace_count: int = 0
    window_count: int = 0
    skipped_lines: int = 0
    error: Optional[str] = None

    @property
    def duration(self) -> float:
        return self.finished_at - self.started_at


class RefreshCoordinator:
    """Single-flight, TTL-gated driver of the aerospace queries."""

    def __init__(
        self,
        store: SnapshotStore,
        runner: CommandRunner,
        ttl: float = OVERLAY.cache_ttl,
        clock: Callable[[], float] = time.monotonic,
        windows_query_mode: str = MODE_ALL,
        workspace_names: Optional[Sequence[str]] = None,
    ):
        self.store = store
        self.runner = runner
        self.ttl = ttl
        self.windows_query_mode = windows_query_mode
        self.workspace_names: List[str] = list(workspace_names or default_workspace_names())
        self._clock = clock

        self._lock = threading.Lock()
        self._state = RefreshState()
        self._idle = threading.Event()
        self._idle.set()
        self._workspace_query_in_flight = False
        self._last_outcome: Optional[RefreshOutcome] = None

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def state(self) -> RefreshState:
        with self._lock:
            return replace(self._state)

    @property
    def in_flight(self) -> bool:
        return self._state.in_flight

    @property
    def last_outcome(self) -> Optional[RefreshOutcome]:
        return self._last_outcome

    def is_fresh(self) -> bool:
        return is_cache_fresh(self._state.last_full_fetch_at, self._clock(), self.ttl)

    def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """Block until no full refresh is in flight. For shutdown and tests."""
        return self._idle.wait(timeout)

    # ------------------------------------------------------------------
    # Triggers
    # ------------------------------------------------------------------

    def trigger_refresh(self, forced: bool = False) -> bool:
        """Request a full refresh without waiting for it.

        Returns:
            True if a fetch was started, False if it was skipped because
            one is already in flight or the cache is still fresh
        """
        with self._lock:
            now = self._clock()
            if not should_start_refresh(
                in_flight=self._state.in_flight,
                forced=forced,
                last_full_fetch_at=self._state.last_full_fetch_at,
                now=now,
                ttl=self.ttl,
            ):
                return False
            self._state.in_flight = True
            self._idle.clear()

        thread = threading.Thread(
            target=self._run_full_refresh,
            args=(now,),
            name="RefreshWorker",
            daemon=True,
        )
        thread.start()
        return True

    def force_refresh(self) -> bool:
        return self.trigger_refresh(forced=True)

    def refresh_current_workspace(self) -> bool:
        """Query only the focused workspace, in the background.

        Used when the overlay opens before any workspace is known.
        """
        with self._lock:
            if self._workspace_query_in_flight:
                return False
            self._workspace_query_in_flight = True
            started_at = self._clock()

        def _worker() -> None:
            try:
                self._fetch_focused_workspace(started_at)
            except Exception:
                log.exception("Focused workspace query crashed")
            finally:
                with self._lock:
                    self._workspace_query_in_flight = False

        threading.Thread(target=_worker, name="WorkspaceQuery", daemon=True).start()
        return True

    # ------------------------------------------------------------------
    # Worker side
    # ------------------------------------------------------------------

    def _run_full_refresh(self, started_at: float) -> None:
        outcome = None
        try:
            outcome = self._fetch_all(started_at)
        except Exception as e:
            log.exception("Refresh crashed")
            outcome = RefreshOutcome(
                ok=False, started_at=started_at, finished_at=self._clock(), error=str(e)
            )
        finally:
            with self._lock:
                if outcome is not None and outcome.ok:
                    self._state.last_full_fetch_at = outcome.finished_at
                self._state.in_flight = False
                self._last_outcome = outcome
                self._idle.set()

    def _fetch_focused_workspace(self, started_at: float) -> Optional[str]:
        result = self.runner.run(FOCUSED_WORKSPACE_ARGS)
        if not result.ok:
            log.warning("Focused workspace query failed: %s", result.error)
            return None
        workspace = parse_focused_workspace(result.stdout)
        if workspace is None:
            log.warning("Focused workspace query returned no workspace")
            return None
        self.store.publish_current_workspace(workspace, started_at)
        return workspace

    def _fetch_all(self, started_at: float) -> RefreshOutcome:
        workspace = self._fetch_focused_workspace(started_at)

        parsed, error = self._fetch_windows()
        if parsed is not None:
            for parse_error in parsed.errors:
                log.warning("Skipped window record: %s", parse_error)

        if error is not None:
            log.warning("Window query failed, keeping cached windows: %s", error)
            return RefreshOutcome(
                ok=False,
                started_at=started_at,
                finished_at=self._clock(),
                workspace=workspace,
                skipped_lines=len(parsed.errors) if parsed else 0,
                error=error,
            )

        self.store.publish_windows(parsed.mapping, started_at)
        outcome = RefreshOutcome(
            ok=True,
            started_at=started_at,
            finished_at=self._clock(),
            workspace=workspace,
            workspace_count=len(parsed.mapping),
            window_count=parsed.window_count,
            skipped_lines=len(parsed.errors),
        )
        log.info(
            "Refreshed %d workspaces with %d windows in %.3fs",
            outcome.workspace_count, outcome.window_count, outcome.duration,
        )
        return outcome

    def _fetch_windows(self) -> Tuple[Optional[ParsedWindows], Optional[str]]:
        """Run the windows query for the configured mode.

        Returns:
            (parsed, None) on success, (parsed or None, reason) on failure
        """
        if self.windows_query_mode == MODE_PER_WORKSPACE:
            return self._fetch_windows_per_workspace()

        result = self.runner.run(all_windows_args())
        if not result.ok:
            return None, str(result.error)
        parsed = parse_all_windows(result.stdout)
        if not parsed.mapping:
            return parsed, "no well-formed window records"
        return parsed, None

    def _fetch_windows_per_workspace(self) -> Tuple[Optional[ParsedWindows], Optional[str]]:
        """Query each workspace on its own (for aerospace builds where --all hangs).

        Empty output here means an empty workspace, not a failure. The
        batch fails only if every workspace query fails.
        """
        combined = ParsedWindows()
        failures = 0
        for name in self.workspace_names:
            result = self.runner.run(workspace_windows_args(name))
            if not result.ok:
                if result.error is not None and result.error.returncode == 0:
                    continue
                failures += 1
                log.debug("Window query for workspace %s failed: %s", name, result.error)
                continue
            combined.merge(parse_workspace_windows(name, result.stdout))

        if self.workspace_names and failures == len(self.workspace_names):
            return combined, f"all {failures} workspace queries failed"
        return combined, None
