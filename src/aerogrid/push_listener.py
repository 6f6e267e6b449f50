"""
Push Listener - loopback HTTP endpoint for workspace change notifications.

AeroSpace calls it from ``exec-on-workspace-change``:

    POST http://127.0.0.1:18901/workspace-change
    body: the new workspace id (trailing whitespace/newline allowed)

Anything else gets 404. Uses Python stdlib http.server - no additional
dependencies required.
"""

import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Callable, Optional
from urllib.parse import urlparse

from .aerospace_queries import first_line
from .errors import ChannelError
from .logging_config import get_logger
from .settings import OVERLAY
from .snapshot_store import SnapshotStore


log = get_logger("push")

MAX_BODY_BYTES = 4096


class WorkspaceChangeHandler(BaseHTTPRequestHandler):
    """HTTP request handler for workspace change notifications."""

    server: "PushServer"

    def do_POST(self) -> None:
        """Handle POST requests."""
        if urlparse(self.path).path != self.server.listener.path:
            self._send_text(404, "Not Found")
            return

        body = self._read_body()
        workspace = first_line(body)
        if workspace is None:
            self._send_text(400, "Bad Request")
            return

        self.server.listener.handle_workspace_change(workspace)
        self._send_text(200, "OK")

    def _not_found(self) -> None:
        self._send_text(404, "Not Found")

    do_GET = _not_found
    do_PUT = _not_found
    do_DELETE = _not_found
    do_PATCH = _not_found

    def do_HEAD(self) -> None:
        self.send_response(404)
        self.send_header("Content-Length", "0")
        self.end_headers()

    def _read_body(self) -> Optional[str]:
        """Read the request body as text. Returns None if unusable."""
        try:
            length = int(self.headers.get("Content-Length", 0))
        except ValueError:
            return None
        if length <= 0 or length > MAX_BODY_BYTES:
            return None
        try:
            return self.rfile.read(length).decode("utf-8")
        except (UnicodeDecodeError, OSError):
            return None

    def _send_text(self, status: int, text: str) -> None:
        body = text.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args) -> None:
        """Route access logs to the aerogrid logger instead of stderr."""
        log.debug("%s - %s", self.address_string(), format % args)


class PushServer(ThreadingHTTPServer):
    """HTTP server that knows which listener it serves."""

    daemon_threads = True

    def __init__(self, address, listener: "PushListener"):
        self.listener = listener
        super().__init__(address, WorkspaceChangeHandler)


class PushListener:
    """Owns the push endpoint and its serving thread.

    A failed bind disables the listener for the rest of the process; a
    listener stopped on request can be started again.
    """

    def __init__(
        self,
        store: SnapshotStore,
        host: str = OVERLAY.push_host,
        port: int = OVERLAY.push_port,
        path: str = OVERLAY.push_path,
        clock: Callable[[], float] = time.monotonic,
        on_change: Optional[Callable[[str], None]] = None,
    ):
        self.store = store
        self.host = host
        self.port = port
        self.path = path
        self.on_change = on_change
        self.disabled = False
        self._clock = clock
        self._server: Optional[PushServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def bound_port(self) -> Optional[int]:
        if self._server is None:
            return None
        return self._server.server_address[1]

    def start(self) -> None:
        """Bind and serve in a background thread.

        Raises:
            ChannelError: if the address can't be bound, or a previous
                bind failed
        """
        if self.disabled:
            raise ChannelError("push", "disabled after an earlier bind failure")
        if self._server is not None:
            return
        try:
            server = PushServer((self.host, self.port), self)
        except OSError as e:
            self.disabled = True
            raise ChannelError("push", f"cannot bind {self.host}:{self.port}: {e}") from e

        self._server = server
        self._thread = threading.Thread(
            target=server.serve_forever, name="PushListenerThread", daemon=True
        )
        self._thread.start()
        log.info("Push listener on http://%s:%d%s", self.host, self.bound_port, self.path)

    def stop(self) -> None:
        server, self._server = self._server, None
        if server is None:
            return
        server.shutdown()
        server.server_close()
        if self._thread is not None:
            self._thread.join(timeout=2.0)
            self._thread = None
        log.info("Push listener stopped")

    def handle_workspace_change(self, workspace: str) -> bool:
        """Publish a pushed workspace id. Returns whether it was applied."""
        applied = self.store.publish_current_workspace(workspace, self._clock())
        if applied:
            log.info("Workspace changed to %s", workspace)
        else:
            log.debug("Dropped stale workspace change to %s", workspace)
        if self.on_change is not None:
            try:
                self.on_change(workspace)
            except Exception:
                log.exception("Workspace change hook failed")
        return applied


def setup_hint(
    port: int = OVERLAY.push_port,
    host: str = OVERLAY.push_host,
    path: str = OVERLAY.push_path,
    workspace_file: Optional[str] = OVERLAY.workspace_file,
) -> str:
    """The aerospace.toml line that feeds the push listener.

    With ``workspace_file`` set, the same hook also writes the fallback
    state file.
    """
    script = f'curl -s -X POST -d "$AEROSPACE_FOCUSED_WORKSPACE" http://{host}:{port}{path}'
    if workspace_file:
        script = f'echo "$AEROSPACE_FOCUSED_WORKSPACE" > {workspace_file}; {script}'
    return f"exec-on-workspace-change = ['/bin/bash', '-c', '{script}']"
