"""
User configuration loaded from ~/.aerogrid/config.yaml.

Only the ``overlay:`` section is interpreted; anything else is preserved
on save and ignored on load.
"""

from dataclasses import dataclass, field, fields, replace
from typing import List, Optional

import yaml

from .settings import OVERLAY, PATHS, default_workspace_names


CONFIG_PATH = PATHS.config


@dataclass(frozen=True)
class OverlayConfig:
    """Effective settings for one overlay context."""

    cache_ttl: float = OVERLAY.cache_ttl
    poll_interval: float = OVERLAY.poll_interval
    active_window: float = OVERLAY.active_window
    idle_threshold: float = OVERLAY.idle_threshold
    command_timeout: float = OVERLAY.command_timeout
    status_interval: float = OVERLAY.status_interval
    push_enabled: bool = True
    push_host: str = OVERLAY.push_host
    push_port: int = OVERLAY.push_port
    push_path: str = OVERLAY.push_path
    file_watch_enabled: bool = True
    workspace_file: str = OVERLAY.workspace_file
    aerospace_bin: str = OVERLAY.aerospace_bin
    refresh_on_demand_only: bool = OVERLAY.refresh_on_demand_only
    refresh_on_workspace_change: bool = OVERLAY.refresh_on_workspace_change
    windows_query_mode: str = OVERLAY.windows_query_mode
    workspace_names: List[str] = field(default_factory=default_workspace_names)


def load_config() -> dict:
    """Load the YAML config file.

    Returns an empty dict when the file is missing, unreadable,
    invalid YAML, or not a mapping at the top level.
    """
    if not CONFIG_PATH.exists():
        return {}
    try:
        with open(CONFIG_PATH) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError):
        return {}
    if not isinstance(data, dict):
        return {}
    return data


def save_config(data: dict) -> None:
    """Write the config dict back to disk."""
    CONFIG_PATH.parent.mkdir(parents=True, exist_ok=True)
    with open(CONFIG_PATH, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def _coerce(name: str, value, default):
    """Return value if it matches the default's type, else None."""
    if isinstance(default, bool):
        return value if isinstance(value, bool) else None
    if isinstance(default, float):
        if isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0:
            return float(value)
        return None
    if isinstance(default, int):
        if isinstance(value, int) and not isinstance(value, bool) and 0 < value < 65536:
            return value
        return None
    if isinstance(default, str):
        if name == "windows_query_mode" and value not in ("all", "per-workspace"):
            return None
        return value if isinstance(value, str) and value else None
    if isinstance(default, list):
        if isinstance(value, list) and value and all(isinstance(v, (str, int)) for v in value):
            return [str(v) for v in value]
        return None
    return None


def get_overlay_config(data: Optional[dict] = None) -> OverlayConfig:
    """Merge the ``overlay:`` section of the user config over the defaults.

    Unknown keys and values of the wrong type are ignored.
    """
    if data is None:
        data = load_config()
    section = data.get("overlay")
    base = OverlayConfig()
    if not isinstance(section, dict):
        return base

    overrides = {}
    for f in fields(OverlayConfig):
        if f.name not in section:
            continue
        coerced = _coerce(f.name, section[f.name], getattr(base, f.name))
        if coerced is not None:
            overrides[f.name] = coerced
    return replace(base, **overrides)


DEFAULT_CONFIG_TEMPLATE = """\
# aerogrid configuration
overlay:
  # Seconds a full fetch stays fresh for non-forced refreshes
  cache_ttl: 10
  # Background polling (disabled while refresh_on_demand_only is true)
  refresh_on_demand_only: true
  poll_interval: 60
  active_window: 300
  idle_threshold: 60
  # Timeout for each aerospace invocation
  command_timeout: 5
  # Push channel: aerospace exec-on-workspace-change posts here
  push_enabled: true
  push_port: 18901
  refresh_on_workspace_change: false
  # Fallback channel
  file_watch_enabled: true
  workspace_file: /tmp/aerospace-current-workspace
  aerospace_bin: /opt/homebrew/bin/aerospace
  # "all" or "per-workspace" (for aerospace versions where --all hangs)
  windows_query_mode: all
"""
