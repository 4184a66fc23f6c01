from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

from bot_link.runtime import DriverConfig
from navigation.fsm import NavigatorConfig

from .schema import LoggingConfig, NavigatorProfile


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

PROJECT_ROOT = Path(__file__).resolve().parents[2]
CONFIG_ROOT = PROJECT_ROOT / "config"
DEFAULT_CONFIG_PATH = CONFIG_ROOT / "navigator.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _load_yaml(path: Path) -> Dict[str, Any]:
    """Load a YAML config file that must hold a mapping."""
    if not path.exists():
        raise FileNotFoundError(f"Missing config file: {path}")
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected mapping at top of {path}, got {type(data)}")
    return data


def _select_profile(cfg: Dict[str, Any], override: Optional[str]) -> Tuple[str, Dict[str, Any]]:
    """Return (active_profile_name, active_profile_mapping)."""
    profile_name = override or cfg.get("profile")
    if not profile_name:
        raise ValueError("navigator.yaml must define a 'profile' key.")
    profiles = cfg.get("profiles")
    if not isinstance(profiles, dict):
        raise ValueError("navigator.yaml must define a 'profiles' mapping.")
    if profile_name not in profiles:
        raise KeyError(f"Profile '{profile_name}' not found in navigator.yaml profiles.")
    return profile_name, profiles[profile_name] or {}


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) or {}
    if not isinstance(value, dict):
        raise ValueError(f"Section '{key}' must be a mapping, got {type(value)}")
    return value


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_navigator_profile(
    path: Optional[Path | str] = None,
    profile: Optional[str] = None,
) -> NavigatorProfile:
    """Main entry point: returns a fully resolved NavigatorProfile."""
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH
    cfg = _load_yaml(config_path)

    # Determine which profile is active and get its mapping
    active_name, active = _select_profile(cfg, profile)

    nav_raw = _section(active, "navigator")
    defaults = NavigatorConfig()
    navigator = NavigatorConfig(
        max_steps=int(nav_raw.get("max_steps", defaults.max_steps)),
        max_search_nodes=int(nav_raw.get("max_search_nodes", defaults.max_search_nodes)),
        arrival_tolerance=int(nav_raw.get("arrival_tolerance", defaults.arrival_tolerance)),
    )

    drv_raw = _section(active, "driver")
    drv_defaults = DriverConfig()
    max_turns = drv_raw.get("max_turns")
    driver = DriverConfig(
        poll_interval_s=float(drv_raw.get("poll_interval_s", drv_defaults.poll_interval_s)),
        max_turns=int(max_turns) if max_turns is not None else None,
    )

    log_raw = _section(active, "logging")
    logging_cfg = LoggingConfig(
        level=str(log_raw.get("level", "INFO")).upper(),
        events_path=log_raw.get("events_path"),
    )

    resolved = NavigatorProfile(
        name=active_name,
        navigator=navigator,
        driver=driver,
        logging=logging_cfg,
    )
    _validate_profile(resolved)
    return resolved


def _validate_profile(profile: NavigatorProfile) -> None:
    """Minimal sanity checks for a resolved profile."""
    nav = profile.navigator
    if nav.max_steps <= 0:
        raise ValueError(f"max_steps must be positive, got {nav.max_steps}")
    if nav.max_search_nodes <= 0:
        raise ValueError(f"max_search_nodes must be positive, got {nav.max_search_nodes}")
    if nav.arrival_tolerance < 0:
        raise ValueError(f"arrival_tolerance must be >= 0, got {nav.arrival_tolerance}")

    drv = profile.driver
    if drv.poll_interval_s < 0:
        raise ValueError(f"poll_interval_s must be >= 0, got {drv.poll_interval_s}")
    if drv.max_turns is not None and drv.max_turns <= 0:
        raise ValueError(f"max_turns must be positive when set, got {drv.max_turns}")

    if profile.logging.level not in _LOG_LEVELS:
        raise ValueError(f"Invalid logging level: {profile.logging.level}")
