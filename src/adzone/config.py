"""Configuration persistence: load and save."""

from __future__ import annotations

import json
import logging
import math
import os
import tempfile
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir

from adzone.models import (
    CONFIG_APP_NAME,
    DEFAULT_ADVANCE_DELAY,
    DEFAULT_BOTTOM_EPSILON,
    DEFAULT_NOISE_THRESHOLD,
    DEFAULT_PAGE_SIZE,
    DEFAULT_TRIGGER_MARGIN,
    DEFAULT_TRIGGER_THRESHOLD,
    DEFAULT_VELOCITY,
    FeedSettings,
    UserConfig,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Configuration Persistence
# ============================================================================
#
# Validation contract: _dict_to_config() guarantees valid output for any input:
#
#   Field                   Rule                 Handler
#   ──────────────────────  ───────────────────  ─────────────────────────
#   feed.page_size          1 ≤ x ≤ 100          FeedSettings.__post_init__
#   feed.trigger_threshold  0 ≤ x ≤ 1            FeedSettings.__post_init__
#   feed.velocity           x > 0                FeedSettings.__post_init__
#   other feed floats       x ≥ 0                FeedSettings.__post_init__
#   numeric fields          int/float, not bool  _safe_number
#   scalar fields           type-checked         _safe_get
#
CONFIG_FILENAME = "config.json"


def get_config_path() -> Path:
    """Get the path to the configuration file.

    Uses platformdirs for cross-platform config directory:
    - Linux: ~/.config/adzone/config.json
    - macOS: ~/Library/Application Support/adzone/config.json
    - Windows: %APPDATA%/adzone/config.json
    """
    config_dir = Path(user_config_dir(CONFIG_APP_NAME))
    return config_dir / CONFIG_FILENAME


def _config_to_dict(config: UserConfig) -> dict[str, Any]:
    """Serialize UserConfig to a JSON-compatible dictionary."""
    feed = config.feed
    return {
        "version": config.version,
        "db_path": config.db_path,
        "admin_session": config.admin_session,
        "seed_sample_data": config.seed_sample_data,
        "feed": {
            "page_size": feed.page_size,
            "trigger_margin": feed.trigger_margin,
            "trigger_threshold": feed.trigger_threshold,
            "velocity": feed.velocity,
            "bottom_epsilon": feed.bottom_epsilon,
            "noise_threshold": feed.noise_threshold,
            "advance_delay": feed.advance_delay,
            "autoscroll_enabled": feed.autoscroll_enabled,
        },
    }


def _safe_get(data: dict, key: str, default: Any, expected_type: type) -> Any:
    """Safely get a value from dict with type validation.

    Returns the default if key is missing or value has wrong type.
    """
    value = data.get(key, default)
    if not isinstance(value, expected_type):
        return default
    return value


def _safe_number(data: dict, key: str, default: float) -> float:
    """Like _safe_get for finite numbers. Bools are rejected even though they are ints."""
    value = data.get(key, default)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return default
    if not math.isfinite(value):
        return default
    return value


def _parse_feed_settings(data: dict[str, Any]) -> FeedSettings:
    raw = _safe_get(data, "feed", {}, dict)
    page_size = _safe_number(raw, "page_size", DEFAULT_PAGE_SIZE)
    return FeedSettings(
        page_size=int(page_size),
        trigger_margin=_safe_number(raw, "trigger_margin", DEFAULT_TRIGGER_MARGIN),
        trigger_threshold=_safe_number(raw, "trigger_threshold", DEFAULT_TRIGGER_THRESHOLD),
        velocity=_safe_number(raw, "velocity", DEFAULT_VELOCITY),
        bottom_epsilon=_safe_number(raw, "bottom_epsilon", DEFAULT_BOTTOM_EPSILON),
        noise_threshold=_safe_number(raw, "noise_threshold", DEFAULT_NOISE_THRESHOLD),
        advance_delay=_safe_number(raw, "advance_delay", DEFAULT_ADVANCE_DELAY),
        autoscroll_enabled=_safe_get(raw, "autoscroll_enabled", True, bool),
    )


def _dict_to_config(data: dict[str, Any]) -> UserConfig:
    """Deserialize a dictionary to UserConfig with type validation."""
    if not isinstance(data, dict):
        raise TypeError(f"Expected a JSON object, got {type(data).__name__}")
    return UserConfig(
        feed=_parse_feed_settings(data),
        db_path=_safe_get(data, "db_path", "", str),
        admin_session=_safe_get(data, "admin_session", False, bool),
        seed_sample_data=_safe_get(data, "seed_sample_data", True, bool),
        version=_safe_get(data, "version", 1, int),
    )


def load_config() -> UserConfig:
    """Load configuration from disk.

    Returns default config if file doesn't exist or is corrupted.
    """
    config_path = get_config_path()

    if not config_path.exists():
        return UserConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
        return _dict_to_config(data)
    except json.JSONDecodeError as e:
        logger.warning("Config file has invalid JSON, using defaults: %s", e)
        return UserConfig()
    except (KeyError, TypeError, ValueError) as e:
        logger.warning("Config file has invalid structure, using defaults: %s", e)
        return UserConfig()
    except OSError as e:
        logger.warning("Could not read config file, using defaults: %s", e)
        return UserConfig()


def save_config(config: UserConfig) -> bool:
    """Save configuration to disk atomically.

    Writes to a temp file in the same directory and then os.replace()s it
    over the config file. Returns True on success, False on failure.
    """
    config_path = get_config_path()

    try:
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = _config_to_dict(config)
        json_str = json.dumps(data, indent=2, ensure_ascii=False)
        fd, tmp_path = tempfile.mkstemp(dir=config_path.parent, suffix=".tmp", prefix=".config-")
        closed = False
        try:
            os.write(fd, json_str.encode("utf-8"))
            os.close(fd)
            closed = True
            os.replace(tmp_path, config_path)
        except BaseException:
            if not closed:
                os.close(fd)
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise
        return True
    except OSError as e:
        logger.error("Failed to save config: %s", e)
        return False


__all__ = [
    "CONFIG_FILENAME",
    "get_config_path",
    "load_config",
    "save_config",
]
