"""Configuration management for the PJUD case scraper.

This module loads configuration from TOML files if present:
- `config.private.toml` (local, not checked into VCS)
- `config.toml` (project-level)

Values are read from the `[app]` section of the loaded config first, then
fall back to `PJUD_*` environment variables, then to built-in defaults.
"""

import os
import tomllib
from pathlib import Path
from typing import Optional

# Default values
DEFAULT_ENTRY_URL = "https://oficinajudicialvirtual.pjud.cl/indexN.php"
DEFAULT_HEADLESS = True
DEFAULT_STEALTH = True

DEFAULT_PAGE_LOAD_TIMEOUT_SECONDS = 30
DEFAULT_ELEMENT_TIMEOUT_SECONDS = 15
DEFAULT_NAVIGATION_TIMEOUT_SECONDS = 30

DEFAULT_HISTORY_KEEP_COUNT = 3
DEFAULT_HISTORY_LAYOUT = "9"

DEFAULT_MAX_WORKERS = 2
DEFAULT_MAX_LOG_LINES = 1000

DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_LOG_FILE = "logs/scraper.log"

DEFAULT_SAVE_FAILURE_HTML = False
DEFAULT_DIAGNOSTICS_DIR = "logs"


def _load_toml_config() -> dict:
    """Load config from `config.private.toml` then `config.toml` if available.

    Returns a dict with merged values (private overrides project file).
    """
    cfg: dict = {}
    cwd = Path.cwd()
    for fname in ("config.toml", "config.private.toml"):
        p = cwd / fname
        if not p.exists():
            continue
        try:
            with open(p, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            # Ignore unreadable files and continue
            continue
        # shallow merge, later files win
        for k, v in data.items():
            if isinstance(v, dict) and isinstance(cfg.get(k), dict):
                cfg[k].update(v)
            else:
                cfg[k] = v
    return cfg


_CONFIG = _load_toml_config()


def reload_config() -> None:
    """Re-read the TOML files from the current working directory."""
    global _CONFIG
    _CONFIG = _load_toml_config()


def _get_from_config(section: str, key: str):
    section_data = _CONFIG.get(section)
    if not isinstance(section_data, dict):
        return None
    return section_data.get(key)


def _as_bool(val, default: bool) -> bool:
    if val is None:
        return default
    if isinstance(val, str):
        return val.strip().lower() == "true"
    return bool(val)


class Config:
    """Configuration accessors.

    Every accessor prefers the TOML value, then the environment, then the default.
    """

    @classmethod
    def get_entry_url(cls) -> str:
        return (
            _get_from_config("app", "entry_url")
            or os.getenv("PJUD_ENTRY_URL")
            or DEFAULT_ENTRY_URL
        )

    @classmethod
    def get_headless(cls) -> bool:
        val = _get_from_config("app", "headless")
        if val is None:
            val = os.getenv("PJUD_HEADLESS")
        return _as_bool(val, DEFAULT_HEADLESS)

    @classmethod
    def get_stealth(cls) -> bool:
        val = _get_from_config("app", "stealth")
        if val is None:
            val = os.getenv("PJUD_STEALTH")
        return _as_bool(val, DEFAULT_STEALTH)

    @classmethod
    def get_page_load_timeout_seconds(cls) -> int:
        return int(
            _get_from_config("app", "page_load_timeout_seconds")
            or os.getenv("PJUD_PAGE_LOAD_TIMEOUT_SECONDS")
            or DEFAULT_PAGE_LOAD_TIMEOUT_SECONDS
        )

    @classmethod
    def get_element_timeout_seconds(cls) -> int:
        return int(
            _get_from_config("app", "element_timeout_seconds")
            or os.getenv("PJUD_ELEMENT_TIMEOUT_SECONDS")
            or DEFAULT_ELEMENT_TIMEOUT_SECONDS
        )

    @classmethod
    def get_navigation_timeout_seconds(cls) -> int:
        return int(
            _get_from_config("app", "navigation_timeout_seconds")
            or os.getenv("PJUD_NAVIGATION_TIMEOUT_SECONDS")
            or DEFAULT_NAVIGATION_TIMEOUT_SECONDS
        )

    @classmethod
    def get_history_keep_count(cls) -> int:
        return int(
            _get_from_config("app", "history_keep_count")
            or os.getenv("PJUD_HISTORY_KEEP_COUNT")
            or DEFAULT_HISTORY_KEEP_COUNT
        )

    @classmethod
    def get_history_layout(cls) -> str:
        return str(
            _get_from_config("app", "history_layout")
            or os.getenv("PJUD_HISTORY_LAYOUT")
            or DEFAULT_HISTORY_LAYOUT
        )

    @classmethod
    def get_proxies(cls) -> list[str]:
        val = _get_from_config("app", "proxies")
        if val is None:
            raw = os.getenv("PJUD_PROXIES") or ""
            val = raw.split(",")
        if isinstance(val, str):
            val = [val]
        return [p.strip() for p in val if p and p.strip()]

    @classmethod
    def get_max_workers(cls) -> int:
        return int(
            _get_from_config("app", "max_workers")
            or os.getenv("PJUD_MAX_WORKERS")
            or DEFAULT_MAX_WORKERS
        )

    @classmethod
    def get_max_log_lines(cls) -> int:
        return int(
            _get_from_config("app", "max_log_lines")
            or os.getenv("PJUD_MAX_LOG_LINES")
            or DEFAULT_MAX_LOG_LINES
        )

    @classmethod
    def get_log_level(cls) -> str:
        return (
            _get_from_config("app", "log_level")
            or os.getenv("PJUD_LOG_LEVEL")
            or DEFAULT_LOG_LEVEL
        )

    @classmethod
    def get_log_file(cls) -> Optional[str]:
        return (
            _get_from_config("app", "log_file")
            or os.getenv("PJUD_LOG_FILE")
            or DEFAULT_LOG_FILE
        )

    @classmethod
    def get_save_failure_html(cls) -> bool:
        val = _get_from_config("app", "save_failure_html")
        if val is None:
            val = os.getenv("PJUD_SAVE_FAILURE_HTML")
        return _as_bool(val, DEFAULT_SAVE_FAILURE_HTML)

    @classmethod
    def get_diagnostics_dir(cls) -> str:
        return (
            _get_from_config("app", "diagnostics_dir")
            or os.getenv("PJUD_DIAGNOSTICS_DIR")
            or DEFAULT_DIAGNOSTICS_DIR
        )
