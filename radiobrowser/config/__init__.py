"""Client configuration.

Values come from constructor arguments or from environment variables,
with .env file support. Configuration is an immutable object passed into
the client; nothing here is mutated at runtime.
"""

import dataclasses
import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import dotenv_values

from radiobrowser.utilities.logging import DEFAULT_CATEGORIES, LogCategory, LogConfiguration

# =============================================================================
# VERSION - Read from pyproject.toml (single source of truth)
# =============================================================================


def _get_version() -> str:
    """Read version - prefer pyproject.toml, fall back to installed metadata."""
    try:
        import tomllib

        pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
        if pyproject_path.exists():
            with open(pyproject_path, "rb") as f:
                data = tomllib.load(f)
                return data.get("project", {}).get("version", "0.0.0")
    except (OSError, KeyError, ValueError):
        pass

    try:
        from importlib.metadata import PackageNotFoundError, version

        return version("radiobrowser")
    except (ImportError, PackageNotFoundError):
        pass

    return "0.0.0"


VERSION = _get_version()

USER_AGENT = f"radiobrowser-python/{VERSION}"

# Well-known address used only to discover mirrors
DEFAULT_BOOTSTRAP_URL = "https://all.api.radio-browser.info"

DEFAULT_TIMEOUT = 30.0

# Environment variable that pins every request to one mirror
BASE_URL_ENV = "RADIO_BROWSER_BASE_URL"


def _env_bool(env: Mapping[str, str | None], name: str, default: bool) -> bool:
    raw = env.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_float(env: Mapping[str, str | None], name: str, default: float) -> float:
    raw = env.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_categories(env: Mapping[str, str | None], name: str) -> frozenset[LogCategory]:
    raw = env.get(name)
    if raw is None:
        return DEFAULT_CATEGORIES
    categories = set()
    for part in raw.split(","):
        part = part.strip().lower()
        if not part:
            continue
        try:
            categories.add(LogCategory(part))
        except ValueError:
            continue
    return frozenset(categories)


def _env_level(env: Mapping[str, str | None], name: str, default: int) -> int:
    raw = env.get(name)
    if not raw:
        return default
    level = logging.getLevelName(raw.strip().upper())
    return level if isinstance(level, int) else default


@dataclass(frozen=True)
class RadioBrowserConfig:
    """Settings for one RadioBrowser client instance.

    base_url: fixed mirror; when set, discovery never runs
    bootstrap_url: where the mirror list is fetched, and the fallback mirror
    timeout: per-request timeout in seconds
    """

    base_url: str | None = None
    bootstrap_url: str = DEFAULT_BOOTSTRAP_URL
    timeout: float = DEFAULT_TIMEOUT
    user_agent: str = USER_AGENT
    logging: LogConfiguration = field(default_factory=LogConfiguration)

    @property
    def resource_timeout(self) -> float:
        """Upper bound for a whole exchange, including connection setup."""
        return self.timeout * 2

    def with_overrides(self, **changes) -> "RadioBrowserConfig":
        return dataclasses.replace(self, **changes)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "RadioBrowserConfig":
        """Build a configuration from environment variables.

        When env_file is given its values are read as defaults; variables
        set in the process environment win. os.environ is never modified.
        """
        env: dict[str, str | None] = dict(dotenv_values(env_file)) if env_file else {}
        env.update(os.environ)

        log_config = LogConfiguration(
            enabled=_env_categories(env, "RADIO_BROWSER_LOG_CATEGORIES"),
            min_level=_env_level(env, "RADIO_BROWSER_LOG_LEVEL", logging.INFO),
            redact_pii=_env_bool(env, "RADIO_BROWSER_REDACT_PII", True),
            emit_curl=_env_bool(env, "RADIO_BROWSER_EMIT_CURL", False),
        )
        return cls(
            base_url=env.get(BASE_URL_ENV) or None,
            bootstrap_url=env.get("RADIO_BROWSER_BOOTSTRAP_URL") or DEFAULT_BOOTSTRAP_URL,
            timeout=_env_float(env, "RADIO_BROWSER_TIMEOUT", DEFAULT_TIMEOUT),
            logging=log_config,
        )
