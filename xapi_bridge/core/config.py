"""
Configuration.

Application settings come from config/settings/application.yaml under the
project root, deep-merged over built-in defaults so the CLI also works
when installed without a checkout. Connection parameters are resolved as
flag > environment variable > YAML > default; click handles the first two.
"""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

PROJECT_MARKER = ".project_root"
SETTINGS_DIR = Path("config") / "settings"

DEFAULT_APP_CONFIG: dict[str, Any] = {
    "application": {
        "name": "xapi-json",
        "description": "CLI bridge from xapi XML-RPC calls to JSON",
    },
    "connection": {
        "host": "http://127.0.0.1",
        "user": "guest",
        "password": "guest",
        "timeout": 60.0,
        "verify_tls": True,
    },
}

# Module-level cache, reset by tests
_app_config: "AppConfig | None" = None


@dataclass(frozen=True)
class AppConfig:
    application: dict[str, Any]
    connection: dict[str, Any]


@dataclass(frozen=True)
class ConnectionSettings:
    """Fully resolved parameters for one invocation."""

    host: str
    user: str
    password: str
    timeout: float
    verify_tls: bool

    def __repr__(self) -> str:
        return (
            f"ConnectionSettings(host={self.host!r}, user={self.user!r}, "
            f"password='***', timeout={self.timeout!r}, verify_tls={self.verify_tls!r})"
        )


def find_project_root(start: Path | None = None) -> Path | None:
    """
    Locate the directory holding the .project_root marker.

    Walks up from ``start`` (default: the working directory), then tries the
    source checkout this package lives in.

    Returns:
        The project root, or None when running from an installed package
        outside any checkout.
    """
    start = (start or Path.cwd()).resolve()
    for candidate in (start, *start.parents):
        if (candidate / PROJECT_MARKER).exists():
            return candidate

    checkout = Path(__file__).resolve().parents[2]
    if (checkout / PROJECT_MARKER).exists():
        return checkout
    return None


def load_settings_file(name: str) -> dict[str, Any]:
    """Read config/settings/<name> from the project root, {} when absent."""
    root = find_project_root()
    if root is None:
        return {}

    path = root / SETTINGS_DIR / name
    if not path.is_file():
        return {}

    with path.open(encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a YAML mapping, got {type(data).__name__}")
    return data


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _load_app_config() -> AppConfig:
    data = _deep_merge(DEFAULT_APP_CONFIG, load_settings_file("application.yaml"))
    return AppConfig(
        application=data["application"],
        connection=data["connection"],
    )


def get_app_config() -> AppConfig:
    """Get the application config, loading it on first use."""
    global _app_config
    if _app_config is None:
        _app_config = _load_app_config()
    return _app_config


def resolve_connection(
    host: str | None = None,
    user: str | None = None,
    password: str | None = None,
    timeout: float | None = None,
) -> ConnectionSettings:
    """
    Fill unset connection parameters from the application config.

    Args:
        host: Server URL from flag or environment, if given.
        user: User name from flag or environment, if given.
        password: Password from flag or environment, if given.
        timeout: Per-request timeout in seconds, if given.

    Returns:
        ConnectionSettings with every field populated.
    """
    defaults = get_app_config().connection
    return ConnectionSettings(
        host=host if host is not None else str(defaults["host"]),
        user=user if user is not None else str(defaults["user"]),
        password=password if password is not None else str(defaults["password"]),
        timeout=float(timeout if timeout is not None else defaults["timeout"]),
        verify_tls=bool(defaults["verify_tls"]),
    )
