"""Project configuration loaded from the Warden ``.env`` file.

The ``.env`` at the project root is shared with warden itself. Only the
handful of keys the bootstrap needs are surfaced as typed attributes; the
raw mapping stays available for anything else.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .result import Err, Ok, Result

__all__ = [
    "ADMIN_FRONTNAME",
    "DEFAULT_DB_DUMP",
    "ConfigError",
    "EnvConfig",
    "load_env_config",
    "normalize_web_root",
    "parse_env_text",
]

DEFAULT_DB_DUMP = "./backfill/magento-db.sql.gz"
ADMIN_FRONTNAME = "backend"

_REQUIRED_KEYS = ("TRAEFIK_DOMAIN", "TRAEFIK_SUBDOMAIN")


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the project configuration cannot be loaded."""

    message: str
    path: Path | None = None
    hint: str | None = None


def _empty_values() -> dict[str, str]:
    return {}


@dataclass(frozen=True, slots=True)
class EnvConfig:
    """Typed view over the project ``.env``.

    Attributes:
        traefik_domain: Domain served by the warden reverse proxy
        traefik_subdomain: Subdomain of this project under that domain
        web_root: Application root relative to the project (``./`` prefixed)
        db_dump: Database dump to import, relative to the project root
        values: All parsed key/value pairs
    """

    traefik_domain: str
    traefik_subdomain: str
    web_root: str = "./"
    db_dump: str = DEFAULT_DB_DUMP
    values: dict[str, str] = field(default_factory=_empty_values)

    @property
    def front_url(self) -> str:
        return f"https://{self.traefik_subdomain}.{self.traefik_domain}/"

    @property
    def admin_url(self) -> str:
        return f"{self.front_url}{ADMIN_FRONTNAME}/"

    @classmethod
    def from_values(
        cls,
        values: Mapping[str, str],
        environ: Mapping[str, str] | None = None,
    ) -> EnvConfig:
        """Build a config from parsed ``.env`` values.

        ``DB_DUMP`` from the file takes precedence over the process environment.

        Raises:
            KeyError: If a required key is missing or empty.
        """
        missing = [key for key in _REQUIRED_KEYS if not values.get(key)]
        if missing:
            raise KeyError(", ".join(missing))

        environ = os.environ if environ is None else environ
        db_dump = values.get("DB_DUMP") or environ.get("DB_DUMP") or DEFAULT_DB_DUMP

        return cls(
            traefik_domain=values["TRAEFIK_DOMAIN"],
            traefik_subdomain=values["TRAEFIK_SUBDOMAIN"],
            web_root=normalize_web_root(values.get("WARDEN_WEB_ROOT", "")),
            db_dump=db_dump,
            values=dict(values),
        )


def normalize_web_root(value: str) -> str:
    """Turn an absolute-looking web root into a project-relative one.

    Example:
        normalize_web_root("") -> "./"
        normalize_web_root("/pub") -> "./pub"
    """
    value = value or "/"
    if value.startswith("/"):
        return "." + value
    return value


def parse_env_text(content: str) -> dict[str, str]:
    """Parse ``.env`` content into a key/value dict.

    Handles ``KEY=value``, ``export KEY=value``, single or double quoted
    values, comments and blank lines. Variable references are kept verbatim.
    """
    result: dict[str, str] = {}
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if line.startswith("export "):
            line = line[7:].strip()

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip()
        value = value.strip()

        if len(value) >= 2 and value[0] == value[-1] and value[0] in ('"', "'"):
            value = value[1:-1]

        result[key] = value

    return result


def load_env_config(path: Path) -> Result[EnvConfig, ConfigError]:
    """Load and validate the project ``.env``.

    Args:
        path: Path to the ``.env`` file

    Returns:
        Ok(EnvConfig) on success, Err(ConfigError) on failure
    """
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))

    try:
        return Ok(EnvConfig.from_values(parse_env_text(content)))
    except KeyError as e:
        return Err(
            ConfigError(
                f"Missing required setting(s) in {path.name}: {e.args[0]}",
                path=path,
                hint="Run 'warden env-init <name> magento2' to generate a complete .env",
            )
        )
