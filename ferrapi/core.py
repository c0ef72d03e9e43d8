"""ferrapi core - config loading, store location, namespace paths."""

import os
import re
from pathlib import Path

import yaml
from dotenv import dotenv_values

from ferrapi.errors import ValidationError

GLOBAL_DIR = Path.home() / ".ferrapi_tester"
GLOBAL_CONFIG = GLOBAL_DIR / "config.yaml"

CWD_CONFIG_CANDIDATES = [
    ".ferrapi.yaml",
    ".ferrapi.yml",
    "ferrapi.yaml",
    "ferrapi.yml",
]

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")
URL_PREFIXES = ("http://", "https://")
RECORD_EXT = ".json"
DEFAULT_TIMEOUT = 30


def resolve_path(
    candidates: list[Path],
    default: Path | None = None,
) -> Path | None:
    """Return the first existing path from candidates, else default."""
    for p in candidates:
        if p.exists():
            return p.resolve()
    return default


def resolve_config_path(config_file: str | None) -> Path | None:
    """Find the config file to use.

    Resolution order:
      1. Explicit -c flag (hard — no fallthrough if missing)
      2. .ferrapi.yaml (variants) in CWD
      3. ~/.ferrapi_tester/config.yaml
    """
    if config_file:
        return resolve_path([Path(config_file)])
    return resolve_path([Path(c) for c in CWD_CONFIG_CANDIDATES] + [GLOBAL_CONFIG])


def load_config(config_path: str | Path | None) -> dict:
    """Load YAML config file. Returns empty defaults if not found.

    Stores '_config_dir' in the returned dict so store_dir can be
    resolved relative to the config file.
    """
    if config_path is None:
        return {"defaults": {}, "_config_dir": None}
    path = Path(config_path)
    if not path.exists():
        return {"defaults": {}, "_config_dir": None}
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    return {
        "defaults": data.get("defaults") or {},
        "_config_dir": path.resolve().parent,
    }


def resolve_store_dir(cli_override: str | None, config: dict) -> Path:
    """Find the record store root.

    Resolution order:
      1. --store-dir CLI flag (absolute or relative to CWD)
      2. store_dir from config defaults (relative to config file)
      3. ~/.ferrapi_tester/

    The directory does not have to exist yet; save creates it.
    """
    if cli_override:
        p = Path(cli_override)
        if not p.is_absolute():
            p = Path.cwd() / p
        return p

    config_value = config.get("defaults", {}).get("store_dir")
    config_dir = config.get("_config_dir")
    if config_value:
        p = Path(config_value).expanduser()
        if not p.is_absolute() and config_dir:
            p = Path(config_dir) / p
        return p

    return GLOBAL_DIR


def load_env(env_file: str | None, base_dir: str | Path = ".") -> dict[str, str]:
    """Load .env file and merge with os.environ.

    .env values take precedence over os.environ.
    """
    env = dict(os.environ)
    if env_file:
        dotenv_path = Path(base_dir) / env_file
        if dotenv_path.exists():
            dotenv_vars = dotenv_values(str(dotenv_path))
            env.update({k: v for k, v in dotenv_vars.items() if v is not None})
    return env


def resolve_value(value: str | None, env: dict[str, str]) -> str | None:
    """Resolve $VAR and ${VAR} references in a string value.

    Unknown variables are left as written.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value

    def _replace(m: re.Match) -> str:
        var_name = m.group(1) or m.group(2)
        return env.get(var_name, os.environ.get(var_name, m.group(0)))

    return re.sub(r"\$\{([^}]+)\}|\$([A-Za-z_][A-Za-z0-9_]*)", _replace, value)


# ── Namespace paths ──────────────────────────────────────────────────────


def is_url(target: str | None) -> bool:
    """True when a TARGET is a literal destination URL, not a namespace."""
    return bool(target) and target.startswith(URL_PREFIXES)


def normalize_method(method: str | None) -> str:
    """Upper-case an HTTP method and reject anything unsupported."""
    if not method:
        raise ValidationError("HTTP method is not specified")
    upper = method.strip().upper()
    if upper not in SUPPORTED_METHODS:
        raise ValidationError(
            f"Unsupported HTTP method: {method} (expected one of {', '.join(SUPPORTED_METHODS)})",
        )
    return upper


def split_namespace(namespace: str) -> list[str]:
    """Split a namespace into path segments.

    Leading/trailing slashes are ignored. Empty, '.' and '..' segments
    and backslashes are rejected so a namespace can only address
    directories below the store root.
    """
    if namespace is None or not namespace.strip("/"):
        raise ValidationError("Namespace is empty")
    if "\\" in namespace:
        raise ValidationError(f"Invalid namespace '{namespace}': backslashes are not allowed")
    segments = namespace.strip("/").split("/")
    for seg in segments:
        if seg in ("", ".", ".."):
            raise ValidationError(
                f"Invalid namespace '{namespace}': empty, '.' and '..' segments are not allowed",
            )
    return segments


def namespace_dir(store_dir: Path, namespace: str) -> Path:
    """Directory holding every record of a namespace."""
    return Path(store_dir).joinpath(*split_namespace(namespace))


def resolve_record_path(store_dir: Path, namespace: str, method: str) -> Path:
    """Location of the record for (namespace, method).

    e.g. ~/.ferrapi_tester/SystemA/example/POST.json
    Pure: the filesystem is not touched.
    """
    return namespace_dir(store_dir, namespace) / f"{method.upper()}{RECORD_EXT}"
