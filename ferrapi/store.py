"""ferrapi store - persisted request records, one JSON file per (namespace, method)."""

import json
import shutil
from pathlib import Path
from typing import Any

from ferrapi.core import RECORD_EXT, SUPPORTED_METHODS
from ferrapi.errors import ParseError, StoreError

RECORD_FIELDS = ("url", "method", "headers", "data", "timeout")


def _validate_record(data: Any, path: Path) -> dict:
    """Check a decoded JSON value against the record schema."""
    if not isinstance(data, dict):
        raise ParseError(f"Failed to parse saved configuration {path}: expected a JSON object")

    unknown = sorted(set(data) - set(RECORD_FIELDS))
    if unknown:
        raise ParseError(
            f"Failed to parse saved configuration {path}: unknown field(s) {', '.join(unknown)}",
        )

    record: dict[str, Any] = {}
    for key in ("url", "method"):
        value = data.get(key)
        if value is None:
            continue
        if not isinstance(value, str):
            raise ParseError(f"Failed to parse saved configuration {path}: '{key}' must be a string")
        record[key] = value

    headers = data.get("headers")
    if headers is not None:
        if not isinstance(headers, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in headers.items()
        ):
            raise ParseError(
                f"Failed to parse saved configuration {path}: 'headers' must map strings to strings",
            )
        record["headers"] = dict(headers)

    # null data is the same as no data
    if data.get("data") is not None:
        record["data"] = data["data"]

    timeout = data.get("timeout")
    if timeout is not None:
        if isinstance(timeout, bool) or not isinstance(timeout, int) or timeout < 0:
            raise ParseError(
                f"Failed to parse saved configuration {path}: 'timeout' must be a non-negative integer",
            )
        record["timeout"] = timeout

    return record


def load_record(path: Path) -> dict:
    """Load the record at path.

    A missing file is not an error: returns an empty record so the
    invocation falls back to its own values.
    """
    path = Path(path)
    if not path.is_file():
        return {}
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(f"Failed to parse saved configuration {path}: {e}") from e
    except OSError as e:
        raise StoreError(f"Failed to read config from {path}: {e}") from e
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ParseError(f"Failed to parse saved configuration {path}: {e}") from e
    return _validate_record(data, path)


def save_record(record: dict, path: Path) -> Path:
    """Write record to path, replacing whatever was there."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StoreError(f"Failed to create directory {path.parent}: {e}") from e

    serialized = json.dumps({k: record[k] for k in RECORD_FIELDS if k in record}, indent=2)
    try:
        path.write_text(serialized + "\n", encoding="utf-8")
    except OSError as e:
        raise StoreError(f"Failed to write configuration to {path}: {e}") from e
    return path


def delete_record(path: Path, store_dir: Path | None = None) -> bool:
    """Remove one record file. Returns False if there was nothing to delete.

    When store_dir is given, namespace directories left empty by the
    removal are pruned up to (not including) store_dir.
    """
    path = Path(path)
    if not path.is_file():
        return False
    try:
        path.unlink()
    except OSError as e:
        raise StoreError(f"Failed to delete {path}: {e}") from e
    if store_dir is not None:
        _prune_empty_dirs(path.parent, Path(store_dir))
    return True


def _prune_empty_dirs(directory: Path, stop_at: Path) -> None:
    stop_at = stop_at.resolve()
    current = directory.resolve()
    while current != stop_at and stop_at in current.parents:
        try:
            current.rmdir()
        except OSError:
            # not empty (or not removable) - leave it and everything above
            return
        current = current.parent


def delete_namespace(path: Path, store_dir: Path | None = None) -> bool:
    """Remove a namespace directory with every record and sub-namespace under it.

    Returns False if the namespace does not exist. Irreversible. When
    store_dir is given, parent namespaces left empty are pruned too.
    """
    path = Path(path)
    if not path.is_dir():
        return False
    try:
        shutil.rmtree(path)
    except OSError as e:
        raise StoreError(f"Failed to delete {path}: {e}") from e
    if store_dir is not None:
        _prune_empty_dirs(path.parent, Path(store_dir))
    return True


def list_records(store_dir: Path) -> list[tuple[str, str]]:
    """Every stored (namespace, METHOD) pair under store_dir, sorted."""
    store_dir = Path(store_dir)
    if not store_dir.is_dir():
        return []
    records: list[tuple[str, str]] = []
    for f in store_dir.rglob(f"*{RECORD_EXT}"):
        method = f.stem
        if not f.is_file() or method not in SUPPORTED_METHODS or f.parent == store_dir:
            continue
        namespace = f.parent.relative_to(store_dir).as_posix()
        records.append((namespace, method))
    return sorted(records)
