"""Shared fixtures for ferrapi scenario tests."""

import json
import os

import pytest
from click.testing import CliRunner

from ferrapi import core
from ferrapi.executor import RequestResult


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def store_dir(tmp_path, monkeypatch):
    """Override the global ~/.ferrapi_tester directory to a temp location.

    Also moves into an empty CWD so no project config is picked up.
    """
    fake_global = tmp_path / "fake_home" / ".ferrapi_tester"
    fake_global.mkdir(parents=True)
    monkeypatch.setattr(core, "GLOBAL_DIR", fake_global)
    monkeypatch.setattr(core, "GLOBAL_CONFIG", fake_global / "config.yaml")
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return fake_global


@pytest.fixture
def clean_env(monkeypatch):
    """Remove variables the placeholder tests rely on."""
    for name in ("API_TOKEN", "API_HOST"):
        monkeypatch.delenv(name, raising=False)
    return os.environ


def write_record(store, namespace, method, record):
    """Write a record file by hand, bypassing the store module."""
    path = store.joinpath(*namespace.split("/")) / f"{method}.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(record))
    return path


def read_record(store, namespace, method):
    path = store.joinpath(*namespace.split("/")) / f"{method}.json"
    return json.loads(path.read_text())


def make_dirs(root, *namespaces):
    for ns in namespaces:
        (root / ns).mkdir(parents=True, exist_ok=True)


def make_request_result(
    status_code=200,
    raw_text="",
    headers=None,
    elapsed_ms=42.0,
    error=None,
):
    """Factory for mock RequestResult objects."""
    r = RequestResult()
    r.status_code = status_code
    r.headers = headers or {}
    r.raw_text = raw_text
    r.elapsed_ms = elapsed_ms
    r.error = error
    return r


class ScriptedPrompter:
    """Prompter that replays canned answers and records the questions."""

    def __init__(self, selections=(), confirmations=()):
        self.selections = list(selections)
        self.confirmations = list(confirmations)
        self.select_calls = []
        self.confirm_calls = []

    def select(self, message, choices):
        self.select_calls.append((message, list(choices)))
        return self.selections.pop(0)

    def confirm(self, message):
        self.confirm_calls.append(message)
        return self.confirmations.pop(0)
