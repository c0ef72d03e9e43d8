"""ferrapi navigator - pick a namespace by walking the store directory tree.

The walk is a small state machine:

    AtRoot ──select──▶ AtNode(path) ──leaf or "no"──▶ Done
                          │   ▲
                          └───┘ "yes": select a child

Prompts go through a Prompter so tests can script the answers.
"""

from pathlib import Path
from typing import Protocol

import questionary

from ferrapi.errors import SelectionAborted


class Prompter(Protocol):
    """Interactive capability the navigator needs.

    Both methods return None when the user cancels.
    """

    def select(self, message: str, choices: list[str]) -> str | None: ...

    def confirm(self, message: str) -> bool | None: ...


class QuestionaryPrompter:
    """Terminal prompts backed by questionary."""

    def select(self, message: str, choices: list[str]) -> str | None:
        return questionary.select(message, choices=choices).ask()

    def confirm(self, message: str) -> bool | None:
        return questionary.confirm(message, default=True).ask()


def list_subdirectories(path: Path) -> list[str]:
    """Sorted names of the immediate subdirectories of path."""
    try:
        return sorted(p.name for p in Path(path).iterdir() if p.is_dir())
    except OSError as e:
        raise SelectionAborted(f"Failed to list {path}: {e}") from e


def navigate(store_dir: Path, prompter: Prompter) -> str:
    """Let the user choose a namespace under store_dir.

    Returns the chosen directory relative to store_dir, '/'-joined.
    Raises SelectionAborted when there is nothing to choose from, a
    directory cannot be listed, or a prompt is cancelled.
    """
    store_dir = Path(store_dir)
    if not store_dir.is_dir():
        raise SelectionAborted(f"No saved namespaces: {store_dir} does not exist")

    # AtRoot
    current = store_dir
    children = list_subdirectories(current)
    if not children:
        raise SelectionAborted(f"No saved namespaces in {store_dir}")

    while True:
        location = current.relative_to(store_dir).as_posix()
        label = "Select a namespace" if current == store_dir else f"Select a namespace under {location}"
        choice = prompter.select(label, children)
        if choice is None:
            raise SelectionAborted("Namespace selection cancelled")
        if choice not in children:
            raise SelectionAborted(f"Unknown namespace '{choice}'")

        # AtNode
        current = current / choice
        children = list_subdirectories(current)
        if not children:
            break
        namespace = current.relative_to(store_dir).as_posix()
        descend = prompter.confirm(f"'{namespace}' has sub-namespaces. Go deeper?")
        if descend is None:
            raise SelectionAborted("Namespace selection cancelled")
        if not descend:
            break

    # Done
    return current.relative_to(store_dir).as_posix()
