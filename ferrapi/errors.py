"""ferrapi errors - fatal conditions raised by the core modules.

Only the CLI catches these; it prints the message and exits 1.
"""


class FerrapiError(Exception):
    """Base class for every fatal ferrapi error."""


class ParseError(FerrapiError):
    """A stored record exists but is not a valid record."""


class StoreError(FerrapiError):
    """Creating, reading, writing or deleting something in the store failed."""


class ValidationError(FerrapiError):
    """Invocation input is unusable (method, namespace, header, missing URL)."""


class SelectionAborted(FerrapiError):
    """The namespace navigator could not produce a namespace."""
