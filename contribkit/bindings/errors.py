"""Errors raised by output bindings.

Two families: ``InvalidRequestError`` (a ``ValueError``) when the caller sent
something the binding cannot accept, and ``BindingError`` (a
``RuntimeError``) when the binding itself or the remote service failed.
"""

from __future__ import annotations


class BindingError(RuntimeError):
    """Base class for binding failures that are not the caller's fault."""


class MetadataError(ValueError):
    """Raised by ``init()`` when required component properties are missing."""


class BindingNotInitializedError(BindingError):
    """Raised when ``invoke()`` is called before a successful ``init()``."""


class InvalidRequestError(ValueError):
    """Raised when the request payload cannot be deserialized or is empty."""


class PathFormatError(InvalidRequestError):
    """Raised when a patch path does not embed ``/<twinId>/<property>``.

    The whole batch is rejected; nothing has been submitted when this is
    raised.
    """

    def __init__(self, path: str, index: int) -> None:
        self.path = path
        self.index = index
        super().__init__(f"Invalid path in patch operation {index}: {path!r}")


class UnsupportedOperationError(InvalidRequestError):
    """Raised when the host asks for an operation the binding does not offer."""


class TwinUpdateError(BindingError):
    """Raised when the digital twins service rejects or fails an update.

    Attributes
    ----------
    twin_id:
        The twin whose update failed.
    applied:
        Twin ids whose updates had already succeeded in this invocation.
    """

    def __init__(self, twin_id: str, reason: str, applied: list[str] | None = None) -> None:
        self.twin_id = twin_id
        self.applied = list(applied or [])
        super().__init__(f"Update of twin {twin_id!r} failed: {reason}")
