"""Output bindings for contribkit.

All bindings implement the ``OutputBinding`` protocol: ``init(metadata)``,
``operations()`` and ``invoke(request)``.
"""

from contribkit.bindings.base import OutputBinding
from contribkit.bindings.errors import (
    BindingError,
    BindingNotInitializedError,
    InvalidRequestError,
    MetadataError,
    PathFormatError,
    TwinUpdateError,
    UnsupportedOperationError,
)

__all__ = [
    "OutputBinding",
    "BindingError",
    "BindingNotInitializedError",
    "InvalidRequestError",
    "MetadataError",
    "PathFormatError",
    "TwinUpdateError",
    "UnsupportedOperationError",
]
