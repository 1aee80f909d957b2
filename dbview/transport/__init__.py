"""Transport layer: the typed client for the viewer backend."""

from .errors import ResponseFormatError, TransportError
from .client import DbViewerClient

__all__ = [
    "DbViewerClient",
    "ResponseFormatError",
    "TransportError",
]
