"""Resolve git refs of GitHub repositories without cloning.

Reads the smart-HTTP ref advertisement (``info/refs?service=git-upload-pack``)
and stops reading as soon as the requested ref shows up.
"""

from .__version__ import __version__
from .cli import main
from .models import (
    EmptyRepository,
    NotFound,
    Outcome,
    ProtocolError,
    RefQuery,
    Resolved,
    Result,
    TransportError,
    UsageError,
)
from .resolver import resolve, resolve_async
from .scanner import AdvertisementScanner

__all__ = [
    "__version__",
    "main",
    "resolve",
    "resolve_async",
    "AdvertisementScanner",
    "RefQuery",
    "Result",
    "Outcome",
    "Resolved",
    "NotFound",
    "EmptyRepository",
    "UsageError",
    "ProtocolError",
    "TransportError",
]

if __name__ == "__main__":
    main()
