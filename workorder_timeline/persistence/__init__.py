"""Backends the timeline session loads from and writes through to."""
from __future__ import annotations

from .base import PersistenceBackend, PersistenceError
from .local import JsonFileBackend
from .memory import InMemoryBackend
from .rest import DEFAULT_API_URL, RestBackend

__all__ = [
    "DEFAULT_API_URL",
    "InMemoryBackend",
    "JsonFileBackend",
    "PersistenceBackend",
    "PersistenceError",
    "RestBackend",
]
