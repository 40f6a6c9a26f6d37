"""Lazily constructed process-wide instances that tests can substitute."""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Generic, TypeVar

T = TypeVar("T")


class SharedInstance(Generic[T]):
    """Holds one lazily built instance shared by every caller.

    Construction runs at most once at a time: callers arriving while the
    factory is still running wait for it and receive the same object. A
    factory that raises leaves the holder empty so the next call retries.
    """

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._instance: T | None = None
        self._lock = threading.Lock()

    def get(self) -> T:
        """Return the shared instance, constructing it on first use."""
        instance = self._instance
        if instance is not None:
            return instance
        with self._lock:
            if self._instance is None:
                self._instance = self._factory()
            return self._instance

    def override(self, instance: T) -> None:
        """Replace the shared instance with a caller-provided one."""
        with self._lock:
            self._instance = instance

    def reset(self) -> None:
        """Drop the shared instance so the next `get` constructs a fresh one."""
        with self._lock:
            self._instance = None

    @property
    def is_initialized(self) -> bool:
        """Return whether an instance has been constructed or injected."""
        return self._instance is not None
