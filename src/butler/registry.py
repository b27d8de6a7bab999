"""Lazy-import registry shared by the provider and store factories.

Each entry maps a configuration name to ``(module_path, class_name)``. The
module is imported on first use, so optional extras (``openai``,
``anthropic``) are only required when they are actually configured.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Registry(Generic[T]):
    """Named component classes with one shared default instance per name."""

    def __init__(self, kind: str, entries: dict[str, tuple[str, str]]):
        self.kind = kind
        self._entries = entries
        self._instances: dict[str, T] = {}

    def names(self) -> list[str]:
        return list(self._entries)

    def load(self, name: str) -> type[T]:
        """Import and return the class registered under ``name``.

        Raises:
            ValueError: ``name`` is not registered.
        """
        key = name.lower()
        if key not in self._entries:
            raise ValueError(f"Unknown {self.kind} '{name}'. Available: {self.names()}")
        module_path, cls_name = self._entries[key]
        return getattr(importlib.import_module(module_path), cls_name)

    def create(self, name: str, **kwargs: Any) -> T:
        """Build a component; the no-argument instance is shared."""
        key = name.lower()
        if not kwargs and key in self._instances:
            return self._instances[key]

        cls = self.load(key)
        instance = cls(**kwargs)
        if not kwargs:
            self._instances[key] = instance
        logger.debug("Created %s %s", self.kind, cls.__name__)
        return instance

    def clear(self) -> None:
        self._instances.clear()
