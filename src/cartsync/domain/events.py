"""Observability hook for cart state transitions.

Handlers call ``emit`` synchronously right after each transition
commits. How events are recorded (log lines, a queue, nothing) is up to
the implementation wired in by the composition root.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


class CartEventEmitter(ABC):

    @abstractmethod
    def emit(self, event: str, **fields: Any) -> None:
        """Record a named event with structured fields."""


class NullEventEmitter(CartEventEmitter):

    def emit(self, event: str, **fields: Any) -> None:
        return None
