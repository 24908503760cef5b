"""Cancellation tokens and a latest-request-wins guard."""

from __future__ import annotations

from dataclasses import dataclass, field
import threading


class RequestCancelled(Exception):
    """Raised when work is abandoned because its token was cancelled."""


@dataclass
class CancellationToken:
    """Handle for one in-flight request."""

    purpose: str
    generation: int
    _event: threading.Event = field(default_factory=threading.Event, repr=False)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RequestCancelled(f"{self.purpose} request #{self.generation} was cancelled")


class LatestRequest:
    """Tracks the single current request for one purpose.

    ``begin`` cancels whatever was in flight and hands out a new token with a
    higher generation. A result may only be applied while ``is_current`` holds
    for its token; use ``lock`` to make the check and the apply atomic.
    """

    def __init__(self, purpose: str) -> None:
        self._purpose = purpose
        self._generation = 0
        self._current: CancellationToken | None = None
        self.lock = threading.Lock()

    @property
    def generation(self) -> int:
        return self._generation

    def begin(self) -> CancellationToken:
        with self.lock:
            if self._current is not None:
                self._current.cancel()
            self._generation += 1
            self._current = CancellationToken(self._purpose, self._generation)
            return self._current

    def cancel(self) -> None:
        """Cancel the in-flight request, if any, without starting a new one."""
        with self.lock:
            if self._current is not None:
                self._current.cancel()
                self._current = None

    def is_current(self, token: CancellationToken) -> bool:
        """Must be called with ``lock`` held when followed by a state update."""
        return (
            self._current is token
            and not token.cancelled
            and token.generation == self._generation
        )


__all__ = ["RequestCancelled", "CancellationToken", "LatestRequest"]
