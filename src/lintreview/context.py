# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.

"""Cancellable run context shared by every blocking point of a review run."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Event

from .errors import RunCancelledError


@dataclass(frozen=True, slots=True)
class RunContext:
    """Cancellation signal plus an optional wall-clock deadline.

    A context is shared by the orchestrator, every runner thread and every
    comment sink. Derived contexts created through :meth:`with_timeout` share
    the parent's cancellation event, so cancelling either cancels both.

    Attributes:
        deadline: ``time.monotonic()`` value after which the run is over, or
            ``None`` for an unbounded run.
    """

    deadline: float | None = None
    _event: Event = field(default_factory=Event, repr=False, compare=False)

    @classmethod
    def background(cls) -> RunContext:
        """Return a fresh context with no deadline."""

        return cls()

    def with_timeout(self, seconds: float | None) -> RunContext:
        """Return a context bounded by ``seconds`` from now.

        Args:
            seconds: Maximum run time. ``None`` keeps the current deadline.

        Returns:
            RunContext: Context sharing this context's cancellation event.
        """

        if seconds is None:
            return self
        if seconds < 0:
            raise ValueError("timeout must be non-negative")
        candidate = time.monotonic() + seconds
        deadline = candidate if self.deadline is None else min(self.deadline, candidate)
        return RunContext(deadline=deadline, _event=self._event)

    def cancel(self) -> None:
        """Signal cancellation to every holder of this context."""

        self._event.set()

    @property
    def expired(self) -> bool:
        """Return ``True`` once the deadline has passed."""

        return self.deadline is not None and time.monotonic() >= self.deadline

    @property
    def cancelled(self) -> bool:
        """Return ``True`` when the context was cancelled or has expired."""

        return self._event.is_set() or self.expired

    def remaining(self) -> float | None:
        """Return seconds left before the deadline, ``None`` when unbounded."""

        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def wait(self, seconds: float) -> bool:
        """Block for up to ``seconds`` or until cancellation.

        Returns:
            bool: ``True`` when the context is cancelled.
        """

        remaining = self.remaining()
        budget = seconds if remaining is None else min(seconds, remaining)
        self._event.wait(budget)
        return self.cancelled

    def check(self) -> None:
        """Raise :class:`RunCancelledError` when the context is no longer live."""

        if self._event.is_set():
            raise RunCancelledError("review run was cancelled")
        if self.expired:
            raise RunCancelledError("review run exceeded its timeout")


__all__ = ["RunContext"]
