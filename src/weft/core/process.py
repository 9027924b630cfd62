"""The steppable-process contract driven by :class:`~weft.core.relaxer.Relaxer`."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class IterativeProcess(Protocol):
    """Anything exposing a completion predicate and a single-step advance."""

    def done(self) -> bool:
        ...

    def step(self) -> None:
        ...
