"""Error taxonomy shared by the graph store, algorithms and relaxer."""

from __future__ import annotations


class GraphError(Exception):
    """Base error for everything raised by weft."""


class StructuralViolation(GraphError, ValueError):
    """Raised when a mutation would break the multigraph structure."""


class NotFound(GraphError, KeyError):
    """Raised when an operation references an unknown vertex or edge."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class InvalidParameter(GraphError, ValueError):
    """Raised for out-of-range algorithm parameters."""


class ConcurrencyMisuse(GraphError, RuntimeError):
    """Raised when a re-entrant step or a mid-traversal mutation is detected."""


__all__ = [
    "GraphError",
    "StructuralViolation",
    "NotFound",
    "InvalidParameter",
    "ConcurrencyMisuse",
]
