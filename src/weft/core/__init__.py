"""
Core runtime for weft graphs.

The core package holds the sparse multigraph store, its error taxonomy and
invariant checks, predicate filtering, and the relaxer that steps iterative
processes on a background thread.
"""

from . import errors, graph, invariants, filters, process, relaxer  # noqa: F401

__all__ = ["errors", "graph", "invariants", "filters", "process", "relaxer"]
