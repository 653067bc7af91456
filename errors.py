"""
TSP Solver - Errors
Typed failures raised by the matrix builder and the DP solver.
"""


class TSPError(Exception):
    """Base class for every error raised by the solver package."""


class InvalidInputError(TSPError, ValueError):
    """Empty point set or malformed distance matrix."""


class ResourceExhaustedError(TSPError):
    """Problem too large for the configured ceiling, or time limit exceeded."""


class InternalInconsistencyError(TSPError):
    """The DP finished without a finite result, or a memo entry was written twice."""
