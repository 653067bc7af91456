"""
TSP Solver - Core Module
Contains the fundamental data structures for representing the TSP problem.
"""

import numpy as np
from typing import List, Sequence

from errors import InvalidInputError


class City:
    """Represents an immutable city with x, y coordinates."""

    __slots__ = ("_x", "_y", "_name")

    def __init__(self, x: float, y: float, name: str = None):
        object.__setattr__(self, "_x", float(x))
        object.__setattr__(self, "_y", float(y))
        object.__setattr__(self, "_name", name or f"City({float(x):g}, {float(y):g})")

    @property
    def x(self) -> float:
        return self._x

    @property
    def y(self) -> float:
        return self._y

    @property
    def name(self) -> str:
        return self._name

    def __setattr__(self, key, value):
        raise AttributeError(f"City is immutable (tried to set {key!r})")

    def distance_to(self, city: 'City') -> float:
        """Calculate Euclidean distance to another city."""
        dx = self.x - city.x
        dy = self.y - city.y
        return float(np.sqrt(dx * dx + dy * dy))

    def __repr__(self):
        return f"City({self.x:.2f}, {self.y:.2f})"

    def __eq__(self, other):
        if not isinstance(other, City):
            return False
        return self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))


class DistanceMatrix:
    """
    Read-only N x N table of travel costs.

    Entry (i, j) is the cost of going directly from point i to point j.
    Every instance satisfies: square, zero diagonal, finite, non-negative.
    Symmetry is only guaranteed for matrices built from cities.
    """

    def __init__(self, matrix):
        try:
            array = np.array(matrix, dtype=float)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"Distance matrix is not a numeric table: {exc}") from exc
        _validate(array)
        array.setflags(write=False)
        self.matrix = array
        self.n = array.shape[0]

    @classmethod
    def from_cities(cls, cities: Sequence[City]) -> 'DistanceMatrix':
        """Precompute Euclidean distances between every pair of cities."""
        if len(cities) == 0:
            raise InvalidInputError("At least one city is required to build a tour")

        coords = np.array([[c.x, c.y] for c in cities], dtype=float)
        diff = coords[:, None, :] - coords[None, :, :]
        matrix = np.sqrt((diff ** 2).sum(axis=-1))
        np.fill_diagonal(matrix, 0.0)
        return cls(matrix)

    @classmethod
    def from_array(cls, matrix) -> 'DistanceMatrix':
        """Wrap a pre-supplied cost matrix (road network, asymmetric costs, ...)."""
        return cls(matrix)

    def get_distance_by_index(self, i: int, j: int) -> float:
        """Get distance by city indices."""
        return float(self.matrix[i, j])

    def is_symmetric(self) -> bool:
        return bool(np.allclose(self.matrix, self.matrix.T))

    def __len__(self):
        return self.n

    def __getitem__(self, index):
        return self.matrix[index]

    def __repr__(self):
        return f"DistanceMatrix(n={self.n})"


def _validate(array: np.ndarray):
    if array.ndim != 2 or array.shape[0] != array.shape[1]:
        raise InvalidInputError(f"Distance matrix must be square, got shape {array.shape}")
    if array.shape[0] == 0:
        raise InvalidInputError("Distance matrix is empty")
    if not np.all(np.isfinite(array)):
        raise InvalidInputError("Distance matrix contains non-finite entries")
    if np.any(array < 0):
        i, j = np.argwhere(array < 0)[0]
        raise InvalidInputError(f"Negative cost {array[i, j]} at ({i}, {j})")
    diagonal = np.diag(array)
    if np.any(diagonal != 0):
        i = int(np.flatnonzero(diagonal)[0])
        raise InvalidInputError(f"Non-zero diagonal entry {diagonal[i]} at ({i}, {i})")


def build_distance_matrix(cities: Sequence[City]) -> DistanceMatrix:
    """Build the Euclidean distance matrix for a list of cities."""
    return DistanceMatrix.from_cities(list(cities))


def cities_from_coordinates(coords: List[Sequence[float]]) -> List[City]:
    """Turn (x, y) pairs into named cities, index order preserved."""
    return [City(x, y, name=f"City_{i}") for i, (x, y) in enumerate(coords)]
