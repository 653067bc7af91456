"""
Exact TSP Solver - Bitmask Dynamic Programming
Minimum closed-tour cost over an N x 2^N memo table of
(current city, visited set) states.

The tour always starts and ends at city 0. For a closed tour the optimum is
the same whichever city starts the cycle, so this fixes the state space
rather than being a parameter.
"""

import math
import time
from concurrent.futures import ThreadPoolExecutor
from itertools import combinations
from typing import Iterator, List, Optional, Sequence

import numpy as np
from tqdm import tqdm

from errors import InternalInconsistencyError, ResourceExhaustedError
from tsp_core import City, DistanceMatrix


# Both time and memory grow as O(N^2 * 2^N); 20 cities is ~190 MB of table.
MAX_CITIES = 20

METHODS = ("iterative", "recursive")

START_CITY = 0


class MemoTable:
    """
    Memoized cost-to-finish for every (pos, visited) state of one solve call.

    values[pos, visited] is only meaningful where computed[pos, visited] is
    True; every other entry is unset. Each state may be stored once.
    """

    def __init__(self, n_cities: int):
        self.n = n_cities
        self.full_mask = (1 << n_cities) - 1
        self.values = np.zeros((n_cities, 1 << n_cities), dtype=float)
        self.computed = np.zeros((n_cities, 1 << n_cities), dtype=bool)

    def is_set(self, pos: int, visited: int) -> bool:
        return bool(self.computed[pos, visited])

    def get(self, pos: int, visited: int) -> Optional[float]:
        """Return the stored cost, or None while the state is unset."""
        if not self.computed[pos, visited]:
            return None
        return float(self.values[pos, visited])

    def store(self, pos: int, visited: int, value: float):
        if self.computed[pos, visited]:
            raise InternalInconsistencyError(
                f"State (pos={pos}, visited={visited:#b}) computed twice"
            )
        self.values[pos, visited] = value
        self.computed[pos, visited] = True

    def count_computed(self) -> int:
        return int(self.computed.sum())

    @staticmethod
    def estimated_bytes(n_cities: int) -> int:
        # float64 values + bool flags
        return n_cities * (1 << n_cities) * 9


class DynamicProgrammingSolver:
    """
    Exact solver for the closed-tour TSP.

    Two evaluation strategies give identical costs:
    - "recursive": top-down memoized recursion
    - "iterative": bottom-up fill, one layer of equal-sized visited sets at a
      time, optionally spread over a thread pool
    """

    def __init__(
        self,
        distance_matrix,
        method: str = "iterative",
        workers: int = 1,
        max_cities: int = MAX_CITIES
    ):
        if method not in METHODS:
            raise ValueError(f"Unknown method {method!r}, expected one of {METHODS}")
        if workers < 1:
            raise ValueError("workers must be >= 1")

        if not isinstance(distance_matrix, DistanceMatrix):
            distance_matrix = DistanceMatrix.from_array(distance_matrix)

        self.distance_matrix = distance_matrix
        self.n_cities = distance_matrix.n
        self.method = method
        self.workers = workers
        self.max_cities = max_cities

        self._matrix = distance_matrix.matrix
        self._rows = self._matrix.tolist()
        self._deadline = None

        # stats of the last solve
        self.states_computed = 0
        self.elapsed = 0.0

    @classmethod
    def from_cities(cls, cities: Sequence[City], **kwargs) -> 'DynamicProgrammingSolver':
        return cls(DistanceMatrix.from_cities(list(cities)), **kwargs)

    # ---------------------------------------
    # Public API
    # ---------------------------------------

    def solve(self, time_limit: float = None, verbose: bool = False) -> float:
        """
        Returns the minimum tour cost.

        Raises ResourceExhaustedError when the instance is above max_cities or
        time_limit (seconds) runs out. No partial result is returned.
        """
        n = self.n_cities
        if n > self.max_cities:
            raise ResourceExhaustedError(
                f"{n} cities exceeds the limit of {self.max_cities} "
                f"(memo table would need ~{MemoTable.estimated_bytes(n) / 2**20:.0f} MiB)"
            )

        self.states_computed = 0
        start = time.perf_counter()
        self._deadline = start + time_limit if time_limit is not None else None

        if verbose:
            print(f"[DP] Solving {n} cities with the {self.method} method "
                  f"(workers={self.workers})")

        try:
            if n == 1:
                # Nothing to visit: stay at the start.
                table = None
                result = self._rows[START_CITY][START_CITY]
            else:
                table = _allocate_table(n)
                if self.method == "recursive":
                    result = self._cost(table, START_CITY, 1 << START_CITY)
                else:
                    result = self._fill_layers(table, verbose)
        finally:
            self._deadline = None
            self.elapsed = time.perf_counter() - start

        self.states_computed = table.count_computed() if table is not None else 0

        if not math.isfinite(result):
            raise InternalInconsistencyError(
                f"DP finished with a non-finite tour cost ({result}) for valid input"
            )

        if verbose:
            print(f"[DP] Minimum tour cost: {result:.4f} "
                  f"({self.states_computed} states, {self.elapsed:.3f}s)")

        return float(result)

    # ---------------------------------------
    # Top-down recursion
    # ---------------------------------------

    def _cost(self, table: MemoTable, pos: int, visited: int) -> float:
        if visited == table.full_mask:
            return self._rows[pos][START_CITY]

        cached = table.get(pos, visited)
        if cached is not None:
            return cached

        self._check_deadline()

        row = self._rows[pos]
        best = math.inf
        for city in range(table.n):
            if visited & (1 << city):
                continue
            candidate = row[city] + self._cost(table, city, visited | (1 << city))
            if candidate < best:
                best = candidate

        table.store(pos, visited, best)
        return best

    # ---------------------------------------
    # Bottom-up layered fill
    # ---------------------------------------

    def _fill_layers(self, table: MemoTable, verbose: bool) -> float:
        n = table.n
        # Layer k holds visited sets of size k; it only reads layer k + 1.
        layers = range(n - 1, 0, -1)

        pool = ThreadPoolExecutor(max_workers=self.workers) if self.workers > 1 else None
        try:
            for size in tqdm(layers, desc="[DP] layers", disable=not verbose):
                masks = list(_layer_masks(n, size))
                if pool is None:
                    self._fill_masks(table, masks)
                    continue

                chunks = [masks[i::self.workers] for i in range(self.workers)]
                futures = [pool.submit(self._fill_masks, table, chunk) for chunk in chunks if chunk]
                # barrier: the next layer reads everything written here
                for future in futures:
                    future.result()
        finally:
            if pool is not None:
                pool.shutdown(wait=True)

        result = table.get(START_CITY, 1 << START_CITY)
        if result is None:
            raise InternalInconsistencyError("Start state was never computed")
        return result

    def _fill_masks(self, table: MemoTable, masks: List[int]):
        n = table.n
        for mask in masks:
            self._check_deadline()

            unvisited = np.array([c for c in range(n) if not mask & (1 << c)], dtype=np.int64)
            if len(unvisited) == 1:
                # next state is the full mask: only the return leg remains
                tails = self._matrix[unvisited, START_CITY]
            else:
                next_masks = mask | np.left_shift(1, unvisited)
                if not table.computed[unvisited, next_masks].all():
                    raise InternalInconsistencyError(
                        f"Layer order violated while filling visited={mask:#b}"
                    )
                tails = table.values[unvisited, next_masks]

            for pos in _positions(n, mask):
                candidates = self._matrix[pos, unvisited] + tails
                table.store(pos, mask, float(candidates.min()))

    def _check_deadline(self):
        if self._deadline is not None and time.perf_counter() >= self._deadline:
            raise ResourceExhaustedError("Time limit exceeded before the DP completed")


def _allocate_table(n: int) -> MemoTable:
    try:
        return MemoTable(n)
    except (MemoryError, ValueError) as exc:
        # numpy raises ValueError when the shape itself overflows
        raise ResourceExhaustedError(
            f"Cannot allocate the memo table for {n} cities "
            f"(~{MemoTable.estimated_bytes(n) / 2**20:.0f} MiB)"
        ) from exc


def _layer_masks(n: int, size: int) -> Iterator[int]:
    """Visited sets of the given size that contain the start city."""
    for others in combinations(range(1, n), size - 1):
        mask = 1 << START_CITY
        for city in others:
            mask |= 1 << city
        yield mask


def _positions(n: int, mask: int) -> List[int]:
    """Cities the tour can currently stand on with this visited set."""
    if mask == 1 << START_CITY:
        return [START_CITY]
    return [c for c in range(n) if c != START_CITY and mask & (1 << c)]


def solve_tour_cost(distance_matrix, **kwargs) -> float:
    """Minimum tour cost for a DistanceMatrix or a square cost array."""
    time_limit = kwargs.pop("time_limit", None)
    verbose = kwargs.pop("verbose", False)
    solver = DynamicProgrammingSolver(distance_matrix, **kwargs)
    return solver.solve(time_limit=time_limit, verbose=verbose)


def solve_cities(cities: Sequence[City], **kwargs) -> float:
    """Minimum tour cost for a list of cities under Euclidean distance."""
    return solve_tour_cost(DistanceMatrix.from_cities(list(cities)), **kwargs)
