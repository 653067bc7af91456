import os
import re
from typing import List

import numpy as np

from errors import InvalidInputError
from tsp_core import City, DistanceMatrix

COORD_LINE = re.compile(r"^\s*\d+\s+[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?\s+[-+]?\d*\.?\d+(?:[eE][-+]?\d+)?")


def load_tsp_file(path) -> List[City]:
    """
    TSPLIB coordinate loader.
    Handles:
        - lowercase/uppercase section names
        - blank lines
        - files that omit NODE_COORD_SECTION and start coordinates directly
    """

    if not os.path.exists(path):
        raise FileNotFoundError(f"TSP file not found: {path}")

    with open(path, "r") as f:
        raw_lines = [l.strip() for l in f if l.strip()]

    # --------------------------------------------
    # 1. Find the start of NODE_COORD_SECTION
    # --------------------------------------------
    start_index = None
    for i, line in enumerate(raw_lines):
        if "NODE_COORD_SECTION" in line.upper():
            start_index = i + 1
            break

    if start_index is None:
        for i, line in enumerate(raw_lines):
            if COORD_LINE.match(line):
                start_index = i
                break

    if start_index is None:
        raise InvalidInputError(f"Could not find coordinate section in: {path}")

    # --------------------------------------------
    # 2. Parse coordinates
    # --------------------------------------------
    cities = []
    for line in raw_lines[start_index:]:
        if line.upper().startswith("EOF"):
            break

        if not COORD_LINE.match(line):
            continue

        parts = re.split(r"\s+", line)
        # First column is the TSPLIB index
        cities.append(City(float(parts[1]), float(parts[2]), name=f"City_{parts[0]}"))

    if len(cities) == 0:
        raise InvalidInputError(f"No coordinates parsed in: {path}")

    return cities


def load_matrix_file(path) -> DistanceMatrix:
    """
    Load an explicit cost matrix, one row per line.
    Values may be separated by whitespace or commas; '#' starts a comment.
    """
    if not os.path.exists(path):
        raise FileNotFoundError(f"Matrix file not found: {path}")

    rows = []
    with open(path, "r") as f:
        for lineno, line in enumerate(f, start=1):
            line = line.split("#", 1)[0].strip()
            if not line:
                continue
            try:
                rows.append([float(v) for v in re.split(r"[,\s]+", line) if v])
            except ValueError as exc:
                raise InvalidInputError(f"Invalid value at {path}:{lineno}") from exc

    if not rows:
        raise InvalidInputError(f"No matrix rows parsed in: {path}")

    width = len(rows[0])
    if any(len(r) != width for r in rows):
        raise InvalidInputError(f"Rows of unequal length in: {path}")

    return DistanceMatrix.from_array(rows)


def generate_random_cities(n: int, width: float = 100, height: float = 100, seed: int = None) -> List[City]:
    """
    Generate random cities for testing.

    Args:
        n: Number of cities to generate
        width: Width of the area
        height: Height of the area
        seed: Seed for a reproducible layout

    Returns:
        List of randomly placed cities
    """
    rng = np.random.default_rng(seed)
    xs = rng.uniform(0, width, size=n)
    ys = rng.uniform(0, height, size=n)
    return [City(x, y, name=f"City_{i}") for i, (x, y) in enumerate(zip(xs, ys))]


def generate_circle_cities(n: int, radius: float = 50, center_x: float = 50, center_y: float = 50) -> List[City]:
    """Cities evenly spaced on a circle; the optimal tour is the inscribed polygon."""
    cities = []
    for i in range(n):
        angle = 2 * np.pi * i / n
        x = center_x + radius * np.cos(angle)
        y = center_y + radius * np.sin(angle)
        cities.append(City(x, y, name=f"City_{i}"))
    return cities


def example_cities() -> List[City]:
    """Five-city demo instance; city 0 is the starting point."""
    return [
        City(0, 0, "City_0"),
        City(2, 3, "City_1"),
        City(5, 4, "City_2"),
        City(1, 1, "City_3"),
        City(4, 0, "City_4"),
    ]
