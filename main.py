"""
TSP Solver - Main Application
Exact minimum tour cost via bitmask dynamic programming.
"""

import argparse
import sys
from typing import List

from data_generator import (
    example_cities,
    generate_circle_cities,
    generate_random_cities,
    load_matrix_file,
    load_tsp_file,
)
from dp_solver import MAX_CITIES, METHODS, DynamicProgrammingSolver
from errors import TSPError
from tsp_core import DistanceMatrix


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Exact TSP solver (dynamic programming over visited subsets)',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Solve the built-in 5-city example
  python main.py

  # Solve 12 random cities
  python main.py --random 12 --seed 7

  # Solve a TSPLIB coordinate file
  python main.py --file tsp_data/burma14.tsp --verbose

  # Solve a pre-built (possibly asymmetric) cost matrix
  python main.py --matrix costs.txt --method recursive
        """
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument('--file', type=str, help='TSPLIB .tsp file with NODE_COORD_SECTION')
    source.add_argument('--matrix', type=str, help='Text file holding a square cost matrix')
    source.add_argument('--random', type=int, metavar='N', help='Generate N random cities')
    source.add_argument('--circle', type=int, metavar='N', help='Generate N cities on a circle')

    parser.add_argument('--seed', type=int, default=None, help='Seed for --random')
    parser.add_argument('--width', type=float, default=100, help='Area width for --random')
    parser.add_argument('--height', type=float, default=100, help='Area height for --random')

    parser.add_argument('--method', choices=METHODS, default='iterative',
                        help='DP evaluation strategy (default: iterative)')
    parser.add_argument('--workers', type=int, default=1,
                        help='Threads per layer for the iterative method (default: 1)')
    parser.add_argument('--max-cities', type=int, default=MAX_CITIES,
                        help=f'Reject instances above this size (default: {MAX_CITIES})')
    parser.add_argument('--time-limit', type=float, default=None,
                        help='Abort after this many seconds')
    parser.add_argument('--verbose', action='store_true', help='Print solver progress')
    return parser


def load_distance_matrix(args) -> DistanceMatrix:
    """Turn the selected input source into a distance matrix."""
    if args.matrix:
        return load_matrix_file(args.matrix)

    if args.file:
        cities = load_tsp_file(args.file)
    elif args.random is not None:
        cities = generate_random_cities(args.random, width=args.width, height=args.height, seed=args.seed)
    elif args.circle is not None:
        cities = generate_circle_cities(args.circle)
    else:
        cities = example_cities()

    return DistanceMatrix.from_cities(cities)


def main(argv: List[str] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        matrix = load_distance_matrix(args)
        if args.verbose:
            print(f"Loaded {matrix.n} cities")
        solver = DynamicProgrammingSolver(
            matrix,
            method=args.method,
            workers=args.workers,
            max_cities=args.max_cities
        )
        cost = solver.solve(time_limit=args.time_limit, verbose=args.verbose)
    except (TSPError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(f"Minimum Tour Cost: {cost}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
