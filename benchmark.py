import os
import time
import numpy as np
import pandas as pd
from tqdm import tqdm

from data_generator import generate_random_cities
from dp_solver import MAX_CITIES, DynamicProgrammingSolver
from errors import ResourceExhaustedError
from tsp_core import DistanceMatrix


# ================================
# CONFIGURATION
# ================================
OUTPUT_DIR = "benchmarks"
SIZES = range(4, 15)
RUNS_PER_SIZE = 3
TIME_LIMIT = 60.0
SEED = 0
METHOD_SETTINGS = {
    "recursive": {"method": "recursive"},
    "iterative": {"method": "iterative"},
    "iterative_x4": {"method": "iterative", "workers": 4},
}


# =============================================================
# SCALING BENCHMARK
# =============================================================
def benchmark_size(n, runs=RUNS_PER_SIZE, time_limit=TIME_LIMIT, seed=SEED):
    """Time every method on `runs` seeded random instances of n cities."""
    rows = []

    for run in range(runs):
        cities = generate_random_cities(n, seed=seed + run)
        matrix = DistanceMatrix.from_cities(cities)
        costs = {}

        for name, settings in METHOD_SETTINGS.items():
            solver = DynamicProgrammingSolver(matrix, **settings)
            start = time.time()
            try:
                costs[name] = solver.solve(time_limit=time_limit)
                status = "ok"
            except ResourceExhaustedError:
                costs[name] = float("nan")
                status = "time_limit"

            rows.append({
                "n_cities": n,
                "run": run,
                "method": name,
                "status": status,
                "cost": costs[name],
                "states": solver.states_computed,
                "time_s": time.time() - start,
            })

        finished = [c for c in costs.values() if not np.isnan(c)]
        if finished and not np.allclose(finished, finished[0]):
            raise AssertionError(f"Methods disagree on n={n}, run={run}: {costs}")

    return rows


def check_ceiling(max_cities=MAX_CITIES):
    """The first size above the ceiling must be rejected before any work."""
    cities = generate_random_cities(max_cities + 1, seed=SEED)
    solver = DynamicProgrammingSolver.from_cities(cities, max_cities=max_cities)
    start = time.time()
    try:
        solver.solve()
    except ResourceExhaustedError as e:
        return {"n_cities": max_cities + 1, "method": "ceiling", "status": "rejected",
                "time_s": time.time() - start, "message": str(e)}
    raise AssertionError(f"{max_cities + 1} cities were not rejected")


# =============================================================
# MAIN
# =============================================================
def run_benchmark(sizes=SIZES, output_dir=OUTPUT_DIR):
    os.makedirs(output_dir, exist_ok=True)

    rows = []
    for n in tqdm(sizes, desc="Sizes"):
        rows.extend(benchmark_size(n))
    rows.append(check_ceiling())

    df = pd.DataFrame(rows)
    df.to_csv(os.path.join(output_dir, "dp_scaling.csv"), index=False)

    summary = (
        df[df["status"] == "ok"]
        .groupby(["n_cities", "method"])["time_s"]
        .mean()
        .unstack("method")
    )
    print("\n=== Mean solve time (s) ===")
    print(summary)
    print(f"\nSaved: {os.path.join(output_dir, 'dp_scaling.csv')}")
    return df


if __name__ == "__main__":
    run_benchmark()
