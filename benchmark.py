"""
nestwatch Nested Path Benchmarks
"""

import argparse
import gc
import time
import tracemalloc
from dataclasses import dataclass
from typing import Callable, List, Optional

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from nestwatch import AccessorFactory, NestedPropertyRegistration
from tests.utils.models import Car, Engine, build_segments, make_garage

# =============================================================================
# Benchmark Configuration and Metrics
# =============================================================================

TIME_LIMIT_SECONDS = 1.0
STARTING_N = 10
SCALE_FACTOR = 1.5
NUM_ITERATIONS = 3  # Averages out GC variance
SAMPLES = 200  # Timed batches for the latency percentiles
BATCH = 50
DEPTHS = (2, 4, 8, 16, 32)


@dataclass
class BenchmarkMetrics:
    """Complete metrics from a benchmark run."""

    operation: str
    max_n: int
    operation_time: float
    operations_per_second: float

    # Latency percentiles in microseconds
    p50_us: float
    p95_us: float
    p99_us: float

    memory_peak_kb: int
    memory_allocated_kb: int
    gc_total_collections: int


class BenchmarkProfiler:
    """Profile time, memory and GC during one benchmark execution."""

    def __init__(self):
        self.start_time = None
        self.end_time = None
        self.gc_before = None
        self.gc_after = None
        self.memory_start = None
        self.memory_end = None
        self.memory_peak = None

    def __enter__(self):
        gc.collect()
        tracemalloc.start()
        self.memory_start, _ = tracemalloc.get_traced_memory()
        self.gc_before = sum(stat["collections"] for stat in gc.get_stats())
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.end_time = time.perf_counter()
        self.gc_after = sum(stat["collections"] for stat in gc.get_stats())
        self.memory_end, self.memory_peak = tracemalloc.get_traced_memory()
        tracemalloc.stop()

    @property
    def elapsed(self) -> float:
        return self.end_time - self.start_time


def measure_latencies(
    operation_func: Callable[[int], int], samples: int = SAMPLES, batch: int = BATCH
) -> np.ndarray:
    """Per-operation time of ``samples`` batches, in microseconds, setup included."""
    timings = np.empty(samples)
    for i in range(samples):
        start = time.perf_counter()
        performed = operation_func(batch)
        timings[i] = (time.perf_counter() - start) * 1e6 / performed
    return timings


def run_adaptive_benchmark(
    operation: str,
    operation_func: Callable[[int], int],
    time_limit: Optional[float] = None,
    starting_n: int = STARTING_N,
    scale_factor: float = SCALE_FACTOR,
) -> BenchmarkMetrics:
    """
    Scale the workload until one run takes ``time_limit``, then profile it.

    ``operation_func(n)`` performs ``n`` operations and returns how many it
    actually performed.
    """
    time_limit = TIME_LIMIT_SECONDS if time_limit is None else time_limit
    n = starting_n
    while True:
        start = time.perf_counter()
        operation_func(n)
        if time.perf_counter() - start >= time_limit:
            break
        n = int(n * scale_factor) + 1
        if n > 10_000_000:  # Safety limit
            break

    runs = []
    for _ in range(NUM_ITERATIONS):
        with BenchmarkProfiler() as profiler:
            performed = operation_func(n)
        runs.append((profiler, performed))

    latencies = measure_latencies(operation_func)
    p50, p95, p99 = np.percentile(latencies, [50, 95, 99])

    elapsed = np.mean([profiler.elapsed for profiler, _ in runs])
    ops_per_sec = np.mean(
        [performed / profiler.elapsed for profiler, performed in runs if profiler.elapsed > 0]
    )

    return BenchmarkMetrics(
        operation=operation,
        max_n=n,
        operation_time=float(elapsed),
        operations_per_second=float(ops_per_sec),
        p50_us=float(p50),
        p95_us=float(p95),
        p99_us=float(p99),
        memory_peak_kb=int(np.mean([p.memory_peak for p, _ in runs])) // 1024,
        memory_allocated_kb=int(
            np.mean([p.memory_end - p.memory_start for p, _ in runs])
        )
        // 1024,
        gc_total_collections=int(np.mean([p.gc_after - p.gc_before for p, _ in runs])),
    )


# =============================================================================
# Workloads
# =============================================================================


def _ignore(name: str) -> None:
    pass


def registration_lifecycle(n: int) -> int:
    """Create and dispose a registration for every declared path of a garage."""
    garage = make_garage()
    for _ in range(n):
        NestedPropertyRegistration.create(garage, _ignore).dispose()
    return n


def leaf_changes(n: int) -> int:
    garage = make_garage()
    registration = NestedPropertyRegistration.create(garage, _ignore)
    engine = garage.car.engine
    for i in range(n):
        engine.power = i
    registration.dispose()
    return n


def first_link_rebinds(n: int) -> int:
    garage = make_garage()
    registration = NestedPropertyRegistration.create(garage, _ignore)
    cars = [Car(Engine()), Car(Engine())]
    for i in range(n):
        garage.car = cars[i & 1]
    registration.dispose()
    return n


def null_transitions(n: int) -> int:
    garage = make_garage()
    registration = NestedPropertyRegistration.create(garage, _ignore)
    car = garage.car
    for i in range(n):
        garage.car = None if i & 1 else car
    registration.dispose()
    return n


def deep_rebinds(depth: int) -> Callable[[int], int]:
    """Replace the first link of a ``depth``-segment chain repeatedly."""

    def run(n: int) -> int:
        root = build_segments(depth)
        path = ".".join(["next"] * (depth - 1) + ["value"])
        registration = NestedPropertyRegistration.create(root, _ignore, {"deep": path})
        tails = [build_segments(depth - 1), build_segments(depth - 1)]
        for i in range(n):
            root.next = tails[i & 1]
        registration.dispose()
        return n

    return run


class NestedPathBenchmark:
    """Benchmark suite for nested dependency registrations."""

    def __init__(self, depths=DEPTHS):
        self.console = Console()
        self.depths = depths
        self.results: List[BenchmarkMetrics] = []
        self.depth_results: List[BenchmarkMetrics] = []

    def run_comprehensive_benchmark(self):
        start_time = time.time()
        self._display_header()

        for operation, func in (
            ("Registration Create/Dispose", registration_lifecycle),
            ("Leaf Change", leaf_changes),
            ("First Link Rebind", first_link_rebinds),
            ("Null Transition", null_transitions),
        ):
            self.results.append(self._run(operation, func))

        for depth in self.depths:
            self.depth_results.append(self._run(f"Depth {depth} Rebind", deep_rebinds(depth)))

        self._display_performance_results()
        self._display_depth_results()
        self._display_summary()

        elapsed = time.time() - start_time
        self.console.print(
            f"\n[dim]Benchmark suite completed in {elapsed:.2f} seconds[/dim]"
        )

    def _run(self, operation: str, func: Callable[[int], int]) -> BenchmarkMetrics:
        with self.console.status(f"Running {operation}..."):
            metrics = run_adaptive_benchmark(operation, func)
        AccessorFactory.clear_pool()
        return metrics

    def _display_header(self):
        self.console.print(
            Panel(
                "Registration, notification and rebind costs of nested "
                "property paths",
                title="nestwatch Benchmarks",
                border_style="blue",
            )
        )

    def _display_performance_results(self):
        table = Table(title="Performance")
        table.add_column("Benchmark", style="cyan")
        table.add_column("Ops/sec", style="green", justify="right")
        table.add_column("p50 (us)", justify="right")
        table.add_column("p95 (us)", justify="right")
        table.add_column("p99 (us)", justify="right")
        table.add_column("Peak KB", style="magenta", justify="right")
        table.add_column("GCs", style="red", justify="right")

        for result in self.results:
            table.add_row(
                result.operation,
                f"{result.operations_per_second:,.0f}",
                f"{result.p50_us:.2f}",
                f"{result.p95_us:.2f}",
                f"{result.p99_us:.2f}",
                f"{result.memory_peak_kb:,}",
                str(result.gc_total_collections),
            )

        self.console.print()
        self.console.print(table)

    def _display_depth_results(self):
        """Rebind cost against chain depth, with a least-squares slope."""
        table = Table(title="Rebind Cost by Depth")
        table.add_column("Depth", style="cyan", justify="right")
        table.add_column("Ops/sec", style="green", justify="right")
        table.add_column("p50 (us)", justify="right")
        table.add_column("us / segment", justify="right")

        for depth, result in zip(self.depths, self.depth_results):
            table.add_row(
                str(depth),
                f"{result.operations_per_second:,.0f}",
                f"{result.p50_us:.2f}",
                f"{result.p50_us / depth:.3f}",
            )

        self.console.print()
        self.console.print(table)

        if len(self.depth_results) >= 2:
            slope, intercept = np.polyfit(
                np.array(self.depths, dtype=float),
                np.array([r.p50_us for r in self.depth_results]),
                1,
            )
            self.console.print(
                f"┗━ Fit: {slope:.3f} us per segment + {intercept:.2f} us fixed"
            )

    def _display_summary(self):
        everything = self.results + self.depth_results
        avg_ops_per_sec = np.mean([r.operations_per_second for r in everything])
        avg_memory_peak = np.mean([r.memory_peak_kb for r in everything])
        avg_gc = np.mean([r.gc_total_collections for r in everything])

        summary = Panel(
            f"Average Performance: {avg_ops_per_sec:,.0f} ops/sec\n"
            f"Average Peak Memory: {avg_memory_peak:,.0f} KB\n"
            f"Average GC Collections: {avg_gc:.1f}\n"
            f"Total Benchmarks: {len(everything)}",
            title="Benchmark Summary",
            border_style="green",
        )
        self.console.print()
        self.console.print(summary)


def print_config():
    """Print the current benchmark configuration."""
    print("nestwatch Benchmark Configuration:")
    print(f"  TIME_LIMIT_SECONDS: {TIME_LIMIT_SECONDS}")
    print(f"  STARTING_N: {STARTING_N}")
    print(f"  SCALE_FACTOR: {SCALE_FACTOR}")
    print(f"  NUM_ITERATIONS: {NUM_ITERATIONS}")
    print(f"  SAMPLES: {SAMPLES}")
    print(f"  DEPTHS: {', '.join(map(str, DEPTHS))}")


def main():
    parser = argparse.ArgumentParser(description="nestwatch Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument(
        "--quick",
        action="store_true",
        help="Run quick benchmarks (reduced time limits)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        action="append",
        help=f"Chain depth to benchmark; repeat for several (default: {DEPTHS})",
    )

    args = parser.parse_args()

    if args.config:
        print_config()
        return

    if args.quick:
        global TIME_LIMIT_SECONDS
        TIME_LIMIT_SECONDS = 0.2
    else:
        print_config()
        print()

    depths = tuple(sorted(d for d in args.depth if d >= 2)) if args.depth else DEPTHS
    NestedPathBenchmark(depths).run_comprehensive_benchmark()


if __name__ == "__main__":
    main()
