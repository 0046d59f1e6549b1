#!/usr/bin/env python3
"""
Proxa Performance Benchmarks

Measures the cost of the operations that sit on a hot path when a wrapped
structure is used as application state: flat writes, writes deep inside the
structure (which notify every level above them), observer fan-out, first-read
instrumentation and snapshots. Per-operation latencies are summarised with
numpy percentiles and rendered with rich.

Usage:
    python scripts/benchmark.py                 # Run all benchmarks
    python scripts/benchmark.py --config        # Show current configuration
    python scripts/benchmark.py --depth 32      # Override a parameter

Configuration:
    Adjust the constants at the top of the file, or pass the matching flags.
"""

import argparse
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

import numpy as np
from rich.console import Console
from rich.panel import Panel
from rich.table import Table, box

from proxa import dumps, to_plain, wrap

# Configuration constants - adjust these to change benchmark behavior
ITERATIONS = 20_000  # Timed operations per benchmark
DEPTH = 16  # Nesting depth for deep writes and snapshots
FAN_OUT = 32  # Global observers on the node being written
WIDTH = 256  # Keys per level for flat structures


@dataclass
class BenchmarkResult:
    """Latency samples for one benchmark, in microseconds."""

    name: str
    samples_us: np.ndarray

    @property
    def ops_per_second(self) -> float:
        total_s = float(self.samples_us.sum()) / 1e6
        return len(self.samples_us) / total_s if total_s > 0 else float("inf")

    def percentile(self, q: float) -> float:
        return float(np.percentile(self.samples_us, q))


def _noop(node, prop, value, path):
    pass


def _deep_structure(depth: int) -> dict:
    root: dict = {"leaf": 0}
    for _ in range(depth):
        root = {"child": root}
    return root


def _time_each(operation: Callable[[int], None], iterations: int) -> np.ndarray:
    samples = np.empty(iterations, dtype=np.float64)
    clock = time.perf_counter
    for i in range(iterations):
        start = clock()
        operation(i)
        samples[i] = clock() - start
    return samples * 1e6


def bench_flat_write(iterations: int, width: int) -> np.ndarray:
    node = wrap({f"k{i}": 0 for i in range(width)}, _noop)
    keys = [f"k{i}" for i in range(width)]

    def write(i: int) -> None:
        node[keys[i % width]] = i

    return _time_each(write, iterations)


def bench_unchanged_write(iterations: int) -> np.ndarray:
    node = wrap({"k": "constant"}, _noop)

    def write(i: int) -> None:
        node["k"] = "constant"

    return _time_each(write, iterations)


def bench_deep_write(iterations: int, depth: int) -> np.ndarray:
    root = wrap(_deep_structure(depth), _noop)
    leaf = root
    for _ in range(depth):
        leaf = leaf["child"]
        leaf.subscribe(_noop)

    def write(i: int) -> None:
        leaf["leaf"] = i

    return _time_each(write, iterations)


def bench_fan_out(iterations: int, fan_out: int) -> np.ndarray:
    node = wrap({"value": 0})
    for _ in range(fan_out):
        node.subscribe(lambda node, prop, value, path: None)

    def write(i: int) -> None:
        node["value"] = i

    return _time_each(write, iterations)


def bench_first_read(iterations: int, width: int) -> np.ndarray:
    # A fresh structure every width reads so most reads instrument a child.
    state: Dict[str, Any] = {}

    def read(i: int) -> None:
        if i % width == 0:
            state["node"] = wrap({f"k{j}": {"v": j} for j in range(width)})
        state["node"][f"k{i % width}"]

    return _time_each(read, iterations)


def bench_snapshot(iterations: int, depth: int) -> np.ndarray:
    root = wrap(_deep_structure(depth))
    node = root
    for _ in range(depth):
        node = node["child"]

    def snapshot(i: int) -> None:
        to_plain(root)

    return _time_each(snapshot, max(iterations // 10, 1))


class ProxaBenchmark:
    """Runs every benchmark and renders the results."""

    def __init__(self, iterations: int, depth: int, fan_out: int, width: int):
        self.console = Console()
        self.iterations = iterations
        self.depth = depth
        self.fan_out = fan_out
        self.width = width
        self.results: List[BenchmarkResult] = []

    def run(self) -> None:
        self.console.print(
            Panel(
                "[bold]Proxa Performance Benchmarks[/bold]\n"
                f"{self.iterations:,} iterations · depth {self.depth} · "
                f"fan-out {self.fan_out} · width {self.width}",
                border_style="blue",
            )
        )

        benchmarks = [
            ("Flat write", lambda: bench_flat_write(self.iterations, self.width)),
            ("Unchanged write", lambda: bench_unchanged_write(self.iterations)),
            (f"Deep write (depth {self.depth})", lambda: bench_deep_write(self.iterations, self.depth)),
            (f"Fan-out ({self.fan_out} observers)", lambda: bench_fan_out(self.iterations, self.fan_out)),
            ("First read (instrumenting)", lambda: bench_first_read(self.iterations, self.width)),
            (f"Snapshot (depth {self.depth})", lambda: bench_snapshot(self.iterations, self.depth)),
        ]

        started = time.perf_counter()
        for name, bench in benchmarks:
            self.console.print(f"[yellow]Running {name}...[/yellow]")
            self.results.append(BenchmarkResult(name, bench()))

        self._display_results()
        self._display_sample_payload()
        elapsed = time.perf_counter() - started
        self.console.print()
        self.console.print(f"[dim]Benchmark completed in {elapsed:.2f} seconds[/dim]")

    def _display_results(self) -> None:
        table = Table(
            title="Latency Percentiles",
            box=box.DOUBLE,
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Operation", style="white", no_wrap=True)
        table.add_column("ops/s", style="magenta", justify="right")
        table.add_column("p50", style="green", justify="right")
        table.add_column("p95", style="yellow", justify="right")
        table.add_column("p99", style="red", justify="right")

        for result in self.results:
            table.add_row(
                result.name,
                f"{result.ops_per_second:,.0f}",
                f"{result.percentile(50):.2f}μs",
                f"{result.percentile(95):.2f}μs",
                f"{result.percentile(99):.2f}μs",
            )

        self.console.print()
        self.console.print(table)

    def _display_sample_payload(self) -> None:
        sample = wrap({"users": [{"name": "Ada"}], "depth": self.depth})
        sample.users[0].name = "Grace"
        self.console.print()
        self.console.print(
            Panel(dumps(sample, indent=2), title="Snapshot sample", border_style="green")
        )


def print_config() -> None:
    """Print the current benchmark configuration."""
    print("Proxa Benchmark Configuration:")
    print(f"  ITERATIONS: {ITERATIONS}")
    print(f"  DEPTH: {DEPTH}")
    print(f"  FAN_OUT: {FAN_OUT}")
    print(f"  WIDTH: {WIDTH}")


def main():
    """Main entry point for the benchmark script."""
    parser = argparse.ArgumentParser(description="Proxa Performance Benchmarks")
    parser.add_argument(
        "--config", action="store_true", help="Show current benchmark configuration"
    )
    parser.add_argument("--iterations", type=int, default=ITERATIONS)
    parser.add_argument("--depth", type=int, default=DEPTH)
    parser.add_argument("--fan-out", type=int, default=FAN_OUT)
    parser.add_argument("--width", type=int, default=WIDTH)
    args = parser.parse_args()

    if args.config:
        print_config()
        return

    ProxaBenchmark(args.iterations, args.depth, args.fan_out, args.width).run()


if __name__ == "__main__":
    main()
