#!/usr/bin/env python3
"""Benchmark suite for pyskip comparing against a bisect-backed sorted list."""

import argparse
import bisect
import json
import random
import time
from pathlib import Path
from typing import Dict, List

import numpy as np
import plotly.graph_objects as go
from tqdm import tqdm

from pyskip import SkipList


class BisectMap:
    """Baseline: sorted key list + dict, O(n) inserts and erases."""

    def __init__(self):
        self._keys: List[int] = []
        self._data: Dict[int, bytes] = {}

    def insert(self, key, value):
        if key not in self._data:
            bisect.insort(self._keys, key)
        self._data[key] = value

    def find(self, key):
        return self._data.get(key)

    def erase(self, key):
        if key not in self._data:
            return 0
        del self._data[key]
        del self._keys[bisect.bisect_left(self._keys, key)]
        return 1


class Metrics:
    def __init__(self):
        self.insert_latencies: List[float] = []
        self.find_latencies: List[float] = []
        self.erase_latencies: List[float] = []

    def to_dict(self) -> Dict:
        return {
            name: {
                "p50": float(np.percentile(values, 50)),
                "p95": float(np.percentile(values, 95)),
                "p99": float(np.percentile(values, 99)),
                "mean": float(np.mean(values)),
            }
            for name, values in (
                ("insert", self.insert_latencies),
                ("find", self.find_latencies),
                ("erase", self.erase_latencies),
            )
        }


def plot_latencies(results: Dict[str, Metrics], output_path: Path):
    fig = go.Figure()
    for label, metrics in results.items():
        for op, values in (
            ("insert", metrics.insert_latencies),
            ("find", metrics.find_latencies),
            ("erase", metrics.erase_latencies),
        ):
            fig.add_trace(go.Box(y=values, name=f"{label} {op}", boxpoints="outliers"))
    fig.update_layout(title="Latency distribution", yaxis_title="Latency (µs)", boxmode="group")
    fig.write_html(output_path)


class BenchmarkSuite:
    def __init__(self, num_entries: int, seed: int):
        rnd = random.Random(seed)
        self.num_entries = num_entries
        self.seed = seed
        self._keys = rnd.sample(range(num_entries * 10), num_entries)
        self._lookups = rnd.sample(self._keys, len(self._keys))

    def run(self, label: str, container) -> Metrics:
        metrics = Metrics()
        for key in tqdm(self._keys, desc=f"{label} insert"):
            start = time.perf_counter()
            container.insert(key, b"x")
            metrics.insert_latencies.append((time.perf_counter() - start) * 1e6)
        for key in tqdm(self._lookups, desc=f"{label} find"):
            start = time.perf_counter()
            container.find(key)
            metrics.find_latencies.append((time.perf_counter() - start) * 1e6)
        for key in tqdm(self._lookups, desc=f"{label} erase"):
            start = time.perf_counter()
            container.erase(key)
            metrics.erase_latencies.append((time.perf_counter() - start) * 1e6)
        return metrics


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--size", type=int, default=100000, help="Number of entries")
    parser.add_argument("--seed", type=int, default=0, help="Seed for keys and tower heights")
    parser.add_argument("--output", type=Path, default=Path("benchmark_results"), help="Output directory")
    args = parser.parse_args()

    args.output.mkdir(parents=True, exist_ok=True)

    suite = BenchmarkSuite(args.size, args.seed)
    results = {
        "pyskip": suite.run("pyskip", SkipList(seed=args.seed)),
        "bisect": suite.run("bisect", BisectMap()),
    }

    plot_latencies(results, args.output / "latencies.html")
    with open(args.output / "metrics.json", "w") as f:
        json.dump({label: m.to_dict() for label, m in results.items()}, f, indent=2)


if __name__ == "__main__":
    main()
