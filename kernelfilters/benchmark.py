#!/usr/bin/env python3
"""
Benchmark the sequential kernel pass against the block-parallel one and
check that both produce identical pixels.
"""
import logging
import time
from dataclasses import dataclass

import numpy as np
from joblib import effective_n_jobs

from kernelfilters.convolution import apply_kernel
from kernelfilters.errors import InvalidParameter

logger = logging.getLogger(__name__)


@dataclass
class BenchmarkResult:
    name: str
    image: np.ndarray
    times: list

    @property
    def mean(self):
        return float(np.mean(self.times))

    @property
    def std(self):
        return float(np.std(self.times))


def apply_kernel_timed(img, kernel, **kwargs):
    """Run apply_kernel() and return (result, elapsed_seconds)."""
    t0 = time.perf_counter()
    out = apply_kernel(img, kernel, **kwargs)
    t1 = time.perf_counter()
    return out, (t1 - t0)


def _run(name, img, kernel, n_runs, **kwargs):
    times = []
    result = None
    for i in range(n_runs):
        result, elapsed = apply_kernel_timed(img, kernel, **kwargs)
        times.append(elapsed)
        logger.info("%s run %d: %.4f seconds", name, i + 1, elapsed)
    return BenchmarkResult(name, result, times)


def benchmark_kernel(img, kernel, n_runs=3, n_jobs=-1, block_size=None, prefer=None):
    """
    Time the sequential and the parallel engine on the same input.

    Returns a dict with the two BenchmarkResult entries under "sequential" and
    "parallel", plus "speedup" and "max_diff" (largest absolute channel
    difference between the two outputs).
    """
    if n_runs < 1:
        raise InvalidParameter(f"benchmark_kernel: n_runs must be >= 1, got {n_runs}")

    seq = _run("sequential", img, kernel, n_runs)
    par = _run("parallel", img, kernel, n_runs, n_jobs=n_jobs, block_size=block_size, prefer=prefer)

    speedup = seq.mean / par.mean if par.mean > 0 else float("inf")
    max_diff = int(np.abs(seq.image.astype(int) - par.image.astype(int)).max())
    return {"sequential": seq, "parallel": par, "speedup": speedup, "max_diff": max_diff}


def print_report(results, img, kernel, n_jobs):
    print(f"Image size: {img.shape[1]}x{img.shape[0]} pixels")
    print(f"Kernel size: {kernel.width}x{kernel.height}")
    print(f"Workers: {effective_n_jobs(n_jobs)}")
    print("=" * 70)
    for key in ("sequential", "parallel"):
        r = results[key]
        print(f"{r.name:<12} {r.mean:.4f} ± {r.std:.4f} seconds")
    print(f"Speedup: {results['speedup']:.2f}x")
    print(f"Max difference (Sequential vs Parallel): {results['max_diff']}")
    if results["max_diff"] == 0:
        print("✓ Results are identical")
    else:
        print("⚠ Results differ")


if __name__ == "__main__":
    import sys

    from kernelfilters.io import load_image, save_image
    from kernelfilters.kernels import get_kernel

    # Configuration
    input_path = sys.argv[1] if len(sys.argv) > 1 else "place.png"
    output_path = "output_sequential.png"
    kernel = get_kernel("gaussian_7x7").normalized()
    n_runs = 3
    n_jobs = -1  # -1 uses all available cores

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    img = load_image(input_path)
    results = benchmark_kernel(img, kernel, n_runs=n_runs, n_jobs=n_jobs)
    print_report(results, img, kernel, n_jobs)

    save_image(results["sequential"].image, output_path)
    print(f"Saved: {output_path}")
