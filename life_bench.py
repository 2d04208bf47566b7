#!/usr/bin/env python3
"""
Profiling harness for the terminal Life animator.

Advances and renders a seeded grid headlessly under cProfile, drawing
into a sink that only counts bytes, then prints a ranked breakdown of
where time is spent.

Usage:
  python3 life_bench.py                  # 500 frames, summary
  python3 life_bench.py -n 1000          # 1000 frames
  python3 life_bench.py --line-timing    # per-frame component timing
  python3 life_bench.py --dump prof.out  # dump cProfile binary for snakeviz etc.
"""

from __future__ import annotations

import argparse
import cProfile
import pstats
import time
from io import StringIO

import numpy as np

from life import DEFAULT_INTERVAL_MS, Grid, draw


# ── Headless sink ───────────────────────────────────────────────────────

class NullSink:
    """Stands in for stdout: swallows frames, keeps count."""

    def __init__(self) -> None:
        self.bytes_written = 0
        self.flushes = 0

    def write(self, data: bytes) -> int:
        self.bytes_written += len(data)
        return len(data)

    def flush(self) -> None:
        self.flushes += 1


def stats_line(name: str, data: list[float]) -> str:
    arr = np.array(data) * 1000  # to ms
    return (f"{name:<20} {arr.mean():8.2f} {np.median(arr):8.2f} "
            f"{np.percentile(arr, 95):8.2f} {np.percentile(arr, 99):8.2f} "
            f"{arr.max():8.2f}")


def run_benchmark(
    n_frames: int,
    term_rows: int = 60,
    term_cols: int = 200,
    seed: int = 0,
    line_timing: bool = False,
    dump_path: str | None = None,
) -> dict[str, float]:
    """Run the benchmark for n_frames, report results, return a summary."""

    grid = Grid.random(term_rows, term_cols // 2, np.random.default_rng(seed))
    sink = NullSink()

    print(f"Grid: {grid.height}x{grid.width}  Frames: {n_frames}")
    print(f"Terminal: {term_rows}x{term_cols}  Seed: {seed}")
    print()

    # ── Per-frame component timing ─────────────────────────────────
    if line_timing:
        advance_times: list[float] = []
        draw_times: list[float] = []
        total_times: list[float] = []

        for frame in range(n_frames):
            frame_t0 = time.perf_counter()

            t0 = time.perf_counter()
            draw(grid, sink)
            draw_times.append(time.perf_counter() - t0)

            t0 = time.perf_counter()
            grid.advance()
            advance_times.append(time.perf_counter() - t0)

            total_times.append(time.perf_counter() - frame_t0)

            if (frame + 1) % 100 == 0:
                avg_ms = sum(total_times[-100:]) / 100 * 1000
                print(f"  frame {frame + 1}/{n_frames}  "
                      f"avg {avg_ms:.1f}ms/frame  "
                      f"pop {grid.population():,}")

        if n_frames:
            print()
            print("=== Per-Frame Component Breakdown (ms) ===")
            print(f"{'Component':<20} {'Mean':>8} {'P50':>8} {'P95':>8} {'P99':>8} {'Max':>8}")
            print("-" * 68)
            print(stats_line("draw()", draw_times))
            print(stats_line("advance()", advance_times))
            print(stats_line("TOTAL", total_times))

            budget_ms = float(DEFAULT_INTERVAL_MS)
            total_arr = np.array(total_times) * 1000
            print(f"\nBytes/frame: {sink.bytes_written / n_frames:.0f}")
            print(f"Default tick: {budget_ms:.0f}ms  "
                  f"headroom (mean): {budget_ms - total_arr.mean():.1f}ms")

        return {
            "frames": float(n_frames),
            "wall_s": float(sum(total_times)),
            "bytes": float(sink.bytes_written),
            "flushes": float(sink.flushes),
            "population": float(grid.population()),
        }

    # ── cProfile run ───────────────────────────────────────────────
    def profiled_run() -> None:
        for _ in range(n_frames):
            draw(grid, sink)
            grid.advance()

    profiler = cProfile.Profile()
    wall_t0 = time.perf_counter()
    profiler.runctx("profiled_run()", globals(), locals())
    wall_dt = time.perf_counter() - wall_t0

    if n_frames:
        print(f"Wall time: {wall_dt:.2f}s  ({wall_dt / n_frames * 1000:.1f}ms/frame)")
        print(f"Effective FPS: {n_frames / wall_dt:.1f}")
        print()

    if dump_path:
        profiler.dump_stats(dump_path)
        print(f"Profile data saved to: {dump_path}")
        print(f"  View with: python3 -m pstats {dump_path}")
        print()

    buf = StringIO()
    ps = pstats.Stats(profiler, stream=buf)
    ps.sort_stats("cumulative")
    ps.print_stats(25)
    print(buf.getvalue())

    return {
        "frames": float(n_frames),
        "wall_s": wall_dt,
        "bytes": float(sink.bytes_written),
        "flushes": float(sink.flushes),
        "population": float(grid.population()),
    }


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Profile the terminal Life animator")
    parser.add_argument("-n", "--frames", type=int, default=500,
                        help="Number of frames to simulate (default: 500)")
    parser.add_argument("--rows", type=int, default=60,
                        help="Simulated terminal rows (default: 60)")
    parser.add_argument("--cols", type=int, default=200,
                        help="Simulated terminal cols (default: 200)")
    parser.add_argument("--seed", type=int, default=0,
                        help="Seed for the initial grid (default: 0)")
    parser.add_argument("--line-timing", action="store_true",
                        help="Per-frame component timing instead of cProfile")
    parser.add_argument("--dump", type=str, default=None,
                        help="Dump cProfile binary to this path")
    args = parser.parse_args(argv)

    run_benchmark(
        n_frames=args.frames,
        term_rows=args.rows,
        term_cols=args.cols,
        seed=args.seed,
        line_timing=args.line_timing,
        dump_path=args.dump,
    )


if __name__ == "__main__":
    main()
