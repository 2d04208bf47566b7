#!/usr/bin/env python3
"""
  L I F E
  Conway's Game of Life, animated in a plain ANSI terminal.

  The grid is sized once from the terminal (every cell is two characters
  wide), seeded at random with 40% live cells, then redrawn and advanced
  one generation per tick until the process is killed.

  Cells beyond the edge of the grid are permanently dead; there is no
  wraparound.

  Usage:
    python3 life.py            tick every 200 ms
    python3 life.py 50         tick every 50 ms
    python3 life.py --stats life_stats.csv
    python3 life.py -h         show help
"""

from __future__ import annotations

import argparse
import os
import sys
import threading
import time
from enum import IntEnum
from pathlib import Path
from typing import IO, Callable, ClassVar, Iterable, NoReturn, Protocol

import numpy as np
from numpy.typing import ArrayLike, NDArray

# ── Timing ──────────────────────────────────────────────────────────────
DEFAULT_INTERVAL_MS: int = 200
MAX_INTERVAL_MS: int = 2**64 - 1  # anything larger is treated as unparseable
# Longest interval time.sleep() accepts, in whole milliseconds
MAX_SLEEP_MS: int = int(threading.TIMEOUT_MAX * 1000)

# ── Seeding ─────────────────────────────────────────────────────────────
# One draw in [0, SEED_DRAWS) per cell; below the threshold means alive.
SEED_DRAWS: int = 10
LIVE_DRAW_THRESHOLD: int = 4

# ── Moore neighbourhood ─────────────────────────────────────────────────
NEIGHBOR_OFFSETS: tuple[tuple[int, int], ...] = (
    (-1, -1), (-1, 0), (-1, 1),
    (0, -1),           (0, 1),
    (1, -1),  (1, 0),  (1, 1),
)

# ── Escape sequences ────────────────────────────────────────────────────
CLEAR_SCREEN = b"\x1b[2J\x1b[H"  # clear, then cursor home
REVERSE_ON = b"\x1b[7m"
ATTRS_OFF = b"\x1b[0m"

DEAD_GLYPH = b"  "
LIVE_GLYPH = REVERSE_ON + b"  " + ATTRS_OFF
ROW_BREAK = b"\n"

HELP_TEXT = """\
Usage:
  life [num]

Options:
  num           Forward generation in num milliseconds, instead of 200 milliseconds.
  --stats PATH  Append per-generation population telemetry to PATH as CSV.
  -h, --help    Show help.
"""


# ═══════════════════════════════════════════════════════════════════════
#  Cells and the rule
# ═══════════════════════════════════════════════════════════════════════

class Cell(IntEnum):
    """State of a single cell. The value is its neighbour-count weight."""

    DEAD = 0
    LIVE = 1


def transition(state: Cell, live_neighbors: int) -> Cell:
    """B3/S23: the state a cell takes in the next generation."""
    if state == Cell.DEAD:
        if live_neighbors == 3:
            return Cell.LIVE  # birth
    else:
        if live_neighbors in (2, 3):
            return Cell.LIVE  # survival
        elif live_neighbors < 2:
            return Cell.DEAD  # underpopulation
        elif live_neighbors >= 4:
            return Cell.DEAD  # overpopulation
    return Cell.DEAD


# ═══════════════════════════════════════════════════════════════════════
#  The grid
# ═══════════════════════════════════════════════════════════════════════

class Grid:
    """
    A fixed-size Game of Life board with a dead border.

    The board owns its cell buffer outright: the constructor copies what
    it is given and ``snapshot()`` hands out copies. ``advance()`` never
    edits the buffer in place; it computes the next generation into a
    fresh array and swaps it in, so every cell sees the same previous
    generation.
    """

    def __init__(self, cells: ArrayLike) -> None:
        buf = np.array(cells, dtype=np.int8)
        if buf.ndim != 2:
            raise ValueError(f"grid cells must be 2-D, got shape {buf.shape}")
        if buf.size and not np.isin(buf, (0, 1)).all():
            raise ValueError("grid cells must be 0 (dead) or 1 (live)")
        self._cells: NDArray[np.int8] = buf
        self._height: int = buf.shape[0]
        self._width: int = buf.shape[1]
        self._generation: int = 0

    @classmethod
    def random(cls, height: int, width: int, rng: np.random.Generator) -> Grid:
        """Seed a board where each cell is live with probability 0.4."""
        draws = rng.integers(0, SEED_DRAWS, size=(height, width))
        return cls((draws < LIVE_DRAW_THRESHOLD).astype(np.int8))

    @classmethod
    def from_live(
        cls, height: int, width: int, cells: Iterable[tuple[int, int]]
    ) -> Grid:
        """Build a board with exactly ``cells`` live."""
        buf = np.zeros((height, width), dtype=np.int8)
        for row, col in cells:
            if not (0 <= row < height and 0 <= col < width):
                raise IndexError(
                    f"cell ({row}, {col}) outside {height}x{width} grid"
                )
            buf[row, col] = Cell.LIVE
        return cls(buf)

    # ── Shape ───────────────────────────────────────────────────────

    @property
    def height(self) -> int:
        """Number of rows, fixed for the life of the grid."""
        return self._height

    @property
    def width(self) -> int:
        """Number of columns, fixed for the life of the grid."""
        return self._width

    @property
    def shape(self) -> tuple[int, int]:
        return self._height, self._width

    @property
    def generation(self) -> int:
        return self._generation

    # ── Cell access ─────────────────────────────────────────────────

    def cell_value(self, row: int, col: int) -> Cell:
        """State of an on-board cell; off-board coordinates raise IndexError."""
        # numpy would silently wrap negative indices
        if not (0 <= row < self._height and 0 <= col < self._width):
            raise IndexError(
                f"cell ({row}, {col}) outside {self._height}x{self._width} grid"
            )
        return Cell(int(self._cells[row, col]))

    def is_live(self, row: int, col: int) -> Cell:
        """Like ``cell_value``, but anything off the board is dead."""
        if row < 0 or row >= self._height or col < 0 or col >= self._width:
            return Cell.DEAD
        return self.cell_value(row, col)

    def next_state(self, row: int, col: int) -> Cell:
        live = sum(self.is_live(row + dr, col + dc) for dr, dc in NEIGHBOR_OFFSETS)
        return transition(self.cell_value(row, col), live)

    # ── Simulation ──────────────────────────────────────────────────

    def neighbor_counts(self) -> NDArray[np.int16]:
        """Live-neighbour count for every cell, dead border included."""
        h, w = self._height, self._width
        padded = np.pad(self._cells, 1).astype(np.int16)
        counts = np.zeros((h, w), dtype=np.int16)
        for dr, dc in NEIGHBOR_OFFSETS:
            counts += padded[1 + dr : 1 + dr + h, 1 + dc : 1 + dc + w]
        return counts

    def advance(self) -> None:
        """Replace the board with the next generation."""
        n = self.neighbor_counts()
        # Zero-copy bool view of the int8 buffer
        alive = self._cells.view(np.bool_)
        n_is_3 = n == 3
        birth = ~alive & n_is_3
        survive = alive & (n_is_3 | (n == 2))
        self._cells = (birth | survive).astype(np.int8)
        self._generation += 1

    def population(self) -> int:
        return int(self._cells.sum())

    def snapshot(self) -> NDArray[np.int8]:
        return self._cells.copy()

    def __repr__(self) -> str:
        return (
            f"Grid({self._height}×{self._width}, "
            f"gen={self._generation}, alive={self.population()})"
        )


# ═══════════════════════════════════════════════════════════════════════
#  Rendering
# ═══════════════════════════════════════════════════════════════════════

class Sink(Protocol):
    """Anything that takes bytes and can be flushed (stdout, BytesIO...)."""

    def write(self, data: bytes, /) -> object: ...

    def flush(self) -> None: ...


GLYPHS: tuple[bytes, bytes] = (DEAD_GLYPH, LIVE_GLYPH)  # indexed by Cell


def clear(sink: Sink) -> None:
    sink.write(CLEAR_SCREEN)
    sink.flush()


def draw(grid: Grid, sink: Sink) -> None:
    """
    Paint one frame.

    The screen is cleared first, then the whole board goes out as a
    single write followed by a single flush, so the sink never holds a
    half-drawn frame.
    """
    clear(sink)
    frame = bytearray()
    for row in grid.snapshot().tolist():
        frame += ROW_BREAK
        for value in row:
            frame += GLYPHS[value]
    sink.write(bytes(frame))
    sink.flush()


# ═══════════════════════════════════════════════════════════════════════
#  Stats logger
# ═══════════════════════════════════════════════════════════════════════

class StatsLogger:
    """Writes per-generation population telemetry to CSV."""

    HEADER: ClassVar[str] = "gen,time_s,population,height,width\n"
    FLUSH_EVERY: ClassVar[int] = 50

    def __init__(self, path: Path) -> None:
        self._path = path
        self._fh: IO[str] | None = None
        self._t0: float = time.monotonic()

    @property
    def enabled(self) -> bool:
        return self._fh is not None

    def open(self) -> None:
        try:
            self._fh = open(self._path, "w")
            self._fh.write(self.HEADER)
            self._fh.flush()
        except OSError:
            self._fh = None

    def log(self, gen: int, population: int, height: int, width: int) -> None:
        if self._fh is None:
            return
        t = time.monotonic() - self._t0
        try:
            self._fh.write(f"{gen},{t:.1f},{population},{height},{width}\n")
            if gen % self.FLUSH_EVERY == 0:
                self._fh.flush()
        except OSError:
            # Telemetry is best effort; keep animating without it
            self.close()

    def close(self) -> None:
        if self._fh is not None:
            try:
                self._fh.close()
            except OSError:
                pass
            self._fh = None


# ═══════════════════════════════════════════════════════════════════════
#  Main loop
# ═══════════════════════════════════════════════════════════════════════

def terminal_size() -> tuple[int, int]:
    """(rows, columns) of the terminal on stdout. Raises OSError if none."""
    size = os.get_terminal_size(sys.stdout.fileno())
    return size.lines, size.columns


def parse_interval(value: str | None) -> int:
    """
    Milliseconds between generations; anything unparseable means 200.

    Values past the unsigned 64-bit range count as unparseable. Values
    that fit but are longer than ``time.sleep`` allows are clamped.
    """
    if value is None or not (value.isascii() and value.isdigit()):
        return DEFAULT_INTERVAL_MS
    try:
        ms = int(value)
    except ValueError:
        # past the interpreter's int-conversion digit limit
        return DEFAULT_INTERVAL_MS
    if ms > MAX_INTERVAL_MS:
        return DEFAULT_INTERVAL_MS
    return min(ms, MAX_SLEEP_MS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="life",
        description="Conway's Game of Life in the terminal",
        add_help=False,
        allow_abbrev=False,
    )
    parser.add_argument("-h", "--help", action="store_true")
    parser.add_argument("interval", nargs="?", default=None)
    parser.add_argument("--stats", type=Path, default=None,
                        help="Write population telemetry CSV to this path")
    return parser


def run(
    grid: Grid,
    sink: Sink,
    interval_ms: int,
    sleep: Callable[[float], None] = time.sleep,
    stats: StatsLogger | None = None,
) -> NoReturn:
    """Draw, advance, sleep, forever. Only an exception gets out."""
    if stats is not None:
        stats.open()
    try:
        while True:
            draw(grid, sink)
            grid.advance()
            if stats is not None:
                stats.log(grid.generation, grid.population(),
                          grid.height, grid.width)
            sleep(interval_ms / 1000.0)
    finally:
        if stats is not None:
            stats.close()


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    if len(argv) == 1 and argv[0] in ("-h", "--help"):
        sys.stdout.write(HELP_TEXT)
        sys.stdout.flush()
        return 0

    args, extra = build_parser().parse_known_args(argv)
    if extra or args.help:
        interval_ms = DEFAULT_INTERVAL_MS
    else:
        interval_ms = parse_interval(args.interval)

    # Captured once; resizing the terminal later has no effect
    rows, cols = terminal_size()
    grid = Grid.random(rows, cols // 2, np.random.default_rng())

    stats = StatsLogger(args.stats) if args.stats is not None else None
    run(grid, sys.stdout.buffer, interval_ms, stats=stats)


def cli() -> None:
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    cli()
