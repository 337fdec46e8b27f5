#!/usr/bin/env python3
'''
Code Typer - Typing Practice On Your Own Source Files
=====================================================

Features
--------
1) Practice typing with lines taken from a real file: pass one with `--file`, or let the
   trainer pick a random file somewhere below `--directory`.
2) **Live feedback** per character: correct keystrokes turn green, mistakes turn red.
3) Each line is retyped character by character; one keystroke always consumes one slot.
4) A short report (chars/min, WPM, accuracy) is printed when the run ends.

Quick Start
-----------
- Install: `pip install .` (on Windows this pulls in `windows-curses`).
- Run: `codetype` (random file below the current directory) or `codetype -f some_file.py`

Command-Line Options
--------------------
- `-f, --file PATH`       : File used for practice.
- `-d, --directory DIR`   : Pick a random file below DIR (default: current directory).
- `--seed N`              : Seed the random file choice.
- `--log-file PATH`       : Write log records to PATH.
- `-v, --verbose`         : Debug-level logging (with --log-file).
- `--version`, `--help`

Controls (during a session)
---------------------------
- Type the displayed line. Mistakes are shown in red; correct chars are green.
- Backspace steps back one character. Enter moves on to the next line.
- Lines skipped with Enter before they are fully typed count with zero stats.
- Press ESC to end the run.

Design Notes
------------
- Lines shorter than 6 characters (after trimming) are never shown.
- The session never advances on its own: only Enter or ESC end a line.
- Accuracy is rounded to a whole number, so a run scores either 0 or 1.
- Modules: CharacterSlot/render_line, TypingSession, AggregateStats, run_lines/train.
'''

from __future__ import annotations
import argparse
import curses
import logging
import math
import os
import random
import sys
import time
import unicodedata
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

__version__ = "0.1.0"

logger = logging.getLogger(__name__)

# ------------------------------
# Config
# ------------------------------

MIN_LINE_LENGTH = 5          # lines of this many characters or fewer are skipped
RESET_GLYPH_INDEX = 5        # glyph shown for a backspaced slot comes from this line index
FILE_SELECT_ATTEMPTS = 3
MAX_WALK_DEPTH = 64
CHARS_PER_WORD = 5
ESCAPE_DELAY_MS = 25

KEY_CTRL_C = 3
KEY_ESC = 27
ENTER_CODES = (10, 13)
BACKSPACE_CODES = (8, 127)
F_KEY_COUNT = 63

# ------------------------------
# Errors
# ------------------------------

class TrainerError(Exception):
    """Fatal setup problem; the run cannot start."""

class SourceFileError(TrainerError):
    pass

class DirectoryError(TrainerError):
    pass

class FileSelectionError(TrainerError):
    pass

# ------------------------------
# Utility helpers
# ------------------------------

def human_duration(seconds: float) -> str:
    if not math.isfinite(seconds):
        return "-"
    seconds = int(seconds)
    m, s = divmod(seconds, 60)
    return f"{m}m{s:02d}s" if m else f"{s}s"

def round_half_away(x: float) -> float:
    # non-finite values pass through untouched
    if not math.isfinite(x):
        return x
    whole = math.floor(abs(x))
    if abs(x) - whole >= 0.5:
        whole += 1
    return math.copysign(whole, x)

def _ratio(num: float, den: float) -> float:
    if den == 0:
        if num == 0 or math.isnan(num):
            return math.nan
        return math.copysign(math.inf, num)
    return num / den

def format_metric(value: float, suffix: str = "") -> str:
    if not math.isfinite(value):
        return "-"
    return f"{value:.0f}{suffix}"

# ------------------------------
# Stats
# ------------------------------

@dataclass(frozen=True)
class LineStats:
    char_count: int = 0
    seconds: float = 0.0
    mistakes: int = 0

    @classmethod
    def zero(cls) -> "LineStats":
        return cls()

@dataclass
class AggregateStats:
    """Running totals over every line of a run.

    The derived metrics divide by `seconds` and `char_count`; when those are zero
    (every line skipped with Enter) the result is inf or nan instead of an error.
    """
    char_count: int = 0
    seconds: float = 0.0
    mistakes: int = 0
    lines: int = 0

    def add(self, stats: LineStats) -> None:
        self.char_count += stats.char_count
        self.seconds += stats.seconds
        self.mistakes += stats.mistakes
        self.lines += 1

    @property
    def chars_per_minute(self) -> float:
        return round_half_away(_ratio(self.char_count - self.mistakes, self.seconds) * 60.0)

    @property
    def words_per_minute(self) -> float:
        return round_half_away(self.chars_per_minute / CHARS_PER_WORD)

    @property
    def accuracy(self) -> float:
        return round_half_away(1.0 - _ratio(self.mistakes, self.char_count))

def merge(total: AggregateStats, stats: LineStats) -> AggregateStats:
    total.add(stats)
    return total

# ------------------------------
# Line model & rendering
# ------------------------------

class Mark(Enum):
    UNTOUCHED = "untouched"
    CORRECT = "correct"
    INCORRECT = "incorrect"

@dataclass
class CharacterSlot:
    char: str
    mark: Mark = Mark.UNTOUCHED
    glyph: str = ""

    def __post_init__(self):
        if not self.glyph:
            self.glyph = self.char

    def reset(self, line: str) -> None:
        self.mark = Mark.UNTOUCHED
        self.glyph = reset_glyph(line, self.char)

def reset_glyph(line: str, char: str) -> str:
    # A backspaced slot shows the line's character at RESET_GLYPH_INDEX, not its own.
    if len(line) > RESET_GLYPH_INDEX:
        return line[RESET_GLYPH_INDEX]
    return char

def render_line(slots: List[CharacterSlot]) -> List[Tuple[str, Mark]]:
    """Collapse the slots into (text, mark) runs ready to be drawn left to right.

    Untouched slots contribute their glyph; marked slots contribute the target
    character, drawn green or red by the caller.
    """
    runs: List[Tuple[str, Mark]] = []
    for slot in slots:
        text = slot.glyph if slot.mark is Mark.UNTOUCHED else slot.char
        if runs and runs[-1][1] is slot.mark:
            runs[-1] = (runs[-1][0] + text, slot.mark)
        else:
            runs.append((text, slot.mark))
    return runs

# ------------------------------
# Keys
# ------------------------------

class KeyKind(Enum):
    INTERRUPT = "interrupt"
    ESCAPE = "escape"
    ENTER = "enter"
    BACKSPACE = "backspace"
    CHAR = "char"
    OTHER = "other"

def classify_key(key) -> Tuple[KeyKind, Optional[str]]:
    """Map a `get_wch()` result (str or int key code) to a key kind and its text."""
    if isinstance(key, str):
        if len(key) != 1:
            return KeyKind.OTHER, None
        code = ord(key)
        if code == KEY_CTRL_C:
            return KeyKind.INTERRUPT, None
        if code == KEY_ESC:
            return KeyKind.ESCAPE, None
        if code in ENTER_CODES:
            return KeyKind.ENTER, None
        if code in BACKSPACE_CODES:
            return KeyKind.BACKSPACE, None
        if unicodedata.category(key) == "Cc":
            return KeyKind.OTHER, None
        return KeyKind.CHAR, key
    if key == curses.KEY_ENTER:
        return KeyKind.ENTER, None
    if key == curses.KEY_BACKSPACE:
        return KeyKind.BACKSPACE, None
    if curses.KEY_F0 < key <= curses.KEY_F0 + F_KEY_COUNT:
        # F5 types "5"
        return KeyKind.CHAR, str(key - curses.KEY_F0)
    return KeyKind.OTHER, None

# ------------------------------
# Typing Session (curses UI)
# ------------------------------

class SessionState(Enum):
    TYPING = "typing"
    COMPLETED = "completed"
    ABORTED_ENTER = "aborted-enter"
    ABORTED_ESC = "aborted-esc"

class TypingSession:
    def __init__(self, stdscr, line: str, styles: Optional[dict] = None, footer: str = "",
                 clock: Callable[[], float] = time.monotonic):
        self.stdscr = stdscr
        self.line = line
        self.slots = [CharacterSlot(ch) for ch in line]
        self.idx = 0
        self.mistakes = 0
        self.state = SessionState.TYPING
        self.styles = styles or {}
        self.footer = footer
        self.clock = clock
        self.started_at = clock()
        self.ended_at: Optional[float] = None

    @property
    def fully_typed(self) -> bool:
        return self.idx >= len(self.slots)

    # -- state machine --

    def feed(self, key) -> SessionState:
        if self.state is not SessionState.TYPING:
            return self.state
        kind, text = classify_key(key)
        if kind is KeyKind.INTERRUPT:
            # raw mode delivers Ctrl-C as a key; curses.wrapper still restores the terminal
            raise KeyboardInterrupt
        if kind is KeyKind.ESCAPE:
            self._finish(SessionState.ABORTED_ESC)
        elif kind is KeyKind.ENTER:
            self._finish(SessionState.COMPLETED if self.fully_typed else SessionState.ABORTED_ENTER)
        elif kind is KeyKind.BACKSPACE:
            self.backspace()
        elif kind is KeyKind.CHAR:
            self.type_char(text)
        return self.state

    def type_char(self, text: str) -> None:
        if self.idx >= len(self.slots):
            return
        slot = self.slots[self.idx]
        if slot.char == text:
            slot.mark = Mark.CORRECT
        else:
            slot.mark = Mark.INCORRECT
            self.mistakes += 1
        self.idx += 1

    def backspace(self) -> None:
        if self.idx == 0:
            return
        self.idx -= 1
        slot = self.slots[self.idx]
        if slot.mark is Mark.INCORRECT:
            self.mistakes -= 1
        slot.reset(self.line)

    def _finish(self, state: SessionState) -> None:
        self.state = state
        self.ended_at = self.clock()

    def result(self) -> Optional[LineStats]:
        if self.state is SessionState.COMPLETED:
            return LineStats(
                char_count=len(self.slots),
                seconds=self.ended_at - self.started_at,
                mistakes=self.mistakes,
            )
        if self.state is SessionState.ABORTED_ENTER:
            return LineStats.zero()
        return None

    # -- drawing --

    def _add(self, *args) -> None:
        try:
            self.stdscr.addstr(*args)
        except curses.error:
            pass

    def draw_target(self):
        self.stdscr.erase()
        self._add(0, 0, self.line)
        if self.footer:
            maxy, maxx = self.stdscr.getmaxyx()
            self._add(maxy - 1, 0, self.footer[:maxx - 1], self.styles.get("info", 0))
        self.stdscr.refresh()

    def draw(self):
        try:
            self.stdscr.move(0, 0)
        except curses.error:
            pass
        for text, mark in render_line(self.slots):
            self._add(text, self.styles.get(mark, 0))
        _, maxx = self.stdscr.getmaxyx()
        try:
            self.stdscr.move(*divmod(self.idx, max(1, maxx)))
        except curses.error:
            pass
        self.stdscr.refresh()

    def read_key(self):
        try:
            return self.stdscr.get_wch()
        except curses.error:
            return None

    def run(self) -> Optional[LineStats]:
        self.started_at = self.clock()
        self.draw_target()
        while self.state is SessionState.TYPING:
            self.draw()
            key = self.read_key()
            if key is None:
                continue
            self.feed(key)
        logger.debug("Line finished (%s): idx=%d/%d mistakes=%d",
                     self.state.value, self.idx, len(self.slots), self.mistakes)
        return self.result()

# ------------------------------
# File source
# ------------------------------

class _DeadEnd(Exception):
    pass

def _list_dir(path: Path) -> List[Path]:
    return sorted(path.iterdir())

def _walk_once(root: Path, entries: List[Path], rng: random.Random) -> Path:
    seen = {os.path.realpath(root)}
    current = root
    for _ in range(MAX_WALK_DEPTH):
        if not entries:
            raise _DeadEnd(f"empty directory: {current}")
        entry = rng.choice(entries)
        if entry.is_file():
            return entry
        if not entry.is_dir():
            raise _DeadEnd(f"neither file nor directory: {entry}")
        real = os.path.realpath(entry)
        if real in seen:
            raise _DeadEnd(f"directory cycle at {entry}")
        seen.add(real)
        entries = _list_dir(entry)
        current = entry
    raise _DeadEnd(f"directory tree deeper than {MAX_WALK_DEPTH} levels below {root}")

def random_file(directory: str, rng: random.Random | None = None,
                attempts: int = FILE_SELECT_ATTEMPTS) -> str:
    """Pick a file below `directory` by descending into random entries.

    Broken links, unreadable subdirectories, empty directories and cycles each
    cost one of `attempts`; each new attempt starts again from `directory`.
    """
    rng = rng or random.Random()
    root = Path(directory)
    try:
        top = _list_dir(root)
    except OSError as exc:
        raise DirectoryError(f"Unable to access directory: {directory}") from exc

    failures = 0
    while failures < attempts:
        try:
            path = _walk_once(root, top, rng)
        except (OSError, _DeadEnd) as exc:
            failures += 1
            logger.warning("File selection attempt %d/%d failed: %s", failures, attempts, exc)
            continue
        logger.info("Selected %s", path)
        return str(path)
    raise FileSelectionError("Failed to find file. This is usually caused by symlinks.")

def read_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise SourceFileError(f"Unable to read file: {path}") from exc

# ------------------------------
# Training driver
# ------------------------------

def eligible_lines(source_lines: Iterable[str]) -> List[str]:
    lines = (raw.strip() for raw in source_lines)
    return [line for line in lines if line and len(line) > MIN_LINE_LENGTH]

def run_lines(source_lines: Iterable[str],
              run_line: Callable[[str, int, int], Optional[LineStats]]) -> AggregateStats:
    total = AggregateStats()
    lines = eligible_lines(source_lines)
    for number, line in enumerate(lines, start=1):
        stats = run_line(line, number, len(lines))
        if stats is None:
            logger.info("Run ended by user at line %d/%d", number, len(lines))
            break
        merge(total, stats)
    return total

def init_colors() -> dict:
    styles = {}
    try:
        curses.start_color()
        curses.use_default_colors()
        curses.init_pair(1, curses.COLOR_GREEN, -1)
        curses.init_pair(2, curses.COLOR_RED, -1)
        curses.init_pair(3, curses.COLOR_YELLOW, -1)
    except curses.error:
        return styles
    styles[Mark.CORRECT] = curses.color_pair(1)
    styles[Mark.INCORRECT] = curses.color_pair(2)
    styles["info"] = curses.color_pair(3)
    return styles

def prepare_terminal(stdscr) -> dict:
    curses.raw()
    stdscr.keypad(True)
    return init_colors()

def footer_text(number: int, count: int) -> str:
    return f"Line {number}/{count}  |  Enter = next line  |  Backspace = correct  |  ESC = quit"

def train(path: str) -> AggregateStats:
    text = read_source(path)

    def _training(stdscr):
        styles = prepare_terminal(stdscr)

        def run_line(line: str, number: int, count: int) -> Optional[LineStats]:
            session = TypingSession(stdscr, line, styles=styles, footer=footer_text(number, count))
            return session.run()

        return run_lines(text.split("\n"), run_line)

    os.environ.setdefault("ESCDELAY", str(ESCAPE_DELAY_MS))
    # curses.wrapper restores the terminal on every exit path
    total = curses.wrapper(_training)
    print()
    logger.info("Run totals: lines=%d chars=%d mistakes=%d seconds=%.1f",
                total.lines, total.char_count, total.mistakes, total.seconds)
    return total

# ------------------------------
# Reporting
# ------------------------------

def print_report(total: AggregateStats, path: str):
    accuracy = total.accuracy * 100.0 if math.isfinite(total.accuracy) else total.accuracy
    print("=== Training Results ===")
    print(f"File           : {path}")
    print(f"Lines          : {total.lines}")
    print(f"Typed chars    : {total.char_count}  | Mistakes: {total.mistakes}")
    print(f"Elapsed        : {human_duration(total.seconds)}")
    print(f"Chars/min      : {format_metric(total.chars_per_minute)}")
    print(f"WPM            : {format_metric(total.words_per_minute)}")
    print(f"Accuracy       : {format_metric(accuracy, '%')}")

# ------------------------------
# Argparse / Main
# ------------------------------

def parse_args(argv=None):
    p = argparse.ArgumentParser(prog="codetype", description="Typing trainer that uses your code for practice")
    p.add_argument("-f", "--file", type=str, default=None, help="File that will be sourced for your typing practice")
    p.add_argument("-d", "--directory", type=str, default=".", help="Practice with a random file from this directory")
    p.add_argument("--seed", type=int, default=None, help="Seed for the random file choice")
    p.add_argument("--log-file", type=str, default=None, help="Write log records to this file")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging (with --log-file)")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return p.parse_args(argv)

def configure_logging(log_file: Optional[str], verbose: bool = False):
    # nothing but warnings may reach the terminal while curses owns it
    if log_file:
        logging.basicConfig(
            filename=log_file,
            level=logging.DEBUG if verbose else logging.INFO,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
    else:
        logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")

def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_file, args.verbose)

    try:
        path = args.file or random_file(args.directory, rng=random.Random(args.seed))
        total = train(path)
    except TrainerError as exc:
        logger.debug("Fatal setup error", exc_info=True)
        print(f"error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\nTraining cancelled.")
        return 1

    print_report(total, path)
    return 0

if __name__ == "__main__":
    sys.exit(main())
