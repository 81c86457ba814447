"""Console logging for the emulator.

Log lines look like ``[    0.12s][    INFO][chip8x] Loaded ROM: 246 bytes``.
The threshold comes from ``CHIP8X_LOG_LEVEL`` and defaults to WARNING, so a
normal run only reports faults. ``scan_with_progress`` drives a tqdm bar from
inside a jitted ``jax.lax.scan`` through ``io_callback``.
"""

import os
import sys
import time
from typing import Callable, Dict, Optional, Tuple

import jax
from jax.experimental import io_callback
from tqdm import tqdm

LOG_LEVEL_ENV = "CHIP8X_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "WARNING"

LEVELS = {"DEBUG": 0, "INFO": 1, "WARNING": 2, "ERROR": 3, "CRITICAL": 4}

# ANSI escapes, only used when writing to a terminal
LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class ConsoleLogger:
    """Leveled logger that prints one line per message.

    Args:
        name: Shown in brackets on every line.
        log_level: Minimum level to print. Falls back to ``CHIP8X_LOG_LEVEL``.
        use_colors: Color the level tag when the stream is a terminal.
        show_timestamps: Prefix seconds since the logger was created.
        stream: File-like target. ``None`` writes to whatever ``sys.stdout`` is
            at the time of the call.
    """

    def __init__(
        self,
        name: str = "chip8x",
        log_level: Optional[str] = None,
        use_colors: bool = True,
        show_timestamps: bool = True,
        stream=None,
    ):
        self.name = name
        self.log_level = (log_level or os.environ.get(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
        self.stream = stream
        target = stream or sys.stdout
        self.use_colors = use_colors and hasattr(target, "isatty") and target.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def set_level(self, log_level: str):
        self.log_level = log_level.upper()

    def enabled_for(self, level: str) -> bool:
        # Unknown names rank as INFO
        return LEVELS.get(level.upper(), 1) >= LEVELS.get(self.log_level, 1)

    def _format_message(self, level: str, message: str) -> str:
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{LEVEL_COLORS.get(level.upper(), '')}{tag}{RESET}"
        elapsed = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        return f"{elapsed}{tag}[{self.name}] {message}"

    def log(self, level: str, message: str):
        if self.enabled_for(level):
            print(self._format_message(level, message), file=self.stream or sys.stdout, flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


_loggers: Dict[str, ConsoleLogger] = {}


def get_logger(name: str = "chip8x") -> ConsoleLogger:
    """Return the shared logger registered under ``name``."""
    if name not in _loggers:
        _loggers[name] = ConsoleLogger(name)
    return _loggers[name]


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build real-time tqdm progress bar for JAX computations."""
    if desc is None:
        desc = f"Emulating ({n:,} steps)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    # Steps not yet reported when the last iteration starts.
    final_update = (n - 1) % print_rate + 1

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="step", **kwargs)

    def _update_tqdm(steps):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(steps))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_define_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            (iter_num % print_rate == 0) & (iter_num > 0),
            lambda _: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_update_tqdm, None, final_update, ordered=True),
            lambda _: None,
            operand=None,
        )
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator to add real-time progress bar to JAX scan operations."""
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            if isinstance(x, tuple):
                iter_num = x[0]
            else:
                iter_num = x

            _update_progress_bar(iter_num)

            result = func(carry, x)

            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
