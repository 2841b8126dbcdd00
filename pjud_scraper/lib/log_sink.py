"""Ordered progress log shared between the scraper and its caller."""

import threading
from collections import deque
from typing import Callable, Optional

from pjud_scraper.lib.logging_config import get_logger

logger = get_logger()

LogCallback = Callable[[str], None]


class LogSink:
    """Append-only sequence of human readable progress lines.

    Each line is delivered to `on_log` as soon as it is emitted, in emission
    order. The sink keeps at most `max_lines` of the most recent lines for
    later retrieval; the callback still sees every line.
    """

    def __init__(self, on_log: Optional[LogCallback] = None, max_lines: Optional[int] = None, echo: bool = True):
        self._on_log = on_log
        self._lines: deque[str] = deque(maxlen=max_lines)
        self._echo = echo
        self._lock = threading.RLock()

    def emit(self, line: str) -> None:
        self._append(line, "INFO")

    def error(self, line: str) -> None:
        self._append(line, "ERROR")

    def _append(self, line: str, level: str) -> None:
        with self._lock:
            self._lines.append(line)
            if self._echo:
                logger.opt(depth=2).log(level, line)
            if self._on_log is None:
                return
            try:
                self._on_log(line)
            except Exception as exc:
                # A broken subscriber must not stall the scrape
                logger.warning(f"Log callback raised {type(exc).__name__}: {exc}")

    @property
    def lines(self) -> list[str]:
        with self._lock:
            return list(self._lines)

    def text(self) -> str:
        return "\n".join(self.lines)

    def __len__(self) -> int:
        return len(self._lines)
