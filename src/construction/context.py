"""
Search Context Module - Time budget, cancellation and yielding for a search run.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Optional


@dataclass
class SearchContext:
    """
    Context passed to the optimizer containing its time budget,
    cancellation, and progress reporting.

    The search hands control back to the host at least every
    `yield_interval_ms`; the cancel flag is only looked at then.

    Attributes:
        time_budget_ms: Wall-clock budget of the search
        cancel_flag: Threading event set by the host to stop early
        yield_interval_ms: Maximum time between two yields
        progress_callback: Optional callback for progress updates
        start_time: When the search started
    """
    time_budget_ms: float = 1000.0
    cancel_flag: threading.Event = field(default_factory=threading.Event)
    yield_interval_ms: float = 100.0
    progress_callback: Optional[Callable[[float, str], None]] = None
    start_time: float = field(default_factory=time.perf_counter)
    last_yield: float = field(default_factory=time.perf_counter)

    def start(self) -> None:
        """Restart the clock at the beginning of a search."""
        self.start_time = time.perf_counter()
        self.last_yield = self.start_time

    def is_cancelled(self) -> bool:
        return self.cancel_flag.is_set()

    def elapsed_ms(self) -> float:
        """
        Get milliseconds elapsed since the search started.

        Returns:
            Elapsed time in milliseconds
        """
        return (time.perf_counter() - self.start_time) * 1000

    def remaining_ms(self) -> float:
        """Milliseconds left in the budget (negative once exceeded)."""
        return self.time_budget_ms - self.elapsed_ms()

    def is_expired(self) -> bool:
        return self.elapsed_ms() >= self.time_budget_ms

    def report_progress(self, percent: float, message: str = "") -> None:
        """
        Report progress to the host.

        Args:
            percent: Progress from 0.0 to 1.0
            message: Optional status message
        """
        if self.progress_callback:
            self.progress_callback(percent, message)

    def maybe_yield(self, message: str = "") -> bool:
        """
        Yield to the host scheduler if a time slice has passed.

        Sleeping for zero seconds releases the GIL so other threads
        (a UI event loop, a stop request) get to run.

        Args:
            message: Progress message reported with the yield

        Returns:
            True if control was handed back
        """
        now = time.perf_counter()
        if (now - self.last_yield) * 1000 < self.yield_interval_ms:
            return False

        time.sleep(0)
        if self.time_budget_ms > 0:
            self.report_progress(min(0.99, self.elapsed_ms() / self.time_budget_ms), message)
        self.last_yield = time.perf_counter()
        return True
