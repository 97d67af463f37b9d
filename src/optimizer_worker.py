"""
Optimizer Worker Module for the Cog Board Optimizer

Provides a background QThread worker that runs one board optimization.
Communicates with the host via Qt signals for thread-safe status updates.
"""

import logging
from typing import Optional

from PyQt5.QtCore import QThread, pyqtSignal

from src.construction import SearchContext, Weights
from src.session_manager import ConstructionSessions
from src.settings import context_from_settings


# Configure module logger
logger = logging.getLogger(__name__)


class OptimizerWorker(QThread):
    """
    Background worker thread for a session optimization.

    The optimizer hands control back every yield interval; a stop
    request is observed then, and the best board found so far is
    still reduced to steps.

    Signals:
        status_changed(str): Emitted when worker status changes
        progress_changed(float, str): Search progress 0.0-1.0 and message
        result_ready(object): OptimizationReport, or None if not found
        error_occurred(str): Emitted when an error occurs

    Example:
        worker = OptimizerWorker(sessions, "main")
        worker.result_ready.connect(ui.show_report)
        worker.start()
        # ...
        worker.request_stop()
        worker.wait()
    """

    # Signals for host updates (thread-safe)
    status_changed = pyqtSignal(str)
    progress_changed = pyqtSignal(float, str)
    result_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    def __init__(self, sessions: ConstructionSessions, source: str,
                 time_budget_ms: Optional[float] = None,
                 weights: Optional[Weights] = None):
        """
        Initialize the optimizer worker.

        Args:
            sessions: Session store holding the loaded board
            source: Session name to optimize
            time_budget_ms: Search budget, settings value if None
            weights: Objective weights, settings value if None
        """
        super().__init__()
        self.sessions = sessions
        self.source = source
        self.weights = weights
        self.context: SearchContext = context_from_settings(sessions.settings, time_budget_ms)
        self.context.progress_callback = self._on_progress

    def run(self):
        """
        Main worker body. Called when thread starts.

        Runs the optimization and emits the report.
        """
        logger.info(f"Optimizer worker started for '{self.source}'")
        self.status_changed.emit("Optimizing")

        try:
            report = self.sessions.optimize(self.source, weights=self.weights, context=self.context)
        except Exception as e:
            logger.exception("Error in optimizer worker")
            self.error_occurred.emit(str(e))
            self.status_changed.emit("Error")
            return

        if report is None:
            self.status_changed.emit("No solution")
        elif self.context.is_cancelled():
            self.status_changed.emit("Stopped")
        else:
            self.status_changed.emit("Done")

        self.result_ready.emit(report)
        logger.info("Optimizer worker stopped")

    def request_stop(self):
        """Ask the search to stop at its next yield point."""
        logger.info("Optimizer worker stop requested")
        self.context.cancel_flag.set()

    def _on_progress(self, percent: float, message: str):
        self.progress_changed.emit(percent, message)
