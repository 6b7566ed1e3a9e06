from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QTimer, Signal

from campusdash.errors import DeductionError
from campusdash.services.billing import SubscriptionBiller

logger = logging.getLogger(__name__)


class DeductionScheduler(QObject):
    """
    Re-runs the subscription check on a timer. The timer fires on the GUI
    thread, so two runs never overlap.
    """

    deductions_made = Signal(int)
    deduction_failed = Signal(str)

    def __init__(self, biller: SubscriptionBiller, interval_min: int = 60, parent: Optional[QObject] = None) -> None:
        super().__init__(parent)
        self.biller = biller
        self._timer = QTimer(self)
        self._timer.setInterval(interval_min * 60 * 1000)
        self._timer.timeout.connect(self.run_once)

    def start(self) -> None:
        self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def run_once(self) -> int:
        try:
            count = self.biller.check_and_process_deductions()
        except DeductionError as exc:
            logger.error("Subscription check failed, retrying next tick: %s", exc)
            self.deduction_failed.emit(str(exc))
            return 0
        if count:
            self.deductions_made.emit(count)
        return count
