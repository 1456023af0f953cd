from __future__ import annotations

from typing import Optional

from PyQt6 import QtCore

from .binding import BusBinding


class QtBusPump(QtCore.QObject):
    """Runs the message pump and dispatcher from a Qt event loop."""

    event_received = QtCore.pyqtSignal(object)

    def __init__(
        self,
        binding: BusBinding,
        *,
        interval_ms: int = 50,
        parent: Optional[QtCore.QObject] = None,
    ) -> None:
        super().__init__(parent)
        self._binding = binding
        self._timer = QtCore.QTimer(self)
        self._timer.setInterval(max(0, int(interval_ms)))
        self._timer.timeout.connect(self.tick)

    def start(self) -> None:
        if not self._timer.isActive():
            self._timer.start()

    def stop(self) -> None:
        self._timer.stop()

    def is_running(self) -> bool:
        return self._timer.isActive()

    def interval_ms(self) -> int:
        return self._timer.interval()

    def tick(self) -> int:
        events = self._binding.read_queued_messages()
        for event in events:
            self.event_received.emit(event)
        self._binding.dispatch_pending()
        return len(events)
