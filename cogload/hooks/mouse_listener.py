# cogload/hooks/mouse_listener.py
from __future__ import annotations
from typing import Optional
from queue import Queue
from pynput import mouse
import structlog

from .events import PointerSample
from cogload.utils.queueing import safe_put

log = structlog.get_logger()

class MouseHook:
    """Background pynput mouse listener emitting a PointerSample per move."""
    def __init__(self, out_q: Queue):
        self.out_q = out_q
        self.dropped = 0
        self._listener: Optional[mouse.Listener] = None

    def start(self) -> None:
        if self._listener and self._listener.running:
            return
        self._listener = mouse.Listener(on_move=self._on_move)
        self._listener.daemon = True
        self._listener.start()
        log.info("mouse.start")

    def stop(self) -> None:
        if self._listener:
            self._listener.stop()
            self._listener = None
            log.info("mouse.stop", dropped=self.dropped)

    def _on_move(self, x, y):
        if safe_put(self.out_q, PointerSample(x=float(x), y=float(y))):
            self.dropped += 1
