# cogload/hooks/keyboard_listener.py
from __future__ import annotations
from typing import Optional
from queue import Queue
from pynput import keyboard
import structlog

from .events import KeyEvent, KeyAction
from cogload.utils.queueing import safe_put

log = structlog.get_logger()

def _key_to_str(k: keyboard.Key | keyboard.KeyCode | None) -> str:
    if k is None:
        return "unknown"
    if isinstance(k, keyboard.KeyCode):
        return k.char if k.char else f"keycode_{k.vk or 'unknown'}"
    return str(k).split(".")[-1]

class KeyboardHook:
    """Background pynput keyboard listener emitting KeyEvent into a queue."""
    def __init__(self, out_q: Queue):
        self.out_q = out_q
        self.dropped = 0
        self._listener: Optional[keyboard.Listener] = None

    def start(self) -> None:
        if self._listener and self._listener.running:
            return
        self._listener = keyboard.Listener(
            on_press=self._on_press,
            on_release=self._on_release,
            suppress=False
        )
        self._listener.daemon = True
        self._listener.start()
        log.info("kbd.start")

    def stop(self) -> None:
        if self._listener:
            self._listener.stop()
            self._listener = None
            log.info("kbd.stop", dropped=self.dropped)

    def _emit(self, key, action: KeyAction) -> None:
        ev = KeyEvent(key=_key_to_str(key), action=action)
        if safe_put(self.out_q, ev):
            self.dropped += 1

    def _on_press(self, key):
        self._emit(key, KeyAction.DOWN)

    def _on_release(self, key):
        self._emit(key, KeyAction.UP)
