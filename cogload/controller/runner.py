from __future__ import annotations
import threading
from queue import Queue
from typing import Optional, Sequence, Protocol, List
import structlog

from cogload.analytics.engine import TrackerEngine
from cogload.controller.event_bus import InputFeed
from cogload.hooks.events import BaseEvent
from cogload.utils.queueing import drain

log = structlog.get_logger()

class Hook(Protocol):
    def start(self) -> None: ...
    def stop(self) -> None: ...

def default_hooks(out_q: Queue) -> List[Hook]:
    # pynput needs a display/input backend at import time, so load it on demand
    from cogload.hooks.keyboard_listener import KeyboardHook
    from cogload.hooks.mouse_listener import MouseHook
    return [KeyboardHook(out_q), MouseHook(out_q)]

class HookRuntime:
    """
    Starts/stops input hooks and drives the engine from one consumer thread.
    Hooks only enqueue; the consumer thread is the engine's sole execution
    context, so event handlers and ticks never overlap.
    """
    def __init__(
        self,
        engine: TrackerEngine,
        hooks: Optional[Sequence[Hook]] = None,
        queue_size: int = 5000,
        poll_sec: float = 0.05,
        join_timeout: float = 1.0,
    ):
        self.engine = engine
        self.events: Queue = Queue(maxsize=queue_size)
        self.feed = InputFeed()
        self.hooks = list(hooks) if hooks is not None else default_hooks(self.events)
        self.poll_sec = poll_sec
        self.join_timeout = join_timeout
        self._consumer_thr: Optional[threading.Thread] = None
        self._stop_evt = threading.Event()
        self._stopped = False

    def start(self) -> None:
        self._stop_evt.clear()
        self.engine.start(self.feed)
        for h in self.hooks:
            h.start()
        self._consumer_thr = threading.Thread(target=self._consume_loop, daemon=True)
        self._consumer_thr.start()
        log.info("hooks.runtime.start", hooks=len(self.hooks))

    def stop(self) -> None:
        if self._stopped:
            return
        self._stopped = True
        for h in self.hooks:
            try:
                h.stop()
            except Exception as e:
                log.warning("hooks.stop.error", hook=type(h).__name__, err=str(e))
        self._stop_evt.set()
        thr = self._consumer_thr
        if thr is None:
            self.engine.stop()
        else:
            thr.join(timeout=self.join_timeout)
            if thr.is_alive():
                # the consumer stops the engine itself once its current pump returns
                log.warning("hooks.runtime.stop.pending", timeout=self.join_timeout)
        log.info("hooks.runtime.stop")

    def pump(self, timeout: float = 0.0) -> int:
        """One consumer iteration: deliver queued events, then run due ticks/prunes."""
        batch = drain(self.events, first_timeout=timeout)
        for ev in batch:
            self._deliver(ev)
        try:
            self.engine.advance()
        except Exception as e:
            log.warning("engine.advance.error", err=str(e))
        return len(batch)

    def _deliver(self, ev: BaseEvent) -> None:
        try:
            self.feed.publish(ev)
        except Exception as e:
            log.warning("feed.publish.error", etype=ev.etype.name, err=str(e))

    def _consume_loop(self):
        while not self._stop_evt.is_set():
            self.pump(timeout=self.poll_sec)
        # teardown runs on this thread so it never overlaps a tick
        self.engine.stop()
