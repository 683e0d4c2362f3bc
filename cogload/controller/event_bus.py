# cogload/controller/event_bus.py
from __future__ import annotations
from collections import defaultdict
from typing import Callable, DefaultDict, List

from cogload.hooks.events import BaseEvent, EventType

Handler = Callable[[BaseEvent], None]

class InputFeed:
    """
    Push source for raw input. Handlers run synchronously, in registration
    order, on whichever thread calls publish().
    """
    def __init__(self):
        self._handlers: DefaultDict[EventType, List[Handler]] = defaultdict(list)

    def subscribe(self, etype: EventType, handler: Handler) -> None:
        if handler not in self._handlers[etype]:
            self._handlers[etype].append(handler)

    def unsubscribe(self, etype: EventType, handler: Handler) -> None:
        try:
            self._handlers[etype].remove(handler)
        except ValueError:
            pass

    def handler_count(self, etype: EventType) -> int:
        return len(self._handlers[etype])

    def publish(self, ev: BaseEvent) -> int:
        handlers = list(self._handlers[ev.etype])
        for h in handlers:
            h(ev)
        return len(handlers)
