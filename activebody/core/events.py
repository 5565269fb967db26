from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, List

ACTIVE_BODY_CHANGED = "active_body_changed"
FRAME_PROCESSED = "frame_processed"


@dataclass
class ActiveBodyChangedEvent:
    old_id: int
    new_id: int
    timestamp: float


@dataclass
class FrameProcessedEvent:
    timestamp: float
    tracked_body_count: int
    tracked_body_id: int
    active_body_id: int


class EventBus:
    def __init__(self):
        self._subs: Dict[str, List[Callable]] = {}

    def subscribe(self, event_name: str, callback: Callable) -> None:
        self._subs.setdefault(event_name, []).append(callback)

    def unsubscribe(self, event_name: str, callback: Callable) -> None:
        callbacks = self._subs.get(event_name, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def publish(self, event_name: str, payload) -> None:
        for callback in list(self._subs.get(event_name, [])):
            callback(payload)
