from __future__ import annotations

import logging
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from activebody.core.constants import (
    DEFAULT_ABOVE_HEAD_MARGIN_MM,
    DEFAULT_RAISE_HOLD_S,
    DEFAULT_STICKY_S,
    NO_ACTIVE_BODY,
    PRUNE_HORIZON_S,
    Joint,
)
from activebody.core.events import ActiveBodyChangedEvent
from activebody.core.types import ActiveSelection, BodyRecord, BodySample, RaiseState

logger = logging.getLogger(__name__)


def find_closest_body_id(bodies: Iterable[BodyRecord]) -> int:
    """Return the id of the body whose pelvis is nearest the sensor, or -1."""
    best_id = NO_ACTIVE_BODY
    best_dist_sq = float("inf")
    for body in bodies:
        if body.body_id < 0:
            continue
        pelvis = body.joint(Joint.PELVIS)
        if pelvis is None:
            continue
        dist_sq = float(pelvis.position_mm @ pelvis.position_mm)
        if dist_sq < best_dist_sq:
            best_dist_sq = dist_sq
            best_id = int(body.body_id)
    return best_id


def body_sample_from_record(record: BodyRecord, observed_at: float) -> Optional[BodySample]:
    head = record.joint(Joint.HEAD)
    left = record.joint(Joint.HAND_LEFT)
    right = record.joint(Joint.HAND_RIGHT)
    if head is None or left is None or right is None:
        return None
    return BodySample(
        body_id=int(record.body_id),
        head_y_mm=float(head.position_mm[1]),
        left_hand_y_mm=float(left.position_mm[1]),
        right_hand_y_mm=float(right.position_mm[1]),
        observed_at=float(observed_at),
    )


class ActiveSelector:
    """Picks the active body; not thread-safe, callers serialize ticks."""

    def __init__(
        self,
        above_head_margin_mm: float = DEFAULT_ABOVE_HEAD_MARGIN_MM,
        raise_hold_seconds: float = DEFAULT_RAISE_HOLD_S,
        sticky_seconds: float = DEFAULT_STICKY_S,
    ):
        self.configure(above_head_margin_mm, raise_hold_seconds, sticky_seconds)
        self._states: Dict[int, RaiseState] = {}
        self._selection = ActiveSelection()
        self._listeners: List[Callable[[ActiveBodyChangedEvent], None]] = []
        self._pending: List[ActiveBodyChangedEvent] = []
        self._last_update_changed = False

    @classmethod
    def from_config(cls, cfg) -> "ActiveSelector":
        return cls(cfg.above_head_margin_mm, cfg.raise_hold_seconds, cfg.sticky_seconds)

    def configure(
        self,
        above_head_margin_mm: float,
        raise_hold_seconds: float,
        sticky_seconds: float,
    ) -> None:
        self.above_head_margin_mm = float(above_head_margin_mm)
        self.raise_hold_seconds = max(0.0, float(raise_hold_seconds))
        self.sticky_seconds = max(0.0, float(sticky_seconds))

    def reset(self, now: float = 0.0) -> None:
        old_id = self._selection.active_id
        self._states.clear()
        self._selection = ActiveSelection()
        self._last_update_changed = self._notify(old_id, NO_ACTIVE_BODY, now)

    def subscribe(self, callback: Callable[[ActiveBodyChangedEvent], None]) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: Callable[[ActiveBodyChangedEvent], None]) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    def drain_changes(self) -> List[ActiveBodyChangedEvent]:
        pending, self._pending = self._pending, []
        return pending

    def get_active_id(self) -> int:
        return self._selection.active_id

    @property
    def has_active(self) -> bool:
        return self._selection.has_active

    @property
    def selection(self) -> ActiveSelection:
        return ActiveSelection(self._selection.active_id)

    @property
    def last_update_changed(self) -> bool:
        return self._last_update_changed

    @property
    def tracked_ids(self) -> List[int]:
        return sorted(self._states)

    def get_state(self, body_id: int) -> Optional[RaiseState]:
        state = self._states.get(body_id)
        if state is None:
            return None
        return RaiseState(
            left_above_head=state.left_above_head,
            right_above_head=state.right_above_head,
            last_seen_at=state.last_seen_at,
            last_raise_edge_at=state.last_raise_edge_at,
        )

    def update_closest(self, closest_body_id: int, now: float = 0.0) -> int:
        old_id = self._selection.active_id
        new_id = int(closest_body_id)
        if new_id < 0:
            new_id = NO_ACTIVE_BODY
        self._selection.active_id = new_id
        self._last_update_changed = self._notify(old_id, new_id, now)
        return new_id

    def update_wave_last_raised(
        self,
        samples: Sequence[BodySample],
        now: float,
        fallback_id: int = NO_ACTIVE_BODY,
    ) -> int:
        now = float(now)
        old_id = self._selection.active_id
        active_id = old_id
        seen: set[int] = set()

        for sample in samples:
            body_id = int(sample.body_id)
            if body_id < 0:
                logger.debug("skipping body sample with negative id %d", body_id)
                continue
            if body_id in seen:
                logger.debug("skipping duplicate body sample for id %d", body_id)
                continue
            seen.add(body_id)

            # Sensor +Y is down: a raised hand has a smaller Y than the head.
            left_above = (sample.head_y_mm - sample.left_hand_y_mm) > self.above_head_margin_mm
            right_above = (sample.head_y_mm - sample.right_hand_y_mm) > self.above_head_margin_mm

            state = self._states.get(body_id)
            if state is None:
                state = RaiseState()
                self._states[body_id] = state

            left_rising = not state.left_above_head and left_above
            right_rising = not state.right_above_head and right_above
            rising = left_rising or right_rising
            if rising:
                state.last_raise_edge_at = now

            state.left_above_head = left_above
            state.right_above_head = right_above
            state.last_seen_at = now

            held = (left_above or right_above) and (
                now - state.last_raise_edge_at
            ) >= self.raise_hold_seconds
            if rising or held:
                # Later samples in the same tick override earlier ones.
                active_id = body_id

        if active_id >= 0:
            active_state = self._states.get(active_id)
            if active_state is None or (now - active_state.last_seen_at) > self.sticky_seconds:
                active_id = NO_ACTIVE_BODY

        stale = [
            body_id
            for body_id, state in self._states.items()
            if (now - state.last_seen_at) > PRUNE_HORIZON_S
        ]
        for body_id in stale:
            del self._states[body_id]
        if stale:
            logger.debug("pruned raise state for bodies %s", stale)

        if active_id == NO_ACTIVE_BODY and fallback_id >= 0:
            active_id = int(fallback_id)

        self._selection.active_id = active_id
        self._last_update_changed = self._notify(old_id, active_id, now)
        return active_id

    def _notify(self, old_id: int, new_id: int, now: float) -> bool:
        if old_id == new_id:
            return False
        event = ActiveBodyChangedEvent(old_id=old_id, new_id=new_id, timestamp=float(now))
        logger.info("active body changed %d -> %d", old_id, new_id)
        self._pending.append(event)
        for callback in list(self._listeners):
            callback(event)
        return True
