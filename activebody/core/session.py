from __future__ import annotations

import logging
from typing import List, Optional

from activebody.core.constants import NO_ACTIVE_BODY
from activebody.core.events import (
    ACTIVE_BODY_CHANGED,
    FRAME_PROCESSED,
    ActiveBodyChangedEvent,
    EventBus,
    FrameProcessedEvent,
)
from activebody.core.selector import (
    ActiveSelector,
    body_sample_from_record,
    find_closest_body_id,
)
from activebody.core.skeleton import SkeletonIncompleteError, SkeletonMapper, is_complete_skeleton
from activebody.core.types import BodyFrame, BodyRecord, CameraPlacement, JointData
from activebody.models.config import AppConfig, SelectionMode

logger = logging.getLogger(__name__)


class BodyTrackingSession:
    def __init__(self, cfg: AppConfig, event_bus: Optional[EventBus] = None):
        self.cfg = cfg
        self.event_bus = event_bus or EventBus()
        self.selector = ActiveSelector.from_config(cfg.selector)
        self.mapper = SkeletonMapper.from_config(cfg.mapper)
        self.camera_placement: CameraPlacement = cfg.camera.to_placement()
        self.selection_mode: SelectionMode = cfg.session.selection_mode
        self.fallback_to_closest = cfg.session.fallback_to_closest
        self.frame: Optional[BodyFrame] = None
        self.tracked_body_id: int = NO_ACTIVE_BODY
        self.tracked_body_count: int = 0
        self.frames_processed: int = 0
        self.active_changes: int = 0
        self.selector.subscribe(self._on_active_changed)

    @property
    def active_body_id(self) -> int:
        return self.selector.get_active_id()

    @property
    def has_active(self) -> bool:
        return self.selector.has_active

    def set_selection_mode(self, mode: SelectionMode) -> None:
        if mode not in ("closest", "wave_last_raised"):
            raise ValueError(f"unknown selection mode: {mode}")
        self.selection_mode = mode

    def set_camera_placement(self, placement: CameraPlacement) -> None:
        self.camera_placement = placement

    def reset(self) -> None:
        now = self.frame.timestamp if self.frame is not None else 0.0
        self.selector.reset(now)
        self.frame = None
        self.tracked_body_id = NO_ACTIVE_BODY
        self.tracked_body_count = 0

    def process_frame(self, frame: Optional[BodyFrame]) -> int:
        if frame is None:
            # No tracking result this tick.
            now = self.frame.timestamp if self.frame is not None else 0.0
            self.frame = None
            self.tracked_body_count = 0
            self.tracked_body_id = NO_ACTIVE_BODY
            return self.selector.update_closest(NO_ACTIVE_BODY, now)

        self.frame = frame
        self.tracked_body_count = len(frame.bodies)
        self.tracked_body_id = find_closest_body_id(frame.bodies)

        if self.selection_mode == "closest":
            self.selector.update_closest(self.tracked_body_id, frame.timestamp)
        else:
            samples = []
            for body in frame.bodies:
                if not is_complete_skeleton(body.joints):
                    logger.debug("body %d has an incomplete skeleton; not sampled", body.body_id)
                    continue
                sample = body_sample_from_record(body, frame.timestamp)
                if sample is not None:
                    samples.append(sample)
            fallback_id = self.tracked_body_id if self.fallback_to_closest else NO_ACTIVE_BODY
            self.selector.update_wave_last_raised(samples, frame.timestamp, fallback_id)

        self.frames_processed += 1
        self.event_bus.publish(
            FRAME_PROCESSED,
            FrameProcessedEvent(
                timestamp=frame.timestamp,
                tracked_body_count=self.tracked_body_count,
                tracked_body_id=self.tracked_body_id,
                active_body_id=self.active_body_id,
            ),
        )
        return self.active_body_id

    def _find_body(self, body_id: int) -> Optional[BodyRecord]:
        if self.frame is None or body_id < 0:
            return None
        for body in self.frame.bodies:
            if body.body_id == body_id:
                return body
        return None

    def get_body_skeleton(self, body_id: int) -> Optional[List[JointData]]:
        body = self._find_body(body_id)
        if body is None:
            return None
        try:
            return self.mapper.map_skeleton(body.joints, self.camera_placement)
        except SkeletonIncompleteError as exc:
            logger.warning("cannot map skeleton for body %d: %s", body_id, exc)
            return None

    def get_closest_body_skeleton(self) -> Optional[List[JointData]]:
        return self.get_body_skeleton(self.tracked_body_id)

    def get_active_body_skeleton(self) -> Optional[List[JointData]]:
        return self.get_body_skeleton(self.active_body_id)

    def status(self) -> dict:
        return {
            "selection_mode": self.selection_mode,
            "active_body_id": self.active_body_id,
            "has_active": self.has_active,
            "tracked_body_id": self.tracked_body_id,
            "tracked_body_count": self.tracked_body_count,
            "frames_processed": self.frames_processed,
            "active_changes": self.active_changes,
            "last_timestamp": self.frame.timestamp if self.frame is not None else None,
        }

    def _on_active_changed(self, event: ActiveBodyChangedEvent) -> None:
        self.active_changes += 1
        self.event_bus.publish(ACTIVE_BODY_CHANGED, event)
