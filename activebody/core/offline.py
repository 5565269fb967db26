from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional

from activebody.core.events import ACTIVE_BODY_CHANGED, ActiveBodyChangedEvent
from activebody.core.session import BodyTrackingSession
from activebody.core.types import BodyFrame
from activebody.models.config import AppConfig
from activebody.models.recording import Recording
from activebody.services.state_io import load_json

logger = logging.getLogger(__name__)


class FrameSource(ABC):
    @abstractmethod
    def open(self) -> bool:
        pass

    @abstractmethod
    def read_frame(self) -> Optional[BodyFrame]:
        """Next frame, or ``None`` once the source is exhausted."""

    @abstractmethod
    def close(self) -> None:
        pass


class ReplayFrameSource(FrameSource):
    """Plays back body frames recorded as JSON (see ``models.recording``)."""

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._frames: List[BodyFrame] = []
        self._cursor = 0

    def open(self) -> bool:
        recording = load_json(self.path, None, Recording.model_validate)
        if recording is None:
            return False
        self._frames = [frame.to_frame() for frame in recording.frames]
        self._cursor = 0
        logger.info("loaded %d frames from %s", len(self._frames), self.path)
        return True

    def read_frame(self) -> Optional[BodyFrame]:
        if self._cursor >= len(self._frames):
            return None
        frame = self._frames[self._cursor]
        self._cursor += 1
        return frame

    def close(self) -> None:
        self._frames = []
        self._cursor = 0


class OfflineProcessor:
    def __init__(self, cfg: AppConfig):
        self.cfg = cfg

    def run(self, path: str | Path) -> dict:
        path = Path(path)
        if not path.exists():
            return {"ok": False, "message": f"recording missing: {path}"}

        source = ReplayFrameSource(path)
        if not source.open():
            return {"ok": False, "message": f"invalid recording: {path}"}

        session = BodyTrackingSession(self.cfg)
        changes: list[dict] = []

        def _record_change(event: ActiveBodyChangedEvent) -> None:
            changes.append(
                {"timestamp": event.timestamp, "old_id": event.old_id, "new_id": event.new_id}
            )

        session.event_bus.subscribe(ACTIVE_BODY_CHANGED, _record_change)
        try:
            while True:
                frame = source.read_frame()
                if frame is None:
                    break
                session.process_frame(frame)
        finally:
            source.close()

        return {
            "ok": True,
            "frames": session.frames_processed,
            "active_changes": changes,
            "final_active_id": session.active_body_id,
        }
