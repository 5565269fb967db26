from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from activebody.core.events import EventBus
from activebody.core.logger import setup_logging
from activebody.core.session import BodyTrackingSession
from activebody.services.config_store import ConfigStore


@dataclass
class RuntimeContext:
    config_store: ConfigStore
    event_bus: EventBus
    session: BodyTrackingSession


def build_runtime(config_path: Path) -> RuntimeContext:
    config_store = ConfigStore(config_path)
    cfg = config_store.config
    setup_logging(cfg.logging.level)
    event_bus = EventBus()
    session = BodyTrackingSession(cfg, event_bus)
    return RuntimeContext(
        config_store=config_store,
        event_bus=event_bus,
        session=session,
    )
