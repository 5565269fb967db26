from __future__ import annotations

from typing import Literal, Optional

import numpy as np
from pydantic import BaseModel, Field, field_validator

from activebody.core.constants import (
    DEFAULT_ABOVE_HEAD_MARGIN_MM,
    DEFAULT_RAISE_HOLD_S,
    DEFAULT_STICKY_S,
    DEFAULT_UNIT_SCALE,
)
from activebody.core.types import CameraPlacement

SelectionMode = Literal["closest", "wave_last_raised"]


class SelectorConfig(BaseModel):
    above_head_margin_mm: float = DEFAULT_ABOVE_HEAD_MARGIN_MM
    raise_hold_seconds: float = Field(default=DEFAULT_RAISE_HOLD_S, ge=0.0)
    sticky_seconds: float = Field(default=DEFAULT_STICKY_S, ge=0.0)


class MapperConfig(BaseModel):
    unit_scale: float = Field(default=DEFAULT_UNIT_SCALE, gt=0.0)


class CameraPlacementConfig(BaseModel):
    translation: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0])
    # (w, x, y, z)
    rotation: list[float] = Field(default_factory=lambda: [1.0, 0.0, 0.0, 0.0])

    @field_validator("translation")
    @classmethod
    def _validate_translation(cls, value: list[float]) -> list[float]:
        if len(value) != 3:
            raise ValueError("translation must contain [x, y, z]")
        return value

    @field_validator("rotation")
    @classmethod
    def _validate_rotation(cls, value: list[float]) -> list[float]:
        if len(value) != 4:
            raise ValueError("rotation must contain [w, x, y, z]")
        if float(np.linalg.norm(value)) <= 1e-9:
            raise ValueError("rotation must be a non-zero quaternion")
        return value

    def to_placement(self) -> CameraPlacement:
        return CameraPlacement(
            translation=np.array(self.translation, dtype=np.float64),
            rotation=np.array(self.rotation, dtype=np.float64),
        )


class SessionConfig(BaseModel):
    selection_mode: SelectionMode = "closest"
    fallback_to_closest: bool = True


class LoggingConfig(BaseModel):
    level: str = "INFO"

    @field_validator("level")
    @classmethod
    def _validate_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value}")
        return level


class AppConfig(BaseModel):
    selector: SelectorConfig = Field(default_factory=SelectorConfig)
    mapper: MapperConfig = Field(default_factory=MapperConfig)
    camera: CameraPlacementConfig = Field(default_factory=CameraPlacementConfig)
    session: SessionConfig = Field(default_factory=SessionConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class ConfigUpdate(BaseModel):
    selector: Optional[SelectorConfig] = None
    mapper: Optional[MapperConfig] = None
    camera: Optional[CameraPlacementConfig] = None
    session: Optional[SessionConfig] = None
    logging: Optional[LoggingConfig] = None
