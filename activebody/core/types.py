from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

import numpy as np

from activebody.core import quaternion
from activebody.core.constants import NO_ACTIVE_BODY


@dataclass
class BodySample:
    """Per-frame vertical readings for one tracked body, sensor millimeters (+Y is down)."""

    body_id: int
    head_y_mm: float
    left_hand_y_mm: float
    right_hand_y_mm: float
    observed_at: float


@dataclass
class RaiseState:
    left_above_head: bool = False
    right_above_head: bool = False
    last_seen_at: float = float("-inf")
    last_raise_edge_at: float = float("-inf")


@dataclass
class ActiveSelection:
    active_id: int = NO_ACTIVE_BODY

    @property
    def has_active(self) -> bool:
        return self.active_id >= 0


@dataclass
class JointSample:
    """Raw joint as delivered by the tracker: millimeters, sensor-local (w, x, y, z) rotation."""

    joint_index: int
    position_mm: np.ndarray
    orientation: np.ndarray = field(default_factory=lambda: quaternion.IDENTITY.copy())

    def __post_init__(self) -> None:
        self.position_mm = np.asarray(self.position_mm, dtype=np.float64).reshape(3)
        self.orientation = quaternion.as_quat(self.orientation)


@dataclass
class JointData:
    joint_index: int
    joint_name: str
    position_world: np.ndarray
    orientation_world: np.ndarray


@dataclass
class CameraPlacement:
    """Rigid sensor-to-world transform: rotate, then translate. No scale."""

    translation: np.ndarray = field(default_factory=lambda: np.zeros(3, dtype=np.float64))
    rotation: np.ndarray = field(default_factory=lambda: quaternion.IDENTITY.copy())

    def __post_init__(self) -> None:
        self.translation = np.asarray(self.translation, dtype=np.float64).reshape(3)
        self.rotation = quaternion.normalize(self.rotation)

    @classmethod
    def identity(cls) -> "CameraPlacement":
        return cls()

    def transform_position(self, point) -> np.ndarray:
        return quaternion.rotate_vector(self.rotation, point) + self.translation

    def inverse_transform_position(self, point) -> np.ndarray:
        local = np.asarray(point, dtype=np.float64).reshape(3) - self.translation
        return quaternion.rotate_vector(quaternion.conjugate(self.rotation), local)

    def transform_vector(self, vector) -> np.ndarray:
        return quaternion.rotate_vector(self.rotation, vector)


@dataclass
class BodyRecord:
    """One tracked body in a frame; ``joints`` is indexed by :class:`Joint`."""

    body_id: int
    joints: List[Optional[JointSample]]

    def joint(self, index: int) -> Optional[JointSample]:
        if 0 <= index < len(self.joints):
            return self.joints[index]
        return None


@dataclass
class BodyFrame:
    timestamp: float
    bodies: List[BodyRecord] = field(default_factory=list)
