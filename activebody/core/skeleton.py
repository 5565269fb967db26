from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import numpy as np

from activebody.core import quaternion
from activebody.core.constants import (
    DEFAULT_UNIT_SCALE,
    JOINT_COUNT,
    JOINT_DISPLAY_NAMES,
    SENSOR_TO_WORLD_AXES,
    Joint,
)
from activebody.core.types import CameraPlacement, JointData, JointSample

logger = logging.getLogger(__name__)

# Same permutation as the positions; from_rotation_matrix rejects reflections.
SENSOR_TO_WORLD_ROTATION = quaternion.from_rotation_matrix(SENSOR_TO_WORLD_AXES)
SENSOR_TO_WORLD_ROTATION_INV = quaternion.inverse(SENSOR_TO_WORLD_ROTATION)


class SkeletonIncompleteError(ValueError):
    pass


class SkeletonMapper:
    """Converts a full sensor-space skeleton into world-space joint data."""

    def __init__(self, unit_scale: float = DEFAULT_UNIT_SCALE):
        unit_scale = float(unit_scale)
        if not np.isfinite(unit_scale) or unit_scale <= 0.0:
            raise ValueError(f"unit_scale must be positive, got {unit_scale}")
        self.unit_scale = unit_scale

    @classmethod
    def from_config(cls, cfg) -> "SkeletonMapper":
        return cls(cfg.unit_scale)

    def remap_position(self, position_mm) -> np.ndarray:
        scaled = np.asarray(position_mm, dtype=np.float64).reshape(3) * self.unit_scale
        return SENSOR_TO_WORLD_AXES @ scaled

    @staticmethod
    def remap_orientation(orientation) -> np.ndarray:
        # Change of basis: conjugate by the axis rotation, not a plain product.
        return quaternion.multiply(
            quaternion.multiply(SENSOR_TO_WORLD_ROTATION, orientation),
            SENSOR_TO_WORLD_ROTATION_INV,
        )

    def _map_joint(self, sample: JointSample, camera_placement: CameraPlacement) -> JointData:
        local_position = self.remap_position(sample.position_mm)
        local_orientation = self.remap_orientation(sample.orientation)
        return JointData(
            joint_index=int(sample.joint_index),
            joint_name=JOINT_DISPLAY_NAMES[int(sample.joint_index)],
            position_world=camera_placement.transform_position(local_position),
            orientation_world=quaternion.multiply(camera_placement.rotation, local_orientation),
        )

    def map_skeleton(
        self,
        raw_joints: Sequence[Optional[JointSample]],
        camera_placement: CameraPlacement,
    ) -> List[JointData]:
        _validate_raw_joints(raw_joints)
        return [self._map_joint(sample, camera_placement) for sample in raw_joints]


def _validate_raw_joints(raw_joints: Sequence[Optional[JointSample]]) -> None:
    if len(raw_joints) != JOINT_COUNT:
        raise SkeletonIncompleteError(
            f"expected {JOINT_COUNT} joints, got {len(raw_joints)}"
        )
    for idx, sample in enumerate(raw_joints):
        if sample is None:
            raise SkeletonIncompleteError(f"missing joint {Joint(idx).name}")
        if int(sample.joint_index) != idx:
            raise SkeletonIncompleteError(
                f"joint at position {idx} has index {sample.joint_index}"
            )
        if not (np.all(np.isfinite(sample.position_mm)) and np.all(np.isfinite(sample.orientation))):
            raise SkeletonIncompleteError(f"non-finite data for joint {Joint(idx).name}")


def is_complete_skeleton(raw_joints: Sequence[Optional[JointSample]]) -> bool:
    try:
        _validate_raw_joints(raw_joints)
    except SkeletonIncompleteError:
        return False
    return True


def find_joint_by_name(joints: Sequence[JointData], name: str) -> Optional[JointData]:
    wanted = name.casefold()
    for joint in joints:
        if joint.joint_name.casefold() == wanted:
            return joint
    logger.warning("joint '%s' not found in skeleton", name)
    return None


def find_joint_by_enum(joints: Sequence[JointData], joint: Joint | int) -> Optional[JointData]:
    wanted = int(joint)
    for item in joints:
        if item.joint_index == wanted:
            return item
    logger.warning("joint %d not found in skeleton", wanted)
    return None
