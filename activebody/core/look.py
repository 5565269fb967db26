from __future__ import annotations

from typing import Optional

import numpy as np

from activebody.core.skeleton import SkeletonMapper
from activebody.core.types import CameraPlacement

RAY_LENGTH = 1000.0


def safe_normalize(vec) -> np.ndarray:
    arr = np.asarray(vec, dtype=np.float64).reshape(3)
    norm = float(np.linalg.norm(arr))
    if not np.isfinite(norm) or norm <= 1e-8:
        return np.zeros(3, dtype=np.float64)
    return arr / norm


def compute_look_target(
    head_position_mm,
    sensor_placement: CameraPlacement,
    camera_world: CameraPlacement,
    avatar_head_world,
    aim_distance: float = 1000.0,
    mapper: Optional[SkeletonMapper] = None,
) -> np.ndarray:
    """World point an avatar should look at so it appears to watch the tracked head.

    The result depends only on the direction from the virtual camera to the
    tracked head, so it stays stable wherever the camera sits.
    """
    mapper = mapper or SkeletonMapper()
    head_world = sensor_placement.transform_position(mapper.remap_position(head_position_mm))

    head_in_cam = camera_world.inverse_transform_position(head_world)
    dir_world = camera_world.transform_vector(safe_normalize(head_in_cam))
    point_on_ray = camera_world.translation + dir_world * RAY_LENGTH

    avatar_head = np.asarray(avatar_head_world, dtype=np.float64).reshape(3)
    aim_dir = safe_normalize(point_on_ray - avatar_head)
    return avatar_head + aim_dir * float(aim_distance)
