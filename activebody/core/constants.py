from enum import IntEnum

import numpy as np


class Joint(IntEnum):
    PELVIS = 0
    SPINE_NAVAL = 1
    SPINE_CHEST = 2
    NECK = 3
    CLAVICLE_LEFT = 4
    SHOULDER_LEFT = 5
    ELBOW_LEFT = 6
    WRIST_LEFT = 7
    HAND_LEFT = 8
    HANDTIP_LEFT = 9
    THUMB_LEFT = 10
    CLAVICLE_RIGHT = 11
    SHOULDER_RIGHT = 12
    ELBOW_RIGHT = 13
    WRIST_RIGHT = 14
    HAND_RIGHT = 15
    HANDTIP_RIGHT = 16
    THUMB_RIGHT = 17
    HIP_LEFT = 18
    KNEE_LEFT = 19
    ANKLE_LEFT = 20
    FOOT_LEFT = 21
    HIP_RIGHT = 22
    KNEE_RIGHT = 23
    ANKLE_RIGHT = 24
    FOOT_RIGHT = 25
    HEAD = 26
    NOSE = 27
    EYE_LEFT = 28
    EAR_LEFT = 29
    EYE_RIGHT = 30
    EAR_RIGHT = 31


# Indexed by Joint value.
JOINT_DISPLAY_NAMES = [
    "Pelvis",
    "Spine (Naval)",
    "Spine (Chest)",
    "Neck",
    "Clavicle Left",
    "Shoulder Left",
    "Elbow Left",
    "Wrist Left",
    "Hand Left",
    "Hand Tip Left",
    "Thumb Left",
    "Clavicle Right",
    "Shoulder Right",
    "Elbow Right",
    "Wrist Right",
    "Hand Right",
    "Hand Tip Right",
    "Thumb Right",
    "Hip Left",
    "Knee Left",
    "Ankle Left",
    "Foot Left",
    "Hip Right",
    "Knee Right",
    "Ankle Right",
    "Foot Right",
    "Head",
    "Nose",
    "Eye Left",
    "Ear Left",
    "Eye Right",
    "Ear Right",
]

JOINT_COUNT = len(Joint)

NO_ACTIVE_BODY = -1

# Retained raise state is dropped after this long without a sighting.
PRUNE_HORIZON_S = 5.0

DEFAULT_ABOVE_HEAD_MARGIN_MM = 120.0
DEFAULT_RAISE_HOLD_S = 0.15
DEFAULT_STICKY_S = 2.0

# Sensor millimeters -> world centimeters.
DEFAULT_UNIT_SCALE = 0.1

# Rows are world (forward, right, up); columns are sensor (x, y, z).
# world.forward = sensor.z, world.right = sensor.x, world.up = sensor.y
SENSOR_TO_WORLD_AXES = np.array(
    [
        [0.0, 0.0, 1.0],
        [1.0, 0.0, 0.0],
        [0.0, 1.0, 0.0],
    ],
    dtype=np.float64,
)
