from __future__ import annotations

import numpy as np
from pydantic import BaseModel, Field, field_validator

from activebody.core.types import BodyFrame, BodyRecord, JointSample


class RecordedJoint(BaseModel):
    position: list[float]
    orientation: list[float] = Field(default_factory=lambda: [1.0, 0.0, 0.0, 0.0])

    @field_validator("position")
    @classmethod
    def _validate_position(cls, value: list[float]) -> list[float]:
        if len(value) != 3:
            raise ValueError("position must contain [x, y, z] in millimeters")
        return value

    @field_validator("orientation")
    @classmethod
    def _validate_orientation(cls, value: list[float]) -> list[float]:
        if len(value) != 4:
            raise ValueError("orientation must contain [w, x, y, z]")
        return value


class RecordedBody(BaseModel):
    id: int
    joints: list[RecordedJoint]

    def to_record(self) -> BodyRecord:
        return BodyRecord(
            body_id=self.id,
            joints=[
                JointSample(
                    joint_index=idx,
                    position_mm=np.array(joint.position, dtype=np.float64),
                    orientation=np.array(joint.orientation, dtype=np.float64),
                )
                for idx, joint in enumerate(self.joints)
            ],
        )


class RecordedFrame(BaseModel):
    timestamp: float
    bodies: list[RecordedBody] = Field(default_factory=list)

    def to_frame(self) -> BodyFrame:
        return BodyFrame(
            timestamp=self.timestamp,
            bodies=[body.to_record() for body in self.bodies],
        )


class Recording(BaseModel):
    frames: list[RecordedFrame] = Field(default_factory=list)
