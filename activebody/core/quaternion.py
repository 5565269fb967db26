"""Quaternion helpers on ``(w, x, y, z)`` numpy arrays (Hamilton convention)."""
from __future__ import annotations

import numpy as np

IDENTITY = np.array([1.0, 0.0, 0.0, 0.0], dtype=np.float64)


def as_quat(q) -> np.ndarray:
    arr = np.asarray(q, dtype=np.float64).reshape(-1)
    if arr.shape != (4,):
        raise ValueError(f"quaternion must have 4 components, got {arr.shape[0]}")
    return arr


def normalize(q) -> np.ndarray:
    arr = as_quat(q)
    norm = float(np.linalg.norm(arr))
    if not np.isfinite(norm) or norm <= 1e-12:
        raise ValueError("cannot normalize a zero-length quaternion")
    return arr / norm


def multiply(q1, q2) -> np.ndarray:
    w1, x1, y1, z1 = as_quat(q1)
    w2, x2, y2, z2 = as_quat(q2)
    return np.array(
        [
            w1 * w2 - x1 * x2 - y1 * y2 - z1 * z2,
            w1 * x2 + x1 * w2 + y1 * z2 - z1 * y2,
            w1 * y2 - x1 * z2 + y1 * w2 + z1 * x2,
            w1 * z2 + x1 * y2 - y1 * x2 + z1 * w2,
        ],
        dtype=np.float64,
    )


def conjugate(q) -> np.ndarray:
    w, x, y, z = as_quat(q)
    return np.array([w, -x, -y, -z], dtype=np.float64)


def inverse(q) -> np.ndarray:
    arr = as_quat(q)
    norm_sq = float(np.dot(arr, arr))
    if norm_sq <= 1e-24:
        raise ValueError("cannot invert a zero-length quaternion")
    return conjugate(arr) / norm_sq


def rotate_vector(q, v) -> np.ndarray:
    vec = np.asarray(v, dtype=np.float64).reshape(3)
    pure = np.array([0.0, vec[0], vec[1], vec[2]], dtype=np.float64)
    out = multiply(multiply(q, pure), conjugate(q))
    return out[1:4]


def to_rotation_matrix(q) -> np.ndarray:
    w, x, y, z = normalize(q)
    return np.array(
        [
            [1 - 2 * (y * y + z * z), 2 * (x * y - w * z), 2 * (x * z + w * y)],
            [2 * (x * y + w * z), 1 - 2 * (x * x + z * z), 2 * (y * z - w * x)],
            [2 * (x * z - w * y), 2 * (y * z + w * x), 1 - 2 * (x * x + y * y)],
        ],
        dtype=np.float64,
    )


def from_rotation_matrix(matrix, atol: float = 1e-6) -> np.ndarray:
    """Convert a proper 3x3 rotation matrix to a unit quaternion.

    Raises ``ValueError`` if the matrix is not orthonormal or has a negative
    determinant (a reflection has no quaternion).
    """
    m = np.asarray(matrix, dtype=np.float64)
    if m.shape != (3, 3):
        raise ValueError(f"rotation matrix must be 3x3, got {m.shape}")
    if not np.allclose(m @ m.T, np.eye(3), atol=atol):
        raise ValueError("matrix is not orthonormal")
    det = float(np.linalg.det(m))
    if abs(det - 1.0) > atol:
        raise ValueError(f"matrix is not a proper rotation (det={det:+.3f})")

    trace = float(np.trace(m))
    if trace > 0.0:
        s = 2.0 * np.sqrt(trace + 1.0)
        q = [
            0.25 * s,
            (m[2, 1] - m[1, 2]) / s,
            (m[0, 2] - m[2, 0]) / s,
            (m[1, 0] - m[0, 1]) / s,
        ]
    elif m[0, 0] > m[1, 1] and m[0, 0] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[0, 0] - m[1, 1] - m[2, 2])
        q = [
            (m[2, 1] - m[1, 2]) / s,
            0.25 * s,
            (m[0, 1] + m[1, 0]) / s,
            (m[0, 2] + m[2, 0]) / s,
        ]
    elif m[1, 1] > m[2, 2]:
        s = 2.0 * np.sqrt(1.0 + m[1, 1] - m[0, 0] - m[2, 2])
        q = [
            (m[0, 2] - m[2, 0]) / s,
            (m[0, 1] + m[1, 0]) / s,
            0.25 * s,
            (m[1, 2] + m[2, 1]) / s,
        ]
    else:
        s = 2.0 * np.sqrt(1.0 + m[2, 2] - m[0, 0] - m[1, 1])
        q = [
            (m[1, 0] - m[0, 1]) / s,
            (m[0, 2] + m[2, 0]) / s,
            (m[1, 2] + m[2, 1]) / s,
            0.25 * s,
        ]
    out = normalize(q)
    # Keep w >= 0 so the same matrix always yields the same quaternion.
    if out[0] < 0.0:
        out = -out
    return out
