"""Vector and rigid-transform helpers shared by the snapshot builder and predicates."""

from __future__ import annotations

import math

import numpy as np

ZERO = np.zeros(3, dtype=np.float64)
UP = np.array([0.0, 1.0, 0.0])
FORWARD = np.array([0.0, 0.0, -1.0])


def as_vector(value) -> np.ndarray:
    return np.asarray(value, dtype=np.float64).reshape(3)


def distance(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.linalg.norm(np.asarray(a) - np.asarray(b)))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v, or the zero vector when v has no length."""
    v = as_vector(v)
    norm = float(np.linalg.norm(v))
    if norm == 0.0 or not math.isfinite(norm):
        return ZERO.copy()
    return v / norm


def angle_between(a: np.ndarray, b: np.ndarray) -> float:
    """Angle in radians between two vectors.

    The cosine is clipped to [-1, 1] so rounding on near-parallel vectors
    cannot push acos out of its domain. A zero-length input gives 0.
    """
    a = as_vector(a)
    b = as_vector(b)
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0 or not math.isfinite(denom):
        cos_angle = 1.0
    else:
        cos_angle = float(np.dot(a, b)) / denom
    return math.acos(float(np.clip(cos_angle, -1.0, 1.0)))


def translation(offset) -> np.ndarray:
    """4x4 homogeneous transform that translates by offset."""
    m = np.eye(4)
    m[:3, 3] = as_vector(offset)
    return m


def rotation(axis, angle: float) -> np.ndarray:
    """4x4 homogeneous rotation of `angle` radians about `axis` (Rodrigues)."""
    k = normalize(axis)
    kx, ky, kz = k
    skew = np.array([
        [0.0, -kz, ky],
        [kz, 0.0, -kx],
        [-ky, kx, 0.0],
    ])
    r = np.eye(3) + math.sin(angle) * skew + (1.0 - math.cos(angle)) * (skew @ skew)
    m = np.eye(4)
    m[:3, :3] = r
    return m


def transform_position(matrix: np.ndarray) -> np.ndarray:
    """Translation column of a 4x4 transform."""
    return np.asarray(matrix, dtype=np.float64)[:3, 3].copy()
