"""
Vector types and the coordinate normalization applied to loaded maps.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass
class Vector3:
    """3D vector for positions and directions."""
    x: float
    y: float
    z: float

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vector3):
            return NotImplemented
        return (
            abs(self.x - other.x) < 1e-6
            and abs(self.y - other.y) < 1e-6
            and abs(self.z - other.z) < 1e-6
        )

    def __repr__(self) -> str:
        return f"Vector3({self.x:.2f}, {self.y:.2f}, {self.z:.2f})"

    @classmethod
    def zero(cls) -> Vector3:
        """Return zero vector."""
        return cls(0.0, 0.0, 0.0)

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)


@dataclass
class BoundingBox:
    """Axis-aligned bounding box."""
    mins: Vector3
    maxs: Vector3


@dataclass
class Plane:
    """BSP plane, stored in file coordinates."""
    normal: Vector3
    dist: float
    type: int


# Quake maps are Z-up; consumers expect Y-up with the other axes flipped.
# See http://www.gamers.org/dEngine/quake/spec/quake-spec34/qkspec_2.htm#2.1.1

def fix_coords(v: Vector3) -> Vector3:
    """
    Convert a vector from BSP coordinates: (x, y, z) -> (x, -z, -y).

    The transform is its own inverse.
    """
    return Vector3(v.x, -v.z, -v.y)


_AXIS_ORDER = [0, 2, 1]
_AXIS_SIGN = np.array([1.0, -1.0, -1.0], dtype=np.float32)


def fix_coords_array(points: np.ndarray) -> np.ndarray:
    """Apply :func:`fix_coords` to every row of an (N, 3) array."""
    points = np.asarray(points, dtype=np.float32)
    if points.ndim != 2 or points.shape[1] != 3:
        raise ValueError(f"Expected an (N, 3) array, got shape {points.shape}")
    return points[:, _AXIS_ORDER] * _AXIS_SIGN
