"""
Defines the SpacePoint class for representing reconstructed detector hits,
and the conformal mapping used by the Hough track finder.
"""

from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Tuple


class DegenerateSpacePointError(ValueError):
    """Raised when a space point has no defined conformal image (r <= 0, nan, inf)."""


@dataclass(frozen=True)
class SpacePoint:
    """
    Represents a single calibrated hit position inside the cylindrical detector.

    Attributes:
        r (float): radial distance from the detector axis in meters
        phi (float): azimuthal angle in radians
        z (float): axial position (along the detector axis) in meters
    """
    r: float
    phi: float
    z: float

    @property
    def x(self) -> float:
        return self.r * math.cos(self.phi)

    @property
    def y(self) -> float:
        return self.r * math.sin(self.phi)

    def distance(self, other: "SpacePoint") -> float:
        """3D Euclidean distance (meters) to another space point."""
        return math.sqrt((self.x - other.x)**2 + (self.y - other.y)**2 + (self.z - other.z)**2)


def u_v(point: SpacePoint) -> Tuple[float, float]:
    """
    Conformal transformation from the x-y plane to the u-v plane.

        u = x / (x^2 + y^2) = cos(phi) / r
        v = y / (x^2 + y^2) = sin(phi) / r

    Circles (and lines) through the origin become straight lines in u-v, so
    tracks from annihilations close to the axis can be found with a Hough
    line transform. Units of u and v are 1/m.
    """
    r, phi = point.r, point.phi
    if not (math.isfinite(r) and math.isfinite(phi) and math.isfinite(point.z)):
        raise DegenerateSpacePointError(f"non-finite space point: {point}")
    if r <= 0.0:
        raise DegenerateSpacePointError(f"space point with non-positive radius: {point}")

    return math.cos(phi) / r, math.sin(phi) / r
