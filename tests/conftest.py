import matplotlib
matplotlib.use("Agg")

import pytest

from simulation import Track
from space_point import SpacePoint


@pytest.fixture
def collinear_points():
    # Same radial line through the origin
    return [
        SpacePoint(r=1.0, phi=0.0, z=0.0),
        SpacePoint(r=2.0, phi=0.0, z=0.0),
        SpacePoint(r=3.0, phi=0.0, z=0.0),
    ]


@pytest.fixture
def split_points():
    # Same transverse position, two close in z and one far away
    return [
        SpacePoint(r=1.0, phi=0.0, z=0.0),
        SpacePoint(r=1.0, phi=0.0, z=0.1),
        SpacePoint(r=1.0, phi=0.0, z=100.0),
    ]


@pytest.fixture
def two_tracks():
    # Straight, unsmeared tracks from the origin; 20 points each
    track_a = Track(0, (0.0, 0.0, 0.0), phi0=0.0)
    track_b = Track(1, (0.0, 0.0, 0.0), phi0=2.0)
    return (
        track_a.spacepoints(resolution=0.0),
        track_b.spacepoints(resolution=0.0),
    )
