# simulation.py
"""
Toy event generator for the radial TPC.

Produces calibrated-looking space points for tracks that start close to the
detector axis, plus uniformly distributed noise inside the drift volume.
Only meant for exercising the track finder; no detector response is modelled
beyond a Gaussian smearing of the hit positions.
"""

from __future__ import annotations
import csv
import math
import numpy as np
from typing import Dict, List, Optional, Tuple

from space_point import SpacePoint

# --- CONSTANTS ---
INNER_RADIUS = 0.109    # m, cathode
OUTER_RADIUS = 0.190    # m, anode wires
HALF_LENGTH = 1.152     # m
PAD_PITCH = 0.004       # m, spacing of sampled points along a track
RESOLUTION = 0.001      # m, Gaussian smearing of each coordinate
B_FIELD = 1.0           # T

# Truth label of noise points
NOISE_ID = -1

# EventT: (points, truth track id per point)
EventT = Tuple[List[SpacePoint], List[int]]


class Track:
    """
    Helix starting at `vertex` with transverse direction `phi0`.

    Attributes:
        id               : track identifier
        vertex           : (x, y, z) origin of the track in meters
        phi0             : initial azimuthal direction in radians
        cot_theta        : dz/ds, with s the transverse arc length
        curvature_radius : signed radius in meters (inf for a straight line)
    """
    def __init__(self, track_id: int, vertex: Tuple[float, float, float], phi0: float,
                 cot_theta: float = 0.0, curvature_radius: float = math.inf):
        self.id = track_id
        self.vertex = np.asarray(vertex, float)
        self.phi0 = phi0
        self.cot_theta = cot_theta
        self.curvature_radius = curvature_radius

    def position_at(self, s: float) -> np.ndarray:
        x0, y0, z0 = self.vertex
        R = self.curvature_radius
        if math.isinf(R):
            x = x0 + s * math.cos(self.phi0)
            y = y0 + s * math.sin(self.phi0)
        else:
            x = x0 + R * (math.sin(self.phi0 + s / R) - math.sin(self.phi0))
            y = y0 - R * (math.cos(self.phi0 + s / R) - math.cos(self.phi0))
        return np.array([x, y, z0 + s * self.cot_theta])

    def spacepoints(self, step: float = PAD_PITCH, resolution: float = RESOLUTION,
                    rng: Optional[np.random.Generator] = None) -> List[SpacePoint]:
        """
        Sample the track every `step` of transverse arc length while it is
        inside the drift volume. Stops once the track leaves the outer radius
        or the detector ends.
        """
        rng = rng if rng is not None else np.random.default_rng()
        points: List[SpacePoint] = []
        # Upper bound on the arc length needed to cross the detector
        n_steps = int(math.ceil(4 * OUTER_RADIUS / step))
        for i in range(1, n_steps + 1):
            x, y, z = self.position_at(i * step)
            r = math.hypot(x, y)
            if r > OUTER_RADIUS or abs(z) > HALF_LENGTH:
                break
            if r < INNER_RADIUS:
                continue
            if resolution > 0:
                x, y, z = np.array([x, y, z]) + rng.normal(0, resolution, size=3)
            points.append(SpacePoint(r=math.hypot(x, y), phi=math.atan2(y, x), z=float(z)))
        return points


def create_random_track(track_id: int, rng: Optional[np.random.Generator] = None,
                        vertex_sigma: float = 0.005) -> Track:
    """Track from a vertex near the axis with random direction and momentum."""
    rng = rng if rng is not None else np.random.default_rng()

    vx, vy = rng.normal(0, vertex_sigma, size=2)
    vz = rng.uniform(-0.5 * HALF_LENGTH, 0.5 * HALF_LENGTH)
    phi0 = rng.uniform(0, 2 * np.pi)
    theta = rng.uniform(np.pi / 4, 3 * np.pi / 4)

    # R [m] = pT [GeV/c] / (0.3 * B [T])
    pt = rng.uniform(0.1, 0.5)
    charge = rng.choice([-1, 1])
    R = charge * pt / (0.3 * B_FIELD)

    return Track(track_id, (vx, vy, vz), phi0, cot_theta=1 / math.tan(theta), curvature_radius=R)


def noise_spacepoints(n: int, rng: Optional[np.random.Generator] = None) -> List[SpacePoint]:
    """Uniform (in volume) noise points inside the drift region."""
    rng = rng if rng is not None else np.random.default_rng()
    r = np.sqrt(rng.uniform(INNER_RADIUS**2, OUTER_RADIUS**2, size=n))
    phi = rng.uniform(-np.pi, np.pi, size=n)
    z = rng.uniform(-HALF_LENGTH, HALF_LENGTH, size=n)
    return [SpacePoint(float(ri), float(pi), float(zi)) for ri, pi, zi in zip(r, phi, z)]


def generate_event(n_tracks: int, n_noise: int,
                   rng: Optional[np.random.Generator] = None) -> EventT:
    """
    One event: `n_tracks` random tracks plus `n_noise` noise points.

    Returns the space points and, aligned with them, the truth track id of
    every point (NOISE_ID for noise).
    """
    rng = rng if rng is not None else np.random.default_rng()
    points: List[SpacePoint] = []
    labels: List[int] = []

    for i in range(n_tracks):
        track = create_random_track(i, rng)
        track_points = track.spacepoints(rng=rng)
        points.extend(track_points)
        labels.extend([track.id] * len(track_points))

    noise = noise_spacepoints(n_noise, rng)
    points.extend(noise)
    labels.extend([NOISE_ID] * len(noise))

    return points, labels


def simulate_events(n_events: int, avg_tracks: float = 2.0, avg_noise: float = 10.0,
                    seed: Optional[int] = None) -> Dict[int, EventT]:
    """Poisson-distributed number of tracks and noise points per event."""
    rng = np.random.default_rng(seed)
    events: Dict[int, EventT] = {}
    for event_id in range(n_events):
        n_tracks = int(rng.poisson(avg_tracks))
        n_noise = int(rng.poisson(avg_noise))
        events[event_id] = generate_event(n_tracks, n_noise, rng)
    return events


def write_events_csv(events: Dict[int, EventT], output_file: str) -> None:
    """Write simulated events as EventID, TrackID, r, phi, z rows."""
    with open(output_file, mode="w", newline="") as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(["EventID", "TrackID", "r", "phi", "z"])
        for event_id, (points, labels) in events.items():
            for point, label in zip(points, labels):
                writer.writerow([
                    event_id,
                    label,
                    f"{point.r:.9f}",
                    f"{point.phi:.9f}",
                    f"{point.z:.9f}",
                ])
