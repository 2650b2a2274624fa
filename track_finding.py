# ---------------------------------------------------------------------
# track_finding.py
# Cluster space points into track candidates (Hough transform + distance)
# ---------------------------------------------------------------------
#
# A track, as seen from the x-y plane, forms a circle. The conformal
# transformation u = x / (x^2 + y^2), v = y / (x^2 + y^2) maps circles (and
# lines) through the origin into straight lines, and circles that do not go
# through the origin into circles. Annihilation tracks start close to the
# axis, so they show up as (nearly) straight lines in the u-v plane.

from __future__ import annotations
import logging
import math
import numpy as np
from dataclasses import dataclass, field
from typing import Iterable, List

from hough_accumulator import HoughSpaceAccumulator
from space_point import SpacePoint, u_v

logger = logging.getLogger(__name__)

# =====================================================================
#                         Types & Constants
# =====================================================================

Cluster = List[SpacePoint]

# Default clustering configuration
MAX_NUM_CLUSTERS = 20
MIN_NUM_POINTS_PER_CLUSTER = 10
RHO_BINS = 100
THETA_BINS = 250
MAX_DISTANCE = 0.02                            # m


@dataclass
class ClusteringResult:
    """
    Output of the track finder.

    Attributes:
        clusters  : list of clusters, each believed to belong to one track
        remainder : space points that were not assigned to any cluster
    """
    clusters: List[Cluster] = field(default_factory=list)
    remainder: List[SpacePoint] = field(default_factory=list)


# =====================================================================
#                         Connectivity filter
# =====================================================================

def largest_cluster(points: List[SpacePoint], max_distance: float) -> Cluster:
    """
    Largest subset of `points` that can all be reached from each other
    through a chain of points at most `max_distance` apart (3D).

    Needed after finding a line in Hough space because:
      1. Two tracks going in opposite directions are picked up as a single
         line. They have a gap in the middle (inner cathode).
      2. Two tracks going in the same direction at different z are the same
         line when seen from the x-y (u-v) plane.

    Components are grown from the first unassigned point in input order;
    ties go to the first component found.
    """
    if not points:
        return []

    xyz = np.array([[p.x, p.y, p.z] for p in points], float)
    diff = xyz[:, None, :] - xyz[None, :, :]
    adjacent = np.sqrt((diff**2).sum(axis=-1)) <= max_distance

    unassigned = np.ones(len(points), dtype=bool)
    best: List[int] = []
    for seed in range(len(points)):
        if not unassigned[seed]:
            continue
        unassigned[seed] = False
        component = [seed]
        i = 0
        while i < len(component):
            neighbours = np.flatnonzero(adjacent[component[i]] & unassigned)
            unassigned[neighbours] = False
            component.extend(neighbours.tolist())
            i += 1
        if len(component) > len(best):
            best = component

    return [points[i] for i in best]


# =====================================================================
#                         Greedy extraction
# =====================================================================

def best_cluster(accumulator: HoughSpaceAccumulator, max_distance: float) -> Cluster:
    """
    Best cluster for the current state of the accumulator, i.e. the largest
    number of points that form a line in Hough space and are close enough to
    be a single track.

    Removing a candidate can change which bin is the most popular, so keep
    trying until the candidate stops growing. The accumulator is left with
    the returned points removed.
    """
    prev_best: Cluster = []

    while True:
        best = largest_cluster(accumulator.most_popular(), max_distance)
        if len(best) <= len(prev_best):
            break

        for point in best:
            accumulator.remove(point)
        for point in prev_best:
            accumulator.add(point)

        prev_best = best

    return prev_best


# =====================================================================
#                         Orchestrator
# =====================================================================

def cluster_spacepoints(
    points: Iterable[SpacePoint],
    max_num_clusters: int = MAX_NUM_CLUSTERS,
    min_num_points_per_cluster: int = MIN_NUM_POINTS_PER_CLUSTER,
    rho_bins: int = RHO_BINS,
    theta_bins: int = THETA_BINS,
    max_distance: float = MAX_DISTANCE,
) -> ClusteringResult:
    """
    Partition space points into track clusters and a remainder.

    Parameters
    ----------
    points : iterable of SpacePoint
        Calibrated space points of one event.
    max_num_clusters : int, optional
        Stop after this many clusters have been found.
    min_num_points_per_cluster : int, optional
        Stop as soon as the best remaining cluster is smaller than this.
    rho_bins, theta_bins : int, optional
        Binning of Hough space.
    max_distance : float, optional
        Maximum distance (m) between neighbouring points of a cluster.

    Returns
    -------
    ClusteringResult
        Every input point ends up in exactly one cluster or in the remainder.

    Raises
    ------
    DegenerateSpacePointError
        If any point has a non-positive radius or non-finite coordinates.
    ValueError
        For negative counts or distances, or fewer than one bin.
    """
    points = list(points)
    if not points:
        return ClusteringResult()

    if max_num_clusters < 0 or min_num_points_per_cluster < 0:
        raise ValueError("cluster counts must be non-negative")
    if not max_distance >= 0.0:
        raise ValueError(f"max_distance must be non-negative, got {max_distance}")

    rho_max = max(math.hypot(*u_v(point)) for point in points)

    accumulator = HoughSpaceAccumulator(rho_max, rho_bins, theta_bins)
    for point in points:
        accumulator.add(point)

    clusters: List[Cluster] = []
    while len(clusters) < max_num_clusters:
        cluster = best_cluster(accumulator, max_distance)
        if not cluster or len(cluster) < min_num_points_per_cluster:
            break
        logger.debug("cluster %d: %d points", len(clusters), len(cluster))
        clusters.append(cluster)

    # All clustered points come from the original set
    remainder = list(points)
    for cluster in clusters:
        for point in cluster:
            remainder.remove(point)

    logger.debug("found %d clusters in %d space points (%d unclustered)",
                 len(clusters), len(points), len(remainder))

    return ClusteringResult(clusters=clusters, remainder=remainder)
