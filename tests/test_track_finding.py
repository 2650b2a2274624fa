import random
from collections import Counter

import numpy as np
import pytest

from hough_accumulator import HoughSpaceAccumulator
from simulation import generate_event
from space_point import DegenerateSpacePointError, SpacePoint
from track_finding import (
    ClusteringResult,
    best_cluster,
    cluster_spacepoints,
    largest_cluster,
)


def assert_partition(points, result):
    clustered = [p for cluster in result.clusters for p in cluster]
    assert Counter(clustered + result.remainder) == Counter(points)


# ----------------------------------------------------------
# Connectivity filter
# ----------------------------------------------------------

def test_largest_cluster_empty():
    assert largest_cluster([], 1.0) == []


def test_largest_cluster_chain_is_connected():
    # a-b and b-c are close, a-c is not
    a = SpacePoint(1.0, 0.0, 0.0)
    b = SpacePoint(1.0, 0.0, 0.8)
    c = SpacePoint(1.0, 0.0, 1.6)
    far = SpacePoint(1.0, 0.0, 10.0)

    cluster = largest_cluster([far, a, c, b], max_distance=1.0)
    assert Counter(cluster) == Counter([a, b, c])


def test_largest_cluster_uses_3d_distance():
    # Close in z, opposite sides in x-y
    a = SpacePoint(1.0, 0.0, 0.0)
    b = SpacePoint(1.0, np.pi, 0.0)
    assert len(largest_cluster([a, b], max_distance=1.5)) == 1
    assert len(largest_cluster([a, b], max_distance=2.0)) == 2


def test_largest_cluster_tie_goes_to_first_found():
    a1 = SpacePoint(1.0, 0.0, 0.0)
    a2 = SpacePoint(1.0, 0.0, 0.5)
    b1 = SpacePoint(1.0, 0.0, 50.0)
    b2 = SpacePoint(1.0, 0.0, 50.5)

    assert Counter(largest_cluster([a1, b1, a2, b2], 1.0)) == Counter([a1, a2])
    assert Counter(largest_cluster([b2, a1, b1, a2], 1.0)) == Counter([b1, b2])


# ----------------------------------------------------------
# Greedy extraction
# ----------------------------------------------------------

def test_best_cluster_removes_only_winning_points(split_points):
    acc = HoughSpaceAccumulator(rho_max=1.0, rho_bins=10, theta_bins=16)
    for p in split_points:
        acc.add(p)

    cluster = best_cluster(acc, max_distance=1.0)
    assert Counter(cluster) == Counter(split_points[:2])

    remaining = {p for voters in acc.accumulator.values() for p in voters}
    assert remaining == {split_points[2]}


def test_best_cluster_empty_accumulator():
    acc = HoughSpaceAccumulator(rho_max=1.0, rho_bins=10, theta_bins=16)
    assert best_cluster(acc, max_distance=1.0) == []


# ----------------------------------------------------------
# Orchestrator
# ----------------------------------------------------------

def test_empty_input():
    result = cluster_spacepoints([], 10, 2, 10, 10, 1.0)
    assert result == ClusteringResult(clusters=[], remainder=[])


def test_collinear_through_origin(collinear_points):
    result = cluster_spacepoints(collinear_points, max_num_clusters=10,
                                 min_num_points_per_cluster=2, rho_bins=10,
                                 theta_bins=8, max_distance=10.0)

    assert len(result.clusters) == 1
    assert Counter(result.clusters[0]) == Counter(collinear_points)
    assert result.remainder == []


def test_distance_gated_split(split_points):
    result = cluster_spacepoints(split_points, max_num_clusters=10,
                                 min_num_points_per_cluster=2, rho_bins=10,
                                 theta_bins=16, max_distance=1.0)

    assert len(result.clusters) == 1
    assert Counter(result.clusters[0]) == Counter(split_points[:2])
    assert result.remainder == [split_points[2]]


def test_minimum_size_rejection():
    lone = SpacePoint(0.15, 0.3, 0.0)
    result = cluster_spacepoints([lone], max_num_clusters=10,
                                 min_num_points_per_cluster=2, rho_bins=10,
                                 theta_bins=16, max_distance=1.0)

    assert result.clusters == []
    assert result.remainder == [lone]


def test_no_empty_clusters_when_minimum_is_zero():
    lone = SpacePoint(0.15, 0.3, 0.0)
    result = cluster_spacepoints([lone], max_num_clusters=10,
                                 min_num_points_per_cluster=0, rho_bins=10,
                                 theta_bins=16, max_distance=1.0)

    assert result.clusters == [[lone]]
    assert result.remainder == []


def test_two_tracks_are_recovered(two_tracks):
    track_a, track_b = two_tracks
    assert len(track_a) == len(track_b) == 20

    points = track_a + track_b
    random.Random(3).shuffle(points)
    result = cluster_spacepoints(points, max_num_clusters=10,
                                 min_num_points_per_cluster=5, rho_bins=100,
                                 theta_bins=250, max_distance=0.02)

    found = sorted((frozenset(c) for c in result.clusters), key=len)
    assert len(found) == 2
    assert set(found) == {frozenset(track_a), frozenset(track_b)}
    assert result.remainder == []


def test_max_num_clusters(two_tracks):
    points = two_tracks[0] + two_tracks[1]
    result = cluster_spacepoints(points, max_num_clusters=1,
                                 min_num_points_per_cluster=5, rho_bins=100,
                                 theta_bins=250, max_distance=0.02)

    assert len(result.clusters) == 1
    assert len(result.remainder) == 20
    assert_partition(points, result)


def test_partition_and_bounds_with_noise():
    rng = np.random.default_rng(7)
    points, _ = generate_event(n_tracks=3, n_noise=30, rng=rng)
    # Duplicated points must be accounted for as well
    points.append(points[0])

    for order in range(3):
        random.Random(order).shuffle(points)
        result = cluster_spacepoints(points, max_num_clusters=4,
                                     min_num_points_per_cluster=6,
                                     rho_bins=100, theta_bins=250,
                                     max_distance=0.02)
        assert_partition(points, result)
        assert len(result.clusters) <= 4
        assert all(len(c) >= 6 for c in result.clusters)


def test_deterministic():
    rng = np.random.default_rng(11)
    points, _ = generate_event(n_tracks=2, n_noise=20, rng=rng)

    first = cluster_spacepoints(points, 5, 6, 100, 250, 0.02)
    second = cluster_spacepoints(points, 5, 6, 100, 250, 0.02)
    assert first == second


def test_degenerate_point_fails_the_call(collinear_points):
    with pytest.raises(DegenerateSpacePointError):
        cluster_spacepoints(collinear_points + [SpacePoint(0.0, 0.0, 0.0)],
                            10, 2, 10, 8, 10.0)


@pytest.mark.parametrize("kwargs", [
    {"max_num_clusters": -1},
    {"min_num_points_per_cluster": -1},
    {"max_distance": -0.1},
    {"max_distance": float("nan")},
    {"rho_bins": 0},
    {"theta_bins": 0},
])
def test_invalid_configuration(collinear_points, kwargs):
    with pytest.raises(ValueError):
        cluster_spacepoints(collinear_points, **kwargs)
