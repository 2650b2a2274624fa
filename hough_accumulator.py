# ---------------------------------------------------------------------
# hough_accumulator.py
# Hough space (theta, rho) voting over conformally mapped space points
# ---------------------------------------------------------------------

from __future__ import annotations
import math
import numpy as np
from collections import defaultdict
from typing import Dict, List, Set, Tuple

from space_point import SpacePoint, u_v

# BinT: (theta_bin, rho_bin)
BinT = Tuple[int, int]


class HoughSpaceAccumulator:
    """
    Keeps track of which SpacePoints voted for each bin of Hough space.

    Counting votes alone is not enough: the track finder needs to remove all
    the points that contributed to e.g. the most popular bin, so every bin
    stores the points themselves.

    Hough space is parametrized as rho = u * cos(theta) + v * sin(theta),
    with theta in [0, 2*pi) split into `theta_bins` uniform sectors and
    rho in [0, rho_max] split into `rho_bins` bins (units of 1/m).
    """

    def __init__(self, rho_max: float, rho_bins: int, theta_bins: int) -> None:
        if not math.isfinite(rho_max) or rho_max <= 0.0:
            raise ValueError(f"rho_max must be positive and finite, got {rho_max}")
        if rho_bins < 1 or theta_bins < 1:
            raise ValueError(f"need at least one bin, got rho_bins={rho_bins}, theta_bins={theta_bins}")

        self.rho_max = rho_max
        self.rho_bins = rho_bins
        self.theta_bins = theta_bins
        self.accumulator: Dict[BinT, List[SpacePoint]] = defaultdict(list)

    def __len__(self) -> int:
        return len(self.accumulator)

    # ---------------------------------------------------------
    # Bins in Hough space that a point votes for
    # ---------------------------------------------------------
    def bins_for(self, point: SpacePoint) -> Set[BinT]:
        u, v = u_v(point)

        delta_theta = 2.0 * np.pi / self.theta_bins
        delta_rho = self.rho_max / self.rho_bins

        # Sample k = 0 is theta = 0, i.e. rho = u
        thetas = np.arange(1, self.theta_bins + 1) * delta_theta
        rhos = np.empty(self.theta_bins + 1)
        rhos[0] = u
        rhos[1:] = u * np.cos(thetas) + v * np.sin(thetas)

        # Negative rho saturates to bin 0: going from positive to negative rho
        # must still vote down to (and including) the 0th bin.
        rho_idx = np.maximum(np.floor(rhos / delta_rho), 0.0).astype(np.int64).tolist()
        rhos = rhos.tolist()

        bins: Set[BinT] = set()
        for theta_bin in range(self.theta_bins):
            prev_rho, rho = rhos[theta_bin], rhos[theta_bin + 1]
            # Negative on both ends: duplicates of bins at theta + pi, -rho
            # -0.0 counts as non-negative here (still votes for bin 0)
            if prev_rho < 0.0 and rho < 0.0:
                continue
            lo, hi = sorted((rho_idx[theta_bin], rho_idx[theta_bin + 1]))
            for rho_bin in range(lo, hi + 1):
                bins.add((theta_bin, rho_bin))

        return bins

    # ---------------------------------------------------------
    # Insert / remove a point's votes
    # ---------------------------------------------------------
    def add(self, point: SpacePoint) -> None:
        for key in self.bins_for(point):
            self.accumulator[key].append(point)

    def remove(self, point: SpacePoint) -> None:
        for key in self.bins_for(point):
            voters = self.accumulator.get(key)
            if not voters or point not in voters:
                continue
            voters.remove(point)
            if not voters:
                del self.accumulator[key]

    # ---------------------------------------------------------
    # Queries
    # ---------------------------------------------------------
    def most_popular(self) -> List[SpacePoint]:
        """
        Points that voted for the most popular bin (a copy). Ties go to the
        lowest (theta_bin, rho_bin). Empty list if nothing has been voted.
        """
        if not self.accumulator:
            return []
        _, voters = max(
            self.accumulator.items(),
            key=lambda kv: (len(kv[1]), -kv[0][0], -kv[0][1]),
        )
        return list(voters)

    def votes(self) -> Dict[BinT, int]:
        """Number of voters per non-empty bin."""
        return {key: len(voters) for key, voters in self.accumulator.items() if voters}
