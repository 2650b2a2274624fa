import numpy as np
import matplotlib.pyplot as plt
import matplotlib.patches as patches

from hough_accumulator import HoughSpaceAccumulator
from simulation import INNER_RADIUS, OUTER_RADIUS, HALF_LENGTH
from track_finding import ClusteringResult

cmap = list(plt.get_cmap("tab20").colors) + list(plt.get_cmap("tab20b").colors)+ list(plt.get_cmap("tab20c").colors)

# ----------------------------------------------------------
# 1. Clusters in the transverse (x–y) plane
# ----------------------------------------------------------

def plot_clusters_xy(
    result: ClusteringResult,
    show_detector: bool = True
):
    """
    Plot a clustering result in the x–y plane, one color per cluster.
    Unclustered points are drawn as grey crosses.

    Parameters
    ----------
    result : ClusteringResult
        Output of `cluster_spacepoints` for a single event.
    show_detector : bool, optional
        If True, draw the inner (cathode) and outer (anode) radii of the
        drift volume. Default is True.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes

    Notes
    -----
    This function does not call `plt.show()`.
    """

    fig, ax = plt.subplots(figsize=(7, 7))

    for idx, cluster in enumerate(result.clusters):
        xs = np.array([p.x for p in cluster])
        ys = np.array([p.y for p in cluster])
        ax.scatter(xs, ys, s=20, color=cmap[idx % len(cmap)], label=str(idx))

    if result.remainder:
        ax.scatter([p.x for p in result.remainder],
                   [p.y for p in result.remainder],
                   s=20, marker="x", c="grey", label="remainder")

    if show_detector:
        for radius in (INNER_RADIUS, OUTER_RADIUS):
            ax.add_patch(patches.Circle((0.0, 0.0), radius,
                                        edgecolor="orange",
                                        facecolor="none"))

    ax.set_xlabel("x [m]")
    ax.set_ylabel("y [m]")
    ax.set_title("Space point clusters (x–y)")
    ax.set_xlim(-1.1 * OUTER_RADIUS, 1.1 * OUTER_RADIUS)
    ax.set_ylim(-1.1 * OUTER_RADIUS, 1.1 * OUTER_RADIUS)
    ax.set_aspect("equal")
    ax.grid(True)

    if result.clusters or result.remainder:
        fig.legend(title="Cluster ID", loc="upper right", ncols=3, fontsize="xx-small")

    return fig, ax


# ----------------------------------------------------------
# 2. Clusters in the r–z plane
# ----------------------------------------------------------

def plot_clusters_rz(
    result: ClusteringResult,
    show_detector: bool = True
):
    """
    Plot a clustering result as radius vs axial position. Tracks that
    overlap in x–y but sit at different z are separated here.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes
    """

    fig, ax = plt.subplots(figsize=(10, 4))

    for idx, cluster in enumerate(result.clusters):
        ax.scatter([p.z for p in cluster], [p.r for p in cluster],
                   s=20, color=cmap[idx % len(cmap)], label=str(idx))

    if result.remainder:
        ax.scatter([p.z for p in result.remainder],
                   [p.r for p in result.remainder],
                   s=20, marker="x", c="grey", label="remainder")

    if show_detector:
        ax.add_patch(patches.Rectangle(
            (-HALF_LENGTH, INNER_RADIUS),
            2 * HALF_LENGTH,
            OUTER_RADIUS - INNER_RADIUS,
            edgecolor="orange",
            facecolor="none"
        ))

    ax.set_xlabel("z [m]")
    ax.set_ylabel("r [m]")
    ax.set_title("Space point clusters (r–z)")
    ax.grid(True)

    return fig, ax


# ----------------------------------------------------------
# 3. Hough space occupancy
# ----------------------------------------------------------

def plot_hough_occupancy(accumulator: HoughSpaceAccumulator):
    """
    Image of the number of voters per (theta, rho) bin.

    Bins beyond `rho_bins` (points with |(u, v)| above rho_max) are
    clipped into the last row.

    Returns
    -------
    fig : matplotlib.figure.Figure
    ax : matplotlib.axes.Axes
    """

    counts = np.zeros((accumulator.rho_bins, accumulator.theta_bins), dtype=int)
    for (theta_bin, rho_bin), n in accumulator.votes().items():
        counts[min(rho_bin, accumulator.rho_bins - 1), theta_bin] += n

    fig, ax = plt.subplots(figsize=(9, 5))
    im = ax.imshow(
        counts,
        origin="lower",
        aspect="auto",
        extent=(0.0, 2 * np.pi, 0.0, accumulator.rho_max),
        cmap="viridis",
    )
    fig.colorbar(im, ax=ax, label="votes")

    ax.set_xlabel(r"$\theta$ [rad]")
    ax.set_ylabel(r"$\rho$ [1/m]")
    ax.set_title("Hough space occupancy")

    return fig, ax
