import matplotlib.pyplot as plt
from matplotlib.collections import PathCollection
from matplotlib.image import AxesImage

from hough_accumulator import HoughSpaceAccumulator
from pyscripts.plotting import plot_clusters_rz, plot_clusters_xy, plot_hough_occupancy
from space_point import SpacePoint
from track_finding import ClusteringResult, cluster_spacepoints


def two_track_result(two_tracks):
    return cluster_spacepoints(
        two_tracks[0] + two_tracks[1] + [SpacePoint(0.15, -2.5, 0.7)],
        min_num_points_per_cluster=5, rho_bins=100, theta_bins=250, max_distance=0.02,
    )


def test_plot_clusters_xy_runs(two_tracks):
    fig, ax = plot_clusters_xy(two_track_result(two_tracks), show_detector=True)

    assert ax in fig.axes

    collections = [
        c for c in ax.collections
        if isinstance(c, PathCollection)
    ]
    # Two clusters + remainder
    assert len(collections) == 3
    assert sum(c.get_offsets().shape[0] for c in collections) == 41

    # Cathode and anode
    assert len(ax.patches) == 2

    plt.close(fig)


def test_plot_clusters_xy_empty_result():
    fig, ax = plot_clusters_xy(ClusteringResult(), show_detector=False)

    assert len(ax.collections) == 0
    assert len(ax.patches) == 0

    plt.close(fig)


def test_plot_clusters_rz_runs(two_tracks):
    fig, ax = plot_clusters_rz(two_track_result(two_tracks))

    assert len(ax.collections) == 3
    assert len(ax.patches) == 1

    plt.close(fig)


def test_plot_hough_occupancy(two_tracks):
    acc = HoughSpaceAccumulator(rho_max=9.0, rho_bins=100, theta_bins=250)
    for p in two_tracks[0]:
        acc.add(p)

    fig, ax = plot_hough_occupancy(acc)

    images = [im for im in ax.get_images() if isinstance(im, AxesImage)]
    assert len(images) == 1
    data = images[0].get_array()
    assert data.shape == (100, 250)
    assert data.max() == 20

    plt.close(fig)
