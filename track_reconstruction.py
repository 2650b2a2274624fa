import logging
import numpy as np
import pandas as pd
from typing import Dict, List, Tuple

from space_point import SpacePoint
from track_finding import ClusteringResult, cluster_spacepoints

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("EventID", "r", "phi", "z")

# ClusterID of points that were not assigned to any track
REMAINDER_ID = -1


# ----------------------------------------------------------
# 1. Load space points
# ----------------------------------------------------------
def load_spacepoints_csv(csv_path: str) -> Dict[int, List[SpacePoint]]:
    """
    Load space points from CSV, grouped by event.

    Parameters
    ----------
    csv_path : str
        Path to a CSV file with (at least) the columns EventID, r, phi, z.
        r and z are in meters, phi in radians. Extra columns are ignored.

    Returns
    -------
    events : dict
        event_id -> list of SpacePoint, in file order.
    """
    # round_trip: SpacePoint equality is exact, so floats must parse back bit for bit
    df = pd.read_csv(csv_path, float_precision="round_trip")
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{csv_path}: missing columns {missing}")

    events: Dict[int, List[SpacePoint]] = {}
    for event_id, group in df.groupby("EventID", sort=False):
        events[int(event_id)] = [
            SpacePoint(float(r), float(phi), float(z))
            for r, phi, z in group[["r", "phi", "z"]].itertuples(index=False)
        ]
    return events


# ----------------------------------------------------------
# 2. Find tracks
# ----------------------------------------------------------
def reconstruct_event(points: List[SpacePoint], **config) -> ClusteringResult:
    """
    Cluster the space points of a single event.

    Keyword arguments are forwarded to `cluster_spacepoints` (max_num_clusters,
    min_num_points_per_cluster, rho_bins, theta_bins, max_distance); anything
    not given uses the defaults in track_finding.
    """
    return cluster_spacepoints(points, **config)


def results_to_dataframe(results: Dict[int, ClusteringResult]) -> pd.DataFrame:
    """
    One row per space point:
        EventID | ClusterID | r | phi | z | x | y
    Remainder points get ClusterID = REMAINDER_ID.
    """
    eids, cids, rs, phis, zs = [], [], [], [], []

    for event_id, result in results.items():
        labelled = [(cid, cluster) for cid, cluster in enumerate(result.clusters)]
        labelled.append((REMAINDER_ID, result.remainder))
        for cluster_id, points in labelled:
            for p in points:
                eids.append(event_id)
                cids.append(cluster_id)
                rs.append(p.r)
                phis.append(p.phi)
                zs.append(p.z)

    rs = np.asarray(rs, float)
    phis = np.asarray(phis, float)
    data = pd.DataFrame({
        "EventID": pd.Series(eids, dtype=int),
        "ClusterID": pd.Series(cids, dtype=int),
        "r": rs,
        "phi": phis,
        "z": np.asarray(zs, float),
        "x": rs * np.cos(phis),
        "y": rs * np.sin(phis),
    })
    return data


def reconstruct_events(csv_path: str, **config) -> Tuple[Dict[int, ClusteringResult], pd.DataFrame]:
    """
    Run the track finder on every event of a space point CSV.

    Returns
    -------
    results : dict
        event_id -> ClusteringResult
    data : pd.DataFrame
        See `results_to_dataframe`.
    """
    events = load_spacepoints_csv(csv_path)

    results: Dict[int, ClusteringResult] = {}
    for event_id, points in events.items():
        results[event_id] = reconstruct_event(points, **config)

    n_clusters = sum(len(r.clusters) for r in results.values())
    logger.info("%s: %d events, %d clusters", csv_path, len(results), n_clusters)

    return results, results_to_dataframe(results)


# ----------------------------------------------------------
# 3. Summarise
# ----------------------------------------------------------
def cluster_summary(data: pd.DataFrame) -> pd.DataFrame:
    """
    Number of points and z extent of every (EventID, ClusterID), remainder
    included.
    """
    return (
        data.groupby(["EventID", "ClusterID"])
        .agg(n_points=("r", "size"), z_min=("z", "min"), z_max=("z", "max"))
        .reset_index()
    )
