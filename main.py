# main.py
import logging

from logging_config import setup_logging
from simulation import simulate_events, write_events_csv
from track_finding import ClusteringResult
from track_reconstruction import reconstruct_events, cluster_summary, REMAINDER_ID

num_events = 10
avg_tracks = 2
avg_noise_points = 10
seed = 1
output_file = "spacepoints.csv"

# Track finding configuration (see track_finding for the defaults)
config = {
    "max_num_clusters": 10,
    "min_num_points_per_cluster": 8,
    "rho_bins": 100,
    "theta_bins": 250,
    "max_distance": 0.02,
}


def main():
    setup_logging(logging.INFO)

    print("Starting simulation...")
    events = simulate_events(num_events, avg_tracks, avg_noise_points, seed=seed)
    write_events_csv(events, output_file)
    print(f"Simulation complete. Space points saved to {output_file}")

    # =================================================================
    #                           reconstruction
    # =================================================================
    results, data = reconstruct_events(output_file, **config)

    summary = cluster_summary(data)
    found = summary[summary["ClusterID"] != REMAINDER_ID]
    for event_id, (points, labels) in events.items():
        n_true = len({label for label in labels if label >= 0})
        # Events without any space point are not in the CSV
        result = results.get(event_id, ClusteringResult())
        n_found = len(result.clusters)
        print(f"  - event {event_id}: {len(points)} points, "
              f"{n_true} simulated tracks, {n_found} clusters, "
              f"{len(result.remainder)} unclustered")

    print(f"Found {len(found)} clusters in {len(results)} events")


if __name__ == "__main__":
    main()
