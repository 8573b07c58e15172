#!/usr/bin/env python3
"""
MOT Debugger Demo - Synthetic Multi-Channel Scenario
=====================================================

Run with:
    python -m mot_debugger.demo                        # 4 channels, 5 cycles
    python -m mot_debugger.demo --config config/input_channels.param.yaml
    python -m mot_debugger.demo --cycles 20 --seed 7
    python -m mot_debugger.demo --json                 # dump last cycle's markers

Simulates a handful of objects moving on a plane, seen by every configured
channel with per-channel detection probability and noise. A greedy
nearest-neighbour gate stands in for the tracker's association step. Each
cycle is pushed through TrackerObjectDebugger.run_cycle and summarized.
"""

import argparse
import json
import uuid

import numpy as np

from .config import DebuggerConfig, load_debugger_config
from .debugger import DetectionBatch, TrackerObjectDebugger, TrackerSnapshot
from .markers import MarkerType, markers_to_dicts

DEFAULT_CHANNELS = ["all", "Lcp", "CLf", "R"]


def generate_objects(n_objects=5, seed=42):
    """Initial positions/velocities and a stable UUID per object."""
    rng = np.random.RandomState(seed)
    positions = np.column_stack([
        rng.uniform(-30.0, 30.0, n_objects),
        rng.uniform(-30.0, 30.0, n_objects),
        np.zeros(n_objects),
    ])
    velocities = np.column_stack([
        rng.uniform(-3.0, 3.0, n_objects),
        rng.uniform(-3.0, 3.0, n_objects),
        np.zeros(n_objects),
    ])
    uuids = [uuid.UUID(bytes=rng.bytes(16)) for _ in range(n_objects)]
    return positions, velocities, uuids


def detect(truth, rng, p_detect, noise_std, n_false=1):
    """Noisy detections of the true positions plus a few false alarms."""
    seen = truth[rng.rand(len(truth)) < p_detect]
    noisy = seen + rng.randn(*seen.shape) * np.array([noise_std, noise_std, 0.1])
    clutter = np.column_stack([
        rng.uniform(-40.0, 40.0, n_false),
        rng.uniform(-40.0, 40.0, n_false),
        np.zeros(n_false),
    ])
    return np.vstack([noisy, clutter])


def gate_associate(track_xyz, det_xyz, gate=2.0):
    """Greedy nearest-neighbour assignment: tracker index -> detection index."""
    if len(track_xyz) == 0 or len(det_xyz) == 0:
        return {}
    dist = np.linalg.norm(track_xyz[:, None, :] - det_xyz[None, :, :], axis=2)
    assignment = {}
    used = set()
    for flat in np.argsort(dist, axis=None):
        i, j = np.unravel_index(flat, dist.shape)
        if dist[i, j] > gate:
            break
        if i in assignment or j in used:
            continue
        assignment[int(i)] = int(j)
        used.add(j)
    return assignment


def run_scenario(config, n_cycles=5, n_objects=5, dt=0.1, seed=42):
    """Yield (cycle_time, markers) for each simulated cycle."""
    rng = np.random.RandomState(seed + 1)
    positions, velocities, uuids = generate_objects(n_objects, seed)
    n_channels = config.num_channels
    existence = np.full((n_objects, n_channels), 0.5)
    p_detect = np.linspace(0.95, 0.6, n_channels) if n_channels else np.array([])

    debugger = TrackerObjectDebugger(config)
    for k in range(n_cycles):
        t = k * dt
        positions = positions + velocities * dt
        estimates = positions + rng.randn(n_objects, 3) * np.array([0.3, 0.3, 0.0])

        channel_inputs = []
        for ch in config.channels:
            det_xyz = detect(positions, rng, p_detect[ch.index], noise_std=0.4)
            assignment = gate_associate(estimates, det_xyz)
            hit = np.zeros(n_objects, dtype=bool)
            hit[list(assignment)] = True
            existence[:, ch.index] = np.clip(
                existence[:, ch.index] + np.where(hit, 0.1, -0.15), 0.0, 1.0)
            channel_inputs.append((DetectionBatch(det_xyz, ch.index), assignment))

        trackers = [
            TrackerSnapshot(
                uuid=uuids[i],
                position=estimates[i],
                existence_probability_vector=existence[i].tolist(),
                total_existence_probability=float(existence[i].max()) if n_channels else 0.0,
            )
            for i in range(n_objects)
        ]
        yield t, debugger.run_cycle(t, trackers, channel_inputs)


def summarize(markers):
    """Counts of drawn, tombstoned and dimmed markers."""
    texts = [m for m in markers if m.type == MarkerType.TEXT_VIEW_FACING]
    return {
        'markers': len(markers),
        'tombstones': sum(1 for m in markers if m.is_tombstone),
        'objects': len(texts),
        'unassociated': sum(1 for m in texts if m.color.r < 1.0),
    }


def main():
    parser = argparse.ArgumentParser(
        description='MOT Debugger Demo - synthetic multi-channel association markers',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--config', type=str, default=None,
                        help='YAML parameter file with input_channels')
    parser.add_argument('--cycles', type=int, default=5, help='Number of cycles')
    parser.add_argument('--objects', type=int, default=5, help='Number of objects')
    parser.add_argument('--seed', type=int, default=42, help='Random seed')
    parser.add_argument('--json', action='store_true',
                        help="Print the last cycle's markers as JSON")
    args = parser.parse_args()

    if args.config:
        config = load_debugger_config(args.config)
    else:
        config = DebuggerConfig.from_channel_names(DEFAULT_CHANNELS)

    print("═" * 70)
    print(f"  MOT Debugger Demo - channels: {', '.join(config.channel_names)}")
    print("═" * 70)

    markers = []
    for t, markers in run_scenario(config, args.cycles, args.objects, seed=args.seed):
        s = summarize(markers)
        print(f"  t={t:5.2f}s  objects={s['objects']:3d}  markers={s['markers']:4d}  "
              f"tombstones={s['tombstones']:4d}  unassociated={s['unassociated']:3d}")

    if args.json:
        print(json.dumps(markers_to_dicts(markers), indent=2))
    else:
        for m in markers:
            if m.type == MarkerType.TEXT_VIEW_FACING:
                print("\n" + m.text)


if __name__ == '__main__':
    main()
