"""
Tests for the MOT Debugger demo scenario
=========================================
pytest tests/test_demo.py -v
"""

import numpy as np
import pytest
import sys, os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mot_debugger.config import DebuggerConfig
from mot_debugger.demo import gate_associate, generate_objects, run_scenario, summarize


@pytest.fixture
def config():
    return DebuggerConfig.from_channel_names(["all", "Lcp", "R"])


class TestGateAssociate:
    def test_nearest_within_gate(self):
        tracks = np.array([[0.0, 0.0, 0.0], [10.0, 0.0, 0.0]])
        dets = np.array([[10.5, 0.0, 0.0], [0.2, 0.0, 0.0], [50.0, 0.0, 0.0]])
        assert gate_associate(tracks, dets) == {0: 1, 1: 0}

    def test_outside_gate(self):
        tracks = np.array([[0.0, 0.0, 0.0]])
        dets = np.array([[5.0, 0.0, 0.0]])
        assert gate_associate(tracks, dets, gate=2.0) == {}

    def test_one_detection_per_track(self):
        tracks = np.array([[0.0, 0.0, 0.0], [0.5, 0.0, 0.0]])
        dets = np.array([[0.1, 0.0, 0.0]])
        assert len(gate_associate(tracks, dets)) == 1

    def test_empty(self):
        assert gate_associate(np.zeros((0, 3)), np.zeros((2, 3))) == {}


class TestScenario:
    def test_generate_objects_unique_ids(self):
        _, _, uuids = generate_objects(8, seed=1)
        assert len(set(uuids)) == 8

    def test_marker_count_per_cycle(self, config):
        cycles = list(run_scenario(config, n_cycles=3, n_objects=4, seed=3))
        assert len(cycles) == 3
        for _, markers in cycles:
            assert len(markers) == 4 * (2 * config.num_channels + 2)

    def test_summary(self, config):
        _, markers = next(run_scenario(config, n_cycles=1, n_objects=5, seed=0))
        s = summarize(markers)
        assert s['objects'] == 5
        assert s['markers'] == len(markers)
        assert 0 <= s['unassociated'] <= 5
        assert s['tombstones'] <= 5 * 2 * config.num_channels

    def test_deterministic(self, config):
        a = [m.to_dict() for _, ms in run_scenario(config, 2, 3, seed=9) for m in ms]
        b = [m.to_dict() for _, ms in run_scenario(config, 2, 3, seed=9) for m in ms]
        assert a == b
