"""
Tests for MOT Debugger render primitives
=========================================
pytest tests/test_markers.py -v
"""

import numpy as np
import pytest
import sys, os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from mot_debugger.markers import (
    CHANNEL_PALETTE, PALETTE_SIZE, ColorRGBA, Marker, MarkerAction, MarkerType,
    channel_color, find_marker, markers_to_dicts,
)


@pytest.fixture
def cube_list():
    return Marker(ns="track_boxes", id=42, type=MarkerType.CUBE_LIST,
                  frame_id="map", stamp=1.5, lifetime=0.15,
                  scale=np.array([0.4, 0.4, 0.4]))


class TestPalette:
    def test_sixteen_named_colors(self):
        assert PALETTE_SIZE == 16
        names = [name for name, _ in CHANNEL_PALETTE]
        assert names[0] == "Blue"
        assert names[-1] == "Grey"
        assert len(set(names)) == 16

    def test_wraps_modulo(self):
        assert channel_color(16) == channel_color(0)
        assert channel_color(35) == channel_color(3)
        assert CHANNEL_PALETTE[17 % PALETTE_SIZE][0] == "Green"

    def test_alpha(self):
        assert channel_color(2).a == pytest.approx(0.9)
        assert channel_color(2, alpha=0.3) == ColorRGBA(1.0, 1.0, 0.0, 0.3)


class TestMarker:
    def test_add_point_offsets_copy(self, cube_list):
        p = np.array([1.0, 2.0, 3.0])
        cube_list.add_point(p, z_offset=1.0)
        np.testing.assert_allclose(cube_list.points[0], [1.0, 2.0, 4.0])
        np.testing.assert_allclose(p, [1.0, 2.0, 3.0])

    def test_derive_does_not_share_arrays(self, cube_list):
        cube_list.add_point([0.0, 0.0, 0.0])
        other = cube_list.derive(ns="other")
        other.add_point([1.0, 1.0, 1.0])
        other.scale[0] = 9.0
        assert len(cube_list.points) == 1
        assert cube_list.scale[0] == pytest.approx(0.4)
        assert other.id == 42

    def test_tombstone(self, cube_list):
        assert not cube_list.is_tombstone
        cube_list.action = MarkerAction.DELETE
        assert cube_list.is_tombstone

    def test_to_dict_layout(self, cube_list):
        cube_list.add_point([1.0, 2.0, 3.0])
        d = cube_list.to_dict()
        assert d['header'] == {'frame_id': 'map', 'stamp': 1.5}
        assert d['ns'] == "track_boxes"
        assert d['type'] == 6
        assert d['action'] == 0
        assert d['points'] == [{'x': 1.0, 'y': 2.0, 'z': 3.0}]
        assert d['pose']['orientation']['w'] == 1
        assert d['lifetime'] == pytest.approx(0.15)
        assert 'text' not in d

    def test_text_in_dict(self):
        m = Marker(ns="existence_probability", id=1, type=MarkerType.TEXT_VIEW_FACING,
                   text="total:50")
        assert m.to_dict()['text'] == "total:50"

    def test_markers_to_dicts_and_find(self, cube_list):
        text = Marker(ns="existence_probability", id=42, type=MarkerType.TEXT_VIEW_FACING)
        markers = [cube_list, text]
        assert [d['ns'] for d in markers_to_dicts(markers)] == ["track_boxes",
                                                                "existence_probability"]
        assert find_marker(markers, "existence_probability") is text
        assert find_marker(markers, "track_boxes", 7) is None
