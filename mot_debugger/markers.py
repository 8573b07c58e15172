"""MOT Debugger render primitives.

Markers follow the visualization_msgs/Marker model so they map one-to-one onto
an RViz MarkerArray, but are plain Python objects with no ROS dependency.
``Marker.to_dict()`` gives a transport-neutral dict any publisher can convert.

A marker with no points and ``action == MarkerAction.DELETE`` is a tombstone:
the viewer must clear whatever it drew under the same (ns, id).

License: AGPL-3.0-or-later
"""

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np


class MarkerType(IntEnum):
    """visualization_msgs/Marker type constants."""
    ARROW = 0
    CUBE = 1
    SPHERE = 2
    CYLINDER = 3
    LINE_STRIP = 4
    LINE_LIST = 5
    CUBE_LIST = 6
    SPHERE_LIST = 7
    POINTS = 8
    TEXT_VIEW_FACING = 9


class MarkerAction(IntEnum):
    """visualization_msgs/Marker action constants."""
    ADD = 0
    DELETE = 2
    DELETEALL = 3


@dataclass(frozen=True)
class ColorRGBA:
    """Color with components in [0, 1]."""
    r: float
    g: float
    b: float
    a: float = 1.0

    def with_alpha(self, a: float) -> "ColorRGBA":
        return replace(self, a=a)

    def to_dict(self) -> Dict[str, float]:
        return {'r': self.r, 'g': self.g, 'b': self.b, 'a': self.a}


# =============================================================================
# COLORS
# =============================================================================

# Channel palette, indexed by channel index modulo its length. The order is
# fixed so channel colors stay stable across restarts.
CHANNEL_PALETTE: Tuple[Tuple[str, ColorRGBA], ...] = (
    ("Blue", ColorRGBA(0.0, 0.0, 1.0)),
    ("Green", ColorRGBA(0.0, 1.0, 0.0)),
    ("Yellow", ColorRGBA(1.0, 1.0, 0.0)),
    ("Red", ColorRGBA(1.0, 0.0, 0.0)),
    ("Cyan", ColorRGBA(0.0, 1.0, 1.0)),
    ("Magenta", ColorRGBA(1.0, 0.0, 1.0)),
    ("Orange", ColorRGBA(1.0, 0.64, 0.0)),
    ("Lime", ColorRGBA(0.75, 1.0, 0.0)),
    ("Teal", ColorRGBA(0.0, 0.5, 0.5)),
    ("Purple", ColorRGBA(0.5, 0.0, 0.5)),
    ("Pink", ColorRGBA(1.0, 0.75, 0.8)),
    ("Brown", ColorRGBA(0.65, 0.17, 0.17)),
    ("Maroon", ColorRGBA(0.5, 0.0, 0.0)),
    ("Olive", ColorRGBA(0.5, 0.5, 0.0)),
    ("Navy", ColorRGBA(0.0, 0.0, 0.5)),
    ("Grey", ColorRGBA(0.5, 0.5, 0.5)),
)
PALETTE_SIZE = len(CHANNEL_PALETTE)

WHITE = ColorRGBA(1.0, 1.0, 1.0, 1.0)
TRACK_BOX_COLOR = ColorRGBA(1.0, 1.0, 1.0, 0.9)
DIMMED_TRACK_BOX_COLOR = ColorRGBA(0.5, 0.5, 0.5, 0.8)
DIMMED_TEXT_COLOR = ColorRGBA(0.5, 0.5, 0.5, 0.9)
CHANNEL_ALPHA = 0.9


def channel_color(index: int, alpha: float = CHANNEL_ALPHA) -> ColorRGBA:
    """Palette color for a channel index (wraps after PALETTE_SIZE channels)."""
    return CHANNEL_PALETTE[index % PALETTE_SIZE][1].with_alpha(alpha)


# =============================================================================
# MARKER
# =============================================================================

def _point_dict(p: np.ndarray) -> Dict[str, float]:
    return {'x': float(p[0]), 'y': float(p[1]), 'z': float(p[2])}


@dataclass
class Marker:
    """One drawable primitive (box list, line list or text).

    Attributes:
        ns: Namespace; (ns, id) addresses the primitive in the viewer
        id: Signed 32-bit key, derived from the tracked entity identity
        type: Geometry kind
        action: ADD to draw/replace, DELETE to clear
        frame_id: Coordinate frame
        stamp: Cycle time in seconds
        lifetime: Seconds until the viewer drops the marker if not refreshed
        position: Pose position (text anchor; zero for list markers)
        scale: Box size, line width (x) or text height (z)
        color: Primitive color
        points: Box centers (CUBE_LIST) or segment end points (LINE_LIST)
        text: Label contents (TEXT_VIEW_FACING only)
    """
    ns: str
    id: int
    type: MarkerType
    action: MarkerAction = MarkerAction.ADD
    frame_id: str = "map"
    stamp: float = 0.0
    lifetime: float = 0.0
    position: np.ndarray = field(default_factory=lambda: np.zeros(3))
    scale: np.ndarray = field(default_factory=lambda: np.ones(3))
    color: ColorRGBA = WHITE
    points: List[np.ndarray] = field(default_factory=list)
    text: str = ""

    @property
    def is_tombstone(self) -> bool:
        return self.action == MarkerAction.DELETE and not self.points

    def add_point(self, point: Sequence[float], z_offset: float = 0.0):
        p = np.asarray(point, dtype=float).copy()
        p[2] += z_offset
        self.points.append(p)

    def derive(self, **changes) -> "Marker":
        """Copy this marker with some fields changed; arrays are not shared."""
        derived = replace(self, **changes)
        if 'position' not in changes:
            derived.position = self.position.copy()
        if 'scale' not in changes:
            derived.scale = self.scale.copy()
        if 'points' not in changes:
            derived.points = [p.copy() for p in self.points]
        return derived

    def to_dict(self) -> Dict[str, Any]:
        """Plain dict in visualization_msgs/Marker field layout."""
        d = {
            'header': {'frame_id': self.frame_id, 'stamp': self.stamp},
            'ns': self.ns,
            'id': self.id,
            'type': int(self.type),
            'action': int(self.action),
            'pose': {
                'position': _point_dict(self.position),
                'orientation': {'x': 0, 'y': 0, 'z': 0, 'w': 1}
            },
            'scale': _point_dict(self.scale),
            'color': self.color.to_dict(),
            'points': [_point_dict(p) for p in self.points],
            'lifetime': self.lifetime,
        }
        if self.type == MarkerType.TEXT_VIEW_FACING:
            d['text'] = self.text
        return d


def markers_to_dicts(markers: Sequence[Marker]) -> List[Dict[str, Any]]:
    """Serialize a marker list in order."""
    return [m.to_dict() for m in markers]


def find_marker(markers: Sequence[Marker], ns: str,
                marker_id: Optional[int] = None) -> Optional[Marker]:
    """First marker in ``ns`` (and with ``marker_id`` if given), or None."""
    for m in markers:
        if m.ns == ns and (marker_id is None or m.id == marker_id):
            return m
    return None
