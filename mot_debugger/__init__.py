"""MOT Debugger: per-cycle association visualizer for multi-object trackers.

Shows, for every tracked object, its position, which detections of which input
channel it was associated with this cycle, and its per-channel existence
probability, as a list of RViz-style markers.

Quick Start::

    from mot_debugger import DetectionBatch, make_debugger
    debugger = make_debugger(["Lit", "Rad"], frame_id="map")
    debugger.collect(t, trackers, DetectionBatch(lidar_xyz, 0), lidar_assignment)
    debugger.collect(t, trackers, DetectionBatch(radar_xyz, 1), radar_assignment)
    debugger.process()
    markers = debugger.get_markers()
"""

__version__ = "1.0.0"
__license__ = "AGPL-3.0-or-later"

# ---------------------------------------------------------------------------
# Debugger - collect / group / draw
# ---------------------------------------------------------------------------
from .debugger import (
    TrackerObjectDebugger,
    TrackerSnapshot,
    DetectionBatch,
    ObservationRecord,
    group_by_identity,
    format_existence_text,
    make_debugger,
)

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------
from .config import (
    InputChannel,
    DebuggerConfig,
    load_debugger_config,
)

# ---------------------------------------------------------------------------
# Markers
# ---------------------------------------------------------------------------
from .markers import (
    Marker,
    MarkerType,
    MarkerAction,
    ColorRGBA,
    CHANNEL_PALETTE,
    channel_color,
    markers_to_dicts,
    find_marker,
)

# ---------------------------------------------------------------------------
# Identity codec
# ---------------------------------------------------------------------------
from .identity import (
    identity_from_bytes,
    parse_identity,
    coerce_identity,
    to_display_string,
    to_display_key,
)

# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------
from .errors import (
    TrackerDebugError,
    IdentityError,
    ChannelConfigError,
    UnknownChannelError,
    AssociationIndexError,
    ExistenceVectorError,
    TrackerInputError,
)

__all__ = [
    "__version__",
    # Debugger
    "TrackerObjectDebugger", "TrackerSnapshot", "DetectionBatch", "ObservationRecord",
    "group_by_identity", "format_existence_text", "make_debugger",
    # Config
    "InputChannel", "DebuggerConfig", "load_debugger_config",
    # Markers
    "Marker", "MarkerType", "MarkerAction", "ColorRGBA", "CHANNEL_PALETTE",
    "channel_color", "markers_to_dicts", "find_marker",
    # Identity
    "identity_from_bytes", "parse_identity", "coerce_identity",
    "to_display_string", "to_display_key",
    # Errors
    "TrackerDebugError", "IdentityError", "ChannelConfigError",
    "UnknownChannelError", "AssociationIndexError", "ExistenceVectorError",
    "TrackerInputError",
]
