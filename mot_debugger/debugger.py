"""MOT Debugger: tracker/detection association visualizer.

Per processing cycle the owning tracker pipeline drives this sequence::

    debugger.reset()
    for batch, assignment in channel_inputs:        # once per input channel
        debugger.collect(t, trackers, batch, assignment)
    debugger.process()                               # group by identity
    markers = debugger.get_markers()                 # any number of times

``collect`` records one ObservationRecord per live tracker for the channel,
``process`` sorts all records by tracker UUID and groups them, and ``draw``
turns each group into markers:

    detect_boxes_<ch>       CUBE_LIST  associated detection positions
    association_lines_<ch>  LINE_LIST  tracker -> detection segments
    existence_probability   TEXT       "total:NN" / per-channel % / short uuid
    track_boxes             CUBE_LIST  tracker positions

Per-channel markers that end up empty are emitted with DELETE so the viewer
clears them. Groups with no association this cycle are drawn in gray.

License: AGPL-3.0-or-later
"""

import logging
import uuid
from dataclasses import dataclass
from itertools import groupby
from operator import attrgetter
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config import DebuggerConfig
from .errors import (
    AssociationIndexError, ExistenceVectorError, TrackerDebugError, TrackerInputError,
    UnknownChannelError,
)
from .identity import IdentityLike, coerce_identity, to_display_key, to_display_string
from .markers import (
    DIMMED_TEXT_COLOR, DIMMED_TRACK_BOX_COLOR, TRACK_BOX_COLOR, WHITE,
    Marker, MarkerAction, MarkerType, channel_color,
)

logger = logging.getLogger(__name__)

LABEL_ID_LENGTH = 6


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass
class TrackerSnapshot:
    """Minimal tracker: fixed position plus existence probabilities.

    Any object with the same four members can be passed to ``collect``.
    """
    uuid: IdentityLike
    position: np.ndarray
    existence_probability_vector: Sequence[float] = ()
    total_existence_probability: float = 0.0

    def get_position(self, time: float) -> np.ndarray:
        return np.asarray(self.position, dtype=float)


@dataclass
class DetectionBatch:
    """Detections of one input channel for one cycle.

    Attributes:
        positions: (N, 3) detection positions
        channel_index: Index of the channel that produced them
    """
    positions: np.ndarray
    channel_index: int

    def __post_init__(self):
        try:
            positions = np.asarray(self.positions, dtype=float)
        except (TypeError, ValueError) as exc:
            raise TrackerInputError(f"detection positions are not numeric: {exc}") from exc
        if positions.size == 0:
            positions = positions.reshape(0, 3)
        elif positions.ndim != 2 or positions.shape[1] != 3:
            raise TrackerInputError(
                f"detection positions must have shape (N, 3), got {positions.shape}")
        self.positions = positions

    def __len__(self) -> int:
        return len(self.positions)


@dataclass(frozen=True, eq=False)
class ObservationRecord:
    """One tracker as seen against one channel in one cycle."""
    identity: uuid.UUID
    identity_display: str
    timestamp: float
    channel_id: int
    tracker_position: np.ndarray
    detection_position: np.ndarray
    is_associated: bool
    existence_vector: Tuple[float, ...]
    total_existence_probability: float


# =============================================================================
# GROUPING / TEXT
# =============================================================================

def group_by_identity(records: Iterable[ObservationRecord]) -> List[List[ObservationRecord]]:
    """Stable-sort records by identity and split them into per-identity groups.

    Sorting uses the full 128-bit UUID value, so records of one entity from
    different channels end up together regardless of collection order.
    """
    ordered = sorted(records, key=attrgetter('identity'))
    return [list(group) for _, group in groupby(ordered, key=attrgetter('identity'))]


def _percent(p: float) -> int:
    return int(p * 100)


def format_existence_text(record: ObservationRecord, channel_names: Sequence[str],
                          threshold: float = 0.00101) -> str:
    """Label text: total %, per-channel % above threshold, short identity.

    Example (channels "Lit", "Rad")::

        total:87
        Lit95:Rad40
        3fa85f
    """
    lines = [f"total:{_percent(record.total_existence_probability)}"]
    entries = [
        f"{name}{_percent(p)}"
        for name, p in zip(channel_names, record.existence_vector)
        if p >= threshold
    ]
    if entries:
        lines.append(":".join(entries))
    lines.append(record.identity_display[:LABEL_ID_LENGTH])
    return "\n".join(lines)


# =============================================================================
# DEBUGGER
# =============================================================================

class TrackerObjectDebugger:
    """Collects tracker/detection association facts and draws them as markers.

    Single-threaded: one instance per tracker pipeline. Rendering is a pure
    read of the cached groups and can be repeated without side effects.

    Example::

        config = DebuggerConfig.from_channel_names(["Lit", "Rad"], frame_id="map")
        debugger = TrackerObjectDebugger(config)
        debugger.collect(t, trackers, DetectionBatch(lidar_xyz, 0), {0: 2, 1: 0})
        debugger.collect(t, trackers, DetectionBatch(radar_xyz, 1), {1: 1})
        debugger.process()
        publish(markers_to_dicts(debugger.get_markers()))
    """

    def __init__(self, config: DebuggerConfig):
        self.config = config
        self._records: List[ObservationRecord] = []
        self._groups: List[List[ObservationRecord]] = []
        self._initialized = False
        self.message_time = 0.0

    def __repr__(self):
        return (f"TrackerObjectDebugger(channels={list(self.config.channel_names)}, "
                f"records={len(self._records)}, groups={len(self._groups)})")

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def records(self) -> Tuple[ObservationRecord, ...]:
        return tuple(self._records)

    @property
    def groups(self) -> Tuple[Tuple[ObservationRecord, ...], ...]:
        return tuple(tuple(g) for g in self._groups)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def reset(self):
        """Drop all records and groups; output stays empty until next collect."""
        self._records.clear()
        self._groups = []
        self._initialized = False

    # ------------------------------------------------------------------
    # Collection
    # ------------------------------------------------------------------
    def collect(self, cycle_time: float, trackers: Sequence,
                detections: DetectionBatch,
                direct_assignment: Mapping[int, int]) -> List[ObservationRecord]:
        """Record every tracker's association state against one channel.

        Args:
            cycle_time: Processing cycle time (s)
            trackers: Live trackers, see TrackerSnapshot for the interface
            detections: This channel's detections
            direct_assignment: tracker index -> detection index

        Returns:
            The records appended by this call, in tracker order.

        Raises:
            UnknownChannelError: detections.channel_index not configured
            AssociationIndexError: assignment index out of range
            ExistenceVectorError: existence vector length != channel count
            TrackerInputError: non-numeric or wrongly shaped tracker data
        """
        num_channels = self.config.num_channels
        channel_id = int(detections.channel_index)
        if not 0 <= channel_id < num_channels:
            raise UnknownChannelError(
                f"channel index {channel_id} not in configured range [0, {num_channels})")

        num_trackers = len(trackers)
        num_detections = len(detections)
        for tracker_idx, detection_idx in direct_assignment.items():
            if not 0 <= tracker_idx < num_trackers:
                raise AssociationIndexError(
                    f"tracker index {tracker_idx} out of range ({num_trackers} trackers)")
            if not 0 <= detection_idx < num_detections:
                raise AssociationIndexError(
                    f"tracker {tracker_idx} assigned to detection {detection_idx}, "
                    f"but channel {channel_id} has {num_detections} detections")

        new_records = []
        for tracker_idx, tracker in enumerate(trackers):
            try:
                existence = tuple(float(p) for p in tracker.existence_probability_vector)
                total = float(tracker.total_existence_probability)
                tracker_point = np.asarray(tracker.get_position(cycle_time), dtype=float)
            except (TypeError, ValueError) as exc:
                raise TrackerInputError(f"tracker {tracker_idx}: {exc}") from exc
            if tracker_point.shape != (3,):
                raise TrackerInputError(
                    f"tracker {tracker_idx} position must have shape (3,), "
                    f"got {tracker_point.shape}")
            if len(existence) != num_channels:
                raise ExistenceVectorError(
                    f"tracker {tracker_idx} has {len(existence)} existence "
                    f"probabilities, expected {num_channels}")

            identity = coerce_identity(tracker.uuid)

            detection_idx = direct_assignment.get(tracker_idx)
            if detection_idx is not None:
                detection_point = detections.positions[detection_idx].copy()
            else:
                # unassociated: zero-length association
                detection_point = tracker_point.copy()

            new_records.append(ObservationRecord(
                identity=identity,
                identity_display=to_display_string(identity),
                timestamp=cycle_time,
                channel_id=channel_id,
                tracker_position=tracker_point,
                detection_position=detection_point,
                is_associated=detection_idx is not None,
                existence_vector=existence,
                total_existence_probability=total,
            ))

        self._records.extend(new_records)
        self._initialized = True
        self.message_time = cycle_time
        return new_records

    # ------------------------------------------------------------------
    # Grouping
    # ------------------------------------------------------------------
    def process(self) -> List[List[ObservationRecord]]:
        """Rebuild the identity groups from everything collected so far."""
        if not self._initialized or not self._records:
            return []
        self._groups = group_by_identity(self._records)
        logger.debug("t=%.3f: %d records -> %d groups",
                     self.message_time, len(self._records), len(self._groups))
        return [list(g) for g in self._groups]

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def get_markers(self) -> List[Marker]:
        """Markers for the current groups; empty before the first collect."""
        if not self._initialized:
            return []
        return self.draw(self._groups)

    def draw(self, groups: Iterable[Sequence[ObservationRecord]]) -> List[Marker]:
        """Build the marker list for the given groups."""
        markers: List[Marker] = []
        for group in groups:
            if not group:
                continue
            markers.extend(self._draw_group(group))
        return markers

    def _draw_group(self, group: Sequence[ObservationRecord]) -> List[Marker]:
        cfg = self.config
        front = group[0]

        base = Marker(
            ns="",
            id=to_display_key(front.identity),
            type=MarkerType.CUBE,
            frame_id=cfg.frame_id,
            stamp=front.timestamp,
            lifetime=cfg.marker_lifetime,
            color=WHITE,
        )

        text_marker = base.derive(
            ns="existence_probability",
            type=MarkerType.TEXT_VIEW_FACING,
            position=front.tracker_position + np.array([0.0, 0.0, cfg.text_height_offset]),
            scale=np.array([0.0, 0.0, 0.5]),
            text=format_existence_text(front, cfg.channel_names, cfg.existence_threshold),
        )

        track_boxes = base.derive(
            ns="track_boxes",
            type=MarkerType.CUBE_LIST,
            scale=np.array([0.4, 0.4, 0.4]),
            color=TRACK_BOX_COLOR,
        )

        detect_boxes = []
        detect_lines = []
        for channel in cfg.channels:
            color = channel_color(channel.index)
            detect_boxes.append(base.derive(
                ns=f"detect_boxes_{channel.short_name}",
                type=MarkerType.CUBE_LIST,
                scale=np.array([0.2, 0.2, 0.2]),
                color=color,
            ))
            detect_lines.append(base.derive(
                ns=f"association_lines_{channel.short_name}",
                type=MarkerType.LINE_LIST,
                scale=np.array([0.15, 0.0, 0.0]),
                color=color,
            ))

        track_z = cfg.marker_height_offset
        detection_z = cfg.marker_height_offset + cfg.assign_height_offset
        is_associated = False
        for record in group:
            track_boxes.add_point(record.tracker_position, track_z)
            if not record.is_associated:
                continue
            is_associated = True

            detect_boxes[record.channel_id].add_point(record.detection_position, detection_z)
            lines = detect_lines[record.channel_id]
            lines.add_point(record.tracker_position, track_z)
            lines.add_point(record.detection_position, detection_z)

        for m in detect_boxes + detect_lines:
            if not m.points:
                m.action = MarkerAction.DELETE

        if not is_associated:
            track_boxes.color = DIMMED_TRACK_BOX_COLOR
            text_marker.color = DIMMED_TEXT_COLOR

        return detect_boxes + detect_lines + [text_marker, track_boxes]

    # ------------------------------------------------------------------
    # Whole cycle
    # ------------------------------------------------------------------
    def run_cycle(self, cycle_time: float, trackers: Sequence,
                  channel_inputs: Iterable[Tuple[DetectionBatch, Mapping[int, int]]]
                  ) -> List[Marker]:
        """reset -> collect per channel -> process -> get_markers.

        Debugger errors are logged and swallowed here so a bad input can
        only blank the visualization, never interrupt the tracker.
        """
        self.reset()
        try:
            for detections, assignment in channel_inputs:
                self.collect(cycle_time, trackers, detections, assignment)
            self.process()
        except TrackerDebugError as exc:
            logger.warning("tracker debug cycle at t=%.3f dropped: %s", cycle_time, exc)
            self.reset()
            return []
        return self.get_markers()


def make_debugger(channel_names: Sequence[str], frame_id: Optional[str] = None,
                  **kwargs) -> TrackerObjectDebugger:
    """Shortcut: debugger whose channels are indexed in the given order."""
    if frame_id is not None:
        kwargs['frame_id'] = frame_id
    return TrackerObjectDebugger(DebuggerConfig.from_channel_names(channel_names, **kwargs))
