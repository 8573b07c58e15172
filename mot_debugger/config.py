"""MOT Debugger configuration.

Static configuration for the tracker object debugger:

    InputChannel     - one detection source (short display name + index)
    DebuggerConfig   - frame id, marker lifetime, drawing offsets, channels

Configuration can be built in code or loaded from a YAML parameter file laid out
like a ROS 2 parameter file::

    /**:
      ros__parameters:
        input_channels:
          detector:
            short_name: "Lit"
            long_name: "lidar detector"
          radar:
            short_name: "Rad"
        debugger:
          frame_id: "map"
          marker_lifetime: 0.15

The ``/**: ros__parameters:`` wrapper is optional. Channels are indexed in file
order unless every entry carries an explicit ``index``.

License: AGPL-3.0-or-later
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import yaml

from .errors import ChannelConfigError


# =============================================================================
# DATA STRUCTURES
# =============================================================================

@dataclass(frozen=True)
class InputChannel:
    """One input channel (sensor or detection algorithm).

    Attributes:
        short_name: Compact name used in label text and marker namespaces
        index: Position of this channel in the existence vector
        long_name: Human-readable name
        input_topic: Where detections for this channel come from
    """
    short_name: str
    index: int
    long_name: str = ""
    input_topic: str = ""


@dataclass
class DebuggerConfig:
    """Drawing parameters and channel list for TrackerObjectDebugger.

    Attributes:
        channels: Input channels, ``channels[i].index == i``
        frame_id: Coordinate frame stamped on every marker
        marker_lifetime: Seconds before a marker expires if not refreshed
        text_height_offset: Label height above the tracker position (m)
        marker_height_offset: Track box height above the tracker position (m)
        assign_height_offset: Extra height of detection boxes over track boxes (m)
        existence_threshold: Channel probabilities below this are not printed
    """
    channels: List[InputChannel] = field(default_factory=list)
    frame_id: str = "map"
    marker_lifetime: float = 0.15
    text_height_offset: float = 2.5
    marker_height_offset: float = 1.0
    assign_height_offset: float = 0.6
    existence_threshold: float = 0.00101

    def __post_init__(self):
        self.channels = list(self.channels)
        validate_channels(self.channels)

    @property
    def num_channels(self) -> int:
        return len(self.channels)

    @property
    def channel_names(self) -> Tuple[str, ...]:
        return tuple(ch.short_name for ch in self.channels)

    @classmethod
    def from_channel_names(cls, names: Sequence[str], **kwargs) -> "DebuggerConfig":
        """Build a config whose channels are indexed in the given order."""
        channels = [InputChannel(short_name=name, index=i) for i, name in enumerate(names)]
        return cls(channels=channels, **kwargs)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DebuggerConfig":
        """Parse the mapping produced by ``yaml.safe_load`` on a parameter file."""
        data = _unwrap_ros_parameters(data or {})
        channels = _parse_channels(data.get("input_channels") or {})

        options = data.get("debugger") or {}
        if not isinstance(options, dict):
            raise ChannelConfigError("'debugger' section must be a mapping")
        known = {"frame_id", "marker_lifetime", "text_height_offset",
                 "marker_height_offset", "assign_height_offset", "existence_threshold"}
        unknown = set(options) - known
        if unknown:
            raise ChannelConfigError(f"unknown debugger options: {sorted(unknown)}")

        kwargs = {}
        for key, value in options.items():
            if key == "frame_id":
                kwargs[key] = str(value)
            else:
                kwargs[key] = _as_number(float, value, f"debugger.{key}")
        return cls(channels=channels, **kwargs)


# =============================================================================
# PARSING / VALIDATION
# =============================================================================

def validate_channels(channels: Sequence[InputChannel]) -> None:
    """Check that channel indices are exactly 0..N-1 in order and names unique."""
    names = set()
    for position, channel in enumerate(channels):
        if not channel.short_name:
            raise ChannelConfigError(f"channel at position {position} has no short_name")
        if channel.short_name in names:
            raise ChannelConfigError(f"duplicate channel short_name {channel.short_name!r}")
        names.add(channel.short_name)
        if channel.index != position:
            raise ChannelConfigError(
                f"channel {channel.short_name!r} has index {channel.index}, "
                f"expected {position}")


def _as_number(kind, value, name):
    try:
        return kind(value)
    except (TypeError, ValueError) as exc:
        raise ChannelConfigError(f"{name} must be a number, got {value!r}") from exc


def _unwrap_ros_parameters(data: Dict[str, Any]) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ChannelConfigError("configuration root must be a mapping")
    for value in data.values():
        if isinstance(value, dict) and "ros__parameters" in value:
            return value["ros__parameters"] or {}
    return data.get("ros__parameters", data) or {}


def _parse_channels(section: Dict[str, Any]) -> List[InputChannel]:
    if not isinstance(section, dict):
        raise ChannelConfigError("'input_channels' must be a mapping of channel entries")

    entries = []
    for position, (key, entry) in enumerate(section.items()):
        if not isinstance(entry, dict):
            raise ChannelConfigError(f"channel {key!r} must be a mapping")
        short_name = entry.get("short_name")
        if not short_name:
            raise ChannelConfigError(f"channel {key!r} has no short_name")
        entries.append(InputChannel(
            short_name=str(short_name),
            index=_as_number(int, entry.get("index", position), f"{key}.index"),
            long_name=str(entry.get("long_name", key)),
            input_topic=str(entry.get("topic", entry.get("input_topic", ""))),
        ))

    entries.sort(key=lambda ch: ch.index)
    validate_channels(entries)
    return entries


def load_debugger_config(path: str) -> DebuggerConfig:
    """Load a DebuggerConfig from a YAML parameter file."""
    with open(path, 'r') as f:
        data = yaml.safe_load(f)
    return DebuggerConfig.from_dict(data)
