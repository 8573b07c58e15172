"""MOT Debugger exception hierarchy.

Every error raised by the library derives from :class:`TrackerDebugError`, so the
owning pipeline can isolate debug-visualization failures with a single except
clause (see :meth:`mot_debugger.debugger.TrackerObjectDebugger.run_cycle`).

License: AGPL-3.0-or-later
"""


class TrackerDebugError(Exception):
    """Base class for all debugger errors."""


class IdentityError(TrackerDebugError, ValueError):
    """Identity value cannot be converted to a 128-bit UUID."""


class ChannelConfigError(TrackerDebugError, ValueError):
    """Input channel configuration is malformed."""


class UnknownChannelError(TrackerDebugError, IndexError):
    """Detection batch refers to a channel that is not configured."""


class AssociationIndexError(TrackerDebugError, IndexError):
    """Assignment map points outside the tracker or detection sequence."""


class ExistenceVectorError(TrackerDebugError, ValueError):
    """Existence probability vector length differs from the channel count."""


class TrackerInputError(TrackerDebugError, ValueError):
    """Tracker or detection data has the wrong shape or a non-numeric value."""
