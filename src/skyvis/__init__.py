"""skyvis public API.

Keep this surface small: users should mostly interact with functions re-exported here.
"""

from .api import (
    Marker,
    Target,
    VisibilityRow,
    constellation_segments,
    frame_for,
    moon_separation,
    moon_state,
    object_visibility,
    session_moon,
    sky_markers,
    visibility_table,
)
from .core.config import EarthOrientation, Settings
from .core.errors import ConfigError, SkyvisError, UnsupportedDateError
from .core.types import (
    UNAVAILABLE,
    UNKNOWN_POSITION,
    AlwaysAbove,
    Crossing,
    EquatorialPosition,
    EventTime,
    GeodeticLocation,
    HorizontalPosition,
    LunarState,
    NeverRises,
    ObjectVisibility,
    TimeInstant,
    Unavailable,
)

__all__ = [
    "Marker",
    "Target",
    "VisibilityRow",
    "constellation_segments",
    "frame_for",
    "moon_separation",
    "moon_state",
    "object_visibility",
    "session_moon",
    "sky_markers",
    "visibility_table",
    "EarthOrientation",
    "Settings",
    "ConfigError",
    "SkyvisError",
    "UnsupportedDateError",
    "UNAVAILABLE",
    "UNKNOWN_POSITION",
    "AlwaysAbove",
    "Crossing",
    "EquatorialPosition",
    "EventTime",
    "GeodeticLocation",
    "HorizontalPosition",
    "LunarState",
    "NeverRises",
    "ObjectVisibility",
    "TimeInstant",
    "Unavailable",
]
