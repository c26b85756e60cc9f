# reference/separation.py

from __future__ import annotations

import math
from typing import Optional

from ..core.types import EquatorialPosition
from . import astro_args as aa


def separation_deg(ra1_deg: float, dec1_deg: float, ra2_deg: float, dec2_deg: float) -> float:
    """
    Great-circle distance (degrees, [0, 180]) between two equatorial positions.

    Same quantity as the spherical law of cosines
      cos D = sin d1 sin d2 + cos d1 cos d2 cos(a1 - a2)
    but with sin D taken from the Vincenty form and combined via atan2, so identical
    and antipodal inputs do not lose precision in acos.
    """
    a1, d1 = math.radians(ra1_deg), math.radians(dec1_deg)
    a2, d2 = math.radians(ra2_deg), math.radians(dec2_deg)
    da = a1 - a2

    sd1, cd1 = math.sin(d1), math.cos(d1)
    sd2, cd2 = math.sin(d2), math.cos(d2)

    cos_d = aa.clamp(sd1 * sd2 + cd1 * cd2 * math.cos(da))
    sin_d = math.hypot(cd2 * math.sin(da), cd1 * sd2 - sd1 * cd2 * math.cos(da))
    return math.degrees(math.atan2(sin_d, cos_d))


def separation(a: EquatorialPosition, b: EquatorialPosition) -> Optional[float]:
    """Angular separation in degrees, or None when either position is unknown."""
    if not (a.is_known and b.is_known):
        return None
    return separation_deg(a.ra_deg, a.dec_deg, b.ra_deg, b.dec_deg)
