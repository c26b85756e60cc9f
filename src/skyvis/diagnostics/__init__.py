"""Diagnostics package.

- altitude_curve: plot a target's altitude over a night (matplotlib)
- validate_skyfield: optional cross-check against skyfield (requires ephemeris extras + DE file)
"""

__all__ = ["altitude_curve", "validate_skyfield"]
