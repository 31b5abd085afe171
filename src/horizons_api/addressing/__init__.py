"""
horizons_api.addressing

Resource addressing package.

Responsibilities:
- Id-or-slug path parameter resolution.
- Unique slug generation.
"""

# Package marker.
