"""
horizons_api.auth

Authentication/authorization package.

Responsibilities:
- Session token issuing and validation.
- Password hashing.
- Guard predicates and their FastAPI dependency wrappers.
"""

# Package marker.
