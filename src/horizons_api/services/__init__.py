"""
horizons_api.services

Service layer.

Responsibilities:
- Account flows that span repositories and the token service.
"""

# Package marker.
