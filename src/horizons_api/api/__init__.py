"""
horizons_api.api

HTTP layer: app factory, dependencies, error rendering and routers.
"""

# Package marker.
