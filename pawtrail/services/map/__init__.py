from .map_service import MapService
from .google_map_service import GoogleMapService

__all__ = ["MapService", "GoogleMapService"]
