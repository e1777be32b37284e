import logging
from typing import Dict, List, Optional, Sequence, Tuple
from urllib.parse import urlencode

import httpx

from pawtrail.config import settings
from pawtrail.config.place_types import UNFILTERED_SEARCH_TYPES, filter_supported_types
from pawtrail.errors import CollaboratorError
from pawtrail.services.map.api_counter import APICounter
from pawtrail.services.map.geo import haversine_m
from pawtrail.services.map.map_service import MapService

logger = logging.getLogger(__name__)


class GoogleMapService(MapService):
    """Google Maps Platform implementation: Geocoding, Places (New), Routes, Street View"""

    geocode_url = "https://maps.googleapis.com/maps/api/geocode/json"
    nearby_search_url = "https://places.googleapis.com/v1/places:searchNearby"
    routes_url = "https://routes.googleapis.com/directions/v2:computeRoutes"
    street_view_base_url = "https://maps.googleapis.com/maps/api/streetview"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        counter: Optional[APICounter] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        self.api_key = api_key if api_key is not None else settings.google_maps_api_key
        self.counter = counter or APICounter(settings.max_api_calls_per_day)
        self._transport = transport
        self._timeout = timeout or settings.collaborator_timeout_s

        if not self.api_key:
            raise ValueError("Google Maps API Key is required")

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=self._transport, timeout=self._timeout)

    async def geocode(self, place_id: str) -> Tuple[float, float]:
        """Resolve a Google place ID to coordinates using the Geocoding API"""
        self.counter.check("geocoding")

        try:
            async with self._client() as client:
                response = await client.get(
                    self.geocode_url,
                    params={"place_id": place_id, "key": self.api_key},
                )
                response.raise_for_status()
                self.counter.record_call()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise self._status_error("Geocoding", e) from e
        except httpx.HTTPError as e:
            raise CollaboratorError(
                f"Failed to geocode {place_id}: {e}", collaborator="geocoding"
            ) from e

        status = data.get("status", "UNKNOWN_ERROR")
        results = data.get("results") or []
        if status != "OK" or not results:
            raise CollaboratorError(
                f"Geocoding returned {status} for {place_id}", collaborator="geocoding"
            )

        location = results[0].get("geometry", {}).get("location", {})
        return (float(location["lat"]), float(location["lng"]))

    async def find_nearby_places(
        self, center: Tuple[float, float], radius_m: float, place_type: str
    ) -> List[Dict]:
        """Search nearby places using Google Places API (New) v1"""
        self.counter.check("places")

        center_lat, center_lng = center
        body = {
            "maxResultCount": 20,
            "locationRestriction": {
                "circle": {
                    "center": {"latitude": center_lat, "longitude": center_lng},
                    "radius": min(float(radius_m), 50000.0),
                }
            },
        }

        # Add type filtering unless the category is a catch-all
        if place_type not in UNFILTERED_SEARCH_TYPES:
            body["includedTypes"] = [place_type]

        try:
            async with self._client() as client:
                response = await client.post(
                    self.nearby_search_url,
                    headers={
                        "Content-Type": "application/json",
                        "X-Goog-Api-Key": self.api_key,
                        "X-Goog-FieldMask": (
                            "places.displayName,places.location,"
                            "places.rating,places.id,places.types"
                        ),
                    },
                    json=body,
                )
                response.raise_for_status()
                self.counter.record_call()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise self._status_error("Places", e) from e
        except httpx.HTTPError as e:
            raise CollaboratorError(
                f"Failed to fetch places: {e}", collaborator="places"
            ) from e

        places = data.get("places", [])
        return self._convert_places_to_standard_format(places, center, place_type)

    async def get_directions(
        self,
        points: Sequence[Tuple[float, float]],
        optimize_waypoints: bool = True,
    ) -> Dict:
        """Get a walking route through points using the Google Routes API"""
        if len(points) < 2:
            raise ValueError("Directions need at least an origin and a destination")

        self.counter.check("directions")
        logger.debug("Requesting walking route through %d points", len(points))
        request_body = self._build_routes_request_body(points, optimize_waypoints)

        try:
            async with self._client() as client:
                response = await client.post(
                    self.routes_url,
                    headers={
                        "Content-Type": "application/json",
                        "X-Goog-Api-Key": self.api_key,
                        "X-Goog-FieldMask": (
                            "routes.duration,routes.distanceMeters,"
                            "routes.polyline.encodedPolyline,routes.viewport,"
                            "routes.legs.distanceMeters,routes.legs.duration,"
                            "routes.optimizedIntermediateWaypointIndex"
                        ),
                    },
                    json=request_body,
                )
                response.raise_for_status()
                self.counter.record_call()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise self._status_error("Routes", e) from e
        except httpx.HTTPError as e:
            raise CollaboratorError(
                f"Failed to get directions: {e}", collaborator="directions"
            ) from e

        return self._convert_routes_response(data)

    def street_view_url(self, location: Tuple[float, float], heading: float = 0) -> str:
        params = {
            "size": "640x640",
            "location": f"{location[0]},{location[1]}",
            "heading": round(heading, 1),
            "pitch": 0,
            "key": self.api_key,
        }
        return f"{self.street_view_base_url}?{urlencode(params)}"

    @staticmethod
    def _waypoint(point: Tuple[float, float]) -> Dict:
        return {"location": {"latLng": {"latitude": point[0], "longitude": point[1]}}}

    def _build_routes_request_body(
        self, points: Sequence[Tuple[float, float]], optimize_waypoints: bool
    ) -> Dict:
        """Build request body for Google Routes API from ordered coordinates"""
        intermediates = list(points[1:-1])
        request_body = {
            "origin": self._waypoint(points[0]),
            "destination": self._waypoint(points[-1]),
            "travelMode": "WALK",  # Fixed to walking mode
        }

        if intermediates:
            request_body["intermediates"] = [self._waypoint(p) for p in intermediates]
            # Reordering only makes sense with two or more stops
            request_body["optimizeWaypointOrder"] = (
                optimize_waypoints and len(intermediates) > 1
            )

        return request_body

    @staticmethod
    def _parse_duration(value) -> int:
        """Routes API durations look like '3848s'"""
        if isinstance(value, (int, float)):
            return int(value)
        if isinstance(value, str) and value.endswith("s"):
            try:
                return int(float(value[:-1]))
            except ValueError:
                return 0
        return 0

    def _convert_routes_response(self, data: Dict) -> Dict:
        """Convert Routes API response to standard format"""
        if not data.get("routes"):
            return {}

        route = data["routes"][0]
        duration = route.get("duration", "0s")

        return {
            "overview_polyline": {
                "points": route.get("polyline", {}).get("encodedPolyline", "")
            },
            "duration": duration,
            "duration_sec": self._parse_duration(duration),
            "distance": int(route.get("distanceMeters", 0)),
            "legs": [
                {
                    "distance": int(leg.get("distanceMeters", 0)),
                    "duration_sec": self._parse_duration(leg.get("duration", "0s")),
                }
                for leg in route.get("legs", [])
            ],
            "optimized_order": list(route.get("optimizedIntermediateWaypointIndex", [])),
            "viewport": route.get("viewport", {}),
        }

    def _convert_places_to_standard_format(
        self, places: List[Dict], center: Tuple[float, float], search_category: str
    ) -> List[Dict]:
        """Convert Google Places API (New) v1 response to standard format"""
        converted_places = []

        for place in places:
            name = place.get("displayName", {}).get("text", "Unknown Place")

            # Places without coordinates are kept so discovery can reject them
            location = None
            raw_location = place.get("location") or {}
            if "latitude" in raw_location and "longitude" in raw_location:
                location = {
                    "lat": raw_location["latitude"],
                    "lng": raw_location["longitude"],
                }

            distance_km = 0.0
            if location is not None:
                distance_km = (
                    haversine_m(center[0], center[1], location["lat"], location["lng"])
                    / 1000
                )

            types = filter_supported_types(place.get("types", [])) or [search_category]

            converted_places.append(
                {
                    "place_id": place.get("id", ""),
                    "name": name,
                    "location": location,
                    "types": types,
                    "google_types": place.get("types", []),
                    "rating": place.get("rating"),
                    "distance_km": round(distance_km, 2),
                }
            )

        return converted_places

    @staticmethod
    def _status_error(api_name: str, e: httpx.HTTPStatusError) -> CollaboratorError:
        error_detail = ""
        try:
            error_data = e.response.json()
            error_detail = f" - {error_data.get('error', {}).get('message', '')}"
        except ValueError:
            pass

        collaborator = api_name.lower()
        status = e.response.status_code
        if status == 429:
            return CollaboratorError("API quota exceeded", collaborator=collaborator)
        if status == 403:
            return CollaboratorError(
                f"API key invalid or {api_name} API not enabled",
                collaborator=collaborator,
            )
        if status == 400:
            return CollaboratorError(
                f"Bad request (400): Invalid request parameters{error_detail}",
                collaborator=collaborator,
            )
        return CollaboratorError(
            f"{api_name} API error: {status}{error_detail}", collaborator=collaborator
        )
