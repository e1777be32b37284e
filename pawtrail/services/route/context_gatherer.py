"""
Context gathering - resolve start/end coordinates, fetch weather, size the search area
"""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pawtrail.config import settings
from pawtrail.errors import ResolutionError
from pawtrail.models.request import (
    LatLng,
    Location,
    PetConstraint,
    RoutePlanRequest,
    RouteTarget,
)
from pawtrail.models.response import WeatherContext
from pawtrail.services.collaborator import Deadline, call_collaborator
from pawtrail.services.map.map_service import MapService
from pawtrail.services.weather.weather_service import (
    DefaultWeatherService,
    WeatherService,
)

logger = logging.getLogger(__name__)

WALK_RADIUS_M_PER_MIN = 40  # out-and-back: half of an ~80 m/min pace
DEFAULT_RADIUS_M = 1000
MIN_RADIUS_M = 500
MAX_RADIUS_M = 3000


@dataclass
class PlanningContext:
    start: Tuple[float, float]
    end: Tuple[float, float]
    weather: WeatherContext
    search_radius: float


class ContextGatherer:
    def __init__(
        self,
        map_service: MapService,
        weather_service: WeatherService,
        *,
        fallback_weather: Optional[WeatherService] = None,
        timeout: Optional[float] = None,
        geocode_retries: Optional[int] = None,
    ):
        self.map_service = map_service
        self.weather_service = weather_service
        self.fallback_weather = fallback_weather or DefaultWeatherService()
        self.timeout = timeout if timeout is not None else settings.collaborator_timeout_s
        self.geocode_retries = (
            geocode_retries if geocode_retries is not None else settings.geocode_retries
        )

    async def gather(
        self,
        request: RoutePlanRequest,
        constraint: PetConstraint,
        deadline: Optional[Deadline] = None,
    ) -> PlanningContext:
        start = await self.resolve_coordinates(request.start, deadline)
        if request.end_policy == "point" and request.end is not None:
            end = await self.resolve_coordinates(request.end, deadline)
        else:
            end = start

        weather = await self.get_weather_context(start, request.time.start_iso, deadline)
        search_radius = self.calculate_search_radius(request.target, constraint)

        return PlanningContext(
            start=start, end=end, weather=weather, search_radius=search_radius
        )

    async def resolve_coordinates(
        self, location: Location, deadline: Optional[Deadline] = None
    ) -> Tuple[float, float]:
        if isinstance(location, LatLng):
            return location.as_tuple()

        place_id = location.place_id
        attempts = 1 + max(self.geocode_retries, 0)
        result = None
        for attempt in range(1, attempts + 1):
            result = await call_collaborator(
                "geocoding",
                lambda: self.map_service.geocode(place_id),
                timeout=self._timeout(deadline),
            )
            if result.is_ok:
                return result.value
            logger.info("Geocoding %s failed (attempt %d/%d)", place_id, attempt, attempts)

        raise ResolutionError(f"Could not resolve place {place_id}: {result.error}")

    async def get_weather_context(
        self,
        coords: Tuple[float, float],
        time_iso: str,
        deadline: Optional[Deadline] = None,
    ) -> WeatherContext:
        result = await call_collaborator(
            "weather",
            lambda: self.weather_service.get_weather(coords, time_iso),
            timeout=self._timeout(deadline),
            fallback=lambda: self.fallback_weather.get_weather(coords, time_iso),
        )
        return result.value

    def _timeout(self, deadline: Optional[Deadline]) -> float:
        # A single call never outlives the request budget
        if deadline is None or deadline.remaining() is None:
            return self.timeout
        return min(self.timeout, deadline.remaining())

    @staticmethod
    def calculate_search_radius(target: RouteTarget, constraint: PetConstraint) -> float:
        if target.distance_m:
            radius = target.distance_m / 2
        elif target.duration_min:
            radius = target.duration_min * WALK_RADIUS_M_PER_MIN
        else:
            radius = DEFAULT_RADIUS_M

        # Smaller search area for lower energy pets, larger for high energy
        if constraint.energy == "low" or constraint.mobility == "limited":
            radius *= 0.7
        if constraint.energy == "high":
            radius *= 1.3

        return float(min(max(radius, MIN_RADIUS_M), MAX_RADIUS_M))
