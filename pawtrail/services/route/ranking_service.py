"""Rank scored candidates and attach reasons, advisories, thumbnails and titles."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, Tuple

from pawtrail.config import settings
from pawtrail.config.place_types import is_dog_park, is_park
from pawtrail.models.request import PetConstraint, RoutePlanRequest
from pawtrail.models.response import Advisory, RouteCandidate, WeatherContext
from pawtrail.services.collaborator import Deadline, call_collaborator
from pawtrail.services.map.geo import bearing_deg
from pawtrail.services.map.map_service import MapService
from pawtrail.services.text.title_service import TemplateTitleService, TitleService

logger = logging.getLogger(__name__)

MAX_REASONS = 3
MAX_THUMBNAILS = 3


def _is_mild(weather: WeatherContext) -> bool:
    return 15 <= weather.temp_c <= 25


class RouteRanker:
    def __init__(
        self,
        map_service: MapService,
        title_service: Optional[TitleService] = None,
        *,
        fallback_titles: Optional[TemplateTitleService] = None,
        max_routes: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.map_service = map_service
        self.fallback_titles = fallback_titles or TemplateTitleService()
        self.title_service = title_service or self.fallback_titles
        self.max_routes = max_routes or settings.max_routes
        self.timeout = timeout if timeout is not None else settings.collaborator_timeout_s

    @staticmethod
    def rank(candidates: Sequence[RouteCandidate]) -> List[RouteCandidate]:
        """Score descending; ties go to the shorter route, then the id."""
        return sorted(
            candidates, key=lambda c: (-c.score, c.distance_meters, c.id)
        )

    async def rank_and_enhance(
        self,
        candidates: Sequence[RouteCandidate],
        request: RoutePlanRequest,
        constraint: PetConstraint,
        weather: WeatherContext,
        start: Tuple[float, float],
        deadline: Optional[Deadline] = None,
    ) -> List[RouteCandidate]:
        top = [c.model_copy(deep=True) for c in self.rank(candidates)[: self.max_routes]]

        for route in top:
            route.reasons = self.generate_reasons(route, weather, constraint)
            route.advisories = self.generate_advisories(route, weather, constraint)
            route.thumbnails = self.generate_thumbnails(route, start)

        titles = await self._generate_titles(top, request, deadline)
        for route, title in zip(top, titles):
            route.title = title

        return top

    @staticmethod
    def generate_reasons(
        route: RouteCandidate, weather: WeatherContext, constraint: PetConstraint
    ) -> List[str]:
        reasons: List[str] = []

        if route.score > 0.8:
            reasons.append("Excellent route match")
        if any(is_park(wp.types) for wp in route.waypoints):
            reasons.append("Includes scenic parks")
        if _is_mild(weather):
            reasons.append("Perfect weather conditions")
        if constraint.energy == "high" and route.distance_meters > 2000:
            reasons.append("Great for high-energy pets")
        if constraint.energy == "low" and route.distance_meters < 1500:
            reasons.append("Suitable for gentle walks")
        if not route.waypoints:
            reasons.append("Direct, efficient route")

        return reasons[:MAX_REASONS]

    @staticmethod
    def generate_advisories(
        route: RouteCandidate, weather: WeatherContext, constraint: PetConstraint
    ) -> List[Advisory]:
        advisories: List[Advisory] = []

        if weather.temp_c > 25 and constraint.heat_sensitive:
            advisories.append(
                Advisory(
                    type="warning",
                    message="High temperature - bring extra water and consider shorter route",
                )
            )
        if weather.precip_prob > 50:
            advisories.append(
                Advisory(type="info", message="Rain possible - consider bringing rain gear")
            )
        if constraint.age_years > 10:
            advisories.append(
                Advisory(type="tip", message="Senior pet - allow extra time for sniff breaks")
            )
        if any(is_dog_park(wp.types) for wp in route.waypoints):
            advisories.append(
                Advisory(
                    type="info",
                    message="Route includes dog parks - great for socialization",
                )
            )

        return advisories

    def generate_thumbnails(
        self, route: RouteCandidate, start: Tuple[float, float]
    ) -> List[str]:
        thumbnails: List[str] = []
        for waypoint in route.waypoints[:MAX_THUMBNAILS]:
            location = waypoint.location.as_tuple()
            try:
                thumbnails.append(
                    self.map_service.street_view_url(
                        location, heading=bearing_deg(start, location)
                    )
                )
            except Exception as exc:
                logger.debug("No thumbnail for %s: %s", waypoint.name, exc)
        return thumbnails

    async def _generate_titles(
        self,
        routes: List[RouteCandidate],
        request: RoutePlanRequest,
        deadline: Optional[Deadline] = None,
    ) -> List[str]:
        if not routes:
            return []
        timeout = self.timeout
        if deadline is not None:
            if deadline.expired:
                return await self.fallback_titles.generate_titles(routes, request)
            timeout = min(timeout, deadline.remaining())
        result = await call_collaborator(
            "titles",
            lambda: self.title_service.generate_titles(routes, request),
            timeout=timeout,
            fallback=lambda: self.fallback_titles.generate_titles(routes, request),
        )
        titles = list(result.value or [])
        if len(titles) < len(routes):
            titles = await self.fallback_titles.generate_titles(routes, request)
        return titles
