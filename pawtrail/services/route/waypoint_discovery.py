"""
Waypoint discovery - search nearby places per category and score how well each suits the walk
"""
import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from pawtrail.config import settings
from pawtrail.config.place_types import (
    DEFAULT_SEARCH_CATEGORIES,
    DOG_PARK,
    PREFERENCE_CATEGORY_MAPPING,
    is_attraction,
    is_dog_park,
    is_park,
    is_quiet,
)
from pawtrail.models.request import LatLng, PetConstraint, RoutePreferences
from pawtrail.models.response import Waypoint
from pawtrail.services.collaborator import Deadline, call_collaborator
from pawtrail.services.map.map_service import MapService

logger = logging.getLogger(__name__)

MAX_WAYPOINTS = 15
MIN_RATING = 3.0
DEFAULT_RATING = 3.0


class WaypointDiscovery:
    """
    Waypoint discovery service - finds candidate stopping points around the start
    """

    def __init__(
        self,
        map_service: MapService,
        *,
        concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.map_service = map_service
        self.concurrency = max(1, concurrency or settings.discovery_concurrency)
        self.timeout = timeout if timeout is not None else settings.collaborator_timeout_s

    @staticmethod
    def build_categories(
        preferences: RoutePreferences, constraint: PetConstraint
    ) -> List[str]:
        """Categories to search, deduplicated, in preference order."""
        categories: List[str] = []
        for flag, flag_categories in PREFERENCE_CATEGORY_MAPPING.items():
            if getattr(preferences, flag):
                categories.extend(flag_categories)
        categories.extend(DEFAULT_SEARCH_CATEGORIES)

        if constraint.reactive.dogs and preferences.avoid_dog_parks:
            categories = [c for c in categories if c != DOG_PARK]

        return list(dict.fromkeys(categories))

    async def find(
        self,
        center: Tuple[float, float],
        radius: float,
        preferences: RoutePreferences,
        constraint: PetConstraint,
        deadline: Optional[Deadline] = None,
    ) -> List[Waypoint]:
        """
        Discover waypoints around center.

        Each category is searched independently with bounded parallelism; a
        category that fails or times out is skipped. Results are filtered,
        scored, deduplicated by place and sorted by suitability.
        """
        categories = self.build_categories(preferences, constraint)
        logger.debug("Searching %s within %.0fm", categories, radius)

        results = await self._search_all(center, radius, categories, deadline)

        best: Dict[str, Waypoint] = {}
        for category, places in results:
            found = 0
            for place in places:
                if not self.is_valid_waypoint(place, constraint):
                    continue
                waypoint = self._to_waypoint(place, category, preferences, constraint)
                key = waypoint.place_ref or (
                    f"{waypoint.name}@{waypoint.location.lat},{waypoint.location.lng}"
                )
                current = best.get(key)
                if current is None or waypoint.suitability > current.suitability:
                    best[key] = waypoint
                found += 1
            logger.debug("Found %d usable %s places", found, category)

        waypoints = sorted(
            best.values(), key=lambda wp: (-wp.suitability, -wp.rating, wp.name)
        )
        return waypoints[:MAX_WAYPOINTS]

    async def _search_all(
        self,
        center: Tuple[float, float],
        radius: float,
        categories: List[str],
        deadline: Optional[Deadline],
    ) -> List[Tuple[str, List[Dict]]]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def search(category: str):
            async with semaphore:
                result = await call_collaborator(
                    f"places[{category}]",
                    lambda: self.map_service.find_nearby_places(
                        center=center, radius_m=radius, place_type=category
                    ),
                    timeout=self.timeout,
                )
            return category, result.unwrap_or([]) or []

        tasks = [asyncio.ensure_future(search(category)) for category in categories]
        timeout = deadline.remaining() if deadline is not None else None
        done, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning(
                "Deadline reached, abandoning %d place searches", len(pending)
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        return [task.result() for task in tasks if task in done]

    @staticmethod
    def is_valid_waypoint(place: Dict, constraint: PetConstraint) -> bool:
        location = place.get("location")
        if not location or location.get("lat") is None or location.get("lng") is None:
            return False

        # Hard exclusion, regardless of which categories were searched
        if constraint.reactive.dogs and is_dog_park(place.get("types") or []):
            return False

        rating = place.get("rating")
        if rating and rating < MIN_RATING:
            return False

        return True

    @staticmethod
    def score_suitability(
        place: Dict, preferences: RoutePreferences, constraint: PetConstraint
    ) -> float:
        score = 0.5
        types = place.get("types") or []

        rating = place.get("rating")
        if rating:
            score += (rating - 3.0) * 0.1

        if preferences.prefer_parks and is_park(types):
            score += 0.3
        if preferences.water_fountains and is_attraction(types):
            score += 0.2
        if constraint.energy == "high" and is_dog_park(types):
            score += 0.2
        if constraint.energy == "low" and is_quiet(types):
            score += 0.1

        return min(max(score, 0.0), 1.0)

    def _to_waypoint(
        self,
        place: Dict,
        category: str,
        preferences: RoutePreferences,
        constraint: PetConstraint,
    ) -> Waypoint:
        location = place["location"]
        return Waypoint(
            place_ref=place.get("place_id", ""),
            name=place.get("name") or "Point of Interest",
            types=list(place.get("types") or [category]),
            location=LatLng(lat=location["lat"], lng=location["lng"]),
            rating=place.get("rating") or DEFAULT_RATING,
            suitability=self.score_suitability(place, preferences, constraint),
            search_category=category,
            distance_km=place.get("distance_km", 0.0),
        )
