"""
Main route planning service
Wires constraint merging, context gathering, waypoint discovery, candidate building,
scoring and ranking into one request-scoped pipeline
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from pawtrail.config import settings
from pawtrail.errors import InsufficientCandidatesError
from pawtrail.models.request import RoutePlanRequest
from pawtrail.models.response import RoutePlanResponse
from pawtrail.services.collaborator import Deadline
from pawtrail.services.map.map_service import MapService
from pawtrail.services.route.candidate_builder import RouteCandidateBuilder
from pawtrail.services.route.constraint_resolver import ConstraintResolver
from pawtrail.services.route.context_gatherer import ContextGatherer
from pawtrail.services.route.fallback import FallbackRouteProvider
from pawtrail.services.route.ranking_service import RouteRanker
from pawtrail.services.route.response_builder import ResponseBuilderService
from pawtrail.services.route.scoring_service import RouteScorer, ScoringWeights
from pawtrail.services.route.waypoint_discovery import WaypointDiscovery
from pawtrail.services.text.title_service import TemplateTitleService, TitleService
from pawtrail.services.weather.weather_service import (
    DefaultWeatherService,
    WeatherService,
)

logger = logging.getLogger(__name__)


class PlanStage(str, Enum):
    RESOLVING_CONTEXT = "resolving context"
    DISCOVERING_WAYPOINTS = "discovering waypoints"
    BUILDING_CANDIDATES = "building candidates"
    SCORING = "scoring"
    RANKING = "ranking/enhancing"
    RESPONDED = "responded"


@dataclass
class PlannerDependencies:
    """Collaborator handles for one planner; swap any of them for fakes in tests."""

    map_service: MapService
    weather_service: WeatherService = field(default_factory=DefaultWeatherService)
    title_service: TitleService = field(default_factory=TemplateTitleService)
    fallback_weather: WeatherService = field(default_factory=DefaultWeatherService)
    fallback_routes: FallbackRouteProvider = field(default_factory=FallbackRouteProvider)
    fallback_titles: TemplateTitleService = field(default_factory=TemplateTitleService)
    weights: Optional[ScoringWeights] = None


class RoutePlanner:
    """
    Main route planning service

    Architecture: Constraints → Context → Waypoints → Candidates → Scoring → Ranking → Response
    """

    def __init__(
        self,
        deps: PlannerDependencies,
        *,
        deadline_s: Optional[float] = None,
        timeout_s: Optional[float] = None,
    ):
        timeout = timeout_s if timeout_s is not None else settings.collaborator_timeout_s
        self.deadline_s = deadline_s if deadline_s is not None else settings.plan_deadline_s

        self.constraint_resolver = ConstraintResolver()
        self.context_gatherer = ContextGatherer(
            deps.map_service,
            deps.weather_service,
            fallback_weather=deps.fallback_weather,
            timeout=timeout,
        )
        self.waypoint_discovery = WaypointDiscovery(deps.map_service, timeout=timeout)
        self.candidate_builder = RouteCandidateBuilder(
            deps.map_service, fallback=deps.fallback_routes, timeout=timeout
        )
        self.scorer = RouteScorer(deps.weights)
        self.ranker = RouteRanker(
            deps.map_service,
            deps.title_service,
            fallback_titles=deps.fallback_titles,
            timeout=timeout,
        )
        self.response_builder = ResponseBuilderService()

    async def plan(self, request: RoutePlanRequest) -> RoutePlanResponse:
        """
        Plan walks for one request. Every intermediate object lives only for this call.
        """
        deadline = Deadline(self.deadline_s)
        constraint = self.constraint_resolver.merge(request.pets)

        self._enter(PlanStage.RESOLVING_CONTEXT)
        context = await self.context_gatherer.gather(
            request, constraint, deadline=deadline
        )

        self._enter(PlanStage.DISCOVERING_WAYPOINTS)
        waypoints = await self.waypoint_discovery.find(
            context.start,
            context.search_radius,
            request.preferences,
            constraint,
            deadline=deadline,
        )

        self._enter(PlanStage.BUILDING_CANDIDATES)
        candidates = await self.candidate_builder.build(
            context.start,
            context.end,
            waypoints,
            request.end_policy,
            request.target,
            deadline=deadline,
        )
        if not candidates:
            raise InsufficientCandidatesError("No route candidates could be produced")

        self._enter(PlanStage.SCORING)
        scored = self.scorer.score_all(candidates, request, constraint, context.weather)

        self._enter(PlanStage.RANKING)
        routes = await self.ranker.rank_and_enhance(
            scored,
            request,
            constraint,
            context.weather,
            context.start,
            deadline=deadline,
        )

        self._enter(PlanStage.RESPONDED)
        logger.info(
            "Planned %d routes from %d candidates (%d waypoints), top score %.3f",
            len(routes),
            len(candidates),
            len(waypoints),
            routes[0].score if routes else 0.0,
        )
        return self.response_builder.build_response(
            routes,
            context.weather,
            context.search_radius,
            request.preferences,
            constraint,
        )

    @staticmethod
    def _enter(stage: PlanStage) -> None:
        logger.debug("Planner stage: %s", stage.value)
