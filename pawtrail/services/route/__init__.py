# Route planning pipeline
from .constraint_resolver import ConstraintResolver
from .context_gatherer import ContextGatherer, PlanningContext
from .waypoint_discovery import WaypointDiscovery
from .candidate_builder import RouteCandidateBuilder
from .fallback import FallbackRouteProvider
from .scoring_service import RouteScorer, ScoringWeights
from .ranking_service import RouteRanker
from .response_builder import ResponseBuilderService

__all__ = [
    "ConstraintResolver",
    "ContextGatherer",
    "PlanningContext",
    "WaypointDiscovery",
    "RouteCandidateBuilder",
    "FallbackRouteProvider",
    "RouteScorer",
    "ScoringWeights",
    "RouteRanker",
    "ResponseBuilderService",
]
