"""
Response builder service - assembles the plan response and its human-readable context
"""
from typing import List, Sequence

from pawtrail.models.request import PetConstraint, RoutePreferences
from pawtrail.models.response import (
    PlanContext,
    RouteCandidate,
    RoutePlanResponse,
    WeatherContext,
)


class ResponseBuilderService:
    def build_response(
        self,
        routes: Sequence[RouteCandidate],
        weather: WeatherContext,
        search_radius: float,
        preferences: RoutePreferences,
        constraint: PetConstraint,
    ) -> RoutePlanResponse:
        return RoutePlanResponse(
            routes=list(routes),
            weather=weather,
            context=PlanContext(
                search_radius=search_radius,
                consideration_factors=self.consideration_factors(preferences, constraint),
                pet_constraints=self.describe_pet_constraints(constraint),
            ),
        )

    @staticmethod
    def consideration_factors(
        preferences: RoutePreferences, constraint: PetConstraint
    ) -> List[str]:
        factors = []
        if preferences.prefer_parks:
            factors.append("Park preference")
        if preferences.avoid_busy_roads:
            factors.append("Traffic avoidance")
        if preferences.shade:
            factors.append("Shade seeking")
        if constraint.heat_sensitive:
            factors.append("Heat sensitivity")
        if constraint.reactive.dogs:
            factors.append("Dog reactivity")
        factors.append(f"{constraint.energy} energy level")
        return factors

    @staticmethod
    def describe_pet_constraints(constraint: PetConstraint) -> List[str]:
        descriptions = [f"{constraint.energy} energy"]
        if constraint.age_years > 10:
            descriptions.append("Senior pet considerations")
        if constraint.heat_sensitive:
            descriptions.append("Heat sensitive")
        if constraint.reactive.dogs:
            descriptions.append("Dog reactive - avoiding dog parks")
        if constraint.mobility == "limited":
            descriptions.append("Limited mobility - shorter distances")
        return descriptions
