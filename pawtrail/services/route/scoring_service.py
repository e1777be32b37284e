"""
Multi-objective route scoring.

A candidate's score is a weighted sum of six independent sub-scores, each
clamped to [0, 1]: distance fit, scenic value, safety, comfort, pet
suitability and weather suitability. Scoring is pure: it reads the candidate,
request, merged constraint and weather, and mutates nothing.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import List, Optional, Sequence

from pawtrail.config import Settings, settings
from pawtrail.config.place_types import is_attraction, is_dog_park, is_park, scenic_weight
from pawtrail.models.request import PetConstraint, RoutePlanRequest, RoutePreferences
from pawtrail.models.response import RouteCandidate, WeatherContext
from pawtrail.services.route.fallback import target_distance_m


def _clamp(value: float) -> float:
    return min(1.0, max(0.0, value))


@dataclass(frozen=True)
class ScoringWeights:
    distance_fit: float = 0.25
    scenic: float = 0.20
    safety: float = 0.18
    comfort: float = 0.15
    pet_suitability: float = 0.12
    weather: float = 0.10

    def __post_init__(self) -> None:
        if any(getattr(self, f.name) < 0 for f in fields(self)):
            raise ValueError("Scoring weights must be non-negative")
        if self.total() <= 0:
            raise ValueError("At least one scoring weight must be positive")

    def total(self) -> float:
        return sum(getattr(self, f.name) for f in fields(self))

    def normalized(self) -> "ScoringWeights":
        total = self.total()
        return ScoringWeights(
            **{f.name: getattr(self, f.name) / total for f in fields(self)}
        )

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "ScoringWeights":
        return cls(
            distance_fit=config.score_weight_distance_fit,
            scenic=config.score_weight_scenic,
            safety=config.score_weight_safety,
            comfort=config.score_weight_comfort,
            pet_suitability=config.score_weight_pet_suitability,
            weather=config.score_weight_weather,
        ).normalized()


class RouteScorer:
    def __init__(self, weights: Optional[ScoringWeights] = None) -> None:
        self.weights = (weights or ScoringWeights.from_settings()).normalized()

    def score(
        self,
        candidate: RouteCandidate,
        request: RoutePlanRequest,
        constraint: PetConstraint,
        weather: WeatherContext,
    ) -> float:
        w = self.weights
        total = (
            w.distance_fit * self.distance_fit(candidate.distance_meters, request)
            + w.scenic * self.scenic(candidate)
            + w.safety * self.safety(candidate, request.preferences)
            + w.comfort * self.comfort(candidate, request.preferences)
            + w.pet_suitability * self.pet_suitability(candidate, constraint)
            + w.weather * self.weather_suitability(weather, constraint)
        )
        return _clamp(total)

    def score_all(
        self,
        candidates: Sequence[RouteCandidate],
        request: RoutePlanRequest,
        constraint: PetConstraint,
        weather: WeatherContext,
    ) -> List[RouteCandidate]:
        """Return copies of candidates with score and weather suitability filled in."""
        weather_score = self.weather_suitability(weather, constraint)
        return [
            candidate.model_copy(
                update={
                    "score": self.score(candidate, request, constraint, weather),
                    "weather_suitability": weather_score,
                }
            )
            for candidate in candidates
        ]

    @staticmethod
    def distance_fit(actual_m: float, request: RoutePlanRequest) -> float:
        target = target_distance_m(request.target)
        return _clamp(1 - min(1.0, abs(actual_m - target) / target))

    @staticmethod
    def scenic(candidate: RouteCandidate) -> float:
        if not candidate.waypoints:
            return 0.3
        points = sum(scenic_weight(wp.types) for wp in candidate.waypoints)
        return _clamp(points / len(candidate.waypoints))

    @staticmethod
    def safety(candidate: RouteCandidate, preferences: RoutePreferences) -> float:
        score = 0.7
        if preferences.avoid_busy_roads:
            score += 0.2
        # Parks are generally safer
        if any(is_park(wp.types) for wp in candidate.waypoints):
            score += 0.1
        return _clamp(score)

    @staticmethod
    def comfort(candidate: RouteCandidate, preferences: RoutePreferences) -> float:
        score = 0.5
        if preferences.shade:
            score += 0.2
        if preferences.water_fountains and any(
            is_attraction(wp.types) or "fountain" in wp.name.lower()
            for wp in candidate.waypoints
        ):
            score += 0.2
        if preferences.benches:
            score += 0.1
        return _clamp(score)

    @staticmethod
    def pet_suitability(candidate: RouteCandidate, constraint: PetConstraint) -> float:
        score = 0.7
        distance = candidate.distance_meters

        if constraint.energy == "high" and distance > 2000:
            score += 0.2
        elif constraint.energy == "low" and distance < 1000:
            score += 0.2

        if constraint.reactive.dogs and any(
            is_dog_park(wp.types) for wp in candidate.waypoints
        ):
            score -= 0.3

        # Shorter routes for senior pets
        if constraint.age_years > 10 and distance < 1500:
            score += 0.1

        return _clamp(score)

    @staticmethod
    def weather_suitability(weather: WeatherContext, constraint: PetConstraint) -> float:
        score = 0.7

        if weather.temp_c > 25 and constraint.heat_sensitive:
            score -= 0.3
        elif weather.temp_c < 5:
            score -= 0.2
        elif 15 <= weather.temp_c <= 25:
            score += 0.2

        if weather.precip_prob > 70:
            score -= 0.2

        if weather.wind_speed_kmh is not None and weather.wind_speed_kmh > 30:
            score -= 0.1

        return _clamp(score)
