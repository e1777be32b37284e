"""
Response models for walk planning API
Includes route geometry, waypoint information and planning context
"""
from typing import List, Literal, Optional

from pydantic import Field

from pawtrail.models.request import CamelModel, LatLng

RouteType = Literal["direct", "single-waypoint", "multi-waypoint", "fallback"]


class WeatherContext(CamelModel):
    """Weather at the start of the walk"""
    temp_c: float
    precip_prob: float = Field(ge=0, le=100)
    heat_index: float
    daylight_mins_left: int
    uv_index: Optional[float] = None
    wind_speed_kmh: Optional[float] = None


class Waypoint(CamelModel):
    """Discovered stopping point with its suitability for this walk"""
    place_ref: str
    name: str
    types: List[str] = []
    location: LatLng
    rating: float = 3.0
    suitability: float = Field(default=0.5, ge=0, le=1)
    search_category: str = "other"
    distance_km: float = 0.0


class Advisory(CamelModel):
    type: Literal["warning", "info", "tip"]
    message: str


class RouteLeg(CamelModel):
    distance_meters: int
    duration_sec: int


class RouteCandidate(CamelModel):
    """Route candidate with complete information"""
    id: str
    route_type: RouteType
    title: Optional[str] = None
    polyline: str = ""
    legs: List[RouteLeg] = []
    distance_meters: int
    duration_sec: int
    waypoints: List[Waypoint] = []
    elevation_gain_m: float = 0.0
    crossings_estimate: int = 0
    parks_ratio: float = 0.0
    score: float = 0.0
    reasons: List[str] = []
    advisories: List[Advisory] = []
    thumbnails: List[str] = []
    weather_suitability: float = 0.0


class PlanContext(CamelModel):
    search_radius: float
    consideration_factors: List[str] = []
    pet_constraints: List[str] = []


class RoutePlanResponse(CamelModel):
    """Route plan response model"""
    routes: List[RouteCandidate] = []
    weather: WeatherContext
    context: PlanContext


class ErrorResponse(CamelModel):
    success: bool = False
    error: str
    error_type: str
    timestamp: str
