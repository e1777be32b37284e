"""
Request models for walk planning
Validated once at the API boundary; everything downstream works with fully-typed values.
"""
from datetime import datetime
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

Energy = Literal["low", "medium", "high"]
Mobility = Literal["excellent", "good", "limited"]
EndPolicy = Literal["loop", "point"]


class CamelModel(BaseModel):
    """Accept camelCase on the wire and snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class LatLng(CamelModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)

    def as_tuple(self):
        return (self.lat, self.lng)


class PlaceRef(CamelModel):
    place_id: str = Field(min_length=1)


Location = Union[LatLng, PlaceRef]


class Reactivity(CamelModel):
    dogs: bool = False
    bikes: bool = False
    kids: bool = False


class PetConstraint(CamelModel):
    id: Optional[str] = None
    weight_kg: float = Field(gt=0, le=100)
    energy: Energy
    age_years: float = Field(ge=0, le=30)
    heat_sensitive: bool = False
    reactive: Reactivity = Field(default_factory=Reactivity)
    mobility: Mobility = "excellent"


class RoutePreferences(CamelModel):
    prefer_parks: bool = False
    avoid_busy_roads: bool = False
    low_slope: bool = False
    shade: bool = False
    avoid_dog_parks: bool = False
    water_fountains: bool = False
    benches: bool = False


class RouteTarget(CamelModel):
    duration_min: Optional[float] = Field(default=None, ge=5, le=180)
    distance_m: Optional[float] = Field(default=None, ge=100, le=20000)

    @model_validator(mode="after")
    def _require_duration_or_distance(self) -> "RouteTarget":
        if self.duration_min is None and self.distance_m is None:
            raise ValueError("Either target duration or distance must be specified")
        return self


class PlanTime(CamelModel):
    start_iso: str = Field(alias="startISO")

    @field_validator("start_iso")
    @classmethod
    def _parse_iso(cls, value: str) -> str:
        try:
            parse_iso_timestamp(value)
        except ValueError as exc:
            raise ValueError("Start time must be a valid ISO string") from exc
        return value


class RoutePlanRequest(CamelModel):
    start: Location
    end_policy: EndPolicy
    end: Optional[Location] = None
    target: RouteTarget
    pets: List[PetConstraint] = Field(min_length=1)
    preferences: RoutePreferences = Field(default_factory=RoutePreferences)
    time: PlanTime

    @model_validator(mode="after")
    def _require_end_for_point(self) -> "RoutePlanRequest":
        if self.end_policy == "point" and self.end is None:
            raise ValueError("End location is required for point-to-point routes")
        return self


def parse_iso_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing 'Z'."""
    if not isinstance(value, str) or not value.strip():
        raise ValueError("empty timestamp")
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)
