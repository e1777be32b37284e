"""Synthetic route used when no directions-backed candidate survives."""
from typing import List, Tuple

from pawtrail.models.request import EndPolicy, RouteTarget
from pawtrail.models.response import RouteCandidate, RouteLeg
from pawtrail.services.map.geo import destination_point, encode_polyline, haversine_m

WALK_PACE_M_PER_MIN = 80
WALK_SPEED_M_PER_S = 1.3
DEFAULT_DISTANCE_M = 2400
LOOP_SIDES = 8


def target_distance_m(target: RouteTarget) -> float:
    """Distance implied by the target: distance if given, else duration at walking pace."""
    if target.distance_m:
        return float(target.distance_m)
    if target.duration_min:
        return float(target.duration_min * WALK_PACE_M_PER_MIN)
    return float(DEFAULT_DISTANCE_M)


class FallbackRouteProvider:
    """Fabricates a deterministic candidate from start, end and target alone."""

    def synthesize(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        end_policy: EndPolicy,
        target: RouteTarget,
    ) -> RouteCandidate:
        distance = target_distance_m(target)

        if end_policy == "point" and end != start:
            points = [start, end]
            distance = max(distance, haversine_m(start[0], start[1], end[0], end[1]))
        else:
            points = self._loop_points(start, distance)

        distance_m = max(1, int(round(distance)))
        duration_sec = max(1, int(round(distance_m / WALK_SPEED_M_PER_S)))

        return RouteCandidate(
            id="fallback",
            route_type="fallback",
            polyline=encode_polyline(points),
            legs=[RouteLeg(distance_meters=distance_m, duration_sec=duration_sec)],
            distance_meters=distance_m,
            duration_sec=duration_sec,
            waypoints=[],
        )

    @staticmethod
    def _loop_points(
        start: Tuple[float, float], perimeter_m: float
    ) -> List[Tuple[float, float]]:
        """Regular polygon through start whose perimeter matches the target distance."""
        side = perimeter_m / LOOP_SIDES
        points = [start]
        heading = 0.0
        current = start
        for _ in range(LOOP_SIDES - 1):
            current = destination_point(current, heading, side)
            points.append(current)
            heading += 360.0 / LOOP_SIDES
        points.append(start)
        return points
