"""
Route candidate builder - turns discovered waypoints into walkable candidate routes
"""
import asyncio
import itertools
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from pawtrail.config import settings
from pawtrail.config.place_types import is_park
from pawtrail.models.request import EndPolicy, RouteTarget
from pawtrail.models.response import RouteCandidate, RouteLeg, RouteType, Waypoint
from pawtrail.services.collaborator import Deadline, call_collaborator
from pawtrail.services.map.map_service import MapService
from pawtrail.services.route.fallback import FallbackRouteProvider

logger = logging.getLogger(__name__)

MAX_SINGLE_WAYPOINT_ROUTES = 8
MULTI_WAYPOINT_POOL = 4
MULTI_WAYPOINT_MIN_DURATION = 30


@dataclass(frozen=True)
class _CandidateJob:
    id: str
    route_type: RouteType
    waypoints: Tuple[Waypoint, ...]
    points: Tuple[Tuple[float, float], ...]


class RouteCandidateBuilder:
    """
    Candidate generation - direct, single-waypoint and multi-waypoint routes,
    each computed by the directions collaborator
    """

    def __init__(
        self,
        map_service: MapService,
        *,
        fallback: Optional[FallbackRouteProvider] = None,
        concurrency: Optional[int] = None,
        timeout: Optional[float] = None,
    ):
        self.map_service = map_service
        self.fallback = fallback or FallbackRouteProvider()
        self.concurrency = max(1, concurrency or settings.directions_concurrency)
        self.timeout = timeout if timeout is not None else settings.collaborator_timeout_s

    def plan_jobs(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        waypoints: Sequence[Waypoint],
        end_policy: EndPolicy,
        target: RouteTarget,
    ) -> List[_CandidateJob]:
        """Candidate shapes in generation order."""
        finish = start if end_policy == "loop" else end

        def job(job_id: str, route_type: RouteType, stops: Sequence[Waypoint]):
            points = (start, *(wp.location.as_tuple() for wp in stops), finish)
            return _CandidateJob(job_id, route_type, tuple(stops), points)

        jobs = [_CandidateJob("direct", "direct", (), (start, end))]

        for i, waypoint in enumerate(waypoints[:MAX_SINGLE_WAYPOINT_ROUTES]):
            jobs.append(job(f"single-{i}", "single-waypoint", [waypoint]))

        # Longer walks can take in two stops
        if target.duration_min and target.duration_min > MULTI_WAYPOINT_MIN_DURATION:
            pool = list(waypoints[:MULTI_WAYPOINT_POOL])
            for i, j in itertools.combinations(range(len(pool)), 2):
                jobs.append(job(f"multi-{i}-{j}", "multi-waypoint", [pool[i], pool[j]]))

        return jobs

    async def build(
        self,
        start: Tuple[float, float],
        end: Tuple[float, float],
        waypoints: Sequence[Waypoint],
        end_policy: EndPolicy,
        target: RouteTarget,
        deadline: Optional[Deadline] = None,
    ) -> List[RouteCandidate]:
        """
        Generate candidate routes.

        Every candidate is an independent directions call; failures, timeouts and
        zero-length results drop only that candidate. If nothing survives, a
        synthetic fallback candidate is returned so the list is never empty.
        """
        jobs = self.plan_jobs(start, end, waypoints, end_policy, target)
        logger.debug("Building %d route candidates", len(jobs))

        results = await self._run_jobs(jobs, deadline)
        candidates = [candidate for candidate in results if candidate is not None]

        if not candidates:
            logger.warning("No route candidates survived, using synthetic fallback")
            candidates = [self.fallback.synthesize(start, end, end_policy, target)]

        return candidates

    async def _run_jobs(
        self, jobs: List[_CandidateJob], deadline: Optional[Deadline]
    ) -> List[Optional[RouteCandidate]]:
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(job: _CandidateJob) -> Optional[RouteCandidate]:
            async with semaphore:
                return await self._build_candidate(job)

        tasks = [asyncio.ensure_future(run(job)) for job in jobs]
        timeout = deadline.remaining() if deadline is not None else None
        done, pending = await asyncio.wait(tasks, timeout=timeout)
        if pending:
            logger.warning(
                "Deadline reached, abandoning %d directions calls", len(pending)
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

        return [task.result() if task in done else None for task in tasks]

    async def _build_candidate(self, job: _CandidateJob) -> Optional[RouteCandidate]:
        result = await call_collaborator(
            f"directions[{job.id}]",
            lambda: self.map_service.get_directions(
                list(job.points), optimize_waypoints=True
            ),
            timeout=self.timeout,
        )
        if result.is_failed:
            return None

        route_data = result.value or {}
        distance = int(route_data.get("distance", 0) or 0)
        duration = int(route_data.get("duration_sec", 0) or 0)
        if distance <= 0 or duration <= 0:
            logger.info("Dropping %s: empty route (%sm, %ss)", job.id, distance, duration)
            return None

        ordered = self._apply_optimized_order(
            list(job.waypoints), route_data.get("optimized_order") or []
        )
        parks = sum(1 for wp in ordered if is_park(wp.types))

        return RouteCandidate(
            id=job.id,
            route_type=job.route_type,
            polyline=route_data.get("overview_polyline", {}).get("points", ""),
            legs=[
                RouteLeg(
                    distance_meters=leg.get("distance", 0),
                    duration_sec=leg.get("duration_sec", 0),
                )
                for leg in route_data.get("legs", [])
            ],
            distance_meters=distance,
            duration_sec=duration,
            waypoints=ordered,
            elevation_gain_m=float(route_data.get("elevation_gain_m", 0.0) or 0.0),
            crossings_estimate=int(route_data.get("crossings_estimate", 0) or 0),
            parks_ratio=parks / len(ordered) if ordered else 0.0,
        )

    @staticmethod
    def _apply_optimized_order(
        waypoints: List[Waypoint], order: List[int]
    ) -> List[Waypoint]:
        if sorted(order) != list(range(len(waypoints))):
            return waypoints
        return [waypoints[i] for i in order]
