"""Title generation for returned routes: an LLM collaborator plus the templated fallback."""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from fastapi.concurrency import run_in_threadpool

from pawtrail.config import settings
from pawtrail.errors import CollaboratorError
from pawtrail.models.request import RoutePlanRequest
from pawtrail.models.response import RouteCandidate

from .prompts import SYSTEM_PROMPT, TITLE_PROMPT_TEMPLATE

_FALLBACK_TITLES = [
    "Scenic Neighborhood Loop",
    "Park Explorer Route",
    "Quiet Path Adventure",
    "Urban Discovery Walk",
    "Nature Trail Circuit",
]


class TitleService(ABC):
    """Text-generation collaborator interface"""

    @abstractmethod
    async def generate_titles(
        self, routes: Sequence[RouteCandidate], request: RoutePlanRequest
    ) -> List[str]:
        """One title per route, in the same order"""
        pass


class TemplateTitleService(TitleService):
    """Deterministic titles derived from route features."""

    async def generate_titles(
        self, routes: Sequence[RouteCandidate], request: RoutePlanRequest
    ) -> List[str]:
        return [self.title_for(route, index) for index, route in enumerate(routes)]

    @staticmethod
    def title_for(route: RouteCandidate, index: int) -> str:
        names = [wp.name for wp in route.waypoints]
        if any("park" in name.lower() for name in names):
            return f"{names[0]} Adventure Loop"
        if any("garden" in name.lower() for name in names):
            return "Garden District Walking Tour"
        if index < len(_FALLBACK_TITLES):
            return _FALLBACK_TITLES[index]
        return f"Walking Route {index + 1}"


class OpenAITitleService(TitleService):
    """Thin wrapper around the OpenAI chat completions API."""

    def __init__(self, *, model: Optional[str] = None, client: Any = None) -> None:
        self._model = model or settings.openai_model
        self._client = client or self._build_client()

    @staticmethod
    def _build_client() -> Any:
        api_key = settings.openai_api_key
        if not api_key:
            raise RuntimeError("PAWTRAIL_OPENAI_API_KEY is not configured.")

        from openai import OpenAI

        return OpenAI(api_key=api_key, base_url=settings.openai_base_url or None)

    async def generate_titles(
        self, routes: Sequence[RouteCandidate], request: RoutePlanRequest
    ) -> List[str]:
        if not routes:
            return []
        prompt = self._build_prompt(routes, request)
        response = await run_in_threadpool(self._complete, prompt)
        titles = self._extract_titles(response)
        if len(titles) < len(routes):
            raise CollaboratorError(
                f"Expected {len(routes)} titles, got {len(titles)}",
                collaborator="titles",
            )
        return titles[: len(routes)]

    def _complete(self, prompt: str) -> Any:
        return self._client.chat.completions.create(
            model=self._model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
        )

    @staticmethod
    def _build_prompt(
        routes: Sequence[RouteCandidate], request: RoutePlanRequest
    ) -> str:
        pets = ", ".join(f"{pet.energy}-energy pet" for pet in request.pets)
        enabled = [
            name.replace("_", " ")
            for name, value in request.preferences.model_dump().items()
            if value
        ]
        target = request.target
        if target.distance_m is not None:
            target_text = f"{target.distance_m / 1000:.1f}km"
        else:
            target_text = f"{target.duration_min:g} minutes"

        route_lines = []
        for index, route in enumerate(routes, 1):
            waypoint_names = ", ".join(wp.name for wp in route.waypoints) or "none"
            route_lines.append(
                f"Route {index}: {route.distance_meters / 1000:.1f}km, "
                f"{round(route.duration_sec / 60)} minutes, waypoints: {waypoint_names}, "
                f"highlights: {', '.join(route.reasons) or 'none'}"
            )

        return TITLE_PROMPT_TEMPLATE.format(
            count=len(routes),
            pets=pets,
            preferences=", ".join(enabled) or "none",
            target=target_text,
            routes="\n".join(route_lines),
        )

    @staticmethod
    def _extract_titles(response: Any) -> List[str]:
        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError) as exc:
            raise CollaboratorError(
                "Unexpected response from text generation", collaborator="titles"
            ) from exc

        if not isinstance(content, str):
            return []
        candidate = content.strip()
        start = candidate.find("[")
        end = candidate.rfind("]")
        if start == -1 or end <= start:
            return []
        try:
            loaded = json.loads(candidate[start : end + 1])
        except json.JSONDecodeError:
            return []
        return [str(title).strip() for title in loaded if str(title).strip()]
