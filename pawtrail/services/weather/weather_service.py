"""Weather collaborators: OpenWeatherMap and the documented default provider."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, Tuple

import httpx

from pawtrail.config import settings
from pawtrail.errors import CollaboratorError
from pawtrail.models.request import parse_iso_timestamp
from pawtrail.models.response import WeatherContext


class WeatherService(ABC):
    """Weather service abstract interface"""

    @abstractmethod
    async def get_weather(
        self, coords: Tuple[float, float], time_iso: str
    ) -> WeatherContext:
        """Conditions at coords for a walk starting at time_iso"""
        pass


class DefaultWeatherService(WeatherService):
    """Fixed mild conditions used whenever real weather is unavailable."""

    DEFAULT = WeatherContext(
        temp_c=22,
        precip_prob=10,
        heat_index=24,
        daylight_mins_left=240,
        uv_index=5,
        wind_speed_kmh=8,
    )

    async def get_weather(
        self, coords: Tuple[float, float], time_iso: str
    ) -> WeatherContext:
        return self.DEFAULT.model_copy()


class OpenWeatherService(WeatherService):
    """OpenWeatherMap current-conditions implementation"""

    weather_url = "https://api.openweathermap.org/data/2.5/weather"

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else settings.openweather_api_key
        self._transport = transport
        self._timeout = timeout or settings.collaborator_timeout_s

        if not self.api_key:
            raise ValueError("OpenWeatherMap API Key is required")

    async def get_weather(
        self, coords: Tuple[float, float], time_iso: str
    ) -> WeatherContext:
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self._timeout
            ) as client:
                response = await client.get(
                    self.weather_url,
                    params={
                        "lat": coords[0],
                        "lon": coords[1],
                        "appid": self.api_key,
                        "units": "metric",
                    },
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise CollaboratorError(
                f"Weather fetch failed: {e}", collaborator="weather"
            ) from e

        return self._convert_weather(data, time_iso)

    @staticmethod
    def _convert_weather(data: dict, time_iso: str) -> WeatherContext:
        main = data.get("main")
        if not main or "temp" not in main:
            raise CollaboratorError(
                "Weather response missing temperature", collaborator="weather"
            )

        start = parse_iso_timestamp(time_iso)
        if start.tzinfo is None:
            start = start.replace(tzinfo=timezone.utc)

        daylight_mins_left = 0
        sunset = data.get("sys", {}).get("sunset")
        if sunset:
            sunset_at = datetime.fromtimestamp(sunset, tz=timezone.utc)
            daylight_mins_left = max(0, int((sunset_at - start).total_seconds() // 60))

        # Current-conditions data has no precipitation probability; cloud cover stands in
        cloud_cover = (data.get("clouds") or {}).get("all", 0)
        wind_ms = (data.get("wind") or {}).get("speed", 0)

        return WeatherContext(
            temp_c=main["temp"],
            precip_prob=60 if cloud_cover > 70 else 20,
            heat_index=main.get("feels_like", main["temp"]),
            daylight_mins_left=daylight_mins_left,
            uv_index=None,
            wind_speed_kmh=round(wind_ms * 3.6, 1),
        )
