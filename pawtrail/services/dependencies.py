"""Production collaborator wiring, built once at application startup."""
import logging

from pawtrail.config import Settings, settings
from pawtrail.services.map.api_counter import APICounter
from pawtrail.services.map.google_map_service import GoogleMapService
from pawtrail.services.route_service import PlannerDependencies
from pawtrail.services.text.title_service import (
    OpenAITitleService,
    TemplateTitleService,
    TitleService,
)
from pawtrail.services.weather.weather_service import (
    DefaultWeatherService,
    OpenWeatherService,
    WeatherService,
)

logger = logging.getLogger(__name__)


def build_dependencies(config: Settings = settings) -> PlannerDependencies:
    map_service = GoogleMapService(
        config.google_maps_api_key,
        counter=APICounter(config.max_api_calls_per_day),
        timeout=config.collaborator_timeout_s,
    )

    weather_service: WeatherService
    if config.openweather_api_key:
        weather_service = OpenWeatherService(
            config.openweather_api_key, timeout=config.collaborator_timeout_s
        )
    else:
        logger.warning("No OpenWeatherMap key configured, using default weather")
        weather_service = DefaultWeatherService()

    title_service: TitleService
    if config.openai_api_key:
        title_service = OpenAITitleService(model=config.openai_model)
    else:
        logger.info("No OpenAI key configured, using templated route titles")
        title_service = TemplateTitleService()

    return PlannerDependencies(
        map_service=map_service,
        weather_service=weather_service,
        title_service=title_service,
    )
