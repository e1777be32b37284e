from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Google Maps Platform configuration
    google_maps_api_key: str = ""

    # OpenWeatherMap configuration
    openweather_api_key: str = ""

    # API configuration
    api_version: str = "1.0"
    max_routes: int = 3

    # API call limits
    max_api_calls_per_day: int = 1000

    # OpenAI configuration (route titles)
    openai_model: str = "gpt-4o-mini"
    openai_api_key: str = ""
    openai_base_url: Optional[str] = None

    # Planning budget
    collaborator_timeout_s: float = 10.0
    discovery_concurrency: int = 4
    directions_concurrency: int = 4
    plan_deadline_s: float = 25.0
    geocode_retries: int = 1

    # Scoring weights, normalised to sum to 1 by ScoringWeights
    score_weight_distance_fit: float = 0.25
    score_weight_scenic: float = 0.20
    score_weight_safety: float = 0.18
    score_weight_comfort: float = 0.15
    score_weight_pet_suitability: float = 0.12
    score_weight_weather: float = 0.10

    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="PAWTRAIL_", extra="ignore"
    )


settings = Settings()
