from .weather_service import DefaultWeatherService, OpenWeatherService, WeatherService

__all__ = ["WeatherService", "OpenWeatherService", "DefaultWeatherService"]
