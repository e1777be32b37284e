import pytest

from fakes import FakeMapService, FakeWeatherService


@pytest.fixture
def map_service() -> FakeMapService:
    return FakeMapService()


@pytest.fixture
def weather_service() -> FakeWeatherService:
    return FakeWeatherService()
