import asyncio

import pytest

from pawtrail.errors import ResolutionError
from pawtrail.models.request import LatLng, PetConstraint, PlaceRef, RouteTarget
from pawtrail.services.route.context_gatherer import ContextGatherer

from fakes import FakeMapService, FakeWeatherService, build_request, pet


def _constraint(**overrides) -> PetConstraint:
    return PetConstraint.model_validate(pet(**overrides))


def test_search_radius_from_distance_is_half_the_target():
    radius = ContextGatherer.calculate_search_radius(
        RouteTarget(distance_m=5000), _constraint(energy="medium", mobility="good")
    )
    assert radius == pytest.approx(2500)


def test_search_radius_from_duration_uses_walking_pace():
    radius = ContextGatherer.calculate_search_radius(
        RouteTarget(duration_min=30), _constraint(energy="medium")
    )
    assert radius == pytest.approx(1200)


def test_search_radius_scales_with_energy_and_mobility():
    target = RouteTarget(duration_min=40)
    medium = ContextGatherer.calculate_search_radius(target, _constraint(energy="medium"))
    low = ContextGatherer.calculate_search_radius(target, _constraint(energy="low"))
    high = ContextGatherer.calculate_search_radius(target, _constraint(energy="high"))
    limited = ContextGatherer.calculate_search_radius(
        target, _constraint(energy="medium", mobility="limited")
    )

    assert low == pytest.approx(medium * 0.7)
    assert limited == pytest.approx(medium * 0.7)
    assert high == pytest.approx(medium * 1.3)


@pytest.mark.parametrize("energy", ["low", "medium", "high"])
def test_search_radius_is_clamped_and_monotonic(energy):
    constraint = _constraint(energy=energy)
    previous = 0.0
    for duration in range(5, 181, 5):
        radius = ContextGatherer.calculate_search_radius(
            RouteTarget(duration_min=duration), constraint
        )
        assert 500 <= radius <= 3000
        assert radius >= previous
        previous = radius

    previous = 0.0
    for distance in range(100, 20001, 500):
        radius = ContextGatherer.calculate_search_radius(
            RouteTarget(distance_m=distance), constraint
        )
        assert 500 <= radius <= 3000
        assert radius >= previous
        previous = radius


def test_raw_coordinates_pass_through(map_service, weather_service):
    gatherer = ContextGatherer(map_service, weather_service)
    coords = asyncio.run(gatherer.resolve_coordinates(LatLng(lat=51.5, lng=-0.12)))
    assert coords == (51.5, -0.12)
    assert map_service.geocode_calls == []


def test_place_reference_retries_geocoding_once(weather_service):
    maps = FakeMapService(geocodes={"place-home": (40.1, -74.1)})
    maps.geocode_failures["place-home"] = 1
    gatherer = ContextGatherer(maps, weather_service, geocode_retries=1)

    coords = asyncio.run(gatherer.resolve_coordinates(PlaceRef(place_id="place-home")))

    assert coords == (40.1, -74.1)
    assert maps.geocode_calls == ["place-home", "place-home"]


def test_unresolvable_place_raises_after_retry(weather_service):
    maps = FakeMapService(geocodes={})
    gatherer = ContextGatherer(maps, weather_service, geocode_retries=1)

    with pytest.raises(ResolutionError):
        asyncio.run(gatherer.resolve_coordinates(PlaceRef(place_id="nowhere")))
    assert len(maps.geocode_calls) == 2


def test_weather_failure_falls_back_to_default(map_service):
    gatherer = ContextGatherer(map_service, FakeWeatherService(fail=True))
    weather = asyncio.run(gatherer.get_weather_context((40.0, -74.0), "2025-05-01T08:00:00Z"))

    assert weather.temp_c == 22
    assert weather.precip_prob == 10
    assert weather.daylight_mins_left == 240


def test_gather_uses_start_as_end_for_loops(map_service, weather_service):
    request = build_request()
    constraint = PetConstraint.model_validate(pet())
    context = asyncio.run(
        ContextGatherer(map_service, weather_service).gather(request, constraint)
    )

    assert context.start == (40.0, -74.0)
    assert context.end == context.start
    assert context.weather.temp_c == 18
    assert context.search_radius == pytest.approx(1200)


def test_gather_resolves_point_destination(weather_service):
    maps = FakeMapService(geocodes={"cafe": (40.01, -74.01)})
    request = build_request(endPolicy="point", end={"placeId": "cafe"})
    constraint = PetConstraint.model_validate(pet())
    context = asyncio.run(ContextGatherer(maps, weather_service).gather(request, constraint))

    assert context.end == (40.01, -74.01)
