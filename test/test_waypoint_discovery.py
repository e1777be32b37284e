import asyncio

import pytest

from pawtrail.models.request import PetConstraint, RoutePreferences
from pawtrail.services.collaborator import Deadline
from pawtrail.services.route.waypoint_discovery import WaypointDiscovery

from fakes import START, FakeMapService, make_place, pet


def _constraint(**overrides) -> PetConstraint:
    return PetConstraint.model_validate(pet(**overrides))


def _find(discovery, preferences=None, constraint=None, deadline=None):
    return asyncio.run(
        discovery.find(
            START,
            1200,
            preferences or RoutePreferences(prefer_parks=True),
            constraint or _constraint(),
            deadline=deadline,
        )
    )


def test_categories_follow_preferences_then_defaults():
    categories = WaypointDiscovery.build_categories(
        RoutePreferences(prefer_parks=True, water_fountains=True, shade=True),
        _constraint(),
    )
    assert categories == [
        "park",
        "dog_park",
        "tourist_attraction",
        "cemetery",
        "point_of_interest",
    ]


def test_categories_without_preferences_are_defaults():
    assert WaypointDiscovery.build_categories(RoutePreferences(), _constraint()) == [
        "park",
        "point_of_interest",
    ]


def test_dog_reactive_pet_avoiding_dog_parks_skips_the_category():
    categories = WaypointDiscovery.build_categories(
        RoutePreferences(prefer_parks=True, avoid_dog_parks=True),
        _constraint(reactive={"dogs": True}),
    )
    assert "dog_park" not in categories


def test_finds_sorted_deduplicated_waypoints(map_service):
    waypoints = _find(WaypointDiscovery(map_service, concurrency=2, timeout=1))

    assert [wp.place_ref for wp in waypoints] == ["dp1", "p1", "p2", "poi1"]
    assert map_service.place_calls == ["park", "dog_park", "point_of_interest"]
    suitabilities = [wp.suitability for wp in waypoints]
    assert suitabilities == sorted(suitabilities, reverse=True)
    # Seen under both park and dog_park, kept once
    assert waypoints[0].search_category == "park"


def test_low_rated_places_are_dropped(map_service):
    waypoints = _find(WaypointDiscovery(map_service, timeout=1))
    assert "poi2" not in {wp.place_ref for wp in waypoints}


def test_unrated_places_are_kept_with_default_rating():
    places = {"park": [make_place("u1", "Pocket Park", ["park"], 40.001, -74.0, None)]}
    waypoints = _find(WaypointDiscovery(FakeMapService(places), timeout=1))

    assert len(waypoints) == 1
    assert waypoints[0].rating == 3.0


def test_places_without_location_are_dropped():
    place = make_place("x1", "Nowhere Park", ["park"], 40.0, -74.0)
    place["location"] = None
    waypoints = _find(WaypointDiscovery(FakeMapService({"park": [place]}), timeout=1))
    assert waypoints == []


def test_dog_parks_are_excluded_for_dog_reactive_pets(map_service):
    # Dog park categories are still searched, but no dog park may come back
    waypoints = _find(
        WaypointDiscovery(map_service, timeout=1),
        constraint=_constraint(reactive={"dogs": True}),
    )

    assert "dog_park" in map_service.place_calls
    assert all("dog_park" not in wp.types for wp in waypoints)


def test_suitability_rewards_preferences_and_energy():
    prefs = RoutePreferences(prefer_parks=True, water_fountains=True)
    park = {"types": ["park"], "rating": 4.0}
    fountain = {"types": ["tourist_attraction"], "rating": 4.0}
    dog_park = {"types": ["dog_park"], "rating": 4.0}
    garden = {"types": ["garden"], "rating": None}

    assert WaypointDiscovery.score_suitability(park, prefs, _constraint()) == pytest.approx(0.9)
    assert WaypointDiscovery.score_suitability(
        fountain, prefs, _constraint()
    ) == pytest.approx(0.8)
    assert WaypointDiscovery.score_suitability(
        dog_park, prefs, _constraint(energy="high")
    ) == pytest.approx(0.8)
    assert WaypointDiscovery.score_suitability(
        garden, RoutePreferences(), _constraint(energy="low")
    ) == pytest.approx(0.6)


def test_suitability_is_clamped():
    place = {"types": ["park"], "rating": 5.0}
    score = WaypointDiscovery.score_suitability(
        place, RoutePreferences(prefer_parks=True), _constraint()
    )
    assert score == pytest.approx(1.0)


def test_failing_category_is_skipped():
    maps = FakeMapService(failing_types=["park"])
    waypoints = _find(WaypointDiscovery(maps, timeout=1))

    assert {wp.place_ref for wp in waypoints} == {"dp1", "poi1"}


def test_slow_category_times_out_and_is_skipped():
    maps = FakeMapService(place_delays={"point_of_interest": 2})
    waypoints = _find(WaypointDiscovery(maps, timeout=0.05))

    assert "poi1" not in {wp.place_ref for wp in waypoints}
    assert "p1" in {wp.place_ref for wp in waypoints}


def test_deadline_returns_partial_results():
    maps = FakeMapService(place_delays={"dog_park": 2, "point_of_interest": 2})
    waypoints = _find(
        WaypointDiscovery(maps, concurrency=4, timeout=10), deadline=Deadline(0.1)
    )

    assert [wp.place_ref for wp in waypoints] == ["dp1", "p1", "p2"]


def test_all_categories_failing_yields_no_waypoints():
    waypoints = _find(WaypointDiscovery(FakeMapService(fail_places=True), timeout=1))
    assert waypoints == []


def test_results_are_capped():
    places = {
        "park": [
            make_place(f"p{i}", f"Park {i}", ["park"], 40.0 + i / 1000, -74.0, 4.0)
            for i in range(25)
        ]
    }
    waypoints = _find(WaypointDiscovery(FakeMapService(places), timeout=1))
    assert len(waypoints) == 15


def test_place_searches_respect_the_concurrency_limit():
    categories = ["park", "dog_park", "tourist_attraction", "cemetery", "point_of_interest"]
    maps = FakeMapService(place_delays={category: 0.05 for category in categories})
    prefs = RoutePreferences(prefer_parks=True, water_fountains=True, shade=True)

    _find(WaypointDiscovery(maps, concurrency=2, timeout=1), preferences=prefs)

    assert sorted(maps.place_calls) == sorted(categories)
    assert maps.peak_place_calls == 2
