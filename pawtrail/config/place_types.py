"""
Place Types Configuration for Pet Walk Planning
Google Places types used for waypoint search and the groupings the scorer relies on.
"""

from typing import Dict, Iterable, List


PARK = "park"
DOG_PARK = "dog_park"
TOURIST_ATTRACTION = "tourist_attraction"
POINT_OF_INTEREST = "point_of_interest"
CEMETERY = "cemetery"

# Essential Google Places API types for walk waypoints
COMMON_GOOGLE_TYPES = {
    # Green space
    PARK,
    DOG_PARK,
    "national_park",
    "natural_feature",
    "hiking_area",
    "garden",
    "botanical_garden",
    # Sights
    TOURIST_ATTRACTION,
    POINT_OF_INTEREST,
    "plaza",
    "marina",
    # Quiet spaces
    CEMETERY,
}

# Search categories that Places API (New) does not accept as includedTypes;
# these are searched without a type filter.
UNFILTERED_SEARCH_TYPES = {POINT_OF_INTEREST}

# Preference flag -> categories searched for it
PREFERENCE_CATEGORY_MAPPING: Dict[str, List[str]] = {
    "prefer_parks": [PARK, DOG_PARK],
    "water_fountains": [TOURIST_ATTRACTION],
    "shade": [PARK, CEMETERY],
}

# Categories searched for every walk
DEFAULT_SEARCH_CATEGORIES = [PARK, POINT_OF_INTEREST]

PARK_TYPES = {PARK, "national_park"}
NATURAL_TYPES = PARK_TYPES | {"natural_feature"}
ATTRACTION_TYPES = {TOURIST_ATTRACTION, POINT_OF_INTEREST}
QUIET_TYPES = {CEMETERY, "garden", "botanical_garden"}


def is_valid_google_type(place_type: str) -> bool:
    """Check if a place type is valid according to our common Google types."""
    return place_type in COMMON_GOOGLE_TYPES


def is_park(place_types: Iterable[str]) -> bool:
    return any(t in PARK_TYPES for t in place_types)


def is_dog_park(place_types: Iterable[str]) -> bool:
    return DOG_PARK in place_types


def is_attraction(place_types: Iterable[str]) -> bool:
    return TOURIST_ATTRACTION in place_types


def is_quiet(place_types: Iterable[str]) -> bool:
    return any(t in QUIET_TYPES for t in place_types)


def scenic_weight(place_types: Iterable[str]) -> float:
    """Scenic value of a single waypoint from its types."""
    types = set(place_types)
    if types & NATURAL_TYPES:
        return 1.0
    if types & ATTRACTION_TYPES:
        return 0.7
    return 0.3


def filter_supported_types(google_types: List[str]) -> List[str]:
    """Filter a list of Google types to only include supported ones."""
    seen = set()
    result = []

    for google_type in google_types:
        if is_valid_google_type(google_type) and google_type not in seen:
            seen.add(google_type)
            result.append(google_type)

    return result
