"""Small spherical-geometry helpers shared by the map and route services."""
import math
from typing import List, Sequence, Tuple

EARTH_RADIUS_M = 6371000.0

Coords = Tuple[float, float]


def haversine_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate distance between two points (Haversine formula)"""
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)

    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def bearing_deg(origin: Coords, point: Coords) -> float:
    """Calculate the bearing (0-360 degrees) from origin to point."""
    lat1, lng1 = math.radians(origin[0]), math.radians(origin[1])
    lat2, lng2 = math.radians(point[0]), math.radians(point[1])

    d_lng = lng2 - lng1

    y = math.sin(d_lng) * math.cos(lat2)
    x = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(
        d_lng
    )

    bearing = math.degrees(math.atan2(y, x))
    return (bearing + 360) % 360


def destination_point(origin: Coords, bearing: float, distance_m: float) -> Coords:
    """Point reached by travelling distance_m from origin along bearing."""
    lat1 = math.radians(origin[0])
    lng1 = math.radians(origin[1])
    theta = math.radians(bearing)
    delta = distance_m / EARTH_RADIUS_M

    lat2 = math.asin(
        math.sin(lat1) * math.cos(delta)
        + math.cos(lat1) * math.sin(delta) * math.cos(theta)
    )
    lng2 = lng1 + math.atan2(
        math.sin(theta) * math.sin(delta) * math.cos(lat1),
        math.cos(delta) - math.sin(lat1) * math.sin(lat2),
    )
    return (math.degrees(lat2), (math.degrees(lng2) + 540) % 360 - 180)


def encode_polyline(points: Sequence[Coords], precision: int = 5) -> str:
    """Encode coordinates with the Google encoded polyline algorithm."""
    factor = 10 ** precision
    encoded: List[str] = []
    prev_lat = prev_lng = 0

    for lat, lng in points:
        lat_i = int(round(lat * factor))
        lng_i = int(round(lng * factor))
        for delta in (lat_i - prev_lat, lng_i - prev_lng):
            value = ~(delta << 1) if delta < 0 else delta << 1
            while value >= 0x20:
                encoded.append(chr((0x20 | (value & 0x1F)) + 63))
                value >>= 5
            encoded.append(chr(value + 63))
        prev_lat, prev_lng = lat_i, lng_i

    return "".join(encoded)
