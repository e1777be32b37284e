from abc import ABC, abstractmethod
from typing import Dict, List, Sequence, Tuple


class MapService(ABC):
    """Map service abstract interface"""

    @abstractmethod
    async def geocode(self, place_id: str) -> Tuple[float, float]:
        """Resolve a place reference to (lat, lng)"""
        pass

    @abstractmethod
    async def find_nearby_places(
        self, center: Tuple[float, float], radius_m: float, place_type: str
    ) -> List[Dict]:
        """Search for nearby places of one type"""
        pass

    @abstractmethod
    async def get_directions(
        self,
        points: Sequence[Tuple[float, float]],
        optimize_waypoints: bool = True,
    ) -> Dict:
        """Get walking route information

        Args:
            points: Ordered coordinates; first is the origin, last the destination
                and anything between is an intermediate waypoint
            optimize_waypoints: Let the provider reorder intermediate waypoints
        """
        pass

    @abstractmethod
    def street_view_url(self, location: Tuple[float, float], heading: float = 0) -> str:
        """Street-level image URL looking along heading from location"""
        pass
