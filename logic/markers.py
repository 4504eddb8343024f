"""
Server-side wrapper for the Leaflet map widget.

The browser only knows markers by a small integer handle. LeafletMap keeps the
handle -> Spot association for one view so marker clicks coming back from the
client can be turned into MarkerClickEvents carrying the real Spot. The map
never owns the spots; the shared store does.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Protocol

from logic.config import OPEN_STREET_MAP_ATTRIBUTION, OPEN_STREET_MAP_LAYER
from logic.spots import Spot

logger = logging.getLogger(__name__)


class DisplaySurface(Protocol):
    """Client-side map the wrapper sends commands to."""

    def add_tile_layer(self, url: str, attribution: str) -> None: ...

    def add_marker(self, latitude: float, longitude: float, label: str, marker_id: int) -> None: ...

    def fit_bounds(self, bounds: List[List[float]]) -> None: ...


@dataclass
class MapClickEvent:
    """Fired when the map itself is clicked."""

    source: "LeafletMap"
    latitude: float
    longitude: float


@dataclass
class MarkerClickEvent:
    """Fired when a marker with a known handle is clicked."""

    source: "LeafletMap"
    marker: Spot


class LeafletMap:
    """Map component bridging server-side spots and the client-side widget."""

    def __init__(
        self,
        surface: DisplaySurface,
        tile_layer_url: str = OPEN_STREET_MAP_LAYER,
        attribution: str = OPEN_STREET_MAP_ATTRIBUTION,
    ):
        self.surface = surface
        self._id_to_marker: Dict[int, Spot] = {}
        self._next_marker_id = 0
        self._map_click_listeners: List[Callable[[MapClickEvent], None]] = []
        self._marker_click_listeners: List[Callable[[MarkerClickEvent], None]] = []

        self.surface.add_tile_layer(tile_layer_url, attribution)

    def add_marker(self, spot: Spot) -> int:
        """Add a marker to the map.

        Args:
            spot: Spot to show.

        Returns:
            Handle the client will send back when the marker is clicked.
        """
        marker_id = self._next_marker_id
        self._next_marker_id += 1
        self._id_to_marker[marker_id] = spot

        self.surface.add_marker(spot.latitude, spot.longitude, spot.name, marker_id)
        return marker_id

    def add_markers_and_zoom(self, spots: Iterable[Spot]):
        """Add all given markers and fit the view around them.

        Latitudes and longitudes are sorted independently, so the two corners
        are (min lat, min long) and (max lat, max long) even when those values
        come from different spots. An empty list fits (0, 0) - (0, 0).

        Args:
            spots: Spots to add.
        """
        spots = list(spots)
        for spot in spots:
            self.add_marker(spot)

        latitudes = sorted(s.latitude for s in spots)
        longitudes = sorted(s.longitude for s in spots)

        lat1 = latitudes[0] if latitudes else 0.0
        long1 = longitudes[0] if longitudes else 0.0
        lat2 = latitudes[-1] if latitudes else 0.0
        long2 = longitudes[-1] if longitudes else 0.0

        self.fit_bounds(lat1, long1, lat2, long2)

    def fit_bounds(self, lat1: float, long1: float, lat2: float, long2: float):
        """Zoom/pan the map to the given rectangle.

        Args:
            lat1: Top left corner latitude.
            long1: Top left corner longitude.
            lat2: Bottom right corner latitude.
            long2: Bottom right corner longitude.
        """
        self.surface.fit_bounds([[lat1, long1], [lat2, long2]])

    def resolve_click(self, marker_id: Optional[int]) -> Optional[Spot]:
        """Map a client marker handle back to its spot, or None if unknown."""
        if marker_id is None:
            return None
        return self._id_to_marker.get(marker_id)

    def handle_map_click(self, latitude: float, longitude: float):
        event = MapClickEvent(self, latitude, longitude)
        for listener in list(self._map_click_listeners):
            listener(event)

    def handle_marker_click(self, marker_id: Optional[int]) -> Optional[Spot]:
        """Resolve a marker click from the client and notify listeners.

        Stale or unknown handles are ignored.

        Args:
            marker_id: Handle sent by the client.

        Returns:
            The clicked spot, or None if the handle is unknown.
        """
        spot = self.resolve_click(marker_id)
        if spot is None:
            logger.debug(f"Ignoring click on unknown marker {marker_id}")
            return None

        event = MarkerClickEvent(self, spot)
        for listener in list(self._marker_click_listeners):
            listener(event)
        return spot

    def add_map_click_listener(self, listener: Callable[[MapClickEvent], None]) -> Callable[[], None]:
        """Register a map click listener.

        Returns:
            Callable that removes the listener.
        """
        return self._register(self._map_click_listeners, listener)

    def add_marker_click_listener(self, listener: Callable[[MarkerClickEvent], None]) -> Callable[[], None]:
        """Register a marker click listener.

        Returns:
            Callable that removes the listener.
        """
        return self._register(self._marker_click_listeners, listener)

    @staticmethod
    def _register(listeners: list, listener) -> Callable[[], None]:
        listeners.append(listener)

        def remove():
            if listener in listeners:
                listeners.remove(listener)

        return remove
