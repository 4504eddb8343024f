"""
Tests for the LeafletMap marker handle map.

Run with: python -m pytest tests/test_markers.py
"""

from logic.config import OPEN_STREET_MAP_ATTRIBUTION, OPEN_STREET_MAP_LAYER
from logic.markers import LeafletMap, MapClickEvent, MarkerClickEvent
from logic.spots import Spot


class RecordingSurface:
    """Display surface that records every command it receives."""

    def __init__(self):
        self.commands = []

    def add_tile_layer(self, url, attribution):
        self.commands.append(("add_tile_layer", url, attribution))

    def add_marker(self, latitude, longitude, label, marker_id):
        self.commands.append(("add_marker", latitude, longitude, label, marker_id))

    def fit_bounds(self, bounds):
        self.commands.append(("fit_bounds", bounds))


def test_constructor_sets_base_layer():
    """Test that creating the map sets the OpenStreetMap base layer."""
    surface = RecordingSurface()
    LeafletMap(surface)
    assert surface.commands == [("add_tile_layer", OPEN_STREET_MAP_LAYER, OPEN_STREET_MAP_ATTRIBUTION)]


def test_handles_are_sequential_and_never_reused():
    """Test that handles count up from 0 and lookups never free one."""
    surface = RecordingSurface()
    leaflet = LeafletMap(surface)
    spot = Spot(latitude=60.0, longitude=21.0, name="A")

    handles = [leaflet.add_marker(spot) for _ in range(50)]
    for handle in handles[:10]:
        assert leaflet.resolve_click(handle) is spot

    assert handles == list(range(50))
    assert leaflet.add_marker(spot) == 50


def test_add_marker_sends_label_and_handle():
    """Test that add_marker tells the surface the coordinates, name and handle."""
    surface = RecordingSurface()
    leaflet = LeafletMap(surface)
    leaflet.add_marker(Spot(latitude=60.5, longitude=22.0, name="Kustavi"))
    assert surface.commands[-1] == ("add_marker", 60.5, 22.0, "Kustavi", 0)


def test_resolve_click_returns_exact_spot():
    """Test that resolve_click returns the very object passed to add_marker."""
    leaflet = LeafletMap(RecordingSurface())
    a = Spot(latitude=60.0, longitude=21.0, name="A")
    b = Spot(latitude=60.0, longitude=21.0, name="A")

    handle_a = leaflet.add_marker(a)
    handle_b = leaflet.add_marker(b)

    assert leaflet.resolve_click(handle_a) is a
    assert leaflet.resolve_click(handle_b) is b


def test_resolve_click_unknown_handle():
    """Test that unknown handles resolve to None."""
    leaflet = LeafletMap(RecordingSurface())
    leaflet.add_marker(Spot(latitude=1.0, longitude=2.0, name="A"))

    assert leaflet.resolve_click(1) is None
    assert leaflet.resolve_click(-1) is None
    assert leaflet.resolve_click(None) is None


def test_add_markers_and_zoom_empty():
    """Test that an empty list fits the view to (0, 0) - (0, 0)."""
    surface = RecordingSurface()
    leaflet = LeafletMap(surface)
    leaflet.add_markers_and_zoom([])
    assert surface.commands[-1] == ("fit_bounds", [[0.0, 0.0], [0.0, 0.0]])


def test_add_markers_and_zoom_two_spots():
    """Test that two spots are added and fitted corner to corner."""
    surface = RecordingSurface()
    leaflet = LeafletMap(surface)
    spots = [
        Spot(latitude=60.0, longitude=21.0, name="A"),
        Spot(latitude=60.5, longitude=22.0, name="B"),
    ]

    leaflet.add_markers_and_zoom(spots)

    assert surface.commands[1:] == [
        ("add_marker", 60.0, 21.0, "A", 0),
        ("add_marker", 60.5, 22.0, "B", 1),
        ("fit_bounds", [[60.0, 21.0], [60.5, 22.0]]),
    ]


def test_add_markers_and_zoom_sorts_each_axis_independently():
    """Test that corners take min and max of each axis separately."""
    surface = RecordingSurface()
    leaflet = LeafletMap(surface)
    spots = [
        Spot(latitude=60.465071, longitude=22.302923, name="Halistenkoski"),
        Spot(latitude=60.479928, longitude=21.328347, name="Kustavi"),
        Spot(latitude=60.124169, longitude=21.906335, name="Kirjais"),
    ]

    leaflet.add_markers_and_zoom(spots)

    # Corners mix coordinates from different spots
    assert surface.commands[-1] == ("fit_bounds", [[60.124169, 21.328347], [60.479928, 22.302923]])


def test_add_markers_and_zoom_single_spot():
    """Test that a single spot fits a zero-size rectangle on itself."""
    surface = RecordingSurface()
    leaflet = LeafletMap(surface)
    leaflet.add_markers_and_zoom([Spot(latitude=-10.0, longitude=5.0, name="A")])
    assert surface.commands[-1] == ("fit_bounds", [[-10.0, 5.0], [-10.0, 5.0]])


def test_marker_click_fires_event_with_spot():
    """Test that a known handle fires a MarkerClickEvent with its spot."""
    leaflet = LeafletMap(RecordingSurface())
    spot = Spot(latitude=60.0, longitude=21.0, name="A")
    handle = leaflet.add_marker(spot)
    received = []
    leaflet.add_marker_click_listener(received.append)

    assert leaflet.handle_marker_click(handle) is spot

    assert len(received) == 1
    assert isinstance(received[0], MarkerClickEvent)
    assert received[0].marker is spot
    assert received[0].source is leaflet


def test_stale_marker_click_is_ignored():
    """Test that unknown handles fire no event."""
    leaflet = LeafletMap(RecordingSurface())
    received = []
    leaflet.add_marker_click_listener(received.append)

    assert leaflet.handle_marker_click(42) is None
    assert leaflet.handle_marker_click(None) is None
    assert received == []


def test_map_click_fires_event():
    """Test that a map click fires a MapClickEvent with the coordinates."""
    leaflet = LeafletMap(RecordingSurface())
    received = []
    leaflet.add_map_click_listener(received.append)

    leaflet.handle_map_click(60.1, 21.2)

    assert received == [MapClickEvent(leaflet, 60.1, 21.2)]


def test_listener_registration_can_be_removed():
    """Test that the returned callable removes the listener."""
    leaflet = LeafletMap(RecordingSurface())
    received = []
    remove = leaflet.add_map_click_listener(received.append)

    leaflet.handle_map_click(1.0, 2.0)
    remove()
    remove()
    leaflet.handle_map_click(3.0, 4.0)

    assert len(received) == 1
