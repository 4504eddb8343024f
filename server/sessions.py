"""
Per-user map sessions.

Every page load gets its own MapSession: a queue of display commands that is
streamed to the browser, and a MainView holding the LeafletMap and its marker
handles. Nothing in here is shared between sessions except the spot store.

A session outlives a dropped stream so the browser's EventSource can reconnect
to the same queue. Sessions with no attached stream for longer than the
session timeout, or whose queue overflowed, are swept away.
"""

import asyncio
import logging
import time
import uuid
from typing import Dict, List, Optional

from logic.config import get_settings
from logic.markers import LeafletMap, MapClickEvent, MarkerClickEvent
from logic.spots import Spot, SpotStore

logger = logging.getLogger(__name__)


class QueueSurface:
    """Display surface that queues commands for the session's SSE stream.

    The queue is bounded. Once a message does not fit, the surface is marked
    as overflowed and drops further messages; the session is then expired.
    """

    def __init__(self, queue: Optional[asyncio.Queue] = None, maxsize: int = 0):
        self.queue = queue if queue is not None else asyncio.Queue(maxsize=maxsize)
        self.overflowed = False

    def send(self, message: dict):
        if self.overflowed:
            return
        try:
            self.queue.put_nowait(message)
        except asyncio.QueueFull:
            self.overflowed = True
            logger.warning(f"Command queue full ({self.queue.maxsize}), dropping {message['type']}")

    def add_tile_layer(self, url: str, attribution: str):
        self.send({"type": "addTileLayer", "url": url, "attribution": attribution})

    def add_marker(self, latitude: float, longitude: float, label: str, marker_id: int):
        self.send(
            {
                "type": "addMarker",
                "lat": latitude,
                "lng": longitude,
                "label": label,
                "id": marker_id,
            }
        )

    def fit_bounds(self, bounds: List[List[float]]):
        self.send({"type": "fitBounds", "bounds": bounds})

    def drain(self) -> List[dict]:
        """Pop every queued message without waiting."""
        messages = []
        while not self.queue.empty():
            messages.append(self.queue.get_nowait())
        return messages


class MainView:
    """The single page of the application, one per session.

    Shows every known spot on a LeafletMap, tells the user which marker they
    clicked, and asks for a name when they click the map.
    """

    def __init__(self, store: SpotStore, surface: QueueSurface):
        self.store = store
        self.surface = surface

        settings = get_settings()
        self.map = LeafletMap(
            surface,
            tile_layer_url=settings["tile_layer_url"],
            attribution=settings["tile_attribution"],
        )

        self.map.add_marker_click_listener(self.marker_clicked)
        self.map.add_map_click_listener(self.map_clicked)

        self.map.add_markers_and_zoom(store.get_all())

    def marker_clicked(self, event: MarkerClickEvent):
        self.surface.send(
            {
                "type": "notification",
                "message": f"User clicked on the marker {event.marker.name}",
            }
        )

    def map_clicked(self, event: MapClickEvent):
        """Ask the client to open the dialog for naming a new spot."""
        self.surface.send(
            {
                "type": "dialog",
                "message": "You selected the following coordinates: %f, %f"
                % (event.latitude, event.longitude),
                "lat": event.latitude,
                "lng": event.longitude,
            }
        )

    def save_marker_and_refresh(self, name: str, latitude: float, longitude: float) -> Spot:
        """Save a new spot in the shared store and add it to this map.

        Args:
            name: Spot name entered by the user.
            latitude: Clicked latitude.
            longitude: Clicked longitude.

        Returns:
            The stored spot.
        """
        spot = Spot(latitude=latitude, longitude=longitude, name=name)
        self.store.add_spot(spot)
        self.map.add_marker(spot)
        return spot


class MapSession:
    """A browser page's view together with its command queue.

    Attributes:
        streams: Number of SSE streams currently reading the queue.
        last_seen: Monotonic time of creation or of the last stream detaching.
    """

    def __init__(self, store: SpotStore, queue_size: int = 0):
        self.id = uuid.uuid4().hex
        self.surface = QueueSurface(maxsize=queue_size)
        self.view = MainView(store, self.surface)
        self.streams = 0
        self.last_seen = time.monotonic()

    def attach(self):
        self.streams += 1

    def detach(self):
        self.streams = max(self.streams - 1, 0)
        self.last_seen = time.monotonic()

    def is_expired(self, now: float, timeout: float) -> bool:
        """Check whether the session can be dropped.

        Args:
            now: Current monotonic time.
            timeout: Seconds a session may go without an attached stream.

        Returns:
            True if the queue overflowed, or no stream has been attached for
            longer than the timeout.
        """
        if self.surface.overflowed:
            return True
        return self.streams == 0 and now - self.last_seen > timeout


# Live sessions keyed by id. Only touched from the event loop.
sessions: Dict[str, MapSession] = {}


def expire_sessions(now: float = None, timeout: float = None) -> int:
    """Remove sessions without a stream for too long, or with a full queue.

    Args:
        now: Current monotonic time. Defaults to time.monotonic().
        timeout: Seconds allowed without a stream. Defaults to SESSION_TIMEOUT.

    Returns:
        Number of sessions removed.
    """
    if now is None:
        now = time.monotonic()
    if timeout is None:
        timeout = get_settings()["session_timeout"]

    expired = [session_id for session_id, session in sessions.items() if session.is_expired(now, timeout)]
    for session_id in expired:
        remove_session(session_id)

    if expired:
        logger.debug(f"Expired {len(expired)} sessions, {len(sessions)} left")
    return len(expired)


def create_session(store: SpotStore) -> MapSession:
    expire_sessions()

    # Always room for the initial load of every stored spot
    queue_size = get_settings()["session_queue_size"] + store.capacity
    session = MapSession(store, queue_size=queue_size)
    sessions[session.id] = session
    logger.debug(f"Created session {session.id}")
    return session


def get_session(session_id: str) -> Optional[MapSession]:
    return sessions.get(session_id)


def remove_session(session_id: str):
    if sessions.pop(session_id, None) is not None:
        logger.debug(f"Removed session {session_id}")
