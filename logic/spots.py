"""
Shared fishing spot store.

This module holds the process-wide list of spots every user sees. The list
keeps at most `capacity` entries; adding beyond that evicts the oldest one.
Writers are serialised by a single lock.
"""

import logging
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel

from logic.config import get_settings, load_seed_spots

logger = logging.getLogger(__name__)


class Spot(BaseModel):
    """A named point on the map.

    Two spots with the same coordinates and name are still different spots,
    so equality and hashing go by object identity.
    """

    latitude: float
    longitude: float
    name: str

    __eq__ = object.__eq__
    __hash__ = object.__hash__


class SpotStore:
    """Bounded, insertion-ordered collection of spots shared by all sessions.

    Attributes:
        capacity: Maximum number of spots kept before the oldest is evicted.
    """

    def __init__(self, capacity: int = 100, seeds: Optional[Iterable[Spot]] = None):
        self.capacity = capacity
        self._spots: List[Spot] = []
        self._lock = threading.Lock()
        for spot in seeds or []:
            self.add_spot(spot)

    def get_all(self) -> Tuple[Spot, ...]:
        """Return a snapshot of all spots in insertion order."""
        return tuple(self._spots)

    def add_spot(self, spot: Spot) -> Optional[Spot]:
        """Append a spot, evicting the oldest one when over capacity.

        Args:
            spot: Spot to store.

        Returns:
            The evicted spot, or None if nothing was evicted.
        """
        evicted = None
        with self._lock:
            self._spots.append(spot)
            if len(self._spots) > self.capacity:
                evicted = self._spots.pop(0)

        if evicted is not None:
            logger.info(f"Evicted spot '{evicted.name}' to stay within {self.capacity} spots")
        return evicted

    def __len__(self) -> int:
        return len(self._spots)


_spot_store: Optional[SpotStore] = None
_spot_store_lock = threading.Lock()


def spots_from_dicts(entries: Iterable[Dict]) -> List[Spot]:
    return [Spot(**entry) for entry in entries]


def get_spot_store() -> SpotStore:
    """Get the process-wide spot store.

    The store is created on first use, seeded from the configured seed file
    or the built-in demo spots.

    Returns:
        SpotStore instance.
    """
    global _spot_store
    with _spot_store_lock:
        if _spot_store is None:
            settings = get_settings()
            seeds = spots_from_dicts(load_seed_spots(settings["seed_spots_path"]))
            _spot_store = SpotStore(capacity=settings["capacity"], seeds=seeds)
            logger.info(f"Spot store initialised with {len(seeds)} seed spots")
        return _spot_store


def reset_spot_store():
    """Discard the process-wide store so the next access re-seeds it."""
    global _spot_store
    with _spot_store_lock:
        _spot_store = None
