"""
Fishing spot API routes.

This module serves the single page, creates per-user map sessions, streams
their display commands and receives clicks and new spots from the browser.
"""

import logging
import os
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, HTMLResponse, StreamingResponse
from pydantic import BaseModel

from logic.config import get_settings
from logic.spots import get_spot_store
from logic.validation import sanitise_coordinate, sanitise_spot_name
from server.broadcast import broadcast_spot, event_generator
from server.sessions import MapSession, create_session, get_session

logger = logging.getLogger(__name__)

router = APIRouter()

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
STATIC_DIR = os.path.join(BASE_DIR, "static")


class MapClickRequest(BaseModel):
    """Request model for a click on the map surface."""

    lat: float
    lng: float


class MarkerClickRequest(BaseModel):
    """Request model for a click on a marker. Only the handle crosses the wire."""

    id: Optional[int] = None


class SpotRequest(BaseModel):
    """Request model for saving a new spot."""

    name: str
    latitude: float
    longitude: float


def require_session(session_id: str) -> MapSession:
    session = get_session(session_id)
    if session is None:
        raise HTTPException(404, f"Session '{session_id}' not found")
    return session


@router.get("/", response_class=HTMLResponse)
def index():
    """Serve the main HTML page.

    Returns:
        FileResponse with the single page application.
    """
    return FileResponse(os.path.join(STATIC_DIR, "index.html"))


@router.get("/api/spots")
def list_spots():
    """Get a snapshot of all stored spots.

    Returns:
        Dictionary with the spots in insertion order, their count and the store capacity.
    """
    store = get_spot_store()
    spots = store.get_all()
    return {
        "spots": [spot.model_dump() for spot in spots],
        "count": len(spots),
        "capacity": store.capacity,
    }


@router.post("/api/sessions")
async def open_session():
    """Create a map session for a newly loaded page.

    The session's stream starts with the tile layer, one marker per stored
    spot and a fit-bounds command.

    Returns:
        Dictionary with the session id and the page title.
    """
    session = create_session(get_spot_store())
    return {"session_id": session.id, "title": get_settings()["page_title"]}


@router.get("/api/sessions/{session_id}/stream")
async def stream(session_id: str):
    """Server-Sent Events (SSE) endpoint for a session's display commands.

    A reconnecting client resumes reading the same queue as long as the
    session has not expired.

    Args:
        session_id: Session returned by POST /api/sessions.

    Returns:
        StreamingResponse with text/event-stream content type.
    """
    session = require_session(session_id)
    return StreamingResponse(
        event_generator(session.surface.queue, session),
        media_type="text/event-stream",
    )


@router.post("/api/sessions/{session_id}/map-click")
async def map_click(session_id: str, payload: MapClickRequest):
    """Handle a click on the map surface.

    The dialog prompt is delivered on the session stream, not in the response.

    Args:
        session_id: Session the click came from.
        payload: Clicked coordinates.

    Returns:
        Dictionary with status.

    Raises:
        HTTPException: If the session is unknown or the coordinates are invalid.
    """
    session = require_session(session_id)
    lat = sanitise_coordinate(payload.lat)
    lng = sanitise_coordinate(payload.lng)

    session.view.map.handle_map_click(lat, lng)

    return {"status": "ok"}


@router.post("/api/sessions/{session_id}/marker-click")
async def marker_click(session_id: str, payload: MarkerClickRequest):
    """Handle a click on a marker.

    Unknown or stale handles resolve to no spot and are otherwise ignored.

    Args:
        session_id: Session the click came from.
        payload: Marker handle.

    Returns:
        Dictionary with the clicked spot, or None.
    """
    session = require_session(session_id)
    spot = session.view.map.handle_marker_click(payload.id)
    return {"spot": spot.model_dump() if spot is not None else None}


@router.post("/api/sessions/{session_id}/spots")
async def save_spot(session_id: str, payload: SpotRequest):
    """Save a new spot and show it to every user.

    Args:
        session_id: Session the spot was created in.
        payload: Spot name and coordinates.

    Returns:
        Dictionary with the saved spot and how many other sessions received it.

    Raises:
        HTTPException: If the session is unknown or the input is invalid.
    """
    session = require_session(session_id)
    name = sanitise_spot_name(payload.name)
    latitude = sanitise_coordinate(payload.latitude)
    longitude = sanitise_coordinate(payload.longitude)

    spot = session.view.save_marker_and_refresh(name, latitude, longitude)
    logger.info(f"Saved spot '{spot.name}' at {spot.latitude:f}, {spot.longitude:f}")

    shared_with = broadcast_spot(spot, sender_id=session.id)

    return {"status": "ok", "spot": spot.model_dump(), "shared_with": shared_with}
