"""
Server-sent events (SSE) broadcasting module.

This module turns a session's command queue into an SSE stream and fans new
spots out to every other live session so all users see them.
"""

import asyncio
import json
import logging

from logic.spots import Spot
from server.sessions import MapSession, expire_sessions, sessions

logger = logging.getLogger(__name__)


async def event_generator(queue: asyncio.Queue, session: MapSession = None):
    """Generate SSE events from the queue.

    While the generator runs the session counts as attached. When the stream
    ends the session stays registered, so a reconnecting client picks up the
    same queue until the session timeout runs out.

    Args:
        queue: Async queue to read events from.
        session: Session the queue belongs to.

    Yields:
        SSE formatted event strings.
    """
    if session is not None:
        session.attach()
    try:
        while True:
            data = await queue.get()
            yield f"data: {json.dumps(data)}\n\n"
    except asyncio.CancelledError:
        pass
    finally:
        if session is not None:
            session.detach()
            logger.debug(f"Stream for session {session.id} closed")


def broadcast_spot(spot: Spot, sender_id: str = None) -> int:
    """Add a newly saved spot to every live session except the sender.

    Expired sessions are swept first. Each session assigns its own marker
    handle for the spot.

    Args:
        spot: Spot that was just saved.
        sender_id: Session that saved it and already shows it.

    Returns:
        Number of sessions the spot was sent to.
    """
    expire_sessions()

    count = 0
    for session_id, session in list(sessions.items()):
        if session_id == sender_id:
            continue
        session.view.map.add_marker(spot)
        count += 1

    logger.debug(f"Broadcast spot '{spot.name}' to {count} sessions")
    return count
