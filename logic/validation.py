"""
Validation and sanitization utilities.

This module contains functions for sanitizing spot data coming in from the
browser before it reaches the shared store.
"""

import math
from typing import Any

from fastapi import HTTPException

MAX_SPOT_NAME_LEN = 64


def sanitise_spot_name(value: str) -> str:
    """Sanitize and validate a spot name.

    Args:
        value: Spot name string.

    Returns:
        Sanitized spot name.

    Raises:
        HTTPException: If the name is blank or exceeds maximum length.
    """
    value = value.strip()
    if not value:
        raise HTTPException(400, "Missing spot name")
    if len(value) > MAX_SPOT_NAME_LEN:
        raise HTTPException(400, "Spot name too long")
    return value


def sanitise_coordinate(value: Any) -> float:
    """Sanitize and validate a latitude or longitude.

    Args:
        value: Value to convert to float.

    Returns:
        Float coordinate in degrees.

    Raises:
        HTTPException: If value is not a finite number.
    """
    if isinstance(value, bool):
        raise HTTPException(400, "Invalid coordinate")
    try:
        result = float(value)
    except (TypeError, ValueError):
        raise HTTPException(400, "Invalid coordinate")
    if not math.isfinite(result):
        raise HTTPException(400, "Invalid coordinate")
    return result
