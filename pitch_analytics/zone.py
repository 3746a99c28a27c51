"""
Strike zone geometry.

Defines the normalized strike-zone rectangle, the ball-vs-zone strike test,
and the zone sub-regions (shadow zone, top/bottom thirds) used by badge rules.
"""

import math
import numpy as np
from typing import Tuple

from config import STRIKE_ZONE, SHADOW_CORE_FRACTION

ZONE_LEFT = STRIKE_ZONE['left']
ZONE_RIGHT = STRIKE_ZONE['right']
ZONE_BOTTOM = STRIKE_ZONE['bottom']
ZONE_TOP = STRIKE_ZONE['top']
BALL_RADIUS = STRIKE_ZONE['ball_radius']


def _as_float(value) -> float:
    # Anything that isn't a number is classified like a missing location
    try:
        return float(value)
    except (TypeError, ValueError):
        return math.nan


def is_strike(x, y) -> bool:
    """Classify a pitch location as a strike.

    A pitch is a strike if the ball (a circle of radius BALL_RADIUS centered on
    the location) touches the zone rectangle anywhere. The closest point of the
    rectangle to the ball center is found by clamping, and the pitch is a strike
    when that point is within one radius.

    Inputs are classified as given: out-of-range values are legal and simply
    miss the zone, and NaN or non-numeric values are balls.

    Args:
        x (float): Horizontal location, -1 (left) to 1 (right)
        y (float): Vertical location, -1 (bottom) to 1 (top)

    Returns:
        bool: True for a strike
    """
    x = _as_float(x)
    y = _as_float(y)
    if math.isnan(x) or math.isnan(y):
        return False

    closest_x = max(ZONE_LEFT, min(x, ZONE_RIGHT))
    closest_y = max(ZONE_BOTTOM, min(y, ZONE_TOP))

    dx = x - closest_x
    dy = y - closest_y
    return dx * dx + dy * dy <= BALL_RADIUS * BALL_RADIUS


def classify_locations(xs, ys) -> np.ndarray:
    """Vectorized is_strike over coordinate arrays.

    Args:
        xs: Horizontal locations
        ys: Vertical locations (same length as xs)

    Returns:
        np.ndarray: Boolean strike flags
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)

    dx = xs - np.clip(xs, ZONE_LEFT, ZONE_RIGHT)
    dy = ys - np.clip(ys, ZONE_BOTTOM, ZONE_TOP)
    with np.errstate(invalid='ignore'):
        # NaN and inf compare False, same as the scalar version
        return dx * dx + dy * dy <= BALL_RADIUS * BALL_RADIUS


def in_zone(x, y) -> bool:
    """True if the pitch center lies inside the zone rectangle (edges included)."""
    x = _as_float(x)
    y = _as_float(y)
    return ZONE_LEFT <= x <= ZONE_RIGHT and ZONE_BOTTOM <= y <= ZONE_TOP


def zone_band(value, low: float, high: float, start: float, stop: float) -> bool:
    """Check whether value falls in a fractional band of the [low, high] interval.

    The interval is split by fractions of its length, so start=0, stop=1/3 is
    the lowest third and start=2/3, stop=1 the highest third. Both band edges
    are inclusive.

    Args:
        value (float): Coordinate to test
        low (float): Interval start
        high (float): Interval end
        start (float): Band start as a fraction of the interval
        stop (float): Band end as a fraction of the interval

    Returns:
        bool: True if low + span*start <= value <= low + span*stop
    """
    value = _as_float(value)
    span = high - low
    return low + span * start <= value <= low + span * stop


def _core_fractions() -> Tuple[float, float]:
    margin = (1.0 - SHADOW_CORE_FRACTION) / 2.0
    return margin, 1.0 - margin


def in_shadow_zone(x, y) -> bool:
    """True for pitches in the zone but outside its centered core rectangle.

    The core is a rectangle at SHADOW_CORE_FRACTION of the zone's width and
    height; the shadow zone is the band between the core and the zone edge.
    """
    if not in_zone(x, y):
        return False

    start, stop = _core_fractions()
    in_core = (zone_band(x, ZONE_LEFT, ZONE_RIGHT, start, stop) and
               zone_band(y, ZONE_BOTTOM, ZONE_TOP, start, stop))
    return not in_core


def in_bottom_third(y) -> bool:
    """True when y is in the lowest of three equal horizontal zone bands."""
    return zone_band(y, ZONE_BOTTOM, ZONE_TOP, 0.0, 1.0 / 3.0)


def in_top_third(y) -> bool:
    """True when y is in the highest of three equal horizontal zone bands."""
    return zone_band(y, ZONE_BOTTOM, ZONE_TOP, 2.0 / 3.0, 1.0)
