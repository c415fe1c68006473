"""
Point <-> WKT text codec.

Rider positions and trip endpoints travel as ``POINT(<lng> <lat>)``, the
well-known-text form PostGIS accepts and ``ST_AsText`` returns.  Longitude
comes first.
"""

from __future__ import annotations

import re
from typing import Optional

from .entities import Coordinate

_POINT_RE = re.compile(
    r"^\s*(?:SRID=\d+;)?\s*POINT\s*\(\s*(?P<lng>\S+)\s+(?P<lat>\S+)\s*\)\s*$",
    re.IGNORECASE,
)


def encode_point(c: Coordinate) -> str:
    # repr() keeps every float digit, so decoding is exact
    return f"POINT({float(c.longitude)!r} {float(c.latitude)!r})"


def decode_point(text: Optional[str]) -> Optional[Coordinate]:
    """Parse WKT point text; ``None`` for anything that is not a valid point."""
    if not text:
        return None
    match = _POINT_RE.match(text)
    if match is None:
        return None
    try:
        point = Coordinate(
            latitude=float(match.group("lat")),
            longitude=float(match.group("lng")),
        )
    except ValueError:
        return None
    return point if point.in_domain else None
