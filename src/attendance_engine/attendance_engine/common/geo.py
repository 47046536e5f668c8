from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

_FLOAT = r"[-+]?\d{1,3}(?:\.\d+)?"
_LABELED = re.compile(rf"lat(?:itude)?\s*[:=]\s*({_FLOAT}).*?(?:lng|lon|longitude)\s*[:=]\s*({_FLOAT})", re.IGNORECASE)
_PAIR = re.compile(rf"({_FLOAT})\s*[,/ ]\s*({_FLOAT})")


@dataclass(frozen=True)
class GeoPoint:
    lat: float
    lng: float


def parse_location_text(text: Optional[str]) -> Optional[GeoPoint]:
    """Extract a lat/lng pair from free text such as ``"37.56, 126.97"`` or ``"lat: 37.5 lng: 127.0"``.

    Returns None when nothing usable is found or the values are out of range.
    """
    if not text or not text.strip():
        return None
    m = _LABELED.search(text) or _PAIR.search(text)
    if not m:
        return None
    lat, lng = float(m.group(1)), float(m.group(2))
    if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
        return None
    return GeoPoint(lat=lat, lng=lng)
