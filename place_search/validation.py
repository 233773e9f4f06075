import math
import re
from typing import Optional
from place_search.core.config import settings
from place_search.core.errors import ClientInputError
from place_search.models import GeoBounds, GeoPoint, SearchRequest

CONTROL_CHARS = re.compile(r"[\x00-\x1f]")
TRUTHY = {"true", "1"}
LEADING_INT = re.compile(r"\s*[+-]?\d+")


def parse_float(name: str, value: Optional[str]) -> Optional[float]:
    if value is None or value.strip() == "":
        return None
    try:
        number = float(value)
    except ValueError:
        raise ClientInputError(f"Invalid number for '{name}'")
    if not math.isfinite(number):
        raise ClientInputError(f"Invalid number for '{name}'")
    return number


def parse_int(value: Optional[str], default: int) -> int:
    """Read the leading integer ("2.5" -> 2, "20px" -> 20); default when there is none."""
    match = LEADING_INT.match(value or "")
    if match is None:
        return default
    return int(match.group(0))


def clamp(value: int, lower: int, upper: int) -> int:
    return max(lower, min(value, upper))


def sanitize_query(raw: Optional[str]) -> str:
    query = (raw or "").strip()
    if len(query) > settings.MAX_QUERY_LENGTH:
        raise ClientInputError(f"Query too long (max {settings.MAX_QUERY_LENGTH} chars)")
    return CONTROL_CHARS.sub("", query)


def build_search_request(
    q: Optional[str] = None,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    min_lat: Optional[str] = None,
    max_lat: Optional[str] = None,
    min_lng: Optional[str] = None,
    max_lng: Optional[str] = None,
    category: Optional[str] = None,
    locality: Optional[str] = None,
    region: Optional[str] = None,
    country: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    autocomplete: Optional[str] = None,
) -> SearchRequest:
    """Validate raw query-string values. Raises ClientInputError before any engine call."""
    query = sanitize_query(q)

    lat_value = parse_float("lat", lat)
    lng_value = parse_float("lng", lng)
    geo_point = None
    if lat_value is not None and lng_value is not None:
        geo_point = GeoPoint(lat=lat_value, lng=lng_value)

    radius_km = parse_float("radius", radius)
    if radius_km is not None:
        radius_km = min(radius_km, settings.MAX_RADIUS_KM) if radius_km > 0 else None

    corners = [
        parse_float("minLat", min_lat),
        parse_float("maxLat", max_lat),
        parse_float("minLng", min_lng),
        parse_float("maxLng", max_lng),
    ]
    bounds = None
    if all(c is not None for c in corners):
        bounds = GeoBounds(
            min_lat=corners[0], max_lat=corners[1], min_lng=corners[2], max_lng=corners[3]
        )

    return SearchRequest(
        query=query,
        geo_point=geo_point,
        radius_km=radius_km,
        bounds=bounds,
        category=category or None,
        locality=locality or None,
        region=region or None,
        country=country or None,
        page=clamp(parse_int(page, 1), 1, settings.MAX_PAGE),
        limit=clamp(parse_int(limit, settings.DEFAULT_LIMIT), 1, settings.MAX_LIMIT),
        autocomplete=(autocomplete or "").strip().lower() in TRUTHY,
    )
