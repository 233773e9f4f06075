import math
import re
from typing import Any, Dict, List, Optional
from place_search.models import SearchResult

TAVVY_PREFIX = "tavvy:"

OUTER_LIST_ARTIFACTS = re.compile(r"^\[['\"]?|['\"]?\]$")
PIECE_ARTIFACTS = re.compile(r"^['\"\s]+|['\"\s]+$")


def repair_categories(raw: Any) -> List[str]:
    """
    Repair a category list that arrives as a leaked Python list repr.

    The index sometimes stores the repr split on commas, e.g.
    ["['Dining and Drinking > Cafe'", " 'Coffee Shop']"]. Entries are joined
    back together, the outer brackets removed and the text re-split on "', '".
    """
    if not isinstance(raw, (list, tuple)):
        return []
    joined = ",".join(str(c) for c in raw)
    cleaned = OUTER_LIST_ARTIFACTS.sub("", joined)
    pieces = [PIECE_ARTIFACTS.sub("", piece).strip() for piece in cleaned.split("', '")]
    return [piece for piece in pieces if piece]


def _to_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _text(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return str(value)


def _distance_meters(hit: Dict[str, Any]) -> Optional[float]:
    distance = hit.get("geo_distance_meters")
    if isinstance(distance, dict):
        distance = distance.get("location")
    return _to_number(distance)


def _score(hit: Dict[str, Any]) -> Optional[float]:
    info = hit.get("text_match_info")
    if not isinstance(info, dict):
        return None
    return _to_number(info.get("score"))


def _highlights(hit: Dict[str, Any]) -> Optional[Dict[str, str]]:
    entries = hit.get("highlights")
    if not isinstance(entries, list):
        return None
    highlights = {}
    for entry in entries:
        if isinstance(entry, dict) and entry.get("snippet") and entry.get("field"):
            highlights[str(entry["field"])] = str(entry["snippet"])
    return highlights or None


def _stable_id(doc: Dict[str, Any]):
    raw_id = str(doc.get("id") or "")
    is_tavvy = raw_id.startswith(TAVVY_PREFIX)
    fsq_id = str(doc.get("fsq_id") or raw_id.removeprefix(TAVVY_PREFIX))
    if is_tavvy:
        return f"{TAVVY_PREFIX}{fsq_id}", fsq_id
    return f"fsq-{fsq_id}", fsq_id


def normalize_hit(hit: Any) -> SearchResult:
    """Map a raw Typesense hit to the public result shape. Never raises."""
    if not isinstance(hit, dict):
        hit = {}
    doc = hit.get("document")
    if not isinstance(doc, dict):
        doc = {}

    stable_id, fsq_id = _stable_id(doc)
    return SearchResult(
        id=stable_id,
        fsq_place_id=fsq_id,
        name=_text(doc.get("name")) or "",
        categories=repair_categories(doc.get("categories")),
        locality=_text(doc.get("location_locality")),
        region=_text(doc.get("location_region")),
        country=_text(doc.get("location_country")),
        address=_text(doc.get("location_address")),
        lat=_to_number(doc.get("geocodes_lat")) or 0,
        lng=_to_number(doc.get("geocodes_lng")) or 0,
        distance_meters=_distance_meters(hit),
        score=_score(hit),
        highlights=_highlights(hit),
        popularity=_to_number(doc.get("popularity")),
        tel=_text(doc.get("tel")),
        website=_text(doc.get("website")),
    )
