import re
from typing import Callable, List, Optional, Tuple
from place_search.models import EngineQuery, GeoBounds, GeoPoint

# name(5) > categories(3) > locality(2) > region(1) > address(1)
QUERY_BY = "name,categories,location_locality,location_region,location_address"
QUERY_BY_WEIGHTS = "5,3,2,1,1"

# Characters with meaning inside a Typesense filter_by expression
FILTER_SPECIAL_CHARS = re.compile(r"[,()\[\]&|`]")


def _num(value: float) -> str:
    """Format a coordinate or distance without a trailing '.0'."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def _filter_value(value: str) -> str:
    if FILTER_SPECIAL_CHARS.search(value):
        return "`" + value.replace("`", "") + "`"
    return value


def is_wildcard(query: str) -> bool:
    return not query or query == "*"


def num_typos_for(query: str) -> int:
    """Shorter queries get less typo tolerance ("mi" and "bbq" must match exactly)."""
    length = len(re.sub(r"\s+", "", query))
    if length <= 3:
        return 0
    if length <= 5:
        return 1
    return 2


class SortContext:
    def __init__(self, geo_point: Optional[GeoPoint], bounds: Optional[GeoBounds], wildcard: bool):
        self.geo_point = geo_point
        self.bounds = bounds
        self.wildcard = wildcard

    def location(self) -> str:
        return f"location({_num(self.geo_point.lat)}, {_num(self.geo_point.lng)})"


# Ordered (predicate, sort expression) pairs, first match wins.
SORT_RULES: List[Tuple[Callable[[SortContext], bool], Callable[[SortContext], str]]] = [
    # Named search with a position: the right place beats the closest one
    (
        lambda c: c.geo_point is not None and not c.wildcard,
        lambda c: f"_text_match:desc,{c.location()}:asc,popularity:desc",
    ),
    # Nearby browse
    (
        lambda c: c.geo_point is not None and c.wildcard,
        lambda c: f"{c.location()}:asc,popularity:desc",
    ),
    # Map viewport browse
    (
        lambda c: c.bounds is not None and c.wildcard,
        lambda c: "popularity:desc",
    ),
    (
        lambda c: True,
        lambda c: "_text_match:desc,popularity:desc",
    ),
]


def select_sort(geo_point: Optional[GeoPoint], bounds: Optional[GeoBounds], query: str) -> str:
    ctx = SortContext(geo_point, bounds, is_wildcard(query))
    for predicate, expression in SORT_RULES:
        if predicate(ctx):
            return expression(ctx)
    raise AssertionError("default sort rule must always match")


class QueryBuilder:
    def build(
        self,
        query: str,
        geo_point: Optional[GeoPoint] = None,
        radius_km: Optional[float] = None,
        bounds: Optional[GeoBounds] = None,
        category: Optional[str] = None,
        locality: Optional[str] = None,
        region: Optional[str] = None,
        country: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
        autocomplete: bool = False,
    ) -> EngineQuery:
        query = query or "*"
        filter_by = self.build_filters(
            geo_point, radius_km, bounds, category, locality, region, country
        )
        return EngineQuery(
            q=query,
            query_by=QUERY_BY,
            query_by_weights=QUERY_BY_WEIGHTS,
            sort_by=select_sort(geo_point, bounds, query),
            per_page=limit,
            page=page,
            num_typos=num_typos_for(query),
            prefix=autocomplete,
            filter_by=filter_by,
        )

    def build_filters(
        self, geo_point, radius_km, bounds, category, locality, region, country
    ) -> Optional[str]:
        filters = []
        if geo_point is not None and radius_km is not None and radius_km > 0:
            filters.append(
                f"location:({_num(geo_point.lat)}, {_num(geo_point.lng)}, {_num(radius_km)} km)"
            )
        if bounds is not None:
            filters.append(f"geocodes_lat:[{_num(bounds.min_lat)}..{_num(bounds.max_lat)}]")
            filters.append(f"geocodes_lng:[{_num(bounds.min_lng)}..{_num(bounds.max_lng)}]")
        if category:
            filters.append(f"categories:{_filter_value(category)}")
        if locality:
            filters.append(f"location_locality:={_filter_value(locality)}")
        if region:
            filters.append(f"location_region:={_filter_value(region)}")
        if country:
            filters.append(f"location_country:={_filter_value(country)}")

        if not filters:
            return None
        return " && ".join(filters)


query_builder = QueryBuilder()
