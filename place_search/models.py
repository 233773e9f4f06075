from pydantic import BaseModel, ConfigDict
from typing import Any, Dict, List, Optional


class GeoPoint(BaseModel):
    lat: float
    lng: float


class GeoBounds(BaseModel):
    min_lat: float
    max_lat: float
    min_lng: float
    max_lng: float


class SearchRequest(BaseModel):
    """Validated inbound search parameters."""

    query: str = ""
    geo_point: Optional[GeoPoint] = None
    radius_km: Optional[float] = None
    bounds: Optional[GeoBounds] = None
    category: Optional[str] = None
    locality: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    page: int = 1
    limit: int = 20
    autocomplete: bool = False


class ParsedIntent(BaseModel):
    clean_query: str
    near_me: bool = False
    locality: Optional[str] = None
    region: Optional[str] = None


class EngineQuery(BaseModel):
    """Fully resolved Typesense search parameters for one request."""

    model_config = ConfigDict(frozen=True)

    q: str
    query_by: str
    query_by_weights: str
    sort_by: str
    per_page: int
    page: int
    num_typos: int
    prioritize_exact_match: bool = True
    prioritize_token_position: bool = True
    typo_tokens_threshold: int = 1
    drop_tokens_threshold: int = 2
    text_match_type: str = "max_score"
    highlight_full_fields: str = "name"
    highlight_affix_num_tokens: int = 4
    prefix: bool = False
    filter_by: Optional[str] = None

    def to_params(self) -> Dict[str, Any]:
        """Render as query-string parameters for the documents search endpoint."""
        params: Dict[str, Any] = {}
        for key, value in self.model_dump().items():
            if value is None:
                continue
            if key == "prefix" and not value:
                continue
            if isinstance(value, bool):
                value = "true" if value else "false"
            params[key] = value
        return params


class SearchResult(BaseModel):
    id: str
    fsq_place_id: str
    name: str = ""
    categories: List[str] = []
    locality: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    address: Optional[str] = None
    lat: float = 0
    lng: float = 0
    distance_meters: Optional[float] = None
    score: Optional[float] = None
    highlights: Optional[Dict[str, str]] = None
    popularity: Optional[float] = None
    tel: Optional[str] = None
    website: Optional[str] = None


class SearchFilters(BaseModel):
    locality: Optional[str] = None
    region: Optional[str] = None
    country: Optional[str] = None
    category: Optional[str] = None
    nearMe: bool = False
    lat: Optional[float] = None
    lng: Optional[float] = None
    radiusKm: Optional[float] = None


class SearchResponse(BaseModel):
    hits: List[SearchResult]
    found: int
    searchTimeMs: int
    page: int
    query: str
    filters: SearchFilters

    def to_public(self) -> Dict[str, Any]:
        # Absent hit fields are omitted; filters keep explicit nulls.
        data = self.model_dump()
        data["hits"] = [hit.model_dump(exclude_none=True) for hit in self.hits]
        return data


class SearchPlan(BaseModel):
    """Everything decided before the engine call."""

    intent: ParsedIntent
    engine_query: EngineQuery
    radius_km: Optional[float] = None
    locality: Optional[str] = None
    region: Optional[str] = None
