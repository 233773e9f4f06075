import logging
import aiohttp
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

# Option name -> query-string parameter of /api/search/places
PARAM_NAMES = {
    "q": "q",
    "lat": "lat",
    "lng": "lng",
    "radius": "radius",
    "min_lat": "minLat",
    "max_lat": "maxLat",
    "min_lng": "minLng",
    "max_lng": "maxLng",
    "category": "category",
    "locality": "locality",
    "region": "region",
    "country": "country",
    "page": "page",
    "limit": "limit",
}


class SearchAPIError(Exception):
    def __init__(self, status: int, body: str):
        self.status = status
        self.body = body
        super().__init__(f"Search API error {status}: {body}")


class PlacesSearchClient:
    """
    Async client for the place search API, for services that should not talk
    to Typesense directly.
    """

    def __init__(self, base_url: str = "", timeout_seconds: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds

    def build_params(self, **options) -> Dict[str, str]:
        params = {}
        for name, param in PARAM_NAMES.items():
            value = options.get(name)
            if value is None or value == "":
                continue
            params[param] = str(value)
        if options.get("autocomplete"):
            params["autocomplete"] = "true"
        return params

    async def search_places(self, **options) -> Dict[str, Any]:
        return await self._get("/api/search/places", self.build_params(**options))

    async def search_autocomplete(
        self,
        query: str,
        lat: Optional[float] = None,
        lng: Optional[float] = None,
        radius: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        if not query or not query.strip():
            return []
        if radius is None and lat:
            radius = 50
        result = await self.search_places(
            q=query,
            autocomplete=True,
            limit=limit or 8,
            lat=lat,
            lng=lng,
            radius=radius,
        )
        return result["hits"]

    async def search_in_bounds(
        self,
        min_lat: float,
        max_lat: float,
        min_lng: float,
        max_lng: float,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        """Map viewport browse."""
        return await self.search_places(
            min_lat=min_lat,
            max_lat=max_lat,
            min_lng=min_lng,
            max_lng=max_lng,
            category=category,
            limit=limit or 150,
        )

    async def search_nearby(
        self,
        lat: float,
        lng: float,
        query: Optional[str] = None,
        radius: Optional[float] = None,
        category: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> Dict[str, Any]:
        return await self.search_places(
            q=query or "*",
            lat=lat,
            lng=lng,
            radius=radius or 25,
            category=category,
            limit=limit or 50,
        )

    async def _get(self, path: str, params: Dict[str, str]) -> Dict[str, Any]:
        timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(
                f"{self.base_url}{path}",
                params=params,
                headers={"Accept": "application/json"},
            ) as resp:
                if resp.status >= 300:
                    body = await resp.text()
                    logger.error(f"Search API Error: {resp.status} - {body}")
                    raise SearchAPIError(resp.status, body)
                return await resp.json()
