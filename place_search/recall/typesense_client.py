import asyncio
import logging
import aiohttp
from typing import Any, Dict
from place_search.core.config import settings
from place_search.core.errors import UpstreamTimeout, UpstreamUnavailable
from place_search.models import EngineQuery

logger = logging.getLogger(__name__)


class TypesenseClient:
    def __init__(self):
        self.search_url = (
            f"{settings.TYPESENSE_PROTOCOL}://{settings.TYPESENSE_HOST}:{settings.TYPESENSE_PORT}"
            f"/collections/{settings.TYPESENSE_COLLECTION}/documents/search"
        )
        self.api_key = settings.TYPESENSE_API_KEY
        self.timeout = settings.TYPESENSE_TIMEOUT_SECONDS

    async def search(self, engine_query: EngineQuery) -> Dict[str, Any]:
        """
        Run one documents search.

        The request is cancelled when the timeout elapses so no engine call
        outlives the API response. Failures are not retried here.
        """
        params = engine_query.to_params()
        try:
            return await asyncio.wait_for(self._fetch(params), timeout=self.timeout)
        except asyncio.TimeoutError:
            logger.error(f"[search/places] Typesense request timed out after {self.timeout}s")
            raise UpstreamTimeout()

    async def _fetch(self, params: Dict[str, Any]) -> Dict[str, Any]:
        headers = {"X-TYPESENSE-API-KEY": self.api_key}
        async with aiohttp.ClientSession() as session:
            async with session.get(self.search_url, params=params, headers=headers) as resp:
                if resp.status >= 300:
                    error_text = await resp.text()
                    logger.error(f"[search/places] Typesense {resp.status}: {error_text}")
                    raise UpstreamUnavailable(resp.status, error_text)
                return await resp.json()


typesense_client = TypesenseClient()
