import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from place_search.core.config import settings
from place_search.core.errors import InternalError, RateLimitError, SearchServiceError
from place_search.models import SearchFilters, SearchPlan, SearchRequest, SearchResponse
from place_search.nlp.intent import intent_parser
from place_search.ratelimit import (
    RateLimiter,
    client_ip,
    get_rate_limiter,
    sweep_periodically,
)
from place_search.recall.normalizer import normalize_hit
from place_search.recall.query_builder import query_builder
from place_search.recall.typesense_client import typesense_client
from place_search.validation import build_search_request

logging.basicConfig(level=settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not settings.TYPESENSE_API_KEY:
        logger.warning("TYPESENSE_API_KEY is not set; search requests will be rejected upstream")
    sweeper = asyncio.create_task(
        sweep_periodically(get_rate_limiter, settings.RATE_LIMIT_SWEEP_SECONDS)
    )
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


app = FastAPI(title="Place Search Service", version="1.0", lifespan=lifespan)


@app.exception_handler(SearchServiceError)
async def search_error_handler(request: Request, exc: SearchServiceError):
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    message = "Method not allowed" if exc.status_code == 405 else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": message},
        headers=getattr(exc, "headers", None),
    )


def plan_search(search_request: SearchRequest) -> SearchPlan:
    """Parse the query, merge inferred and explicit filters, and build the engine query."""
    intent = intent_parser.parse(search_request.query)

    # Explicit filters beat inferred ones
    locality = search_request.locality or intent.locality
    region = search_request.region or intent.region

    radius_km = search_request.radius_km
    if intent.near_me and search_request.geo_point is not None and not radius_km:
        radius_km = settings.NEAR_ME_RADIUS_KM

    engine_query = query_builder.build(
        intent.clean_query or "*",
        geo_point=search_request.geo_point,
        radius_km=radius_km,
        bounds=search_request.bounds,
        category=search_request.category,
        locality=locality,
        region=region,
        country=search_request.country,
        page=search_request.page,
        limit=search_request.limit,
        autocomplete=search_request.autocomplete,
    )
    return SearchPlan(
        intent=intent,
        engine_query=engine_query,
        radius_km=radius_km,
        locality=locality,
        region=region,
    )


async def run_search(search_request: SearchRequest) -> SearchResponse:
    # 1. Intent + Query Phase
    plan = plan_search(search_request)
    intent = plan.intent
    search_query = intent.clean_query
    locality, region, radius_km = plan.locality, plan.region, plan.radius_km

    # 2. Recall Phase
    data = await typesense_client.search(plan.engine_query)

    # 3. Normalize
    raw_hits = data.get("hits") or []
    hits = [normalize_hit(hit) for hit in raw_hits]

    geo_point = search_request.geo_point
    return SearchResponse(
        hits=hits,
        found=int(data.get("found") or 0),
        searchTimeMs=int(data.get("search_time_ms") or 0),
        page=search_request.page,
        query=search_query,
        filters=SearchFilters(
            locality=locality,
            region=region,
            country=search_request.country,
            category=search_request.category,
            nearMe=intent.near_me,
            lat=geo_point.lat if geo_point else None,
            lng=geo_point.lng if geo_point else None,
            radiusKm=radius_km,
        ),
    )


@app.get("/api/search/places")
async def search_places(
    request: Request,
    q: Optional[str] = None,
    lat: Optional[str] = None,
    lng: Optional[str] = None,
    radius: Optional[str] = None,
    min_lat: Optional[str] = Query(None, alias="minLat"),
    max_lat: Optional[str] = Query(None, alias="maxLat"),
    min_lng: Optional[str] = Query(None, alias="minLng"),
    max_lng: Optional[str] = Query(None, alias="maxLng"),
    category: Optional[str] = None,
    locality: Optional[str] = None,
    region: Optional[str] = None,
    country: Optional[str] = None,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    autocomplete: Optional[str] = None,
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    ip = client_ip(request)
    if not rate_limiter.check(ip):
        logger.warning(f"[search/places] Rate limit exceeded for {ip}")
        raise RateLimitError(settings.RATE_LIMIT_WINDOW_SECONDS)

    try:
        search_request = build_search_request(
            q=q,
            lat=lat,
            lng=lng,
            radius=radius,
            min_lat=min_lat,
            max_lat=max_lat,
            min_lng=min_lng,
            max_lng=max_lng,
            category=category,
            locality=locality,
            region=region,
            country=country,
            page=page,
            limit=limit,
            autocomplete=autocomplete,
        )
        response = await run_search(search_request)
    except SearchServiceError:
        raise
    except Exception:
        logger.exception("[search/places] Unexpected error")
        raise InternalError()

    cache_control = (
        f"s-maxage={settings.CACHE_MAX_AGE_SECONDS}, "
        f"stale-while-revalidate={settings.CACHE_STALE_WHILE_REVALIDATE_SECONDS}"
    )
    return JSONResponse(
        content=response.to_public(), headers={"Cache-Control": cache_control}
    )


@app.get("/health")
async def health():
    return {"status": "ok", "typesense": settings.TYPESENSE_HOST}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.SERVICE_HOST, port=settings.APP_PORT)
