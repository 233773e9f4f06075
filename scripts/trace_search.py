import argparse
import asyncio
import json
import os
import sys

# Add the project root directory to the python path
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from place_search.core.config import settings
from place_search.core.errors import SearchServiceError
from place_search.main import plan_search, run_search
from place_search.validation import build_search_request


# Setup logging to file and console
class Tee(object):
    def __init__(self, *files):
        self.files = files

    def write(self, obj):
        for f in self.files:
            f.write(obj)
            f.flush()

    def flush(self):
        for f in self.files:
            f.flush()


async def trace_query(args):
    search_request = build_search_request(
        q=args.q,
        lat=args.lat,
        lng=args.lng,
        radius=args.radius,
        min_lat=args.min_lat,
        max_lat=args.max_lat,
        min_lng=args.min_lng,
        max_lng=args.max_lng,
        category=args.category,
        locality=args.locality,
        region=args.region,
        country=args.country,
        page=args.page,
        limit=args.limit,
        autocomplete="true" if args.autocomplete else None,
    )
    print(f"\n{'='*60}", flush=True)
    print(f"QUERY: {search_request.query}", flush=True)
    print(f"{'='*60}", flush=True)

    plan = plan_search(search_request)

    # 1. Intent Phase
    print("\n--- [Phase 1] Intent Parser ---", flush=True)
    print(json.dumps(plan.intent.model_dump(), indent=2), flush=True)

    # 2. Query Phase
    print("\n--- [Phase 2] Query Builder ---", flush=True)
    print(f"Radius: {plan.radius_km} km | Locality: {plan.locality} | Region: {plan.region}", flush=True)
    print(json.dumps(plan.engine_query.to_params(), indent=2), flush=True)

    if args.dry_run:
        return

    # 3. Recall + Normalize
    print(f"\n--- [Phase 3] Typesense @ {settings.TYPESENSE_HOST} ---", flush=True)
    try:
        response = await run_search(search_request)
    except SearchServiceError as e:
        print(f"FAILED ({e.status_code}): {e.message} {e.detail or ''}", flush=True)
        return

    print(f"Found: {response.found} in {response.searchTimeMs}ms", flush=True)
    for i, hit in enumerate(response.hits):
        dist = f"{hit.distance_meters:.0f}m" if hit.distance_meters is not None else "N/A"
        print(f"#{i+1} {hit.id} | {hit.name} (Dist: {dist}, Pop: {hit.popularity})", flush=True)
        print(f"    Categories: {hit.categories}", flush=True)
        print(f"    Location: {hit.locality}, {hit.region} {hit.country}", flush=True)


def main():
    parser = argparse.ArgumentParser(description="Trace a place search through each stage")
    parser.add_argument("q")
    parser.add_argument("--lat")
    parser.add_argument("--lng")
    parser.add_argument("--radius")
    parser.add_argument("--min-lat")
    parser.add_argument("--max-lat")
    parser.add_argument("--min-lng")
    parser.add_argument("--max-lng")
    parser.add_argument("--category")
    parser.add_argument("--locality")
    parser.add_argument("--region")
    parser.add_argument("--country")
    parser.add_argument("--page")
    parser.add_argument("--limit")
    parser.add_argument("--autocomplete", action="store_true")
    parser.add_argument("--dry-run", action="store_true", help="stop before calling Typesense")
    args = parser.parse_args()

    os.makedirs(settings.LOG_DIR, exist_ok=True)
    stdout = sys.stdout
    with open(settings.TRACE_LOG_PATH, "a") as f:
        sys.stdout = Tee(stdout, f)
        try:
            asyncio.run(trace_query(args))
        finally:
            sys.stdout = stdout


if __name__ == "__main__":
    main()
