# api/geocode_routes.py
from __future__ import annotations
import logging
import time

from fastapi import APIRouter, Depends, Request

from api._resp import ok
from api.deps import get_services
from models.mapbox_models import GeocodingRequest
from services.bootstrap import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/geocode", tags=["geocode"])


@router.post("")
async def geocode(
    req: GeocodingRequest, request: Request, services: Services = Depends(get_services)
):
    started = time.perf_counter()
    fetched = await services.provider.fetch_geocode(req)
    locations = fetched.value
    logger.info(
        "Geocoding request completed",
        extra={
            "query": req.query,
            "results_count": len(locations),
            "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return ok(
        request,
        [loc.dump() for loc in locations],
        cached=fetched.cached,
    )


@router.get("/test")
async def geocode_test(request: Request, services: Services = Depends(get_services)):
    locations = await services.provider.geocode(GeocodingRequest(query="London", limit=1))
    data = {
        "status": "working",
        "testQuery": "London",
        "resultsCount": len(locations),
    }
    if locations:
        data["sampleResult"] = locations[0].dump()
    return ok(request, data)
