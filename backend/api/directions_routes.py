# api/directions_routes.py
from __future__ import annotations
import asyncio
import logging

from fastapi import APIRouter, Depends, Request

from api._resp import ok
from api.deps import get_services
from core.exceptions import AppError
from models.mapbox_models import BatchDirectionsRequest, DirectionsRequest
from services.bootstrap import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/directions", tags=["directions"])

PROFILES = [
    {
        "id": "mapbox/walking",
        "name": "Walking",
        "description": "Pedestrian routing using footpaths and sidewalks",
        "icon": "🚶",
        "color": "#22c55e",
    },
    {
        "id": "mapbox/cycling",
        "name": "Cycling",
        "description": "Bicycle routing using bike lanes and roads",
        "icon": "🚴",
        "color": "#3b82f6",
    },
    {
        "id": "mapbox/driving",
        "name": "Driving",
        "description": "Car routing using roads and highways",
        "icon": "🚗",
        "color": "#ef4444",
    },
    {
        "id": "mapbox/driving-traffic",
        "name": "Driving (Traffic)",
        "description": "Car routing with real-time traffic data",
        "icon": "🚗",
        "color": "#f59e0b",
    },
]


@router.post("")
async def directions(
    req: DirectionsRequest, request: Request, services: Services = Depends(get_services)
):
    fetched = await services.provider.fetch_directions(req)
    route = fetched.value
    logger.info(
        "Directions request completed",
        extra={
            "profile": req.profile,
            "distance": route.distance,
            "route_duration": route.duration,
        },
    )
    return ok(request, route.dump(), cached=fetched.cached)


@router.post("/batch")
async def directions_batch(
    req: BatchDirectionsRequest,
    request: Request,
    services: Services = Depends(get_services),
):
    async def one(profile: str) -> dict:
        try:
            route = await services.provider.get_directions(
                DirectionsRequest(start=req.start, end=req.end, profile=profile)
            )
        except AppError as e:
            return {"profile": profile, "success": False, "error": e.message}
        return {"profile": profile, "success": True, "data": route.dump()}

    # profiles are independent; one failing does not fail the batch
    results = await asyncio.gather(*(one(p) for p in req.profiles))
    successful = sum(1 for r in results if r["success"])
    logger.info(
        "Batch directions request completed",
        extra={"profiles": req.profiles, "successful": successful},
    )
    return ok(
        request,
        {
            "routes": list(results),
            "summary": {
                "total": len(results),
                "successful": successful,
                "failed": len(results) - successful,
            },
        },
    )


@router.get("/profiles")
def profiles(request: Request):
    return ok(request, PROFILES)
