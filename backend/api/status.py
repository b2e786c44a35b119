from fastapi import APIRouter, Depends, Request

from api._resp import ok
from api.deps import get_services
from services.bootstrap import Services

router = APIRouter(tags=["status"])


@router.get("/health")
def health(request: Request, services: Services = Depends(get_services)):
    return ok(
        request,
        {
            "status": "healthy",
            "environment": services.settings.APP_ENV,
            "mapbox_configured": services.settings.has_mapbox_token,
        },
    )


@router.get("/api/cache/stats")
def cache_stats(request: Request, services: Services = Depends(get_services)):
    return ok(request, services.cache_stats())


@router.delete("/api/cache")
def clear_cache(request: Request, services: Services = Depends(get_services)):
    services.clear_caches()
    return ok(request, {"cleared": True})
