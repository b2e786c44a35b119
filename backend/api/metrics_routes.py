# api/metrics_routes.py
from __future__ import annotations
import logging
import math
import time

from fastapi import APIRouter, Depends, Request

from api._resp import ok
from api.deps import get_services
from core.exceptions import ValidationError
from models.metrics import CompareRequest, MetricsRequest
from services.bootstrap import Services

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/metrics", tags=["metrics"])


@router.post("")
def compute_metrics(
    req: MetricsRequest, request: Request, services: Services = Depends(get_services)
):
    started = time.perf_counter()
    metrics = services.calculator.calculate_metrics(
        req.distance, req.mode, req.duration, req.location_context
    )
    logger.info(
        "Metrics calculation completed",
        extra={
            "mode": req.mode,
            "distance": req.distance,
            "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
        },
    )
    return ok(request, metrics.dump())


@router.post("/compare")
def compare_modes(
    req: CompareRequest, request: Request, services: Services = Depends(get_services)
):
    result = services.calculator.compare_summary(
        req.distance, req.modes, req.location_context
    )
    logger.info(
        "Metrics comparison completed",
        extra={
            "distance": req.distance,
            "modes": req.modes,
            "best_mode": result.summary.best_option.mode,
            "worst_mode": result.summary.worst_option.mode,
            "carbon_savings": result.summary.carbon_savings,
        },
    )
    return ok(request, result.dump())


@router.get("/transport-modes")
def transport_modes(request: Request, services: Services = Depends(get_services)):
    return ok(request, services.calculator.describe_modes())


@router.get("/recommendations/{distance}")
def recommendations(
    distance: float, request: Request, services: Services = Depends(get_services)
):
    if math.isnan(distance) or math.isinf(distance) or distance < 0:
        raise ValidationError("Distance must be a valid non-negative number")

    calc = services.calculator
    distance_km = distance / 1000.0
    recs = calc.get_recommendations(distance_km)
    detailed = [
        {
            **calc.get_mode(mode).to_dict(),
            "mode": mode,
            "metrics": calc.calculate_metrics(distance, mode).dump(),
        }
        for mode in recs.recommended
    ]
    return ok(
        request,
        {
            "distance": distance,
            "distanceKm": distance_km,
            "recommendations": recs.dump(),
            "detailedOptions": detailed,
        },
    )


@router.get("/methodology/{mode}")
def methodology(mode: str, request: Request, services: Services = Depends(get_services)):
    return ok(request, services.calculator.get_methodology(mode).dump())
