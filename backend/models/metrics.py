# models/metrics.py
from __future__ import annotations
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from models.transport import TransportModeId

Rating = Literal["A", "B", "C", "D", "E"]

MAX_DISTANCE_M = 1_000_000  # 1000 km


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class LocationContext(CamelModel):
    country: Optional[str] = None
    region: Optional[str] = None


# ---- requests ----
class MetricsRequest(CamelModel):
    distance: float = Field(..., ge=0, le=MAX_DISTANCE_M)  # meters
    mode: TransportModeId
    duration: Optional[float] = Field(None, ge=0)  # seconds
    location_context: Optional[LocationContext] = None


class CompareRequest(CamelModel):
    distance: float = Field(..., ge=0, le=MAX_DISTANCE_M)
    modes: List[TransportModeId] = Field(..., min_length=1)
    duration: Optional[float] = Field(None, ge=0)
    location_context: Optional[LocationContext] = None


# ---- results ----
class CostRange(CamelModel):
    min: float
    max: float
    average: float


class MetricsDetails(CamelModel):
    emissions_factor: float
    distance_km: float
    breakdown: str


class RouteMetrics(CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, frozen=True
    )

    carbon_emissions: float  # kg CO2
    estimated_cost: float
    cost_range: Optional[CostRange] = None
    calories: Optional[int] = None
    health_impact: str
    environmental_rating: Rating
    details: MetricsDetails


class ModeMetrics(RouteMetrics):
    mode: TransportModeId


class Recommendations(CamelModel):
    recommended: List[TransportModeId]
    avoid: List[TransportModeId]
    message: str


class ComparisonSummary(CamelModel):
    best_option: ModeMetrics
    worst_option: ModeMetrics
    carbon_savings: float
    cost_savings: float
    recommendations: Recommendations


class ComparisonResult(CamelModel):
    comparison: List[ModeMetrics]
    summary: ComparisonSummary


class Methodology(CamelModel):
    emissions_factor: float
    methodology: str
    sources: List[str]
    factors: List[str]
    note: str
