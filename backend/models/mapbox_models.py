# models/mapbox_models.py
from __future__ import annotations
from typing import Annotated, Any, List, Literal, Optional, Tuple, Union
from pydantic import BaseModel, Field

from models.metrics import CamelModel, LocationContext

Coord = Annotated[float, Field(ge=-180, le=180)]
LngLat = Tuple[Coord, Coord]

Profile = Literal[
    "mapbox/walking",
    "mapbox/cycling",
    "mapbox/driving",
    "mapbox/driving-traffic",
]


# ---- requests ----
class GeocodingRequest(BaseModel):
    query: str = Field(..., min_length=2, max_length=200)
    limit: int = Field(5, ge=1, le=10)
    proximity: Optional[Tuple[float, float]] = None
    bbox: Optional[Tuple[float, float, float, float]] = None
    types: Optional[List[str]] = None

    def cache_options(self) -> dict:
        return {
            "limit": self.limit,
            "proximity": list(self.proximity) if self.proximity else None,
            "bbox": list(self.bbox) if self.bbox else None,
            "types": self.types,
        }


class DirectionsRequest(BaseModel):
    start: LngLat
    end: LngLat
    profile: Profile
    alternatives: bool = False
    steps: bool = True
    geometries: Literal["geojson", "polyline", "polyline6"] = "geojson"


class BatchDirectionsRequest(BaseModel):
    start: LngLat
    end: LngLat
    profiles: List[Profile] = Field(..., min_length=1)


# ---- results returned by the API ----
class Location(CamelModel):
    lat: float
    lng: float
    name: str
    place_id: Optional[str] = None
    location_context: Optional[LocationContext] = None


class RouteResult(CamelModel):
    distance: float  # meters
    duration: float  # seconds
    coordinates: List[List[float]] = Field(default_factory=list)
    geometry: Optional[str] = None
    instructions: Optional[List[str]] = None


# ---- raw provider payloads (keep permissive, extras ignored) ----
class MapboxFeature(BaseModel):
    id: Optional[str] = None
    place_name: str = ""
    center: Tuple[float, float]
    context: Optional[List[dict]] = None


class MapboxGeocodingResponse(BaseModel):
    features: List[MapboxFeature] = Field(default_factory=list)


class MapboxStep(BaseModel):
    instruction: Optional[str] = None
    maneuver: Optional[dict] = None

    def text(self) -> Optional[str]:
        return self.instruction or (self.maneuver or {}).get("instruction")


class MapboxLeg(BaseModel):
    steps: List[MapboxStep] = Field(default_factory=list)


class MapboxRoute(BaseModel):
    distance: Optional[float] = None
    duration: Optional[float] = None
    geometry: Any = None
    legs: List[MapboxLeg] = Field(default_factory=list)


class MapboxDirectionsResponse(BaseModel):
    code: Optional[str] = None
    routes: List[MapboxRoute] = Field(default_factory=list)


# ---- tagged provider result ----
class ProviderSuccess(BaseModel):
    kind: Literal["ok"] = "ok"
    status_code: int = 200
    data: Any


class ProviderFailure(BaseModel):
    kind: Literal["error"] = "error"
    status_code: int
    reason: str = ""
    body: str = ""


ProviderResult = Annotated[
    Union[ProviderSuccess, ProviderFailure], Field(discriminator="kind")
]
