from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, List, TypeVar

from models.mapbox_models import DirectionsRequest, GeocodingRequest, Location, RouteResult

T = TypeVar("T")


@dataclass(frozen=True)
class Fetched(Generic[T]):
    """A provider result plus whether it was served from the response cache."""

    value: T
    cached: bool = False


class RoutingProvider(ABC):
    """External geocoding/directions providers must implement this."""

    @abstractmethod
    async def fetch_geocode(self, request: GeocodingRequest) -> Fetched[List[Location]]: ...

    @abstractmethod
    async def fetch_directions(self, request: DirectionsRequest) -> Fetched[RouteResult]: ...

    async def geocode(self, request: GeocodingRequest) -> List[Location]:
        return (await self.fetch_geocode(request)).value

    async def get_directions(self, request: DirectionsRequest) -> RouteResult:
        return (await self.fetch_directions(request)).value

    async def test_connection(self) -> bool:
        return True
