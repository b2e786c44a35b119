# adapters/online/mapbox_client.py
from __future__ import annotations
import json
import logging
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Optional, TypeVar
from urllib.parse import quote

import httpx
from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from config import Settings
from core.cache import TTLCache, directions_cache_key, geocoding_cache_key
from core.exceptions import (
    CacheKeyError,
    NoRouteFoundError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimitError,
    ProviderRequestError,
    ProviderUnavailableError,
)
from core.interfaces import Fetched, RoutingProvider
from models.mapbox_models import (
    DirectionsRequest,
    GeocodingRequest,
    Location,
    MapboxDirectionsResponse,
    MapboxGeocodingResponse,
    MapboxRoute,
    ProviderFailure,
    ProviderResult,
    ProviderSuccess,
    RouteResult,
)
from services.emissions.gas_prices import GasPriceTable

logger = logging.getLogger(__name__)

_result_adapter: TypeAdapter[ProviderResult] = TypeAdapter(ProviderResult)

T = TypeVar("T")


class MapboxClient(RoutingProvider):
    """
    Geocoding / Directions against the Mapbox REST API.
    - Consults the matching TTLCache before each network call and fills it on success.
    - Raw JSON is decoded once into ProviderSuccess / ProviderFailure, then into typed results.
    - No retries and no request coalescing: a provider failure is terminal for the request.
    """

    def __init__(
        self,
        settings: Settings,
        geocoding_cache: TTLCache,
        directions_cache: TTLCache,
        gas_prices: GasPriceTable,
    ):
        self.base_url = settings.MAPBOX_BASE_URL
        self.access_token = settings.MAPBOX_ACCESS_TOKEN
        self.timeout = settings.HTTP_TIMEOUT_S
        self.geocoding_cache = geocoding_cache
        self.directions_cache = directions_cache
        self.gas_prices = gas_prices

        if not settings.has_mapbox_token:
            logger.warning("Mapbox access token not configured properly")

    async def _get(
        self, url: str, params: Dict[str, str], unavailable: ProviderUnavailableError
    ) -> ProviderResult:
        query = {**params, "access_token": self.access_token}
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                resp = await client.get(url, params=query)
        except httpx.HTTPError as e:
            logger.error("Mapbox request failed", extra={"url": url, "error": str(e)})
            raise unavailable from e

        if resp.status_code >= 400:
            return _result_adapter.validate_python(
                {
                    "kind": "error",
                    "status_code": resp.status_code,
                    "reason": resp.reason_phrase,
                    "body": resp.text,
                }
            )
        try:
            data = resp.json()
        except ValueError as e:
            logger.error("Mapbox returned non-JSON body", extra={"url": url})
            raise unavailable from e
        return _result_adapter.validate_python(
            {"kind": "ok", "status_code": resp.status_code, "data": data}
        )

    @staticmethod
    def _cache_key(builder, *args) -> Optional[str]:
        try:
            return builder(*args)
        except CacheKeyError as e:
            logger.warning("Cache key derivation failed, bypassing cache", extra={"error": str(e)})
            return None

    @staticmethod
    async def _through_cache(
        cache: TTLCache, key: Optional[str], creator: Callable[[], Awaitable[T]]
    ) -> Fetched[T]:
        # no key: plain miss, result is not stored
        if key is None:
            return Fetched(await creator())
        value, hit = await cache.aget_or_set(key, creator)
        if hit:
            logger.debug("Returning cached %s result", cache.name, extra={"cache_key": key})
        return Fetched(value, cached=hit)

    # ---- geocoding ----
    async def fetch_geocode(self, request: GeocodingRequest) -> Fetched[List[Location]]:
        cache_key = self._cache_key(
            geocoding_cache_key, request.query, request.cache_options()
        )
        return await self._through_cache(
            self.geocoding_cache, cache_key, partial(self._request_geocode, request)
        )

    async def _request_geocode(self, request: GeocodingRequest) -> List[Location]:
        params = {"limit": str(request.limit)}
        if request.proximity:
            params["proximity"] = ",".join(str(v) for v in request.proximity)
        if request.bbox:
            params["bbox"] = ",".join(str(v) for v in request.bbox)
        if request.types:
            params["types"] = ",".join(request.types)

        url = f"{self.base_url}/geocoding/v5/mapbox.places/{quote(request.query, safe='')}.json"
        logger.info("Making Mapbox geocoding request", extra={"query": request.query, **params})

        result = await self._get(
            url,
            params,
            ProviderUnavailableError(
                "Geocoding service temporarily unavailable",
                code="GEOCODING_SERVICE_ERROR",
            ),
        )
        if isinstance(result, ProviderFailure):
            raise self._geocoding_error(result)

        locations = self._decode_locations(result)
        logger.info(
            "Mapbox geocoding successful",
            extra={"query": request.query, "results_count": len(locations)},
        )
        return locations

    def _decode_locations(self, result: ProviderSuccess) -> List[Location]:
        try:
            payload = MapboxGeocodingResponse.model_validate(result.data)
        except PydanticValidationError as e:
            logger.error("Malformed Mapbox geocoding payload", extra={"error": str(e)})
            raise ProviderUnavailableError(
                "Geocoding service temporarily unavailable",
                code="GEOCODING_SERVICE_ERROR",
            ) from e
        return [
            Location(
                lat=f.center[1],
                lng=f.center[0],
                name=f.place_name,
                place_id=f.id,
                location_context=self.gas_prices.parse_location_context(f.context),
            )
            for f in payload.features
        ]

    @staticmethod
    def _geocoding_error(failure: ProviderFailure):
        logger.error(
            "Mapbox geocoding API error",
            extra={"status": failure.status_code, "body": failure.body[:500]},
        )
        if failure.status_code == 401:
            return ProviderAuthError("Invalid Mapbox access token")
        if failure.status_code == 429:
            return ProviderRateLimitError("Mapbox API rate limit exceeded")
        return ProviderRequestError(
            f"Mapbox geocoding failed: {failure.reason}",
            status_code=failure.status_code,
        )

    # ---- directions ----
    async def fetch_directions(self, request: DirectionsRequest) -> Fetched[RouteResult]:
        cache_key = self._cache_key(
            directions_cache_key, list(request.start), list(request.end), request.profile
        )
        return await self._through_cache(
            self.directions_cache, cache_key, partial(self._request_directions, request)
        )

    async def _request_directions(self, request: DirectionsRequest) -> RouteResult:
        coords = f"{request.start[0]},{request.start[1]};{request.end[0]},{request.end[1]}"
        url = f"{self.base_url}/directions/v5/{request.profile}/{coords}"
        params = {
            "alternatives": "true" if request.alternatives else "false",
            "steps": "true" if request.steps else "false",
            "geometries": request.geometries,
            "overview": "full",
        }
        logger.info(
            "Making Mapbox directions request",
            extra={"profile": request.profile, "coordinates": coords},
        )

        result = await self._get(
            url,
            params,
            ProviderUnavailableError(
                "Directions service temporarily unavailable",
                code="DIRECTIONS_SERVICE_ERROR",
            ),
        )
        if isinstance(result, ProviderFailure):
            raise self._directions_error(result)

        route = self._decode_route(result, request)
        logger.info(
            "Mapbox directions successful",
            extra={
                "profile": request.profile,
                "distance": route.distance,
                "duration": route.duration,
            },
        )
        return route

    @staticmethod
    def _decode_route(result: ProviderSuccess, request: DirectionsRequest) -> RouteResult:
        try:
            payload = MapboxDirectionsResponse.model_validate(result.data)
        except PydanticValidationError as e:
            logger.error("Malformed Mapbox directions payload", extra={"error": str(e)})
            raise ProviderUnavailableError(
                "Directions service temporarily unavailable",
                code="DIRECTIONS_SERVICE_ERROR",
            ) from e
        if not payload.routes:
            raise NoRouteFoundError("No route found between the specified locations")

        route = payload.routes[0]
        instructions = None
        if request.steps and route.legs and route.legs[0].steps:
            instructions = [t for t in (s.text() for s in route.legs[0].steps) if t]

        return RouteResult(
            distance=route.distance or 0,
            duration=route.duration or 0,
            coordinates=_route_coordinates(route, request.geometries),
            geometry=(
                route.geometry
                if isinstance(route.geometry, str) or route.geometry is None
                else json.dumps(route.geometry)
            ),
            instructions=instructions,
        )

    @staticmethod
    def _directions_error(failure: ProviderFailure):
        logger.error(
            "Mapbox directions API error",
            extra={"status": failure.status_code, "body": failure.body[:500]},
        )
        if failure.status_code == 401:
            return ProviderAuthError("Invalid Mapbox access token")
        if failure.status_code == 422:
            return ProviderRequestError(
                "Invalid coordinates or unreachable destination",
                status_code=422,
                code="MAPBOX_INVALID_REQUEST",
            )
        if failure.status_code == 429:
            return ProviderRateLimitError("Mapbox API rate limit exceeded")
        return ProviderRequestError(
            f"Mapbox directions failed: {failure.reason}",
            status_code=failure.status_code,
        )

    async def test_connection(self) -> bool:
        try:
            locations = await self.geocode(GeocodingRequest(query="London", limit=1))
        except ProviderError as e:
            logger.error("Mapbox connection test failed", extra={"error": str(e)})
            return False
        return len(locations) > 0


def _route_coordinates(route: MapboxRoute, geometries: str) -> List[List[float]]:
    if geometries != "geojson" or not route.geometry:
        return []
    geom: Any = route.geometry
    if isinstance(geom, str):
        try:
            geom = json.loads(geom)
        except ValueError:
            return []
    if isinstance(geom, dict):
        return list(geom.get("coordinates") or [])
    return []
