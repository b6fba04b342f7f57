"""
Thailand Post Tracking Gateway.

Fetches tracking history from the carrier API, normalizes it into a
TrackingResult and memoizes it in the TrackingCache. No retries happen
at this layer; a failed upstream call surfaces immediately.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, Optional

import httpx
from pydantic import ValidationError

from parcel_tracker.app.core.config import Settings, settings
from parcel_tracker.app.core.exceptions import (
    ConfigurationError,
    MalformedResponseError,
    UpstreamError,
    UpstreamTimeoutError,
)
from parcel_tracker.app.core.observability import current_correlation_id
from parcel_tracker.app.schemas.thailand_post import CarrierTrackRequest, CarrierTrackResponse
from parcel_tracker.app.schemas.tracking import TrackingResult
from parcel_tracker.app.services.status_normalizer import normalize_events
from parcel_tracker.app.services.tracking_cache import TrackingCache

logger = logging.getLogger("parcel_tracker.gateway")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ThailandPostGateway:
    """
    Client for the Thailand Post track endpoint.

    Args:
        config: Settings carrying endpoint, token, language and timeout
        cache: Response cache (a fresh one with the configured TTL by default)
        client: Shared httpx client; one is opened per request when omitted
        now: Clock used for `last_updated` stamps
    """

    def __init__(
        self,
        config: Settings = settings,
        cache: Optional[TrackingCache] = None,
        client: Optional[httpx.AsyncClient] = None,
        now: Callable[[], datetime] = _utcnow,
    ):
        self.config = config
        self.cache = cache if cache is not None else TrackingCache(ttl_seconds=config.tracking_cache_ttl_seconds)
        self._client = client
        self._now = now

    def is_configured(self) -> bool:
        token = self.config.thailand_post_api_token
        return bool(token and token.strip())

    def clear_cache(self, tracking_id: Optional[str] = None) -> None:
        self.cache.invalidate(tracking_id)

    def cache_stats(self) -> Dict[str, object]:
        return self.cache.stats()

    async def fetch_status(self, tracking_id: str, force_refresh: bool = False) -> TrackingResult:
        """
        Fetch and normalize tracking information for one tracking number.

        An unknown tracking number is not an error: the carrier having no
        record yields an UNKNOWN result with empty history.

        Raises:
            ConfigurationError: API token is not set
            UpstreamTimeoutError: Carrier did not answer before the deadline
            MalformedResponseError: Payload could not be understood
            UpstreamError: Non-2xx status, transport failure or `status: false`
        """
        # 1. Cache
        if not force_refresh:
            cached = self.cache.get(tracking_id)
            if cached is not None:
                logger.debug("Using cached data for %s", tracking_id)
                return cached

        # 2. Configuration
        if not self.is_configured():
            raise ConfigurationError()

        # 3. Request
        request_body = CarrierTrackRequest(
            status="all",
            language=self.config.thailand_post_language,
            barcode=[tracking_id],
        )
        logger.info(
            "Fetching tracking data for %s from Thailand Post API", tracking_id,
            extra={"tracking_id": tracking_id, "correlation_id": current_correlation_id()}
        )
        response = await self._post(request_body.model_dump())

        # 4. Response validation
        payload = self._parse_response(response)

        # 5. Normalization
        events = payload.response.items.get(tracking_id) or []
        if not events:
            result = TrackingResult.empty(self._now())
        else:
            current_status, history = normalize_events(events)
            result = TrackingResult(status=current_status, history=history, last_updated=self._now())

        self.cache.put(tracking_id, result)

        track_count = payload.response.track_count
        if track_count is not None:
            logger.info(
                "Track count: %s/%s", track_count.count_number, track_count.track_count_limit,
                extra={
                    "tracking_id": tracking_id,
                    "track_date": track_count.track_date,
                    "correlation_id": current_correlation_id(),
                }
            )

        return result

    async def fetch_many(self, tracking_ids: Iterable[str], force_refresh: bool = False) -> Dict[str, TrackingResult]:
        """
        Fetch several tracking numbers one after another.

        Sequential on purpose, to stay inside the carrier's rate limit.
        A failing tracking number gets an UNKNOWN result with empty history;
        the batch itself never fails.
        """
        results: Dict[str, TrackingResult] = {}

        for tracking_id in tracking_ids:
            try:
                results[tracking_id] = await self.fetch_status(tracking_id, force_refresh)
            except UpstreamError as exc:
                logger.error(
                    "Error fetching tracking for %s: %s", tracking_id, exc.message,
                    extra={
                        "tracking_id": tracking_id,
                        "error_code": exc.error_code,
                        "correlation_id": current_correlation_id(),
                    }
                )
                results[tracking_id] = TrackingResult.empty(self._now())

        return results

    async def _post(self, body: dict) -> httpx.Response:
        """POST to the carrier, bounded by the configured deadline."""
        url = self.config.thailand_post_api_url
        timeout = self.config.thailand_post_timeout_seconds
        headers = {
            "Authorization": self.config.thailand_post_api_token,
            "Content-Type": "application/json",
        }

        try:
            if self._client is not None:
                return await asyncio.wait_for(
                    self._client.post(url, json=body, headers=headers, timeout=timeout),
                    timeout=timeout,
                )
            async with httpx.AsyncClient() as client:
                return await asyncio.wait_for(
                    client.post(url, json=body, headers=headers, timeout=timeout),
                    timeout=timeout,
                )
        except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
            raise UpstreamTimeoutError(self.config.thailand_post_timeout_ms) from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"Network error contacting Thailand Post API: {exc}") from exc

    def _parse_response(self, response: httpx.Response) -> CarrierTrackResponse:
        if not response.is_success:
            raise UpstreamError(
                f"Thailand Post API error: {response.status_code} {response.reason_phrase}",
                upstream_status=response.status_code,
            )

        try:
            payload = CarrierTrackResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error(
                "Malformed response from Thailand Post API",
                extra={"payload": response.text, "error": str(exc), "correlation_id": current_correlation_id()}
            )
            raise MalformedResponseError(upstream_status=response.status_code) from exc

        if not payload.status:
            raise UpstreamError(
                payload.message or "Unknown error from Thailand Post API",
                upstream_status=response.status_code,
            )

        if payload.response is None:
            logger.error(
                "Thailand Post success response without body",
                extra={"payload": response.text, "correlation_id": current_correlation_id()}
            )
            raise MalformedResponseError(
                "Thailand Post API reported success without a response body",
                upstream_status=response.status_code,
            )

        return payload


# Shared instance used by the API layer
tracking_gateway = ThailandPostGateway()
