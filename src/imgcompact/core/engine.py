"""Compression engine: plans, encodes, evaluates, and retries once."""

from __future__ import annotations

import logging
import time
from typing import Protocol

from imgcompact.core.dimensions import plan_dimensions
from imgcompact.core.eligibility import ineligible_reason
from imgcompact.core.errors import CodecError, NotEligibleError
from imgcompact.core.quality import plan_quality
from imgcompact.models.asset import Asset, Dimensions, EncodeRequest
from imgcompact.models.policy import MIN_QUALITY, Policy
from imgcompact.models.result import CompressionResult, Outcome
from imgcompact.utils import format_size

logger = logging.getLogger(__name__)

# Attempt #1 is kept if it shrinks the asset below this fraction of the original.
ACCEPT_RATIO = 0.9
# Attempt #2 is kept only if it beats attempt #1 by the same margin.
RETRY_IMPROVEMENT_RATIO = 0.9
RETRY_QUALITY_DROP = 0.4
RETRY_EDGE_FACTOR = 0.8


class Encoder(Protocol):
    async def encode(self, data: bytes, request: EncodeRequest) -> bytes: ...


class DimensionProber(Protocol):
    async def probe(self, data: bytes) -> Dimensions: ...


class CompressionEngine:
    """Adaptive single-asset compressor.

    The engine holds only its two collaborators, so one instance can serve
    any number of concurrent ``compress`` calls.
    """

    def __init__(self, encoder: Encoder, prober: DimensionProber) -> None:
        self.encoder = encoder
        self.prober = prober

    async def plan(self, asset: Asset, policy: Policy) -> EncodeRequest:
        """Build the first encode request for an eligible asset."""
        quality = plan_quality(asset, policy)

        longest_edge: int | None = None
        if policy.wants_resize:
            original = await self.prober.probe(asset.data)
            target = plan_dimensions(original, policy)
            if target is not None:
                longest_edge = target.longest_edge
            logger.debug("Dimensions %s -> %s", original, target or "unchanged")

        request = EncodeRequest(
            quality=quality.effective,
            format=asset.format,
            longest_edge=longest_edge,
        )
        logger.debug(
            "Planned %s (planned quality %.2f, quality applied: %s)",
            request.describe(),
            quality.planned,
            quality.apply_quality,
        )
        return request

    async def compress(self, asset: Asset, policy: Policy) -> CompressionResult:
        """Compress an asset, retrying once with harsher settings if needed.

        Raises:
            NotEligibleError: the policy does not allow compressing this asset.
            CodecError: the first encode attempt failed.
        """
        reason = ineligible_reason(asset, policy)
        if reason is not None:
            raise NotEligibleError(asset.format_name, reason)

        start = time.perf_counter()
        first_request = await self.plan(asset, policy)
        first = await self._encode(asset, first_request)

        ratio = len(first) / asset.size
        logger.info(
            "Attempt 1 for %s: %s -> %s (%.1f%%)",
            asset.name or asset.format_name,
            format_size(asset.size),
            format_size(len(first)),
            ratio * 100,
        )

        if ratio < ACCEPT_RATIO:
            return self._result(asset, first, first_request, Outcome.FIRST_ACCEPTED, 1, start)

        retry_request = self._retry_request(asset, policy, first_request)
        logger.info("Compression not effective, retrying with %s", retry_request.describe())
        try:
            second = await self._encode(asset, retry_request)
        except CodecError as e:
            logger.warning("Retry encode failed, keeping first attempt: %s", e)
            return self._result(asset, first, first_request, Outcome.RETRY_FAILED, 2, start)

        if len(second) < len(first) * RETRY_IMPROVEMENT_RATIO:
            logger.info("Retry accepted: %s", format_size(len(second)))
            return self._result(asset, second, retry_request, Outcome.RETRY_ACCEPTED, 2, start)

        logger.info("Retry did not improve enough (%s), keeping first attempt", format_size(len(second)))
        return self._result(asset, first, first_request, Outcome.RETRY_REJECTED, 2, start)

    def _retry_request(self, asset: Asset, policy: Policy, first: EncodeRequest) -> EncodeRequest:
        quality = max(MIN_QUALITY, round(plan_quality(asset, policy).planned - RETRY_QUALITY_DROP, 4))

        longest_edge: int | None = None
        if first.longest_edge is not None:
            longest_edge = int(first.longest_edge * RETRY_EDGE_FACTOR)
        elif policy.use_size_limits:
            longest_edge = int(max(policy.max_width, policy.max_height) * RETRY_EDGE_FACTOR)

        return EncodeRequest(
            quality=quality,
            format=first.format,
            longest_edge=max(1, longest_edge) if longest_edge is not None else None,
        )

    async def _encode(self, asset: Asset, request: EncodeRequest) -> bytes:
        try:
            data = await self.encoder.encode(asset.data, request)
        except CodecError:
            raise
        except Exception as e:
            raise CodecError(f"encoder failed: {e}") from e
        if not data:
            raise CodecError("encoder returned no data")
        return data

    def _result(
        self,
        asset: Asset,
        data: bytes,
        request: EncodeRequest,
        outcome: Outcome,
        attempts: int,
        start: float,
    ) -> CompressionResult:
        return CompressionResult(
            original_size=asset.size,
            compressed_size=len(data),
            compressed=Asset(data=data, format=asset.format, name=asset.name),
            request=request,
            outcome=outcome,
            attempts=attempts,
            elapsed_ms=int((time.perf_counter() - start) * 1000),
        )
