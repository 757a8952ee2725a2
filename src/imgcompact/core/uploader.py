"""Compress-before-upload wrapper around an injected upload sink."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any, Protocol

from imgcompact.core.engine import CompressionEngine
from imgcompact.core.errors import CodecError, NotEligibleError
from imgcompact.models.asset import Asset
from imgcompact.models.policy import Policy
from imgcompact.models.result import CompressionResult
from imgcompact.utils import format_size

logger = logging.getLogger(__name__)

WORTHWHILE_RATIO = 0.9


class UploadSink(Protocol):
    def __call__(self, asset: Asset) -> Awaitable[Any]: ...


class PolicyStore(Protocol):
    def load(self) -> Policy: ...


@dataclass(frozen=True, slots=True)
class UploadReport:
    uploaded: Asset
    result: CompressionResult | None
    reason: str
    sink_response: Any = None

    @property
    def compressed(self) -> bool:
        return self.result is not None and self.uploaded is self.result.compressed


class CompressingUploader:
    """Compresses eligible assets and forwards the better of original/compressed.

    The original asset is uploaded whenever compression is not allowed,
    fails, or does not shrink the asset below ``threshold`` of its size.
    """

    def __init__(
        self,
        engine: CompressionEngine,
        sink: UploadSink,
        policy_store: PolicyStore,
        threshold: float = WORTHWHILE_RATIO,
    ) -> None:
        self.engine = engine
        self.sink = sink
        self.policy_store = policy_store
        self.threshold = threshold

    async def upload(self, asset: Asset) -> UploadReport:
        policy = self.policy_store.load()

        try:
            result = await self.engine.compress(asset, policy)
        except NotEligibleError as e:
            logger.debug("Uploading original: %s", e)
            return await self._send(asset, None, e.reason)
        except CodecError as e:
            logger.error("Compression failed, uploading original: %s", e)
            return await self._send(asset, None, f"compression failed: {e}")

        if result.is_worthwhile(self.threshold):
            logger.info(
                "Uploading compressed %s: %s -> %s (-%d%%)",
                asset.name or asset.format_name,
                format_size(result.original_size),
                format_size(result.compressed_size),
                round(result.saved_percent),
            )
            return await self._send(result.compressed, result, "compressed")

        logger.info("No significant size reduction, uploading original")
        return await self._send(asset, result, "no significant reduction")

    async def _send(self, asset: Asset, result: CompressionResult | None, reason: str) -> UploadReport:
        response = await self.sink(asset)
        return UploadReport(uploaded=asset, result=result, reason=reason, sink_response=response)
