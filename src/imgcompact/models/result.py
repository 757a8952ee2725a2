"""Compression result model."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from imgcompact.models.asset import Asset, EncodeRequest


class Outcome(str, Enum):
    """Which branch of the two-attempt sequence produced the result."""

    FIRST_ACCEPTED = "first_accepted"
    RETRY_ACCEPTED = "retry_accepted"
    RETRY_REJECTED = "retry_rejected"
    RETRY_FAILED = "retry_failed"

    @property
    def retried(self) -> bool:
        return self is not Outcome.FIRST_ACCEPTED


@dataclass(frozen=True, slots=True)
class CompressionResult:
    original_size: int
    compressed_size: int
    compressed: Asset
    request: EncodeRequest
    outcome: Outcome = Outcome.FIRST_ACCEPTED
    attempts: int = 1
    elapsed_ms: int = 0

    @property
    def compression_ratio(self) -> float:
        return self.compressed_size / self.original_size

    @property
    def saved_bytes(self) -> int:
        return max(0, self.original_size - self.compressed_size)

    @property
    def saved_percent(self) -> float:
        return (1 - self.compression_ratio) * 100.0

    def is_worthwhile(self, threshold: float = 0.9) -> bool:
        """Caller-side check: did compression shrink the asset enough to use it?"""
        return self.compression_ratio < threshold

    def to_dict(self) -> dict[str, object]:
        return {
            "original_size": self.original_size,
            "compressed_size": self.compressed_size,
            "compression_ratio": round(self.compression_ratio, 4),
            "format": self.compressed.format_name,
            "quality": self.request.quality,
            "longest_edge": self.request.longest_edge,
            "outcome": self.outcome.value,
            "attempts": self.attempts,
            "elapsed_ms": self.elapsed_ms,
        }
