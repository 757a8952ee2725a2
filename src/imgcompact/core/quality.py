"""Quality planner: derives the encode quality from policy, size and format."""

from __future__ import annotations

from dataclasses import dataclass

from imgcompact.models.asset import Asset, ImageFormat
from imgcompact.models.policy import Policy

KIB = 1024
MIB = 1024 * 1024

# (size threshold in bytes, quality cap), checked largest first
SIZE_CAPS: tuple[tuple[int, float], ...] = (
    (MIB, 0.5),
    (500 * KIB, 0.6),
)
PNG_QUALITY_CAP = 0.5
BYPASS_QUALITY = 1.0


@dataclass(frozen=True, slots=True)
class QualityPlan:
    planned: float
    apply_quality: bool

    @property
    def effective(self) -> float:
        """Quality actually sent to the encoder."""
        return self.planned if self.apply_quality else BYPASS_QUALITY


def plan_quality(asset: Asset, policy: Policy) -> QualityPlan:
    """Cap policy quality for large and PNG assets.

    Each cap only lowers the value; the result never exceeds policy.quality.
    """
    quality = policy.quality

    for threshold, cap in SIZE_CAPS:
        if asset.size > threshold:
            quality = min(quality, cap)
            break

    if asset.format == ImageFormat.PNG:
        quality = min(quality, PNG_QUALITY_CAP)

    return QualityPlan(planned=quality, apply_quality=policy.use_quality)
