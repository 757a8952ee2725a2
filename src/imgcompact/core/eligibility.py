"""Eligibility gate: which assets a policy allows compressing."""

from __future__ import annotations

from imgcompact.models.asset import Asset, ImageFormat
from imgcompact.models.policy import Policy

SUPPORTED_FORMATS = frozenset(
    {ImageFormat.JPEG, ImageFormat.PNG, ImageFormat.WEBP, ImageFormat.GIF}
)


def ineligible_reason(asset: Asset, policy: Policy) -> str | None:
    """Return why the asset is ineligible, or None if it may be compressed."""
    if not policy.enabled:
        return "compression disabled by policy"
    if asset.format not in SUPPORTED_FORMATS:
        return "unsupported format"
    return None


def is_eligible(asset: Asset, policy: Policy) -> bool:
    return ineligible_reason(asset, policy) is None
