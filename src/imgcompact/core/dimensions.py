"""Dimension planner: aspect-preserving target geometry."""

from __future__ import annotations

from imgcompact.models.asset import Dimensions
from imgcompact.models.policy import Policy


def plan_dimensions(original: Dimensions, policy: Policy) -> Dimensions | None:
    """Compute the resize target, or None if no resize is needed.

    Percentage scaling runs first, then the max-width clamp, then the
    max-height clamp. The clamps run in that fixed order, so when both bind
    the height clamp sees the already width-clamped geometry.
    All arithmetic is exact integer floor division.
    """
    if not policy.wants_resize or not original.is_known:
        return None

    width, height = original

    if policy.use_scaling and policy.scale_percent < 100:
        width = width * policy.scale_percent // 100
        height = height * policy.scale_percent // 100

    if policy.use_size_limits:
        if width > policy.max_width:
            height = height * policy.max_width // width
            width = policy.max_width
        if height > policy.max_height:
            width = width * policy.max_height // height
            height = policy.max_height

    target = Dimensions(max(1, width), max(1, height))
    if target == original:
        return None
    return target
