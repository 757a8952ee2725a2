"""Policy loading from YAML files and plain mappings."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from imgcompact.models.policy import DEFAULT_POLICY, Policy

# Keys as written by the browser-side settings panel
_CAMEL_CASE_KEYS = {
    "useQuality": "use_quality",
    "maxWidth": "max_width",
    "maxHeight": "max_height",
    "useScaling": "use_scaling",
    "scalePercent": "scale_percent",
    "useSizeLimits": "use_size_limits",
}


def policy_from_mapping(data: Mapping[str, Any], base: Policy = DEFAULT_POLICY) -> Policy:
    """Build a Policy from a mapping, keeping base values for missing keys.

    Unknown keys are ignored.
    """
    kwargs = base.to_dict()
    for key, value in data.items():
        key = _CAMEL_CASE_KEYS.get(key, key)
        if key in Policy.__dataclass_fields__ and value is not None:
            kwargs[key] = value
    return Policy(**kwargs)


def load_policy(path: str | Path) -> Policy:
    """Load a Policy from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        return DEFAULT_POLICY

    return policy_from_mapping(data)


class StaticPolicyStore:
    """Serves one fixed policy."""

    def __init__(self, policy: Policy = DEFAULT_POLICY) -> None:
        self.policy = policy

    def load(self) -> Policy:
        return self.policy


class YamlPolicyStore:
    """Reads the policy from a YAML file on every load, so edits apply to the next asset."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> Policy:
        if not self.path.exists():
            return DEFAULT_POLICY
        return load_policy(self.path)
