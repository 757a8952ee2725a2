"""Policy options shared by the compress and plan commands."""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path
from typing import Optional

import typer
import yaml  # type: ignore[import-untyped]

from imgcompact.io.policy_io import load_policy
from imgcompact.models.policy import DEFAULT_POLICY, Policy

PolicyPathOption = typer.Option(None, "-p", "--policy", help="Path to policy YAML")
QualityOption = typer.Option(None, "-q", "--quality", help="Encode quality (0.1-1.0)")
UseQualityOption = typer.Option(
    None, "--use-quality/--no-quality", help="Apply quality compression (default: policy)"
)
ScaleOption = typer.Option(None, "--scale", help="Scale percent (10-100), enables scaling")
MaxWidthOption = typer.Option(None, "--max-width", help="Max width, enables size limits")
MaxHeightOption = typer.Option(None, "--max-height", help="Max height, enables size limits")


def build_policy(
    policy_path: Optional[str],
    quality: Optional[float],
    use_quality: Optional[bool],
    scale: Optional[int],
    max_width: Optional[int],
    max_height: Optional[int],
) -> Policy:
    """Load the policy file (or defaults) and apply command-line overrides."""
    base = DEFAULT_POLICY
    if policy_path:
        try:
            base = load_policy(policy_path)
        except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
            raise typer.BadParameter(f"cannot load policy {policy_path}: {e}", param_hint="--policy") from e

    overrides: dict[str, object] = {}

    if quality is not None:
        overrides["quality"] = quality
    if use_quality is not None:
        overrides["use_quality"] = use_quality
    if scale is not None:
        overrides["use_scaling"] = True
        overrides["scale_percent"] = scale
    if max_width is not None:
        overrides["use_size_limits"] = True
        overrides["max_width"] = max_width
    if max_height is not None:
        overrides["use_size_limits"] = True
        overrides["max_height"] = max_height

    try:
        return replace(base, **overrides)
    except ValueError as e:
        raise typer.BadParameter(str(e)) from e


def require_file(path: str) -> Path:
    p = Path(path)
    if not p.is_file():
        typer.echo(f"Error: {path} is not a valid file", err=True)
        raise typer.Exit(1)
    return p
