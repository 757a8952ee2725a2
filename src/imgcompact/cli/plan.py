"""imgcompact plan command: show planned settings without encoding."""

from __future__ import annotations

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from imgcompact.cli.options import (
    MaxHeightOption,
    MaxWidthOption,
    PolicyPathOption,
    QualityOption,
    ScaleOption,
    UseQualityOption,
    build_policy,
    require_file,
)
from imgcompact.core.dimensions import plan_dimensions
from imgcompact.core.eligibility import ineligible_reason
from imgcompact.core.quality import plan_quality
from imgcompact.io.pillow_codec import probe_dimensions
from imgcompact.models.asset import Asset
from imgcompact.utils import format_size

console = Console()


def plan(
    input_path: str = typer.Argument(..., help="Image file to inspect"),
    policy_path: Optional[str] = PolicyPathOption,
    quality: Optional[float] = QualityOption,
    use_quality: Optional[bool] = UseQualityOption,
    scale: Optional[int] = ScaleOption,
    max_width: Optional[int] = MaxWidthOption,
    max_height: Optional[int] = MaxHeightOption,
) -> None:
    """Show the quality and dimensions a compression run would use."""
    src = require_file(input_path)
    policy = build_policy(policy_path, quality, use_quality, scale, max_width, max_height)
    try:
        asset = Asset.from_path(src)
    except ValueError as e:
        console.print(f"[red]Cannot read {src}: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title=src.name, show_header=False, border_style="blue")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Format", asset.format_name)
    table.add_row("Size", format_size(asset.size))

    reason = ineligible_reason(asset, policy)
    if reason is not None:
        table.add_row("Eligible", f"[red]no[/red] ({reason})")
        console.print(table)
        return
    table.add_row("Eligible", "[green]yes[/green]")

    q = plan_quality(asset, policy)
    table.add_row("Planned quality", f"{q.planned:.2f}")
    table.add_row("Effective quality", f"{q.effective:.2f}" + ("" if q.apply_quality else " (bypassed)"))

    if policy.wants_resize:
        original = probe_dimensions(asset.data)
        target = plan_dimensions(original, policy)
        table.add_row("Original dimensions", str(original) if original.is_known else "unknown")
        if target is None:
            table.add_row("Target dimensions", "unchanged")
        else:
            table.add_row("Target dimensions", f"{target} (longest edge {target.longest_edge}px)")
    else:
        table.add_row("Resize", "off")

    console.print(table)
