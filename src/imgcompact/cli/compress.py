"""imgcompact compress command."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Optional

import orjson
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
from imgcompact.core.engine import CompressionEngine
from imgcompact.core.errors import CodecError, NotEligibleError
from imgcompact.core.uploader import WORTHWHILE_RATIO
from imgcompact.io.pillow_codec import PillowEncoder, PillowProber
from imgcompact.models.asset import Asset
from imgcompact.utils import format_size

console = Console()


def compress(
    input_path: str = typer.Argument(..., help="Image file to compress"),
    output: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output path (default: <name>_compressed.<ext>)"
    ),
    policy_path: Optional[str] = PolicyPathOption,
    quality: Optional[float] = QualityOption,
    use_quality: Optional[bool] = UseQualityOption,
    scale: Optional[int] = ScaleOption,
    max_width: Optional[int] = MaxWidthOption,
    max_height: Optional[int] = MaxHeightOption,
    threshold: float = typer.Option(
        WORTHWHILE_RATIO, "--threshold", help="Keep the result only below this size ratio"
    ),
    json_out: Optional[str] = typer.Option(None, "--json", help="Write result JSON here"),
) -> None:
    """Compress one image, keeping the original when compression does not pay off."""
    src = require_file(input_path)
    policy = build_policy(policy_path, quality, use_quality, scale, max_width, max_height)
    out_path = Path(output) if output else src.with_name(f"{src.stem}_compressed{src.suffix}")

    try:
        asset = Asset.from_path(src)
    except ValueError as e:
        console.print(f"[red]Cannot read {src}: {e}[/red]")
        raise typer.Exit(1)

    engine = CompressionEngine(PillowEncoder(), PillowProber())
    try:
        result = asyncio.run(engine.compress(asset, policy))
    except NotEligibleError as e:
        console.print(f"[yellow]Skipped: {e}. Original kept.[/yellow]")
        out_path.write_bytes(asset.data)
        return
    except CodecError as e:
        console.print(f"[red]Compression failed: {e}[/red]")
        raise typer.Exit(1)

    worthwhile = result.is_worthwhile(threshold)

    table = Table(title=src.name, show_header=False, border_style="blue")
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("Original", format_size(result.original_size))
    table.add_row("Compressed", format_size(result.compressed_size))
    table.add_row("Ratio", f"{result.compression_ratio * 100:.2f}%")
    table.add_row("Settings", result.request.describe())
    table.add_row("Outcome", f"{result.outcome.value} ({result.attempts} attempt(s))")
    table.add_row("Time", f"{result.elapsed_ms} ms")
    console.print(table)

    if worthwhile:
        out_path.write_bytes(result.compressed.data)
        console.print(
            f"[green]Saved {format_size(result.saved_bytes)} "
            f"({round(result.saved_percent)}%) to {out_path}[/green]"
        )
    else:
        out_path.write_bytes(asset.data)
        console.print(f"[yellow]No significant reduction, original written to {out_path}[/yellow]")

    if json_out:
        payload = {**result.to_dict(), "written": "compressed" if worthwhile else "original"}
        with open(json_out, "wb") as f:
            f.write(orjson.dumps(payload, option=orjson.OPT_INDENT_2))
        console.print(f"[green]Saved to {json_out}[/green]")
