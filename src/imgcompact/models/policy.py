"""Policy model for adaptive compression."""

from __future__ import annotations

from dataclasses import asdict, dataclass

MIN_QUALITY = 0.1
MAX_QUALITY = 1.0
MIN_SCALE_PERCENT = 10
MAX_SCALE_PERCENT = 100


@dataclass(frozen=True, slots=True)
class Policy:
    quality: float = 0.6
    use_quality: bool = True
    max_width: int = 1920
    max_height: int = 1080
    use_scaling: bool = False
    scale_percent: int = 100
    use_size_limits: bool = False
    enabled: bool = True

    def __post_init__(self) -> None:
        if not MIN_QUALITY <= self.quality <= MAX_QUALITY:
            raise ValueError(f"quality must be {MIN_QUALITY}-{MAX_QUALITY}, got {self.quality}")
        if not MIN_SCALE_PERCENT <= self.scale_percent <= MAX_SCALE_PERCENT:
            raise ValueError(
                f"scale_percent must be {MIN_SCALE_PERCENT}-{MAX_SCALE_PERCENT}, "
                f"got {self.scale_percent}"
            )
        if self.max_width <= 0 or self.max_height <= 0:
            raise ValueError(
                f"max_width and max_height must be positive, got {self.max_width}x{self.max_height}"
            )

    @property
    def wants_resize(self) -> bool:
        """True if any geometry toggle is on."""
        return self.use_scaling or self.use_size_limits

    def to_dict(self) -> dict[str, object]:
        return asdict(self)


DEFAULT_POLICY = Policy()
