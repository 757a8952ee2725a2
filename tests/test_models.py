"""Tests for policy, asset and result models and policy loading."""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from pathlib import Path

import pytest
from conftest import make_asset

from imgcompact.io.policy_io import (
    StaticPolicyStore,
    YamlPolicyStore,
    load_policy,
    policy_from_mapping,
)
from imgcompact.models.asset import Asset, Dimensions, EncodeRequest, ImageFormat, normalize_format
from imgcompact.models.policy import DEFAULT_POLICY, Policy
from imgcompact.models.result import CompressionResult, Outcome


class TestPolicy:
    def test_defaults(self) -> None:
        p = Policy()
        assert p.quality == 0.6
        assert p.use_quality is True
        assert (p.max_width, p.max_height) == (1920, 1080)
        assert p.use_scaling is False
        assert p.scale_percent == 100
        assert p.use_size_limits is False
        assert p.enabled is True
        assert not p.wants_resize

    def test_frozen(self) -> None:
        with pytest.raises(FrozenInstanceError):
            DEFAULT_POLICY.quality = 0.9  # type: ignore[misc]

    @pytest.mark.parametrize("quality", [0.0, 0.09, 1.01, -1.0])
    def test_rejects_bad_quality(self, quality: float) -> None:
        with pytest.raises(ValueError, match="quality"):
            Policy(quality=quality)

    @pytest.mark.parametrize("scale", [0, 9, 101])
    def test_rejects_bad_scale(self, scale: int) -> None:
        with pytest.raises(ValueError, match="scale_percent"):
            Policy(scale_percent=scale)

    def test_rejects_non_positive_limits(self) -> None:
        with pytest.raises(ValueError):
            Policy(max_width=0)

    def test_to_dict(self) -> None:
        d = Policy(quality=0.8).to_dict()
        assert d["quality"] == 0.8
        assert set(d) == set(Policy.__dataclass_fields__)


class TestPolicyLoading:
    def test_load_policy(self, tmp_path: Path) -> None:
        policy_file = tmp_path / "policy.yml"
        policy_file.write_text("quality: 0.8\nuse_size_limits: true\nmax_width: 1280\n")
        policy = load_policy(str(policy_file))
        assert policy.quality == 0.8
        assert policy.use_size_limits is True
        assert policy.max_width == 1280
        # Defaults preserved for unset fields
        assert policy.max_height == 1080
        assert policy.use_scaling is False

    def test_load_empty_policy(self, tmp_path: Path) -> None:
        policy_file = tmp_path / "empty.yml"
        policy_file.write_text("")
        assert load_policy(policy_file) == DEFAULT_POLICY

    def test_camel_case_keys(self) -> None:
        policy = policy_from_mapping(
            {"quality": 0.7, "useQuality": False, "useScaling": True, "scalePercent": 40}
        )
        assert policy.use_quality is False
        assert policy.use_scaling is True
        assert policy.scale_percent == 40

    def test_unknown_keys_ignored(self) -> None:
        policy = policy_from_mapping({"maintainSize": True, "quality": 0.5})
        assert policy.quality == 0.5

    def test_invalid_values_rejected(self) -> None:
        with pytest.raises(ValueError):
            policy_from_mapping({"quality": 5})

    def test_static_store(self) -> None:
        policy = Policy(quality=0.3)
        assert StaticPolicyStore(policy).load() is policy

    def test_yaml_store_rereads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "policy.yml"
        store = YamlPolicyStore(path)
        assert store.load() == DEFAULT_POLICY
        path.write_text("enabled: false\n")
        assert store.load().enabled is False
        path.write_text("enabled: true\nquality: 0.9\n")
        assert store.load().quality == 0.9


class TestAsset:
    @pytest.mark.parametrize(
        "tag,expected",
        [
            ("image/jpeg", ImageFormat.JPEG),
            (".JPG", ImageFormat.JPEG),
            ("jpeg", ImageFormat.JPEG),
            ("PNG", ImageFormat.PNG),
            ("image/webp", ImageFormat.WEBP),
            ("gif", ImageFormat.GIF),
            ("bmp", ImageFormat.BMP),
        ],
    )
    def test_normalize_format(self, tag: str, expected: ImageFormat) -> None:
        assert normalize_format(tag) is expected

    def test_unknown_format_kept_uppercased(self) -> None:
        assert normalize_format("heic") == "HEIC"
        assert make_asset(fmt="heic").format_name == "HEIC"

    def test_size_defaults_to_data_length(self) -> None:
        asset = Asset(data=b"abc", format="png")
        assert asset.size == 3
        assert asset.format is ImageFormat.PNG

    def test_declared_size_kept(self) -> None:
        assert Asset(data=b"abc", format="png", size=10).size == 10

    def test_empty_asset_rejected(self) -> None:
        with pytest.raises(ValueError):
            Asset(data=b"", format="png")

    def test_negative_size_rejected(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            Asset(data=b"abc", format="png", size=-5)

    def test_zero_declared_size_rejected(self) -> None:
        with pytest.raises(ValueError):
            Asset(data=b"abc", format="png", size=0)

    def test_from_path(self, tmp_path: Path) -> None:
        path = tmp_path / "shot.webp"
        path.write_bytes(b"RIFF0000")
        asset = Asset.from_path(path)
        assert asset.format is ImageFormat.WEBP
        assert asset.name == "shot.webp"
        assert asset.size == 8

    def test_dimensions(self) -> None:
        assert Dimensions(0, 0).is_known is False
        assert Dimensions(10, 0).is_known is False
        assert Dimensions(300, 400).longest_edge == 400
        assert str(Dimensions(300, 400)) == "300x400"

    def test_encode_request_describe(self) -> None:
        text = EncodeRequest(quality=0.5, format=ImageFormat.JPEG, longest_edge=800).describe()
        assert text == "JPEG at quality 0.50, longest edge 800px"


class TestCompressionResult:
    def _result(self, compressed_size: int) -> CompressionResult:
        compressed = make_asset(compressed_size)
        return CompressionResult(
            original_size=1000,
            compressed_size=compressed_size,
            compressed=compressed,
            request=EncodeRequest(quality=0.6, format=ImageFormat.JPEG),
            outcome=Outcome.RETRY_ACCEPTED,
            attempts=2,
        )

    def test_ratio_and_savings(self) -> None:
        r = self._result(250)
        assert r.compression_ratio == 0.25
        assert r.saved_bytes == 750
        assert r.saved_percent == pytest.approx(75.0)

    def test_worthwhile_threshold(self) -> None:
        assert self._result(899).is_worthwhile()
        assert not self._result(900).is_worthwhile()
        assert self._result(900).is_worthwhile(threshold=0.95)

    def test_to_dict(self) -> None:
        d = self._result(500).to_dict()
        assert d["compression_ratio"] == 0.5
        assert d["outcome"] == "retry_accepted"
        assert d["attempts"] == 2
        assert d["format"] == "JPEG"

    def test_outcome_retried(self) -> None:
        assert not Outcome.FIRST_ACCEPTED.retried
        assert all(o.retried for o in Outcome if o is not Outcome.FIRST_ACCEPTED)
