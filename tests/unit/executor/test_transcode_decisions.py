"""Tests for rotation and aspect-ratio option derivation."""

import math
from pathlib import Path

import pytest

from vtranscode.executor.transcode import (
    AspectRatioMode,
    RawOptions,
    StructuredOptions,
    derive_aspect_options,
    derive_rotation_options,
    round_even,
)
from vtranscode.introspector import MovieMetadata


def metadata(rotation=None, aspect=16 / 9) -> MovieMetadata:
    return MovieMetadata(
        path=Path("/videos/in.mov"),
        duration=10.0,
        rotation=rotation,
        calculated_aspect_ratio=aspect,
    )


class TestRoundEven:
    """Tests for round_even."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (1137.78, 1138),
            (359.5, 360),
            (2.5, 2),
            (5.0, 6),
            (4.0, 4),
            (0.0, 0),
            (0.4, 0),
            (1.0, 2),
        ],
    )
    def test_known_values(self, value, expected):
        assert round_even(value) == expected

    @pytest.mark.parametrize(
        "value", [i / 7 for i in range(0, 5000, 13)] + [1e6 + 0.5, 1919.999]
    )
    def test_even_and_within_two(self, value):
        result = round_even(value)
        assert result % 2 == 0
        assert math.fabs(result - value) < 2


class TestDeriveRotationOptions:
    """Tests for derive_rotation_options."""

    @pytest.mark.parametrize(
        "rotation,filters,swaps",
        [
            (90, ("transpose=1",), True),
            (180, ("hflip", "vflip"), False),
            (270, ("transpose=2",), True),
        ],
    )
    def test_rotations(self, rotation, filters, swaps):
        delta = derive_rotation_options(metadata(rotation=rotation))
        assert delta.video_filters == filters
        assert delta.flags == (("metadata:s:v:0", "rotate=0"),)
        assert delta.swaps_orientation is swaps

    @pytest.mark.parametrize("rotation", [None, 0])
    def test_unrotated_source(self, rotation):
        assert derive_rotation_options(metadata(rotation=rotation)).is_empty

    def test_unsupported_angle_ignored(self):
        assert derive_rotation_options(metadata(rotation=45)).is_empty


class TestDeriveAspectOptions:
    """Tests for derive_aspect_options."""

    def test_width_mode_computes_height(self):
        options = StructuredOptions({"resolution": "640x480"})
        delta = derive_aspect_options(metadata(), options, AspectRatioMode.WIDTH)
        assert (delta.width, delta.height) == (640, 360)

    def test_height_mode_computes_width(self):
        options = RawOptions("-s 640x480")
        delta = derive_aspect_options(metadata(), options, AspectRatioMode.HEIGHT)
        assert (delta.width, delta.height) == (854, 480)

    def test_swapped_orientation_inverts_aspect_ratio(self):
        """A 90 degree source kept at width 640 becomes 640x1138."""
        options = StructuredOptions({"resolution": "640x360"})
        delta = derive_aspect_options(
            metadata(rotation=90), options, AspectRatioMode.WIDTH, swapped=True
        )
        assert (delta.width, delta.height) == (640, 1138)

    def test_none_mode(self):
        options = StructuredOptions({"resolution": "640x480"})
        delta = derive_aspect_options(metadata(), options, AspectRatioMode.NONE)
        assert delta.is_empty

    def test_unknown_aspect_ratio(self):
        options = StructuredOptions({"resolution": "640x480"})
        delta = derive_aspect_options(
            metadata(aspect=None), options, AspectRatioMode.WIDTH
        )
        assert delta.is_empty

    def test_no_requested_size(self):
        options = RawOptions("-an")
        delta = derive_aspect_options(metadata(), options, AspectRatioMode.WIDTH)
        assert delta.is_empty
