"""Tests for YUV 4:2:0 to RGB conversion."""

import numpy as np
import pytest

from conftest import make_yuv_frame
from frames import Frame, Plane
from yuv_conversion import InvalidFrameFormat, convert_frame, yuv420_to_rgb


class TestYuv420ToRgb:
    """Tests for yuv420_to_rgb."""

    def test_neutral_gray(self, gray_frame):
        """Y = U = V = 128 converts to exact neutral gray."""
        rgb = yuv420_to_rgb(gray_frame)

        assert rgb.shape == (4, 4, 3)
        assert rgb.dtype == np.uint8
        assert np.all(rgb == 128)

    def test_known_pixel_values(self):
        """Chroma offsets follow the limited-range coefficients with rounding."""
        frame = make_yuv_frame(np.full((2, 2), 100, dtype=np.uint8), u=138, v=118)
        rgb = yuv420_to_rgb(frame)

        # R = 100 + 1.370705 * -10 = 86.29
        # G = 100 - 0.337633 * 10 - 0.698001 * -10 = 103.60
        # B = 100 + 1.732446 * 10 = 117.32
        assert tuple(rgb[0, 0]) == (86, 104, 117)

    def test_clamps_to_byte_range(self):
        """Out of range results clamp to 0 and 255."""
        frame = make_yuv_frame(np.full((2, 2), 250, dtype=np.uint8), u=255, v=0)
        rgb = yuv420_to_rgb(frame)

        assert rgb[0, 0, 0] == 75   # 250 - 175.45
        assert rgb[0, 0, 1] == 255
        assert rgb[0, 0, 2] == 255

        dark = make_yuv_frame(np.zeros((2, 2), dtype=np.uint8), u=0, v=0)
        assert np.all(yuv420_to_rgb(dark)[..., [0, 2]] == 0)

    def test_chroma_is_subsampled(self):
        """Each chroma sample covers a 2x2 block of luma."""
        u = np.array([[128, 200]], dtype=np.uint8)
        frame = make_yuv_frame(np.full((2, 4), 100, dtype=np.uint8), u=u)
        rgb = yuv420_to_rgb(frame)

        assert np.array_equal(rgb[:, 0], rgb[:, 1])
        assert np.array_equal(rgb[:, 2], rgb[:, 3])
        assert rgb[0, 0, 2] == 100
        assert rgb[0, 2, 2] > 200

    def test_interleaved_chroma_matches_planar(self):
        """NV12-style interleaved chroma gives the same result as separate planes."""
        rng = np.random.default_rng(3)
        luma = rng.integers(0, 256, (6, 8), dtype=np.uint8)
        u = rng.integers(0, 256, (3, 4), dtype=np.uint8)
        v = rng.integers(0, 256, (3, 4), dtype=np.uint8)

        planar = yuv420_to_rgb(make_yuv_frame(luma, u, v))
        interleaved = yuv420_to_rgb(make_yuv_frame(luma, u, v, interleaved=True))

        assert np.array_equal(planar, interleaved)

    def test_luma_row_padding(self):
        """Row strides wider than the frame are honoured."""
        luma = np.arange(16, dtype=np.uint8).reshape(4, 4) * 10
        padded = yuv420_to_rgb(make_yuv_frame(luma, row_padding=3))

        assert np.array_equal(padded[..., 0], luma)

    def test_row_permutation_is_pointwise(self):
        """Swapping 2-row blocks of the input swaps the same output rows."""
        rng = np.random.default_rng(7)
        luma = rng.integers(0, 256, (4, 6), dtype=np.uint8)
        u = rng.integers(0, 256, (2, 3), dtype=np.uint8)
        v = rng.integers(0, 256, (2, 3), dtype=np.uint8)

        original = yuv420_to_rgb(make_yuv_frame(luma, u, v))
        swapped = yuv420_to_rgb(make_yuv_frame(luma[[2, 3, 0, 1]], u[[1, 0]], v[[1, 0]]))

        assert np.array_equal(swapped, original[[2, 3, 0, 1]])

    def test_odd_dimensions(self):
        """Odd widths and heights round the chroma plane size up."""
        frame = make_yuv_frame(np.full((3, 5), 128, dtype=np.uint8))
        rgb = yuv420_to_rgb(frame)

        assert rgb.shape == (3, 5, 3)
        assert np.all(rgb == 128)


class TestInvalidFrames:
    """Tests for malformed plane data."""

    def test_short_luma_plane(self, gray_frame):
        """A luma plane shorter than width x height is rejected."""
        y, u, v = gray_frame.planes
        short = Frame.from_yuv420(4, 4, Plane(bytes(10), 4), u, v)

        with pytest.raises(InvalidFrameFormat, match="Y plane"):
            yuv420_to_rgb(short)

    def test_short_chroma_plane(self, gray_frame):
        """A chroma plane too short for its strides is rejected."""
        y, u, v = gray_frame.planes
        short = Frame.from_yuv420(4, 4, y, u, Plane(bytes(3), 2))

        with pytest.raises(InvalidFrameFormat, match="V plane"):
            yuv420_to_rgb(short)

    def test_missing_plane(self, gray_frame):
        """Exactly three planes are required."""
        frame = Frame(4, 4, planes=gray_frame.planes[:2])

        with pytest.raises(InvalidFrameFormat, match="3 planes"):
            yuv420_to_rgb(frame)

    def test_zero_stride(self, gray_frame):
        """Non-positive strides are rejected."""
        y, u, v = gray_frame.planes
        frame = Frame.from_yuv420(4, 4, y, Plane(bytes(4), 0), v)

        with pytest.raises(InvalidFrameFormat, match="stride"):
            yuv420_to_rgb(frame)

    def test_empty_frame(self):
        """Zero sized frames are rejected."""
        frame = Frame.from_yuv420(0, 4, Plane(b"", 1), Plane(b"", 1), Plane(b"", 1))

        with pytest.raises(InvalidFrameFormat):
            yuv420_to_rgb(frame)


class TestConvertFrame:
    """Tests for convert_frame dispatch."""

    def test_rgb_passthrough(self):
        """Packed RGB frames are returned unchanged."""
        data = np.random.randint(0, 255, (5, 7, 3), dtype=np.uint8)
        frame = Frame.from_rgb(data)

        assert convert_frame(frame) is frame.rgb
        assert frame.size == (7, 5)

    def test_yuv_dispatch(self, gray_frame):
        """Planar frames are converted."""
        assert np.all(convert_frame(gray_frame) == 128)

    def test_rgb_size_mismatch(self):
        """An RGB buffer that disagrees with the declared size is rejected."""
        frame = Frame(4, 4, pixel_format="rgb", rgb=np.zeros((2, 2, 3), dtype=np.uint8))

        with pytest.raises(InvalidFrameFormat):
            convert_frame(frame)
