"""Shared frame builders for the measurement tests."""

import numpy as np
import pytest

from frames import Frame, Plane


def make_yuv_frame(luma, u=128, v=128, interleaved=False, row_padding=0):
    """Build a YUV 4:2:0 frame from a 2D luma array and constant or 2D chroma.

    Args:
        luma: H x W array of Y values
        u, v: Constant chroma values or (H+1)//2 x (W+1)//2 arrays
        interleaved: Store chroma as one NV12-style plane with pixel stride 2
        row_padding: Extra bytes at the end of every luma row
    """
    luma = np.asarray(luma, dtype=np.uint8)
    height, width = luma.shape
    ch, cw = (height + 1) // 2, (width + 1) // 2
    u = np.broadcast_to(np.asarray(u, dtype=np.uint8), (ch, cw))
    v = np.broadcast_to(np.asarray(v, dtype=np.uint8), (ch, cw))

    y_stride = width + row_padding
    y_bytes = np.zeros((height, y_stride), dtype=np.uint8)
    y_bytes[:, :width] = luma
    y_plane = Plane(y_bytes.tobytes(), y_stride, 1)

    if interleaved:
        uv = np.empty((ch, cw * 2), dtype=np.uint8)
        uv[:, 0::2] = u
        uv[:, 1::2] = v
        raw = uv.tobytes()
        u_plane = Plane(raw, cw * 2, 2)
        v_plane = Plane(raw[1:], cw * 2, 2)
    else:
        u_plane = Plane(np.ascontiguousarray(u).tobytes(), cw, 1)
        v_plane = Plane(np.ascontiguousarray(v).tobytes(), cw, 1)

    return Frame.from_yuv420(width, height, y_plane, u_plane, v_plane)


def banded_luma(height, width, band_rows, bright=200, dark=50):
    """Uniform bright luma with the given rows set dark."""
    luma = np.full((height, width), bright, dtype=np.uint8)
    for row in band_rows:
        luma[row, :] = dark
    return luma


@pytest.fixture
def gray_frame():
    """4x4 neutral gray frame (Y = U = V = 128)."""
    return make_yuv_frame(np.full((4, 4), 128, dtype=np.uint8))


@pytest.fixture
def banded_frame():
    """4x4 frame with a two-row dark band in the lower half."""
    return make_yuv_frame(banded_luma(4, 4, band_rows=(2, 3)))
