"""
This module converts camera frames in planar YUV 4:2:0 layout to RGB.
"""

import numpy as np

import config
from frames import FORMAT_RGB, FORMAT_YUV420


class InvalidFrameFormat(ValueError):
    """Raised when plane data does not match the declared frame geometry."""


def _required_length(rows, cols, row_stride, pixel_stride):
    """Smallest buffer that holds the last sample of a rows x cols plane."""
    return (rows - 1) * row_stride + (cols - 1) * pixel_stride + 1


def _check_plane(plane, rows, cols, name):
    if plane.row_stride <= 0 or plane.pixel_stride <= 0:
        raise InvalidFrameFormat(
            f"{name} plane has non-positive stride "
            f"(row={plane.row_stride}, pixel={plane.pixel_stride})")
    if plane.pixel_stride * (cols - 1) >= plane.row_stride and rows > 1:
        raise InvalidFrameFormat(
            f"{name} plane rows overlap: row stride {plane.row_stride} "
            f"too small for {cols} samples")
    needed = _required_length(rows, cols, plane.row_stride, plane.pixel_stride)
    if len(plane) < needed:
        raise InvalidFrameFormat(
            f"{name} plane holds {len(plane)} bytes, {needed} needed")


def _sample(plane, rows, cols):
    """Gather a rows x cols grid of samples from a strided plane."""
    index = (rows[:, None] * plane.row_stride) + (cols[None, :] * plane.pixel_stride)
    return plane.data[index].astype(np.float64)


def _round_clamp(values):
    # Round half away from zero; negatives are clamped to 0 anyway
    return np.clip(np.floor(values + 0.5), 0, 255).astype(np.uint8)


def yuv420_to_rgb(frame):
    """
    Convert a YUV 4:2:0 frame into an RGB pixel buffer.

    The chroma planes are sampled at (x // 2, y // 2) using each plane's own
    row and pixel stride, so both separate (I420) and interleaved (NV12/NV21)
    chroma layouts are handled.

    Args:
        frame (Frame): Frame with three planes (Y, U, V)

    Returns:
        numpy.ndarray: height x width x 3 uint8 RGB array

    Raises:
        InvalidFrameFormat: If the planes are inconsistent with the frame size
    """
    if frame.pixel_format != FORMAT_YUV420:
        raise InvalidFrameFormat(f"Expected {FORMAT_YUV420} frame, got {frame.pixel_format}")
    if frame.width <= 0 or frame.height <= 0:
        raise InvalidFrameFormat(f"Invalid frame size {frame.width}x{frame.height}")
    if len(frame.planes) != 3:
        raise InvalidFrameFormat(f"Expected 3 planes, got {len(frame.planes)}")

    y_plane, u_plane, v_plane = frame.planes
    chroma_w = (frame.width + 1) // 2
    chroma_h = (frame.height + 1) // 2
    _check_plane(y_plane, frame.height, frame.width, "Y")
    _check_plane(u_plane, chroma_h, chroma_w, "U")
    _check_plane(v_plane, chroma_h, chroma_w, "V")

    ys = np.arange(frame.height)
    xs = np.arange(frame.width)
    y = _sample(y_plane, ys, xs)
    u = _sample(u_plane, ys // 2, xs // 2) - config.YUV_CHROMA_OFFSET
    v = _sample(v_plane, ys // 2, xs // 2) - config.YUV_CHROMA_OFFSET

    r = y + config.YUV_R_FROM_V * v
    g = y - config.YUV_G_FROM_U * u - config.YUV_G_FROM_V * v
    b = y + config.YUV_B_FROM_U * u

    return np.dstack((_round_clamp(r), _round_clamp(g), _round_clamp(b)))


def convert_frame(frame):
    """
    Return the RGB buffer for any supported frame.

    Packed RGB frames are passed through; YUV 4:2:0 frames are converted.

    Args:
        frame (Frame): Incoming frame

    Returns:
        numpy.ndarray: height x width x 3 uint8 RGB array
    """
    if frame.pixel_format == FORMAT_RGB:
        rgb = frame.rgb
        if rgb is None or rgb.ndim != 3 or rgb.shape[:2] != (frame.height, frame.width):
            raise InvalidFrameFormat(f"RGB buffer does not match {frame.width}x{frame.height}")
        return rgb
    return yuv420_to_rgb(frame)
