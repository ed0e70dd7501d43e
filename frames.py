"""
Frame containers handed to the measurement pipeline by the camera host.
"""

import numpy as np

FORMAT_YUV420 = "yuv420"
FORMAT_RGB = "rgb"


class Plane:
    """One byte plane of a planar frame."""

    def __init__(self, data, row_stride, pixel_stride=1):
        """
        Initialize a plane.

        Args:
            data: Raw plane bytes (bytes, bytearray, memoryview or uint8 array)
            row_stride (int): Bytes between the starts of consecutive rows
            pixel_stride (int): Bytes between consecutive samples in a row
        """
        self.data = np.frombuffer(bytes(data), dtype=np.uint8)
        self.row_stride = int(row_stride)
        self.pixel_stride = int(pixel_stride)

    def __len__(self):
        return self.data.size


class Frame:
    """A single captured frame, either planar YUV 4:2:0 or packed RGB."""

    def __init__(self, width, height, pixel_format=FORMAT_YUV420, planes=None, rgb=None):
        """
        Initialize a frame.

        Args:
            width (int): Frame width in pixels
            height (int): Frame height in pixels
            pixel_format (str): FORMAT_YUV420 or FORMAT_RGB
            planes (list): Y, U and V planes for FORMAT_YUV420
            rgb (numpy.ndarray): H x W x 3 uint8 array for FORMAT_RGB
        """
        self.width = int(width)
        self.height = int(height)
        self.pixel_format = pixel_format
        self.planes = tuple(planes) if planes is not None else ()
        self.rgb = rgb

    @classmethod
    def from_rgb(cls, array):
        """Wrap an already converted H x W x 3 RGB array."""
        array = np.asarray(array, dtype=np.uint8)
        height, width = array.shape[:2]
        return cls(width, height, pixel_format=FORMAT_RGB, rgb=array)

    @classmethod
    def from_yuv420(cls, width, height, y_plane, u_plane, v_plane):
        """Build a planar frame from three Plane objects."""
        return cls(width, height, pixel_format=FORMAT_YUV420,
                   planes=(y_plane, u_plane, v_plane))

    @property
    def size(self):
        return (self.width, self.height)

    def __repr__(self):
        return f"Frame({self.width}x{self.height}, {self.pixel_format})"
