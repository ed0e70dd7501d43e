"""
This module derives the region of interest that should contain the tear
meniscus and maps it between detection and RGB pixel coordinates.
"""

import logging

import config
from face_geometry import LEFT_EYE, RIGHT_EYE

logger = logging.getLogger(__name__)


class DegenerateROI(ValueError):
    """Raised when a region cannot be mapped onto a non-empty pixel rect."""


class ROIRect:
    """Axis-aligned rectangle (left, top, width, height)."""

    def __init__(self, left, top, width, height):
        self.left = left
        self.top = top
        self.width = width
        self.height = height

    @classmethod
    def from_center(cls, center, width, height):
        cx, cy = center
        return cls(cx - width / 2.0, cy - height / 2.0, width, height)

    @property
    def center(self):
        return (self.left + self.width / 2.0, self.top + self.height / 2.0)

    def as_tuple(self):
        return (self.left, self.top, self.width, self.height)

    def __eq__(self, other):
        if not isinstance(other, ROIRect):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __repr__(self):
        return f"ROIRect(left={self.left}, top={self.top}, width={self.width}, height={self.height})"


class ROIEstimator:
    """Places the measurement region using the first applicable strategy."""

    def __init__(self,
                 eye_width_fraction=config.EYE_ROI_WIDTH_FRACTION,
                 eye_height_fraction=config.EYE_ROI_HEIGHT_FRACTION,
                 face_left_fraction=config.FACE_ROI_LEFT_FRACTION,
                 face_top_fraction=config.FACE_ROI_TOP_FRACTION,
                 face_width_fraction=config.FACE_ROI_WIDTH_FRACTION,
                 face_height_fraction=config.FACE_ROI_HEIGHT_FRACTION):
        """
        Initialize the estimator with placement fractions.

        Eye-centred rects are sized relative to the face bounding box; the
        face fallback rect is placed entirely from the bounding box.
        """
        self.eye_width_fraction = eye_width_fraction
        self.eye_height_fraction = eye_height_fraction
        self.face_left_fraction = face_left_fraction
        self.face_top_fraction = face_top_fraction
        self.face_width_fraction = face_width_fraction
        self.face_height_fraction = face_height_fraction

        # Tried in order, first non-None wins
        self.strategies = (
            ("left_eye", self._around_left_eye),
            ("right_eye", self._around_right_eye),
            ("face_box", self._from_face_box),
        )

    def _around_eye(self, face, name):
        point = face.landmark(name)
        if point is None:
            return None
        _, _, box_w, box_h = face.bbox
        return ROIRect.from_center(point,
                                   box_w * self.eye_width_fraction,
                                   box_h * self.eye_height_fraction)

    def _around_left_eye(self, face):
        return self._around_eye(face, LEFT_EYE)

    def _around_right_eye(self, face):
        return self._around_eye(face, RIGHT_EYE)

    def _from_face_box(self, face):
        left, top, width, height = face.bbox
        return ROIRect(left + width * self.face_left_fraction,
                       top + height * self.face_top_fraction,
                       width * self.face_width_fraction,
                       height * self.face_height_fraction)

    def estimate(self, face):
        """
        Estimate the tear meniscus region for a face.

        Args:
            face (FaceGeometry): Detected face in detection coordinates

        Returns:
            ROIRect in detection coordinates, or None if the face box is unusable
        """
        _, _, width, height = face.bbox
        if width <= 0 or height <= 0:
            logger.debug(f"Unusable face box {face.bbox}")
            return None

        for name, strategy in self.strategies:
            rect = strategy(face)
            if rect is not None:
                logger.debug(f"ROI from {name}: {rect}")
                return rect
        return None


def _clamp(value, low, high):
    return max(low, min(value, high))


def remap_rect(rect, detection_size, rgb_size):
    """
    Rescale a detection-space rect onto the RGB buffer.

    Left/top are clamped to [0, dim - 1] and width/height to [1, dim - left],
    so the result always lies inside the buffer and is never empty.

    Args:
        rect (ROIRect): Rect in detection coordinates
        detection_size: (width, height) of the detection image
        rgb_size: (width, height) of the RGB buffer

    Returns:
        ROIRect: Integer pixel rect valid for the RGB buffer

    Raises:
        DegenerateROI: If either reference size is empty
    """
    det_w, det_h = detection_size
    rgb_w, rgb_h = rgb_size
    if det_w <= 0 or det_h <= 0 or rgb_w <= 0 or rgb_h <= 0:
        raise DegenerateROI(f"Cannot map between {detection_size} and {rgb_size}")

    scale_x = rgb_w / float(det_w)
    scale_y = rgb_h / float(det_h)

    left = int(_clamp(rect.left * scale_x, 0, rgb_w - 1))
    top = int(_clamp(rect.top * scale_y, 0, rgb_h - 1))
    width = int(_clamp(rect.width * scale_x, 1, rgb_w))
    height = int(_clamp(rect.height * scale_y, 1, rgb_h))

    return ROIRect(left, top, min(width, rgb_w - left), min(height, rgb_h - top))


def crop_region(rgb, rect):
    """Return the view of an RGB buffer covered by a remapped rect."""
    return rgb[rect.top:rect.top + rect.height, rect.left:rect.left + rect.width]
