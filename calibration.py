"""
This module converts band heights from pixels to millimeters and holds the
user calibration shared by all frames.
"""

import math
import threading
import logging

import config

logger = logging.getLogger(__name__)


class InvalidCalibrationInput(ValueError):
    """Raised when a calibration length or pixel width is unusable."""


class CalibrationState:
    """Immutable pixels-per-millimeter calibration snapshot."""

    def __init__(self, pixels_per_mm=0.0, calibrated=False):
        self._pixels_per_mm = float(pixels_per_mm)
        self._calibrated = bool(calibrated)

    @property
    def pixels_per_mm(self):
        return self._pixels_per_mm

    @property
    def calibrated(self):
        return self._calibrated

    def __eq__(self, other):
        if not isinstance(other, CalibrationState):
            return NotImplemented
        return (self.pixels_per_mm, self.calibrated) == (other.pixels_per_mm, other.calibrated)

    def __repr__(self):
        return f"CalibrationState(pixels_per_mm={self.pixels_per_mm}, calibrated={self.calibrated})"


UNCALIBRATED = CalibrationState()


def default_pixels_per_mm(crop_width_px, cornea_mm=config.CORNEA_DIAMETER_MM):
    """Pixels per mm assuming the crop spans an average cornea."""
    if crop_width_px <= 0:
        return 0.0
    return crop_width_px / cornea_mm


def to_millimeters(pixel_height, state, crop_width_px=0.0, cornea_mm=config.CORNEA_DIAMETER_MM):
    """
    Convert a band height from pixels to millimeters.

    A calibrated state is used directly. Otherwise the crop width is assumed
    to span the average horizontal corneal diameter.

    Args:
        pixel_height (float): Band height in pixels
        state (CalibrationState): Calibration in effect for the frame
        crop_width_px (float): Width of the analysed crop in pixels
        cornea_mm (float): Assumed corneal diameter for the uncalibrated case

    Returns:
        float: Band height in millimeters (0.0 if no scale can be derived)
    """
    if state.calibrated and state.pixels_per_mm > 0:
        return pixel_height / state.pixels_per_mm

    px_per_mm = default_pixels_per_mm(crop_width_px, cornea_mm)
    if px_per_mm <= 0:
        return 0.0
    return pixel_height / px_per_mm


def _parse_positive(value, name):
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidCalibrationInput(f"{name} is not a number: {value!r}")
    if not math.isfinite(number) or number <= 0:
        raise InvalidCalibrationInput(f"{name} must be positive, got {value!r}")
    return number


class CalibrationStore:
    """Thread-safe holder of the current calibration state."""

    def __init__(self, state=UNCALIBRATED):
        """Initialize the store, uncalibrated unless a state is given."""
        self._lock = threading.Lock()
        self._state = state

    def snapshot(self):
        """Return the calibration state currently in effect."""
        with self._lock:
            return self._state

    def calibrate(self, known_length_mm, observed_pixel_width):
        """
        Replace the calibration from a reference object of known length.

        Args:
            known_length_mm: Real length of the reference object (number or string)
            observed_pixel_width: Length of the reference object in pixels

        Returns:
            CalibrationState: The new state

        Raises:
            InvalidCalibrationInput: If either value is non-positive or unparsable;
                the previous state is kept
        """
        try:
            known_mm = _parse_positive(known_length_mm, "Known length (mm)")
            observed_px = _parse_positive(observed_pixel_width, "Observed pixel width")
        except InvalidCalibrationInput as e:
            logger.warning(f"Calibration rejected: {e}")
            raise

        state = CalibrationState(observed_px / known_mm, calibrated=True)
        with self._lock:
            self._state = state
        logger.info(f"Calibration done. pixels/mm = {state.pixels_per_mm:.2f}")
        return state

    def calibrate_from_image(self, known_length_mm, image):
        """
        Calibrate from a still photo whose width spans the reference object.

        Args:
            known_length_mm: Real length of the reference object
            image: H x W (x C) array of the captured photo

        Returns:
            CalibrationState: The new state
        """
        return self.calibrate(known_length_mm, image.shape[1])

    def reset(self):
        """Drop the user calibration and fall back to the corneal estimate."""
        with self._lock:
            self._state = UNCALIBRATED
        logger.info("Calibration reset")
