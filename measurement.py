"""
Per-frame tear meniscus measurement and the frame scheduler that runs it.
Coordinates the different components for every incoming frame.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor

from yuv_conversion import InvalidFrameFormat, convert_frame
from roi_geometry import DegenerateROI, ROIEstimator, crop_region, remap_rect
from band_detection import BandDetector
from calibration import CalibrationStore, to_millimeters

logger = logging.getLogger(__name__)


def measure_frame(frame, faces, calibration, estimator=None, detector=None):
    """
    Measure the tear meniscus in a single frame.

    Args:
        frame (Frame): Captured frame
        faces (list): FaceGeometry values detected in the frame; the first is used
        calibration (CalibrationState): Calibration snapshot for this frame
        estimator (ROIEstimator): ROI placement, defaults to ROIEstimator()
        detector (BandDetector): Band detection, defaults to BandDetector()

    Returns:
        dict: Measurement result, or None when there is no face to measure

    Raises:
        InvalidFrameFormat: If the frame planes are malformed
        DegenerateROI: If no non-empty region can be derived
    """
    if not faces:
        logger.debug("No face in frame")
        return None

    estimator = estimator or ROIEstimator()
    detector = detector or BandDetector()
    face = faces[0]

    roi = estimator.estimate(face)
    if roi is None:
        raise DegenerateROI(f"No region for {face}")

    rgb = convert_frame(frame)
    rgb_size = (rgb.shape[1], rgb.shape[0])
    detection_size = face.image_size or (frame.width, frame.height)
    crop_rect = remap_rect(roi, detection_size, rgb_size)

    pixel_height = detector.detect(crop_region(rgb, crop_rect))
    physical_height_mm = to_millimeters(pixel_height, calibration, crop_rect.width)

    return {
        'pixel_height': pixel_height,
        'physical_height_mm': physical_height_mm,
        'calibrated': calibration.calibrated,
        'pixels_per_mm': calibration.pixels_per_mm,
        'roi': crop_rect
    }


class MeasurementSystem:
    """Runs measurements off the frame thread, one frame at a time."""

    def __init__(self, calibration=None, estimator=None, detector=None, on_result=None):
        """
        Initialize the measurement system.

        Args:
            calibration (CalibrationStore): Shared calibration, a new one if omitted
            estimator (ROIEstimator): ROI placement
            detector (BandDetector): Band detection
            on_result: Optional callable receiving each new result dict
        """
        self.calibration = calibration or CalibrationStore()
        self.estimator = estimator or ROIEstimator()
        self.detector = detector or BandDetector()
        self.on_result = on_result

        self._busy = threading.Lock()
        self._result_lock = threading.Lock()
        self._latest_result = None
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="tmh-measure")
        self.frames_dropped = 0
        logger.info("Measurement system started")

    @property
    def latest_result(self):
        """Most recent measurement result, or None before the first one."""
        with self._result_lock:
            return self._latest_result

    @property
    def calibration_state(self):
        return self.calibration.snapshot()

    @property
    def busy(self):
        return self._busy.locked()

    def calibrate(self, known_length_mm, observed_pixel_width):
        """Calibrate from a reference object; errors are raised to the caller."""
        return self.calibration.calibrate(known_length_mm, observed_pixel_width)

    def submit_frame(self, frame, faces):
        """
        Hand a frame to the worker unless a measurement is already running.

        Args:
            frame (Frame): Captured frame
            faces (list): FaceGeometry values detected in the frame

        Returns:
            bool: True if the frame was accepted, False if it was dropped
        """
        if not self._busy.acquire(blocking=False):
            self.frames_dropped += 1
            return False

        calibration = self.calibration.snapshot()
        try:
            self._executor.submit(self._process_frame, frame, list(faces or ()), calibration)
        except RuntimeError:
            self._busy.release()
            raise
        return True

    def _process_frame(self, frame, faces, calibration):
        """Measure one frame and publish the result; never raises."""
        try:
            result = measure_frame(frame, faces, calibration, self.estimator, self.detector)
            if result is None:
                return

            with self._result_lock:
                self._latest_result = result
            if self.on_result is not None:
                self.on_result(result)

        except InvalidFrameFormat as e:
            logger.warning(f"Dropping malformed frame: {e}")
        except DegenerateROI as e:
            logger.debug(f"Skipping frame: {e}")
        except Exception as e:
            logger.error(f"Error processing frame: {e}")
        finally:
            self._busy.release()

    def close(self):
        """Wait for the running measurement and stop the worker."""
        self._executor.shutdown(wait=True)
        logger.info("Measurement system stopped")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
