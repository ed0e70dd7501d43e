"""
Band detection for the tear meniscus: a thin, darker horizontal stripe in
the lower part of an eye crop.
"""

import cv2
import numpy as np
import logging

import config

logger = logging.getLogger(__name__)


class BandDetector:
    """Measures the height of the first dark horizontal band in a crop."""

    def __init__(self,
                 start_fraction=config.BAND_START_FRACTION,
                 threshold_ratio=config.BAND_THRESHOLD_RATIO,
                 fallback_fraction=config.BAND_FALLBACK_FRACTION):
        """
        Initialize band detector parameters.

        Args:
            start_fraction (float): Fraction of the crop height skipped from the top
            threshold_ratio (float): Rows below ratio * mean row luminance are dark
            fallback_fraction (float): Fraction of the crop height reported when
                no dark row is found
        """
        self.start_fraction = start_fraction
        self.threshold_ratio = threshold_ratio
        self.fallback_fraction = fallback_fraction

    @staticmethod
    def to_grayscale(region):
        """Luminance-weighted grayscale of an RGB (or already gray) region."""
        region = np.ascontiguousarray(region, dtype=np.uint8)
        if region.ndim == 2:
            return region
        return cv2.cvtColor(region, cv2.COLOR_RGB2GRAY)

    def _fallback(self, height):
        return max(0.0, height * self.fallback_fraction)

    def analyze(self, region):
        """
        Run band detection and report the intermediate values.

        Args:
            region: H x W x 3 RGB crop (H >= 1, W >= 1)

        Returns:
            dict: Band detection results including height and row profile
        """
        gray = self.to_grayscale(region)
        height, width = gray.shape[:2]
        if height < 1 or width < 1:
            raise ValueError(f"Empty region {width}x{height}")

        start_y = int(np.floor(height * self.start_fraction))
        rows = height - start_y
        if rows <= 2:
            rows = height // 2

        # Vertical projection: mean luminance of each analysed row
        row_means = gray[start_y:start_y + rows].astype(np.float64).mean(axis=1)

        result = {
            'band_height': self._fallback(height),
            'band_found': False,
            'start_y': start_y,
            'row_means': row_means,
            'threshold': None,
            'top': None,
            'bottom': None
        }
        if row_means.size == 0:
            return result

        threshold = row_means.mean() * self.threshold_ratio
        result['threshold'] = threshold

        top = bottom = -1
        for i, value in enumerate(row_means):
            if value < threshold:
                if top == -1:
                    top = i
                bottom = i
            elif top != -1:
                # Only the first contiguous dark run is measured
                break

        if top == -1:
            return result

        result.update({
            'band_height': float(bottom - top + 1),
            'band_found': True,
            'top': start_y + top,
            'bottom': start_y + bottom
        })
        return result

    def detect(self, region):
        """
        Estimate the band height in pixels.

        Args:
            region: H x W x 3 RGB crop

        Returns:
            float: Band height in pixels, or the fallback height if no band is found
        """
        result = self.analyze(region)
        if not result['band_found']:
            logger.debug(f"No dark band in {region.shape[1]}x{region.shape[0]} crop, "
                         f"using fallback {result['band_height']:.2f}px")
        return result['band_height']
