"""
This module describes detected faces and adapts MediaPipe face mesh output
into the geometry consumed by the ROI estimator.
"""

import logging
import warnings

import config

# Filter warnings and logging
warnings.filterwarnings('ignore', category=UserWarning, module='mediapipe')
logging.getLogger('mediapipe').setLevel(logging.ERROR)

logger = logging.getLogger(__name__)

LEFT_EYE = "left_eye"
RIGHT_EYE = "right_eye"


class FaceGeometry:
    """Bounding box and named landmark points of one detected face."""

    def __init__(self, bbox, landmarks=None, image_size=None):
        """
        Initialize face geometry.

        Args:
            bbox: (left, top, width, height) in detection pixel coordinates
            landmarks (dict): Named (x, y) points, e.g. LEFT_EYE, RIGHT_EYE
            image_size: (width, height) of the image the face was detected in
        """
        left, top, width, height = bbox
        self.bbox = (float(left), float(top), float(width), float(height))
        self.landmarks = dict(landmarks or {})
        self.image_size = tuple(image_size) if image_size is not None else None

    def landmark(self, name):
        """Return the named (x, y) point or None."""
        return self.landmarks.get(name)

    def __repr__(self):
        return f"FaceGeometry(bbox={self.bbox}, landmarks={sorted(self.landmarks)})"


def face_geometry_from_landmarks(landmarks, image_shape,
                                 left_eye_index=config.LEFT_IRIS_CENTER,
                                 right_eye_index=config.RIGHT_IRIS_CENTER):
    """
    Build a FaceGeometry from MediaPipe face mesh landmarks.

    The bounding box is the pixel extent of all landmarks. Eye points are the
    iris centres when the mesh was run with refined landmarks.

    Args:
        landmarks: MediaPipe face landmarks (object with a ``landmark`` list)
        image_shape: Shape of the input image (height, width)
        left_eye_index (int): Landmark index used as the left eye point
        right_eye_index (int): Landmark index used as the right eye point

    Returns:
        FaceGeometry or None if no landmarks are present
    """
    points = list(landmarks.landmark)
    if not points:
        return None

    height, width = image_shape[:2]
    xs = [point.x * width for point in points]
    ys = [point.y * height for point in points]
    left, top = min(xs), min(ys)
    bbox = (left, top, max(xs) - left, max(ys) - top)

    named = {}
    for name, index in ((LEFT_EYE, left_eye_index), (RIGHT_EYE, right_eye_index)):
        if index < len(points):
            named[name] = (xs[index], ys[index])

    return FaceGeometry(bbox, named, image_size=(width, height))


class FaceMeshLocator:
    """Runs the MediaPipe face mesh and reports faces as FaceGeometry."""

    def __init__(self, max_num_faces=config.FACE_MESH_MAX_FACES,
                 min_detection_confidence=config.FACE_MESH_DETECTION_CONFIDENCE,
                 min_tracking_confidence=config.FACE_MESH_TRACKING_CONFIDENCE):
        """Initialize the MediaPipe face mesh in video (tracking) mode."""
        import mediapipe as mp

        if not hasattr(mp, "solutions"):
            raise RuntimeError("Installed mediapipe has no face mesh solution")

        try:
            self.mp_face_mesh = mp.solutions.face_mesh
            self.face_mesh = self.mp_face_mesh.FaceMesh(
                max_num_faces=max_num_faces,
                refine_landmarks=True,
                min_detection_confidence=min_detection_confidence,
                min_tracking_confidence=min_tracking_confidence,
                static_image_mode=False
            )
        except Exception as e:
            logger.error(f"Error initializing face mesh: {e}")
            raise

    def locate(self, rgb_image):
        """
        Detect faces in an RGB image.

        Args:
            rgb_image: H x W x 3 uint8 RGB array

        Returns:
            list: FaceGeometry per detected face (possibly empty)
        """
        results = self.face_mesh.process(rgb_image)
        if not results.multi_face_landmarks:
            return []

        faces = []
        for face_landmarks in results.multi_face_landmarks:
            face = face_geometry_from_landmarks(face_landmarks, rgb_image.shape)
            if face is not None:
                faces.append(face)
        return faces

    def close(self):
        self.face_mesh.close()
