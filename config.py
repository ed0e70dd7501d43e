"""
Tunable constants for the tear meniscus measurement pipeline.

These are priors and heuristics, not measured values. Every component takes
them as keyword defaults so a host application can override them per instance.
"""

# ROI placement relative to an eye landmark (fractions of the face box)
EYE_ROI_WIDTH_FRACTION = 0.28
EYE_ROI_HEIGHT_FRACTION = 0.14

# ROI placement when no eye landmark is available (fractions of the face box)
FACE_ROI_LEFT_FRACTION = 0.15
FACE_ROI_TOP_FRACTION = 0.45
FACE_ROI_WIDTH_FRACTION = 0.70
FACE_ROI_HEIGHT_FRACTION = 0.25

# Band detection
BAND_START_FRACTION = 0.45      # Analysis starts this far down the crop
BAND_THRESHOLD_RATIO = 0.92     # Band rows are >= 8% darker than the average row
BAND_FALLBACK_FRACTION = 0.02   # Height returned when no band is found

# Average horizontal corneal diameter used when uncalibrated
CORNEA_DIAMETER_MM = 11.7

# Limited-range YUV -> RGB coefficients
YUV_R_FROM_V = 1.370705
YUV_G_FROM_U = 0.337633
YUV_G_FROM_V = 0.698001
YUV_B_FROM_U = 1.732446
YUV_CHROMA_OFFSET = 128

# MediaPipe face mesh iris centre landmarks
LEFT_IRIS_CENTER = 468
RIGHT_IRIS_CENTER = 473

# MediaPipe face mesh settings
FACE_MESH_MAX_FACES = 1
FACE_MESH_DETECTION_CONFIDENCE = 0.5
FACE_MESH_TRACKING_CONFIDENCE = 0.5
