"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

EARTH_RADIUS_KM = 6371.0
DEFAULT_RADIUS_METERS = 100.0

SIMILARITY_THRESHOLD = 0.92
SINGLE_POSE_DISTANCE_THRESHOLD = 0.20
MULTI_POSE_DISTANCE_THRESHOLD = 0.25
EXPECTED_EMBEDDING_SIZE = 128

EYES_OPEN_THRESHOLD = 0.8
EYES_REOPEN_THRESHOLD = 0.7
BLINK_EYE_THRESHOLD = 0.3

DEFAULT_CODE_PERIOD_SECONDS = 60
CODE_DIGITS = 6

DEFAULT_HISTORY_LIMIT = 30
