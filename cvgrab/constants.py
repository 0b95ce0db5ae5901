"""Defaults and fixed values for cvgrab.

The tunable values are the defaults behind GrabConfig; runtime code takes
them from a GrabConfig instance rather than reading them from here.
"""

# Post-processing scale bounds
SIZE_FACTOR_MIN = 0.2
SIZE_FACTOR_MAX = 2.0
SIZE_FACTOR_STEP = 0.1
SIZE_FACTOR_NORMAL = 1.0

# Placeholder resolution when the origin cannot report its own
MEDIA_DEFAULT_WIDTH = 640
MEDIA_DEFAULT_HEIGHT = 480

# Recording sink
RECORD_FPS = 25.0
RECORD_FOURCC = "MJPG"
RECORD_EXTENSION = "avi"
SNAPSHOT_EXTENSION = "bmp"
FILENAME_TIMESTAMP_FORMAT = "%Y%m%d%H%M%S"

# Key wait per loop iteration (~25 iterations/second)
KEY_WAIT_MS = 40

DEFAULT_CAMERA = 0

# Key codes as returned by cv2.waitKey() & 0xFF
KEY_ESC = 27
KEY_RETURN = 13
KEY_LINEFEED = 10
KEY_SPACE = 32

# Recording marker position (pixels), drawn on the preview copy only
RECORD_MARKER_CENTER = (20, 20)
RECORD_MARKER_RADIUS = 10
