# Global knobs (network save + form defaults)

# Save endpoint, resolved relative to the page URL
DEFAULT_BASE_URL = "https://localhost:4433/"
SAVE_ENDPOINT = "update"
SAVE_TIMEOUT_S = None       # no timeout; a save cannot be aborted

# Status line messages
SAVING_MESSAGE = "Saving..."
SAVED_MESSAGE = "Saved"
FAILED_PREFIX = "Failed:"
NO_CERT_MESSAGE = "No cert"

# Numeric params with no input descriptor
DEFAULT_STEP = 1.0
DEFAULT_DIGITS = 2

# ---------------------------------------------------------------------
# Default fridge parameters, used when no page state file is given.
# ---------------------------------------------------------------------
DEFAULT_PARAMS = {
    "fridge_setpoint": 18.0,
    "fridge_difference": 0.2,
    "running": False,
    "nowort": False,
    "fridge_range_lower": 3.0,
    "fridge_range_upper": 3.0,
    "overshoot_factor": 0.1,
}

# Each row: (name, title, unit, step, digits)
NUM_INPUTS = [
    ("fridge_setpoint",    "Setpoint",    "°", 0.1, 1),
    ("fridge_difference",  "Difference",  "°", 0.1, 1),
    ("fridge_range_lower", "Lower range", "°", 1.0, 0),
    ("fridge_range_upper", "Upper range", "°", 1.0, 0),
]

# Each row: (name, title)
YESNO_INPUTS = [
    ("running", "Running"),
    ("nowort",  "No wort"),
]

# ---------------------------------------------------------------------
# pygame form window
# ---------------------------------------------------------------------
SCREEN_W, SCREEN_H = 520, 420
ROW_H = 44
MARGIN = 16
BUTTON_W = 48
FPS = 30

BG_COLOR = (12, 12, 18)
TEXT_COLOR = (230, 230, 235)
DIM_COLOR = (140, 140, 150)
MODIFIED_COLOR = (255, 191, 0)
BUTTON_COLOR = (50, 50, 70)
ON_COLOR = (40, 160, 90)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
