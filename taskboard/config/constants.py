"""
Application constants
"""

# Display names of the workflow stages (board columns)
STAGE_LABELS = {
    "todo": "To Do",
    "in-progress": "In Progress",
    "awaiting-feedback": "Awaiting Feedback",
    "done": "Done",
}

# Task classification
DEFAULT_PRIORITY = "medium"
# "high" only exists in legacy documents, it still sorts between urgent and medium
PRIORITY_RANK = {"urgent": 4, "high": 3, "medium": 2, "low": 1}

# Avatar / card colors are indexes into a fixed palette (1..PALETTE_SIZE)
PALETTE_SIZE = 10

# Document ids
TASK_ID_PREFIX = "task"
CONTACT_ID_PREFIX = "contact"
ID_PAD_WIDTH = 3

# Notification durations (milliseconds, 0 = stays until dismissed)
NOTIFICATION_DURATION_SUCCESS = 1500
NOTIFICATION_DURATION_ERROR = 5000
NOTIFICATION_DURATION_WARNING = 4000
NOTIFICATION_DURATION_WARNING_ACTION = 5000
NOTIFICATION_DURATION_INFO = 4000

# Delete confirmation
DELETE_CONFIRM_TIMEOUT = 5.0  # seconds

# Subscription failures in a row before the user is told about it
SUBSCRIPTION_ERROR_THRESHOLD = 3

# Firestore REST API
FIRESTORE_API_BASE_URL = "https://firestore.googleapis.com"
FIRESTORE_API_VERSION = "v1"
FIRESTORE_PAGE_SIZE = 300

# Retry configuration
MAX_RETRIES = 3
RETRY_DELAY = 1  # seconds

# Logging
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
