"""
Configuration constants and environment setup.
"""

import os
from datetime import time
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# =============================================================================
# PATHS
# =============================================================================

PROJECT_ROOT = Path(__file__).parent.parent.parent
DB_PATH = Path(
    os.environ.get("ATTENDANCE_DB_PATH", str(PROJECT_ROOT / "data" / "db" / "attendance.db"))
)
OUTPUT_DIR = PROJECT_ROOT / "output"

# =============================================================================
# CLASSIFICATION RULES
# =============================================================================

LOW_HOURS_THRESHOLD = 5.0
FULL_DAY_THRESHOLD = 8.5
LATE_CUTOFF = time(10, 0, 0)

# Location tokens that mean "worked from a registered office or home".
# Anything else is a site visit.
OFFICE_CODES = {"ro", "mo", "rso", "do", "wfh"}

# =============================================================================
# TRANSCRIPT PARSING
# =============================================================================

# Tried in order against the first line of a pasted block
TRANSCRIPT_DATE_FORMATS = [
    "%d %b, %Y",   # 6 Mar, 2025
    "%b %d,%Y",    # Mar 6,2025
    "%d %b %Y",    # 6 Mar 2025
    "%b %d %Y",    # Mar 6 2025
    "%B %d, %Y",   # March 6, 2025
    "%d %B, %Y",   # 6 March, 2025
    "%Y-%m-%d",
]

STORAGE_DATE_FORMAT = "%Y-%m-%d"

# "<date> <time>" renderings accepted when computing hours or late marks
TIMESTAMP_FORMATS = [
    "%Y-%m-%d %I:%M %p",
    "%Y-%m-%d %I:%M%p",
    "%Y-%m-%d %I:%M:%S %p",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
]

CHECK_IN_MARKER = "CI"
CHECK_OUT_MARKER = "CO"

# =============================================================================
# REPORT CONFIGURATION
# =============================================================================

MONTHLY_HEADERS = ["Employee Name", "Present", "Late", "AvgHr"]
DATEWISE_HEADERS = ["Employee", "Date", "In Time", "Out Time", "Work Hr", "Day", "Location"]

# Color key -> hex fill (no leading '#', openpyxl style)
CELL_COLORS = {
    "holiday": "FF0000",
    "sunday": "FF9900",
    "present": "90EE90",
    "late_mark": "90EE90",
    "half_day": "B0E0E6",
    "absent": "FFC0CB",
    "site_visit": "FFFF00",
    "incomplete": "FFFFFF",
    "low_hours": "FFFFFF",
    "none": None,
}

# =============================================================================
# API CONFIGURATION
# =============================================================================

ATTENDANCE_API_KEY = os.environ.get("ATTENDANCE_API_KEY", "")
API_HOST = os.environ.get("API_HOST", "0.0.0.0")
API_PORT = int(os.environ.get("API_PORT", "8000"))
API_DEBUG = os.environ.get("API_DEBUG", "false").lower() == "true"
MAX_TRANSCRIPT_SIZE_KB = int(os.environ.get("MAX_TRANSCRIPT_SIZE_KB", "512"))
MAX_TRANSCRIPT_SIZE_BYTES = MAX_TRANSCRIPT_SIZE_KB * 1024
API_VERSION = "1.0.0"
