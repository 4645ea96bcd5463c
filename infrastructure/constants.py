"""
Constants Module - Centralized configuration values
===================================================

PURPOSE: Single source of truth for the court system's fixed request values
PATTERN: Modular constants organized by category
SCOPE: Application-wide defaults; anything deployment specific lives in settings
"""

# Remote court system
COURT_API_BASE_URL = "https://digital.damacgroup.com/damacliving/api/v1"
LOGIN_PATH = "/users/login"
SLOTS_PATH = "/amenities/slots"
REGISTRATION_PATH = "/amenities/registration"
DEFAULT_HTTP_TIMEOUT_SECONDS = 30.0

BROWSER_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/141.0.0.0 Safari/537.36"
)

# Headers the portal sends with every request
PORTAL_HEADERS = {
    "accept": "application/json, text/plain, */*",
    "accept-language": "en",
    "origin": "https://www.damacliving.com",
    "referer": "https://www.damacliving.com/",
    "user-agent": BROWSER_USER_AGENT,
}

# Fixed login body fields (web device profile)
LOGIN_DEVICE_FIELDS = {
    "app_id": 3,
    "device_source": "web",
    "app_os_version": "web",
    "app_version": "",
    "ip_address": "104.28.218.188",
    "user_agent": BROWSER_USER_AGENT,
    "access_code": "",
    "link_with_uae_pass": False,
}

# Fixed registration body fields
BOOKING_ORIGIN = "Portal"
DEFAULT_BOOKING_UNIT_ID = "a0x07000008cCMPAA2"
DEFAULT_GUEST_COUNT = 2

# Court Configuration
# Only the portal default is known; further courts come from COURT_AMENITY_IDS
DEFAULT_COURT_AMENITY_IDS = {
    4: "a5Y1n000000eVcpEAE",
}
DEFAULT_COURT_NUMBER = 4

# Scheduling
DEFAULT_TIMEZONE = "Asia/Dubai"
SCAN_INTERVAL_SECONDS = 300
URGENT_DAYS_THRESHOLD = 2
DEADLINE_DAYS_AHEAD = 3
DEADLINE_WINDOW_START = "23:57"
SLOT_FETCH_WAIT_SECONDS = 30.0

# Formats
DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"
