"""
Constants, endpoint paths, timeouts, user-facing messages and theme colors.
"""

CLIENT_VERSION = "1.2.0"

DEFAULT_SERVER_URL = "http://localhost:8080"

# ─── Backend contract ────────────────────────────────────────────
SESSION_COOKIE = "JSESSIONID"
LOGIN_SUCCESS_MESSAGE = "Login successful"

# ─── Network ─────────────────────────────────────────────────────
REQUEST_TIMEOUT_SEC = 20       # Platform-style HTTP timeout for every call
CONNECT_RETRIES = 2            # Connection establishment only, never a resend

# ─── Persisted client state keys (state.json) ────────────────────
KEY_SESSION_TOKEN = "sessionToken"
KEY_SERVER_URL = "serverUrl"
KEY_BADGE_NUMBER = "badgeNumber"

# ─── OTP ─────────────────────────────────────────────────────────
OTP_LENGTH = 6

# Interface name fragments of the VPN families (tunnel, PPP, IPsec, tap).
# Matched case-insensitively as substrings of each interface name.
VPN_INTERFACE_PATTERNS = ("utun", "ppp", "ipsec", "tap", "tun")

BIOMETRIC_PROMPT_REASON = "Authenticate to Check-In or Check-Out"

# ─── User-facing messages ────────────────────────────────────────
MSG_LOCATION_UNAVAILABLE = "location unavailable"
MSG_VPN_BLOCKED = "VPN not allowed"
MSG_INTERFACES_UNAVAILABLE = "network interfaces unavailable"
MSG_AUTH_FAILED = "authentication failed"
MSG_BIOMETRICS_UNAVAILABLE = "biometric authentication is not available on this device"
MSG_SESSION_EXPIRED = "session expired, log in again"
MSG_INVALID_CODE = "invalid code"
MSG_INVALID_CREDENTIALS = "invalid credentials"
MSG_SERVER_ERROR = "server error, try again later"
MSG_UNEXPECTED_RESPONSE = "unexpected response"
MSG_REQUEST_REJECTED = "request rejected"
MSG_INVALID_SERVER_URL = "invalid server URL"
MSG_LOGGED_OUT = "You have been logged out successfully."
MSG_LOGIN_CANCELLED = "login cancelled"

INVALID_DURATION = "Invalid duration"

# ─── Theme colors (dark portal theme) ────────────────────────────
THEME = {
    "bg_darkest":    "#020617",   # window background
    "bg_dark":       "#0f172a",   # secondary bg
    "bg_card":       "#1e293b",   # card background
    "bg_input":      "#0f172a",   # input field bg
    "header_bg":     "#0a2c54",   # header background
    "primary":       "#3b82f6",   # blue button
    "primary_hover": "#2563eb",   # button hover
    "text_primary":  "#f1f5f9",   # white text
    "text_secondary":"#cbd5e1",   # light gray
    "text_muted":    "#94a3b8",   # muted text
    "border":        "#374151",   # borders
    "success":       "#22c55e",   # green
    "error":         "#ef4444",   # red
    "warning":       "#fbbf24",   # yellow
    "checkout":      "#f97316",   # orange
}
