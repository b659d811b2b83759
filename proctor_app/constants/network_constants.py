"""Network configuration constants for the proctor application."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
CLIENT_COOKIE: str = "proctorqt_client"
CLIENT_COOKIE_MAX_AGE_S: int = 60 * 60 * 24 * 30
