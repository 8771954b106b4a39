"""Network configuration constants for the trivia service."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
CALLER_ID_HEADER: str = "X-Participant-Id"
