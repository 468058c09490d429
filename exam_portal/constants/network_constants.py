"""Network configuration constants for the exam portal."""

DEFAULT_HOST: str = "0.0.0.0"
DEFAULT_PORT: int = 8000
PRINCIPAL_HEADER: str = "X-Principal"
