from typing import Any, Dict, Optional


class ReportError(RuntimeError):
    """Base class for failures that map onto a specific HTTP status."""

    status_code = 500


class Unauthorized(ReportError):
    status_code = 401

    def __init__(self, message: str = "Unauthorized"):
        super().__init__(message)


class ConfigurationError(ReportError):
    """Operator-fixable misconfiguration (bad DSN, bad port, empty secret)."""

    status_code = 500


class MissingCredential(ConfigurationError):
    """Telegram bot token or chat id not configured."""


class UpstreamRejected(ReportError):
    """Telegram answered, but with ok=false."""

    status_code = 502

    def __init__(self, payload: Optional[Dict[str, Any]]):
        self.payload = payload
        description = (payload or {}).get("description") if isinstance(payload, dict) else None
        super().__init__(f"Telegram rejected the message: {description or 'no description'}")
