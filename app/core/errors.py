from typing import Dict, List


class LessonValidationError(Exception):
    """Request payload failed validation; carries one entry per violated field."""

    def __init__(self, details: List[Dict[str, str]]):
        self.details = details
        fields = ", ".join(d["field"] for d in details)
        super().__init__(f"Invalid request payload: {fields}")


class ProviderError(Exception):
    """Base for live-generation failures. Absorbed by the lesson generator."""


class ProviderUnavailableError(ProviderError):
    """No credential configured for the selected provider."""


class ProviderTransportError(ProviderError):
    """Network, timeout or non-success response from the provider."""


class ProviderParseError(ProviderError):
    """Provider text is empty, not JSON, or not shaped like a lesson package."""
