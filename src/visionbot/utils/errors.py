"""Custom exception classes for VisionBot."""


class VisionBotError(Exception):
    """Base exception for all VisionBot errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(VisionBotError):
    """Invalid or missing configuration."""

    pass


class ImageFetchError(VisionBotError):
    """Failed to fetch a source page or image."""

    pass


class ImageProbeError(VisionBotError):
    """Could not determine the dimensions of a candidate image."""

    pass


class ClassificationError(VisionBotError):
    """Vision API request failed or returned an error."""

    pass
