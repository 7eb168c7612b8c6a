"""VisionBot: image labels and safe-search warnings for links posted in chat."""

__version__ = "0.1.0"
