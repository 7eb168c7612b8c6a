"""Image resolution and classification for chat-posted URLs."""

from visionbot.vision.schemas import (
    ClassificationResult,
    ImageCandidate,
    Likelihood,
    ResolvedImage,
    SafeSearchPolicy,
)
from visionbot.vision.classifier import VisionClient
from visionbot.vision.downloader import ImageDownloader
from visionbot.vision.extractor import extract_candidates, extract_urls
from visionbot.vision.formatter import format_analysis
from visionbot.vision.probe import SizeProbe
from visionbot.vision.resolver import ImageResolver

__all__ = [
    "ClassificationResult",
    "ImageCandidate",
    "Likelihood",
    "ResolvedImage",
    "SafeSearchPolicy",
    "VisionClient",
    "ImageDownloader",
    "extract_candidates",
    "extract_urls",
    "format_analysis",
    "SizeProbe",
    "ImageResolver",
]
