"""Pydantic schemas for image resolution and classification."""

from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Safe-search categories checked against the deployment policy, in reply order
SAFE_SEARCH_CATEGORIES = ("adult", "spoof", "medical", "violence")


class Likelihood(IntEnum):
    """Ordered confidence scale used by Vision API safe-search annotations."""

    UNKNOWN = 0
    VERY_UNLIKELY = 1
    UNLIKELY = 2
    POSSIBLE = 3
    LIKELY = 4
    VERY_LIKELY = 5

    @classmethod
    def parse(cls, value: object) -> "Likelihood | None":
        """Look up a likelihood by its API name. Unknown names give None."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        return None


class ImageCandidate(BaseModel):
    """A probed candidate image. A failed probe has no url and zero area."""

    model_config = ConfigDict(frozen=True)

    url: str | None = Field(default=None, description="Candidate image URL")
    pixel_area: int = Field(default=0, ge=0, description="Width x height in pixels")

    @classmethod
    def unresolved(cls) -> "ImageCandidate":
        return cls(url=None, pixel_area=0)


class ResolvedImage(BaseModel):
    """The single image chosen for classification."""

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Image URL to download")
    pixel_area: int | None = Field(
        default=None,
        description="Probed area, None when the source URL was already an image",
    )


class ClassificationResult(BaseModel):
    """Labels and safe-search likelihoods for one image."""

    model_config = ConfigDict(frozen=True)

    labels: tuple[str, ...] = Field(default=(), description="Label descriptions, best first")
    safe_search: dict[str, Likelihood] = Field(
        default_factory=dict,
        description="Safe-search category to likelihood",
    )


class SafeSearchPolicy(BaseModel):
    """Per-deployment likelihood thresholds that trigger an NSFW warning.

    A category set to None (or an empty string in configuration) is disabled.
    """

    model_config = ConfigDict(frozen=True)

    adult: Likelihood | None = Likelihood.POSSIBLE
    spoof: Likelihood | None = None
    medical: Likelihood | None = Likelihood.POSSIBLE
    violence: Likelihood | None = Likelihood.VERY_LIKELY

    @field_validator("adult", "spoof", "medical", "violence", mode="before")
    @classmethod
    def _parse_threshold(cls, value: object) -> Likelihood | None:
        if value is None or value == "":
            return None
        likelihood = Likelihood.parse(value)
        if likelihood is None:
            raise ValueError(f"unknown likelihood: {value!r}")
        return likelihood

    def thresholds(self) -> dict[str, Likelihood]:
        """Enabled categories and their thresholds, in reply order."""
        return {
            category: getattr(self, category)
            for category in SAFE_SEARCH_CATEGORIES
            if getattr(self, category) is not None
        }
