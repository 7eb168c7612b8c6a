"""Google Cloud Vision API client for labels and safe-search detection."""

import httpx
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError

from visionbot.utils.errors import ClassificationError
from visionbot.utils.logging import get_logger
from visionbot.vision.schemas import ClassificationResult, Likelihood

logger = get_logger(__name__)

VISION_API_URL = "https://vision.googleapis.com/v1/images:annotate"

LABEL_MAX_RESULTS = 5
SAFE_SEARCH_MAX_RESULTS = 1


class ApiStatus(BaseModel):
    """Error object returned by the Vision API."""

    model_config = ConfigDict(extra="ignore")

    code: int | None = None
    message: str = "Unknown Vision API error"


class LabelAnnotation(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: str


class AnnotateImageResponse(BaseModel):
    """One entry of the ``responses`` array."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    label_annotations: list[LabelAnnotation] = Field(
        default_factory=list, alias="labelAnnotations"
    )
    safe_search_annotation: dict[str, object] = Field(
        default_factory=dict, alias="safeSearchAnnotation"
    )
    error: ApiStatus | None = None


class BatchAnnotateResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    responses: list[AnnotateImageResponse] = Field(default_factory=list)
    error: ApiStatus | None = None


def build_request_body(content: str) -> dict:
    """Build an images:annotate request for one base64-encoded image."""
    return {
        "requests": [
            {
                "image": {"content": content},
                "features": [
                    {"type": "LABEL_DETECTION", "maxResults": LABEL_MAX_RESULTS},
                    {"type": "SAFE_SEARCH_DETECTION", "maxResults": SAFE_SEARCH_MAX_RESULTS},
                ],
            }
        ]
    }


def parse_response(payload: object) -> ClassificationResult:
    """Translate an images:annotate response into a ClassificationResult.

    Raises:
        ClassificationError: If the payload carries an error or is malformed.
    """
    try:
        batch = BatchAnnotateResponse.model_validate(payload)
    except ValidationError as e:
        raise ClassificationError(
            "Malformed Vision API response",
            details={"errors": e.error_count()},
        ) from e

    if batch.error is not None:
        raise ClassificationError(batch.error.message, details={"code": batch.error.code})

    if not batch.responses:
        raise ClassificationError("Vision API returned no responses")

    response = batch.responses[0]
    if response.error is not None:
        raise ClassificationError(
            response.error.message, details={"code": response.error.code}
        )

    safe_search = {}
    for category, value in response.safe_search_annotation.items():
        likelihood = Likelihood.parse(value)
        if likelihood is not None:
            safe_search[category] = likelihood

    return ClassificationResult(
        labels=tuple(label.description for label in response.label_annotations),
        safe_search=safe_search,
    )


class VisionClient:
    """Sends images to the Vision API.

    The API key is sent as a query parameter and never logged.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        api_key: SecretStr,
        api_url: str = VISION_API_URL,
    ):
        self._client = client
        self._api_key = api_key
        self._api_url = api_url

    async def annotate(self, content: str) -> ClassificationResult:
        """Classify one base64-encoded image.

        Args:
            content: Base64 image data.

        Returns:
            Labels and safe-search likelihoods.

        Raises:
            ClassificationError: If the request fails or the API reports an error.
        """
        logger.info("vision_request", content_length=len(content))

        try:
            response = await self._client.post(
                self._api_url,
                params={"key": self._api_key.get_secret_value()},
                headers={"Content-Type": "application/json"},
                json=build_request_body(content),
            )
        except httpx.HTTPError as e:
            # str(e) may embed the request URL and with it the key
            logger.error("vision_request_error", error_type=type(e).__name__)
            raise ClassificationError(
                f"Vision API request failed: {type(e).__name__}"
            ) from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(
                "vision_response_unreadable",
                status_code=response.status_code,
            )
            raise ClassificationError(
                f"Vision API returned unreadable body (HTTP {response.status_code})",
                details={"status": response.status_code},
            ) from e

        try:
            result = parse_response(payload)
        except ClassificationError as e:
            logger.error(
                "vision_api_error",
                status_code=response.status_code,
                error=e.message,
            )
            raise

        if response.is_error:
            logger.error("vision_http_error", status_code=response.status_code)
            raise ClassificationError(
                f"Vision API returned HTTP {response.status_code}",
                details={"status": response.status_code},
            )

        logger.info(
            "vision_response",
            labels=list(result.labels),
            safe_search={k: v.name for k, v in result.safe_search.items()},
        )

        return result
