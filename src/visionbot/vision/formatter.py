"""Chat reply formatting for classification results."""

from visionbot.vision.schemas import ClassificationResult, SafeSearchPolicy

NO_LABELS_PLACEHOLDER = "VisionAPI lookup failed (no data)."


def flagged_categories(
    result: ClassificationResult | None, policy: SafeSearchPolicy
) -> list[str]:
    """Safe-search categories whose likelihood meets the policy threshold."""
    if result is None:
        return []

    flagged = []
    for category, threshold in policy.thresholds().items():
        likelihood = result.safe_search.get(category)
        if likelihood is not None and likelihood >= threshold:
            flagged.append(category)
    return flagged


def build_nsfw_message(result: ClassificationResult | None, policy: SafeSearchPolicy) -> str:
    flagged = flagged_categories(result, policy)
    if flagged:
        return f"Possibly NSFW! ({', '.join(flagged)}). "
    return ""


def build_analysis_message(result: ClassificationResult | None) -> str:
    if result is None:
        return ""
    labels = ", ".join(result.labels or (NO_LABELS_PLACEHOLDER,))
    if not labels.endswith("."):
        labels += "."
    return f"Image analysis: {labels}"


def format_analysis(result: ClassificationResult | None, policy: SafeSearchPolicy) -> str:
    """Build the chat reply for a classification result.

    Args:
        result: Classification output, or None when nothing was classified.
        policy: Deployment safe-search thresholds.

    Returns:
        Safety warning followed by the label summary. Empty for None.
    """
    return build_nsfw_message(result, policy) + build_analysis_message(result)
