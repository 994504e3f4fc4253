"""Classification of raw image generation failures."""

from culinary_lens.domain.errors import ClassifiedError, ErrorCategory

NETWORK_MESSAGE = "Connection issue. Please check your network and try again."
CONTENT_POLICY_MESSAGE = (
    "Content blocked by safety filters. Try rewording the description."
)
RATE_LIMIT_MESSAGE = "Usage limit reached. Please try again in a moment."
EMPTY_RESULT_MESSAGE = (
    "The AI couldn't generate an image. Try adjusting the style or details."
)
UNKNOWN_MESSAGE = (
    "Generation failed. Try adjusting the custom details or simply retry."
)

# Order matters: first match wins.
_RULES: tuple[tuple[tuple[str, ...], ErrorCategory, str], ...] = (
    (("safety", "blocked"), ErrorCategory.CONTENT_POLICY, CONTENT_POLICY_MESSAGE),
    (("429", "quota"), ErrorCategory.RATE_LIMIT, RATE_LIMIT_MESSAGE),
    (("no image generated",), ErrorCategory.EMPTY_RESULT, EMPTY_RESULT_MESSAGE),
)


def classify_error(raw: BaseException | str | None) -> ClassifiedError:
    """Map a raw failure onto a user-facing error category."""
    message, generic = _error_texts(raw)
    if (
        "xhr error" in message
        or "fetch failed" in message
        or "network" in message
        or "network" in generic
    ):
        return ClassifiedError(ErrorCategory.NETWORK, NETWORK_MESSAGE)
    for needles, category, guidance in _RULES:
        if any(needle in message for needle in needles):
            return ClassifiedError(category, guidance)
    return ClassifiedError(ErrorCategory.UNKNOWN, UNKNOWN_MESSAGE)


def _error_texts(raw: BaseException | str | None) -> tuple[str, str]:
    """Return the lower-cased message and generic string form of a failure."""
    if raw is None:
        return "", ""
    if isinstance(raw, str):
        lowered = raw.lower()
        return lowered, lowered
    message = str(raw).lower()
    generic = f"{type(raw).__name__}: {raw}".lower()
    return message, generic
