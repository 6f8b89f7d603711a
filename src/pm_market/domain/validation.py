"""Market creation rules: pure functions, raise InvalidMarketInputError."""

from datetime import datetime, timedelta

from src.pm_common.errors import InvalidMarketInputError

MAX_QUESTION_TITLE_LENGTH = 160
MAX_DESCRIPTION_LENGTH = 2000
MIN_LABEL_LENGTH = 1
MAX_LABEL_LENGTH = 20

DEFAULT_YES_LABEL = "YES"
DEFAULT_NO_LABEL = "NO"


def validate_question_title(title: str) -> str:
    if not 1 <= len(title) <= MAX_QUESTION_TITLE_LENGTH:
        raise InvalidMarketInputError(
            f"questionTitle must be 1..{MAX_QUESTION_TITLE_LENGTH} characters"
        )
    return title


def validate_description(description: str) -> str:
    if len(description) > MAX_DESCRIPTION_LENGTH:
        raise InvalidMarketInputError(
            f"description must be at most {MAX_DESCRIPTION_LENGTH} characters"
        )
    return description


def normalize_labels(yes_label: str | None, no_label: str | None) -> tuple[str, str]:
    """Trim both labels, default blanks to YES/NO, then length-check."""
    yes = (yes_label or "").strip() or DEFAULT_YES_LABEL
    no = (no_label or "").strip() or DEFAULT_NO_LABEL
    for name, label in (("yesLabel", yes), ("noLabel", no)):
        if not MIN_LABEL_LENGTH <= len(label) <= MAX_LABEL_LENGTH:
            raise InvalidMarketInputError(
                f"{name} must be {MIN_LABEL_LENGTH}..{MAX_LABEL_LENGTH} characters"
            )
    return yes, no


def validate_resolution_time(
    resolution_at: datetime, now: datetime, minimum_future_hours: float
) -> datetime:
    earliest = now + timedelta(hours=minimum_future_hours)
    if resolution_at <= earliest:
        raise InvalidMarketInputError(
            f"resolutionDateTime must be more than {minimum_future_hours:g} hours in the future"
        )
    return resolution_at
