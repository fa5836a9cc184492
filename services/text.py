"""Text helpers shared by the services."""

import re
import unicodedata

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def slugify(text: str) -> str:
    """Lower-case, ASCII, hyphen separated: ``"Hi-Fi Audio!"`` -> ``"hi-fi-audio"``."""
    text = unicodedata.normalize("NFKD", text).encode("ascii", "ignore").decode("ascii")
    text = text.lower().strip()
    text = re.sub(r"[^\w\s-]", "", text)
    text = re.sub(r"[\s_-]+", "-", text)
    return text.strip("-")


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_PATTERN.match(value))


def normalize_email(value: str) -> str:
    return value.strip().lower()
