"""Custom validators and sanitizers"""

import math
import re
from typing import Any, Iterable, List, Mapping, Optional
import bleach
from email_validator import validate_email, EmailNotValidError

def validate_email_address(email: str) -> str:
    """Validate and normalize email"""
    email = email.strip().lower()

    try:
        # Validate email
        validation = validate_email(email, check_deliverability=False)
        return validation.normalized
    except EmailNotValidError as e:
        raise ValueError(str(e))

def sanitize_html(html: str, allowed_tags: Optional[list] = None) -> str:
    """Strip markup from user supplied text, keeping a small set of formatting tags"""
    if allowed_tags is None:
        allowed_tags = ["b", "i", "u", "em", "strong", "p", "br", "ul", "ol", "li"]

    return bleach.clean(html, tags=allowed_tags, attributes={}, strip=True)

def normalize_text(text: str) -> str:
    """Normalize text input"""
    # Remove extra whitespace
    text = " ".join(text.split())

    # Remove zero-width characters
    text = re.sub(r"[\u200b\u200c\u200d\ufeff]", "", text)

    # Trim
    return text.strip()

def missing_fields(data: Mapping[str, Any], required: Iterable[str]) -> List[str]:
    """Names of required fields that are absent or blank"""
    missing = []
    for field in required:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            missing.append(field)
    return missing

def parse_quantity(value: Any, default: Optional[int] = None) -> Optional[int]:
    """
    Coerce a quantity from a request body to int.

    Returns `default` when the value is missing or not a number, so callers
    decide whether that means "one" or "invalid". NaN and infinity raise
    ValueError.
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"Quantity must be a finite number, got {value}")
        return int(value)
    match = re.match(r"^\s*([+-]?\d+)", str(value))
    if not match:
        return default
    return int(match.group(1))
