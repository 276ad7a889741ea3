"""Utilities package"""

from .validators import validate_email_address, sanitize_html, normalize_text, missing_fields, parse_quantity
from .helpers import round_money, sum_money, to_decimal

__all__ = [
    "validate_email_address",
    "sanitize_html",
    "normalize_text",
    "missing_fields",
    "parse_quantity",
    "round_money",
    "sum_money",
    "to_decimal",
]
