"""Keysmith breach-check modules."""

from keysmith.breach.checker import (
    BreachChecker,
    BreachCheckSession,
    find_suffix,
    parse_range_response,
    sha1_hex,
    split_digest,
)
from keysmith.breach.models import BreachResult

__all__ = [
    "BreachChecker",
    "BreachCheckSession",
    "BreachResult",
    "find_suffix",
    "parse_range_response",
    "sha1_hex",
    "split_digest",
]
