"""Keysmith generation and scoring modules."""

from keysmith.crypto.engine import (
    Accepted,
    Exhausted,
    PasswordGenerator,
    generate_password,
)
from keysmith.crypto.random_source import SecureRandomSource, uniform_index
from keysmith.crypto.strength import (
    StrengthReport,
    StrengthTier,
    calculate_entropy,
    classify,
    score,
)

__all__ = [
    "Accepted",
    "Exhausted",
    "PasswordGenerator",
    "generate_password",
    "SecureRandomSource",
    "uniform_index",
    "StrengthReport",
    "StrengthTier",
    "calculate_entropy",
    "classify",
    "score",
]
