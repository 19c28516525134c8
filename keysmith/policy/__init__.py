"""Keysmith password policy modules."""

from keysmith.policy.engine import PolicyEngine, build_pool, is_acceptable
from keysmith.policy.models import (
    AMBIGUOUS_CHARACTERS,
    DEFAULT_FORBIDDEN_PATTERNS,
    CharacterClass,
    Policy,
)

__all__ = [
    "AMBIGUOUS_CHARACTERS",
    "DEFAULT_FORBIDDEN_PATTERNS",
    "CharacterClass",
    "Policy",
    "PolicyEngine",
    "build_pool",
    "is_acceptable",
]
