"""PolicyEngine: policy validation, pool construction and candidate acceptance."""

from __future__ import annotations

import itertools
from typing import Iterable

from keysmith.errors import EmptyPoolError, InvalidPolicyError
from keysmith.policy.models import AMBIGUOUS_CHARACTERS, CharacterClass, Policy


class PolicyEngine:
    """Stateless predicates over a policy and a candidate string."""

    @staticmethod
    def validate(policy: Policy) -> None:
        if policy.length < 1:
            raise InvalidPolicyError("Length must be at least 1")
        for cls in policy.classes:
            if not isinstance(cls, CharacterClass):
                raise InvalidPolicyError(f"Unknown character class: {cls!r}")
        for cls, count in policy.min_per_class.items():
            if not isinstance(cls, CharacterClass):
                raise InvalidPolicyError(f"Unknown character class: {cls!r}")
            if count < 0:
                raise InvalidPolicyError(f"Minimum for {cls.value} must not be negative")
        if policy.avoid_repeats and policy.max_consecutive_repeats < 1:
            raise InvalidPolicyError("max_consecutive_repeats must be at least 1")
        if any(not p for p in policy.forbidden_patterns):
            raise InvalidPolicyError("Forbidden patterns must not be empty")

    @staticmethod
    def build_pool(policy: Policy) -> str:
        pool = "".join(
            cls.alphabet for cls in CharacterClass.ordered() if cls in policy.classes
        )
        if policy.avoid_ambiguous:
            pool = "".join(c for c in pool if c not in AMBIGUOUS_CHARACTERS)

        if not pool:
            raise EmptyPoolError(
                "Character pool is empty. Enable at least one character class."
            )
        return pool

    @staticmethod
    def is_acceptable(candidate: str, policy: Policy) -> bool:
        for cls in CharacterClass.ordered():
            count = PolicyEngine.count_class(candidate, cls)
            if cls in policy.classes and count == 0:
                return False
            if count < policy.minimum(cls):
                return False

        if PolicyEngine.has_forbidden_pattern(candidate, policy.forbidden_patterns):
            return False

        if policy.avoid_repeats:
            if PolicyEngine.longest_run(candidate) > policy.max_consecutive_repeats:
                return False

        return True

    # ------------------------------------------------------------------
    @staticmethod
    def count_class(candidate: str, cls: CharacterClass) -> int:
        alphabet = cls.alphabet
        return sum(1 for c in candidate if c in alphabet)

    @staticmethod
    def has_forbidden_pattern(candidate: str, patterns: Iterable[str]) -> bool:
        lowered = candidate.lower()
        for pattern in patterns:
            pattern = pattern.lower()
            if pattern in lowered or pattern[::-1] in lowered:
                return True
        return False

    @staticmethod
    def longest_run(candidate: str) -> int:
        """Length of the longest run of one repeated character."""
        return max((len(list(group)) for _, group in itertools.groupby(candidate)), default=0)


# Module-level shortcuts
build_pool = PolicyEngine.build_pool
is_acceptable = PolicyEngine.is_acceptable
