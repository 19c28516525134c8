"""PasswordGenerator: rejection sampling of candidates against a Policy."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Union

from keysmith.config import Config
from keysmith.crypto.random_source import SecureRandomSource, require_secure, uniform_index
from keysmith.errors import PolicyUnsatisfiableError
from keysmith.policy.engine import PolicyEngine
from keysmith.policy.models import Policy

logger = logging.getLogger("keysmith.crypto")


# ============================================================================
#  Generation outcome
# ============================================================================
@dataclass(frozen=True)
class Accepted:
    password: str
    attempts: int


@dataclass(frozen=True)
class Exhausted:
    attempts: int


Outcome = Union[Accepted, Exhausted]


# ============================================================================
#  PasswordGenerator
# ============================================================================
class PasswordGenerator:
    """Secure random password generation with bounded policy retries."""

    def __init__(
        self,
        source: Optional[SecureRandomSource] = None,
        max_attempts: int = Config.MAX_GENERATION_ATTEMPTS,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.source = require_secure(source if source is not None else SecureRandomSource())
        self.max_attempts = max_attempts

    def draw(self, pool: str, length: int) -> str:
        return "".join(pool[uniform_index(self.source, len(pool))] for _ in range(length))

    def attempt(self, policy: Policy) -> Outcome:
        """Run the sampling loop and report Accepted or Exhausted.

        Raises EmptyPoolError / InvalidPolicyError before any sampling.
        """
        PolicyEngine.validate(policy)
        pool = PolicyEngine.build_pool(policy)
        length = policy.length

        for attempts in range(1, self.max_attempts + 1):
            candidate = self.draw(pool, length)
            if PolicyEngine.is_acceptable(candidate, policy):
                logger.debug(
                    "Accepted candidate after %d attempt(s) (pool=%d, length=%d)",
                    attempts,
                    len(pool),
                    length,
                )
                return Accepted(candidate, attempts)

        logger.warning("Policy not satisfied after %d attempts", self.max_attempts)
        return Exhausted(self.max_attempts)

    def generate(self, policy: Policy) -> str:
        outcome = self.attempt(policy)
        if isinstance(outcome, Exhausted):
            raise PolicyUnsatisfiableError(outcome.attempts)
        return outcome.password


def generate_password(policy: Policy) -> str:
    return PasswordGenerator().generate(policy)
