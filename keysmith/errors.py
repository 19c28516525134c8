"""Error taxonomy shared by the policy engine, generator and breach checker."""

from __future__ import annotations

from typing import Optional


class KeysmithError(Exception):
    """Base class for all Keysmith errors."""


class InvalidPolicyError(KeysmithError, ValueError):
    """The policy is structurally invalid (e.g. non-positive length)."""


class EmptyPoolError(KeysmithError, ValueError):
    """No usable characters remain once the policy is applied."""


class PolicyUnsatisfiableError(KeysmithError, RuntimeError):
    """The retry budget ran out before a candidate satisfied the policy."""

    def __init__(self, attempts: int):
        super().__init__(
            f"Could not generate a password meeting the policy after {attempts} attempts"
        )
        self.attempts = attempts


class BreachServiceError(KeysmithError):
    """The breach lookup failed; the password's status is unknown."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code
