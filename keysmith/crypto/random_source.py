"""Cryptographically secure source of uniform integers and unbiased index draws."""

from __future__ import annotations

import secrets


class SecureRandomSource:
    """Uniform unsigned integers from the operating system CSPRNG."""

    BITS = 32

    def next_uint(self) -> int:
        return secrets.randbits(self.BITS)


def require_secure(source) -> SecureRandomSource:
    """Refuse anything that is not a SecureRandomSource (e.g. ``random.Random``)."""
    if not isinstance(source, SecureRandomSource):
        raise TypeError(
            "Character sampling requires a SecureRandomSource, got %s"
            % type(source).__name__
        )
    return source


def uniform_index(source: SecureRandomSource, n: int) -> int:
    """Draw an index in ``[0, n)`` without modulo bias.

    Raw values at or above the largest multiple of *n* that fits in the
    source's range are discarded and redrawn.
    """
    if n < 1:
        raise ValueError("n must be at least 1")
    span = 1 << source.BITS
    if n > span:
        raise ValueError("n exceeds the range of the random source")
    limit = span - (span % n)
    while True:
        value = source.next_uint()
        if value < limit:
            return value % n
