"""Shared test fixtures."""

from __future__ import annotations

from typing import Iterable, List

import httpx
import pytest

from keysmith.crypto.random_source import SecureRandomSource
from keysmith.policy.models import CharacterClass, Policy


# SHA-1("password") = 5BAA61E4C9B93F3F0682250B6CF8331B7EE68FD8
BREACHED_PASSWORD = "password"
BREACHED_PREFIX = "5BAA6"
BREACHED_SUFFIX = "1E4C9B93F3F0682250B6CF8331B7EE68FD8"

OTHER_SUFFIXES = (
    "0018A45C4D1DEF81644B54AB7F969B88D65:1",
    "00D4F6E8FA6EECAD2A3AA415EEC418D38EC:2",
    "011053FD0102E94D6AE2F8B83D76FAF94F6:1",
)


class ScriptedSource(SecureRandomSource):
    """Deterministic source for sampling tests: replays *values*, then cycles."""

    def __init__(self, values: Iterable[int]):
        self._values: List[int] = list(values)
        self._pos = 0

    def next_uint(self) -> int:
        value = self._values[self._pos % len(self._values)]
        self._pos += 1
        return value


@pytest.fixture
def full_policy():
    """All four classes with every guard switched on."""
    return Policy(
        length=18,
        classes=frozenset(CharacterClass),
        avoid_ambiguous=True,
        min_per_class={cls: 1 for cls in CharacterClass},
        avoid_repeats=True,
        max_consecutive_repeats=2,
    )


def range_body(*extra_lines: str) -> str:
    return "\r\n".join(OTHER_SUFFIXES + extra_lines)


def stub_client(status: int = 200, body: str = "", seen: list | None = None) -> httpx.AsyncClient:
    """An AsyncClient whose transport answers every request with *status*/*body*."""

    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status, text=body)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture(autouse=True)
def reset_keysmith_logger():
    """Drop handlers installed by setup_secure_logging between tests."""
    yield
    import logging
    import logging.handlers

    root = logging.getLogger("keysmith")
    for handler in list(root.handlers):
        if not (
            isinstance(handler, logging.handlers.RotatingFileHandler)
            or type(handler) is logging.StreamHandler
        ):
            continue
        root.removeHandler(handler)
        handler.close()
