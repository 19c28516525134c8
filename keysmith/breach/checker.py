"""BreachChecker (k-anonymity range lookup) and a latest-wins BreachCheckSession.

Only the first five hex characters of the password's SHA-1 digest are sent
to the range service; the suffix comparison happens locally.
"""

from __future__ import annotations

import asyncio
import logging
import string
from typing import Dict, Iterator, Optional, Tuple

import httpx
from cryptography.hazmat.primitives import hashes

from keysmith.breach.models import BreachResult
from keysmith.config import Config
from keysmith.errors import BreachServiceError

logger = logging.getLogger("keysmith.breach")

PREFIX_LEN = 5
SUFFIX_LEN = 35
_HEX = frozenset(string.hexdigits)


# ============================================================================
#  Digest helpers
# ============================================================================
def sha1_hex(password: str) -> str:
    """Uppercase hex SHA-1 of the UTF-8 encoded password."""
    digest = hashes.Hash(hashes.SHA1())
    digest.update(password.encode("utf-8"))
    return digest.finalize().hex().upper()


def split_digest(digest: str) -> Tuple[str, str]:
    if len(digest) != PREFIX_LEN + SUFFIX_LEN:
        raise ValueError("Expected a 40-character hex digest")
    return digest[:PREFIX_LEN], digest[PREFIX_LEN:]


def build_range_url(api_url: str, prefix: str) -> httpx.URL:
    """Join the range endpoint and *prefix*, rejecting unusable base URLs."""
    try:
        url = httpx.URL(f"{api_url.rstrip('/')}/{prefix}")
    except (httpx.InvalidURL, ValueError) as exc:
        raise BreachServiceError(f"Invalid breach API URL: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise BreachServiceError("Invalid breach API URL: expected an http(s) URL with a host")
    return url


# ============================================================================
#  Range response parsing
# ============================================================================
def _iter_records(body: str) -> Iterator[Tuple[str, int]]:
    seen = False
    for lineno, line in enumerate(body.splitlines(), 1):
        line = line.strip()
        if not line:
            continue
        hash_suffix, sep, count = line.partition(":")
        count = count.strip()
        if (
            not sep
            or len(hash_suffix) != SUFFIX_LEN
            or not _HEX.issuperset(hash_suffix)
            or not (count.isascii() and count.isdigit())
        ):
            raise BreachServiceError(f"Malformed range response at line {lineno}")
        seen = True
        yield hash_suffix.upper(), int(count)

    if not seen:
        raise BreachServiceError("Empty range response")


def parse_range_response(body: str) -> Dict[str, int]:
    return dict(_iter_records(body))


def find_suffix(body: str, suffix: str) -> BreachResult:
    """Scan the range body for *suffix*; the first match wins."""
    wanted = suffix.upper()
    for hash_suffix, count in _iter_records(body):
        if hash_suffix == wanted:
            return BreachResult(breached=True, occurrence_count=count)
    return BreachResult.clean()


# ============================================================================
#  BreachChecker
# ============================================================================
class BreachChecker:
    """Async client for the Pwned Passwords range API.

    A failed lookup always raises BreachServiceError; it is never reported
    as "not breached". No retries are attempted.
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_url = (api_url or Config.HIBP_RANGE_URL).rstrip("/")
        self.timeout = Config.BREACH_TIMEOUT if timeout is None else timeout
        self._client = client

    async def check(self, password: str) -> BreachResult:
        prefix, suffix = split_digest(sha1_hex(password))
        body = await self._fetch_range(prefix)
        result = find_suffix(body, suffix)
        logger.info("Breach check complete (breached=%s)", result.breached)
        return result

    async def _fetch_range(self, prefix: str) -> str:
        url = build_range_url(self.api_url, prefix)
        headers = {"User-Agent": Config.USER_AGENT}
        try:
            if self._client is not None:
                response = await self._client.get(url, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.get(url, headers=headers)
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            logger.error("Breach lookup failed: %s", type(exc).__name__)
            raise BreachServiceError(f"Breach lookup failed: {exc}") from exc

        if not response.is_success:
            logger.error("Breach lookup returned HTTP %d", response.status_code)
            raise BreachServiceError(
                f"Breach lookup returned HTTP {response.status_code}",
                status_code=response.status_code,
            )
        return response.text


# ============================================================================
#  BreachCheckSession
# ============================================================================
class BreachCheckSession:
    """Latest-wins wrapper around a BreachChecker.

    Every call to :meth:`check` takes a new token and cancels the previous
    in-flight lookup. A call whose token is no longer current resolves to
    ``None`` instead of a result, so a stale response can never overwrite a
    fresher one.
    """

    def __init__(self, checker: BreachChecker):
        self.checker = checker
        self._token = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def current_token(self) -> int:
        return self._token

    def is_current(self, token: int) -> bool:
        return token == self._token

    def cancel(self) -> None:
        """Abandon the in-flight lookup, if any."""
        self._token += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def check(self, password: str) -> Optional[BreachResult]:
        self.cancel()
        token = self._token
        task = asyncio.create_task(self.checker.check(password))
        self._task = task
        try:
            result = await task
        except (asyncio.CancelledError, BreachServiceError):
            if not self.is_current(token):
                logger.debug("Breach check %d superseded", token)
                return None
            raise
        finally:
            if self._task is task:
                self._task = None

        if not self.is_current(token):
            logger.debug("Discarding stale breach result %d", token)
            return None
        return result
