"""Tests for the k-anonymity breach check and the latest-wins session."""

from __future__ import annotations

import asyncio

import httpx
import pytest

from keysmith.breach.checker import (
    BreachChecker,
    BreachCheckSession,
    build_range_url,
    find_suffix,
    parse_range_response,
    sha1_hex,
    split_digest,
)
from keysmith.breach.models import BreachResult
from keysmith.errors import BreachServiceError
from tests.conftest import (
    BREACHED_PASSWORD,
    BREACHED_PREFIX,
    BREACHED_SUFFIX,
    range_body,
    stub_client,
)


class TestDigest:
    def test_sha1_uppercase_hex(self):
        digest = sha1_hex(BREACHED_PASSWORD)
        assert digest == BREACHED_PREFIX + BREACHED_SUFFIX
        assert digest == digest.upper()

    def test_split(self):
        prefix, suffix = split_digest(sha1_hex(BREACHED_PASSWORD))
        assert (prefix, suffix) == (BREACHED_PREFIX, BREACHED_SUFFIX)
        assert len(prefix) == 5 and len(suffix) == 35

    def test_split_rejects_short_digest(self):
        with pytest.raises(ValueError):
            split_digest("ABCDEF")


class TestRangeParsing:
    def test_parse(self):
        records = parse_range_response(range_body(f"{BREACHED_SUFFIX}:42"))
        assert records[BREACHED_SUFFIX] == 42
        assert len(records) == 4

    def test_find_hit(self):
        result = find_suffix(range_body(f"{BREACHED_SUFFIX}:42"), BREACHED_SUFFIX)
        assert result == BreachResult(breached=True, occurrence_count=42)

    def test_find_miss(self):
        assert find_suffix(range_body(), BREACHED_SUFFIX) == BreachResult(False, 0)

    def test_case_is_normalised(self):
        result = find_suffix(range_body(f"{BREACHED_SUFFIX.lower()}:7"), BREACHED_SUFFIX)
        assert result.breached and result.occurrence_count == 7

    def test_trailing_newline_tolerated(self):
        body = range_body(f"{BREACHED_SUFFIX}:3") + "\r\n\r\n"
        assert find_suffix(body, BREACHED_SUFFIX).occurrence_count == 3

    @pytest.mark.parametrize(
        "line",
        [
            "not a record",
            f"{BREACHED_SUFFIX}",
            f"{BREACHED_SUFFIX}:many",
            "ZZZ:1",
            f"{BREACHED_SUFFIX}:\u00b2",
            f"{BREACHED_SUFFIX}:\u0661\u0662",
        ],
    )
    def test_malformed_raises(self, line):
        with pytest.raises(BreachServiceError, match="Malformed"):
            parse_range_response(line)

    def test_empty_body_raises(self):
        with pytest.raises(BreachServiceError, match="Empty"):
            find_suffix("", BREACHED_SUFFIX)


class TestBreachChecker:
    @pytest.mark.asyncio
    async def test_breached_password(self):
        seen = []
        client = stub_client(body=range_body(f"{BREACHED_SUFFIX}:9659365"), seen=seen)
        result = await BreachChecker(client=client).check(BREACHED_PASSWORD)
        assert result == BreachResult(breached=True, occurrence_count=9659365)

    @pytest.mark.asyncio
    async def test_only_prefix_is_sent(self):
        seen = []
        client = stub_client(body=range_body(), seen=seen)
        await BreachChecker(client=client).check(BREACHED_PASSWORD)
        assert len(seen) == 1
        url = str(seen[0].url)
        assert url == f"https://api.pwnedpasswords.com/range/{BREACHED_PREFIX}"
        assert BREACHED_SUFFIX not in url
        assert BREACHED_PASSWORD not in seen[0].url.path
        assert seen[0].method == "GET"

    @pytest.mark.asyncio
    async def test_clean_password(self):
        client = stub_client(body=range_body())
        result = await BreachChecker(client=client).check(BREACHED_PASSWORD)
        assert result == BreachResult(breached=False, occurrence_count=0)

    @pytest.mark.asyncio
    async def test_custom_api_url(self):
        seen = []
        client = stub_client(body=range_body(), seen=seen)
        checker = BreachChecker(api_url="https://mirror.example/range/", client=client)
        await checker.check(BREACHED_PASSWORD)
        assert str(seen[0].url) == f"https://mirror.example/range/{BREACHED_PREFIX}"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [404, 429, 500, 503])
    async def test_error_status_raises(self, status):
        client = stub_client(status=status, body=range_body(f"{BREACHED_SUFFIX}:1"))
        with pytest.raises(BreachServiceError) as excinfo:
            await BreachChecker(client=client).check(BREACHED_PASSWORD)
        assert excinfo.value.status_code == status

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        with pytest.raises(BreachServiceError) as excinfo:
            await BreachChecker(client=client).check(BREACHED_PASSWORD)
        assert isinstance(excinfo.value.__cause__, httpx.ConnectError)
        assert excinfo.value.status_code is None

    @pytest.mark.asyncio
    async def test_malformed_body_raises(self):
        client = stub_client(body="<html>maintenance</html>")
        with pytest.raises(BreachServiceError):
            await BreachChecker(client=client).check(BREACHED_PASSWORD)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "api_url", ["https://", "http://[::1/range", "ftp://mirror.example/range"]
    )
    async def test_unusable_api_url_raises(self, api_url):
        seen = []
        client = stub_client(body=range_body(), seen=seen)
        with pytest.raises(BreachServiceError, match="Invalid breach API URL"):
            await BreachChecker(api_url=api_url, client=client).check(BREACHED_PASSWORD)
        assert seen == []


class TestBuildRangeUrl:
    def test_joins_prefix(self):
        url = build_range_url("https://api.pwnedpasswords.com/range/", BREACHED_PREFIX)
        assert str(url) == f"https://api.pwnedpasswords.com/range/{BREACHED_PREFIX}"

    def test_missing_host_raises(self):
        with pytest.raises(BreachServiceError):
            build_range_url("https://", BREACHED_PREFIX)


class TestBreachCheckSession:
    @pytest.mark.asyncio
    async def test_single_check(self):
        session = BreachCheckSession(
            BreachChecker(client=stub_client(body=range_body(f"{BREACHED_SUFFIX}:5")))
        )
        result = await session.check(BREACHED_PASSWORD)
        assert result == BreachResult(True, 5)
        assert session.current_token == 1

    @pytest.mark.asyncio
    async def test_newer_check_supersedes_older(self):
        release = asyncio.Event()

        async def handler(request):
            if request.url.path.endswith(BREACHED_PREFIX):
                await release.wait()
            return httpx.Response(200, text=range_body(f"{BREACHED_SUFFIX}:5"))

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        session = BreachCheckSession(BreachChecker(client=client))

        stale = asyncio.create_task(session.check(BREACHED_PASSWORD))
        await asyncio.sleep(0.01)
        fresh = await session.check("a-different-password")

        assert fresh == BreachResult(False, 0)
        assert await stale is None
        assert session.current_token == 2

    @pytest.mark.asyncio
    async def test_cancel_abandons_lookup(self):
        release = asyncio.Event()

        async def handler(request):
            await release.wait()
            return httpx.Response(200, text=range_body())

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        session = BreachCheckSession(BreachChecker(client=client))

        pending = asyncio.create_task(session.check(BREACHED_PASSWORD))
        await asyncio.sleep(0.01)
        session.cancel()
        assert await pending is None

    @pytest.mark.asyncio
    async def test_caller_cancellation_propagates(self):
        release = asyncio.Event()

        async def handler(request):
            await release.wait()
            return httpx.Response(200, text=range_body())

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        session = BreachCheckSession(BreachChecker(client=client))

        pending = asyncio.create_task(session.check(BREACHED_PASSWORD))
        await asyncio.sleep(0.01)
        pending.cancel()
        with pytest.raises(asyncio.CancelledError):
            await pending

    @pytest.mark.asyncio
    async def test_current_failure_propagates(self):
        session = BreachCheckSession(BreachChecker(client=stub_client(status=500)))
        with pytest.raises(BreachServiceError):
            await session.check(BREACHED_PASSWORD)
