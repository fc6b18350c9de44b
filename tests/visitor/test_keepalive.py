"""
Unit tests for the keep-alive pinger.
"""

import asyncio
from unittest.mock import AsyncMock, patch

import httpx
import pytest

from visitor_service.keepalive import KeepAlivePinger


@pytest.mark.asyncio
async def test_ping_once_success():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(str(request.url))
        return httpx.Response(200, text="ok")

    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=45)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await pinger.ping_once(client) is True

    assert seen == ["https://me.test/healthz"]
    assert pinger.pings_sent == 1


@pytest.mark.asyncio
async def test_ping_once_failure_is_logged_not_raised():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=45)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await pinger.ping_once(client) is False

    assert pinger.pings_sent == 0


@pytest.mark.asyncio
async def test_loop_pings_until_stopped():
    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=0.01)

    with patch.object(KeepAlivePinger, "ping_once", AsyncMock(return_value=True)) as ping:
        pinger.start()
        assert pinger.running is True
        await asyncio.sleep(0.05)
        await pinger.stop()

    assert pinger.running is False
    assert ping.await_count >= 2

    count = ping.await_count
    await asyncio.sleep(0.03)
    assert ping.await_count == count


@pytest.mark.asyncio
async def test_first_ping_is_immediate():
    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=60)

    with patch.object(KeepAlivePinger, "ping_once", AsyncMock(return_value=False)) as ping:
        pinger.start()
        await asyncio.sleep(0.01)
        await pinger.stop()

    ping.assert_awaited_once()


@pytest.mark.asyncio
async def test_stop_without_start_is_noop():
    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=1)
    await pinger.stop()
    assert pinger.running is False


@pytest.mark.asyncio
async def test_ping_once_invalid_url_returns_false():
    pinger = KeepAlivePinger("http://my.app:notaport/healthz", interval_seconds=45)
    async with httpx.AsyncClient() as client:
        assert await pinger.ping_once(client) is False

    assert pinger.pings_sent == 0


@pytest.mark.asyncio
async def test_ping_once_bounded_by_timeout():
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(1)
        return httpx.Response(200, text="ok")

    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=45, timeout_seconds=0.05)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        assert await asyncio.wait_for(pinger.ping_once(client), timeout=0.5) is False


@pytest.mark.asyncio
async def test_loop_survives_invalid_url():
    pinger = KeepAlivePinger("http://my.app:notaport/healthz", interval_seconds=0.01)

    pinger.start()
    await asyncio.sleep(0.05)
    assert pinger.running is True

    await pinger.stop()
    assert pinger.running is False


@pytest.mark.asyncio
async def test_stop_logs_loop_error_instead_of_raising():
    pinger = KeepAlivePinger("https://me.test/healthz", interval_seconds=0.01)

    with patch.object(KeepAlivePinger, "_loop", AsyncMock(side_effect=RuntimeError("loop died"))):
        pinger.start()
        await asyncio.sleep(0.01)
        await pinger.stop()

    assert pinger.running is False
