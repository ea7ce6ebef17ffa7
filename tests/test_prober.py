"""Tests for single-URL probing."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import httpx
import pytest

from keepalive.config.models import DEFAULT_USER_AGENT, ProberConfig
from keepalive.registry.models import LinkStatus, ProbeResult
from keepalive.registry.prober import Prober, probe_url


def _mock_client(mock_cls, response=None, error=None):
    mock_client = AsyncMock()
    if error is not None:
        mock_client.get.side_effect = error
    else:
        mock_client.get.return_value = response
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    mock_cls.return_value = mock_client
    return mock_client


class TestProbeUrl:
    @pytest.mark.asyncio
    async def test_ok_response(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, httpx.Response(200))
            result = await probe_url("https://example.test")
        assert result.success
        assert result.status == LinkStatus.ONLINE
        assert result.status_code == 200
        assert result.error is None
        assert result.response_time >= 0

    @pytest.mark.asyncio
    async def test_sends_user_agent_and_timeout(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            client = _mock_client(mock_cls, httpx.Response(200))
            await probe_url("https://example.test", timeout=3.0, user_agent="probe/1.0")
        mock_cls.assert_called_once_with(timeout=3.0, follow_redirects=True)
        client.get.assert_called_once_with("https://example.test", headers={"User-Agent": "probe/1.0"})

    @pytest.mark.asyncio
    async def test_default_user_agent(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            client = _mock_client(mock_cls, httpx.Response(204))
            await probe_url("https://example.test")
        assert client.get.call_args.kwargs["headers"]["User-Agent"] == DEFAULT_USER_AGENT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code", [404, 500, 503])
    async def test_error_status_still_online(self, code):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, httpx.Response(code))
            result = await probe_url("https://example.test")
        assert result.success
        assert result.status_code == code

    @pytest.mark.asyncio
    async def test_server_error_offline_when_configured(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, httpx.Response(502))
            result = await probe_url("https://example.test", server_error_offline=True)
        assert not result.success
        assert result.status == LinkStatus.OFFLINE
        assert result.status_code == 502
        assert result.error == "HTTP 502"

    @pytest.mark.asyncio
    async def test_client_error_online_when_server_error_offline(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, httpx.Response(404))
            result = await probe_url("https://example.test", server_error_offline=True)
        assert result.success

    @pytest.mark.asyncio
    async def test_connection_refused(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, error=httpx.ConnectError("Connection refused"))
            result = await probe_url("https://example.test")
        assert not result.success
        assert result.status == LinkStatus.OFFLINE
        assert result.status_code == 0
        assert "Connection refused" in result.error

    @pytest.mark.asyncio
    async def test_timeout(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, error=httpx.ReadTimeout("timed out"))
            result = await probe_url("https://example.test", timeout=2.0)
        assert not result.success
        assert result.status_code == 0
        assert result.error == "Timeout after 2.0s"

    @pytest.mark.asyncio
    async def test_other_transport_error(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, error=httpx.RemoteProtocolError("peer closed connection"))
            result = await probe_url("https://example.test")
        assert not result.success
        assert "peer closed" in result.error

    @pytest.mark.asyncio
    async def test_invalid_url_is_offline(self):
        with patch("keepalive.registry.prober.httpx.AsyncClient") as mock_cls:
            _mock_client(mock_cls, error=httpx.InvalidURL("Invalid port: 'abc'"))
            result = await probe_url("http://example.com:abc/")
        assert not result.success
        assert result.status == LinkStatus.OFFLINE
        assert result.status_code == 0
        assert "Invalid port" in result.error


class TestProber:
    @pytest.mark.asyncio
    async def test_uses_config(self):
        prober = Prober(ProberConfig(timeout=4.0, user_agent="ua/2", server_error_offline=True))
        with patch(
            "keepalive.registry.prober.probe_url",
            new_callable=AsyncMock,
            return_value=ProbeResult(success=True, status_code=200),
        ) as mock_probe:
            await prober.probe("https://example.test")
        mock_probe.assert_called_once_with(
            "https://example.test", timeout=4.0, user_agent="ua/2", server_error_offline=True
        )

    def test_default_timeout(self):
        assert Prober().timeout == 15.0
