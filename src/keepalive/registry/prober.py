"""Single bounded HTTP GET probes."""

from __future__ import annotations

import logging
import time

import httpx

from keepalive.config.models import DEFAULT_USER_AGENT, ProberConfig
from keepalive.registry.models import ProbeResult

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


def _elapsed_ms(start: float) -> int:
    return round((time.monotonic() - start) * 1000)


async def probe_url(
    url: str,
    timeout: float = DEFAULT_TIMEOUT,
    user_agent: str = DEFAULT_USER_AGENT,
    server_error_offline: bool = False,
) -> ProbeResult:
    """Issue one GET to *url* and classify the outcome.

    Any HTTP response means the link is reachable, whatever its status code,
    unless *server_error_offline* is set and the server answered with a 5xx.
    Only transport failures (timeout, refused connection, DNS) mark the probe
    as failed otherwise.
    """
    headers = {"User-Agent": user_agent}
    start = time.monotonic()
    try:
        async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
            resp = await client.get(url, headers=headers)
    except httpx.ConnectError as exc:
        return ProbeResult(success=False, response_time=_elapsed_ms(start), error=f"Connection failed: {exc}")
    except httpx.TimeoutException:
        return ProbeResult(success=False, response_time=_elapsed_ms(start), error=f"Timeout after {timeout}s")
    except httpx.HTTPError as exc:
        return ProbeResult(success=False, response_time=_elapsed_ms(start), error=str(exc) or type(exc).__name__)
    except Exception as exc:
        # httpx.InvalidURL and friends sit outside the HTTPError hierarchy
        return ProbeResult(success=False, response_time=_elapsed_ms(start), error=str(exc) or type(exc).__name__)

    elapsed = _elapsed_ms(start)
    if server_error_offline and resp.status_code >= 500:
        return ProbeResult(
            success=False,
            response_time=elapsed,
            status_code=resp.status_code,
            error=f"HTTP {resp.status_code}",
        )
    return ProbeResult(success=True, response_time=elapsed, status_code=resp.status_code)


class Prober:
    """Probes URLs with a fixed set of settings."""

    def __init__(self, config: ProberConfig | None = None) -> None:
        self._config = config or ProberConfig()

    @property
    def timeout(self) -> float:
        return self._config.timeout

    async def probe(self, url: str) -> ProbeResult:
        result = await probe_url(
            url,
            timeout=self._config.timeout,
            user_agent=self._config.user_agent,
            server_error_offline=self._config.server_error_offline,
        )
        logger.debug(
            "Probed %s: %s (%s, %dms)",
            url,
            result.status.value,
            result.status_code or result.error,
            result.response_time,
        )
        return result
