"""Outbound HTTP capability injected into the network-bound tools."""

from __future__ import annotations

import functools
import logging
from collections.abc import Mapping
from typing import Any

import anyio
import requests

logger = logging.getLogger(__name__)


class HttpClient:
    """Async facade over a :class:`requests.Session`.

    Calls run in a worker thread. When a ``deadline`` is given the await is
    cancelled once it expires and the worker is abandoned, so the caller never
    waits longer than the deadline.
    """

    def __init__(
        self,
        session: requests.Session | None = None,
        *,
        user_agent: str = "MCP-Server/1.0",
    ) -> None:
        self._session = session if session is not None else requests.Session()
        self._user_agent = user_agent

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        data: bytes | None = None,
        timeout: float | None = None,
        deadline: float | None = None,
    ) -> requests.Response:
        """Send one request.

        Args:
            method: HTTP method.
            url: Target URL.
            headers: Extra headers; they override the default ``User-Agent``.
            params: Query string parameters.
            data: Raw request body.
            timeout: Socket timeout in seconds passed to ``requests``.
            deadline: Overall limit in seconds after which the call is aborted.

        Raises:
            TimeoutError: If ``deadline`` expires.
            requests.RequestException: On connection or protocol failures.

        """
        merged_headers = {"User-Agent": self._user_agent, **(headers or {})}
        call = functools.partial(
            self._session.request,
            method,
            url,
            headers=merged_headers,
            params=params,
            data=data,
            timeout=timeout,
        )
        logger.debug("%s %s", method, url)
        if deadline is None:
            return await anyio.to_thread.run_sync(call)
        with anyio.fail_after(deadline):
            return await anyio.to_thread.run_sync(call, abandon_on_cancel=True)

    def close(self) -> None:
        """Close pooled connections."""
        self._session.close()
