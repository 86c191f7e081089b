"""HTTP transport: bearer-token JSON requests against the CRM API."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import urlencode

import aiohttp

from trackmykid._constants import USER_AGENT
from trackmykid._redact import redact_for_log
from trackmykid.config import CrmConfig
from trackmykid.exceptions import (
    CrmApiError,
    CrmAuthenticationError,
    CrmForbiddenError,
    CrmNotFoundError,
    CrmTransportError,
)

_logger = logging.getLogger(__name__)


class Transport(Protocol):
    """Structural transport interface used by the client and page controllers.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        token: str = "",
    ) -> Any:
        ...


def build_query(params: Mapping[str, Any] | None) -> str:
    """Encode *params* as ``?k=v&...``, skipping ``None`` and empty strings."""
    if not params:
        return ""
    pairs = [(str(k), str(v)) for k, v in params.items() if v is not None and v != ""]
    if not pairs:
        return ""
    return f"?{urlencode(pairs)}"


def _decode_text(raw: bytes, charset: str) -> str:
    """Decode a response body, replacing bytes the charset cannot map."""
    try:
        return raw.decode(charset, errors="replace")
    except LookupError:
        # Unknown charset label from the server.
        return raw.decode("utf-8", errors="replace")


def _decode_body(text: str) -> Any:
    """Parse JSON when possible, otherwise hand back the raw text."""
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


def error_message(data: Any, text: str, status: int) -> str:
    """Pick the human-readable message for a failed response."""
    message: Any = None
    if isinstance(data, Mapping):
        message = data.get("message") or data.get("error")
    if not message:
        message = text or f"Request failed: {status}"
    if not isinstance(message, str):
        message = json.dumps(message)
    return message


def raise_for_status(status: int, data: Any, text: str, endpoint: str) -> None:
    """Map a non-2xx status to the matching exception."""
    if 200 <= status < 300:
        return
    message = error_message(data, text, status)
    error_cls: type[CrmApiError] = CrmApiError
    if status == 401:
        error_cls = CrmAuthenticationError
    elif status == 403:
        error_cls = CrmForbiddenError
    elif status == 404:
        error_cls = CrmNotFoundError
    raise error_cls(message, status_code=status, raw=data, endpoint=endpoint)


class HttpTransport:
    """aiohttp-backed transport with timeouts and GET retries."""

    def __init__(self, config: CrmConfig, http_session: aiohttp.ClientSession) -> None:
        self._config = config
        self._http = http_session

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
        token: str = "",
    ) -> Any:
        """Send one request and return the decoded body.

        GET requests are retried ``config.get_retries`` times on transport
        failure; everything else is attempted once.
        """
        method = method.upper()
        attempts = 1 + max(0, self._config.get_retries) if method == "GET" else 1
        for attempt in range(1, attempts + 1):
            try:
                return await self._send(method, endpoint, params=params, body=body, token=token)
            except CrmTransportError:
                if attempt >= attempts:
                    raise
                _logger.debug("Retrying %s %s after transport failure (%d/%d)", method, endpoint, attempt, attempts)
        raise AssertionError("unreachable")  # pragma: no cover

    async def _send(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None,
        body: Any,
        token: str,
    ) -> Any:
        headers: dict[str, str] = {
            "accept": "application/json",
            "content-type": "application/json",
            "user-agent": USER_AGENT,
        }
        if token:
            headers["authorization"] = f"Bearer {token}"

        url = f"{self._config.base_url}{endpoint}{build_query(params)}"
        data: str | None = None
        if method in ("POST", "PUT", "PATCH"):
            data = json.dumps(body if body is not None else {})

        _logger.debug("%s %s body=%s", method, url, redact_for_log(body))

        timeout = aiohttp.ClientTimeout(total=self._config.request_timeout)
        try:
            async with self._http.request(method, url, data=data, headers=headers, timeout=timeout) as resp:
                raw = await resp.read()
                status = resp.status
                charset = resp.charset or "utf-8"
        except TimeoutError as exc:
            raise CrmTransportError(
                f"Request to {endpoint} timed out after {self._config.request_timeout:g}s",
                endpoint=endpoint,
            ) from exc
        except aiohttp.ClientError as exc:
            raise CrmTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc

        text = _decode_text(raw, charset)
        decoded = _decode_body(text)
        _logger.debug("%s %s -> %d %s", method, endpoint, status, redact_for_log(decoded, max_string=200))
        raise_for_status(status, decoded, text, endpoint)
        return decoded
