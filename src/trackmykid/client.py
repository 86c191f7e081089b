"""High-level async client for the TrackMyKid CRM API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import aiohttp
from pydantic import ValidationError

from trackmykid._constants import LEGACY_LOGIN_ENDPOINT, LOGIN_ENDPOINT
from trackmykid._transport import HttpTransport, Transport
from trackmykid.config import CrmConfig
from trackmykid.exceptions import (
    CrmApiError,
    CrmAuthenticationError,
    CrmError,
    CrmNotFoundError,
)
from trackmykid.models.token import LoginResponse
from trackmykid.routes import DASHBOARD, LOGIN
from trackmykid.session import SessionContext

_logger = logging.getLogger(__name__)


class CrmClient:
    """Async client for the CRM REST API.

    Usage::

        async with CrmClient(config, context=context) as client:
            await client.login("me@example.com", "secret", remember=True)
            customers = await client.get("/api/customers", {"page": 1})

    Every request carries the bearer token held by *context*.  A 401 from
    any endpoint clears the stored tokens and navigates to the login
    route before :class:`~trackmykid.exceptions.CrmAuthenticationError`
    propagates; a 403 leaves credentials untouched.
    """

    def __init__(
        self,
        config: CrmConfig | None = None,
        *,
        context: SessionContext | None = None,
        session: aiohttp.ClientSession | None = None,
        transport: Transport | None = None,
    ) -> None:
        self._config = config if config is not None else CrmConfig()
        self._context = context if context is not None else SessionContext()
        self._external_session = session is not None
        self._http_session = session
        self._external_transport = transport is not None
        self._transport: Transport | None = transport

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> CrmClient:
        if self._transport is None:
            if self._http_session is None:
                self._http_session = aiohttp.ClientSession()
            self._transport = HttpTransport(self._config, self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None
        if not self._external_transport:
            self._transport = None

    @property
    def config(self) -> CrmConfig:
        return self._config

    @property
    def context(self) -> SessionContext:
        return self._context

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _require_transport(self) -> Transport:
        if self._transport is None:
            raise CrmError("Client not initialized. Use 'async with CrmClient(...) as client:'")
        return self._transport

    def _handle_unauthorized(self, endpoint: str) -> None:
        _logger.info("Unauthorized response from %s; clearing credentials", endpoint)
        self._context.clear_tokens()
        self._context.navigator.navigate(LOGIN)

    async def _request(
        self,
        method: str,
        endpoint: str,
        *,
        params: Mapping[str, Any] | None = None,
        body: Any = None,
    ) -> Any:
        transport = self._require_transport()
        try:
            return await transport.request(
                method,
                endpoint,
                params=params,
                body=body,
                token=self._context.token,
            )
        except CrmAuthenticationError:
            self._handle_unauthorized(endpoint)
            raise

    # ------------------------------------------------------------------
    # Verbs
    # ------------------------------------------------------------------

    async def get(self, endpoint: str, params: Mapping[str, Any] | None = None) -> Any:
        """GET *endpoint*; ``None`` and empty-string params are omitted."""
        return await self._request("GET", endpoint, params=params)

    async def post(self, endpoint: str, body: Any = None) -> Any:
        return await self._request("POST", endpoint, body=body if body is not None else {})

    async def put(self, endpoint: str, body: Any = None) -> Any:
        return await self._request("PUT", endpoint, body=body if body is not None else {})

    async def delete(self, endpoint: str) -> Any:
        return await self._request("DELETE", endpoint)

    # ------------------------------------------------------------------
    # Authentication
    # ------------------------------------------------------------------

    async def _post_login(self, endpoint: str, credentials: dict[str, str]) -> Any:
        transport = self._require_transport()
        return await transport.request("POST", endpoint, body=credentials)

    async def login(self, email: str, password: str, *, remember: bool = False) -> LoginResponse:
        """Authenticate and store the returned bearer token.

        Tries ``/api/auth/login`` first and falls back to ``/auth/login``
        when the former does not exist.  With *remember* the token goes to
        durable storage, otherwise to session-scoped storage.

        Raises
        ------
        CrmAuthenticationError
            Credentials rejected or the response carried no token.
        CrmTransportError
            The server could not be reached.
        """
        credentials = {"email": email.strip(), "password": password}
        try:
            try:
                response = await self._post_login(LOGIN_ENDPOINT, credentials)
            except CrmNotFoundError:
                _logger.debug("%s not found, falling back to %s", LOGIN_ENDPOINT, LEGACY_LOGIN_ENDPOINT)
                response = await self._post_login(LEGACY_LOGIN_ENDPOINT, credentials)
        except CrmApiError as exc:
            raise CrmAuthenticationError(
                "Invalid email or password",
                status_code=exc.status_code,
                raw=exc.raw,
                endpoint=exc.endpoint,
            ) from exc

        if not isinstance(response, dict) or not response.get("token"):
            raise CrmAuthenticationError("Invalid login", raw=response, endpoint=LOGIN_ENDPOINT)
        try:
            login = LoginResponse.model_validate({"token": str(response["token"]), "raw": response})
        except ValidationError as exc:
            raise CrmAuthenticationError("Invalid login", raw=response, endpoint=LOGIN_ENDPOINT) from exc

        self._context.store_token(login.token, remember=remember)
        self._context.navigator.navigate(DASHBOARD)
        return login

    def logout(self) -> None:
        self._context.clear_tokens()
        self._context.navigator.navigate(LOGIN)
