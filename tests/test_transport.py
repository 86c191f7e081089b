"""Transport and client tests against a local aiohttp server."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from typing import Any

import aiohttp
import pytest
from aiohttp import test_utils, web

from trackmykid._transport import HttpTransport, build_query, error_message
from trackmykid.client import CrmClient
from trackmykid.config import CrmConfig
from trackmykid.exceptions import (
    CrmApiError,
    CrmAuthenticationError,
    CrmNotFoundError,
    CrmTransportError,
)
from trackmykid.pages import ListPage, get_entity
from trackmykid.routes import DASHBOARD, LOGIN
from trackmykid.session import MemoryStorage, SessionContext


@asynccontextmanager
async def _serve(setup: Callable[[web.Application], None]) -> AsyncIterator[str]:
    app = web.Application()
    setup(app)
    server = test_utils.TestServer(app)
    await server.start_server()
    try:
        yield str(server.make_url("/"))
    finally:
        await server.close()


async def _echo(request: web.Request) -> web.Response:
    body = await request.text()
    return web.json_response(
        {
            "method": request.method,
            "query": dict(request.query),
            "authorization": request.headers.get("Authorization"),
            "contentType": request.headers.get("Content-Type"),
            "body": body,
        }
    )


def test_build_query_skips_empty_values() -> None:
    assert build_query({"q": None, "page": 2, "perPage": 10, "x": ""}) == "?page=2&perPage=10"
    assert build_query({"q": None}) == ""
    assert build_query(None) == ""


def test_error_message_precedence() -> None:
    assert error_message({"message": "Bad", "error": "Other"}, "raw", 400) == "Bad"
    assert error_message({"error": "Other"}, "raw", 400) == "Other"
    assert error_message("plain", "plain", 500) == "plain"
    assert error_message(None, "", 502) == "Request failed: 502"
    assert error_message({"message": {"field": "bad"}}, "", 422) == '{"field": "bad"}'


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_get_sends_bearer_and_omits_empty_params() -> None:
    async with _serve(lambda app: app.router.add_get("/api/customers", _echo)) as base_url:
        config = CrmConfig(base_url=base_url)
        async with aiohttp.ClientSession() as http:
            transport = HttpTransport(config, http)
            echoed = await transport.request(
                "GET", "/api/customers", params={"q": None, "page": 1, "perPage": 10}, token="tok"
            )

    assert echoed["query"] == {"page": "1", "perPage": "10"}
    assert echoed["authorization"] == "Bearer tok"
    assert echoed["contentType"] == "application/json"


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_post_without_body_sends_empty_object_and_no_auth_header() -> None:
    async with _serve(lambda app: app.router.add_post("/api/kids", _echo)) as base_url:
        config = CrmConfig(base_url=base_url)
        async with aiohttp.ClientSession() as http:
            echoed = await HttpTransport(config, http).request("POST", "/api/kids")

    assert echoed["body"] == "{}"
    assert echoed["authorization"] is None


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_error_statuses_map_to_exceptions() -> None:
    async def bad_request(_request: web.Request) -> web.Response:
        return web.json_response({"message": "Email already used"}, status=400)

    async def broken(_request: web.Request) -> web.Response:
        return web.Response(text="upstream exploded", status=500)

    async def unauthorized(_request: web.Request) -> web.Response:
        return web.json_response({"error": "jwt expired"}, status=401)

    def setup(app: web.Application) -> None:
        app.router.add_post("/api/customers", bad_request)
        app.router.add_get("/api/broken", broken)
        app.router.add_get("/api/me", unauthorized)

    async with _serve(setup) as base_url:
        config = CrmConfig(base_url=base_url, get_retries=0)
        async with aiohttp.ClientSession() as http:
            transport = HttpTransport(config, http)

            with pytest.raises(CrmApiError) as bad:
                await transport.request("POST", "/api/customers", body={"name": "x"})
            with pytest.raises(CrmApiError) as exploded:
                await transport.request("GET", "/api/broken")
            with pytest.raises(CrmAuthenticationError) as expired:
                await transport.request("GET", "/api/me")
            with pytest.raises(CrmNotFoundError):
                await transport.request("GET", "/api/missing")

    assert str(bad.value) == "Email already used"
    assert bad.value.status_code == 400
    assert bad.value.endpoint == "/api/customers"
    assert str(exploded.value) == "upstream exploded"
    assert exploded.value.raw == "upstream exploded"
    assert str(expired.value) == "jwt expired"


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_empty_success_body_is_none() -> None:
    async def no_content(_request: web.Request) -> web.Response:
        return web.Response(status=204)

    async with _serve(lambda app: app.router.add_delete("/api/alerts/1", no_content)) as base_url:
        async with aiohttp.ClientSession() as http:
            result = await HttpTransport(CrmConfig(base_url=base_url), http).request("DELETE", "/api/alerts/1")

    assert result is None


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_slow_get_times_out_after_retry() -> None:
    hits: list[int] = []

    async def slow(_request: web.Request) -> web.Response:
        hits.append(1)
        await asyncio.sleep(0.5)
        return web.json_response([])

    async with _serve(lambda app: app.router.add_get("/api/telemetry", slow)) as base_url:
        config = CrmConfig(base_url=base_url, request_timeout=0.05, get_retries=1)
        async with aiohttp.ClientSession() as http:
            with pytest.raises(CrmTransportError) as exc_info:
                await HttpTransport(config, http).request("GET", "/api/telemetry")

    assert len(hits) == 2
    assert "timed out" in str(exc_info.value)
    assert exc_info.value.endpoint == "/api/telemetry"


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_slow_post_is_not_retried() -> None:
    hits: list[int] = []

    async def slow(_request: web.Request) -> web.Response:
        hits.append(1)
        await asyncio.sleep(0.5)
        return web.json_response({})

    async with _serve(lambda app: app.router.add_post("/api/kids", slow)) as base_url:
        config = CrmConfig(base_url=base_url, request_timeout=0.05, get_retries=3)
        async with aiohttp.ClientSession() as http:
            with pytest.raises(CrmTransportError):
                await HttpTransport(config, http).request("POST", "/api/kids", body={"name": "Sam"})

    assert len(hits) == 1


# ------------------------------------------------------------------
# Client end to end
# ------------------------------------------------------------------


def _crm_app(app: web.Application, state: dict[str, Any]) -> None:
    async def login(request: web.Request) -> web.Response:
        payload = await request.json()
        if payload.get("password") != "secret":
            return web.json_response({"message": "Invalid credentials"}, status=401)
        return web.json_response({"token": "server-token", "user": {"id": 1}})

    async def customers(request: web.Request) -> web.Response:
        if request.headers.get("Authorization") != f"Bearer {state['valid_token']}":
            return web.json_response({"message": "Unauthorized"}, status=401)
        query = request.query.get("q", "")
        rows = [{"id": 1, "name": "Alpha Corp"}, {"id": 2, "name": "Beta Ltd"}]
        rows = [r for r in rows if query.lower() in r["name"].lower()]
        return web.json_response({"data": rows, "pagination": {"total": 21}})

    # Only the legacy login route exists on this server.
    app.router.add_post("/auth/login", login)
    app.router.add_get("/api/customers", customers)


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_login_falls_back_and_lists_customers() -> None:
    state = {"valid_token": "server-token"}
    context = SessionContext()
    async with _serve(lambda app: _crm_app(app, state)) as base_url:
        async with CrmClient(CrmConfig(base_url=base_url), context=context) as client:
            login = await client.login(" me@example.com ", "secret")
            assert login.token == "server-token"
            assert context.navigator.current == DASHBOARD
            # Without "remember" the token stays out of durable storage.
            assert context.durable.get("token") is None
            assert context.token == "server-token"

            page = ListPage(client, get_entity("customers"))
            await page.search("beta")

            assert [r.display("name") for r in page.state.rows] == ["Beta Ltd"]
            assert page.pager_label == "Page 1 of 3"

            state["valid_token"] = "rotated"
            await page.fetch()

    assert page.state.error is None
    assert context.token == ""
    assert context.navigator.current == LOGIN


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_login_with_wrong_password() -> None:
    context = SessionContext()
    async with _serve(lambda app: _crm_app(app, {"valid_token": ""})) as base_url:
        async with CrmClient(CrmConfig(base_url=base_url), context=context) as client:
            with pytest.raises(CrmAuthenticationError, match="Invalid email or password"):
                await client.login("me@example.com", "nope", remember=True)

    assert context.token == ""
    assert context.navigator.history == []


@pytest.mark.e2e
@pytest.mark.asyncio
async def test_invalid_utf8_body_does_not_escape_list_page() -> None:
    async def garbled(_request: web.Request) -> web.Response:
        return web.Response(
            body=b'{"data":[{"id":1,"name":"\xff\xfe"}]}',
            content_type="application/json",
            charset="utf-8",
        )

    context = SessionContext(durable=MemoryStorage({"token": "tok"}))
    async with _serve(lambda app: app.router.add_get("/api/customers", garbled)) as base_url:
        async with CrmClient(CrmConfig(base_url=base_url), context=context) as client:
            page = ListPage(client, get_entity("customers"))
            await page.fetch()

    assert page.state.loading is False
    assert page.state.error is None
    assert [r.id for r in page.state.rows] == [1]
    assert "\ufffd" in page.state.rows[0].display("name")
