import asyncio
import json

import httpx
import pytest

from toolbridge.mcp.api_client import (
    AuthenticatedApiClient,
    BackendProfile,
    Presence,
    encode_query,
)
from toolbridge.mcp.errors import ApiError, TransportFault

PROFILE = BackendProfile(
    service="GitHub",
    base_url="https://api.example.test",
    headers={"X-GitHub-Api-Version": "2022-11-28"},
)


def _client(handler, profile: BackendProfile = PROFILE) -> AuthenticatedApiClient:
    return AuthenticatedApiClient(profile, "s3cret", transport=httpx.MockTransport(handler))


def _run(coro):
    return asyncio.run(coro)


def test_get_injects_credentials_and_protocol_headers():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"ok": True})

    async def scenario():
        async with _client(handler) as client:
            return await client.get("/repos/octo/hello", {"per_page": 5, "page": None})

    assert _run(scenario()) == {"ok": True}
    request = seen[0]
    assert request.method == "GET"
    assert request.url.path == "/repos/octo/hello"
    assert dict(request.url.params) == {"per_page": "5"}
    assert request.headers["Authorization"] == "Bearer s3cret"
    assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"


def test_absolute_urls_are_not_rebased():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[])

    async def scenario():
        async with _client(handler) as client:
            await client.get("https://uploads.example.test/assets")

    _run(scenario())
    assert str(seen[0].url) == "https://uploads.example.test/assets"


def test_query_encoding_drops_none_and_flattens_values():
    assert encode_query({"a": None, "b": True, "c": False, "d": ["x", "y"], "e": 3}) == [
        ("b", "true"),
        ("c", "false"),
        ("d", "x,y"),
        ("e", "3"),
    ]


def test_default_params_are_merged_and_overridable():
    seen: list[httpx.Request] = []
    profile = BackendProfile(service="Vercel", base_url="https://vercel.test", default_params={"teamId": "team_1"})

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={})

    async def scenario():
        async with _client(handler, profile) as client:
            await client.get("/v9/projects")
            await client.get("/v9/projects", {"teamId": "team_2"})

    _run(scenario())
    assert seen[0].url.params["teamId"] == "team_1"
    assert seen[1].url.params["teamId"] == "team_2"


def test_post_serializes_json_body():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(201, json={"id": 7})

    async def scenario():
        async with _client(handler) as client:
            return await client.post("/repos/octo/hello/issues", {"title": "Bug"})

    assert _run(scenario()) == {"id": 7}
    assert seen[0].method == "POST"
    assert json.loads(seen[0].content) == {"title": "Bug"}


def test_empty_success_body_parses_to_none_and_text_falls_back():
    responses = iter([httpx.Response(204), httpx.Response(200, text="diff --git a/x b/x")])

    async def scenario():
        async with _client(lambda request: next(responses)) as client:
            return await client.delete("/thing"), await client.get("/diff")

    assert _run(scenario()) == (None, "diff --git a/x b/x")


def test_non_success_raises_api_error_with_verbatim_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text='{"message":"Not Found"}')

    async def scenario():
        async with _client(handler) as client:
            await client.get("/repos/octo/missing")

    with pytest.raises(ApiError) as excinfo:
        _run(scenario())
    assert excinfo.value.status == 404
    assert excinfo.value.body == '{"message":"Not Found"}'
    assert str(excinfo.value) == 'GitHub API error (404): {"message":"Not Found"}'


def test_transport_failures_surface_as_transport_fault():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async def scenario():
        async with _client(handler) as client:
            await client.get("/repos")

    with pytest.raises(TransportFault) as excinfo:
        _run(scenario())
    assert isinstance(excinfo.value, ApiError)
    assert excinfo.value.status is None
    assert "connection refused" in str(excinfo.value)


def test_graphql_posts_envelope_and_raises_on_errors():
    seen: list[dict] = []
    responses = iter(
        [
            httpx.Response(200, json={"data": {"viewer": {"login": "octo"}}}),
            httpx.Response(200, json={"errors": [{"message": "bad field"}]}),
        ]
    )

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        assert request.url.path == "/graphql"
        return next(responses)

    async def scenario():
        async with _client(handler) as client:
            first = await client.graphql("query { viewer { login } }")
            with pytest.raises(ApiError) as excinfo:
                await client.graphql("query($id: ID!) { node(id: $id) { id } }", {"id": "X"})
            return first, excinfo.value

    first, error = _run(scenario())
    assert first == {"data": {"viewer": {"login": "octo"}}}
    assert seen[0] == {"query": "query { viewer { login } }"}
    assert seen[1]["variables"] == {"id": "X"}
    assert "bad field" in str(error)


def test_probe_models_absence_as_a_value():
    statuses = iter([204, 404, 500])

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(next(statuses), text="boom")

    async def scenario():
        async with _client(handler) as client:
            found = await client.probe("/orgs/o/members/u")
            missing = await client.probe("/orgs/o/members/u")
            with pytest.raises(ApiError):
                await client.probe("/orgs/o/members/u")
            return found, missing

    assert _run(scenario()) == (Presence.FOUND, Presence.NOT_FOUND)


def test_repr_never_contains_the_credential():
    client = _client(lambda request: httpx.Response(200))
    assert "s3cret" not in repr(client)
    _run(client.aclose())
