import asyncio
import logging

import pytest

from toolbridge.mcp.catalogue import build_tables, rest, string, tool
from toolbridge.mcp.dispatcher import DispatchOutcome, Dispatcher
from toolbridge.mcp.errors import ApiError, CatalogueMismatchError, TransportFault
from toolbridge.mcp.schema import ToolCallRequest, ToolCallResult

from conftest import StubClient


def _run(coro):
    return asyncio.run(coro)


def _dispatcher(entries, client=None) -> Dispatcher:
    registry, adapters = build_tables(entries)
    return Dispatcher(registry, adapters, client or StubClient())


def _repo_tool(**options):
    return rest(
        "github_get_repo",
        "Get repository details",
        "GET",
        "/repos/{owner}/{repo}",
        **options,
    )


def test_every_registered_name_resolves_to_an_adapter():
    dispatcher = _dispatcher(
        [
            _repo_tool(),
            rest("github_list_user_orgs", "List orgs", "GET", "/user/orgs"),
        ],
        StubClient(default={"ok": True}),
    )
    for descriptor in dispatcher.list_tools():
        arguments = {field: "x" for field in descriptor.required_fields}
        settled = _run(dispatcher.dispatch(ToolCallRequest(name=descriptor.name, arguments=arguments)))
        assert settled.outcome is not DispatchOutcome.UNKNOWN_TOOL


@pytest.mark.parametrize("name", ["", "github_nope", "GITHUB_GET_REPO", "github_get_repo "])
def test_unknown_names_return_an_error_envelope(name):
    client = StubClient()
    settled = _run(_dispatcher([_repo_tool()], client).dispatch(ToolCallRequest(name=name)))
    assert settled.outcome is DispatchOutcome.UNKNOWN_TOOL
    assert settled.result.is_error is True
    assert settled.result.first_text == f"Error: Unknown tool: {name}"
    assert client.call_count == 0


@pytest.mark.parametrize("arguments", [{}, {"owner": "octo"}, {"repo": "hello"}, {"owner": None, "repo": "r"}])
def test_missing_required_field_makes_no_network_call(arguments):
    client = StubClient()
    settled = _run(_dispatcher([_repo_tool()], client).dispatch(
        ToolCallRequest(name="github_get_repo", arguments=arguments)
    ))
    assert settled.outcome is DispatchOutcome.INVALID_ARGUMENTS
    assert settled.result.first_text.startswith("Error: Missing required argument:")
    assert client.call_count == 0


def test_api_error_text_is_reported_verbatim():
    client = StubClient({("GET", "/repos/o/r"): ApiError(404, "Not Found")})
    settled = _run(_dispatcher([_repo_tool()], client).dispatch(
        ToolCallRequest(name="github_get_repo", arguments={"owner": "o", "repo": "r"})
    ))
    assert settled.outcome is DispatchOutcome.FAILED
    text = settled.result.first_text
    assert text.startswith("Error: ")
    assert "404" in text
    assert "Not Found" in text


def test_transport_fault_settles_as_failure():
    client = StubClient({("GET", "/repos/o/r"): TransportFault("GitHub", "timed out")})
    result = _run(_dispatcher([_repo_tool()], client).call_tool("github_get_repo", {"owner": "o", "repo": "r"}))
    assert result.is_error
    assert result.first_text == "Error: GitHub request failed: timed out"


def test_unexpected_adapter_exception_never_escapes(caplog):
    async def broken(arguments, client):
        raise KeyError("sha")

    async def silent(arguments, client):
        raise RuntimeError()

    dispatcher = _dispatcher([tool("t_broken", "broken", broken), tool("t_silent", "silent", silent)])
    with caplog.at_level(logging.ERROR, logger="toolbridge.mcp.dispatcher"):
        broken_result = _run(dispatcher.call_tool("t_broken", {}))
        silent_result = _run(dispatcher.call_tool("t_silent", {}))
    assert broken_result.first_text == "Error: 'sha'"
    assert silent_result.first_text == "Error: RuntimeError"
    assert any(record.tool == "t_broken" for record in caplog.records)


def test_unserializable_adapter_payload_settles_as_error():
    async def odd_payload(arguments, client):
        return {b"k": {1, 2}}

    dispatcher = _dispatcher([tool("t_bytes", "bytes keys", odd_payload)])
    settled = _run(dispatcher.dispatch(ToolCallRequest(name="t_bytes", arguments={})))
    assert settled.outcome is DispatchOutcome.FAILED
    assert not settled.ok
    assert settled.result.is_error
    assert settled.result.first_text.startswith("Error: keys must be")


def test_cancellation_is_not_converted_to_an_envelope():
    async def cancelled(arguments, client):
        raise asyncio.CancelledError()

    dispatcher = _dispatcher([tool("t_cancel", "cancel", cancelled)])
    with pytest.raises(asyncio.CancelledError):
        _run(dispatcher.call_tool("t_cancel", {}))


def test_envelopes_are_never_empty():
    async def returns_none(arguments, client):
        return None

    async def returns_dict(arguments, client):
        return {"n": 1}

    client = StubClient({("GET", "/repos/o/r"): ApiError(500, "")})
    dispatcher = _dispatcher(
        [_repo_tool(), tool("t_none", "none", returns_none), tool("t_dict", "dict", returns_dict)],
        client,
    )
    results = [
        _run(dispatcher.call_tool("t_none")),
        _run(dispatcher.call_tool("t_dict")),
        _run(dispatcher.call_tool("github_get_repo", {"owner": "o", "repo": "r"})),
        _run(dispatcher.call_tool("github_get_repo", {})),
        _run(dispatcher.call_tool("missing")),
    ]
    for result in results:
        assert isinstance(result, ToolCallResult)
        assert result.content
        assert all(entry.type == "text" and isinstance(entry.text, str) for entry in result.content)
    assert results[0].first_text == "Operation completed successfully"
    assert results[1].first_text == '{"n":1}'


def test_concurrent_calls_do_not_block_each_other():
    completed: list[str] = []

    async def slow(arguments, client):
        await asyncio.sleep(0.05)
        completed.append("slow")
        return ToolCallResult.text("slow")

    async def fast(arguments, client):
        completed.append("fast")
        return ToolCallResult.text("fast")

    dispatcher = _dispatcher([tool("t_slow", "slow", slow), tool("t_fast", "fast", fast)])

    async def scenario():
        slow_task = asyncio.create_task(dispatcher.call_tool("t_slow", {}))
        fast_task = asyncio.create_task(dispatcher.call_tool("t_fast", {}))
        fast_result = await fast_task
        assert not slow_task.done()
        slow_result = await slow_task
        return fast_result, slow_result

    fast_result, slow_result = _run(scenario())
    assert completed == ["fast", "slow"]
    assert (fast_result.first_text, slow_result.first_text) == ("fast", "slow")


def test_list_call_scenario_with_three_tools():
    client = StubClient({("GET", "/a"): {"ok": True}})
    dispatcher = _dispatcher(
        [
            rest("A", "tool A", "GET", "/a"),
            rest("B", "tool B", "GET", "/b", properties={"x": string()}, required=["x"]),
            rest("C", "tool C", "GET", "/c"),
        ],
        client,
    )
    assert [descriptor.name for descriptor in dispatcher.list_tools()] == ["A", "B", "C"]

    missing_x = _run(dispatcher.call_tool("B", {}))
    assert missing_x.to_wire()["content"][0]["type"] == "text"
    assert missing_x.first_text.startswith("Error: ")
    assert "x" in missing_x.first_text.removeprefix("Error: ")

    ok = _run(dispatcher.call_tool("A", {}))
    assert ok.to_wire() == {"content": [{"type": "text", "text": '{"ok":true}'}], "isError": False}


def test_registry_and_adapters_must_stay_in_lockstep():
    registry, adapters = build_tables([_repo_tool()])
    adapters["orphan_tool"] = adapters["github_get_repo"]
    with pytest.raises(CatalogueMismatchError) as excinfo:
        Dispatcher(registry, adapters, StubClient())
    assert excinfo.value.details["unregistered_adapters"] == ["orphan_tool"]

    del adapters["orphan_tool"]
    del adapters["github_get_repo"]
    with pytest.raises(CatalogueMismatchError) as excinfo:
        Dispatcher(registry, adapters, StubClient())
    assert excinfo.value.details["missing_adapters"] == ["github_get_repo"]
