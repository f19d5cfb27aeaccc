import pytest

from jsonrpc_client.classifier import invalid_request_reply
from jsonrpc_client.dispatcher import Dispatcher, OutcomeKind, parse_error_reply
from jsonrpc_client.errors import JsonRpcError, ParseError
from jsonrpc_client.pending import PendingCallTable


def make_dispatcher(**kwargs):
    table = PendingCallTable()
    replies = []
    dispatcher = Dispatcher(table, reply=replies.append, **kwargs)
    return table, dispatcher, replies


@pytest.mark.anyio
async def test_resolves_and_rejects_matching_calls():
    table, dispatcher, replies = make_dispatcher()
    first = table.register(1)
    second = table.register(2)

    outcomes = dispatcher.on_chunk(
        b'{"jsonrpc":"2.0","result":"ok","id":1}'
        b'{"jsonrpc":"2.0","error":{"code":-32602,"message":"Invalid params"},"id":2}'
    )

    assert [o.kind for o in outcomes] == [OutcomeKind.resolved, OutcomeKind.rejected]
    assert await first == "ok"
    with pytest.raises(JsonRpcError) as info:
        await second
    assert info.value.code == -32602
    assert replies == []


@pytest.mark.anyio
async def test_unmatched_reply_reported():
    table, dispatcher, _ = make_dispatcher()
    [outcome] = dispatcher.on_chunk('{"result":1,"id":42}')
    assert outcome.kind is OutcomeKind.unmatched
    assert outcome.id == 42


def test_unrecognized_message_not_answered_by_default():
    _, dispatcher, replies = make_dispatcher()
    [outcome] = dispatcher.on_chunk('{"foo":"bar"}')
    assert outcome.kind is OutcomeKind.invalid
    assert outcome.reply == invalid_request_reply()
    assert replies == []


def test_unrecognized_message_answered_when_enabled():
    _, dispatcher, replies = make_dispatcher(reply_to_invalid=True)
    dispatcher.on_chunk('{"foo":"bar"}')
    assert replies == [invalid_request_reply()]


def test_inbound_request_ignored():
    _, dispatcher, replies = make_dispatcher(reply_to_invalid=True)
    [outcome] = dispatcher.on_chunk('{"jsonrpc":"2.0","method":"ping","id":7}')
    assert outcome.kind is OutcomeKind.ignored_request
    assert outcome.detail == "ping"
    assert replies == []


@pytest.mark.anyio
async def test_decode_failure_does_not_block_later_values():
    table, dispatcher, _ = make_dispatcher()
    future = table.register(1)
    outcomes = dispatcher.on_chunk('garbage {"result":1,"id":1}')
    assert [o.kind for o in outcomes] == [OutcomeKind.decode_error, OutcomeKind.resolved]
    assert await future == 1


def test_malformed_top_level_input_sends_parse_error():
    _, dispatcher, replies = make_dispatcher()
    with pytest.raises(ParseError):
        dispatcher.on_chunk(12345)
    assert replies == [parse_error_reply()]
    assert replies[0]["error"]["code"] == -32700


@pytest.mark.anyio
async def test_invalid_utf8_does_not_reject_the_chunk():
    table, dispatcher, replies = make_dispatcher()
    future = table.register(1)
    outcomes = dispatcher.on_chunk(b'\xff\xfe{"result":"ok","id":1}')
    assert [o.kind for o in outcomes] == [OutcomeKind.decode_error, OutcomeKind.resolved]
    assert await future == "ok"
    assert replies == []


@pytest.mark.anyio
async def test_failure_while_routing_is_contained(monkeypatch):
    table, dispatcher, _ = make_dispatcher()
    table.register(1)
    second = table.register(2)
    original = table.resolve

    def flaky_resolve(call_id, result):
        if call_id == 1:
            raise RuntimeError("boom")
        return original(call_id, result)

    monkeypatch.setattr(table, "resolve", flaky_resolve)
    outcomes = dispatcher.on_chunk('{"result":1,"id":1}{"result":2,"id":2}')
    assert [o.kind for o in outcomes] == [OutcomeKind.failed, OutcomeKind.resolved]
    assert await second == 2


@pytest.mark.anyio
async def test_batch_reply_settles_each_member():
    table, dispatcher, _ = make_dispatcher()
    first = table.register(1)
    second = table.register(2)
    outcomes = dispatcher.on_chunk('[{"result":"a","id":1},{"result":"b","id":2}]')
    assert [o.kind for o in outcomes] == [OutcomeKind.resolved, OutcomeKind.resolved]
    assert (await first, await second) == ("a", "b")
