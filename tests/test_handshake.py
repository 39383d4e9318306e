from __future__ import annotations

from tango_rpc import BroadcastChannel, Client, MessageBuilder, MsgType, Server, pack_envelope, unpack_envelope
from tests.conftest import MyApi


def _server_ready(sender: str = "server-remote") -> str:
    return pack_envelope(MessageBuilder(sender).server_ready().build())


def test_client_connects_to_running_server() -> None:
    channel = BroadcastChannel()
    server = Server(channel, MyApi())
    client = Client(channel)

    assert client.is_connected
    fired = []
    client.on_connect(lambda: fired.append(True))
    assert fired == [True]

    client.cleanup()
    server.cleanup()


def test_server_started_after_client_connects_it() -> None:
    channel = BroadcastChannel()
    client = Client(channel)
    fired = []
    client.on_connect(lambda: fired.append(True))
    assert not client.is_connected

    server = Server(channel, MyApi())

    assert client.is_connected
    assert fired == [True]
    client.cleanup()
    server.cleanup()


def test_on_connect_fires_once_across_repeated_server_ready() -> None:
    channel = BroadcastChannel()
    client = Client(channel)
    fired = []
    client.on_connect(lambda: fired.append(True))

    for _ in range(3):
        channel.send_message(_server_ready())

    assert client.is_connected
    assert fired == [True]
    client.cleanup()


def test_server_answers_every_client_ready() -> None:
    channel = BroadcastChannel(record=True)
    server = Server(channel, MyApi())
    first = Client(channel)
    second = Client(channel)

    types = [unpack_envelope(f).type for f in channel.sent]
    assert types == [
        MsgType.SERVER_READY,
        MsgType.CLIENT_READY, MsgType.SERVER_READY,
        MsgType.CLIENT_READY, MsgType.SERVER_READY,
    ]
    assert first.is_connected and second.is_connected
    for endpoint in (first, second, server):
        endpoint.cleanup()


def test_restarted_server_does_not_refire_connect() -> None:
    channel = BroadcastChannel()
    server = Server(channel, MyApi())
    client = Client(channel)
    fired = []
    client.on_connect(lambda: fired.append(True))

    server.cleanup()
    restarted = Server(channel, MyApi())

    assert fired == [True]
    assert client.is_connected
    client.cleanup()
    restarted.cleanup()


def test_raising_connect_handler_is_contained() -> None:
    channel = BroadcastChannel()
    client = Client(channel)

    def boom():
        raise RuntimeError("handler failed")

    client.on_connect(boom)
    channel.send_message(_server_ready())
    assert client.is_connected
    client.cleanup()


def test_legacy_client_ignores_server_ready() -> None:
    channel = BroadcastChannel()
    client = Client(channel, handshake=False)
    fired = []
    client.on_connect(lambda: fired.append(True))

    channel.send_message(_server_ready())

    assert not client.is_connected
    assert fired == []
    client.cleanup()


def test_legacy_server_ignores_client_ready() -> None:
    channel = BroadcastChannel(record=True)
    server = Server(channel, MyApi(), handshake=False)
    client = Client(channel)

    assert [unpack_envelope(f).type for f in channel.sent] == [MsgType.CLIENT_READY]
    assert not client.is_connected
    client.cleanup()
    server.cleanup()
