import asyncio

from tango_rpc import BroadcastChannel, ProcedureExecutionError, configure_logging, get_settings
from tango_rpc import create_client, create_server


class MyApi:
    def __init__(self):
        self._listeners = []

    async def greet(self, name):
        return f"Hello, {name}!"

    def add(self, a, b):
        return a + b

    async def process_items(self, items, callback):
        for item in items:
            callback(item.upper())

    def subscribe(self, callback):
        self._listeners.append(callback)

    def trigger(self, event):
        for listener in self._listeners:
            listener(event)

    async def error_prone(self):
        raise RuntimeError("Something went wrong!")


async def main():
    configure_logging(get_settings())

    # Both endpoints share one in-process bus; each ignores its own echo
    channel = BroadcastChannel()
    server = create_server(channel, MyApi())
    client = create_client(channel)
    client.on_connect(lambda: print("connected"))

    print(await client.call("greet", "World"))
    print(await client.call("add", 1, 2))

    await client.call("process_items", ["apple", "banana"], lambda item: print("processed", item))

    await client.call("subscribe", lambda event: print("event", event))
    await client.call("trigger", "first")
    await client.call("trigger", "second")

    try:
        await client.call("error_prone")
    except ProcedureExecutionError as e:
        print("remote error:", e)

    client.cleanup()
    server.cleanup()


if __name__ == "__main__":
    asyncio.run(main())
