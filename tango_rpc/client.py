from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Type, TypeVar, cast

from .callbacks import CallbackRegistry, encode_args
from .channel import Channel
from .codecs import Codec
from .endpoint import Endpoint
from .exceptions import ProcedureExecutionError
from .ids import IdSource
from .message import Envelope, MsgType

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PendingCalls:
    """
    id -> future of an outstanding call.

    An entry is added before its invoke is sent, so a reply can never beat it,
    and popped exactly once by the reply that settles it. Entries without a
    reply stay until they are cancelled (e.g. by asyncio.wait_for) or until
    cancel_all().
    """

    def __init__(self) -> None:
        self._futures: Dict[str, "asyncio.Future[Any]"] = {}

    def add(self, call_id: str, fut: "asyncio.Future[Any]") -> None:
        if call_id in self._futures:
            raise ValueError(f"call id already pending: {call_id!r}")
        self._futures[call_id] = fut

    def pop(self, call_id: str) -> Optional["asyncio.Future[Any]"]:
        return self._futures.pop(call_id, None)

    def discard(self, call_id: str, fut: "asyncio.Future[Any]") -> None:
        """Drop `call_id` only while it still maps to `fut`."""
        if self._futures.get(call_id) is fut:
            del self._futures[call_id]

    def cancel_all(self) -> int:
        futures, self._futures = self._futures, {}
        for fut in futures.values():
            if not fut.done():
                fut.cancel()
        return len(futures)

    def __contains__(self, call_id: object) -> bool:
        return call_id in self._futures

    def __len__(self) -> int:
        return len(self._futures)


def procedure_names(interface: Any) -> List[str]:
    """Public callables of an interface class, or its explicit __rpc_methods__."""
    if hasattr(interface, "__rpc_methods__"):
        return list(interface.__rpc_methods__)
    return [
        name for name in dir(interface)
        if not name.startswith("_") and callable(getattr(interface, name, None))
    ]


class Stub:
    """Fixed dispatch table: one forwarding method per procedure name, nothing else."""

    def __init__(self, client: "Client", procedures: Iterable[str]):
        self._client = client
        self._table: Dict[str, Callable[..., "asyncio.Future[Any]"]] = {
            name: self._caller(client, name) for name in procedures
        }

    @staticmethod
    def _caller(client: "Client", name: str) -> Callable[..., "asyncio.Future[Any]"]:
        def call(*args: Any) -> "asyncio.Future[Any]":
            return client.call(name, *args)
        call.__name__ = call.__qualname__ = name
        return call

    # not a public name: it would shadow a procedure of the same name
    @property
    def _procedure_names(self) -> List[str]:
        return sorted(self._table)

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._table[name]
        except KeyError:
            raise AttributeError(f"{name!r} is not a procedure of this stub") from None

    def __dir__(self) -> List[str]:
        return self._procedure_names

    def __repr__(self) -> str:
        return f"Stub({', '.join(self._procedure_names)})"


class Client(Endpoint):
    """
    Calls procedures on a Server across `channel`.

    call() returns an asyncio.Future; await it for the result. Callable
    arguments are kept locally and invoked whenever the server calls its
    stand-in for them. They stay registered until release_callback() or
    cleanup(); long-lived subscriptions are the caller's to release.
    """

    role = "client"

    def __init__(self, channel: Channel, *, handshake: bool = True,
                 codec: Optional[Codec] = None, ids: Optional[IdSource] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__(channel, codec=codec, ids=ids, loop=loop)
        self.handshake = handshake
        self.pending = PendingCalls()
        self.callbacks = CallbackRegistry()
        self._connected = False
        self._on_connect: Optional[Callable[[], Any]] = None
        self._attach()
        if handshake:
            self._send(self._builder().client_ready().build())

    # ---- API ----
    def call(self, procedure: str, *args: Any) -> "asyncio.Future[Any]":
        loop = self._event_loop()
        call_id = self.ids()
        fut: "asyncio.Future[Any]" = loop.create_future()
        encoded, registered = encode_args(args, call_id, self.callbacks)
        try:
            self.pending.add(call_id, fut)
        except ValueError:
            self.callbacks.release_many(registered)
            raise
        fut.add_done_callback(lambda f: self._forget_cancelled(call_id, f))
        try:
            self._send(self._builder().invoke(procedure, encoded, msg_id=call_id).build())
        except BaseException:
            self.pending.pop(call_id)
            self.callbacks.release_many(registered)
            raise
        return fut

    def _forget_cancelled(self, call_id: str, fut: "asyncio.Future[Any]") -> None:
        if fut.cancelled():
            self.pending.discard(call_id, fut)

    def stub(self, interface: Type[T]) -> T:
        return cast(T, Stub(self, procedure_names(interface)))

    def release_callback(self, callback_id: str) -> bool:
        return self.callbacks.release(callback_id)

    def on_connect(self, handler: Callable[[], Any]) -> None:
        self._on_connect = handler
        if self._connected:
            self._fire_connect()

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def pending_count(self) -> int:
        return len(self.pending)

    @property
    def callback_count(self) -> int:
        return len(self.callbacks)

    def cleanup(self) -> None:
        super().cleanup()
        self.callbacks.clear()
        cancelled = self.pending.cancel_all()
        if cancelled:
            logger.debug("%s cancelled %d pending call(s) on cleanup", self.sender_id, cancelled)

    # ---- inbound ----
    def _dispatch(self, env: Envelope) -> None:
        if env.type == MsgType.RESULT:
            fut = self.pending.pop(env.id)
            if fut is None:
                logger.debug("%s: no pending call for result %s", self.sender_id, env.id)
            elif not fut.done():
                fut.set_result(env.result)
        elif env.type == MsgType.ERROR:
            fut = self.pending.pop(env.id)
            if fut is None:
                logger.debug("%s: no pending call for error %s", self.sender_id, env.id)
            elif not fut.done():
                fut.set_exception(ProcedureExecutionError(env.error or ""))
        elif env.type == MsgType.CALLBACK:
            self._run_callback(env.callback_id or "", env.args or [])
        elif env.type == MsgType.SERVER_READY:
            if self.handshake and not self._connected:
                self._connected = True
                self._fire_connect()

    def _run_callback(self, callback_id: str, args: List[Any]) -> None:
        fn = self.callbacks.get(callback_id)
        if fn is None:
            logger.debug("%s: callback %s is not registered", self.sender_id, callback_id)
            return
        try:
            out = fn(*args)
        except Exception:
            logger.exception("callback %s raised", callback_id)
            return
        if inspect.isawaitable(out):
            self._spawn(_await(out))

    def _fire_connect(self) -> None:
        handler = self._on_connect
        if handler is None:
            return
        try:
            handler()
        except Exception:
            logger.exception("%s: connect handler raised", self.sender_id)


async def _await(awaitable: Any) -> None:
    try:
        await awaitable
    except Exception:
        logger.exception("async callback failed")
