from __future__ import annotations
import asyncio
import inspect
import logging
from typing import Any, Callable, List, Optional, Union

from .callbacks import decode_args
from .channel import Channel
from .codecs import Codec, Frame
from .endpoint import Endpoint
from .exceptions import ProcedureNotFound
from .ids import IdSource
from .message import Envelope, MsgType

logger = logging.getLogger(__name__)


def render_error(exc: BaseException) -> str:
    """Text sent in an error envelope; the class name stands in for an empty message."""
    return str(exc) or type(exc).__name__


class Server(Endpoint):
    """
    Exposes the public methods of `implementation` to clients on `channel`.

    Each invoke runs as its own task, so a slow procedure never holds up
    other calls. Procedures may be plain or async functions. Callback
    placeholders in the arguments arrive as RemoteCallback objects that can be
    called any number of times, also after the procedure has returned.
    """

    role = "server"

    def __init__(self, channel: Channel, implementation: Any, *, handshake: bool = True,
                 codec: Optional[Codec] = None, ids: Optional[IdSource] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        super().__init__(channel, codec=codec, ids=ids, loop=loop)
        self.implementation = implementation
        self.handshake = handshake
        self._attach()
        if handshake:
            self._send_server_ready()

    def _send_server_ready(self) -> None:
        self._send(self._builder().server_ready().build())

    def _send_callback(self, callback_id: str, args: List[Any]) -> None:
        self._send(self._builder().callback(callback_id, args).build())

    def _dispatch(self, env: Envelope) -> None:
        if env.type == MsgType.CLIENT_READY:
            # late client or restarted server: answer every clientReady
            if self.handshake:
                self._send_server_ready()
        elif env.type == MsgType.INVOKE:
            self._spawn(self._handle_invoke(env))
        # replies and callbacks belong to clients

    def resolve(self, procedure: str) -> Callable[..., Any]:
        if not procedure or procedure.startswith("_"):
            raise ProcedureNotFound(procedure)
        fn = getattr(self.implementation, procedure, None)
        if not callable(fn):
            raise ProcedureNotFound(procedure)
        return fn

    async def _handle_invoke(self, env: Envelope) -> None:
        procedure = env.procedure or ""
        args = decode_args(env.args or [], self._send_callback)
        try:
            fn = self.resolve(procedure)
            result = fn(*args)
            if inspect.isawaitable(result):
                result = await result
        except ProcedureNotFound as e:
            logger.warning("%s: %s", self.sender_id, e)
            self._reply(self._builder().error(env.id, render_error(e)).build())
            return
        except Exception as e:
            logger.exception("procedure %r failed", procedure)
            self._reply(self._builder().error(env.id, render_error(e)).build())
            return

        try:
            frame = self._encode(self._builder().result(env.id, result).build())
        except Exception as e:
            logger.warning("result of %r could not be encoded: %s", procedure, render_error(e))
            self._reply(self._builder().error(env.id, render_error(e)).build())
            return
        self._reply(frame)

    def _reply(self, message: Union[Envelope, Frame]) -> None:
        try:
            if isinstance(message, Envelope):
                message = self._encode(message)
            self.channel.send_message(message)
        except Exception:
            logger.exception("%s could not send reply", self.sender_id)
