from __future__ import annotations
import asyncio
import logging
from typing import Any, Coroutine, Optional, Set

from .builder import MessageBuilder
from .channel import Channel
from .codecs import Codec, Frame, JSONCodec
from .exceptions import DecodeError
from .ids import IdSource, TimeIdSource
from .message import Envelope
from .wire import pack_envelope, unpack_envelope

logger = logging.getLogger(__name__)


class Endpoint:

    # Notes:
    # - One sender id per instance; inbound envelopes carrying it are our own echo and get dropped
    # - Malformed frames are logged and dropped, they have no id to answer
    # - The channel listener is synchronous; anything that has to await runs as a task
    # - With an explicit loop, frames arriving on other threads are handed to that loop first

    role = "endpoint"

    def __init__(self, channel: Channel, *, codec: Optional[Codec] = None,
                 ids: Optional[IdSource] = None,
                 loop: Optional[asyncio.AbstractEventLoop] = None):
        self.channel = channel
        self.codec = codec or JSONCodec()
        self.ids = ids or TimeIdSource()
        self.sender_id = f"{self.role}-{self.ids()}"
        self._loop = loop
        self._tasks: Set["asyncio.Task[Any]"] = set()
        self._attached = False
        # keep the exact object we register so cleanup() removes the same one
        self._listener = self._on_frame

    def _attach(self) -> None:
        self.channel.add_message_listener(self._listener)
        self._attached = True

    def cleanup(self) -> None:
        """Stop listening on the channel. Safe to call more than once."""
        if self._attached:
            self.channel.remove_message_listener(self._listener)
            self._attached = False

    # ---- outbound ----
    def _builder(self) -> MessageBuilder:
        return MessageBuilder(self.sender_id, self.ids)

    def _encode(self, env: Envelope) -> Frame:
        return pack_envelope(env, self.codec)

    def _send(self, env: Envelope) -> None:
        self.channel.send_message(self._encode(env))

    # ---- inbound ----
    def _on_frame(self, frame: Frame) -> None:
        if self._loop is not None and not self._in_own_loop():
            self._loop.call_soon_threadsafe(self._receive, frame)
            return
        self._receive(frame)

    def _receive(self, frame: Frame) -> None:
        try:
            env = unpack_envelope(frame, self.codec)
        except DecodeError as e:
            logger.warning("%s dropped malformed frame: %s", self.sender_id, e)
            return
        if env.sender_id == self.sender_id:
            return
        self._dispatch(env)

    def _dispatch(self, env: Envelope) -> None:
        raise NotImplementedError

    # ---- scheduling ----
    def _in_own_loop(self) -> bool:
        try:
            return asyncio.get_running_loop() is self._loop
        except RuntimeError:
            return False

    def _event_loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is not None:
            return self._loop
        return asyncio.get_running_loop()

    def _spawn(self, coro: Coroutine[Any, Any, Any]) -> Optional["asyncio.Task[Any]"]:
        try:
            loop = self._event_loop()
        except RuntimeError:
            logger.error("%s has no running event loop; pass loop= for channels "
                         "that deliver outside of one", self.sender_id)
            coro.close()
            return None
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
