
from __future__ import annotations
import asyncio
from typing import Any, Optional, Union

from .channel import Channel
from .client import Client
from .codecs import Codec, Codecs
from .config import RpcSettings, get_settings
from .ids import IdSource, id_source
from .server import Server

def _resolve(settings: Optional[RpcSettings],
             codec: Union[str, Codec, None],
             ids: Union[str, IdSource, None]) -> tuple:
    settings = settings or get_settings()

    if codec is None:
        codec = settings.codec
    codec_obj = Codecs.get(codec) if isinstance(codec, str) else codec

    if ids is None:
        ids = settings.id_source
    ids_obj = id_source(ids) if isinstance(ids, str) else ids

    return settings, codec_obj, ids_obj

def create_server(channel: Channel,
                  implementation: Any,
                  settings: Optional[RpcSettings] = None,
                  *,
                  codec: Union[str, Codec, None] = None,
                  ids: Union[str, IdSource, None] = None,
                  handshake: Optional[bool] = None,
                  loop: Optional[asyncio.AbstractEventLoop] = None) -> Server:
    """
    One-liner factory:
      create_server(channel, MyApi())
      create_server(channel, MyApi(), codec="msgpack", handshake=False)

    - channel: anything implementing send_message / add_message_listener / remove_message_listener
    - implementation: object whose public methods become procedures
    - settings: RpcSettings; defaults to get_settings()
    - codec: "json" | "msgpack" | Codec instance (overrides settings.codec)
    - ids: "time" | "counter" | IdSource (overrides settings.id_source)
    - handshake: overrides settings.handshake
    """
    settings, codec_obj, ids_obj = _resolve(settings, codec, ids)
    return Server(channel, implementation,
                  handshake=settings.handshake if handshake is None else handshake,
                  codec=codec_obj, ids=ids_obj, loop=loop)

def create_client(channel: Channel,
                  settings: Optional[RpcSettings] = None,
                  *,
                  codec: Union[str, Codec, None] = None,
                  ids: Union[str, IdSource, None] = None,
                  handshake: Optional[bool] = None,
                  loop: Optional[asyncio.AbstractEventLoop] = None) -> Client:
    """Client counterpart of create_server(); same resolution rules."""
    settings, codec_obj, ids_obj = _resolve(settings, codec, ids)
    return Client(channel,
                  handshake=settings.handshake if handshake is None else handshake,
                  codec=codec_obj, ids=ids_obj, loop=loop)
