"""
Public API:
- Server: exposes an implementation object's methods over a channel
- Client: calls them (call / stub); callable arguments become live callbacks
- create_server, create_client: factories driven by RpcSettings
- Channel: abstract class transports must implement
- BroadcastChannel, DuplexChannel: in-memory channels for tests and demos
- Envelope, MsgType, MessageBuilder: wire-level types
- pack_envelope, unpack_envelope: envelope <-> frame through a codec
- TimeIdSource, CounterIdSource: correlation id generators
"""

# Endpoints
from .server import Server
from .client import Client, Stub

# Factories & config
from .factory import create_server, create_client
from .config import RpcSettings, get_settings, configure_logging

# Builder & wire types
from .builder import MessageBuilder
from .message import Envelope, MsgType
from .wire import pack_envelope, unpack_envelope
from .codecs import Codecs, JSONCodec, MsgPackCodec

# Channel contract
from .channel import Channel
from .transports.memory import BroadcastChannel, DuplexChannel

# Callbacks & ids
from .callbacks import CallbackRegistry, RemoteCallback
from .ids import TimeIdSource, CounterIdSource

# Errors
from .exceptions import (
    RpcError,
    DecodeError,
    EnvelopeError,
    ProcedureNotFound,
    ProcedureExecutionError,
)

__all__ = [
    "Server",
    "Client",
    "Stub",
    "create_server",
    "create_client",
    "RpcSettings",
    "get_settings",
    "configure_logging",
    "MessageBuilder",
    "Envelope",
    "MsgType",
    "pack_envelope",
    "unpack_envelope",
    "Codecs",
    "JSONCodec",
    "MsgPackCodec",
    "Channel",
    "BroadcastChannel",
    "DuplexChannel",
    "CallbackRegistry",
    "RemoteCallback",
    "TimeIdSource",
    "CounterIdSource",
    "RpcError",
    "DecodeError",
    "EnvelopeError",
    "ProcedureNotFound",
    "ProcedureExecutionError",
]

__version__ = "0.1.0"
