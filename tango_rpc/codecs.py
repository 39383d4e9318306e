
from __future__ import annotations
from typing import Any, Dict, Protocol as TypingProtocol, Union

import json

import msgpack

Frame = Union[str, bytes]

class Codec(TypingProtocol):
    name: str
    def dumps(self, obj: Any) -> Frame: ...
    def loads(self, data: Frame) -> Any: ...

class JSONCodec:
    """Text frames; the default for string-only channels."""
    name = "json"
    def dumps(self, obj: Any) -> str:
        return json.dumps(obj, separators=(",", ":"))
    def loads(self, data: Frame) -> Any:
        if isinstance(data, (bytes, bytearray)):
            data = data.decode("utf-8")
        return json.loads(data)

class MsgPackCodec:
    """Binary frames, for channels that move bytes rather than text."""
    name = "msgpack"
    def dumps(self, obj: Any) -> bytes:
        return msgpack.packb(obj, use_bin_type=True)
    def loads(self, data: Frame) -> Any:
        if isinstance(data, str):
            raise TypeError("msgpack codec expects bytes, got str")
        return msgpack.unpackb(data, raw=False)

class Codecs:
    _registry: Dict[str, Codec] = {
        "json": JSONCodec(),
        "msgpack": MsgPackCodec(),
    }

    @classmethod
    def get(cls, name: str) -> 'Codec':
        if name not in cls._registry:
            raise ValueError(f"Unknown codec: {name}")
        return cls._registry[name]
