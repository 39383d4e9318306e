from __future__ import annotations
from typing import Any, Dict

from .codecs import Codec, Frame, JSONCodec
from .exceptions import DecodeError
from .message import Envelope, MsgType

_JSON = JSONCodec()

def envelope_to_dict(env: Envelope) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "messageType": str(env.type),
        "id":          env.id,
        "senderId":    env.sender_id,
    }
    if env.type == MsgType.INVOKE:
        out["procedure"] = env.procedure
        out["args"] = list(env.args or [])
    elif env.type == MsgType.RESULT:
        out["result"] = env.result
    elif env.type == MsgType.ERROR:
        out["error"] = env.error
    elif env.type == MsgType.CALLBACK:
        out["callbackId"] = env.callback_id
        out["args"] = list(env.args or [])
    return out

def pack_envelope(env: Envelope, codec: Codec = _JSON) -> Frame:
    return codec.dumps(envelope_to_dict(env))

def _field(obj: Dict[str, Any], key: str, kind: type) -> Any:
    value = obj.get(key)
    if not isinstance(value, kind):
        raise DecodeError(f"field {key!r} must be {kind.__name__}, got {type(value).__name__}")
    return value

def envelope_from_dict(obj: Any) -> Envelope:
    if not isinstance(obj, dict):
        raise DecodeError(f"envelope must be an object, got {type(obj).__name__}")
    try:
        mtype = MsgType(obj.get("messageType"))
    except ValueError:
        raise DecodeError(f"unknown messageType: {obj.get('messageType')!r}") from None

    env_id = _field(obj, "id", str)
    sender_id = _field(obj, "senderId", str)

    if mtype == MsgType.INVOKE:
        return Envelope(mtype, env_id, sender_id,
                        procedure=_field(obj, "procedure", str),
                        args=_field(obj, "args", list))
    if mtype == MsgType.RESULT:
        # a procedure returning nothing may arrive without the key at all
        return Envelope(mtype, env_id, sender_id, result=obj.get("result"))
    if mtype == MsgType.ERROR:
        return Envelope(mtype, env_id, sender_id, error=_field(obj, "error", str))
    if mtype == MsgType.CALLBACK:
        return Envelope(mtype, env_id, sender_id,
                        callback_id=_field(obj, "callbackId", str),
                        args=_field(obj, "args", list))
    return Envelope(mtype, env_id, sender_id)

def unpack_envelope(frame: Frame, codec: Codec = _JSON) -> Envelope:
    """Decode one frame. Anything malformed surfaces as DecodeError."""
    try:
        obj = codec.loads(frame)
    except Exception as e:
        raise DecodeError(f"undecodable frame: {e}") from e
    return envelope_from_dict(obj)
