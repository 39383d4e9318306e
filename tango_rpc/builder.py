from __future__ import annotations
from typing import Any, Dict, Iterable, Optional

from .exceptions import EnvelopeError
from .ids import IdSource, TimeIdSource
from .message import CALLBACK_ID, Envelope, MsgType

_REQUIRED = {
    MsgType.INVOKE:   ("procedure", "args"),
    MsgType.ERROR:    ("error",),
    MsgType.CALLBACK: ("callback_id", "args"),
}

class MessageBuilder:
    """
    Builder that always produces a valid Envelope stamped with the
    endpoint's sender id. Reply types reuse the id of the message they answer;
    everything else draws a fresh id from the id source.
    """
    def __init__(self, sender_id: str, ids: Optional[IdSource] = None):
        self._ids = ids or TimeIdSource()
        self._env: Dict[str, Any] = {
            "type":      MsgType.INVOKE,
            "id":        None,
            "sender_id": sender_id,
        }

    def invoke(self, procedure: str, args: Iterable[Any], msg_id: Optional[str] = None):
        self._env["type"]      = MsgType.INVOKE
        self._env["id"]        = msg_id
        self._env["procedure"] = procedure
        self._env["args"]      = list(args)
        return self

    def result(self, msg_id: str, value: Any):
        self._env["type"]   = MsgType.RESULT
        self._env["id"]     = msg_id
        self._env["result"] = value
        return self

    def error(self, msg_id: str, text: str):
        self._env["type"]  = MsgType.ERROR
        self._env["id"]    = msg_id
        self._env["error"] = text
        return self

    def callback(self, callback_id: str, args: Iterable[Any]):
        self._env["type"]        = MsgType.CALLBACK
        self._env["id"]          = CALLBACK_ID
        self._env["callback_id"] = callback_id
        self._env["args"]        = list(args)
        return self

    def client_ready(self):
        self._env["type"] = MsgType.CLIENT_READY
        return self

    def server_ready(self):
        self._env["type"] = MsgType.SERVER_READY
        return self

    def build(self) -> Envelope:
        mtype = self._env["type"]
        missing = [f for f in _REQUIRED.get(mtype, ()) if self._env.get(f) is None]
        if missing:
            raise EnvelopeError(f"{mtype} envelope requires {', '.join(missing)}")
        if self._env["id"] is None:
            self._env["id"] = self._ids()
        return Envelope(**self._env)
