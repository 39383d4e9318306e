from __future__ import annotations
from dataclasses import dataclass
from typing import Any, List, Optional
from enum import StrEnum

# Correlation id carried by callback envelopes; they never answer a pending call
CALLBACK_ID = "noop"

# Allowed message types
class MsgType(StrEnum):
    INVOKE       = "invoke"
    RESULT       = "result"
    ERROR        = "error"
    CALLBACK     = "callback"
    CLIENT_READY = "clientReady"
    SERVER_READY = "serverReady"

@dataclass(frozen=True)
class Envelope:
    """
    One message on the channel. Variant fields are None unless the type uses them:
    INVOKE -> procedure, args; RESULT -> result; ERROR -> error;
    CALLBACK -> callback_id, args. The ready messages carry nothing extra.
    """
    type: MsgType                    # discriminator, 'messageType' on the wire
    id: str                          # correlation id (CALLBACK_ID for callbacks)
    sender_id: str                   # emitting endpoint, used to drop self-echo
    procedure: Optional[str] = None
    args: Optional[List[Any]] = None
    result: Any = None
    error: Optional[str] = None
    callback_id: Optional[str] = None
