from __future__ import annotations
import threading
from typing import List, Optional, Tuple

from ..channel import Channel, Listener
from ..codecs import Frame

class BroadcastChannel(Channel):
    """In-process bus.

    Every frame goes to every listener, the sender's own included, the way
    window.postMessage style buses behave. Delivery is synchronous, inside
    send_message().

    With record=True every frame sent is also kept in `sent`, for tests to
    inspect; the list is never trimmed.
    """

    def __init__(self, record: bool = False) -> None:
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self.record = record
        self.sent: List[Frame] = []

    def send_message(self, message: Frame) -> None:
        if self.record:
            self.sent.append(message)
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(message)

    def add_message_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_message_listener(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)


class DuplexChannel(Channel):
    """One end of a point-to-point pipe; frames go to the other end only.

    `record` works as on BroadcastChannel.
    """

    def __init__(self, record: bool = False) -> None:
        self._listeners: List[Listener] = []
        self._lock = threading.Lock()
        self.record = record
        self.peer: Optional[DuplexChannel] = None
        self.sent: List[Frame] = []

    @classmethod
    def pair(cls, record: bool = False) -> Tuple["DuplexChannel", "DuplexChannel"]:
        a, b = cls(record), cls(record)
        a.peer, b.peer = b, a
        return a, b

    def send_message(self, message: Frame) -> None:
        if self.peer is None:
            raise RuntimeError("DuplexChannel end is not connected")
        if self.record:
            self.sent.append(message)
        self.peer._deliver(message)

    def _deliver(self, message: Frame) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(message)

    def add_message_listener(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_message_listener(self, listener: Listener) -> None:
        with self._lock:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass
