from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Callable

from .codecs import Frame

Listener = Callable[[Frame], None]

class Channel(ABC):
    """
    The transport an endpoint sits on. It only moves opaque frames
    (text for the json codec, bytes for msgpack).
    """

    @abstractmethod
    def send_message(self, message: Frame) -> None:
        """Hand one frame to the transport; fire-and-forget."""
        raise NotImplementedError

    @abstractmethod
    def add_message_listener(self, listener: Listener) -> None:
        """Call `listener` once per inbound frame, in arrival order."""
        raise NotImplementedError

    @abstractmethod
    def remove_message_listener(self, listener: Listener) -> None:
        """Unregister `listener`. Removing an unknown listener is a no-op."""
        raise NotImplementedError
