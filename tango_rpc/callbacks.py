"""
Callback marshaling.

A function cannot cross a text channel. On the way out every callable argument
is swapped for a placeholder {"type": "callback", "callbackId": ...} and the
function is kept in a CallbackRegistry. On the way in every placeholder is
swapped for a RemoteCallback whose only job is to send a callback envelope
carrying that id.

Registrations are persistent: the remote side may call a callback any number
of times, long after the call that carried it has resolved (subscriptions).
They live until released explicitly or until the registry is cleared.
"""
from __future__ import annotations
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Tuple

CALLBACK_ARG_TYPE = "callback"

SendCallback = Callable[[str, List[Any]], None]

def callback_arg(callback_id: str) -> Dict[str, str]:
    return {"type": CALLBACK_ARG_TYPE, "callbackId": callback_id}

def is_callback_arg(arg: Any) -> bool:
    return (
        isinstance(arg, dict)
        and arg.get("type") == CALLBACK_ARG_TYPE
        and isinstance(arg.get("callbackId"), str)
    )


class CallbackRegistry:
    """callbackId -> local function. Nothing is ever removed implicitly."""

    def __init__(self) -> None:
        self._callbacks: Dict[str, Callable[..., Any]] = {}

    def register(self, callback_id: str, fn: Callable[..., Any]) -> None:
        if callback_id in self._callbacks:
            raise ValueError(f"callback id already registered: {callback_id!r}")
        self._callbacks[callback_id] = fn

    def get(self, callback_id: str) -> Optional[Callable[..., Any]]:
        return self._callbacks.get(callback_id)

    def release(self, callback_id: str) -> bool:
        return self._callbacks.pop(callback_id, None) is not None

    def release_many(self, callback_ids: Iterable[str]) -> None:
        for cid in callback_ids:
            self._callbacks.pop(cid, None)

    def clear(self) -> None:
        self._callbacks.clear()

    def __contains__(self, callback_id: object) -> bool:
        return callback_id in self._callbacks

    def __len__(self) -> int:
        return len(self._callbacks)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._callbacks))


def encode_args(args: Iterable[Any], call_id: str,
                registry: CallbackRegistry) -> Tuple[List[Any], List[str]]:
    """
    Replace callables with placeholders registered under '<call_id>-<position>'.
    Returns the wire args and the callback ids that were registered.
    """
    encoded: List[Any] = []
    registered: List[str] = []
    for i, arg in enumerate(args):
        if callable(arg):
            callback_id = f"{call_id}-{i}"
            try:
                registry.register(callback_id, arg)
            except ValueError:
                registry.release_many(registered)
                raise
            registered.append(callback_id)
            encoded.append(callback_arg(callback_id))
        else:
            encoded.append(arg)
    return encoded, registered


class RemoteCallback:
    """Server-side stand-in for a client function. Stays callable for as long as it is referenced."""

    __slots__ = ("callback_id", "_send")

    def __init__(self, callback_id: str, send: SendCallback) -> None:
        self.callback_id = callback_id
        self._send = send

    def __call__(self, *args: Any) -> None:
        self._send(self.callback_id, list(args))

    def __repr__(self) -> str:
        return f"RemoteCallback({self.callback_id!r})"


def decode_args(args: Iterable[Any], send: SendCallback) -> List[Any]:
    return [
        RemoteCallback(arg["callbackId"], send) if is_callback_arg(arg) else arg
        for arg in args
    ]
