from .memory import BroadcastChannel, DuplexChannel

__all__ = ["BroadcastChannel", "DuplexChannel"]
