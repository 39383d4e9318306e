from __future__ import annotations


class RpcError(Exception):
    pass


class DecodeError(RpcError, ValueError):
    """Inbound data that is not a well-formed envelope."""
    pass


class EnvelopeError(RpcError, ValueError):
    """An envelope was built without the fields its type requires."""
    pass


class ProcedureNotFound(RpcError, AttributeError):
    """The invoked name does not resolve to a public callable on the implementation."""

    def __init__(self, procedure: str) -> None:
        super().__init__(f"Procedure {procedure!r} is not a function")
        self.procedure = procedure


class ProcedureExecutionError(RpcError):
    """
    Raised from a client call when the server answers with an error envelope.

    Only the textual rendering of the remote failure survives the trip;
    its type and traceback are lost.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
