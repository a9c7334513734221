from __future__ import annotations

from typing import Any, Optional


class JitoError(RuntimeError):
    exit_code: int = 1


class WalletError(JitoError):
    exit_code = 2


class TransportError(JitoError):
    """Network failure, undecodable envelope, or an RPC-reported error.

    ``code`` holds the JSON-RPC error code when the server reported one,
    the HTTP status for non-JSON error responses, and ``None`` otherwise.
    """

    exit_code = 3

    def __init__(
        self,
        message: str,
        *,
        method: Optional[str] = None,
        code: Optional[int] = None,
        data: Any = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.code = code
        self.data = data


class DecodeError(JitoError):
    exit_code = 4

    def __init__(self, message: str, *, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method


class EmptyPoolError(JitoError):
    exit_code = 5


__all__ = [
    "DecodeError",
    "EmptyPoolError",
    "JitoError",
    "TransportError",
    "WalletError",
]
