"""
Wire models - JSON-RPC envelopes, bundles and status records.

Each RPC operation decodes into its own type here; nothing above the
Bundle Service sees an untyped payload except the in-flight pass-through.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

# Block-engine limit on transactions per bundle
MAX_BUNDLE_SIZE = 5


# ---------------------------------------------------------------------------
# JSON-RPC envelope
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RpcRequest:
    method: str
    params: Any = None
    id: int = 1
    jsonrpc: str = "2.0"

    def to_dict(self) -> dict[str, Any]:
        return {
            "jsonrpc": self.jsonrpc,
            "id": self.id,
            "method": self.method,
            "params": self.params,
        }


@dataclass(frozen=True)
class RpcErrorObject:
    code: Optional[int]
    message: str
    data: Any = None

    @classmethod
    def from_dict(cls, data: Any) -> "RpcErrorObject":
        if not isinstance(data, dict):
            return cls(code=None, message=str(data))
        code = data.get("code")
        return cls(
            code=code if isinstance(code, int) else None,
            message=str(data.get("message", "")),
            data=data.get("data"),
        )


@dataclass(frozen=True)
class RpcResponse:
    """Decoded response envelope.

    A populated ``error`` wins over ``result``; servers may send
    ``"result": null`` alongside it.
    """
    result: Any = None
    error: Optional[RpcErrorObject] = None
    id: Any = None
    jsonrpc: str = "2.0"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RpcResponse":
        error = data.get("error")
        if error is None and "result" not in data:
            raise ValueError("response carries neither 'result' nor 'error'")
        return cls(
            result=data.get("result") if error is None else None,
            error=RpcErrorObject.from_dict(error) if error is not None else None,
            id=data.get("id"),
            jsonrpc=str(data.get("jsonrpc", "")),
        )


# ---------------------------------------------------------------------------
# Bundles
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Bundle:
    """Ordered, immutable list of base-58 encoded signed transactions.

    The block engine executes the transactions atomically in this order.
    """
    transactions: tuple[str, ...]

    def __post_init__(self) -> None:
        txs = tuple(self.transactions)
        if not txs:
            raise ValueError("A bundle needs at least one transaction")
        if len(txs) > MAX_BUNDLE_SIZE:
            raise ValueError(
                f"A bundle holds at most {MAX_BUNDLE_SIZE} transactions, got: {len(txs)}"
            )
        if not all(isinstance(tx, str) and tx for tx in txs):
            raise ValueError("Bundle transactions must be non-empty encoded strings")
        object.__setattr__(self, "transactions", txs)

    @classmethod
    def of(cls, *transactions: str) -> "Bundle":
        return cls(tuple(transactions))

    def __len__(self) -> int:
        return len(self.transactions)

    def __iter__(self):
        return iter(self.transactions)


@dataclass(frozen=True)
class TipAccount:
    address: str


class ConfirmationStatus(str, enum.Enum):
    """Commitment level reported for a bundle.

    Lifecycle: processed -> confirmed -> finalized. Anything else the
    server sends is UNKNOWN; the original string is kept on the record.
    """

    PROCESSED = "processed"
    CONFIRMED = "confirmed"
    FINALIZED = "finalized"
    UNKNOWN = "unknown"

    @classmethod
    def from_string(cls, value: Optional[str]) -> "ConfirmationStatus":
        """Parse a status string, returning UNKNOWN for unrecognised values."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


def _execution_error(err: Any) -> Any:
    """Extract the execution error from a bundle ``err`` field.

    The engine reports ``{"Ok": null}`` for a clean execution, so the
    error is whatever sits under ``Ok``. Other shapes are returned whole.
    """
    if err is None:
        return None
    if isinstance(err, dict):
        if "Ok" in err:
            return err["Ok"]
        return err or None
    return err


@dataclass(frozen=True)
class BundleStatus:
    bundle_id: str
    transactions: list[str] = field(default_factory=list)
    slot: int = 0
    raw_status: str = ""
    err: Any = None

    @property
    def confirmation_status(self) -> ConfirmationStatus:
        return ConfirmationStatus.from_string(self.raw_status)

    @property
    def succeeded(self) -> bool:
        return self.err is None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BundleStatus":
        return cls(
            bundle_id=data.get("bundle_id", ""),
            transactions=list(data.get("transactions") or []),
            slot=int(data.get("slot") or 0),
            raw_status=data.get("confirmation_status") or "",
            err=_execution_error(data.get("err")),
        )


@dataclass(frozen=True)
class BundleStatusResponse:
    """Result of ``getBundleStatuses``.

    ``value`` order is not guaranteed to follow the request order; use
    ``find`` to match by bundle id.
    """
    context_slot: int = 0
    value: list[BundleStatus] = field(default_factory=list)

    def find(self, bundle_id: str) -> Optional[BundleStatus]:
        for status in self.value:
            if status.bundle_id == bundle_id:
                return status
        return None

    def __len__(self) -> int:
        return len(self.value)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BundleStatusResponse":
        context = data.get("context") or {}
        entries: Iterable[Any] = data.get("value") or []
        return cls(
            context_slot=int(context.get("slot") or 0),
            value=[BundleStatus.from_dict(e) for e in entries if e is not None],
        )


# ---------------------------------------------------------------------------
# Single-transaction status (ledger RPC)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SignatureStatus:
    signature: str
    slot: int = 0
    confirmations: Optional[int] = None
    err: Any = None
    confirmation_status: Optional[str] = None

    @classmethod
    def from_dict(cls, signature: str, data: dict[str, Any]) -> "SignatureStatus":
        return cls(
            signature=signature,
            slot=int(data.get("slot") or 0),
            confirmations=data.get("confirmations"),
            err=data.get("err"),
            confirmation_status=data.get("confirmationStatus"),
        )
