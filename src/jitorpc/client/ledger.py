"""
Ledger RPC - the plain Solana JSON-RPC calls a bundle flow depends on.

Blockhash lookup for transaction assembly and per-signature status for
the single-transaction polling path. Shares the Transport used for the
block engine, pointed at a Solana RPC URL with an empty resource path.
"""

from __future__ import annotations

from typing import Any, Optional, Sequence

from solders.hash import Hash

from ..errors import DecodeError
from ..schemas.registry import SchemaRegistry, SchemaValidationError
from .models import SignatureStatus
from .rpc import Transport


class LedgerClient:
    def __init__(self, transport: Transport, registry: Optional[SchemaRegistry] = None) -> None:
        self._transport = transport
        self._registry = registry or SchemaRegistry.default()

    def _call(self, method: str, params: Any) -> Any:
        result = self._transport.send("", method, params)
        try:
            self._registry.validate_result(method, result)
        except SchemaValidationError as exc:
            raise DecodeError(f"Unexpected {method} payload: {exc}", method=method) from exc
        return result

    def get_latest_blockhash(self, commitment: str = "finalized") -> Hash:
        """
        Fetch the latest blockhash.

        Args:
            commitment: Commitment level ("processed", "confirmed", "finalized")

        Returns:
            solders Hash for use as a transaction's recent blockhash
        """
        result = self._call("getLatestBlockhash", [{"commitment": commitment}])
        blockhash = result["value"]["blockhash"]
        try:
            return Hash.from_string(blockhash)
        except ValueError as exc:
            raise DecodeError(
                f"Invalid blockhash {blockhash!r}: {exc}", method="getLatestBlockhash"
            ) from exc

    def get_signature_statuses(
        self,
        signatures: Sequence[str],
        search_history: bool = True,
    ) -> list[Optional[SignatureStatus]]:
        """
        Fetch statuses for transaction signatures.

        Returns:
            One entry per requested signature, in request order; None when
            the ledger has no record yet
        """
        sigs = list(signatures)
        result = self._call(
            "getSignatureStatuses",
            [sigs, {"searchTransactionHistory": search_history}],
        )
        values = result["value"]
        if len(values) != len(sigs):
            raise DecodeError(
                f"getSignatureStatuses returned {len(values)} entries for {len(sigs)} signatures",
                method="getSignatureStatuses",
            )
        return [
            SignatureStatus.from_dict(sig, entry) if entry is not None else None
            for sig, entry in zip(sigs, values)
        ]
