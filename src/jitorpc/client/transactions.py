"""Single-transaction submission through the block engine."""

from __future__ import annotations

from typing import Sequence

from ..errors import DecodeError
from .rpc import Transport

TRANSACTIONS_PATH = "/transactions"


class TransactionService:
    def __init__(self, transport: Transport) -> None:
        self._transport = transport

    def send_transaction(self, transactions: Sequence[str], bundle_only: bool = False) -> str:
        """
        Submit a signed transaction via ``sendTransaction``.

        Args:
            transactions: Encoded transaction(s), sent as the positional params
            bundle_only: Add ``bundleOnly=true`` so the engine only lands it
                as part of a bundle

        Returns:
            Transaction signature (base-58)
        """
        query = {"bundleOnly": "true"} if bundle_only else None
        result = self._transport.send(
            TRANSACTIONS_PATH, "sendTransaction", list(transactions), query=query
        )
        if not isinstance(result, str) or not result:
            raise DecodeError(
                f"sendTransaction returned {type(result).__name__}, expected a signature string",
                method="sendTransaction",
            )
        return result
