"""
Bundle Service - tip accounts, bundle submission, bundle status.

Every call goes to the ``/bundles`` resource through a shared Transport.
Result payloads are validated here so callers only see typed values.
"""

from __future__ import annotations

import logging
import random
import secrets
from typing import Any, Optional, Sequence, Union

from ..errors import DecodeError, EmptyPoolError
from ..schemas.registry import SchemaRegistry, SchemaValidationError
from .models import Bundle, BundleStatusResponse, TipAccount
from .rpc import Transport

logger = logging.getLogger(__name__)

BUNDLES_PATH = "/bundles"


class BundleService:
    """
    Block-engine bundle operations.

    Usage::

        with Transport(config) as transport:
            service = BundleService(transport)
            tip = service.get_random_tip_account()
            bundle_id = service.send_bundle(bundle)
    """

    def __init__(
        self,
        transport: Transport,
        *,
        rng: Optional[random.Random] = None,
        registry: Optional[SchemaRegistry] = None,
    ) -> None:
        """
        Args:
            transport: Shared JSON-RPC transport
            rng: Random source for tip selection (default: OS-seeded SystemRandom)
            registry: Schema registry for payload validation
        """
        self._transport = transport
        self._rng = rng or secrets.SystemRandom()
        self._registry = registry or SchemaRegistry.default()

    def _validate(self, method: str, result: Any) -> None:
        try:
            self._registry.validate_result(method, result)
        except SchemaValidationError as exc:
            raise DecodeError(f"Unexpected {method} payload: {exc}", method=method) from exc

    # ------------------------------------------------------------------
    # Tip accounts
    # ------------------------------------------------------------------

    def get_tip_accounts(self) -> list[str]:
        """
        Fetch the current tip-account pool.

        Returns:
            List of base-58 addresses

        Raises:
            TransportError: On RPC failure
            DecodeError: If the payload is not a list of strings
        """
        result = self._transport.send(BUNDLES_PATH, "getTipAccounts", None)
        self._validate("getTipAccounts", result)
        return list(result)

    def get_random_tip_account(self) -> TipAccount:
        """
        Pick one tip account uniformly at random from a freshly fetched pool.

        Raises:
            EmptyPoolError: If the service returned no tip accounts
        """
        addresses = self.get_tip_accounts()
        if not addresses:
            raise EmptyPoolError("No tip accounts available")
        return TipAccount(address=self._rng.choice(addresses))

    # ------------------------------------------------------------------
    # Submission
    # ------------------------------------------------------------------

    def send_bundle(self, transactions: Union[Bundle, Sequence[str]]) -> str:
        """
        Submit one bundle.

        The wire protocol takes a list of bundles, so the ordered
        transaction list is wrapped in exactly one more list.

        Args:
            transactions: Bundle or ordered base-58 encoded transactions

        Returns:
            Server-assigned bundle ID

        Raises:
            TransportError: On RPC failure
            DecodeError: If the returned ID is not a string
            ValueError: If a sequence is given that is not a valid bundle
                (empty, more than MAX_BUNDLE_SIZE entries, or a blank entry);
                nothing is sent
        """
        bundle = transactions if isinstance(transactions, Bundle) else Bundle(tuple(transactions))
        params = [list(bundle.transactions)]
        result = self._transport.send(BUNDLES_PATH, "sendBundle", params)
        if not isinstance(result, str) or not result:
            raise DecodeError(
                f"sendBundle returned {type(result).__name__}, expected a bundle ID string",
                method="sendBundle",
            )
        logger.info("Bundle accepted: %s (%d transactions)", result, len(bundle))
        return result

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def get_bundle_statuses(self, bundle_ids: Sequence[str]) -> BundleStatusResponse:
        """
        Fetch statuses for the given bundle IDs.

        Response entries are not guaranteed to follow request order;
        match them with ``BundleStatusResponse.find``.
        """
        result = self._transport.send(BUNDLES_PATH, "getBundleStatuses", [list(bundle_ids)])
        self._validate("getBundleStatuses", result)
        return BundleStatusResponse.from_dict(result)

    def get_inflight_bundle_statuses(self, params: Any) -> Any:
        """Raw pass-through for ``getInflightBundleStatuses``."""
        return self._transport.send(BUNDLES_PATH, "getInflightBundleStatuses", params)
