__all__ = [
    # Configuration
    "ClientConfig",
    # Transport and services
    "Transport",
    "BundleService",
    "TransactionService",
    "LedgerClient",
    # Models
    "Bundle",
    "BundleStatus",
    "BundleStatusResponse",
    "ConfirmationStatus",
    "SignatureStatus",
    "TipAccount",
    # Polling
    "Poller",
    "PollPolicy",
    "PollOutcome",
    "PollState",
    "Verdict",
    "VerdictKind",
    "BundleTracker",
    "SignatureTracker",
    "BUNDLE_POLICY",
    "SIGNATURE_POLICY",
    "classify_bundle_status",
    "classify_signature_status",
    # Assembly
    "build_tip_bundle",
    "build_tipped_transaction",
    "build_transaction",
    "encode_transaction",
    # Wallet
    "load_keypair",
    # Errors
    "JitoError",
    "TransportError",
    "DecodeError",
    "EmptyPoolError",
    "WalletError",
]

from .config import ClientConfig
from .errors import DecodeError, EmptyPoolError, JitoError, TransportError, WalletError
from .client.assembly import (
    build_tip_bundle,
    build_tipped_transaction,
    build_transaction,
    encode_transaction,
)
from .client.bundles import BundleService
from .client.ledger import LedgerClient
from .client.models import (
    Bundle,
    BundleStatus,
    BundleStatusResponse,
    ConfirmationStatus,
    SignatureStatus,
    TipAccount,
)
from .client.poller import (
    BUNDLE_POLICY,
    SIGNATURE_POLICY,
    BundleTracker,
    PollOutcome,
    PollPolicy,
    PollState,
    Poller,
    SignatureTracker,
    Verdict,
    VerdictKind,
    classify_bundle_status,
    classify_signature_status,
)
from .client.rpc import Transport
from .client.transactions import TransactionService
from .wallet import load_keypair
