"""
Transaction Assembly - build, sign and encode bundle transactions.

Uses solders for instructions, messages and signing, and base58 for the
text encoding the block engine expects. A tip bundle always places the
tip transaction first; the engine executes the bundle atomically in
list order.
"""

from __future__ import annotations

from typing import Optional, Sequence

from solders.compute_budget import set_compute_unit_price
from solders.hash import Hash
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from ..utils import b58encode
from .models import Bundle

MEMO_PROGRAM_ID = Pubkey.from_string("MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr")

DEFAULT_TIP_LAMPORTS = 1_000
DEFAULT_PRIORITY_FEE = 1_000  # micro-lamports per compute unit


def parse_pubkey(address: str, label: str = "address") -> Pubkey:
    """Parse a base-58 address, naming ``label`` in the error."""
    try:
        return Pubkey.from_string(address)
    except ValueError as exc:
        raise ValueError(f"Failed to parse {label} {address!r}: {exc}") from exc


def transfer_instruction(payer: Pubkey, receiver: Pubkey, lamports: int) -> Instruction:
    if lamports <= 0:
        raise ValueError(f"lamports must be positive, got: {lamports}")
    return transfer(TransferParams(from_pubkey=payer, to_pubkey=receiver, lamports=lamports))


def tip_instruction(payer: Pubkey, tip_account: str, lamports: int = DEFAULT_TIP_LAMPORTS) -> Instruction:
    """System transfer paying ``lamports`` to a block-engine tip account."""
    return transfer_instruction(payer, parse_pubkey(tip_account, "tip account"), lamports)


def memo_instruction(message: str) -> Instruction:
    return Instruction(program_id=MEMO_PROGRAM_ID, data=message.encode("utf-8"), accounts=[])


def compute_unit_price_instruction(micro_lamports: int = DEFAULT_PRIORITY_FEE) -> Instruction:
    return set_compute_unit_price(micro_lamports)


def build_transaction(
    keypair: Keypair,
    instructions: Sequence[Instruction],
    blockhash: Hash,
) -> Transaction:
    """
    Build and sign a legacy transaction paid for by ``keypair``.

    Args:
        keypair: Fee payer and sole signer
        instructions: Instructions, executed in order
        blockhash: Recent blockhash

    Returns:
        Signed solders Transaction
    """
    if not instructions:
        raise ValueError("A transaction needs at least one instruction")
    message = Message(list(instructions), keypair.pubkey())
    return Transaction([keypair], message, blockhash)


def encode_transaction(tx: Transaction) -> str:
    """Base-58 encode the binary serialization of a signed transaction."""
    return b58encode(bytes(tx))


def transaction_signature(tx: Transaction) -> str:
    return str(tx.signatures[0])


def build_tip_bundle(
    keypair: Keypair,
    blockhash: Hash,
    tip_account: str,
    payload_instructions: Sequence[Instruction],
    tip_lamports: int = DEFAULT_TIP_LAMPORTS,
) -> tuple[Bundle, list[Transaction]]:
    """
    Build a two-transaction bundle: the tip transfer, then the payload.

    Returns:
        (bundle of encoded transactions, signed transactions in bundle order)
    """
    tip_tx = build_transaction(
        keypair, [tip_instruction(keypair.pubkey(), tip_account, tip_lamports)], blockhash
    )
    payload_tx = build_transaction(keypair, payload_instructions, blockhash)
    signed = [tip_tx, payload_tx]
    return Bundle(tuple(encode_transaction(tx) for tx in signed)), signed


def build_tipped_transaction(
    keypair: Keypair,
    blockhash: Hash,
    tip_account: str,
    payload_instructions: Sequence[Instruction],
    tip_lamports: int = DEFAULT_TIP_LAMPORTS,
    priority_fee: Optional[int] = DEFAULT_PRIORITY_FEE,
    bundle_only: bool = False,
) -> Transaction:
    """
    Build one transaction carrying the payload and the tip.

    A compute-unit-price instruction is prepended unless ``bundle_only``
    is set or ``priority_fee`` is None; bundle-only submissions are
    prioritised by the tip alone.
    """
    instructions: list[Instruction] = []
    if not bundle_only and priority_fee is not None:
        instructions.append(compute_unit_price_instruction(priority_fee))
    instructions.extend(payload_instructions)
    instructions.append(tip_instruction(keypair.pubkey(), tip_account, tip_lamports))
    return build_transaction(keypair, instructions, blockhash)
