"""
Wallet loading for jitorpc.

Keys come from a Solana CLI keygen file (a JSON array of 64 byte values)
or from PRIVATE_KEY in the environment / ~/.jitorpc/.env (base-58
encoded 64-byte secret key).

Dependencies: solders (keypair), python-dotenv, base58
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Optional

from dotenv import set_key
from solders.keypair import Keypair

from .config import JITORPC_ENV, load_env
from .errors import WalletError
from .utils import b58decode, b58encode


def generate_keypair() -> Keypair:
    return Keypair()


def keypair_from_keygen_file(path: Path) -> Keypair:
    """
    Load a keypair written by ``solana-keygen``.

    Raises:
        WalletError: If the file is missing or not a 64-byte JSON array
    """
    path = Path(path).expanduser()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise WalletError(f"Wallet file not found: {path}") from exc
    except ValueError as exc:
        raise WalletError(f"Wallet file is not valid JSON: {path}") from exc

    if not isinstance(data, list) or len(data) != 64:
        raise WalletError(f"Wallet file must hold a JSON array of 64 bytes: {path}")
    try:
        return Keypair.from_bytes(bytes(data))
    except ValueError as exc:
        raise WalletError(f"Invalid keypair bytes in {path}: {exc}") from exc


def save_keypair(keypair: Keypair, path: Path) -> Path:
    """Write a keypair in keygen format with owner-only permissions."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(list(bytes(keypair))), encoding="utf-8")

    # Set secure permissions on Unix
    if os.name != "nt":
        path.chmod(0o600)
    return path


def load_keypair(
    keypair_path: Optional[Path] = None,
    env_path: Optional[Path] = None,
) -> Keypair:
    """
    Load the signing keypair.

    Args:
        keypair_path: Keygen JSON file; takes precedence when given
        env_path: Path to .env file (default: ~/.jitorpc/.env)

    Raises:
        WalletError: If no usable key is found
    """
    if keypair_path is not None:
        return keypair_from_keygen_file(keypair_path)

    load_env(env_path)
    secret = os.environ.get("PRIVATE_KEY")
    if not secret:
        raise WalletError(
            f"PRIVATE_KEY not found. Pass --keypair or set PRIVATE_KEY in "
            f"{env_path or JITORPC_ENV}"
        )
    try:
        return Keypair.from_bytes(b58decode(secret.strip()))
    except ValueError as exc:
        raise WalletError(f"PRIVATE_KEY is not a base-58 64-byte secret key: {exc}") from exc


def export_private_key(keypair: Keypair) -> str:
    """Base-58 secret key, the PRIVATE_KEY format ``load_keypair`` accepts."""
    return b58encode(bytes(keypair))


def save_private_key(keypair: Keypair, env_path: Optional[Path] = None) -> Path:
    """
    Store the keypair as PRIVATE_KEY in a .env file, keeping other entries.

    Args:
        keypair: Keypair to store
        env_path: Path to .env file (default: ~/.jitorpc/.env)

    Returns:
        Path to the saved .env file
    """
    env_path = Path(env_path or JITORPC_ENV).expanduser()
    env_path.parent.mkdir(parents=True, exist_ok=True)
    env_path.touch(exist_ok=True)
    set_key(str(env_path), "PRIVATE_KEY", export_private_key(keypair), quote_mode="never")

    # Set secure permissions on Unix
    if os.name != "nt":
        env_path.chmod(0o600)
    return env_path
