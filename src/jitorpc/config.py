"""
Client configuration.

A single immutable ``ClientConfig`` is built once and handed to the
Transport. Values come from explicit arguments or, through ``from_env``,
from the process environment after loading ``~/.jitorpc/.env``.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


# Default config directory
JITORPC_DIR = Path.home() / ".jitorpc"
JITORPC_ENV = JITORPC_DIR / ".env"

DEFAULT_BLOCK_ENGINE_URL = "https://mainnet.block-engine.jito.wtf/api/v1"
DEFAULT_SOLANA_RPC_URL = "https://api.mainnet-beta.solana.com"
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class ClientConfig:
    """
    Connection settings for one JSON-RPC endpoint.

    Attributes:
        base_url: Endpoint root, e.g. ``https://.../api/v1``
        uuid: Optional access token, sent as ``?uuid=`` and ``x-jito-auth``
        timeout: HTTP timeout in seconds
        request_id: JSON-RPC ``id`` placed in every request
    """
    base_url: str
    uuid: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    request_id: int = 1

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if self.timeout <= 0:
            raise ValueError(f"timeout must be positive, got: {self.timeout}")
        # Normalise: paths are appended verbatim, so drop a trailing slash
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))
        if self.uuid == "":
            object.__setattr__(self, "uuid", None)

    @property
    def has_token(self) -> bool:
        return self.uuid is not None

    @classmethod
    def from_env(
        cls,
        env_path: Optional[Path] = None,
        *,
        url_var: str = "JITO_BLOCK_ENGINE_URL",
        default_url: str = DEFAULT_BLOCK_ENGINE_URL,
        token_var: Optional[str] = "JITO_UUID",
    ) -> "ClientConfig":
        """
        Build a config from the environment.

        Args:
            env_path: Path to .env file (default: ~/.jitorpc/.env)
            url_var: Environment variable holding the endpoint URL
            default_url: URL used when ``url_var`` is unset
            token_var: Variable holding the access token, or None for no token

        Returns:
            ClientConfig with token from ``token_var`` (if set)
        """
        load_env(env_path)
        raw_timeout = os.environ.get("JITO_TIMEOUT", str(DEFAULT_TIMEOUT))
        try:
            timeout = float(raw_timeout)
        except ValueError as exc:
            raise ValueError(f"JITO_TIMEOUT must be a number of seconds, got: {raw_timeout!r}") from exc
        return cls(
            base_url=os.environ.get(url_var, default_url),
            uuid=(os.environ.get(token_var) or None) if token_var else None,
            timeout=timeout,
        )

    def redacted(self) -> str:
        """Human-readable summary that never shows the token."""
        token = "set" if self.has_token else "none"
        return f"{self.base_url} (token: {token})"


def load_env(env_path: Optional[Path] = None) -> None:
    """Load ~/.jitorpc/.env (or ``env_path``) into the environment, if present."""
    env_path = env_path or JITORPC_ENV
    if env_path.exists():
        load_dotenv(env_path, override=False)

