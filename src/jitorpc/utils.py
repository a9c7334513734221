from __future__ import annotations

import json
from typing import Any

import base58

EXPLORER_TX_URL = "https://solscan.io/tx/{}"


def b58encode(data: bytes) -> str:
    return base58.b58encode(data).decode("ascii")


def b58decode(value: str) -> bytes:
    try:
        return base58.b58decode(value)
    except ValueError as exc:
        raise ValueError(f"Invalid base-58 string: {value!r}") from exc


def prettify_json(data: Any) -> str:
    """Pretty-print a JSON value; raw text that fails to parse is returned unchanged."""
    if isinstance(data, (bytes, str)):
        try:
            data = json.loads(data)
        except ValueError:
            return data.decode("utf-8", "replace") if isinstance(data, bytes) else data
    return json.dumps(data, indent=2)


def explorer_url(signature: str) -> str:
    return EXPLORER_TX_URL.format(signature)


def summarize_params(params: Any, limit: int = 120) -> str:
    """Short one-line rendering of RPC params for error messages."""
    text = json.dumps(params, default=str)
    if len(text) <= limit:
        return text
    return text[: limit - 3] + "..."
