"""
JSON-RPC Transport for the block engine.

One synchronous POST per call, no retries. Uses httpx for HTTP; the
result payload is returned undecoded for the service layer to validate.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional
from urllib.parse import urlencode

import httpx

from ..config import ClientConfig
from ..errors import TransportError
from .models import RpcRequest, RpcResponse

logger = logging.getLogger(__name__)


class Transport:
    """
    Sends JSON-RPC requests to a single configured endpoint.

    Owns one ``httpx.Client`` for its lifetime. Usage::

        with Transport(ClientConfig(url)) as transport:
            accounts = transport.send("/bundles", "getTipAccounts")
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """
        Args:
            config: Endpoint URL, optional token, timeout
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self._config = config
        headers = {"Content-Type": "application/json"}
        if config.uuid:
            headers["x-jito-auth"] = config.uuid
        self._client = httpx.Client(
            headers=headers,
            timeout=config.timeout,
            transport=transport,
        )

    @property
    def config(self) -> ClientConfig:
        return self._config

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "Transport":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def build_url(self, endpoint_path: str, query: Optional[dict[str, str]] = None) -> str:
        """Join base URL and path; append caller query flags, then ``uuid``."""
        params: dict[str, str] = dict(query or {})
        if self._config.uuid:
            params["uuid"] = self._config.uuid
        url = f"{self._config.base_url}{endpoint_path}"
        if params:
            url = f"{url}?{urlencode(params)}"
        return url

    def send(
        self,
        endpoint_path: str,
        method: str,
        params: Any = None,
        *,
        query: Optional[dict[str, str]] = None,
    ) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            endpoint_path: Resource path appended to the base URL (e.g. "/bundles")
            method: RPC method name (e.g. "sendBundle")
            params: JSON-serialisable positional parameters, or None
            query: Extra query parameters (e.g. {"bundleOnly": "true"})

        Returns:
            Result field from the RPC response

        Raises:
            TransportError: On network failure, undecodable response,
                or an error reported in the envelope
        """
        url = self.build_url(endpoint_path, query)
        request = RpcRequest(method=method, params=params, id=self._config.request_id)

        try:
            body = json.dumps(request.to_dict())
        except (TypeError, ValueError) as exc:
            raise TransportError(
                f"Error marshaling request for {method}: {exc}", method=method
            ) from exc

        logger.debug("Sending %s to %s%s", method, self._config.base_url, endpoint_path)
        logger.debug("Request body: %s", body)

        try:
            response = self._client.post(url, content=body)
        except httpx.HTTPError as exc:
            raise TransportError(f"Error sending {method} request: {exc}", method=method) from exc

        logger.debug("Response status: %s", response.status_code)
        return self._decode(response, method)

    @staticmethod
    def _decode(response: httpx.Response, method: str) -> Any:
        try:
            data = response.json()
        except ValueError as exc:
            if response.is_error:
                raise TransportError(
                    f"HTTP {response.status_code} from {method}: {response.text[:200]}",
                    method=method,
                    code=response.status_code,
                ) from exc
            raise TransportError(f"Error decoding {method} response: {exc}", method=method) from exc

        if not isinstance(data, dict):
            raise TransportError(
                f"Error decoding {method} response: expected a JSON object", method=method
            )

        try:
            envelope = RpcResponse.from_dict(data)
        except ValueError as exc:
            if response.is_error:
                raise TransportError(
                    f"HTTP {response.status_code} from {method}",
                    method=method,
                    code=response.status_code,
                ) from exc
            raise TransportError(f"Malformed {method} response: {exc}", method=method) from exc

        if envelope.error is not None:
            raise TransportError(
                envelope.error.message,
                method=method,
                code=envelope.error.code,
                data=envelope.error.data,
            )

        if response.is_error:
            raise TransportError(
                f"HTTP {response.status_code} from {method}",
                method=method,
                code=response.status_code,
            )

        logger.debug("Response result: %s", envelope.result)
        return envelope.result
