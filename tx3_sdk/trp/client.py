"""
Client for the Transaction Resolve Protocol (TRP).

TRP is JSON-RPC 2.0 over HTTP POST. The client performs no retries and
imposes no timeout of its own; transport and protocol failures are raised
unmodified so that retry policy stays with the caller.
"""
import logging
import os
import re
import urllib.parse
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from pydantic import ValidationError

from .._rate_limited_log import rate_limited_log
from .exceptions import (
    DeserializationError, HttpError, NetworkError, UnknownError, from_json_rpc_error
)
from .spec import (
    JsonRpcRequest, JsonRpcResponse, ResolveParams, SubmitParams, SubmitResponse, TxEnvelope
)

logger = logging.getLogger(__name__)

ENV_ENDPOINT = "TX3_TRP_ENDPOINT"
ENV_API_KEY = "TX3_TRP_API_KEY"
ENV_TIMEOUT = "TX3_TRP_TIMEOUT"
ENV_INSECURE = "TX3_TRP_INSECURE"

API_KEY_HEADER = "dmtr-api-key"

# RFC 7230 token characters
_HEADER_NAME_RE = re.compile(r"^[!#$%&'*+\-.^_`|~0-9A-Za-z]+\Z")
# Visible ASCII and tab, no leading whitespace
_HEADER_VALUE_RE = re.compile(r"^([\x21-\x7e][\t\x20-\x7e]*)?\Z")


@dataclass
class ClientOptions:
    """
    Configuration of a TRP client.

    Attributes:
        endpoint: URL of the TRP server
        headers: Extra headers sent with every request
        env_args: Environment values sent with ``resolve`` when the request has none
        timeout: Request timeout in seconds, None to wait indefinitely
    """
    endpoint: str
    headers: Optional[Dict[str, str]] = None
    env_args: Optional[Dict[str, Any]] = None
    timeout: Optional[float] = None

    @classmethod
    def from_env(cls, **overrides: Any) -> "ClientOptions":
        """
        Build options from ``TX3_TRP_*`` environment variables.

        Keyword arguments override the values read from the environment.

        Raises:
            ValueError: If no endpoint is configured or the timeout is not a number
        """
        values: Dict[str, Any] = {
            "endpoint": os.environ.get(ENV_ENDPOINT),
            "headers": None,
            "timeout": None,
        }

        api_key = os.environ.get(ENV_API_KEY)
        if api_key:
            values["headers"] = {API_KEY_HEADER: api_key}

        timeout = os.environ.get(ENV_TIMEOUT)
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError:
                raise ValueError(f"{ENV_TIMEOUT} must be a number of seconds, got: {timeout}")

        values.update(overrides)
        if not values["endpoint"]:
            raise ValueError(f"TRP endpoint must be provided or set in {ENV_ENDPOINT}")
        return cls(**values)


class Client:
    """
    Client for the Transaction Resolve Protocol.

    The client keeps no per-call state, so one instance can be shared by
    concurrent callers.
    """

    def __init__(
        self,
        options: ClientOptions,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the TRP client

        Args:
            options: Endpoint, headers, environment and timeout
            session: Optional requests session (one is created if omitted)
            logger: Optional logger instance to use for debug logging

        Raises:
            ValueError: If the endpoint is invalid or uses insecure HTTP
        """
        self._validate_endpoint(options.endpoint)
        self.options = options
        self.session = session or requests.Session()
        self.logger = logger or logging.getLogger(__name__)

    def _validate_endpoint(self, url: str) -> None:
        """
        Validate the endpoint URL is secure.

        Raises:
            ValueError: If URL is invalid or uses insecure HTTP
        """
        parsed = urllib.parse.urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.hostname:
            raise ValueError(f"Invalid TRP endpoint '{url}'")

        is_local = parsed.hostname in ("localhost", "127.0.0.1", "::1")
        if parsed.scheme != "https" and not is_local and os.environ.get(ENV_INSECURE) != "1":
            raise ValueError(
                f"TRP endpoint must use HTTPS for security (got: {parsed.scheme}://). "
                f"Set {ENV_INSECURE}=1 to allow HTTP for development."
            )

    def _build_headers(self) -> Dict[str, str]:
        """
        Merge caller headers into the default ones.

        Headers with an invalid name or value are dropped with a warning.
        """
        headers = {"Content-Type": "application/json"}
        for name, value in (self.options.headers or {}).items():
            if not isinstance(name, str) or not _HEADER_NAME_RE.match(name):
                rate_limited_log(f"Dropping TRP header with invalid name: {name!r}", logger_instance=self.logger)
                continue
            if not isinstance(value, str) or not _HEADER_VALUE_RE.match(value):
                rate_limited_log(f"Dropping TRP header {name} with invalid value", logger_instance=self.logger)
                continue
            headers[name] = value
        return headers

    def _sanitize_params(self, params: Any) -> Any:
        """
        Redact envelope contents for logging

        Returns:
            A copy of ``params`` with every ``content`` field replaced by its length
        """
        if isinstance(params, dict):
            return {
                key: f"[REDACTED - {len(str(value))} chars]" if key == "content" else self._sanitize_params(value)
                for key, value in params.items()
            }
        if isinstance(params, list):
            return [self._sanitize_params(item) for item in params]
        return params

    def call(self, method: str, params: Any) -> Any:
        """
        Perform a JSON-RPC call.

        Args:
            method: JSON-RPC method name
            params: JSON-serializable parameters

        Returns:
            The ``result`` member of the response

        Raises:
            NetworkError: If the request could not be completed
            HttpError: If the HTTP status is not 2xx
            DeserializationError: If the body is not a JSON-RPC response
            DiagnosticError: If the server reports a known diagnostic
            GenericRpcError: For any other JSON-RPC error
            UnknownError: If the response has neither result nor error
        """
        request = JsonRpcRequest(method=method, params=params, id=str(uuid.uuid4()))
        body = request.model_dump(mode="json")
        self.logger.debug(f"TRP call {method} ({request.id}): {self._sanitize_params(body['params'])}")

        try:
            response = self.session.post(
                self.options.endpoint,
                json=body,
                headers=self._build_headers(),
                timeout=self.options.timeout
            )
        except requests.RequestException as e:
            self.logger.error(f"TRP request failed: {e}")
            raise NetworkError(f"network error: {str(e)}") from e

        if not 200 <= response.status_code < 300:
            self.logger.warning(f"TRP call {method} returned HTTP {response.status_code}")
            raise HttpError(response.status_code, response.reason or "")

        try:
            payload = JsonRpcResponse.model_validate(response.json())
        except ValueError as e:
            self.logger.error(f"Invalid JSON-RPC response from TRP server: {e}")
            raise DeserializationError(str(e)) from e

        if payload.error is not None:
            error = from_json_rpc_error(payload.error)
            self.logger.debug(f"TRP call {method} failed: {error}")
            raise error

        if payload.result is None:
            raise UnknownError("No result in response")

        return payload.result

    def resolve(self, params: ResolveParams) -> TxEnvelope:
        """
        Resolve a transaction template into a submittable transaction.

        When ``params.env`` is None the client's ``env_args`` are sent instead.

        Raises:
            TrpError: See ``call``; DeserializationError if the result is not a tx envelope
        """
        if params.env is None and self.options.env_args is not None:
            params = params.model_copy(update={"env": dict(self.options.env_args)})

        result = self.call("trp.resolve", params.model_dump(mode="json", by_alias=True))
        try:
            return TxEnvelope.model_validate(result)
        except ValidationError as e:
            raise DeserializationError(str(e)) from e

    def submit(self, params: SubmitParams) -> SubmitResponse:
        """
        Submit a signed transaction.

        Raises:
            TrpError: See ``call``; DeserializationError if the result is not a receipt
        """
        result = self.call("trp.submit", params.model_dump(mode="json", by_alias=True))
        try:
            return SubmitResponse.model_validate(result)
        except ValidationError as e:
            raise DeserializationError(str(e)) from e

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
