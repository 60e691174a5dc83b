"""
Exceptions for the TRP client.

Transport failures (``NetworkError``, ``HttpError``, ``DeserializationError``,
``UnknownError``) are kept apart from protocol diagnostics: expected,
structured outcomes reported by the server through well-known JSON-RPC error
codes, each carrying a typed payload.
"""
import logging
from enum import IntEnum
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ValidationError

from .pretty import render_diagnostic
from .spec import (
    InputNotResolvedDiagnostic, JsonRpcError, MissingTxArgDiagnostic,
    TxScriptFailureDiagnostic, UnsupportedTirDiagnostic
)

logger = logging.getLogger(__name__)


class TrpErrorCode(IntEnum):
    """JSON-RPC error codes with a structured diagnostic payload."""
    UNSUPPORTED_TIR = -32000
    MISSING_TX_ARG = -32001
    INPUT_NOT_RESOLVED = -32002
    TX_SCRIPT_FAILURE = -32003


class TrpError(Exception):
    """Base exception for TRP errors."""
    pass


class NetworkError(TrpError):
    """Raised when the request could not be sent or the connection failed."""
    pass


class HttpError(TrpError):
    """Raised when the server answers with a non-2xx HTTP status."""

    def __init__(self, status: int, reason: str):
        self.status = status
        self.reason = reason
        super().__init__(f"HTTP error {status}: {reason}")


class DeserializationError(TrpError):
    """Raised when a response does not have the expected shape."""

    def __init__(self, message: str):
        super().__init__(f"Failed to deserialize response: {message}")


class UnknownError(TrpError):
    """Raised when a response carries neither a result nor an error."""

    def __init__(self, message: str):
        super().__init__(f"Unknown error: {message}")


class GenericRpcError(TrpError):
    """JSON-RPC error without a recognized diagnostic payload."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"({code}) {message}")


class DiagnosticError(TrpError):
    """
    JSON-RPC error with a structured diagnostic payload.

    ``str(error)`` is rendered from ``diagnostic`` alone; the server's own
    message is kept as ``server_message``.
    """
    code: TrpErrorCode
    payload_model: Type[BaseModel]

    def __init__(self, diagnostic: BaseModel, server_message: Optional[str] = None):
        self.diagnostic = diagnostic
        self.server_message = server_message
        super().__init__(render_diagnostic(diagnostic))


class UnsupportedTirError(DiagnosticError):
    """The server cannot read the TIR version sent."""
    code = TrpErrorCode.UNSUPPORTED_TIR
    payload_model = UnsupportedTirDiagnostic


class MissingTxArgError(DiagnosticError):
    """A transaction argument was not provided."""
    code = TrpErrorCode.MISSING_TX_ARG
    payload_model = MissingTxArgDiagnostic


class InputNotResolvedError(DiagnosticError):
    """No outputs satisfy one of the input queries."""
    code = TrpErrorCode.INPUT_NOT_RESOLVED
    payload_model = InputNotResolvedDiagnostic


class TxScriptFailureError(DiagnosticError):
    """A script evaluated while resolving the transaction failed."""
    code = TrpErrorCode.TX_SCRIPT_FAILURE
    payload_model = TxScriptFailureDiagnostic


DIAGNOSTIC_ERRORS: Dict[int, Type[DiagnosticError]] = {
    error_class.code.value: error_class
    for error_class in (UnsupportedTirError, MissingTxArgError, InputNotResolvedError, TxScriptFailureError)
}


def from_json_rpc_error(error: JsonRpcError) -> TrpError:
    """
    Map a JSON-RPC error object to an exception.

    Known codes with a well-formed ``data`` payload map to their diagnostic
    error class. Unknown codes, and known codes whose ``data`` is absent or
    malformed, map to ``GenericRpcError``.
    """
    generic = GenericRpcError(error.code, error.message, error.data)

    error_class = DIAGNOSTIC_ERRORS.get(error.code)
    if error_class is None:
        return generic

    if error.data is None:
        logger.debug(f"JSON-RPC error {error.code} carries no diagnostic data")
        return generic

    try:
        diagnostic = error_class.payload_model.model_validate(error.data)
    except ValidationError as e:
        logger.debug(f"Malformed diagnostic for JSON-RPC error {error.code}: {e}")
        return generic

    return error_class(diagnostic, server_message=error.message)
