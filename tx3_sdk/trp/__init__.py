"""
TRP module for the tx3 SDK.

This module provides a JSON-RPC client for the Transaction Resolve Protocol,
its wire models, and the error taxonomy of TRP diagnostics.
"""
from .client import API_KEY_HEADER, Client, ClientOptions
from .exceptions import (
    DeserializationError, DiagnosticError, GenericRpcError, HttpError, InputNotResolvedError,
    MissingTxArgError, NetworkError, TrpError, TrpErrorCode, TxScriptFailureError,
    UnknownError, UnsupportedTirError, from_json_rpc_error
)
from .pretty import render_diagnostic
from .spec import (
    InputNotResolvedDiagnostic, InputQueryDiagnostic, MissingTxArgDiagnostic, ResolveParams,
    SearchSpaceDiagnostic, SubmitParams, SubmitResponse, TxEnvelope, TxScriptFailureDiagnostic,
    UnsupportedTirDiagnostic, VKeyWitness
)

__all__ = [
    "Client", "ClientOptions", "API_KEY_HEADER",
    "ResolveParams", "SubmitParams", "SubmitResponse", "TxEnvelope", "VKeyWitness",
    "UnsupportedTirDiagnostic", "MissingTxArgDiagnostic", "InputQueryDiagnostic",
    "SearchSpaceDiagnostic", "InputNotResolvedDiagnostic", "TxScriptFailureDiagnostic",
    "TrpError", "TrpErrorCode", "NetworkError", "HttpError", "DeserializationError",
    "UnknownError", "GenericRpcError", "DiagnosticError", "UnsupportedTirError",
    "MissingTxArgError", "InputNotResolvedError", "TxScriptFailureError",
    "from_json_rpc_error", "render_diagnostic",
]
