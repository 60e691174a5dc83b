"""
TII module for the tx3 SDK.

This module reads TII (Transaction Invocation Interface) documents and builds
invocations: incremental bindings of arguments, inputs and fees over a
transaction template.
"""
from .exceptions import (
    InvalidParamsSchemaError, InvalidParamTypeError, InvalidTiiError, ReduceError,
    TiiError, TiiFileError, UnknownProfileError, UnknownTxError
)
from .invocation import Invocation, Reducer
from .params import ParamKind, ParamType, params_from_schema
from .protocol import Protocol

__all__ = [
    "Protocol", "Invocation", "Reducer", "ParamKind", "ParamType", "params_from_schema",
    "TiiError", "InvalidTiiError", "TiiFileError", "UnknownTxError", "UnknownProfileError",
    "InvalidParamsSchemaError", "InvalidParamTypeError", "ReduceError",
]
