"""
Transaction IR (TIR) for the tx3 SDK.

This module provides the expression tree used as transaction prototype, its
envelope codec, and an in-process reducer that binds values into holes and
folds constant expressions.
"""
from .codec import TIR_VERSION, decode_tx, encode_tx, ensure_supported_version
from .exceptions import (
    ApplyError, InvalidArgumentError, InvalidBinaryOpError, InvalidTirBytesError,
    InvalidUnaryOpError, PropertyIndexNotFoundError, TirError, UnsupportedTirVersionError
)
from .model import (
    AddExpr, AddressExpr, AssetExpr, AssetsExpr, BoolExpr, BytesExpr, ConcatExpr,
    Expression, FeesExpr, InputQuery, InputQueryExpr, ListExpr, Mint, NegateExpr,
    NoneExpr, NumberExpr, ParamExpr, PropertyExpr, StringExpr, StructExpr, SubExpr,
    Tx, TxInput, TxOutput, Type, Utxo, UtxoRef, UtxoRefsExpr, UtxoSetExpr
)
from .reducer import TirReducer

__all__ = [
    "TIR_VERSION", "decode_tx", "encode_tx", "ensure_supported_version",
    "TirError", "ApplyError", "InvalidArgumentError", "InvalidBinaryOpError",
    "InvalidTirBytesError", "InvalidUnaryOpError", "PropertyIndexNotFoundError",
    "UnsupportedTirVersionError",
    "Expression", "Tx", "TxInput", "TxOutput", "Mint", "Type", "Utxo", "UtxoRef",
    "InputQuery", "AddExpr", "AddressExpr", "AssetExpr", "AssetsExpr", "BoolExpr",
    "BytesExpr", "ConcatExpr", "FeesExpr", "InputQueryExpr", "ListExpr", "NegateExpr",
    "NoneExpr", "NumberExpr", "ParamExpr", "PropertyExpr", "StringExpr", "StructExpr",
    "SubExpr", "UtxoRefsExpr", "UtxoSetExpr",
    "TirReducer",
]
