"""
Wire models for the Transaction Resolve Protocol (TRP).
"""
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from ..core import BytesEnvelope, TirEnvelope


class ResolveParams(BaseModel):
    """Parameters of ``trp.resolve``"""
    tir: TirEnvelope
    args: Dict[str, Any] = Field(default_factory=dict)
    env: Optional[Dict[str, Any]] = None


class TxEnvelope(BaseModel):
    """Resolved transaction: hex-encoded bytes and their hash"""
    tx: str
    hash: str


class VKeyWitness(BaseModel):
    """Verification-key witness of ``trp.submit``"""
    type: Literal["vkey"] = "vkey"
    key: BytesEnvelope
    signature: BytesEnvelope


class SubmitParams(BaseModel):
    """Parameters of ``trp.submit``"""
    tx: BytesEnvelope
    witnesses: List[VKeyWitness] = Field(default_factory=list)


class SubmitResponse(BaseModel):
    """Submission receipt"""
    hash: str


class _Diagnostic(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)


class UnsupportedTirDiagnostic(_Diagnostic):
    provided: str
    expected: str


class MissingTxArgDiagnostic(_Diagnostic):
    key: str
    type_: str = Field(
        validation_alias=AliasChoices("type", "expectedType", "ty"),
        serialization_alias="type",
    )


class InputQueryDiagnostic(_Diagnostic):
    """
    Rendered form of the input query the resolver could not satisfy.

    Attributes:
        address: Address filter, if any
        min_amount: Minimum amount per asset class
        refs: Explicit output references
        support_many: Whether several outputs may be selected
        collateral: Whether the input is collateral
    """
    address: Optional[str]
    min_amount: Dict[str, str]
    refs: List[str]
    support_many: bool
    collateral: bool


class SearchSpaceDiagnostic(_Diagnostic):
    """Summary of the outputs the resolver looked at"""
    matched: List[str]
    by_address_count: Optional[int] = None
    by_asset_class_count: Optional[int] = None
    by_ref_count: Optional[int] = None


class InputNotResolvedDiagnostic(_Diagnostic):
    name: str
    query: InputQueryDiagnostic
    search_space: SearchSpaceDiagnostic = Field(
        validation_alias=AliasChoices("search_space", "searchSpace", "searchSpaceSummary"),
        serialization_alias="search_space",
    )


class TxScriptFailureDiagnostic(_Diagnostic):
    logs: List[str]


class JsonRpcRequest(BaseModel):
    jsonrpc: Literal["2.0"] = "2.0"
    method: str
    params: Any = None
    id: str


class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Optional[Any] = None


class JsonRpcResponse(BaseModel):
    """
    Response envelope. ``result`` and ``error`` are both optional here; the
    client decides what a response with neither means.
    """
    jsonrpc: Optional[str] = None
    id: Optional[Any] = None
    result: Optional[Any] = None
    error: Optional[JsonRpcError] = None
