"""
Data models for TII (Transaction Invocation Interface) documents.
"""
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ..core import TirEnvelope


def _empty_object_schema() -> Dict[str, Any]:
    return {"type": "object", "properties": {}}


class TiiInfo(BaseModel):
    """TII format version"""
    version: str


class ProtocolInfo(BaseModel):
    """Protocol metadata"""
    name: str
    version: str
    description: Optional[str] = None


class Transaction(BaseModel):
    """Transaction template and the JSON schema of its parameters"""
    description: Optional[str] = None
    tir: TirEnvelope
    params: Dict[str, Any] = Field(default_factory=_empty_object_schema)


class Party(BaseModel):
    """Named participant; every party is an address parameter"""
    description: Optional[str] = None


class Profile(BaseModel):
    """
    Named set of defaults for a deployment target.

    ``environment`` holds values for the protocol's environment schema and
    ``parties`` holds addresses for known parties.
    """
    description: Optional[str] = None
    environment: Dict[str, Any] = Field(default_factory=dict)
    parties: Dict[str, str] = Field(default_factory=dict)


class Components(BaseModel):
    """Reusable schemas referenced as ``#/components/schemas/<name>``"""
    schemas: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class TiiFile(BaseModel):
    """Root structure of a TII JSON document"""
    tii: TiiInfo
    protocol: ProtocolInfo
    transactions: Dict[str, Transaction]
    parties: Dict[str, Party] = Field(default_factory=dict)
    environment: Optional[Dict[str, Any]] = None
    profiles: Dict[str, Profile] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)
