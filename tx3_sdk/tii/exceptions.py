"""
Exceptions for the TII module.
"""
from typing import Optional


class TiiError(Exception):
    """Base exception for TII-related errors."""
    pass


class InvalidTiiError(TiiError):
    """Raised when a TII document is not valid JSON or does not match the TII layout."""
    pass


class TiiFileError(TiiError):
    """Raised when a TII file cannot be read."""
    pass


class UnknownTxError(TiiError):
    """Raised when a transaction name is not declared by the protocol."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown tx: {name}")


class UnknownProfileError(TiiError):
    """Raised when a profile name is not declared by the protocol."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown profile: {name}")


class InvalidParamsSchemaError(TiiError):
    """Raised when a params schema is not an object schema with properties."""
    pass


class InvalidParamTypeError(TiiError):
    """Raised when a parameter schema uses a type outside the supported vocabulary."""
    pass


class ReduceError(TiiError):
    """
    Raised when the reducer rejects the invocation pipeline.

    The reducer's exception is available as ``cause`` and as ``__cause__``.
    """

    def __init__(self, cause: Exception, stage: Optional[str] = None):
        self.cause = cause
        self.stage = stage
        prefix = f"{stage} failed" if stage else "reduction failed"
        super().__init__(f"{prefix}: {cause}")
