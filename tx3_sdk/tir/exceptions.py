"""
Exceptions raised while decoding or rewriting transaction IR.
"""
from typing import Any


class TirError(Exception):
    """Base exception for IR-related errors."""
    pass


class UnsupportedTirVersionError(TirError):
    """Raised when an envelope carries an IR version this SDK cannot read."""

    def __init__(self, provided: str, expected: str):
        self.provided = provided
        self.expected = expected
        super().__init__(f"TIR version {provided} is not supported, expected {expected}")


class InvalidTirBytesError(TirError):
    """Raised when decoded envelope bytes are not a valid IR document."""
    pass


class ApplyError(TirError):
    """Base exception for failures while binding values or reducing a tree."""
    pass


class InvalidArgumentError(ApplyError):
    """Raised when a bound value does not match the declared type of its hole."""

    def __init__(self, value: Any, name: str, expected: str):
        self.value = value
        self.name = name
        self.expected = expected
        super().__init__(f"invalid argument {value!r} for {name}, expected {expected}")


class InvalidBinaryOpError(ApplyError):
    """Raised when a binary operation is applied to incompatible operands."""

    def __init__(self, op: str, left: str, right: str):
        self.op = op
        self.left = left
        self.right = right
        super().__init__(f"invalid binary operation '{op}' over {left} and {right}")


class InvalidUnaryOpError(ApplyError):
    """Raised when a unary operation is applied to an incompatible operand."""

    def __init__(self, op: str, operand: str):
        self.op = op
        self.operand = operand
        super().__init__(f"invalid unary operation '{op}' over {operand}")


class PropertyIndexNotFoundError(ApplyError):
    """Raised when a projection index is out of range."""

    def __init__(self, index: int, target: str):
        self.index = index
        self.target = target
        super().__init__(f"property index {index} not found in {target}")
