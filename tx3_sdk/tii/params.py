"""
Parameter type descriptors.

A ``ParamType`` is built either from the JSON schema declared in a TII
document or from the type recorded on a hole of the transaction IR.
Only a small fixed vocabulary is understood; anything else is rejected.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..core import normalize_key
from ..tir.model import Type
from .exceptions import InvalidParamsSchemaError, InvalidParamTypeError

CORE_SPEC_URI = "https://tx3.land/specs/v1beta0/core"
COMPONENTS_PREFIX = "#/components/schemas/"


class ParamKind(str, Enum):
    BYTES = "Bytes"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    UTXO_REF = "UtxoRef"
    ADDRESS = "Address"
    LIST = "List"
    CUSTOM = "Custom"


@dataclass(frozen=True)
class ParamType:
    """
    Declared type of a parameter.

    Attributes:
        kind: Variant tag
        inner: Element type, for ``LIST`` (None when the element type is unknown)
        name: Type name, for ``CUSTOM``
        schema: Schema document, for ``CUSTOM`` types declared in a TII file
    """
    kind: ParamKind
    inner: Optional["ParamType"] = None
    name: Optional[str] = None
    schema: Optional[Dict[str, Any]] = field(default=None, hash=False)

    @classmethod
    def list_of(cls, inner: Optional["ParamType"]) -> "ParamType":
        return cls(ParamKind.LIST, inner=inner)

    @classmethod
    def custom(cls, name: str, schema: Optional[Dict[str, Any]] = None) -> "ParamType":
        return cls(ParamKind.CUSTOM, name=name, schema=schema)

    def __str__(self) -> str:
        if self.kind == ParamKind.LIST:
            return f"List<{self.inner}>" if self.inner else "List"
        if self.kind == ParamKind.CUSTOM:
            return self.name or "Custom"
        return self.kind.value

    @classmethod
    def from_json_schema(
        cls,
        schema: Any,
        components: Optional[Mapping[str, Dict[str, Any]]] = None
    ) -> "ParamType":
        """
        Map a JSON schema to a parameter type.

        Args:
            schema: Schema of a single parameter
            components: Named schemas that ``#/components/schemas/...`` refers to

        Returns:
            The parameter type

        Raises:
            InvalidParamTypeError: If the schema is outside the supported vocabulary
        """
        if not isinstance(schema, dict):
            raise InvalidParamTypeError(f"Parameter schema must be an object, got {type(schema).__name__}")

        reference = schema.get("$ref")
        if reference is not None:
            return cls._from_reference(reference, components or {})

        instance_type = schema.get("type")
        if instance_type == "integer":
            return cls(ParamKind.INTEGER)
        if instance_type == "boolean":
            return cls(ParamKind.BOOLEAN)
        if instance_type == "array":
            if "items" not in schema:
                raise InvalidParamTypeError("Array parameter schema must declare 'items'")
            return cls.list_of(cls.from_json_schema(schema["items"], components))

        raise InvalidParamTypeError(f"Unsupported parameter schema: {schema}")

    @classmethod
    def _from_reference(cls, reference: str, components: Mapping[str, Dict[str, Any]]) -> "ParamType":
        well_known = {
            f"{CORE_SPEC_URI}#Bytes": ParamKind.BYTES,
            f"{CORE_SPEC_URI}#Address": ParamKind.ADDRESS,
            f"{CORE_SPEC_URI}#UtxoRef": ParamKind.UTXO_REF,
        }
        if reference in well_known:
            return cls(well_known[reference])

        if reference.startswith(COMPONENTS_PREFIX):
            name = reference[len(COMPONENTS_PREFIX):]
            if name in components:
                return cls.custom(name, components[name])

        raise InvalidParamTypeError(f"Unknown schema reference: {reference}")

    @classmethod
    def from_ir_type(cls, type_name: str) -> "ParamType":
        """Map the type recorded on an IR parameter hole."""
        mapping = {
            Type.INT.value: ParamKind.INTEGER,
            Type.BOOL.value: ParamKind.BOOLEAN,
            Type.BYTES.value: ParamKind.BYTES,
            Type.ADDRESS.value: ParamKind.ADDRESS,
            Type.UTXO_REF.value: ParamKind.UTXO_REF,
        }
        if type_name in mapping:
            return cls(mapping[type_name])
        if type_name == Type.LIST.value:
            return cls.list_of(None)
        return cls.custom(type_name)


def params_from_schema(
    schema: Any,
    components: Optional[Mapping[str, Dict[str, Any]]] = None
) -> Dict[str, ParamType]:
    """
    Read the parameter map declared by an object schema.

    Raises:
        InvalidParamsSchemaError: If the schema has no ``properties`` object
        InvalidParamTypeError: If any property uses an unsupported type
    """
    if not isinstance(schema, dict) or not isinstance(schema.get("properties"), dict):
        raise InvalidParamsSchemaError("invalid params schema: expected an object schema with 'properties'")

    return {
        normalize_key(name): ParamType.from_json_schema(value, components)
        for name, value in schema["properties"].items()
    }
