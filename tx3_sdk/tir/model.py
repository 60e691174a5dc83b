"""
Data models for the transaction IR (TIR).

Expressions form an immutable tree. Every node carries a ``kind`` tag used
as the discriminator when the tree is read back from JSON.
"""
from enum import Enum
from typing import Annotated, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Type(str, Enum):
    """Built-in IR types. Any other type name refers to a custom type."""
    UNDEFINED = "Undefined"
    UNIT = "Unit"
    INT = "Int"
    BOOL = "Bool"
    BYTES = "Bytes"
    ADDRESS = "Address"
    UTXO = "Utxo"
    UTXO_REF = "UtxoRef"
    ANY_ASSET = "AnyAsset"
    LIST = "List"


class _Node(BaseModel):
    model_config = ConfigDict(frozen=True)

    def map_children(self, fn: Callable[["Expression"], "Expression"]) -> "_Node":
        """Return a copy of this node with ``fn`` applied to each direct child expression."""
        return self


class UtxoRef(_Node):
    """Reference to a transaction output."""
    txid: str
    index: int

    @classmethod
    def parse(cls, value: str) -> "UtxoRef":
        """Parse a ``<txid hex>#<index>`` string."""
        txid, sep, index = value.partition("#")
        if not sep or not txid:
            raise ValueError(f"UtxoRef must look like '<txid>#<index>', got: {value}")
        bytes.fromhex(txid)
        return cls(txid=txid.lower(), index=int(index))

    def __str__(self) -> str:
        return f"{self.txid}#{self.index}"


class NoneExpr(_Node):
    kind: Literal["none"] = "none"


class NumberExpr(_Node):
    kind: Literal["number"] = "number"
    value: int


class BoolExpr(_Node):
    kind: Literal["bool"] = "bool"
    value: bool


class BytesExpr(_Node):
    """Byte string, hex encoded."""
    kind: Literal["bytes"] = "bytes"
    value: str


class StringExpr(_Node):
    kind: Literal["string"] = "string"
    value: str


class AddressExpr(_Node):
    kind: Literal["address"] = "address"
    value: str


class UtxoRefsExpr(_Node):
    kind: Literal["utxo_refs"] = "utxo_refs"
    value: List[UtxoRef]


class ListExpr(_Node):
    kind: Literal["list"] = "list"
    items: List["Expression"] = Field(default_factory=list)

    def map_children(self, fn):
        return self.model_copy(update={"items": [fn(x) for x in self.items]})


class StructExpr(_Node):
    kind: Literal["struct"] = "struct"
    constructor: int = 0
    fields: List["Expression"] = Field(default_factory=list)

    def map_children(self, fn):
        return self.model_copy(update={"fields": [fn(x) for x in self.fields]})


class AssetExpr(_Node):
    """
    A single asset amount. An absent policy means the native token.
    """
    policy: "Expression" = NoneExpr()
    asset_name: "Expression" = NoneExpr()
    amount: "Expression"

    @classmethod
    def native(cls, amount: int) -> "AssetExpr":
        return cls(amount=NumberExpr(value=amount))

    def map_children(self, fn):
        return self.model_copy(update={
            "policy": fn(self.policy),
            "asset_name": fn(self.asset_name),
            "amount": fn(self.amount),
        })


class AssetsExpr(_Node):
    kind: Literal["assets"] = "assets"
    value: List[AssetExpr] = Field(default_factory=list)

    def map_children(self, fn):
        return self.model_copy(update={"value": [a.map_children(fn) for a in self.value]})


class Utxo(_Node):
    """A concrete output available for spending."""
    ref: UtxoRef
    address: str
    datum: Optional["Expression"] = None
    assets: List[AssetExpr] = Field(default_factory=list)
    script: Optional[str] = None


class UtxoSetExpr(_Node):
    kind: Literal["utxo_set"] = "utxo_set"
    value: List[Utxo] = Field(default_factory=list)


class InputQuery(_Node):
    """
    Constraints an input must satisfy.

    Attributes:
        address: Address the candidate outputs must belong to
        min_amount: Minimum asset bundle the selection must cover
        ref: Explicit output reference(s)
        many: Whether more than one output may be selected
        collateral: Whether the input is used as collateral
    """
    address: "Expression" = NoneExpr()
    min_amount: "Expression" = NoneExpr()
    ref: "Expression" = NoneExpr()
    many: bool = False
    collateral: bool = False

    def map_children(self, fn):
        return self.model_copy(update={
            "address": fn(self.address),
            "min_amount": fn(self.min_amount),
            "ref": fn(self.ref),
        })


class ParamExpr(_Node):
    """Parameter hole awaiting a value of the declared type."""
    kind: Literal["param"] = "param"
    name: str
    type: str = Type.UNDEFINED.value


class InputQueryExpr(_Node):
    """Input hole awaiting a set of outputs satisfying ``query``."""
    kind: Literal["input_query"] = "input_query"
    name: str
    query: InputQuery = Field(default_factory=InputQuery)

    def map_children(self, fn):
        return self.model_copy(update={"query": self.query.map_children(fn)})


class FeesExpr(_Node):
    """Fee hole."""
    kind: Literal["fees"] = "fees"


class AddExpr(_Node):
    kind: Literal["add"] = "add"
    left: "Expression"
    right: "Expression"

    def map_children(self, fn):
        return self.model_copy(update={"left": fn(self.left), "right": fn(self.right)})


class SubExpr(_Node):
    kind: Literal["sub"] = "sub"
    left: "Expression"
    right: "Expression"

    def map_children(self, fn):
        return self.model_copy(update={"left": fn(self.left), "right": fn(self.right)})


class ConcatExpr(_Node):
    kind: Literal["concat"] = "concat"
    left: "Expression"
    right: "Expression"

    def map_children(self, fn):
        return self.model_copy(update={"left": fn(self.left), "right": fn(self.right)})


class NegateExpr(_Node):
    kind: Literal["negate"] = "negate"
    operand: "Expression"

    def map_children(self, fn):
        return self.model_copy(update={"operand": fn(self.operand)})


class PropertyExpr(_Node):
    """Projection of the ``index``-th field of a struct or list."""
    kind: Literal["property"] = "property"
    target: "Expression"
    index: int

    def map_children(self, fn):
        return self.model_copy(update={"target": fn(self.target)})


Expression = Annotated[
    Union[
        NoneExpr,
        NumberExpr,
        BoolExpr,
        BytesExpr,
        StringExpr,
        AddressExpr,
        UtxoRefsExpr,
        ListExpr,
        StructExpr,
        AssetsExpr,
        UtxoSetExpr,
        ParamExpr,
        InputQueryExpr,
        FeesExpr,
        AddExpr,
        SubExpr,
        ConcatExpr,
        NegateExpr,
        PropertyExpr,
    ],
    Field(discriminator="kind"),
]

# Leaf values the reducer can no longer simplify.
CONSTANT_KINDS = frozenset({
    "none", "number", "bool", "bytes", "string", "address",
    "utxo_refs", "utxo_set",
})


def transform(expr: "Expression", fn: Callable[["Expression"], "Expression"]) -> "Expression":
    """Rebuild ``expr`` bottom-up, applying ``fn`` to every node after its children."""
    return fn(expr.map_children(lambda child: transform(child, fn)))


def walk(expr: "Expression"):
    """Yield every node of ``expr``, parents before children."""
    yield expr
    children: List = []
    expr.map_children(lambda child: children.append(child) or child)
    for child in children:
        yield from walk(child)


class TxInput(_Node):
    name: str
    utxos: "Expression"
    redeemer: Optional["Expression"] = None


class TxOutput(_Node):
    address: "Expression"
    amount: "Expression"
    datum: Optional["Expression"] = None


class Mint(_Node):
    amount: "Expression"
    redeemer: Optional["Expression"] = None


class Tx(_Node):
    """
    A transaction template.

    Holes may appear anywhere inside the expressions. Instances are never
    modified; every rewrite returns a new ``Tx``.
    """
    fees: "Expression" = FeesExpr()
    references: List["Expression"] = Field(default_factory=list)
    inputs: List[TxInput] = Field(default_factory=list)
    outputs: List[TxOutput] = Field(default_factory=list)
    mints: List[Mint] = Field(default_factory=list)
    signers: List["Expression"] = Field(default_factory=list)

    def map_expressions(self, fn: Callable[["Expression"], "Expression"]) -> "Tx":
        """Return a new Tx with ``fn`` applied to every top-level expression."""
        def opt(expr):
            return fn(expr) if expr is not None else None

        return self.model_copy(update={
            "fees": fn(self.fees),
            "references": [fn(x) for x in self.references],
            "inputs": [
                i.model_copy(update={"utxos": fn(i.utxos), "redeemer": opt(i.redeemer)})
                for i in self.inputs
            ],
            "outputs": [
                o.model_copy(update={
                    "address": fn(o.address),
                    "amount": fn(o.amount),
                    "datum": opt(o.datum),
                })
                for o in self.outputs
            ],
            "mints": [
                m.model_copy(update={"amount": fn(m.amount), "redeemer": opt(m.redeemer)})
                for m in self.mints
            ],
            "signers": [fn(x) for x in self.signers],
        })

    def expressions(self):
        """Yield every top-level expression of the transaction."""
        found: List = []
        self.map_expressions(lambda expr: found.append(expr) or expr)
        return iter(found)


for _model in (
    ListExpr, StructExpr, AssetExpr, AssetsExpr, Utxo, UtxoSetExpr, InputQuery,
    InputQueryExpr, AddExpr, SubExpr, ConcatExpr, NegateExpr, PropertyExpr,
    TxInput, TxOutput, Mint, Tx,
):
    _model.model_rebuild()
