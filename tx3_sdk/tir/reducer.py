"""
In-process reducer for transaction IR.

Binds argument values, candidate inputs and fee amounts into the holes of a
transaction tree and folds constant sub-expressions. Input selection against
query constraints is left to the remote resolver: ``apply_inputs`` only wires
the supplied candidate set in.
"""
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import ValidationError

from ..core import ArgMap, normalize_key
from .exceptions import (
    InvalidArgumentError, InvalidBinaryOpError, InvalidUnaryOpError,
    PropertyIndexNotFoundError
)
from .model import (
    AddExpr, AddressExpr, AssetExpr, AssetsExpr, BoolExpr, BytesExpr, ConcatExpr,
    FeesExpr, InputQuery, InputQueryExpr, ListExpr, NegateExpr, NumberExpr,
    ParamExpr, PropertyExpr, StringExpr, StructExpr, SubExpr, Tx, Type, Utxo,
    UtxoRef, UtxoRefsExpr, UtxoSetExpr, _Node, transform, walk
)

logger = logging.getLogger(__name__)

# Nodes that still need a binding or a reduction step.
PENDING_KINDS = frozenset({
    "param", "input_query", "fees", "add", "sub", "concat", "negate", "property",
})


def is_resolved(expr) -> bool:
    """Whether ``expr`` contains no holes and no pending operations."""
    return not any(node.kind in PENDING_KINDS for node in walk(expr))


def _is_expression(value: Any) -> bool:
    return isinstance(value, _Node) and hasattr(value, "kind")


def _infer(value: Any, name: str):
    if _is_expression(value):
        return value
    if isinstance(value, bool):
        return BoolExpr(value=value)
    if isinstance(value, int):
        return NumberExpr(value=value)
    if isinstance(value, str):
        return StringExpr(value=value)
    if isinstance(value, (bytes, bytearray)):
        return BytesExpr(value=bytes(value).hex())
    if isinstance(value, (list, tuple)):
        return ListExpr(items=[_infer(x, name) for x in value])
    raise InvalidArgumentError(value, name, Type.UNDEFINED.value)


def coerce_arg(value: Any, type_: str, name: str):
    """
    Convert a bound value into an expression of the declared type.

    IR expressions are accepted as-is. JSON values are converted according
    to ``type_``.

    Raises:
        InvalidArgumentError: If the value cannot represent ``type_``
    """
    if _is_expression(value):
        return value

    if type_ == Type.INT:
        if isinstance(value, int) and not isinstance(value, bool):
            return NumberExpr(value=value)
        if isinstance(value, str):
            try:
                return NumberExpr(value=int(value, 0))
            except ValueError:
                pass
    elif type_ == Type.BOOL:
        if isinstance(value, bool):
            return BoolExpr(value=value)
    elif type_ == Type.BYTES:
        if isinstance(value, (bytes, bytearray)):
            return BytesExpr(value=bytes(value).hex())
        if isinstance(value, str):
            raw = value[2:] if value.startswith("0x") else value
            try:
                return BytesExpr(value=bytes.fromhex(raw).hex())
            except ValueError:
                pass
    elif type_ == Type.ADDRESS:
        if isinstance(value, str) and value:
            return AddressExpr(value=value)
    elif type_ == Type.UTXO_REF:
        if isinstance(value, UtxoRef):
            return UtxoRefsExpr(value=[value])
        if isinstance(value, str):
            try:
                return UtxoRefsExpr(value=[UtxoRef.parse(value)])
            except ValueError:
                pass
    elif type_ == Type.LIST:
        if isinstance(value, (list, tuple)):
            return ListExpr(items=[_infer(x, name) for x in value])
    else:
        return _infer(value, name)

    logger.debug(f"Argument {name} does not match declared type {type_}")
    raise InvalidArgumentError(value, name, type_)


def apply_args(tx: Tx, args: Mapping[str, Any]) -> Tx:
    """Substitute every parameter hole whose normalized name has a binding."""
    bindings = args if isinstance(args, ArgMap) else ArgMap(args)

    def bind(expr):
        if isinstance(expr, ParamExpr) and expr.name in bindings:
            return coerce_arg(bindings[expr.name], expr.type, expr.name)
        return expr

    return tx.map_expressions(lambda e: transform(e, bind))


def apply_inputs(tx: Tx, inputs: Mapping[str, Iterable[Utxo]]) -> Tx:
    """Replace every bound input-query hole with its candidate output set."""
    bindings = inputs if isinstance(inputs, ArgMap) else ArgMap(inputs)

    def bind(expr):
        if isinstance(expr, InputQueryExpr) and expr.name in bindings:
            candidates = bindings[expr.name]
            try:
                return UtxoSetExpr(value=list(candidates))
            except (TypeError, ValidationError) as e:
                logger.debug(f"Input {expr.name} is not a set of outputs: {e}")
                raise InvalidArgumentError(candidates, expr.name, Type.UTXO.value) from e
        return expr

    return tx.map_expressions(lambda e: transform(e, bind))


def apply_fees(tx: Tx, amount: int) -> Tx:
    """Replace every fee hole with ``amount``."""
    if isinstance(amount, bool) or not isinstance(amount, int) or amount < 0:
        raise InvalidArgumentError(amount, "fees", Type.INT.value)

    def bind(expr):
        if isinstance(expr, FeesExpr):
            return NumberExpr(value=amount)
        return expr

    return tx.map_expressions(lambda e: transform(e, bind))


def _asset_key(asset: AssetExpr) -> Tuple[str, str]:
    return asset.policy.model_dump_json(), asset.asset_name.model_dump_json()


def _combine_assets(left: AssetsExpr, right: AssetsExpr, sign: int) -> Optional[AssetsExpr]:
    totals: Dict[Tuple[str, str], List] = {}
    for asset, factor in [(a, 1) for a in left.value] + [(a, sign) for a in right.value]:
        if not isinstance(asset.amount, NumberExpr) or not is_resolved(asset.policy) \
                or not is_resolved(asset.asset_name):
            return None
        key = _asset_key(asset)
        if key in totals:
            totals[key][2] += factor * asset.amount.value
        else:
            totals[key] = [asset.policy, asset.asset_name, factor * asset.amount.value]

    return AssetsExpr(value=[
        AssetExpr(policy=policy, asset_name=name, amount=NumberExpr(value=amount))
        for policy, name, amount in totals.values()
    ])


def _reduce_binary(expr):
    left, right = expr.left, expr.right
    if not (is_resolved(left) and is_resolved(right)):
        return expr

    if isinstance(expr, (AddExpr, SubExpr)):
        sign = 1 if isinstance(expr, AddExpr) else -1
        if isinstance(left, NumberExpr) and isinstance(right, NumberExpr):
            return NumberExpr(value=left.value + sign * right.value)
        if isinstance(left, AssetsExpr) and isinstance(right, AssetsExpr):
            combined = _combine_assets(left, right, sign)
            return combined if combined is not None else expr
    elif isinstance(expr, ConcatExpr):
        if isinstance(left, BytesExpr) and isinstance(right, BytesExpr):
            return BytesExpr(value=left.value + right.value)
        if isinstance(left, StringExpr) and isinstance(right, StringExpr):
            return StringExpr(value=left.value + right.value)
        if isinstance(left, ListExpr) and isinstance(right, ListExpr):
            return ListExpr(items=left.items + right.items)

    raise InvalidBinaryOpError(expr.kind, left.kind, right.kind)


def _reduce_node(expr):
    if isinstance(expr, (AddExpr, SubExpr, ConcatExpr)):
        return _reduce_binary(expr)

    if isinstance(expr, NegateExpr):
        operand = expr.operand
        if not is_resolved(operand):
            return expr
        if isinstance(operand, NumberExpr):
            return NumberExpr(value=-operand.value)
        raise InvalidUnaryOpError("negate", operand.kind)

    if isinstance(expr, PropertyExpr):
        target = expr.target
        if isinstance(target, StructExpr):
            values = target.fields
        elif isinstance(target, ListExpr):
            values = target.items
        elif not is_resolved(target):
            return expr
        else:
            raise PropertyIndexNotFoundError(expr.index, target.kind)
        if not 0 <= expr.index < len(values):
            raise PropertyIndexNotFoundError(expr.index, target.kind)
        return values[expr.index]

    return expr


def reduce(tx: Tx) -> Tx:
    """
    Fold every sub-expression whose operands are fully bound.

    Operations over holes are kept as-is so a partially bound tree stays
    valid and can be reduced again after more bindings are supplied.
    """
    return tx.map_expressions(lambda e: transform(e, _reduce_node))


def find_params(tx: Tx) -> Dict[str, str]:
    """Return normalized name -> declared IR type for every parameter hole."""
    params: Dict[str, str] = {}
    for root in tx.expressions():
        for node in walk(root):
            if isinstance(node, ParamExpr):
                params.setdefault(normalize_key(node.name), node.type)
    return params


def find_queries(tx: Tx) -> Dict[str, InputQuery]:
    """Return name -> query for every unresolved input hole."""
    queries: Dict[str, InputQuery] = {}
    for root in tx.expressions():
        for node in walk(root):
            if isinstance(node, InputQueryExpr):
                queries.setdefault(normalize_key(node.name), node.query)
    return queries


class TirReducer:
    """Reducer backed by the functions of this module."""

    def apply_args(self, tx: Tx, args: Mapping[str, Any]) -> Tx:
        return apply_args(tx, args)

    def apply_inputs(self, tx: Tx, inputs: Mapping[str, Iterable[Utxo]]) -> Tx:
        return apply_inputs(tx, inputs)

    def apply_fees(self, tx: Tx, amount: int) -> Tx:
        return apply_fees(tx, amount)

    def reduce(self, tx: Tx) -> Tx:
        return reduce(tx)

    def find_params(self, tx: Tx) -> Dict[str, str]:
        return find_params(tx)

    def find_queries(self, tx: Tx) -> Dict[str, InputQuery]:
        return find_queries(tx)
