"""
One-line human readable rendering of diagnostics and IR expressions.

Every function here is a pure function of its argument.
"""
from typing import Any

from ..tir.model import (
    AddExpr, AddressExpr, AssetExpr, AssetsExpr, BoolExpr, BytesExpr, ConcatExpr,
    FeesExpr, InputQuery, InputQueryExpr, ListExpr, NegateExpr, NoneExpr, NumberExpr,
    ParamExpr, PropertyExpr, StringExpr, StructExpr, SubExpr, UtxoRefsExpr, UtxoSetExpr
)
from .spec import (
    InputNotResolvedDiagnostic, InputQueryDiagnostic, MissingTxArgDiagnostic,
    SearchSpaceDiagnostic, TxScriptFailureDiagnostic, UnsupportedTirDiagnostic
)


def pretty_asset(asset: AssetExpr) -> str:
    if isinstance(asset.policy, NoneExpr):
        return f"lovelace = {pretty_expression(asset.amount)}"
    return (
        f"{pretty_expression(asset.policy)}.{pretty_expression(asset.asset_name)}"
        f" = {pretty_expression(asset.amount)}"
    )


def pretty_query(query: InputQuery) -> str:
    flags = [name for name, on in (("many", query.many), ("collateral", query.collateral)) if on]
    suffix = f" [{', '.join(flags)}]" if flags else ""
    return (
        f"query(addr: {pretty_expression(query.address)}, "
        f"min: {pretty_expression(query.min_amount)}, "
        f"ref: {pretty_expression(query.ref)}{suffix})"
    )


def pretty_expression(expr: Any) -> str:
    """Render an IR expression."""
    if isinstance(expr, NoneExpr):
        return "none"
    if isinstance(expr, (NumberExpr, BytesExpr, StringExpr, AddressExpr)):
        return str(expr.value)
    if isinstance(expr, BoolExpr):
        return "true" if expr.value else "false"
    if isinstance(expr, UtxoRefsExpr):
        return ", ".join(str(r) for r in expr.value)
    if isinstance(expr, ListExpr):
        return f"[{', '.join(pretty_expression(x) for x in expr.items)}]"
    if isinstance(expr, StructExpr):
        return f"struct_{expr.constructor} {{ {', '.join(pretty_expression(x) for x in expr.fields)} }}"
    if isinstance(expr, AssetsExpr):
        return f"assets[{', '.join(pretty_asset(a) for a in expr.value)}]"
    if isinstance(expr, UtxoSetExpr):
        return f"utxo_set({len(expr.value)} items)"
    if isinstance(expr, ParamExpr):
        return f"expect_value({expr.name}: {expr.type})"
    if isinstance(expr, InputQueryExpr):
        return f"expect_input({expr.name}: {pretty_query(expr.query)})"
    if isinstance(expr, FeesExpr):
        return "expect_fees"
    if isinstance(expr, AddExpr):
        return f"{pretty_expression(expr.left)} + {pretty_expression(expr.right)}"
    if isinstance(expr, SubExpr):
        return f"{pretty_expression(expr.left)} - {pretty_expression(expr.right)}"
    if isinstance(expr, ConcatExpr):
        return f"{pretty_expression(expr.left)} ++ {pretty_expression(expr.right)}"
    if isinstance(expr, NegateExpr):
        return f"-{pretty_expression(expr.operand)}"
    if isinstance(expr, PropertyExpr):
        return f"{pretty_expression(expr.target)}.{expr.index}"
    return repr(expr)


def pretty_query_diagnostic(query: InputQueryDiagnostic) -> str:
    parts = [f"addr: {query.address or 'any'}"]
    if query.min_amount:
        parts.append("min: " + ", ".join(f"{k} = {v}" for k, v in sorted(query.min_amount.items())))
    if query.refs:
        parts.append("refs: " + ", ".join(query.refs))
    if query.support_many:
        parts.append("many")
    if query.collateral:
        parts.append("collateral")
    return f"query({'; '.join(parts)})"


def pretty_search_space(space: SearchSpaceDiagnostic) -> str:
    counts = [
        f"{label}: {value}"
        for label, value in (
            ("by address", space.by_address_count),
            ("by asset class", space.by_asset_class_count),
            ("by ref", space.by_ref_count),
        )
        if value is not None
    ]
    summary = f"{len(space.matched)} matched"
    return f"{summary} ({', '.join(counts)})" if counts else summary


def render_diagnostic(diagnostic: Any) -> str:
    """Render a TRP diagnostic payload as a one-line message."""
    if isinstance(diagnostic, UnsupportedTirDiagnostic):
        return f"TIR version {diagnostic.provided} is not supported, expected {diagnostic.expected}"
    if isinstance(diagnostic, MissingTxArgDiagnostic):
        return f"missing argument `{diagnostic.key}` of type {diagnostic.type_}"
    if isinstance(diagnostic, InputNotResolvedDiagnostic):
        return (
            f"input `{diagnostic.name}` not resolved: "
            f"{pretty_query_diagnostic(diagnostic.query)}, "
            f"search space {pretty_search_space(diagnostic.search_space)}"
        )
    if isinstance(diagnostic, TxScriptFailureDiagnostic):
        if not diagnostic.logs:
            return "tx script returned failure"
        return f"tx script returned failure: {' | '.join(diagnostic.logs)}"
    raise TypeError(f"Not a TRP diagnostic: {type(diagnostic).__name__}")
