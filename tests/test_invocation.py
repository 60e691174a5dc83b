"""
Tests for the Invocation state machine.
"""
from unittest.mock import MagicMock

import pytest
from hypothesis import given, settings, strategies as st

from tx3_sdk.core import BytesEncoding
from tx3_sdk.tii import Invocation, ParamKind, ParamType, Protocol, ReduceError
from tx3_sdk.tir import (
    TIR_VERSION, AddExpr, AddressExpr, AssetExpr, InvalidArgumentError, InvalidBinaryOpError,
    NumberExpr, ParamExpr, StringExpr, Tx, TxOutput, TirReducer, Utxo, UtxoRef, decode_tx
)
from tx3_sdk.tir.reducer import is_resolved
from tx3_sdk.trp import ResolveParams

from conftest import FIXTURES, MIDDLEMAN, RECEIVER, SENDER

UTXO = Utxo(ref=UtxoRef(txid="cd" * 32, index=1), address=SENDER, assets=[AssetExpr.native(20_000_000)])

BINDINGS = [
    ("arg", "sender", SENDER),
    ("arg", "receiver", RECEIVER),
    ("arg", "middleman", MIDDLEMAN),
    ("arg", "quantity", 10_000_000),
    ("input", "source", [UTXO]),
    ("fee", None, 200_000),
]


def _fresh_invocation():
    return Protocol.from_file(FIXTURES / "transfer.tii.json").invoke("transfer", "preview")


def _bind(invocation, op):
    kind, name, value = op
    if kind == "arg":
        invocation.set_arg(name, value)
    elif kind == "input":
        invocation.set_input(name, value)
    else:
        invocation.set_fee(value)


@settings(max_examples=30, deadline=None)
@given(ops=st.permutations(BINDINGS), split=st.integers(min_value=0, max_value=len(BINDINGS)))
def test_incremental_binding_matches_replay(ops, split):
    """Finalizing midway and binding more gives the same tree as binding everything first"""
    incremental = _fresh_invocation()
    for op in ops[:split]:
        _bind(incremental, op)
    incremental.ensure_finalized()
    for op in ops[split:]:
        _bind(incremental, op)

    replay = _fresh_invocation()
    for op in BINDINGS:
        _bind(replay, op)

    assert incremental.into_resolved_tir() == replay.into_resolved_tir()


def test_fully_bound_transfer_is_resolved():
    invocation = _fresh_invocation()
    for op in BINDINGS:
        _bind(invocation, op)

    tx = invocation.into_resolved_tir()
    assert invocation.define_params() == {}
    assert invocation.define_queries() == {}
    assert tx.fees == NumberExpr(value=200_000)
    assert all(is_resolved(expr) for expr in tx.expressions())


class TestCaseInsensitivity:
    """Argument names are case-insensitive."""

    def test_last_write_wins(self, transfer_invocation):
        transfer_invocation.set_arg("Sender", "addr_a")
        transfer_invocation.set_arg("SENDER", "addr_b")
        assert transfer_invocation.args["sender"] == "addr_b"
        assert "sender" not in transfer_invocation.define_params()

    def test_mixed_case_satisfies_declared_param(self, transfer_invocation):
        transfer_invocation.set_args({"ReCeIvEr": RECEIVER, "QUANTITY": 5})
        assert set(transfer_invocation.unspecified_params()) == {"sender", "middleman"}


class TestFinalize:
    """Pipeline caching."""

    @pytest.fixture
    def spy_invocation(self, protocol):
        spy = MagicMock(wraps=TirReducer())
        invocation = protocol.invoke("transfer", "preview")
        invocation.reducer = spy
        return invocation, spy

    def test_pipeline_runs_once_between_mutations(self, spy_invocation):
        invocation, spy = spy_invocation
        first = invocation.define_params()
        second = invocation.define_params()
        invocation.define_queries()
        invocation.into_resolved_tir()

        assert first == second
        assert spy.apply_args.call_count == 1
        assert spy.reduce.call_count == 1

    def test_mutation_drops_cache(self, spy_invocation):
        invocation, spy = spy_invocation
        invocation.ensure_finalized()
        assert invocation.is_finalized

        invocation.set_arg("quantity", 1)
        assert not invocation.is_finalized

        invocation.ensure_finalized()
        assert spy.reduce.call_count == 2

    def test_fee_stage_only_runs_when_fee_set(self, spy_invocation):
        invocation, spy = spy_invocation
        invocation.ensure_finalized()
        spy.apply_fees.assert_not_called()

        invocation.set_fee(1)
        invocation.ensure_finalized()
        spy.apply_fees.assert_called_once()

    def test_stage_order(self, spy_invocation):
        invocation, spy = spy_invocation
        invocation.set_fee(1)
        invocation.ensure_finalized()
        called = [name for name, _args, _kwargs in spy.method_calls]
        assert called == ["apply_args", "apply_inputs", "apply_fees", "reduce"]

    def test_prototype_is_never_modified(self, transfer_invocation):
        before = transfer_invocation.prototype
        for op in BINDINGS:
            _bind(transfer_invocation, op)
        transfer_invocation.ensure_finalized()
        assert transfer_invocation.prototype is before
        assert "receiver" in TirReducer().find_params(before)


class TestReduceError:
    """Reducer rejections surface as ReduceError."""

    def test_invalid_argument(self, transfer_invocation):
        transfer_invocation.set_arg("quantity", "lots")
        with pytest.raises(ReduceError) as exc_info:
            transfer_invocation.define_params()

        error = exc_info.value
        assert error.stage == "apply_args"
        assert isinstance(error.cause, InvalidArgumentError)
        assert error.__cause__ is error.cause
        assert not transfer_invocation.is_finalized

    def test_reduce_stage(self):
        prototype = Tx(outputs=[TxOutput(
            address=AddressExpr(value="addr"),
            amount=AddExpr(left=NumberExpr(value=1), right=StringExpr(value="x")),
        )])
        with pytest.raises(ReduceError, match="reduce failed") as exc_info:
            Invocation(prototype).into_resolved_tir()
        assert isinstance(exc_info.value.cause, InvalidBinaryOpError)

    def test_recovers_after_fixing_binding(self, transfer_invocation):
        transfer_invocation.set_arg("quantity", "lots")
        with pytest.raises(ReduceError):
            transfer_invocation.ensure_finalized()
        transfer_invocation.set_arg("quantity", 5)
        assert "quantity" not in transfer_invocation.define_params()

    @pytest.mark.parametrize("candidates", [["not-a-utxo"], [UTXO, 42], [{"ref": "cd#1"}]])
    def test_input_that_is_not_an_output(self, transfer_invocation, candidates):
        transfer_invocation.set_input("source", candidates)
        with pytest.raises(ReduceError) as exc_info:
            transfer_invocation.into_resolved_tir()

        error = exc_info.value
        assert error.stage == "apply_inputs"
        assert isinstance(error.cause, InvalidArgumentError)
        assert error.cause.name == "source"
        assert error.cause.expected == "Utxo"
        assert not transfer_invocation.is_finalized

    def test_negative_fee(self, transfer_invocation):
        transfer_invocation.set_fee(-1)
        with pytest.raises(ReduceError) as exc_info:
            transfer_invocation.ensure_finalized()
        assert exc_info.value.stage == "apply_fees"


class TestQueries:
    """Input query discovery."""

    def test_unbound_query_is_reported(self, transfer_invocation):
        queries = transfer_invocation.define_queries()
        assert list(queries) == ["source"]
        assert queries["source"].address == ParamExpr(name="sender", type="Address")

    def test_query_address_reflects_bound_args(self, transfer_invocation):
        transfer_invocation.set_arg("sender", SENDER)
        assert transfer_invocation.define_queries()["source"].address == AddressExpr(value=SENDER)

    def test_binding_input_removes_query(self, transfer_invocation):
        transfer_invocation.set_input("source", [UTXO])
        assert transfer_invocation.define_queries() == {}
        assert transfer_invocation.inputs["source"] == (UTXO,)


class TestBindingsView:
    """Read-only views and builder methods."""

    def test_args_are_read_only(self, transfer_invocation):
        with pytest.raises(TypeError):
            transfer_invocation.args["quantity"] = 1

    def test_profile_defaults_seed_args(self, transfer_invocation):
        assert dict(transfer_invocation.args) == {"tax": 1_000_000}

    def test_explicit_args_override_profile(self, transfer_invocation):
        transfer_invocation.set_arg("tax", 5)
        assert transfer_invocation.args["tax"] == 5

    def test_with_methods_chain(self, transfer_invocation):
        result = (
            transfer_invocation
            .with_arg("sender", SENDER)
            .with_args({"receiver": RECEIVER})
            .with_input("source", [UTXO])
            .with_fee(10)
        )
        assert result is transfer_invocation
        assert transfer_invocation.fee == 10

    def test_params_without_declarations(self):
        prototype = Tx(outputs=[TxOutput(address=AddressExpr(value="a"), amount=ParamExpr(name="n", type="Int"))])
        invocation = Invocation(prototype)
        assert invocation.params() == {}
        assert invocation.define_params() == {"n": ParamType(ParamKind.INTEGER)}


class TestResolveRequest:
    """Building trp.resolve parameters."""

    def test_request_carries_reduced_tir_and_args(self, transfer_invocation):
        transfer_invocation.set_args({"sender": SENDER, "quantity": 10})
        request = transfer_invocation.into_resolve_request()

        assert isinstance(request, ResolveParams)
        assert request.env is None
        assert request.args == {"tax": 1_000_000, "sender": SENDER, "quantity": 10}
        assert request.tir.version == TIR_VERSION
        assert request.tir.encoding == BytesEncoding.HEX
        assert decode_tx(request.tir) == transfer_invocation.into_resolved_tir()

    def test_base64_encoding(self, transfer_invocation):
        request = transfer_invocation.into_resolve_request(encoding=BytesEncoding.BASE64)
        assert request.tir.encoding == BytesEncoding.BASE64

    def test_expression_args_are_serialized(self, transfer_invocation):
        transfer_invocation.set_arg("quantity", NumberExpr(value=3))
        request = transfer_invocation.into_resolve_request()
        assert request.args["quantity"] == {"kind": "number", "value": 3}
