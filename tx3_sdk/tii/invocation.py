"""
Invocation of a transaction template.

An ``Invocation`` accumulates argument, input and fee bindings for a single
transaction prototype and lazily runs the reduction pipeline when the caller
asks what is still missing or requests the resolved tree.
"""
import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol, Tuple

from ..core import ArgMap, BytesEncoding, TirEnvelope, normalize_key
from ..tir.codec import decode_tx, encode_tx
from ..tir.exceptions import ApplyError
from ..tir.model import InputQuery, Tx, Utxo, _Node
from ..tir.reducer import TirReducer
from .exceptions import ReduceError
from .params import ParamType


class Reducer(Protocol):
    """
    Protocol for reducer implementations.

    Every method is pure: it returns a new tree and never modifies its input.
    Rejections must be raised as ``ApplyError`` subclasses.
    """

    def apply_args(self, tx: Tx, args: Mapping[str, Any]) -> Tx:
        ...

    def apply_inputs(self, tx: Tx, inputs: Mapping[str, Iterable[Utxo]]) -> Tx:
        ...

    def apply_fees(self, tx: Tx, amount: int) -> Tx:
        ...

    def reduce(self, tx: Tx) -> Tx:
        ...

    def find_params(self, tx: Tx) -> Dict[str, str]:
        ...

    def find_queries(self, tx: Tx) -> Dict[str, InputQuery]:
        ...


def _arg_to_json(value: Any) -> Any:
    if isinstance(value, _Node):
        return value.model_dump(mode="json")
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    return value


class Invocation:
    """
    Stateful builder for a single transaction.

    The invocation is either a draft (no cached result) or finalized (the
    cached result of running apply_args, apply_inputs, apply_fees and reduce
    over the prototype with the current bindings). Every mutation drops the
    cached result; every read that needs it recomputes it at most once.

    Instances are not thread-safe. Callers sharing one invocation across
    threads must serialize access themselves, e.g. one invocation per session
    behind a lock.
    """

    def __init__(
        self,
        prototype: Tx,
        params: Optional[Mapping[str, ParamType]] = None,
        args: Optional[Mapping[str, Any]] = None,
        reducer: Optional[Reducer] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the invocation

        Args:
            prototype: Transaction template; it is never modified
            params: Declared parameters (name -> type)
            args: Initial argument bindings, e.g. profile defaults
            reducer: Reducer implementation (defaults to the in-process TirReducer)
            logger: Optional logger instance to use for debug logging
        """
        self._prototype = prototype
        self._params: Dict[str, ParamType] = {
            normalize_key(name): type_ for name, type_ in (params or {}).items()
        }
        self._args = ArgMap(args)
        self._inputs = ArgMap()
        self._fee: Optional[int] = None
        self._finalized: Optional[Tx] = None
        self.reducer = reducer or TirReducer()
        self.logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_envelope(cls, envelope: TirEnvelope, **kwargs: Any) -> "Invocation":
        """
        Build an invocation from an encoded prototype.

        Raises:
            UnsupportedTirVersionError: If the envelope version is not supported
            DecodingError: If the envelope content is malformed
            InvalidTirBytesError: If the bytes are not a valid IR document
        """
        return cls(decode_tx(envelope), **kwargs)

    @property
    def prototype(self) -> Tx:
        return self._prototype

    @property
    def is_finalized(self) -> bool:
        return self._finalized is not None

    @property
    def args(self) -> Mapping[str, Any]:
        """Read-only view of the argument bindings."""
        return MappingProxyType(self._args.to_dict())

    @property
    def inputs(self) -> Mapping[str, Tuple[Utxo, ...]]:
        """Read-only view of the input bindings."""
        return MappingProxyType(self._inputs.to_dict())

    @property
    def fee(self) -> Optional[int]:
        return self._fee

    def params(self) -> Dict[str, ParamType]:
        """All declared parameters, bound or not."""
        return dict(self._params)

    def unspecified_params(self) -> Dict[str, ParamType]:
        """Declared parameters that have no argument binding yet."""
        return {name: type_ for name, type_ in self._params.items() if name not in self._args}

    def _invalidate(self) -> None:
        if self._finalized is not None:
            self.logger.debug("Bindings changed, dropping finalized transaction")
            self._finalized = None

    def set_arg(self, name: str, value: Any) -> None:
        self._args[name] = value
        self._invalidate()

    def set_args(self, args: Mapping[str, Any]) -> None:
        self._args.update(args)
        self._invalidate()

    def set_input(self, name: str, utxos: Iterable[Utxo]) -> None:
        """Resolve the input query ``name`` against exactly this candidate set."""
        self._inputs[name] = tuple(utxos)
        self._invalidate()

    def set_fee(self, amount: int) -> None:
        self._fee = amount
        self._invalidate()

    def with_arg(self, name: str, value: Any) -> "Invocation":
        self.set_arg(name, value)
        return self

    def with_args(self, args: Mapping[str, Any]) -> "Invocation":
        self.set_args(args)
        return self

    def with_input(self, name: str, utxos: Iterable[Utxo]) -> "Invocation":
        self.set_input(name, utxos)
        return self

    def with_fee(self, amount: int) -> "Invocation":
        self.set_fee(amount)
        return self

    def _run_pipeline(self) -> Tx:
        stages = [
            ("apply_args", lambda tx: self.reducer.apply_args(tx, self._args.copy())),
            ("apply_inputs", lambda tx: self.reducer.apply_inputs(tx, self._inputs.copy())),
        ]
        if self._fee is not None:
            stages.append(("apply_fees", lambda tx: self.reducer.apply_fees(tx, self._fee)))
        stages.append(("reduce", self.reducer.reduce))

        tx = self._prototype
        for stage, run in stages:
            try:
                tx = run(tx)
            except ApplyError as e:
                self.logger.debug(f"Reducer rejected invocation at {stage}: {e}")
                raise ReduceError(e, stage) from e
        return tx

    def ensure_finalized(self) -> Tx:
        """
        Return the reduced transaction, running the pipeline if needed.

        Raises:
            ReduceError: If the reducer rejects the current bindings
        """
        if self._finalized is None:
            self.logger.debug(f"Finalizing invocation with args {sorted(self._args)}")
            self._finalized = self._run_pipeline()
        return self._finalized

    def define_params(self) -> Dict[str, ParamType]:
        """
        Parameters still unbound after finalization.

        Declared types are preferred over the types recorded in the IR.
        """
        tx = self.ensure_finalized()
        return {
            name: self._params.get(name) or ParamType.from_ir_type(type_name)
            for name, type_name in self.reducer.find_params(tx).items()
        }

    def define_queries(self) -> Dict[str, InputQuery]:
        """Input queries still unresolved after finalization."""
        return dict(self.reducer.find_queries(self.ensure_finalized()))

    def into_resolved_tir(self) -> Tx:
        """
        Return the reduced (possibly still partially symbolic) transaction.

        Raises:
            ReduceError: If the reducer rejects the current bindings
        """
        return self.ensure_finalized()

    def into_resolve_request(self, encoding: BytesEncoding = BytesEncoding.HEX) -> "ResolveParams":
        """
        Build the parameters of a ``trp.resolve`` call.

        Profile defaults are already part of the argument bindings, so no
        separate environment is sent.
        """
        from ..trp.spec import ResolveParams

        tir = encode_tx(self.into_resolved_tir(), encoding=encoding)
        args = {name: _arg_to_json(value) for name, value in self._args.items()}
        return ResolveParams(tir=tir, args=args, env=None)
