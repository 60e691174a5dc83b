"""
Loading of TII documents and creation of invocations.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from pydantic import ValidationError

from ..core import normalize_key
from ..tir.codec import decode_tx
from .exceptions import InvalidTiiError, TiiFileError, UnknownProfileError, UnknownTxError
from .invocation import Invocation, Reducer
from .params import ParamKind, ParamType, params_from_schema
from .spec import Profile, TiiFile, Transaction

logger = logging.getLogger(__name__)


class Protocol:
    """
    A protocol described by a TII document.

    Example:
        protocol = Protocol.from_file("transfer.tii.json")
        invocation = protocol.invoke("transfer", "preview")
        invocation.set_arg("quantity", 100_000_000)
    """

    def __init__(self, spec: TiiFile, reducer: Optional[Reducer] = None):
        self.spec = spec
        self.reducer = reducer

    @classmethod
    def from_json(cls, data: Dict[str, Any], reducer: Optional[Reducer] = None) -> "Protocol":
        """
        Raises:
            InvalidTiiError: If the document does not match the TII layout
        """
        try:
            spec = TiiFile.model_validate(data)
        except ValidationError as e:
            raise InvalidTiiError(f"invalid TII JSON: {str(e)}") from e
        return cls(spec, reducer=reducer)

    @classmethod
    def from_string(cls, code: str, reducer: Optional[Reducer] = None) -> "Protocol":
        """
        Raises:
            InvalidTiiError: If the text is not valid JSON or not a TII document
        """
        try:
            data = json.loads(code)
        except json.JSONDecodeError as e:
            raise InvalidTiiError(f"invalid TII JSON: {str(e)}") from e
        return cls.from_json(data, reducer=reducer)

    @classmethod
    def from_file(cls, path: Union[str, Path], reducer: Optional[Reducer] = None) -> "Protocol":
        """
        Raises:
            TiiFileError: If the file cannot be read
            InvalidTiiError: If the file is not a valid TII document
        """
        try:
            code = Path(path).read_text(encoding="utf-8")
        except OSError as e:
            raise TiiFileError(f"failed to read file: {str(e)}") from e
        logger.debug(f"Loaded TII document from {path}")
        return cls.from_string(code, reducer=reducer)

    @property
    def txs(self) -> Dict[str, Transaction]:
        return self.spec.transactions

    @property
    def profiles(self) -> Dict[str, Profile]:
        return self.spec.profiles

    def _ensure_tx(self, name: str) -> Transaction:
        tx = self.spec.transactions.get(name)
        if tx is None:
            raise UnknownTxError(name)
        return tx

    def _ensure_profile(self, name: str) -> Profile:
        profile = self.spec.profiles.get(name)
        if profile is None:
            raise UnknownProfileError(name)
        return profile

    def params_for(self, tx: str) -> Dict[str, ParamType]:
        """
        Declared parameters of a transaction: parties, environment, tx params.

        Raises:
            UnknownTxError: If the transaction is not declared
            InvalidParamsSchemaError: If a params schema is malformed
            InvalidParamTypeError: If a parameter type is not supported
        """
        transaction = self._ensure_tx(tx)
        components = self.spec.components.schemas

        params = {normalize_key(party): ParamType(ParamKind.ADDRESS) for party in self.spec.parties}
        if self.spec.environment is not None:
            params.update(params_from_schema(self.spec.environment, components))
        params.update(params_from_schema(transaction.params, components))
        return params

    def invoke(self, tx: str, profile: Optional[str] = None) -> Invocation:
        """
        Start an invocation of ``tx``.

        Party addresses and environment values of ``profile`` are bound as
        initial arguments; arguments set later on the invocation override them.

        Raises:
            UnknownTxError: If the transaction is not declared
            UnknownProfileError: If the profile is not declared
            TiiError: If the declared schemas are invalid
            TirError: If the transaction template cannot be decoded
        """
        transaction = self._ensure_tx(tx)
        selected = self._ensure_profile(profile) if profile is not None else None
        params = self.params_for(tx)
        prototype = decode_tx(transaction.tir)

        defaults: Dict[str, Any] = {}
        if selected is not None:
            defaults.update({normalize_key(k): v for k, v in selected.parties.items()})
            defaults.update({normalize_key(k): v for k, v in selected.environment.items()})

        logger.debug(f"Invoking {tx} with profile {profile}, {len(params)} declared params")
        return Invocation(prototype, params=params, args=defaults, reducer=self.reducer)
