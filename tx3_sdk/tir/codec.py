"""
Serialization of transaction IR to and from versioned envelopes.

IR documents are UTF-8 JSON. The envelope version must match
``TIR_VERSION`` exactly; other versions are rejected before decoding.
"""
import json
import logging

from pydantic import ValidationError

from ..core import BytesEncoding, TirEnvelope
from .exceptions import InvalidTirBytesError, UnsupportedTirVersionError
from .model import Tx

logger = logging.getLogger(__name__)

TIR_VERSION = "v1beta0"


def to_bytes(tx: Tx) -> bytes:
    """Serialize a transaction tree to IR bytes."""
    return json.dumps(tx.model_dump(mode="json"), separators=(",", ":"), sort_keys=True).encode("utf-8")


def from_bytes(data: bytes) -> Tx:
    """
    Parse IR bytes into a transaction tree.

    Raises:
        InvalidTirBytesError: If the bytes are not a valid IR document
    """
    try:
        return Tx.model_validate(json.loads(data.decode("utf-8")))
    except (UnicodeDecodeError, ValueError, ValidationError) as e:
        raise InvalidTirBytesError(f"Failed to decode IR bytes: {str(e)}") from e


def encode_tx(tx: Tx, encoding: BytesEncoding = BytesEncoding.HEX) -> TirEnvelope:
    """Wrap a transaction tree in an envelope tagged with ``TIR_VERSION``."""
    return TirEnvelope.encode(to_bytes(tx), version=TIR_VERSION, encoding=encoding)


def ensure_supported_version(envelope: TirEnvelope) -> None:
    """
    Raises:
        UnsupportedTirVersionError: If the envelope version is not ``TIR_VERSION``
    """
    if envelope.version != TIR_VERSION:
        logger.debug(f"Rejecting TIR envelope with version {envelope.version}")
        raise UnsupportedTirVersionError(provided=envelope.version, expected=TIR_VERSION)


def decode_tx(envelope: TirEnvelope) -> Tx:
    """
    Decode the transaction tree carried by an envelope.

    Raises:
        UnsupportedTirVersionError: If the envelope version is not supported
        DecodingError: If the content is not valid under its encoding
        InvalidTirBytesError: If the decoded bytes are not a valid IR document
    """
    ensure_supported_version(envelope)
    return from_bytes(envelope.decode())
