"""
Core types shared by the TII and TRP modules.

Envelopes carry opaque bytes across process and network boundaries. The
``ArgMap`` keeps argument bindings keyed by normalized (lower-cased) names.
"""
import base64
import binascii
import re
from collections.abc import MutableMapping
from enum import Enum
from typing import Any, Dict, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict


class DecodingError(ValueError):
    """Raised when envelope content is not valid under its declared encoding."""
    pass


class BytesEncoding(str, Enum):
    """Text encodings accepted for envelope content."""
    BASE64 = "base64"
    HEX = "hex"


_HEX_RE = re.compile(r"^[0-9a-fA-F]*\Z")


def _encode(data: bytes, encoding: BytesEncoding) -> str:
    if encoding == BytesEncoding.HEX:
        return data.hex()
    return base64.b64encode(data).decode("ascii")


def _decode(content: str, encoding: BytesEncoding) -> bytes:
    try:
        if encoding == BytesEncoding.HEX:
            if not _HEX_RE.match(content):
                raise ValueError("non-hexadecimal character in content")
            return bytes.fromhex(content)
        return base64.b64decode(content, validate=True)
    except (ValueError, binascii.Error) as e:
        raise DecodingError(f"Invalid {encoding.value} content: {str(e)}") from e


class BytesEnvelope(BaseModel):
    """Encoded byte payload (transactions, keys, signatures)."""
    model_config = ConfigDict(frozen=True)

    content: str
    encoding: BytesEncoding

    @classmethod
    def encode(cls, data: bytes, encoding: BytesEncoding = BytesEncoding.HEX) -> "BytesEnvelope":
        return cls(content=_encode(data, encoding), encoding=encoding)

    @classmethod
    def from_hex(cls, content: str) -> "BytesEnvelope":
        return cls(content=content, encoding=BytesEncoding.HEX)

    @classmethod
    def from_base64(cls, content: str) -> "BytesEnvelope":
        return cls(content=content, encoding=BytesEncoding.BASE64)

    def decode(self) -> bytes:
        """
        Decode the envelope content.

        Returns:
            The raw bytes

        Raises:
            DecodingError: If content is not valid under the declared encoding
        """
        return _decode(self.content, self.encoding)


class TirEnvelope(BaseModel):
    """
    Encoded transaction IR tagged with the IR format version.

    The version is carried as-is; callers must reject versions they do not
    understand before using the decoded bytes.
    """
    model_config = ConfigDict(frozen=True)

    content: str
    encoding: BytesEncoding
    version: str

    @classmethod
    def encode(
        cls,
        data: bytes,
        version: str,
        encoding: BytesEncoding = BytesEncoding.HEX
    ) -> "TirEnvelope":
        return cls(content=_encode(data, encoding), encoding=encoding, version=version)

    def decode(self) -> bytes:
        """Decode the IR bytes, raising DecodingError on malformed content."""
        return _decode(self.content, self.encoding)


def normalize_key(name: str) -> str:
    """Normalize a parameter name for lookups."""
    return name.lower()


class ArgMap(MutableMapping):
    """
    Mapping with case-insensitive keys.

    Keys are lower-cased on insertion and on lookup, so ``"Sender"`` and
    ``"sender"`` address the same entry and the last write wins.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None, **kwargs: Any):
        self._data: Dict[str, Any] = {}
        if values:
            self.update(values)
        if kwargs:
            self.update(kwargs)

    def __getitem__(self, key: str) -> Any:
        return self._data[normalize_key(key)]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[normalize_key(key)] = value

    def __delitem__(self, key: str) -> None:
        del self._data[normalize_key(key)]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and normalize_key(key) in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"ArgMap({self._data!r})"

    def copy(self) -> "ArgMap":
        return ArgMap(self._data)

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)
