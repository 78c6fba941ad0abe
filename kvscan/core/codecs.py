"""
Key and value encodings

Stores hand back raw bytes. A codec turns those bytes into something that can
be filtered and printed, and turns user-typed bound strings back into bytes.
"""

import base64
import binascii
import json
from typing import Any

DEFAULT_ENCODING = "utf8"


class Codec:
    """Base class for all codecs"""

    name = ""

    def decode(self, data: bytes) -> Any:
        """
        Decode raw bytes from the store

        Raises:
            ValueError: If the bytes are not valid for this encoding
        """
        raise NotImplementedError("Codecs must implement decode()")

    def encode(self, text: str) -> bytes:
        """
        Encode a user-supplied string (e.g. a bound) into raw bytes

        Raises:
            ValueError: If the string is not valid for this encoding
        """
        raise NotImplementedError("Codecs must implement encode()")

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.name})"


class TextCodec(Codec):
    """Plain text in one of Python's built-in character sets"""

    def __init__(self, name: str, charset: str):
        self.name = name
        self.charset = charset

    def decode(self, data: bytes) -> str:
        return data.decode(self.charset)

    def encode(self, text: str) -> bytes:
        return text.encode(self.charset)


class HexCodec(Codec):
    name = "hex"

    def decode(self, data: bytes) -> str:
        return data.hex()

    def encode(self, text: str) -> bytes:
        return bytes.fromhex(text)


class Base64Codec(Codec):
    name = "base64"

    def decode(self, data: bytes) -> str:
        return base64.b64encode(data).decode("ascii")

    def encode(self, text: str) -> bytes:
        try:
            return base64.b64decode(text, validate=True)
        except binascii.Error as e:
            raise ValueError(str(e)) from e


class JSONCodec(Codec):
    """
    JSON documents stored as UTF-8 text

    Bounds are compared against the stored bytes, so they are taken verbatim
    rather than re-serialised.
    """

    name = "json"

    def decode(self, data: bytes) -> Any:
        return json.loads(data.decode("utf-8"))

    def encode(self, text: str) -> bytes:
        return text.encode("utf-8")


_CODECS: dict[str, Codec] = {
    "utf8": TextCodec("utf8", "utf-8"),
    "ascii": TextCodec("ascii", "ascii"),
    "latin1": TextCodec("latin1", "latin-1"),
    "hex": HexCodec(),
    "base64": Base64Codec(),
    "json": JSONCodec(),
}

_ALIASES = {
    "utf-8": "utf8",
    "utf": "utf8",
    "latin-1": "latin1",
    "binary": "hex",
}


def available_encodings() -> list[str]:
    """Names accepted by get_codec(), aliases excluded"""
    return list(_CODECS)


def get_codec(name: str) -> Codec:
    """
    Get codec by name

    Args:
        name: Encoding name (case-insensitive, aliases allowed)

    Returns:
        Codec instance

    Raises:
        ValueError: If the encoding is unknown
    """
    key = name.strip().lower()
    key = _ALIASES.get(key, key)

    if key not in _CODECS:
        available = ", ".join(_CODECS)
        raise ValueError(f"Unknown encoding: {name}. Available encodings: {available}")

    return _CODECS[key]


def to_text(value: Any) -> str:
    """
    Textual form of a decoded field, used for regex matching

    Strings are used as is, bytes are decoded leniently and anything else
    (JSON-decoded values) is serialised back to canonical JSON.
    """
    if isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return json.dumps(value, sort_keys=True)
