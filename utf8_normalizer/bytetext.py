from __future__ import annotations

from typing import Optional, Union

from .rules import TARGET_ENCODING


class ByteText:
    """
    A mutable byte buffer tagged with the encoding it claims to be in.

    `validated` is only ever set by the normalizer, once the buffer is known
    to be well-formed UTF-8. Validated values are never checked again.
    """

    __slots__ = ("data", "encoding", "validated")

    def __init__(
        self,
        data: Union[bytes, bytearray, memoryview] = b"",
        encoding: Optional[str] = None,
        *,
        validated: bool = False,
    ) -> None:
        self.data = bytearray(data)
        self.encoding = encoding
        self.validated = validated

    @classmethod
    def utf8(cls, data: Union[bytes, bytearray]) -> "ByteText":
        return cls(data, TARGET_ENCODING, validated=True)

    def replace(self, data: Union[bytes, bytearray]) -> None:
        """Overwrite the buffer contents, keeping this object's storage."""
        self.data[:] = data

    def mark_utf8(self) -> None:
        self.encoding = TARGET_ENCODING
        self.validated = True

    def decode(self, errors: str = "strict") -> str:
        return bytes(self.data).decode(self.encoding or TARGET_ENCODING, errors)

    def __bytes__(self) -> bytes:
        return bytes(self.data)

    def __str__(self) -> str:
        return self.decode(errors="backslashreplace")

    def __len__(self) -> int:
        return len(self.data)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, ByteText):
            return self.data == other.data
        if isinstance(other, (bytes, bytearray)):
            return self.data == other
        if isinstance(other, str):
            try:
                return self.decode() == other
            except (UnicodeDecodeError, LookupError):
                return False
        return NotImplemented

    __hash__ = None  # mutable

    def __repr__(self) -> str:
        flag = ", validated=True" if self.validated else ""
        return f"ByteText({bytes(self.data)!r}, {self.encoding!r}{flag})"
