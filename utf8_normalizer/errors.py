from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class CoercionFailure:
    data: bytes
    tried: Tuple[str, ...]

    def describe(self) -> str:
        tried = ", ".join(self.tried) or "none"
        return f"unable to coerce {len(self.data)} bytes to UTF-8 (tried: {tried})"


class UTF8CoercionError(UnicodeError):
    """Raised when no candidate encoding decodes the whole input."""

    def __init__(self, failure: CoercionFailure):
        super().__init__(failure.describe())
        self.failure = failure

    @property
    def data(self) -> bytes:
        return self.failure.data

    @property
    def tried(self) -> Tuple[str, ...]:
        return self.failure.tried
