"""
Core UTF-8 normalization logic lives here.

Responsibilities:
- byte-order-mark detection
- candidate encoding chain (preferred, then rules.DEFAULT_ENCODINGS)
- strict whole-buffer transcoding to UTF-8
- lossy transcoding that escapes each undecodable byte as 0xHH

Every public operation comes in two forms. The plain form (ensure_utf8,
coerce_utf8) never touches its argument and always returns a new ByteText.
The _inplace form hands back the caller's own object whenever the bytes do
not change, and rewrites mutable buffers in place when they do.
"""

from __future__ import annotations

import base64
import codecs
import hashlib
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

from charset_normalizer import from_bytes

from .bytetext import ByteText
from .errors import CoercionFailure, UTF8CoercionError
from .rules import (
    BYTE_ORDER_MARKS,
    DEFAULT_ENCODINGS,
    ESCAPE_ERROR_HANDLER,
    ESCAPE_TOKEN,
    TARGET_ENCODING,
)

logger = logging.getLogger(__name__)

Textual = Union[ByteText, bytes, bytearray, str]


def _hexescape(exc: UnicodeError) -> Tuple[str, int]:
    if isinstance(exc, UnicodeDecodeError):
        bad = exc.object[exc.start:exc.end]
    elif isinstance(exc, UnicodeEncodeError):
        # lone surrogates: escape the bytes they would have encoded to
        bad = exc.object[exc.start:exc.end].encode("utf-8", "surrogatepass")
    else:
        raise exc
    return "".join(ESCAPE_TOKEN.format(byte) for byte in bad), exc.end


codecs.register_error(ESCAPE_ERROR_HANDLER, _hexescape)


@dataclass(frozen=True)
class CoercionResult:
    """
    Outcome of one transcoding attempt.

    `data` holds the UTF-8 bytes, or None when strict transcoding failed.
    `encoding` is the source encoding that was used (or the BOM encoding
    that was rejected). A lossy result keeps the strict `failure` that
    forced it.
    """

    data: Optional[bytes] = None
    encoding: Optional[str] = None
    bom: bool = False
    lossy: bool = False
    failure: Optional[CoercionFailure] = None

    @property
    def ok(self) -> bool:
        return self.data is not None

    def unwrap(self) -> bytes:
        if self.data is None:
            raise UTF8CoercionError(self.failure)
        return self.data


def detect_bom(data: Union[bytes, bytearray]) -> Optional[Tuple[str, int]]:
    """Return (encoding, bom_length) if data starts with a known BOM."""
    for signature, encoding in BYTE_ORDER_MARKS:
        if data.startswith(signature):
            return encoding, len(signature)
    return None


def _codec_name(label: str) -> str:
    name = codecs.lookup(label).name
    # bytes-to-bytes codecs such as base64 raise LookupError here
    try:
        b"a".decode(name)
    except UnicodeError:
        pass
    return name


def candidate_encodings(preferred: Optional[str] = None) -> List[str]:
    """
    Build the ordered list of encodings to try.

    Raises LookupError if `preferred` is not a text encoding Python knows.
    """
    labels = ((preferred,) if preferred else ()) + DEFAULT_ENCODINGS
    seen = set()
    candidates = []
    for label in labels:
        name = _codec_name(label)
        if name in seen:
            continue
        seen.add(name)
        candidates.append(label)
    return candidates


def _raw_bytes(value: Textual) -> bytes:
    if isinstance(value, ByteText):
        return bytes(value.data)
    if isinstance(value, bytes):
        return value
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, str):
        try:
            return value.encode("utf-8", "surrogateescape")
        except UnicodeEncodeError:
            return value.encode("utf-8", "surrogatepass")
    raise TypeError(f"expected bytes-like or str, got {type(value).__name__}")


def _declared_encoding(value: Textual) -> Optional[str]:
    if not isinstance(value, ByteText) or not value.encoding:
        return None
    try:
        _codec_name(value.encoding)
    except LookupError:
        logger.warning("ignoring unknown declared encoding %r", value.encoding)
        return None
    return value.encoding


def _transcode(raw: bytes, encoding: str) -> Optional[bytes]:
    try:
        return raw.decode(encoding).encode("utf-8")
    except UnicodeError:
        return None


def _escape(raw: bytes, encoding: str) -> Tuple[bytes, str]:
    try:
        text = raw.decode(encoding, ESCAPE_ERROR_HANDLER)
    except UnicodeError:
        # idna and punycode only support strict error handling
        logger.info("%s cannot escape, falling back to %s", encoding, TARGET_ENCODING)
        encoding = TARGET_ENCODING
        text = raw.decode(encoding, ESCAPE_ERROR_HANDLER)
    return text.encode("utf-8", ESCAPE_ERROR_HANDLER), encoding


def transcode(
    value: Textual, preferred: Optional[str] = None, *, lossy: bool = False
) -> CoercionResult:
    """
    Decide the source encoding of `value` and transcode it to UTF-8.

    A matched BOM is authoritative. Otherwise the candidates from
    candidate_encodings() are tried in order and the first one that decodes
    the whole buffer wins. With lossy=False a failed chain is reported in
    the result, never raised.

    With lossy=True a supplied `preferred` is the only candidate. If it (or
    the default chain) fails, the buffer is decoded under the BOM encoding,
    `preferred`, the declared encoding of a ByteText, or UTF-8 (first that
    applies), escaping whatever does not decode. Codecs that cannot escape
    (idna, punycode) fall back to UTF-8.

    The declared encoding of a ByteText is never a strict candidate: it is
    an unverified claim, so ensure_utf8(ByteText(data, "EUC-JP")) still
    tries only UTF-8 and Windows-1252. Pass it as `preferred` to trust it.
    """
    candidates = candidate_encodings(preferred)
    if lossy and preferred:
        candidates = candidates[:1]

    if (
        isinstance(value, ByteText)
        and value.validated
        and value.encoding == TARGET_ENCODING
    ):
        return CoercionResult(data=bytes(value.data), encoding=TARGET_ENCODING)

    raw = _raw_bytes(value)
    bom = detect_bom(raw)

    if bom is not None:
        encoding, length = bom
        body = raw[length:]
        out = _transcode(body, encoding)
        if out is not None:
            logger.debug("decoded %d bytes as %s (BOM)", len(raw), encoding)
            return CoercionResult(data=out, encoding=encoding, bom=True)
        failure = CoercionFailure(raw, (encoding,))
        if not lossy:
            return CoercionResult(encoding=encoding, bom=True, failure=failure)
        logger.info("escaping undecodable bytes under %s (BOM)", encoding)
        out, encoding = _escape(body, encoding)
        return CoercionResult(
            data=out,
            encoding=encoding,
            bom=True,
            lossy=True,
            failure=failure,
        )

    for encoding in candidates:
        out = _transcode(raw, encoding)
        if out is not None:
            logger.debug("decoded %d bytes as %s", len(raw), encoding)
            return CoercionResult(data=out, encoding=encoding)
        logger.debug("rejected %s for %d bytes", encoding, len(raw))

    failure = CoercionFailure(raw, tuple(candidates))
    if not lossy:
        return CoercionResult(failure=failure)

    encoding = preferred or _declared_encoding(value) or TARGET_ENCODING
    logger.info("escaping undecodable bytes under %s", encoding)
    out, encoding = _escape(raw, encoding)
    return CoercionResult(data=out, encoding=encoding, lossy=True, failure=failure)


def _store(value: Textual, out: bytes) -> Textual:
    if isinstance(value, ByteText):
        if value.data != out:
            value.replace(out)
        value.mark_utf8()
        return value
    if isinstance(value, bytearray):
        if value != out:
            value[:] = out
        return value
    if isinstance(value, bytes):
        return value if value == out else out
    text = out.decode("utf-8")
    return value if text == value else text


def ensure_utf8(value: Textual, preferred: Optional[str] = None) -> ByteText:
    """Return a new, validated UTF-8 ByteText or raise UTF8CoercionError."""
    return ByteText.utf8(transcode(value, preferred).unwrap())


def ensure_utf8_inplace(value: Textual, preferred: Optional[str] = None) -> Textual:
    """
    Strictly normalize `value`, reusing its storage where possible.

    ByteText and bytearray come back as the same object. bytes and str come
    back as the same object when already clean UTF-8, otherwise as a new
    object of the same type.
    """
    return _store(value, transcode(value, preferred).unwrap())


def coerce_utf8(value: Textual, preferred: Optional[str] = None) -> ByteText:
    return ByteText.utf8(transcode(value, preferred, lossy=True).data)


def coerce_utf8_inplace(value: Textual, preferred: Optional[str] = None) -> Textual:
    return _store(value, transcode(value, preferred, lossy=True).data)


def suggest_encoding(data: Union[bytes, bytearray]) -> Optional[str]:
    """
    Best-effort guess via charset-normalizer, for diagnostics only.

    Never used to pick the decoding; failures are reported with it so a
    caller can retry with an explicit preferred encoding.
    """
    match = from_bytes(bytes(data)).best()
    if match is None:
        return None
    return match.encoding


def _sha256_hex(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def _envelope(raw: bytes, result: CoercionResult) -> Dict[str, Any]:
    out = result.data
    return {
        "text": {
            "sha256": _sha256_hex(out),
            "encoding": TARGET_ENCODING,
            "content_b64": base64.b64encode(out).decode("ascii"),
            "text": out.decode("utf-8"),
        },
        "report": {
            "source_encoding": result.encoding,
            "bom": result.bom,
            "changed": out != raw,
            "input_bytes": len(raw),
            "output_bytes": len(out),
        },
    }


def ensure_bytes(raw: bytes, preferred: Optional[str] = None) -> Dict[str, Any]:
    """
    Strictly normalize an uploaded buffer.
    Returns a dict matching the API's EnsureResponse envelope.
    """
    result = transcode(raw, preferred)
    result.unwrap()
    return _envelope(raw, result)


def coerce_bytes(raw: bytes, preferred: Optional[str] = None) -> Dict[str, Any]:
    """Lossy counterpart of ensure_bytes, matching CoerceResponse."""
    result = transcode(raw, preferred, lossy=True)
    envelope = _envelope(raw, result)
    envelope["report"]["lossy"] = result.lossy
    envelope["report"]["tried"] = list(result.failure.tried) if result.failure else []
    return envelope
