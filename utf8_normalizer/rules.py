"""
Deterministic normalization rules.

This file exists to make the detection order explicit and enforceable.
"""

TARGET_ENCODING = "UTF-8"

# Checked in order; a signature must precede any shorter one it starts with.
BYTE_ORDER_MARKS = (
    (b"\xef\xbb\xbf", "UTF-8"),
    (b"\xff\xfe", "UTF-16LE"),
    (b"\xfe\xff", "UTF-16BE"),
)

# Tried after the caller's preferred encoding, in order.
DEFAULT_ENCODINGS = ("UTF-8", "Windows-1252")

ESCAPE_ERROR_HANDLER = "utf8-hexescape"
ESCAPE_TOKEN = "0x{:02x}"
