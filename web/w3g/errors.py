"""
Decode errors raised while reading a .w3g replay.

Every fatal condition is a ``ValueError`` so callers that only care about
"this is not a readable replay" can catch the one type.
"""


class W3GError(ValueError):
    """Base class for all replay decode failures."""


class UnexpectedEof(W3GError):
    """A read or seek ran past the end of the buffer."""

    def __init__(self, offset: int, wanted: int, available: int):
        self.offset = offset
        self.wanted = wanted
        self.available = available
        super().__init__(
            f'Unexpected end of data at offset {offset}: '
            f'wanted {wanted} byte(s), {available} available'
        )


class DecompressionFailure(W3GError):
    """A compressed data block could not be inflated."""

    def __init__(self, index: int, reason: str):
        self.index = index
        super().__init__(f'Data block {index} failed to decompress: {reason}')


class UnsupportedEncoding(W3GError):
    """The container header is structurally implausible."""


class MalformedUtf8(UnicodeWarning):
    """Text field was not valid UTF-8; decoded with replacement characters."""
