"""
Bencode decoding with lazy container cursors.

``Decoder.next_object`` hands out one value at a time. Byte strings and
integers come back fully decoded; lists and dictionaries come back as
cursors (``ListDecoder``/``DictDecoder``) that read their contents from the
same buffer on demand. A cursor the caller stops reading early is drained
before its parent moves on, so the shared position always stays in step
with the buffer.
"""

from torrentsweep.bencode.values import DICT, LIST, Bytes, Integer
from torrentsweep.common.errors import (
    MalformedInputError,
    NestingTooDeepError,
    TrailingDataError,
)

DEFAULT_MAX_DEPTH = 64
# draining and mapping recurse once per level; stay well inside the interpreter stack
MAX_DEPTH_LIMIT = 200

_DIGITS = b"0123456789"
_END = ord("e")
_INT = ord("i")
_LIST = ord("l")
_DICT = ord("d")
_ZERO = ord("0")

# more length digits than this can never fit in memory
_MAX_LENGTH_DIGITS = 19


def check_max_depth(max_depth: int, name: str = "max_depth"):
    if not 1 <= max_depth <= MAX_DEPTH_LIMIT:
        raise ValueError(
            f"{name} must be between 1 and {MAX_DEPTH_LIMIT}, got {max_depth}"
        )


class Decoder:
    __slots__ = ("buf", "pos", "depth", "max_depth", "_child")

    def __init__(self, buf: bytes, max_depth: int = DEFAULT_MAX_DEPTH):
        check_max_depth(max_depth)
        self.buf = bytes(buf)
        self.pos = 0
        self.depth = 0
        self.max_depth = max_depth
        self._child = None

    def next_object(self):
        """Return the next top-level value, or ``None`` once the input is exhausted."""
        self._drain_child()
        if self.pos >= len(self.buf):
            return None
        value = self.read_value()
        if value.kind in (LIST, DICT):
            self._child = value
        return value

    def ensure_end(self):
        """Fail unless every byte of the buffer has been consumed."""
        self._drain_child()
        if self.pos < len(self.buf):
            raise TrailingDataError(self.pos, len(self.buf) - self.pos)

    def _drain_child(self):
        if self._child is not None:
            self._child.drain()
            self._child = None

    def read_value(self):
        buf, pos = self.buf, self.pos
        if pos >= len(buf):
            raise MalformedInputError("unexpected end of input", pos)
        lead = buf[pos]
        if lead in _DIGITS:
            return Bytes(self._read_bytes())
        if lead == _INT:
            return Integer(self._read_integer())
        if lead == _LIST:
            self._open_container()
            return ListDecoder(self, pos)
        if lead == _DICT:
            self._open_container()
            return DictDecoder(self, pos)
        raise MalformedInputError(f"unexpected byte {bytes([lead])!r}", pos)

    def _open_container(self):
        if self.depth >= self.max_depth:
            raise NestingTooDeepError(self.max_depth, self.pos)
        self.depth += 1
        self.pos += 1

    def read_bytes(self) -> bytes:
        if self.pos >= len(self.buf):
            raise MalformedInputError("unexpected end of input", self.pos)
        if self.buf[self.pos] not in _DIGITS:
            raise MalformedInputError("dictionary key must be a byte string", self.pos)
        return self._read_bytes()

    def _read_bytes(self) -> bytes:
        buf, start = self.buf, self.pos
        colon = buf.find(b":", start)
        if colon == -1:
            raise MalformedInputError("unterminated byte string length", start)
        digits = buf[start:colon]
        if not digits.isdigit():
            raise MalformedInputError(f"invalid byte string length {digits!r}", start)
        if len(digits) > 1 and digits[0] == _ZERO:
            raise MalformedInputError(
                f"byte string length {digits!r} has a leading zero", start
            )
        if len(digits) > _MAX_LENGTH_DIGITS:
            raise MalformedInputError("byte string length exceeds remaining input", start)
        length = int(digits)
        data_start = colon + 1
        if length > len(buf) - data_start:
            raise MalformedInputError(
                f"byte string of length {length} exceeds remaining input "
                f"({len(buf) - data_start} bytes)",
                start,
            )
        self.pos = data_start + length
        return buf[data_start : self.pos]

    def _read_integer(self) -> int:
        buf, start = self.buf, self.pos
        end = buf.find(b"e", start + 1)
        if end == -1:
            raise MalformedInputError("unterminated integer", start)
        digits = buf[start + 1 : end]
        body = digits[1:] if digits[:1] == b"-" else digits
        if not body:
            raise MalformedInputError("empty integer", start)
        if not body.isdigit():
            raise MalformedInputError(f"invalid integer {digits!r}", start)
        if len(body) > 1 and body[0] == _ZERO:
            raise MalformedInputError(f"integer {digits!r} has a leading zero", start)
        if digits == b"-0":
            raise MalformedInputError("negative zero is not a valid integer", start)
        try:
            value = int(digits)
        except ValueError:
            # beyond the interpreter's digit limit for int()
            raise MalformedInputError(
                f"integer with {len(body)} digits is too long", start
            ) from None
        self.pos = end + 1
        return value


class _ContainerDecoder:
    __slots__ = ("decoder", "start", "end", "_child")

    def __init__(self, decoder: Decoder, start: int):
        self.decoder = decoder
        self.start = start
        self.end = None
        self._child = None

    @property
    def exhausted(self) -> bool:
        return self.end is not None

    def _advance(self) -> bool:
        """Step past any unread child; return False once the terminator is consumed."""
        if self.end is not None:
            return False
        if self._child is not None:
            self._child.drain()
            self._child = None
        decoder = self.decoder
        if decoder.pos >= len(decoder.buf):
            raise MalformedInputError(f"unterminated {self.kind}", self.start)
        if decoder.buf[decoder.pos] == _END:
            decoder.pos += 1
            decoder.depth -= 1
            self.end = decoder.pos
            return False
        return True

    def _read_child(self):
        value = self.decoder.read_value()
        if value.kind in (LIST, DICT):
            self._child = value
        return value

    def drain(self):
        while self._advance():
            self._skip_item()


class ListDecoder(_ContainerDecoder):
    __slots__ = ()

    kind = LIST

    def next_object(self):
        """Return the next element, or ``None`` after the closing ``e``."""
        if not self._advance():
            return None
        return self._read_child()

    def _skip_item(self):
        self._read_child()

    def __repr__(self):
        return f"ListDecoder(start={self.start})"


class DictDecoder(_ContainerDecoder):
    __slots__ = ()

    kind = DICT

    def next_pair(self):
        """Return the next ``(key, value)`` pair, or ``None`` after the closing ``e``.

        Keys are raw ``bytes``. Key order is whatever the buffer holds.
        """
        if not self._advance():
            return None
        key = self.decoder.read_bytes()
        return key, self._read_child()

    def _skip_item(self):
        self.decoder.read_bytes()
        self._read_child()

    def raw_bytes(self) -> bytes:
        """The encoded form of this dictionary, once it has been read to the end."""
        if self.end is None:
            raise RuntimeError("dictionary has not been fully decoded yet")
        return self.decoder.buf[self.start : self.end]

    def __repr__(self):
        return f"DictDecoder(start={self.start})"
