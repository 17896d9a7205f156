"""Streaming NBT decoder.

The decoder never builds a tree. It reads tags depth-first and reports them to a
:class:`TagVisitor`; the signal returned from ``enter_compound``/``enter_list``
decides whether the children are walked, skipped or the walk stops altogether.
Skipped subtrees are consumed from the stream without emitting any events.
"""

from __future__ import annotations

import enum
import io
import struct
from typing import BinaryIO, Optional, Union


TAG_END = 0
TAG_BYTE = 1
TAG_SHORT = 2
TAG_INT = 3
TAG_LONG = 4
TAG_FLOAT = 5
TAG_DOUBLE = 6
TAG_BYTE_ARRAY = 7
TAG_STRING = 8
TAG_LIST = 9
TAG_COMPOUND = 10
TAG_INT_ARRAY = 11
TAG_LONG_ARRAY = 12

_FIXED_WIDTH = {
    TAG_BYTE: 1,
    TAG_SHORT: 2,
    TAG_INT: 4,
    TAG_LONG: 8,
    TAG_FLOAT: 4,
    TAG_DOUBLE: 8,
}

_I8 = struct.Struct(">b")
_I16 = struct.Struct(">h")
_U16 = struct.Struct(">H")
_I32 = struct.Struct(">i")
_I64 = struct.Struct(">q")
_F32 = struct.Struct(">f")
_F64 = struct.Struct(">d")

MAX_DEPTH = 512


class FormatError(Exception):
    """Malformed or unsupported on-disk data."""


class Visit(enum.Enum):
    DESCEND = "descend"
    SKIP = "skip"
    ABORT = "abort"


class TagVisitor:
    """Receives decoder events. The default implementation walks everything.

    Returning ``None`` from any method is the same as ``Visit.DESCEND``.
    List elements are reported with ``name=None``.
    """

    def enter_compound(self, name: Optional[str]) -> Optional[Visit]:
        return Visit.DESCEND

    def exit_compound(self, name: Optional[str]) -> None:
        pass

    def enter_list(self, name: Optional[str], element_tag: int, length: int) -> Optional[Visit]:
        return Visit.DESCEND

    def exit_list(self, name: Optional[str]) -> None:
        pass

    def value(self, name: Optional[str], tag: int, value: object) -> Optional[Visit]:
        return Visit.DESCEND

    def end(self) -> None:
        pass


class _Stream:
    __slots__ = ("fp",)

    def __init__(self, fp: BinaryIO):
        self.fp = fp

    def read_bytes(self, n: int) -> bytes:
        data = self.fp.read(n)
        if len(data) != n:
            raise FormatError("unexpected EOF")
        return data

    def read_u8(self) -> int:
        return self.read_bytes(1)[0]

    def read_i8(self) -> int:
        return _I8.unpack(self.read_bytes(1))[0]

    def read_i16(self) -> int:
        return _I16.unpack(self.read_bytes(2))[0]

    def read_i32(self) -> int:
        return _I32.unpack(self.read_bytes(4))[0]

    def read_i64(self) -> int:
        return _I64.unpack(self.read_bytes(8))[0]

    def read_f32(self) -> float:
        return _F32.unpack(self.read_bytes(4))[0]

    def read_f64(self) -> float:
        return _F64.unpack(self.read_bytes(8))[0]

    def read_length(self, what: str) -> int:
        ln = self.read_i32()
        if ln < 0:
            raise FormatError(f"negative {what} length")
        return ln

    def read_string(self) -> str:
        ln = _U16.unpack(self.read_bytes(2))[0]
        try:
            return self.read_bytes(ln).decode("utf-8", errors="strict")
        except UnicodeDecodeError as exc:
            raise FormatError(f"invalid string: {exc}") from exc


def _read_scalar(tag: int, s: _Stream):
    if tag == TAG_BYTE:
        return s.read_i8()
    if tag == TAG_SHORT:
        return s.read_i16()
    if tag == TAG_INT:
        return s.read_i32()
    if tag == TAG_LONG:
        return s.read_i64()
    if tag == TAG_FLOAT:
        return s.read_f32()
    if tag == TAG_DOUBLE:
        return s.read_f64()
    if tag == TAG_BYTE_ARRAY:
        return s.read_bytes(s.read_length("byte array"))
    if tag == TAG_STRING:
        return s.read_string()
    if tag == TAG_INT_ARRAY:
        ln = s.read_length("int array")
        return list(struct.unpack(f">{ln}i", s.read_bytes(4 * ln)))
    if tag == TAG_LONG_ARRAY:
        ln = s.read_length("long array")
        return list(struct.unpack(f">{ln}q", s.read_bytes(8 * ln)))
    raise FormatError(f"unknown tag {tag}")


def _check_depth(depth: int) -> None:
    if depth > MAX_DEPTH:
        raise FormatError("NBT nesting too deep")


def _skip_payload(tag: int, s: _Stream, depth: int) -> None:
    width = _FIXED_WIDTH.get(tag)
    if width is not None:
        s.read_bytes(width)
        return
    if tag == TAG_BYTE_ARRAY:
        s.read_bytes(s.read_length("byte array"))
        return
    if tag == TAG_STRING:
        s.read_bytes(_U16.unpack(s.read_bytes(2))[0])
        return
    if tag == TAG_INT_ARRAY:
        s.read_bytes(4 * s.read_length("int array"))
        return
    if tag == TAG_LONG_ARRAY:
        s.read_bytes(8 * s.read_length("long array"))
        return
    if tag == TAG_LIST:
        _check_depth(depth + 1)
        inner = s.read_u8()
        for _ in range(s.read_length("list")):
            _skip_payload(inner, s, depth + 1)
        return
    if tag == TAG_COMPOUND:
        _check_depth(depth + 1)
        while True:
            t = s.read_u8()
            if t == TAG_END:
                return
            s.read_bytes(_U16.unpack(s.read_bytes(2))[0])
            _skip_payload(t, s, depth + 1)
    raise FormatError(f"unknown tag {tag}")


def _signal(result: Optional[Visit]) -> Visit:
    return Visit.DESCEND if result is None else result


def _visit_tag(tag: int, name: Optional[str], s: _Stream, visitor: TagVisitor, depth: int) -> bool:
    if tag in (TAG_COMPOUND, TAG_LIST):
        _check_depth(depth + 1)
    if tag == TAG_COMPOUND:
        signal = _signal(visitor.enter_compound(name))
        if signal is Visit.ABORT:
            return False
        if signal is Visit.SKIP:
            _skip_payload(TAG_COMPOUND, s, depth)
            return True
        while True:
            child = s.read_u8()
            if child == TAG_END:
                break
            if not _visit_tag(child, s.read_string(), s, visitor, depth + 1):
                return False
        visitor.exit_compound(name)
        return True

    if tag == TAG_LIST:
        inner = s.read_u8()
        length = s.read_length("list")
        signal = _signal(visitor.enter_list(name, inner, length))
        if signal is Visit.ABORT:
            return False
        if signal is Visit.SKIP:
            for _ in range(length):
                _skip_payload(inner, s, depth + 1)
            return True
        for _ in range(length):
            if not _visit_tag(inner, None, s, visitor, depth + 1):
                return False
        visitor.exit_list(name)
        return True

    value = _read_scalar(tag, s)
    return _signal(visitor.value(name, tag, value)) is not Visit.ABORT


def walk(source: Union[bytes, bytearray, BinaryIO], visitor: TagVisitor) -> bool:
    """Decode one named root tag from ``source``.

    Returns ``False`` if the visitor aborted the walk, ``True`` otherwise.
    Raises :class:`FormatError` on malformed input.
    """
    if isinstance(source, (bytes, bytearray, memoryview)):
        source = io.BytesIO(bytes(source))
    s = _Stream(source)
    tag = s.read_u8()
    if tag == TAG_END:
        raise FormatError("stream has no root tag")
    if not _visit_tag(tag, s.read_string(), s, visitor, 0):
        return False
    visitor.end()
    return True
