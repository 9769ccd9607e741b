"""Tests for the cursor-based stream"""

import pytest

from packedstruct.codec import Endianness, OutOfBounds, StructStream, TypeMismatch
from packedstruct.schema import compile_struct

LE = Endianness.LITTLE


def describe_reading():
    def advances_the_cursor(expect, codec):
        stream = StructStream(b"\x01\x00\x02\x03", codec=codec)
        expect(stream.read_next("u16", LE)) == 1
        expect(stream.tell()) == 2
        expect(stream.read_next("u8")) == 2
        expect(stream.tell()) == 3

    def reads_structs(expect, codec, registry):
        compile_struct("u8 kind\nu16 length", "Header", registry)
        stream = StructStream(b"\x05\x00\x10\xff", codec=codec)
        expect(stream.read_next("Header")) == {"kind": 5, "length": 16}
        expect(stream.tell()) == 3

    def reads_variable_length_strings(expect, codec):
        stream = StructStream(b"ab\x00cd\x00", codec=codec)
        expect(stream.read_next("string")) == "ab"
        expect(stream.read_next("string")) == "cd"
        expect(stream.tell()) == 6

    def read_at_keeps_the_cursor(expect, codec):
        stream = StructStream(b"\x01\x02\x03", codec=codec)
        expect(stream.read_at(2, "u8")) == 3
        expect(stream.tell()) == 0

    def is_relative_to_the_base_offset(expect, codec):
        stream = StructStream(b"\xff\xff\x07\x08", offset=2, codec=codec)
        expect(len(stream)) == 2
        expect(stream.read_next("u8")) == 7
        expect(stream.read_at(1, "u8")) == 8

    def iterates_bytes(expect, codec):
        stream = StructStream(b"\x01\x02\x03", codec=codec)
        stream.seek(1)
        expect(list(stream)) == [2, 3]

    def iterates_typed_values(expect, codec):
        stream = StructStream(b"\x00\x01\x00\x02", codec=codec)
        expect(list(stream.iter_values("u16"))) == [1, 2]

    def fails_past_the_end(expect, codec):
        stream = StructStream(b"\x01", codec=codec)
        with pytest.raises(OutOfBounds):
            stream.read_next("u16")
        expect(stream.tell()) == 0


def describe_seek():
    def supports_all_whence_values(expect, codec):
        stream = StructStream(bytes(10), codec=codec)
        expect(stream.seek(4).tell()) == 4
        expect(stream.seek(2, StructStream.SEEK_CUR).tell()) == 6
        expect(stream.seek(-3, StructStream.SEEK_END).tell()) == 7

    def accepts_integral_floats(expect, codec):
        expect(StructStream(bytes(4), codec=codec).seek(2.0).tell()) == 2

    def rejects_invalid_offsets(expect, codec):
        stream = StructStream(bytes(4), codec=codec)
        with pytest.raises(TypeMismatch):
            stream.seek("1")
        with pytest.raises(TypeMismatch):
            stream.seek(1.5)

    def rejects_non_finite_offsets_like_the_codec(expect, codec):
        stream = StructStream(bytes(4), codec=codec)
        for offset in (float("nan"), float("inf"), float("-inf")):
            with pytest.raises(OutOfBounds):
                stream.seek(offset)
        expect(stream.tell()) == 0

    def rejects_invalid_whence(expect, codec):
        with pytest.raises(ValueError):
            StructStream(bytes(4), codec=codec).seek(0, 5)

    def reading_before_the_start_fails(expect, codec):
        stream = StructStream(bytes(4), codec=codec).seek(-1, StructStream.SEEK_CUR)
        with pytest.raises(OutOfBounds):
            stream.read_next("u8")


def describe_writing():
    def writes_at_the_cursor(expect, codec):
        buf = bytearray(4)
        stream = StructStream(buf, codec=codec)
        expect(stream.write_next("u16", 0x0102)) == 2
        stream.write_next("u8", 3)
        expect(stream.tell()) == 3
        expect(bytes(buf)) == b"\x01\x02\x03\x00"

    def write_at_keeps_the_cursor(expect, codec):
        buf = bytearray(4)
        stream = StructStream(buf, offset=1, codec=codec)
        stream.write_at(2, "u8", 9)
        expect(stream.tell()) == 0
        expect(bytes(buf)) == b"\x00\x00\x00\x09"
        expect(stream.buffer is buf) == True

    def rejects_read_only_buffers(expect, codec):
        with pytest.raises(TypeMismatch):
            StructStream(b"\x00", codec=codec).write_next("u8", 1)


def describe_construction():
    def rejects_offsets_outside_the_buffer(expect):
        with pytest.raises(OutOfBounds):
            StructStream(b"\x00", offset=2)
        with pytest.raises(OutOfBounds):
            StructStream(b"\x00", offset=-1)

    def uses_the_default_codec(expect):
        expect(StructStream(b"\x07").read_next("u8")) == 7
