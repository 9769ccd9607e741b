"""Tests for the Python code generator"""

import pytest

from packedstruct.codec import (
    Bitfield16,
    DefinitionError,
    EncodeError,
    Endianness,
    OutOfBounds,
    StructCodec,
)
from packedstruct.schema import compile_struct
from packedstruct.schema.python import render, to_attr_name, to_class_name


def gen_code(registry, root):
    gbl = globals().copy()
    generated_code = render(registry.lookup_struct(root), registry)
    exec(generated_code, gbl)
    return gbl


def describe_names():
    def keeps_valid_identifiers(expect):
        expect(to_class_name("Header")) == "Header"
        expect(to_attr_name("length")) == "length"

    def sanitizes_class_names(expect):
        expect(to_class_name("my-struct")) == "my_struct"
        expect(to_class_name("2d")) == "_2d"

    def maps_reserved_and_keyword_fields(expect):
        expect(to_attr_name("#pad")) == "_pad"
        expect(to_attr_name("class")) == "class_"

    def avoids_generated_class_members(expect):
        expect(to_attr_name("read")) == "read_"
        expect(to_attr_name("SIZE")) == "SIZE_"


def describe_render():
    def emits_a_dataclass_per_struct(expect, registry):
        compile_struct("u8 x\nfloat num", "Inner", registry)
        compile_struct("char[4] magic\nInner inner", "Outer", registry)
        code = render(registry.lookup_struct("Outer"), registry)
        expect(code).includes("class Inner:")
        expect(code).includes("class Outer:")
        expect(code.index("class Inner:") < code.index("class Outer:")) == True
        expect(code).includes("magic: list[str]")
        expect(code).includes("SIZE: ClassVar[int] = 9")

    def rejects_fields_mapping_to_the_same_attribute(expect, registry):
        for text in ("u8 #pad\nu8 _pad", "u8 class\nu8 class_"):
            name = f"Clash{len(registry)}"
            compile_struct(text, name, registry)
            with pytest.raises(DefinitionError) as exc:
                render(registry.lookup_struct(name), registry)
            expect(str(exc.value)).includes("both generate attribute")

    def rejects_structs_mapping_to_the_same_class(expect, registry):
        compile_struct("u8 b", "my_struct", registry)
        compile_struct("my_struct inner", "my-struct", registry)
        with pytest.raises(DefinitionError):
            render(registry.lookup_struct("my-struct"), registry)

    def uses_the_runtime_import(expect, registry):
        compile_struct("u8 a", "Tiny", registry)
        code = render(registry.lookup_struct("Tiny"), registry, runtime_import="mypkg.runtime")
        expect(code).includes("from mypkg.runtime import")


def describe_generated_code():
    def reads_mixed_fields(expect, registry):
        compile_struct(
            "u16 a\nu8 b\nBitfield16{flagA: 1, flagB: 3, fieldC: 4} c", "Header", registry
        )
        gen = gen_code(registry, "Header")
        data = (42).to_bytes(2, "little") + bytes([7]) + (0b1010011100000000).to_bytes(2, "little")

        header = gen["Header"].read(data, 0, Endianness.LITTLE)
        expect(header.a) == 42
        expect(header.b) == 7
        expect(header.c.project()) == {"flagA": True, "flagB": "0b010", "fieldC": "0b0111"}

    def round_trips_nested_structs(expect, registry):
        compile_struct("u8 x\nfloat num", "Inner", registry)
        compile_struct("char[4] magic\nInner[2] inner\nu16 #pad", "Outer", registry)
        gen = gen_code(registry, "Outer")
        Outer, Inner = gen["Outer"], gen["Inner"]

        value = Outer(magic=list("UraY"), inner=[Inner(1, 1.5), Inner(2, -2.0)], _pad=0)
        buf = bytearray(Outer.SIZE)
        expect(value.write(buf)) == 16
        expect(Outer.read(buf)) == value

    def matches_the_codec_encoding(expect, registry):
        compile_struct("s32 a\nBitfield16{hi: 8, lo: 8} b\nbool c", "Mixed", registry)
        gen = gen_code(registry, "Mixed")
        buf = bytearray(10)
        gen["Mixed"](a=-5, b=Bitfield16(0x1234, {"hi": 8, "lo": 8}), c=True).write(
            buf, 0, Endianness.BIG
        )
        expect(StructCodec(registry).read(buf, 0, "Mixed")["a"]) == -5
        expect(bytes(buf[4:6])) == b"\x12\x34"

    def checks_bounds(expect, registry):
        compile_struct("u32 a", "Word", registry)
        gen = gen_code(registry, "Word")
        with pytest.raises(OutOfBounds):
            gen["Word"].read(b"\x00\x00")
        with pytest.raises(OutOfBounds):
            gen["Word"](a=1).write(bytearray(4), 1)

    def checks_array_lengths(expect, registry):
        compile_struct("u8[3] data", "Data", registry)
        gen = gen_code(registry, "Data")
        with pytest.raises(EncodeError):
            gen["Data"](data=[1, 2]).write(bytearray(3))
