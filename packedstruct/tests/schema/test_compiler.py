"""Tests for schema compilation"""

import pytest

from packedstruct.codec import (
    DefinitionError,
    NameConflict,
    StructDescriptor,
    UnknownType,
    WidthOverflow,
)
from packedstruct.schema import BitDecl, StructCompiler, compile_struct, parse_line


def describe_compile():
    def builds_a_registered_descriptor(expect, registry):
        struct = compile_struct("u16 a\nu8 b\nBitfield16{flagA: 1, flagB: 3} c", "Header", registry)
        expect(isinstance(struct, StructDescriptor)) == True
        expect(registry.lookup("Header")) == struct
        expect(struct.size) == 5
        expect([f.name for f in struct.fields]) == ["a", "b", "c"]
        expect(struct.get_field("c").options) == {"flagA": 1, "flagB": 3}

    def sizes_arrays(expect, registry):
        struct = compile_struct("char[4] magic\nu32[3] words\ndouble d", "Packet", registry)
        expect(struct.size) == 4 + 12 + 8
        expect(struct.get_field("words").element_size) == 4
        expect(struct.get_field("words").is_array) == True

    def nests_registered_structs(expect, registry):
        compile_struct("u8 x\nfloat num", "Inner", registry)
        outer = compile_struct("char[4] magic\nInner[2] inner", "Outer", registry)
        expect(outer.size) == 4 + 2 * 5
        expect(outer.offsets()) == {"magic": 0, "inner": 4}

    def uses_the_default_registry(expect):
        compiler = StructCompiler()
        expect("Bitfield8" in compiler.registry) == True

    def logs_compiled_structs(expect, registry, caplog):
        with caplog.at_level("DEBUG", logger="packedstruct"):
            compile_struct("u8 a", "Logged", registry)
        expect(caplog.text).includes("Logged")


def describe_errors():
    def rejects_unknown_types_without_registering(expect, registry):
        before = len(registry)
        with pytest.raises(UnknownType) as exc:
            compile_struct("u8 a\nMissing b", "Broken", registry)
        expect(str(exc.value)).includes("Missing")
        expect("Broken" in registry) == False
        expect(len(registry)) == before

    def rejects_string_members(expect, registry):
        with pytest.raises(DefinitionError) as exc:
            compile_struct("string name", "Named", registry)
        expect(str(exc.value)).includes("char[]")
        expect("Named" in registry) == False

    def rejects_sub_fields_on_plain_types(expect, registry):
        with pytest.raises(DefinitionError):
            StructCompiler(registry).resolve(_with_bits("u8 a", [("x", 1)]))

    def rejects_overfull_bitfields(expect, registry):
        with pytest.raises(WidthOverflow):
            compile_struct("Bitfield8{a: 4, b: 5} flags", "Flags", registry)
        expect("Flags" in registry) == False

    def rejects_duplicate_field_names(expect, registry):
        with pytest.raises(DefinitionError) as exc:
            compile_struct("u8 a\nu16 a", "Dup", registry)
        expect(str(exc.value)).includes("line 2")

    def rejects_empty_schemas(expect, registry):
        with pytest.raises(DefinitionError):
            compile_struct("\n\n", "Empty", registry)

    def rejects_existing_struct_names(expect, registry):
        first = compile_struct("u8 a", "Once", registry)
        with pytest.raises(NameConflict):
            compile_struct("u16 b", "Once", registry)
        expect(registry.lookup("Once")) == first

    def rejects_primitive_names(expect, registry):
        with pytest.raises(NameConflict):
            compile_struct("u8 a", "u32", registry)
        with pytest.raises(NameConflict):
            compile_struct("u8 a", "Bitfield8", registry)

    def rejects_self_reference(expect, registry):
        with pytest.raises(UnknownType):
            compile_struct("Node next", "Node", registry)

    def rejects_empty_struct_names(expect, registry):
        before = len(registry)
        with pytest.raises(DefinitionError):
            compile_struct("u8 a", "", registry)
        expect("" in registry) == False
        expect(len(registry)) == before


def _with_bits(text, bits):
    decl = parse_line(text)
    decl.bits = [BitDecl(name, width) for name, width in bits]
    return decl
