"""Schema text parser using Lark."""

import os
from dataclasses import dataclass
from typing import Any

from lark import Lark, Token
from lark.exceptions import LarkError, VisitError
from lark.visitors import Transformer

from ..codec.errors import DefinitionError
from .types import BitDecl, FieldDecl

_g_parser: Lark | None = None


@dataclass
class _TypeExpr:
    name: str
    array_length: int = 1
    bits: list[BitDecl] | None = None


class TreeTransformer(Transformer):
    """Transform a member parse tree into a FieldDecl."""

    def scalar(self, args: list[Any]) -> _TypeExpr:
        return _TypeExpr(name=str(args[0]))

    def array(self, args: list[Any]) -> _TypeExpr:
        length = int(args[1])
        if length < 1:
            raise DefinitionError(f"Array length must be a positive integer, got {length}")
        return _TypeExpr(name=str(args[0]), array_length=length)

    def bit_spec(self, args: list[Any]) -> BitDecl:
        return BitDecl(name=str(args[0]), width=int(args[1]))

    def bitfield(self, args: list[Any]) -> _TypeExpr:
        bits = [arg for arg in args if isinstance(arg, BitDecl)]
        return _TypeExpr(name=str(args[0]), bits=bits)

    def member(self, args: list[Any]) -> FieldDecl:
        type_expr, name = args
        if not isinstance(type_expr, _TypeExpr) or not isinstance(name, Token):
            raise RuntimeError("Unexpected member parse tree")
        return FieldDecl(
            type_name=type_expr.name,
            name=str(name),
            array_length=type_expr.array_length,
            bits=type_expr.bits,
        )


def _get_parser() -> Lark:
    global _g_parser

    if not _g_parser:
        with open(f"{os.path.dirname(__file__)}/schema.lark", encoding="utf-8") as f:
            grammar = f.read()
        _g_parser = Lark(grammar, start="member", parser="lalr")

    return _g_parser


def parse_line(text: str, line: int = 0) -> FieldDecl:
    """Parse a single member declaration such as 'u16 length'."""
    try:
        tree = _get_parser().parse(text)
        decl = TreeTransformer().transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, DefinitionError):
            raise DefinitionError(f"line {line}: {e.orig_exc} in '{text}'") from e.orig_exc
        raise
    except LarkError as e:
        raise DefinitionError(f"line {line}: Invalid field declaration '{text}'") from e

    decl.line = line
    decl.text = text
    return decl


def parse(text: str) -> list[FieldDecl]:
    """Parse schema text into member declarations.

    Carriage returns are stripped and blank lines skipped; every other line
    must hold exactly one declaration.

    Raises:
        DefinitionError: If a line is malformed.
    """
    decls: list[FieldDecl] = []
    for number, line in enumerate(text.replace("\r", "").split("\n"), start=1):
        line = line.strip()
        if not line:
            continue
        decls.append(parse_line(line, number))
    return decls
