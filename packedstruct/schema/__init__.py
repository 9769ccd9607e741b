"""Schema language: parser, compiler, layout and code generation."""

from .compiler import StructCompiler as StructCompiler
from .compiler import compile_struct as compile_struct
from .layout import FieldLayout as FieldLayout
from .layout import StructLayout as StructLayout
from .layout import calculate_layout as calculate_layout
from .parser import parse as parse
from .parser import parse_line as parse_line
from .types import BitDecl as BitDecl
from .types import FieldDecl as FieldDecl
