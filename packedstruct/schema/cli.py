"""Command-line interface for packedstruct schemas."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.table import Table

from packedstruct.codec import Endianness, StructCodec, StructError, create_registry, to_jsonable
from packedstruct.schema import compile_struct, python
from packedstruct.schema.layout import calculate_layout

if TYPE_CHECKING:
    from packedstruct.codec import StructDescriptor, TypeRegistry

logger = logging.getLogger(__name__)


def _load_schemas(schema_files: tuple[str, ...]) -> tuple[TypeRegistry, list[StructDescriptor]]:
    """Compile schema files in order; each struct is named after its file stem."""
    registry = create_registry()
    structs = []
    for schema_file in schema_files:
        path = Path(schema_file)
        text = path.read_text(encoding="utf-8")
        logger.info("Compiling %s as %s", path, path.stem)
        structs.append(compile_struct(text, path.stem, registry))
    return registry, structs


def _fail(message: str) -> None:
    print(f"Error: {message}")
    sys.exit(1)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """packedstruct binary struct tools."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


schema_option = click.option(
    "--schema",
    "-s",
    "schema_files",
    required=True,
    multiple=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Schema file; the struct takes the file name without extension. Repeat in dependency order.",
)


@cli.command()
@schema_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(schema_files: tuple[str, ...], output_json: bool) -> None:
    """Display struct sizes and field layouts."""
    try:
        _, structs = _load_schemas(schema_files)
    except StructError as e:
        _fail(str(e))
        return

    layouts = [calculate_layout(struct) for struct in structs]

    if output_json:
        print(json.dumps({layout.name: layout.to_dict() for layout in layouts}, indent=2))
        return

    console = Console()
    for layout in layouts:
        console.print(f"[bold cyan]{layout.name}[/bold cyan] [yellow]{layout.size} bytes[/yellow]")

        table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        table.add_column("Offset", style="yellow", justify="right")
        table.add_column("Size", style="yellow", justify="right")
        table.add_column("Type", style="white")
        table.add_column("Name", style="green")
        table.add_column("Bits", style="dim")

        for f in layout.fields:
            type_str = f.type_name if f.array_length == 1 else f"{f.type_name}[{f.array_length}]"
            bits_str = ", ".join(f"{n}:{w}" for n, w in f.bits.items()) if f.bits else ""
            table.add_row(str(f.offset), str(f.size), type_str, f.name, bits_str)

        console.print(table)
        console.print()


@cli.command()
@schema_option
@click.option("--name", "-n", "struct_name", default=None, help="Struct to generate (default: last schema)")
@click.option("--output", "-o", "output_file", required=True, help="Output file")
@click.option(
    "--runtime-import",
    "runtime_import",
    default="packedstruct.codec",
    help="Import path for the codec runtime",
)
def gen(
    schema_files: tuple[str, ...], struct_name: str | None, output_file: str, runtime_import: str
) -> None:
    """Generate a Python dataclass for a struct."""
    try:
        registry, structs = _load_schemas(schema_files)
        struct = registry.lookup_struct(struct_name) if struct_name else structs[-1]
        generated_file = python.render(struct, registry, runtime_import=runtime_import)
    except StructError as e:
        _fail(str(e))
        return

    with open(output_file, "w", encoding="utf-8") as f:
        f.write(generated_file)


@cli.command()
@schema_option
@click.option("--name", "-n", "struct_name", default=None, help="Struct to decode (default: last schema)")
@click.option("--input", "-i", "input_file", required=True, help="Binary input file")
@click.option("--offset", default=0, show_default=True, help="Byte offset of the struct")
@click.option(
    "--endian",
    type=click.Choice([e.value for e in Endianness]),
    default=Endianness.BIG.value,
    show_default=True,
    help="Byte order",
)
def decode(
    schema_files: tuple[str, ...],
    struct_name: str | None,
    input_file: str,
    offset: int,
    endian: str,
) -> None:
    """Decode a struct from a binary file and print it as JSON."""
    with open(input_file, "rb") as f:
        data = f.read()

    try:
        registry, structs = _load_schemas(schema_files)
        name = struct_name or structs[-1].name
        value = StructCodec(registry).read(data, offset, name, Endianness(endian))
    except StructError as e:
        _fail(str(e))
        return

    print(json.dumps(to_jsonable(value), indent=2))


def main() -> None:
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
