"""Command-line interface for protoglue code generation."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from protoglue.generator import python
from protoglue.generator.errors import GeneratorError
from protoglue.generator.loader import load
from protoglue.generator.naming import Naming
from protoglue.generator.options import GeneratorOptions, GroupPolicy

if TYPE_CHECKING:
    from protoglue.generator.pool import DescriptorPool
    from protoglue.generator.types import ProtoMessage

logger = logging.getLogger(__name__)


@click.group()
@click.option("--verbose", "-v", is_flag=True, default=False, help="Show debug output")
def cli(verbose: bool) -> None:
    """protoglue protobuf codec generator."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(input_file: str) -> DescriptorPool:
    try:
        return load(input_file)
    except (OSError, GeneratorError) as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option(
    "--input", "-i", "input_file", required=True, help="Descriptors (.json or FileDescriptorSet)"
)
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option(
    "--file",
    "-f",
    "file_names",
    multiple=True,
    help="Generate only this file (repeatable). Default: every loaded file",
)
@click.option(
    "--runtime-import",
    "runtime_import",
    default=GeneratorOptions.runtime_import,
    show_default=True,
    help="Module the generated code imports the wire codec from",
)
@click.option(
    "--group-policy",
    type=click.Choice([p.value for p in GroupPolicy]),
    default=GroupPolicy.IGNORE.value,
    show_default=True,
    help="How to handle group fields, which are not supported",
)
def gen(
    input_file: str,
    output_path: str,
    file_names: tuple[str, ...],
    runtime_import: str,
    group_policy: str,
) -> None:
    """Generate codec modules from descriptors."""
    pool = _load(input_file)
    options = GeneratorOptions(
        runtime_import=runtime_import, group_policy=GroupPolicy(group_policy)
    )

    output_dir = Path(output_path)
    output_dir.mkdir(parents=True, exist_ok=True)

    try:
        files = [pool.file(name) for name in file_names] if file_names else list(pool)
        for proto_file in files:
            output = python.process_proto_file(proto_file, pool, options)
            (output_dir / output.name()).write_text(output.content(), encoding="utf-8")
            logger.info("Generated %s", output_dir / output.name())
    except GeneratorError as e:
        raise click.ClickException(str(e)) from e


@cli.command()
@click.option("--output", "-o", "output_path", default=".", help="Output directory")
@click.option("--name", default="protoglue_runtime", help="Runtime folder name")
def runtime(output_path: str, name: str) -> None:
    """Generate runtime support code."""
    runtime_dir = Path(output_path) / name
    runtime_dir.mkdir(parents=True, exist_ok=True)
    for filename, content in python.runtime().items():
        (runtime_dir / filename).write_text(content)
    print(f"Generated Python runtime in {runtime_dir}")


def _count_types(message: ProtoMessage) -> int:
    return 1 + len(message.enum_types) + sum(_count_types(m) for m in message.nested_types)


@cli.command()
@click.option(
    "--input", "-i", "input_file", required=True, help="Descriptors (.json or FileDescriptorSet)"
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def info(input_file: str, output_json: bool) -> None:
    """Display the files, types and exported symbols of a descriptor set."""
    pool = _load(input_file)

    if output_json:
        _output_json(pool)
    else:
        _output_plain(pool)


def _output_json(pool: DescriptorPool) -> None:
    """Output descriptor info as JSON."""
    naming = Naming(pool)
    data: dict = {"files": {}}

    for proto_file in pool:
        data["files"][proto_file.name] = {
            "module": naming.module_name(proto_file),
            "package": proto_file.package,
            "dependencies": proto_file.dependencies,
            "messages": {
                m.full_name: {"fields": len(m.fields)} for m in proto_file.message_types
            },
            "enums": {e.full_name: {"values": len(e.values)} for e in proto_file.enum_types},
            "exports": python.export_symbols(proto_file, naming),
        }

    print(json.dumps(data, indent=2))


def _output_plain(pool: DescriptorPool) -> None:
    """Output descriptor info using rich text formatting."""
    console = Console()
    naming = Naming(pool)

    for proto_file in pool:
        console.print(f"[bold cyan]{proto_file.name}[/bold cyan]")

        file_table = Table(show_header=False, box=None, padding=(0, 2, 0, 2))
        file_table.add_column("Label", style="dim")
        file_table.add_column("Value", style="white")
        file_table.add_row("Module", naming.module_name(proto_file))
        file_table.add_row("Package", proto_file.package or "(none)")
        file_table.add_row("Imports", ", ".join(proto_file.dependencies) or "(none)")
        console.print(file_table)

        type_table = Table(show_header=True, box=None, padding=(0, 2, 0, 0))
        type_table.add_column("Type", style="white")
        type_table.add_column("Kind", style="dim")
        type_table.add_column("Fields", style="yellow", justify="right")
        type_table.add_column("Types", style="green", justify="right")

        for enum in proto_file.enum_types:
            type_table.add_row(enum.full_name, "enum", str(len(enum.values)), "1")
        for message in proto_file.message_types:
            type_table.add_row(
                message.full_name, "message", str(len(message.fields)), str(_count_types(message))
            )

        console.print(type_table)
        console.print()

        exports = python.export_symbols(proto_file, naming)
        console.print(f"[dim]Exports ({len(exports)}):[/dim] {', '.join(exports)}")
        console.print()


def main() -> None:
    """Main entry point."""
    try:
        cli()
    except KeyboardInterrupt:
        sys.exit(130)


if __name__ == "__main__":
    main()
