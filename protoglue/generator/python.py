"""Python code generator for protoglue descriptors."""

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from importlib import resources

from jinja2 import Environment, PackageLoader

from .dispatch import EmitContext, emit_field
from .loader import validate
from .naming import Naming
from .options import GeneratorOptions
from .output import OutputFile
from .pool import DescriptorPool
from .types import (
    Bytes,
    EnumRef,
    FieldKind,
    Group,
    MessageRef,
    ProtoEnum,
    ProtoFile,
    ProtoMessage,
    Scalar,
    String,
    WireType,
    classify,
)

logger = logging.getLogger(__name__)

RUNTIME_FILES = [
    "__init__.py",
    "wire.py",
]

env = Environment(
    loader=PackageLoader("protoglue.generator", "templates"),
    trim_blocks=True,
    lstrip_blocks=True,
    keep_trailing_newline=True,
    line_comment_prefix="%%",
    line_statement_prefix="%",
)

module_template = env.get_template("module.py.j2")
enum_template = env.get_template("enum.py.j2")
message_template = env.get_template("message.py.j2")

# Map scalar wire types to Python type annotations
SCALAR_TYPE_MAP = {
    WireType.DOUBLE: "float",
    WireType.FLOAT: "float",
    WireType.BOOL: "bool",
}


@dataclass(frozen=True)
class _Attr:
    name: str
    annotation: str
    default: str


def _annotation(kind: FieldKind, ctx: EmitContext) -> str:
    match kind:
        case Scalar(wire_type):
            return SCALAR_TYPE_MAP.get(wire_type, "int")
        case String():
            return "str"
        case Bytes():
            return "bytes"
        case MessageRef(type_name):
            return ctx.naming.reference(ctx.naming.type_name(type_name), type_name, ctx.file)
        case EnumRef():
            return "str"
    raise AssertionError(f"unhandled field kind {kind!r}")


def _attrs(message: ProtoMessage, ctx: EmitContext) -> list[_Attr]:
    attrs: list[_Attr] = []
    for f in message.fields:
        kind = classify(f)
        if isinstance(kind, Group):
            continue
        name = ctx.naming.field_name(f)
        annotation = _annotation(kind, ctx)
        if f.is_repeated:
            attrs.append(
                _Attr(name, f"list[{annotation}]", "_dataclasses.field(default_factory=list)")
            )
        else:
            attrs.append(_Attr(name, f"{annotation} | None", "None"))
    return attrs


def export_for_enum(enum: ProtoEnum, naming: Naming) -> list[str]:
    """Return the to/from symbol function names of an enum."""
    return [naming.to_symbol_name(enum.full_name), naming.from_symbol_name(enum.full_name)]


def export_for_message(message: ProtoMessage, naming: Naming) -> list[str]:
    """Return the codec function names of a message and everything nested in it.

    Nested types come first, in the order their codecs are emitted.
    """
    symbols: list[str] = []
    for enum in message.enum_types:
        symbols.extend(export_for_enum(enum, naming))
    for nested in message.nested_types:
        symbols.extend(export_for_message(nested, naming))
    symbols.append(naming.encode_name(message.full_name))
    symbols.append(naming.decode_name(message.full_name))
    return symbols


def export_symbols(proto_file: ProtoFile, naming: Naming) -> list[str]:
    """Return the export list of a file: enums first, then messages."""
    symbols: list[str] = []
    for enum in proto_file.enum_types:
        symbols.extend(export_for_enum(enum, naming))
    for message in proto_file.message_types:
        symbols.extend(export_for_message(message, naming))
    return symbols


def encode_decode_for_enum(out: OutputFile, enum: ProtoEnum, ctx: EmitContext) -> None:
    """Write the functions translating between wire integers and symbols."""
    out.write_block(
        enum_template.render(
            enum=enum,
            to_symbol=ctx.naming.to_symbol_name(enum.full_name),
            from_symbol=ctx.naming.from_symbol_name(enum.full_name),
        )
    )


def encode_decode_for_message(out: OutputFile, message: ProtoMessage, ctx: EmitContext) -> None:
    """Write the record class and codec functions of a message.

    Nested enums and messages are written first.
    """
    for enum in message.enum_types:
        encode_decode_for_enum(out, enum, ctx)
    for nested in message.nested_types:
        encode_decode_for_message(out, nested, ctx)

    clauses = []
    fragments = []
    for f in message.fields:
        code = emit_field(f, message, ctx)
        clauses.extend(code.clauses)
        if code.encode is not None:
            fragments.append(code.encode)

    naming = ctx.naming
    out.write_block(
        message_template.render(
            cls=naming.type_name(message.full_name),
            attrs=_attrs(message, ctx),
            decode=naming.decode_name(message.full_name),
            dispatch=naming.dispatch_name(message.full_name),
            encode=naming.encode_name(message.full_name),
            clauses=clauses,
            fragments=fragments,
        )
    )


def _referenced_types(message: ProtoMessage) -> Iterator[str]:
    for f in message.fields:
        match classify(f):
            case MessageRef(type_name) | EnumRef(type_name):
                yield type_name
    for nested in message.nested_types:
        yield from _referenced_types(nested)


def imported_files(proto_file: ProtoFile, pool: DescriptorPool) -> list[ProtoFile]:
    """Return the files a generated module must import.

    These are the declared dependencies followed by any other file that
    declares a referenced type, which happens when a type is reached through
    an indirect import.
    """
    files = [pool.file(name) for name in proto_file.dependencies]
    for message in proto_file.message_types:
        for type_name in _referenced_types(message):
            declaring = pool.file_of(type_name)
            if declaring is not proto_file and declaring not in files:
                files.append(declaring)
    return files


def generate_source(out: OutputFile, proto_file: ProtoFile, ctx: EmitContext) -> None:
    """Write the module for one file: header, exports, enum and message codecs."""
    out.write_block(
        module_template.render(
            file=proto_file,
            runtime_import=ctx.options.runtime_import,
            dependencies=[ctx.naming.module_name(f) for f in imported_files(proto_file, ctx.pool)],
            exports=export_symbols(proto_file, ctx.naming),
        )
    )

    for enum in proto_file.enum_types:
        encode_decode_for_enum(out, enum, ctx)
    for message in proto_file.message_types:
        encode_decode_for_message(out, message, ctx)


def process_proto_file(
    proto_file: ProtoFile, pool: DescriptorPool, options: GeneratorOptions | None = None
) -> OutputFile:
    """Generate the module for a single file.

    Raises:
        GeneratorError: If the file fails validation or uses a construct that
            the options reject. Nothing is generated for the file in that case.
    """
    options = options or GeneratorOptions()
    validate(proto_file, pool)

    naming = Naming(pool, module_suffix=options.module_suffix)
    naming.check_unique(proto_file)
    ctx = EmitContext(naming=naming, pool=pool, file=proto_file, options=options)
    out = OutputFile(f"{naming.module_name(proto_file)}.py")
    generate_source(out, proto_file, ctx)

    logger.debug("Generated %s from %s", out.name(), proto_file.name)
    return out


def render(
    proto_file: ProtoFile, pool: DescriptorPool, options: GeneratorOptions | None = None
) -> str:
    """Render one file to Python source code."""
    return process_proto_file(proto_file, pool, options).content()


def runtime() -> dict[str, str]:
    """Return the Python runtime files as a dict of filename -> content."""
    result: dict[str, str] = {}
    for filename in RUNTIME_FILES:
        content = resources.files("protoglue.runtime").joinpath(filename).read_text()
        result[filename] = content
    return result
