"""Per-field decode clauses and encode fragments.

Each field of a message contributes case clauses to the message's generated
dispatch function and one element to its generated encode list. What is
emitted depends on the field's category, whether it is repeated, and
whether its wire type can be packed:

    category        singular              repeated
    string/bytes    replace               append each entry
    message         decode, replace       decode, append each entry
    enum            to_symbol, replace    to_symbol, extend (packed) or append
    scalar          cast, replace         extend (packed) or append
    group           nothing               nothing

A repeated packable field always gets both the packed and the single-value
clause. The sender decides whether to pack, independent of how the field is
declared, so the decoder accepts either shape for the same number. The
encoder always writes one entry per element.
"""

import logging
from dataclasses import dataclass

from .errors import UnsupportedFieldError
from .naming import Naming
from .options import GeneratorOptions, GroupPolicy
from .pool import DescriptorPool
from .types import (
    Bytes,
    EnumRef,
    Group,
    MessageRef,
    ProtoField,
    ProtoFile,
    ProtoMessage,
    Scalar,
    String,
    classify,
)

logger = logging.getLogger(__name__)

# Names used inside generated dispatch and encode functions
RUNTIME = "_wire"
ENTRY = "entry"
MSG = "msg"
ITEM = "x"


@dataclass(frozen=True)
class EmitContext:
    """State shared by every emitter while generating one file."""

    naming: Naming
    pool: DescriptorPool
    file: ProtoFile
    options: GeneratorOptions


@dataclass(frozen=True)
class DecodeClause:
    """One case of a generated dispatch match statement.

    The generated statement is `match number, entry:`, so a pattern reads
    like "4, _wire.LengthEncoded()".
    """

    pattern: str
    action: str


@dataclass(frozen=True)
class FieldCode:
    clauses: list[DecodeClause]
    encode: str | None


def _clause(f: ProtoField, shape: str, action: str) -> DecodeClause:
    return DecodeClause(pattern=f"{f.number}, {shape}", action=action)


def _cast(wire_type: str) -> str:
    return f'{RUNTIME}.cast("{wire_type}", {ENTRY})'


def _set(attr: str, value: str) -> str:
    return f"{MSG}.{attr} = {value}"


def _append(attr: str, value: str) -> str:
    return f"{MSG}.{attr}.append({value})"


def _extend(attr: str, values: str) -> str:
    return f"{MSG}.{attr}.extend({values})"


def decode_clauses(f: ProtoField, ctx: EmitContext) -> list[DecodeClause]:
    """Return the dispatch clauses for a field, in emission order."""
    attr = ctx.naming.field_name(f)
    kind = classify(f)

    match kind:
        case String() | Bytes():
            value = _cast(f.type)
            action = _append(attr, value) if f.is_repeated else _set(attr, value)
            return [_clause(f, "_", action)]

        case MessageRef(type_name):
            decode = ctx.naming.reference(ctx.naming.decode_name(type_name), type_name, ctx.file)
            value = f"{decode}(data)"
            action = _append(attr, value) if f.is_repeated else _set(attr, value)
            return [_clause(f, f"{RUNTIME}.LengthEncoded(data)", action)]

        case EnumRef(type_name):
            to_symbol = ctx.naming.reference(
                ctx.naming.to_symbol_name(type_name), type_name, ctx.file
            )
            value = f'{to_symbol}({_cast("enum")})'
            if not f.is_repeated:
                return [_clause(f, f"{RUNTIME}.Varint()", _set(attr, value))]
            return [
                _clause(
                    f,
                    f"{RUNTIME}.LengthEncoded()",
                    _extend(attr, f'{to_symbol}(v) for v in {_cast("enum")}'),
                ),
                _clause(f, f"{RUNTIME}.Varint()", _append(attr, value)),
            ]

        case Scalar(wire_type, packable):
            value = _cast(wire_type)
            if not f.is_repeated:
                return [_clause(f, "_", _set(attr, value))]
            clauses = []
            if packable:
                clauses.append(_clause(f, f"{RUNTIME}.LengthEncoded()", _extend(attr, value)))
            clauses.append(_clause(f, "_", _append(attr, value)))
            return clauses

        case Group():
            return []

    raise AssertionError(f"unhandled field kind {kind!r}")


def encode_fragment(f: ProtoField, ctx: EmitContext) -> str | None:
    """Return the expression a field contributes to its message's encode list.

    Repeated fields produce a starred list so that they splice one entry per
    element into the enclosing list. Group fields produce None.
    """
    attr = ctx.naming.field_name(f)
    kind = classify(f)

    match kind:
        case String() | Bytes():
            wire_type, value = "length_encoded", "{}"
        case MessageRef(type_name):
            encode = ctx.naming.reference(ctx.naming.encode_name(type_name), type_name, ctx.file)
            wire_type, value = "length_encoded", f"{encode}({{}})"
        case EnumRef(type_name):
            from_symbol = ctx.naming.reference(
                ctx.naming.from_symbol_name(type_name), type_name, ctx.file
            )
            wire_type, value = "int32", f"{from_symbol}({{}})"
        case Scalar(scalar_type):
            wire_type, value = scalar_type.value, "{}"
        case Group():
            return None
        case _:
            raise AssertionError(f"unhandled field kind {kind!r}")

    if f.is_repeated:
        item = value.format(ITEM)
        return f'*[{RUNTIME}.encode({f.number}, "{wire_type}", {item}) for {ITEM} in {MSG}.{attr}]'
    return f'{RUNTIME}.encode({f.number}, "{wire_type}", {value.format(f"{MSG}.{attr}")})'


def _unsupported(f: ProtoField, message: ProtoMessage, ctx: EmitContext) -> None:
    where = f"{message.full_name}.{f.name}"
    match ctx.options.group_policy:
        case GroupPolicy.REJECT:
            raise UnsupportedFieldError(f"{where}: group fields are not supported")
        case GroupPolicy.WARN:
            logger.warning("%s: group field excluded from generated code", where)
        case GroupPolicy.IGNORE:
            logger.debug("%s: group field excluded from generated code", where)


def emit_field(f: ProtoField, message: ProtoMessage, ctx: EmitContext) -> FieldCode:
    """Generate the decode clauses and encode fragment for one field."""
    if isinstance(classify(f), Group):
        _unsupported(f, message, ctx)
    return FieldCode(clauses=decode_clauses(f, ctx), encode=encode_fragment(f, ctx))
