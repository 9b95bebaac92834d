"""Descriptor loading from JSON and protobuf FileDescriptorSets."""

import json
import logging
from typing import Any

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from .errors import DescriptorError
from .pool import DescriptorPool
from .types import (
    Label,
    ProtoEnum,
    ProtoEnumValue,
    ProtoField,
    ProtoFile,
    ProtoMessage,
    WireType,
)

logger = logging.getLogger(__name__)

_FieldProto = descriptor_pb2.FieldDescriptorProto


def _wire_type(field_proto: _FieldProto) -> WireType:
    # TYPE_INT32 -> int32
    return WireType(_FieldProto.Type.Name(field_proto.type).removeprefix("TYPE_").lower())


def _label(field_proto: _FieldProto) -> Label:
    return Label(_FieldProto.Label.Name(field_proto.label).removeprefix("LABEL_").lower())


def _field(field_proto: _FieldProto) -> ProtoField:
    return ProtoField(
        name=field_proto.name,
        number=field_proto.number,
        type=_wire_type(field_proto),
        label=_label(field_proto),
        type_name=field_proto.type_name or None,
    )


def _enum(enum_proto: descriptor_pb2.EnumDescriptorProto) -> ProtoEnum:
    return ProtoEnum(
        name=enum_proto.name,
        values=[ProtoEnumValue(name=v.name, number=v.number) for v in enum_proto.value],
    )


def _message(message_proto: descriptor_pb2.DescriptorProto) -> ProtoMessage:
    return ProtoMessage(
        name=message_proto.name,
        fields=[_field(f) for f in message_proto.field],
        nested_types=[_message(m) for m in message_proto.nested_type],
        enum_types=[_enum(e) for e in message_proto.enum_type],
    )


def from_file_descriptor(file_proto: descriptor_pb2.FileDescriptorProto) -> ProtoFile:
    """Convert a protobuf FileDescriptorProto into a ProtoFile."""
    return ProtoFile(
        name=file_proto.name,
        package=file_proto.package,
        dependencies=list(file_proto.dependency),
        message_types=[_message(m) for m in file_proto.message_type],
        enum_types=[_enum(e) for e in file_proto.enum_type],
    )


def load_descriptor_set(data: bytes) -> DescriptorPool:
    """Load a serialized FileDescriptorSet.

    The set should be produced with protoc --include_imports so every
    dependency is present.
    """
    try:
        descriptor_set = descriptor_pb2.FileDescriptorSet.FromString(data)
    except DecodeError as e:
        raise DescriptorError(f"invalid FileDescriptorSet: {e}") from e
    pool = DescriptorPool(from_file_descriptor(f) for f in descriptor_set.file)
    logger.debug("Loaded %d files from descriptor set", len(pool))
    return pool


def load_json(text: str) -> DescriptorPool:
    """Load descriptors from JSON.

    Accepts a single file object, a list of file objects, or an object with a
    "files" list.
    """
    try:
        data: Any = json.loads(text)
    except ValueError as e:
        raise DescriptorError(f"invalid JSON: {e}") from e
    if isinstance(data, dict) and "files" in data:
        data = data["files"]
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise DescriptorError("expected a file object or a list of file objects")

    try:
        files = [ProtoFile.from_dict(f) for f in data]
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DescriptorError(f"invalid file descriptor: {e!r}") from e

    pool = DescriptorPool(files)
    logger.debug("Loaded %d files from JSON", len(pool))
    return pool


def load(path: str) -> DescriptorPool:
    """Load descriptors from a .json file or a binary FileDescriptorSet."""
    if path.endswith(".json"):
        with open(path, encoding="utf-8") as f:
            return load_json(f.read())
    with open(path, "rb") as f:
        return load_descriptor_set(f.read())


def _validate_message(message: ProtoMessage, visible: set[str], pool: DescriptorPool) -> None:
    numbers: set[int] = set()
    for f in message.fields:
        if f.number <= 0:
            raise DescriptorError(f"{message.full_name}.{f.name} has invalid number {f.number}")
        if f.number in numbers:
            raise DescriptorError(f"{message.full_name} reuses field number {f.number}")
        numbers.add(f.number)

        if f.type in (WireType.MESSAGE, WireType.ENUM):
            if not f.type_name:
                raise DescriptorError(f"{message.full_name}.{f.name} has no type name")
            if f.type == WireType.MESSAGE:
                pool.find_message(f.type_name)
            else:
                pool.find_enum(f.type_name)
            if pool.file_of(f.type_name).name not in visible:
                raise DescriptorError(
                    f"{message.full_name}.{f.name} references {f.type_name}, "
                    "which is not declared in an imported file"
                )

    for nested in message.nested_types:
        _validate_message(nested, visible, pool)


def validate(proto_file: ProtoFile, pool: DescriptorPool) -> None:
    """Validate a file before generating code for it.

    Raises:
        DescriptorError: On a missing dependency, a duplicate or invalid field
            number, or a type reference that does not resolve.
    """
    for dependency in proto_file.dependencies:
        if dependency not in pool:
            raise DescriptorError(f"{proto_file.name} depends on {dependency}, which is not loaded")

    visible = pool.visible_files(proto_file)
    for message in proto_file.message_types:
        _validate_message(message, visible, pool)
