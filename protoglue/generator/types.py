"""Descriptor types consumed by code generation."""

from dataclasses import dataclass, field
from enum import StrEnum

from dataclasses_json import DataClassJsonMixin

from .errors import DescriptorError


class WireType(StrEnum):
    """Declared type of a message field."""

    DOUBLE = "double"
    FLOAT = "float"
    INT64 = "int64"
    UINT64 = "uint64"
    INT32 = "int32"
    FIXED64 = "fixed64"
    FIXED32 = "fixed32"
    BOOL = "bool"
    STRING = "string"
    GROUP = "group"
    MESSAGE = "message"
    BYTES = "bytes"
    UINT32 = "uint32"
    ENUM = "enum"
    SFIXED32 = "sfixed32"
    SFIXED64 = "sfixed64"
    SINT32 = "sint32"
    SINT64 = "sint64"


class Label(StrEnum):
    """Cardinality of a message field."""

    OPTIONAL = "optional"
    REQUIRED = "required"
    REPEATED = "repeated"


@dataclass
class ProtoField(DataClassJsonMixin):
    """Represents a field of a message.

    For message and enum fields, type_name holds the fully-qualified name of
    the referenced type (e.g. ".tutorial.Person.PhoneType").
    """

    name: str
    number: int
    type: WireType
    label: Label = Label.OPTIONAL
    type_name: str | None = None

    @property
    def is_repeated(self) -> bool:
        return self.label == Label.REPEATED


@dataclass
class ProtoEnumValue(DataClassJsonMixin):
    """Represents a single enum value."""

    name: str
    number: int


@dataclass
class ProtoEnum(DataClassJsonMixin):
    """Represents an enum type definition."""

    name: str
    values: list[ProtoEnumValue] = field(default_factory=list)
    full_name: str = ""


@dataclass
class ProtoMessage(DataClassJsonMixin):
    """Represents a message type definition.

    Field order is significant: it is reproduced in the generated encoder
    output and in the order of the decoder's dispatch clauses.
    """

    name: str
    fields: list[ProtoField] = field(default_factory=list)
    nested_types: list["ProtoMessage"] = field(default_factory=list)
    enum_types: list[ProtoEnum] = field(default_factory=list)
    full_name: str = ""


@dataclass
class ProtoFile(DataClassJsonMixin):
    """Represents one schema file and the files it depends on."""

    name: str
    package: str = ""
    dependencies: list[str] = field(default_factory=list)
    message_types: list[ProtoMessage] = field(default_factory=list)
    enum_types: list[ProtoEnum] = field(default_factory=list)


@dataclass(frozen=True)
class Scalar:
    """Numeric, boolean or fixed-width field."""

    wire_type: WireType
    packable: bool = True


@dataclass(frozen=True)
class String:
    """UTF-8 text field."""


@dataclass(frozen=True)
class Bytes:
    """Raw byte-string field."""


@dataclass(frozen=True)
class MessageRef:
    """Embedded message field."""

    type_name: str


@dataclass(frozen=True)
class EnumRef:
    """Enum field."""

    type_name: str


@dataclass(frozen=True)
class Group:
    """Legacy group field. Not supported by the generator."""


FieldKind = Scalar | String | Bytes | MessageRef | EnumRef | Group

PACKABLE_TYPES = frozenset(
    [
        WireType.DOUBLE,
        WireType.FLOAT,
        WireType.INT64,
        WireType.UINT64,
        WireType.INT32,
        WireType.FIXED64,
        WireType.FIXED32,
        WireType.BOOL,
        WireType.UINT32,
        WireType.SFIXED32,
        WireType.SFIXED64,
        WireType.SINT32,
        WireType.SINT64,
    ]
)


def is_packable(t: WireType) -> bool:
    """Check if a wire type supports packed encoding of repeated values."""
    return t in PACKABLE_TYPES


def classify(f: ProtoField) -> FieldKind:
    """Return the category that drives code generation for a field."""
    match f.type:
        case WireType.STRING:
            return String()
        case WireType.BYTES:
            return Bytes()
        case WireType.MESSAGE | WireType.ENUM if not f.type_name:
            raise DescriptorError(f"{f.type} field {f.name} has no type name")
        case WireType.MESSAGE:
            return MessageRef(f.type_name)
        case WireType.ENUM:
            return EnumRef(f.type_name)
        case WireType.GROUP:
            return Group()
        case _:
            return Scalar(f.type, packable=is_packable(f.type))
