"""Identifier derivation for generated modules.

Every emitter takes its names from one Naming instance so that export
lists, decode dispatch and encode bodies all refer to the same symbols.
"""

import keyword
import re
from pathlib import PurePosixPath

from .errors import DescriptorError
from .pool import DescriptorPool
from .types import ProtoEnum, ProtoField, ProtoFile, ProtoMessage

DEFAULT_MODULE_SUFFIX = "_codec"


def to_snake_case(name: str) -> str:
    """Convert CamelCase to snake_case (PhoneNumber -> phone_number)."""
    name = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", name)
    name = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def to_identifier(name: str) -> str:
    """Make a name usable as a Python identifier."""
    name = re.sub(r"\W", "_", name)
    if name[:1].isdigit():
        name = "_" + name
    if keyword.iskeyword(name):
        name += "_"
    return name


class Naming:
    """Derives generated identifiers from descriptor names.

    Types are named by their path relative to the declaring file's package.
    Nesting levels are joined with "_" in class names and "__" in function
    names, so Person.PhoneNumber becomes class Person_PhoneNumber with codec
    functions encode_person__phone_number and decode_person__phone_number.
    """

    def __init__(self, pool: DescriptorPool, module_suffix: str = DEFAULT_MODULE_SUFFIX) -> None:
        self._pool = pool
        self._module_suffix = module_suffix

    def module_name(self, proto_file: ProtoFile) -> str:
        stem = PurePosixPath(proto_file.name).stem
        return to_identifier(f"{stem}{self._module_suffix}")

    def _scope(self, full_name: str) -> list[str]:
        package = self._pool.file_of(full_name).package
        relative = full_name.lstrip(".")
        if package:
            relative = relative.removeprefix(f"{package}.")
        return relative.split(".")

    def _snake(self, full_name: str) -> str:
        return "__".join(to_snake_case(part) for part in self._scope(full_name))

    def type_name(self, full_name: str) -> str:
        return to_identifier("_".join(self._scope(full_name)))

    def encode_name(self, full_name: str) -> str:
        return f"encode_{self._snake(full_name)}"

    def decode_name(self, full_name: str) -> str:
        return f"decode_{self._snake(full_name)}"

    def dispatch_name(self, full_name: str) -> str:
        return f"_decode_{self._snake(full_name)}_field"

    def to_symbol_name(self, full_name: str) -> str:
        return f"{self._snake(full_name)}_to_symbol"

    def from_symbol_name(self, full_name: str) -> str:
        return f"{self._snake(full_name)}_from_symbol"

    def field_name(self, field: ProtoField) -> str:
        return to_identifier(field.name)

    def reference(self, symbol: str, full_name: str, current: ProtoFile) -> str:
        """Qualify a symbol with its module when declared in another file."""
        declaring = self._pool.file_of(full_name)
        if declaring is current:
            return symbol
        return f"{self.module_name(declaring)}.{symbol}"

    def check_unique(self, proto_file: ProtoFile) -> None:
        """Fail if two declarations of a file map to the same generated name.

        Covers the module-level symbols of every message and enum, and the
        attribute names within each message.

        Raises:
            DescriptorError: On the first collision found.
        """
        owners: dict[str, str] = {}

        def claim(symbol: str, owner: str, scope: dict[str, str] = owners) -> None:
            other = scope.setdefault(symbol, owner)
            if other != owner:
                raise DescriptorError(f"{other} and {owner} both generate the name {symbol}")

        def visit_enum(enum: ProtoEnum) -> None:
            claim(self.to_symbol_name(enum.full_name), enum.full_name)
            claim(self.from_symbol_name(enum.full_name), enum.full_name)

        def visit_message(message: ProtoMessage) -> None:
            for enum in message.enum_types:
                visit_enum(enum)
            for nested in message.nested_types:
                visit_message(nested)
            for symbol in (
                self.type_name(message.full_name),
                self.encode_name(message.full_name),
                self.decode_name(message.full_name),
                self.dispatch_name(message.full_name),
            ):
                claim(symbol, message.full_name)

            attrs: dict[str, str] = {}
            for f in message.fields:
                claim(self.field_name(f), f"{message.full_name}.{f.name}", attrs)

        for enum in proto_file.enum_types:
            visit_enum(enum)
        for message in proto_file.message_types:
            visit_message(message)
