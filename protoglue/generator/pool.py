"""Index of loaded descriptor files and the types they declare."""

from collections.abc import Iterable, Iterator

from .errors import DescriptorError
from .types import ProtoEnum, ProtoFile, ProtoMessage


class DescriptorPool:
    """Files by name plus every declared type by fully-qualified name.

    Fully-qualified names carry a leading dot, e.g. ".tutorial.Person".
    Adding a file assigns full_name on each of its messages and enums.
    """

    def __init__(self, files: Iterable[ProtoFile] = ()) -> None:
        self._files: dict[str, ProtoFile] = {}
        self._types: dict[str, tuple[ProtoFile, ProtoMessage | ProtoEnum]] = {}
        for f in files:
            self.add(f)

    def add(self, proto_file: ProtoFile) -> None:
        if proto_file.name in self._files:
            raise DescriptorError(f"{proto_file.name} loaded twice")
        self._files[proto_file.name] = proto_file

        scope = f".{proto_file.package}" if proto_file.package else ""
        for enum in proto_file.enum_types:
            self._index(proto_file, enum, scope)
        for message in proto_file.message_types:
            self._index_message(proto_file, message, scope)

    def _index(self, proto_file: ProtoFile, node: ProtoMessage | ProtoEnum, scope: str) -> None:
        node.full_name = f"{scope}.{node.name}"
        if node.full_name in self._types:
            raise DescriptorError(f"{node.full_name} declared more than once")
        self._types[node.full_name] = (proto_file, node)

    def _index_message(self, proto_file: ProtoFile, message: ProtoMessage, scope: str) -> None:
        self._index(proto_file, message, scope)
        for enum in message.enum_types:
            self._index(proto_file, enum, message.full_name)
        for nested in message.nested_types:
            self._index_message(proto_file, nested, message.full_name)

    def __contains__(self, file_name: object) -> bool:
        return file_name in self._files

    def __iter__(self) -> Iterator[ProtoFile]:
        return iter(self._files.values())

    def __len__(self) -> int:
        return len(self._files)

    def file(self, name: str) -> ProtoFile:
        try:
            return self._files[name]
        except KeyError:
            raise DescriptorError(f"unknown file {name}") from None

    def file_of(self, full_name: str) -> ProtoFile:
        """Return the file that declares a type."""
        return self._lookup(full_name)[0]

    def find_message(self, full_name: str) -> ProtoMessage:
        node = self._lookup(full_name)[1]
        if not isinstance(node, ProtoMessage):
            raise DescriptorError(f"{full_name} is not a message")
        return node

    def find_enum(self, full_name: str) -> ProtoEnum:
        node = self._lookup(full_name)[1]
        if not isinstance(node, ProtoEnum):
            raise DescriptorError(f"{full_name} is not an enum")
        return node

    def _lookup(self, full_name: str) -> tuple[ProtoFile, ProtoMessage | ProtoEnum]:
        try:
            return self._types[full_name]
        except KeyError:
            raise DescriptorError(f"unresolved type {full_name}") from None

    def visible_files(self, proto_file: ProtoFile) -> set[str]:
        """Names of a file and everything it transitively depends on."""
        seen: set[str] = set()
        pending = [proto_file.name]
        while pending:
            name = pending.pop()
            if name in seen:
                continue
            seen.add(name)
            pending.extend(self.file(name).dependencies)
        return seen
