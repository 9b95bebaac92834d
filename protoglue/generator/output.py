"""Append-only text buffer for generated source."""


class OutputFile:
    """A buffer to which generated source is written.

    Example:

        output = OutputFile("hello_codec.py")
        output.write_block('def hello():\\n    return "hello"\\n')

        print(output.content())
    """

    def __init__(self, filename: str) -> None:
        self._filename = filename
        self._content: list[str] = []

    def write_line(self, line: str = "") -> None:
        self._content.append(line)
        self._content.append("\n")

    def write_block(self, block: str) -> None:
        """Write multi-line text, dropping trailing blank lines."""
        for line in block.rstrip("\n").split("\n"):
            self.write_line(line)

    def name(self) -> str:
        return self._filename

    def content(self) -> str:
        return "".join(self._content)
