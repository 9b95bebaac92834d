"""Exceptions raised during code generation."""


class GeneratorError(RuntimeError):
    """Base exception for code generation failures."""


class DescriptorError(GeneratorError):
    """Raised when a descriptor tree is malformed or inconsistent."""


class UnsupportedFieldError(GeneratorError):
    """Raised when a field uses a construct the generator rejects."""
